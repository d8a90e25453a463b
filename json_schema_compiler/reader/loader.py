"""
Loads schema documents into a model.

Loading runs in three steps, each usable on its own by the driver modes:
``build_forest`` reads the raw documents, ``load_schema_set`` parses them
into ASTs and ``load`` analyzes those into a ``Model``.
"""

from __future__ import annotations

import json
import logging
import urllib.error
from pathlib import PurePosixPath
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from ..diagnostics import Diagnostic, Severity
from ..error_receiver import ErrorReceiver, ErrorReceiverFilter
from ..errors import SchemaLoadError
from ..model.analyzer import SchemaAnalyzer
from ..model.model import Model
from .forest import SchemaForest, external_refs, resolve_ref, to_system_id
from .parser import SchemaParser
from .schema_set import SchemaSet

if TYPE_CHECKING:
    from ..context import RunContext
    from ..generator.code_model import CodeModel
    from ..options import Options

logger = logging.getLogger(__name__)


def root_name_for(system_id: str) -> str:
    """Name of the class generated for a document root: ``person.schema.json`` -> ``person``."""
    file_name = PurePosixPath(urlparse(system_id).path).name
    return file_name.split(".", 1)[0] or "Root"


class ModelLoader:
    """Loads the schema sources of ``options``.

    Args:
        options: Options of the run; ``options.sources`` are the roots
        code_model: Code model the resulting ``Model`` generates into
        receiver: Where problems are reported; polled for cancellation
        context: Run context used to read documents
    """

    def __init__(self, options: Options, code_model: CodeModel, receiver: ErrorReceiver, context: RunContext):
        self.options = options
        self.code_model = code_model
        self.receiver = receiver
        self.context = context

    def build_forest(self) -> SchemaForest:
        """
        Read the source documents and every document they reference.

        Returns:
            The forest, in load order

        Raises:
            SchemaLoadError: If a document cannot be read or parsed; the
                cause has been reported
            AbortError: If the run was canceled
        """
        forest = SchemaForest()
        # documents already reported as unreadable
        failed_ids: set[str] = set()
        pending = [(to_system_id(source), True) for source in self.options.sources]

        while pending:
            system_id, is_root = pending.pop(0)
            if system_id in failed_ids:
                continue
            if system_id in forest:
                if is_root and system_id not in forest.root_ids:
                    forest.root_ids.append(system_id)
                continue
            self.receiver.poll_abort()

            document = self._read_document(system_id)
            if document is None:
                failed_ids.add(system_id)
                continue
            forest.add(system_id, document, root=is_root)
            self.receiver.debug(f"loaded {system_id}")

            for ref in external_refs(document):
                target = resolve_ref(system_id, ref)
                if target not in forest:
                    pending.append((target, False))

        if failed_ids:
            raise SchemaLoadError()
        return forest

    def _read_document(self, system_id: str) -> dict | None:
        try:
            data = self.context.read(system_id)
            document = json.loads(data)
        except json.JSONDecodeError as e:
            self.receiver.fatal_error(Diagnostic.from_exception(e, Severity.FATAL, system_id))
            return None
        except UnicodeDecodeError as e:
            self.receiver.error(Diagnostic.from_exception(e, Severity.ERROR, system_id))
            return None
        except (OSError, urllib.error.URLError) as e:
            self.receiver.error(Diagnostic.from_exception(e, Severity.ERROR, system_id))
            return None

        if not isinstance(document, dict):
            self.receiver.error(Diagnostic(Severity.ERROR, "a schema document must be a JSON object", system_id))
            return None
        return document

    def load_schema_set(self) -> SchemaSet:
        """
        Build the forest and parse every document.

        Raises:
            SchemaLoadError: If loading or parsing failed; the cause has been reported
            AbortError: If the run was canceled
        """
        forest = self.build_forest()
        error_filter = ErrorReceiverFilter(self.receiver)

        schema_set = SchemaSet()
        for system_id, document in forest.documents.items():
            parser = SchemaParser(error_filter, system_id)
            schema_set.documents.append(parser.parse(document, root_name_for(system_id)))

        if error_filter.had_error:
            raise SchemaLoadError()
        return schema_set

    def load(self) -> Model | None:
        """
        Load the sources into a model.

        Returns:
            The model, or None if any error was reported

        Raises:
            AbortError: If the run was canceled
        """
        error_filter = ErrorReceiverFilter(self.receiver)
        try:
            schema_set = ModelLoader(self.options, self.code_model, error_filter, self.context).load_schema_set()
        except SchemaLoadError:
            return None

        config = self.options.config
        analyzer = SchemaAnalyzer(
            error_filter,
            default_package=self.options.default_package,
            ignore_classes=config.ignore_classes,
            global_ignore_fields=config.global_ignore_fields,
        )
        classes, enums = analyzer.analyze(schema_set)
        if error_filter.had_error:
            return None

        logger.debug("Loaded %d classes and %d enums", len(classes), len(enums))
        return Model(self.options, self.code_model, classes, enums)
