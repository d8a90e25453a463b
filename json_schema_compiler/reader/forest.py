"""
The set of raw schema documents taking part in one compilation.

A forest starts from the documents named on the command line and pulls in
every document reachable through an external ``$ref``.
"""

from __future__ import annotations

import json
import urllib.parse
from collections.abc import Iterator
from pathlib import Path
from typing import IO, Any


def to_system_id(source: str) -> str:
    """Turn a command line source (path or URL) into an absolute URI."""
    if "://" in source:
        return source
    return Path(source).resolve().as_uri()


def external_refs(document: Any) -> Iterator[str]:
    """Yield every ``$ref`` value of ``document`` that points at another document."""
    stack = [document]
    while stack:
        node = stack.pop()
        if isinstance(node, dict):
            ref = node.get("$ref")
            if isinstance(ref, str) and not ref.startswith("#"):
                yield ref
            stack.extend(reversed(list(node.values())))
        elif isinstance(node, list):
            stack.extend(reversed(node))


def resolve_ref(system_id: str, ref: str) -> str:
    """Resolve the document part of ``ref`` against the referring document."""
    document_part = ref.split("#", 1)[0]
    return urllib.parse.urljoin(system_id, document_part)


class SchemaForest:
    """Ordered collection of parsed JSON documents keyed by system id."""

    def __init__(self):
        self.documents: dict[str, dict[str, Any]] = {}
        self.root_ids: list[str] = []

    def __contains__(self, system_id: str) -> bool:
        return system_id in self.documents

    def __len__(self) -> int:
        return len(self.documents)

    def add(self, system_id: str, document: dict[str, Any], root: bool = False) -> None:
        self.documents[system_id] = document
        if root:
            self.root_ids.append(system_id)

    def get(self, system_id: str) -> dict[str, Any] | None:
        return self.documents.get(system_id)

    def dump(self, out: IO[str]) -> None:
        """Write every document, in load order, to ``out``.

        Raises:
            OSError: If writing fails
        """
        for system_id, document in self.documents.items():
            out.write(f"---- {system_id}\n")
            json.dump(document, out, indent=2, sort_keys=False)
            out.write("\n")
        out.flush()
