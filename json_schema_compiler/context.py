"""
Run-scoped state shared by the stages of one compilation.

Everything a run needs beyond its options lives here instead of in
process-wide globals: the search path for user plugins, the proxy
authentication used to fetch remote schemas, and the primary output stream.
The context is opened when the run starts and closed on every exit path.
"""

from __future__ import annotations

import importlib
import importlib.machinery
import importlib.util
import io
import logging
import os
import re
import sys
import urllib.parse
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import IO, Sequence

logger = logging.getLogger(__name__)

SYSTEM_PROXY_VARIABLE = "JSON_SCHEMA_COMPILER_USE_SYSTEM_PROXIES"

_PROXY_PATTERN = re.compile(r"^(?:(?P<user>[^:@/]+)(?::(?P<password>[^@/]*))?@)?(?P<host>[^:@/]+)(?::(?P<port>\d+))?$")


@dataclass(frozen=True)
class ProxySettings:
    """HTTP proxy given on the command line."""

    host: str
    port: int = 80
    user: str | None = None
    password: str | None = None

    @staticmethod
    def parse(spec: str) -> ProxySettings:
        """Parse ``[user[:password]@]host[:port]``.

        Raises:
            ValueError: If ``spec`` does not have that shape
        """
        match = _PROXY_PATTERN.match(spec.strip())
        if match is None:
            raise ValueError(spec)
        port = match.group("port")
        return ProxySettings(
            host=match.group("host"),
            port=int(port) if port else 80,
            user=match.group("user"),
            password=match.group("password"),
        )

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"


class RunContext:
    """Resources acquired for the duration of one run.

    Use as a context manager; the proxy authentication and any plugin modules
    loaded from the search path are released when the block exits.

    Args:
        plugin_path: Directories searched for user plugin modules
        proxy: Explicit HTTP proxy, if any
        use_system_proxies: Fall back to the platform proxy configuration
        stdout: Primary output stream for dumps and signatures
        binary_stdout: Primary output stream for zip output; defaults to the
            binary buffer under ``stdout``
    """

    def __init__(
        self,
        plugin_path: Sequence[Path] = (),
        proxy: ProxySettings | None = None,
        use_system_proxies: bool = False,
        stdout: IO[str] | None = None,
        binary_stdout: IO[bytes] | None = None,
    ):
        self.plugin_path = [Path(p) for p in plugin_path]
        self.proxy = proxy
        self.use_system_proxies = use_system_proxies
        self.stdout = stdout if stdout is not None else sys.stdout
        self._binary_stdout = binary_stdout
        # proxies in effect while the context is open
        self.proxies: dict[str, str] = {}
        self._opener: urllib.request.OpenerDirector | None = None
        self._modules: dict[str, ModuleType] = {}

    @staticmethod
    def for_options(
        options, stdout: IO[str] | None = None, binary_stdout: IO[bytes] | None = None
    ) -> RunContext:
        """Build the context described by parsed options."""
        use_system_proxies = os.environ.get(SYSTEM_PROXY_VARIABLE, "").lower() == "true"
        return RunContext(
            plugin_path=options.plugin_path,
            proxy=options.proxy,
            use_system_proxies=use_system_proxies,
            stdout=stdout,
            binary_stdout=binary_stdout,
        )

    def __enter__(self) -> RunContext:
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._opener is not None

    def open(self) -> None:
        """Install the proxy authentication for this run."""
        if self.proxy is not None:
            proxies = {"http": self.proxy.url, "https": self.proxy.url}
        elif self.use_system_proxies:
            proxies = urllib.request.getproxies()
        else:
            proxies = {}

        handlers: list[urllib.request.BaseHandler] = [urllib.request.ProxyHandler(proxies)]
        if self.proxy is not None and self.proxy.user:
            password_manager = urllib.request.HTTPPasswordMgrWithDefaultRealm()
            password_manager.add_password(None, self.proxy.url, self.proxy.user, self.proxy.password or "")
            handlers.append(urllib.request.ProxyBasicAuthHandler(password_manager))

        self.proxies = proxies
        self._opener = urllib.request.build_opener(*handlers)
        logger.debug("Run context opened (proxies: %s)", ", ".join(sorted(proxies)) or "none")

    def close(self) -> None:
        """Drop the proxy authentication and forget loaded plugin modules."""
        self._opener = None
        self.proxies = {}
        self._modules.clear()
        logger.debug("Run context closed")

    @property
    def binary_stdout(self) -> IO[bytes] | None:
        """Binary view of the primary output stream.

        None when ``stdout`` is a text-only stream, such as ``io.StringIO``,
        and no binary stream was given.
        """
        if self._binary_stdout is not None:
            return self._binary_stdout
        buffer = getattr(self.stdout, "buffer", None)
        if buffer is not None:
            return buffer
        if isinstance(self.stdout, io.TextIOBase):
            return None
        return self.stdout

    def read(self, system_id: str) -> bytes:
        """Read the document identified by a ``file:`` or ``http(s):`` URI.

        Raises:
            OSError: If the document cannot be read
            RuntimeError: If the context is not open
        """
        parsed = urllib.parse.urlparse(system_id)
        if parsed.scheme == "file":
            return Path(urllib.request.url2pathname(parsed.path)).read_bytes()
        if self._opener is None:
            raise RuntimeError("the run context is not open")
        with self._opener.open(system_id) as response:
            return response.read()

    def load_class(self, spec: str) -> type:
        """Load ``module:Class`` searching the plugin path first.

        Modules found on the plugin path are executed privately for this run
        and are not registered in ``sys.modules``.

        Raises:
            ImportError: If the module cannot be found or imported
            Exception: Whatever a plugin module raises while it executes
            AttributeError: If the module has no such attribute
            ValueError: If ``spec`` is not ``module:Class``
        """
        module_name, sep, class_name = spec.partition(":")
        if not sep or not module_name or not class_name:
            raise ValueError(f"expected module:Class, got '{spec}'")
        module = self._load_module(module_name)
        return getattr(module, class_name)

    def _load_module(self, module_name: str) -> ModuleType:
        if module_name in self._modules:
            return self._modules[module_name]

        search_path = [str(p) for p in self.plugin_path]
        module_spec = None
        if search_path and "." not in module_name:
            module_spec = importlib.machinery.PathFinder.find_spec(module_name, search_path)

        if module_spec is None or module_spec.loader is None:
            module = importlib.import_module(module_name)
        else:
            module = importlib.util.module_from_spec(module_spec)
            module_spec.loader.exec_module(module)
            logger.debug("Loaded plugin module %s from %s", module_name, module_spec.origin)

        self._modules[module_name] = module
        return module
