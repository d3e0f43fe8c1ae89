"""
Collaborator contracts of the status report.

The report never talks to the host directly; it receives objects
implementing these protocols. Default implementations for a FastAPI host
live in ``services.headers``, ``services.extensions``, ``services.db`` and
``services.runtime``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple


@dataclass(frozen=True)
class Extension:
    name: str
    version: str
    active: bool
    plugins: Tuple["Extension", ...] = ()

    def plugin(self, name: str) -> Optional["Extension"]:
        for p in self.plugins:
            if p.name == name:
                return p
        return None


@dataclass(frozen=True)
class PackageFile:
    version: str


@dataclass(frozen=True)
class PackageDescriptor:
    key: str
    files: Tuple[PackageFile, ...] = ()

    @property
    def latest_version(self) -> str:
        return self.files[-1].version if self.files else ""


@dataclass(frozen=True)
class ApiRoute:
    path: str
    requires_auth: bool


@dataclass(frozen=True)
class RequestContext:
    scheme: str = "http"
    host: str = "localhost"
    server_software: str = ""
    server_interface: str = ""


class ExtensionRegistry(Protocol):
    def registered(self) -> List[Extension]:
        ...

    def get(self, name: str) -> Optional[Extension]:
        ...


class PackageRegistry(Protocol):
    def update_packages(self) -> List[PackageDescriptor]:
        ...


class SqlExecutor(Protocol):
    def fetch_all(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        ...

    def table_status(self) -> List[Dict[str, Any]]:
        """Rows carrying at least ``Data_length`` and ``Index_length``."""
        ...


class HeaderFetcher(Protocol):
    def fetch(self, url: str) -> List[str]:
        """Return ``Name: value`` lines; raise on network failure."""
        ...


class UrlBuilder(Protocol):
    def backend_page(self, page: str, params: Optional[Mapping[str, Any]] = None) -> str:
        ...


class RouteProvider(Protocol):
    def routes(self) -> List[ApiRoute]:
        ...


class Runtime(Protocol):
    def machine(self) -> str: ...
    def python_version(self) -> str: ...
    def implementation(self) -> str: ...
    def limits(self) -> Dict[str, Any]: ...
    def http_client_version(self) -> str: ...
    def has_image_library(self) -> bool: ...
    def debugger_attached(self) -> bool: ...
    def timezone(self) -> str: ...
    def user_constants(self) -> Dict[str, Any]: ...
    def error_level(self) -> int: ...
    def display_errors(self) -> bool: ...
    def display_startup_errors(self) -> bool: ...


@dataclass
class Collaborators:
    """Bundle handed to :class:`services.status_report.StatusReport`."""

    extensions: ExtensionRegistry
    packages: PackageRegistry
    headers: HeaderFetcher
    runtime: Runtime
    urls: UrlBuilder
    sql: Optional[SqlExecutor] = None
    routes: Optional[RouteProvider] = None
