"""Bindings between the status report and the FastAPI host."""
from __future__ import annotations

import os
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import urlencode

from fastapi import FastAPI, Request

from services.config import Settings
from services.contracts import ApiRoute, Collaborators, RequestContext
from services.db import SqlAlchemyExecutor, get_engine
from services.extensions import EntryPointExtensionRegistry, PyPIPackageRegistry
from services.headers import HttpxHeaderFetcher
from services.runtime import PythonRuntime, detect_server_software

from .security import ADMIN_SCHEME


class BackendUrlBuilder:
    def __init__(self, base_path: str = "/admin") -> None:
        self.base_path = base_path.rstrip("/")

    def backend_page(self, page: str, params: Optional[Mapping[str, Any]] = None) -> str:
        url = f"{self.base_path}/{page.strip('/')}"
        if params:
            url += "?" + urlencode(dict(params))
        return url


HTTP_METHODS = ("get", "put", "post", "delete", "patch", "options", "head", "trace")


def _secured_by(operation: Mapping[str, Any], scheme: str) -> bool:
    return any(scheme in requirement for requirement in operation.get("security") or [])


class FastAPIRouteProvider:
    """Lists the documented routes of the running app.

    Reads the OpenAPI paths rather than ``app.routes``: included routers are
    not flattened into ``app.routes`` by every FastAPI release. A path counts
    as secured when any of its operations requires the admin scheme.
    """

    def __init__(self, app: FastAPI, scheme: str = ADMIN_SCHEME) -> None:
        self.app = app
        self.scheme = scheme

    def routes(self) -> List[ApiRoute]:
        paths: Dict[str, Dict[str, Any]] = self.app.openapi().get("paths", {})
        out: List[ApiRoute] = []
        for path, item in paths.items():
            operations = [op for method, op in item.items() if method in HTTP_METHODS]
            out.append(ApiRoute(path=path, requires_auth=any(_secured_by(op, self.scheme) for op in operations)))
        return sorted(out, key=lambda r: r.path)


def request_context(request: Request) -> RequestContext:
    asgi = request.scope.get("asgi") or {}
    interface = f"ASGI {asgi.get('version', '2.0')}"
    if asgi.get("spec_version"):
        interface += f" (HTTP spec {asgi['spec_version']})"
    return RequestContext(
        scheme=request.url.scheme,
        host=request.headers.get("host") or request.url.netloc,
        server_software=os.environ.get("SERVER_SOFTWARE") or detect_server_software(),
        server_interface=interface,
    )


def build_collaborators(app: FastAPI, cfg: Settings) -> Collaborators:
    extensions = EntryPointExtensionRegistry(cfg.EXTENSION_ENTRY_POINT_GROUP, cfg.disabled_extensions)
    sql = SqlAlchemyExecutor(get_engine()) if cfg.DATABASE_URL else None
    return Collaborators(
        extensions=extensions,
        packages=PyPIPackageRegistry(extensions, cfg.PACKAGE_INDEX_URL, timeout=cfg.HEADER_TIMEOUT_SECONDS),
        headers=HttpxHeaderFetcher(timeout=cfg.HEADER_TIMEOUT_SECONDS),
        runtime=PythonRuntime(cfg),
        urls=BackendUrlBuilder(cfg.BACKEND_PATH),
        sql=sql,
        routes=FastAPIRouteProvider(app),
    )
