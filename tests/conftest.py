# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

import pytest

from services.config import Settings
from services.contracts import ApiRoute, Collaborators, Extension, PackageDescriptor, RequestContext
from services.i18n import Translator
from services.status_report import StatusReport


class FakeExtensions:
    def __init__(self, extensions: List[Extension] | None = None) -> None:
        self.items = {e.name: e for e in (extensions or [])}

    def registered(self) -> List[Extension]:
        return list(self.items.values())

    def get(self, name: str) -> Optional[Extension]:
        return self.items.get(name)


class FakePackages:
    def __init__(self, packages: List[PackageDescriptor] | None = None) -> None:
        self.packages = packages or []

    def update_packages(self) -> List[PackageDescriptor]:
        return list(self.packages)


class FakeHeaders:
    def __init__(self, lines: List[str] | None = None, error: Exception | None = None) -> None:
        self.lines = lines or []
        self.error = error
        self.requested: List[str] = []

    def fetch(self, url: str) -> List[str]:
        self.requested.append(url)
        if self.error:
            raise self.error
        return list(self.lines)


class FakeSql:
    def __init__(self, rows: List[Dict[str, Any]] | None = None, tables: List[Dict[str, Any]] | None = None) -> None:
        self.rows = rows or []
        self.tables = tables or []
        self.queries: List[str] = []

    def fetch_all(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        self.queries.append(sql)
        return list(self.rows)

    def table_status(self) -> List[Dict[str, Any]]:
        return list(self.tables)


class FakeUrls:
    def backend_page(self, page: str, params: Optional[Mapping[str, Any]] = None) -> str:
        query = "&".join(f"{k}={v}" for k, v in (params or {}).items())
        return f"/admin/{page}?{query}" if query else f"/admin/{page}"


class FakeRoutes:
    def __init__(self, routes: List[ApiRoute]) -> None:
        self._routes = routes

    def routes(self) -> List[ApiRoute]:
        return list(self._routes)


class FakeRuntime:
    def __init__(self, **overrides: Any) -> None:
        self.values = {
            "machine": "x86_64",
            "python_version": "3.12.1",
            "implementation": "CPython",
            "limits": {
                "max_form_fields": 1000,
                "max_execution_time": 30,
                "memory_limit": "512M",
                "max_input_time": 60,
                "upload_max_filesize": "8M",
                "post_max_size": "8M",
            },
            "http_client_version": "0.27.0",
            "has_image_library": False,
            "debugger_attached": False,
            "timezone": "Europe/Berlin",
            "user_constants": {},
            "error_level": logging.WARNING,
            "display_errors": False,
            "display_startup_errors": False,
        }
        self.values.update(overrides)

    def __getattr__(self, name: str):
        values = self.__dict__["values"]
        if name in values:
            return lambda: values[name]
        raise AttributeError(name)


@pytest.fixture()
def translator() -> Translator:
    return Translator("en")


@pytest.fixture()
def report_settings() -> Settings:
    return Settings(
        _env_file=None,
        SERVER_URL="https://example.org",
        MEDIA_DIR="/srv/site/media",
        DATA_DIR="/srv/site/data",
        SRC_DIR="/srv/site/src",
        CACHE_DIR="/srv/site/cache",
        CRONJOB_EXTENSION="cronjob",
        CRONJOB_TABLE="cronjob",
        REST_EXTENSION="",
        REST_PLUGIN="",
    )


@pytest.fixture()
def request_ctx() -> RequestContext:
    return RequestContext(scheme="https", host="panel.example.org", server_software="uvicorn/0.30.0",
                          server_interface="ASGI 3.0")


@pytest.fixture()
def make_report(translator, report_settings, request_ctx):
    def _make(settings: Settings | None = None, request: RequestContext | None = None, **parts: Any) -> StatusReport:
        collaborators = Collaborators(
            extensions=parts.get("extensions") or FakeExtensions(),
            packages=parts.get("packages") or FakePackages(),
            headers=parts.get("headers") or FakeHeaders(),
            runtime=parts.get("runtime") or FakeRuntime(),
            urls=parts.get("urls") or FakeUrls(),
            sql=parts.get("sql"),
            routes=parts.get("routes"),
        )
        return StatusReport(
            translator,
            request or request_ctx,
            collaborators,
            settings or report_settings,
            now=lambda: datetime(2026, 10, 18, 12, 30, 0, tzinfo=timezone.utc),
        )
    return _make
