# -*- coding: utf-8 -*-
"""
Status report for the admin panel.

Collects environment facts of the running backend and turns them into
``ReportRow`` lists grouped by section:

- available extension updates and inactive extensions
- security and caching headers of the live site
- server/runtime information and user constants
- API routes and scheduled jobs (when the providing extensions are active)
- error/debug settings, directory placeholders and the database size

Every section method only reads. ``sections()`` builds all of them and keeps
going when one fails.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from loguru import logger
from markupsafe import escape

from services.config import Settings, settings as default_settings
from services.contracts import Collaborators, RequestContext
from services.db import checked_identifier
from services.headers import fetch_headers_safely, has_header, matching_lines, resolve_base_url
from services.i18n import Translator
from services.report_rows import ReportRow, ReportSection
from services.runtime import is_secret_name
from services.sizes import database_size, format_megabytes

__all__ = ["StatusReport", "report_directories", "SECURITY_HEADERS", "CACHING_HEADERS"]

SECURITY_HEADERS = (
    "Strict-Transport-Security",
    "Content-Security-Policy",
    "X-Content-Type-Options",
    "X-Frame-Options",
    "X-XSS-Protection",
)

CACHING_HEADERS = (
    "Cache-Control",
    "Expires",
    "Age",
    "Last-Modified",
    "ETag",
    "X-Cache-Enabled",
    "X-Cache-Disabled",
    "X-Srcache-Store-Status",
    "X-Srcache-Fetch-Status",
)

ERROR_LEVELS: Dict[int, str] = {
    logging.CRITICAL: "CRITICAL",
    logging.ERROR: "ERROR",
    logging.WARNING: "WARNING",
    logging.INFO: "INFO",
    logging.DEBUG: "DEBUG",
    logging.NOTSET: "NOTSET",
}

JOB_ENVIRONMENTS = ("frontend", "backend", "script")

ICON_PUBLIC = '<i class="fa fa-unlock text-warning"></i>'
ICON_SECURED = '<i class="fa fa-lock text-success"></i>'
ICON_ACTIVE = '<i class="fa fa-toggle-on text-success"></i>'
ICON_INACTIVE = '<i class="fa fa-toggle-off text-danger"></i>'

SPINNER = (
    '<svg class="spinning spinner" xmlns="http://www.w3.org/2000/svg" fill="none" viewBox="0 0 24 24">'
    '<circle class="opacity-25" cx="12" cy="12" r="10" stroke="currentColor" stroke-width="4"></circle>'
    '<path class="opacity-75" fill="currentColor" d="M4 12a8 8 0 018-8V0C5.373 0 0 5.373 0 12h4z"></path>'
    "</svg>"
)

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def _on_off(flag: bool) -> str:
    return "On" if flag else "Off"


def _in_zone(moment: datetime, name: str) -> datetime:
    try:
        return moment.astimezone(ZoneInfo(name))
    except (ZoneInfoNotFoundError, ValueError):
        return moment.astimezone()


def report_directories(settings: Settings) -> List[Tuple[str, str]]:
    """Translation key and path of each directory in the size section."""
    return [
        ("media_dir_size", settings.MEDIA_DIR),
        ("data_dir_size", settings.DATA_DIR),
        ("src_dir_size", settings.SRC_DIR),
        ("cache_dir_size", settings.CACHE_DIR),
    ]


class StatusReport:
    def __init__(
        self,
        translator: Translator,
        request: RequestContext,
        collaborators: Collaborators,
        settings: Settings | None = None,
        now: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.t = translator
        self.request = request
        self.c = collaborators
        self.settings = settings or default_settings
        self._now = now or (lambda: datetime.now(timezone.utc))
        self.url = resolve_base_url(self.settings.SERVER_URL, request)
        self.headers = fetch_headers_safely(collaborators.headers, self.url)

    # ------------------------------------------------------------------
    # Extensions
    # ------------------------------------------------------------------
    def available_updates(self) -> List[ReportRow]:
        rows: List[ReportRow] = []
        for package in self.c.packages.update_packages():
            ext = self.c.extensions.get(package.key)
            name = ext.name if ext else package.key
            installed = ext.version if ext else ""
            url = self.c.urls.backend_page("install/packages/update", {"addonkey": package.key})
            title = f"{escape(name)} [{escape(installed)}]"
            rows.append(ReportRow(
                title=f'<a href="{escape(url)}">{title}</a>',
                value=str(escape(package.latest_version)),
            ))
        return rows

    def inactive_extensions(self) -> List[ReportRow]:
        return [
            ReportRow(title=str(escape(ext.name)), value=self.t("not_activated"), status=False)
            for ext in self.c.extensions.registered()
            if not ext.active
        ]

    # ------------------------------------------------------------------
    # Headers
    # ------------------------------------------------------------------
    def security_headers(self) -> List[ReportRow]:
        rows: List[ReportRow] = []
        for header in SECURITY_HEADERS:
            if has_header(self.headers, header):
                rows.append(ReportRow(title=header, value="OK", status=True))
            else:
                rows.append(ReportRow(title=header, value=self.t("not_activated"), status=False))
        return rows

    def caching_headers(self) -> List[ReportRow]:
        rows: List[ReportRow] = []
        for header in CACHING_HEADERS:
            lines = matching_lines(self.headers, header)
            if lines:
                value = "<br>".join(str(escape(line)) for line in lines)
                rows.append(ReportRow(title=header, value=value, status=True))
            else:
                rows.append(ReportRow(title=header, value=self.t("not_activated"), status=False))
        return rows

    # ------------------------------------------------------------------
    # Runtime
    # ------------------------------------------------------------------
    def server_info(self) -> List[ReportRow]:
        rt = self.c.runtime
        limits = rt.limits()
        yes, no = self.t("yes"), self.t("no")
        now_utc = self._now().astimezone(timezone.utc)
        memory = limits.get("memory_limit")
        tz_name = rt.timezone()

        def row(key: str, value: object) -> ReportRow:
            return ReportRow(title=self.t(key), value=str(escape(value)))

        return [
            row("server_architecture", rt.machine()),
            row("webserver", self.request.server_software),
            row("python_version", rt.python_version()),
            row("python_implementation", rt.implementation()),
            row("server_interface", self.request.server_interface),
            row("max_form_fields", limits.get("max_form_fields")),
            row("max_execution_time", self.t("x_seconds", limits.get("max_execution_time"))),
            row("memory_limit", memory if memory is not None else self.t("unlimited")),
            row("max_input_time", self.t("x_seconds", limits.get("max_input_time"))),
            row("upload_max_filesize", limits.get("upload_max_filesize")),
            row("post_max_size", limits.get("post_max_size")),
            row("http_client_version", rt.http_client_version()),
            row("image_library_available", yes if rt.has_image_library() else no),
            row("debugger_attached", yes if rt.debugger_attached() else no),
            row("current_local_time", _in_zone(now_utc, tz_name).strftime(TIME_FORMAT)),
            row("current_time", now_utc.strftime(TIME_FORMAT)),
            row("current_server_time", tz_name),
        ]

    def user_constants(self) -> List[ReportRow]:
        constants = self.c.runtime.user_constants()
        if not constants:
            return [ReportRow(title=self.t("no_constants_defined"), value="")]
        rows: List[ReportRow] = []
        for name, value in constants.items():
            shown = self.t("redacted") if is_secret_name(name) else value
            rows.append(ReportRow(title=str(escape(name)), value=str(escape(shown))))
        return rows

    # ------------------------------------------------------------------
    # Optional extensions
    # ------------------------------------------------------------------
    def _extension_available(self, name: str, plugin: str = "") -> bool:
        if not name:
            return True
        ext = self.c.extensions.get(name)
        if ext is None or not ext.active:
            return False
        if plugin:
            sub = ext.plugin(plugin)
            return sub is not None and sub.active
        return True

    def api_routes(self) -> List[ReportRow]:
        if self.c.routes is None:
            return []
        if not self._extension_available(self.settings.REST_EXTENSION, self.settings.REST_PLUGIN):
            return []
        required = self.t("authentication_required")
        not_required = self.t("authentication_not_required")
        rows: List[ReportRow] = []
        for route in self.c.routes.routes():
            value = f"{ICON_SECURED} {required}" if route.requires_auth else f"{ICON_PUBLIC} {not_required}"
            rows.append(ReportRow(title=str(escape(route.path)), value=value))
        return rows

    def scheduled_jobs(self) -> List[ReportRow]:
        if self.c.sql is None or not self.settings.CRONJOB_EXTENSION:
            return []
        if not self._extension_available(self.settings.CRONJOB_EXTENSION):
            return []
        table = checked_identifier(self.settings.CRONJOB_TABLE)
        jobs = self.c.sql.fetch_all(
            f"SELECT id, name, environment, status FROM {table} ORDER BY status DESC"
        )
        # keep the active-first order even when the driver does not sort
        jobs = sorted(jobs, key=lambda j: int(j.get("status") or 0), reverse=True)
        rows: List[ReportRow] = []
        for job in jobs:
            environment = str(job.get("environment") or "")
            labels = [
                self.t(f"cronjob_environment_{env}")
                for env in JOB_ENVIRONMENTS
                if f"|{env}|" in environment
            ]
            url = self.c.urls.backend_page("cronjob/cronjobs", {"func": "edit", "oid": int(job["id"])})
            value = ICON_ACTIVE if int(job.get("status") or 0) else ICON_INACTIVE
            value += " " + ", ".join(labels)
            rows.append(ReportRow(
                title=f'<a href="{escape(url)}">{escape(job.get("name") or "")}</a>',
                value=value,
            ))
        return rows

    # ------------------------------------------------------------------
    # Error handling and sizes
    # ------------------------------------------------------------------
    def error_and_debug_settings(self) -> List[ReportRow]:
        rt = self.c.runtime
        level = rt.error_level()
        display = rt.display_errors()
        startup = rt.display_startup_errors()
        return [
            ReportRow(title="Error Reporting", value=ERROR_LEVELS.get(level, f"Level {level}")),
            ReportRow(title="Debugging (Display Errors)", value=_on_off(display), status=not display),
            ReportRow(title="Debugging (Display Startup Errors)", value=_on_off(startup), status=not startup),
        ]

    def directories(self) -> List[Tuple[str, str]]:
        return report_directories(self.settings)

    def storage_sizes(self) -> List[ReportRow]:
        calculating = self.t("calculating")
        rows = [
            ReportRow(
                title=self.t(key),
                value=f'<span class="dir-size" data-path="{escape(path)}">{SPINNER} {calculating}</span>',
            )
            for key, path in self.directories()
        ]
        return rows + self.database_size()

    def database_size(self) -> List[ReportRow]:
        if self.c.sql is None:
            return []
        tables = self.c.sql.table_status()
        if not tables:
            return []
        return [ReportRow(title=self.t("db_size"), value=format_megabytes(database_size(tables)))]

    # ------------------------------------------------------------------
    # All sections
    # ------------------------------------------------------------------
    def builders(self) -> List[Tuple[str, Callable[[], List[ReportRow]]]]:
        return [
            ("updates", self.available_updates),
            ("inactive_extensions", self.inactive_extensions),
            ("security_headers", self.security_headers),
            ("caching_headers", self.caching_headers),
            ("server_info", self.server_info),
            ("constants", self.user_constants),
            ("api_routes", self.api_routes),
            ("scheduled_jobs", self.scheduled_jobs),
            ("error_debug", self.error_and_debug_settings),
            ("sizes", self.storage_sizes),
        ]

    def sections(self) -> List[ReportSection]:
        out: List[ReportSection] = []
        for key, build in self.builders():
            section = ReportSection(key=key, title=self.t(f"section_{key}"))
            try:
                section.rows = build()
            except Exception as e:
                logger.exception(f"Status section {key} failed: {e}")
                section.error = self.t("section_unavailable", type(e).__name__)
            out.append(section)
        return out
