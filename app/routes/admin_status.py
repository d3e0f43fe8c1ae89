# -*- coding: utf-8 -*-
"""Admin status report: JSON, HTML page and the directory-size follow-up."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import HTMLResponse
from loguru import logger

from services.config import settings as report_settings
from services.errors import StatusReportError
from services.i18n import Translator, normalize_lang
from services.rendering import render_status_page
from services.sizes import directory_size, format_megabytes
from services.status_report import StatusReport, report_directories

from ..host import build_collaborators, request_context
from ..models import DirSizeResponse, StatusReportResponse
from ..security import admin_required
from ..settings import settings

router = APIRouter(prefix="/admin/status", tags=["admin"], dependencies=[Depends(admin_required)])


def get_translator(request: Request, lang: Optional[str] = Query(default=None)) -> Translator:
    raw = lang or request.headers.get("accept-language") or settings.DEFAULT_LANGUAGE
    return Translator(normalize_lang(raw))


def get_status_report(request: Request, translator: Translator = Depends(get_translator)) -> StatusReport:
    try:
        collaborators = build_collaborators(request.app, report_settings)
        return StatusReport(translator, request_context(request), collaborators, report_settings)
    except StatusReportError as e:
        logger.error(f"Status report unavailable: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Status report unavailable")


@router.get("", response_model=StatusReportResponse)
def status_report(report: StatusReport = Depends(get_status_report)) -> StatusReportResponse:
    return StatusReportResponse(
        language=report.t.lang,
        url=report.url,
        generated_at=datetime.now(timezone.utc).isoformat(),
        sections=report.sections(),
    )


@router.get("/page", response_class=HTMLResponse)
def status_page(request: Request, report: StatusReport = Depends(get_status_report)) -> HTMLResponse:
    html = render_status_page(
        report.sections(),
        title=f"{settings.APP_NAME} - Status",
        lang=report.t.lang,
        dir_size_url=str(request.url_for("directory_size").path),
    )
    return HTMLResponse(html)


@router.get("/dir-size", response_model=DirSizeResponse, name="directory_size")
def dir_size(path: str = Query(...)) -> DirSizeResponse:
    allowed = {p for _key, p in report_directories(report_settings)}
    # only the directories listed in the report may be measured
    if path not in allowed:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown directory")
    size = directory_size(Path(path))
    return DirSizeResponse(path=path, bytes=size, formatted=format_megabytes(size))
