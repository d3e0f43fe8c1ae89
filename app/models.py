from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from services.report_rows import ReportSection

class HealthResponse(BaseModel):
    ok: bool = True
    env: str
    version: str
    database: bool
    status: str = "ok"

class StatusReportResponse(BaseModel):
    language: str
    url: str = Field(..., description="Site whose headers were checked")
    generated_at: str
    sections: List[ReportSection]

class DirSizeResponse(BaseModel):
    path: str
    bytes: int
    formatted: str
