from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class ReportRow(BaseModel):
    title: str = Field(..., description="Label, may contain markup")
    value: str = Field(default="", description="Value, may contain markup")
    status: Optional[bool] = Field(default=None, description="True = healthy, False = needs attention")


class ReportSection(BaseModel):
    key: str
    title: str
    rows: List[ReportRow] = Field(default_factory=list)
    error: Optional[str] = None
