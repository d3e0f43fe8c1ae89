from __future__ import annotations

from fastapi import APIRouter

from services.config import settings as report_settings
from ..settings import settings
from ..models import HealthResponse

router = APIRouter()

@router.get("/healthz", response_model=HealthResponse, tags=["ops"])
def healthz() -> HealthResponse:
    return HealthResponse(
        env=settings.ENV,
        version=settings.VERSION,
        database=bool(report_settings.DATABASE_URL),
    )
