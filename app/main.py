from __future__ import annotations

import logging
from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import PlainTextResponse

from services.logging_setup import configure_logging

from .settings import settings, allowed_origins
from .routes import health, admin_status

# ----------------------------------------------------------------------------
# Logging
# ----------------------------------------------------------------------------
# stdlib loggers (uvicorn, sqlalchemy) share the level shown as "Error Reporting"
logging.basicConfig(level=settings.LOG_LEVEL.upper())
logger = configure_logging(settings.LOG_LEVEL)
logger.info(f"Starting {settings.APP_NAME} v{settings.VERSION} (env={settings.ENV})")

# ----------------------------------------------------------------------------
# App
# ----------------------------------------------------------------------------
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    debug=settings.DEBUG,
    docs_url=None if settings.ENV == "production" else "/docs",
    redoc_url=None,
    openapi_url="/api/openapi.json",
)

if allowed_origins():
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins(),
        allow_methods=["GET"],
        allow_headers=["Authorization", "X-Admin-Token"],
        allow_credentials=True,
        max_age=86400,
    )

@app.get("/", response_class=PlainTextResponse, include_in_schema=False)
def root():
    return "Status report backend is running."

# Mount API routers under /api
api = APIRouter(prefix="/api")
api.include_router(health.router)
api.include_router(admin_status.router)
app.include_router(api)

@app.get("/api", include_in_schema=False)
def api_index():
    return {"ok": True, "message": "See /api/healthz, /api/admin/status, /api/admin/status/page"}
