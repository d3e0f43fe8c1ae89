# -*- coding: utf-8 -*-
from __future__ import annotations

import time

import jwt
import pytest
from fastapi import Request
from fastapi.testclient import TestClient

from app.host import BackendUrlBuilder, FastAPIRouteProvider, request_context
from app.main import app
from app.routes import admin_status
from app.security import ADMIN_SCHEME
from app.settings import settings
from services.config import settings as report_settings
from services.errors import DatabaseUnavailable

from conftest import FakeHeaders

ADMIN = {"X-Admin-Token": "secret-admin"}


def _jwt(sub, role):
    claims = {"sub": sub, "role": role, "exp": int(time.time()) + 300}
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


@pytest.fixture()
def client(monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_TOKEN", "secret-admin")
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def fake_report(client, make_report):
    report = make_report(headers=FakeHeaders(["Strict-Transport-Security: max-age=100"]))
    app.dependency_overrides[admin_status.get_status_report] = lambda: report
    return report


def test_healthz(client):
    r = client.get("/api/healthz")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_status_requires_admin(client):
    assert client.get("/api/admin/status").status_code == 401
    assert client.get("/api/admin/status", headers={"X-Admin-Token": "wrong"}).status_code == 401


def test_status_accepts_admin_jwt(client, fake_report):
    token = _jwt("alice", role="admin")
    r = client.get("/api/admin/status", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    user_token = _jwt("bob", role="user")
    r = client.get("/api/admin/status", headers={"Authorization": f"Bearer {user_token}"})
    assert r.status_code == 401


def test_status_json_sections(client, fake_report):
    r = client.get("/api/admin/status", headers=ADMIN)
    assert r.status_code == 200
    data = r.json()
    assert data["url"] == "https://example.org"
    keys = [s["key"] for s in data["sections"]]
    assert keys == [
        "updates", "inactive_extensions", "security_headers", "caching_headers", "server_info",
        "constants", "api_routes", "scheduled_jobs", "error_debug", "sizes",
    ]
    security = next(s for s in data["sections"] if s["key"] == "security_headers")
    assert security["rows"][0] == {"title": "Strict-Transport-Security", "value": "OK", "status": True}


def test_status_page_renders_html(client, fake_report):
    r = client.get("/api/admin/status/page", headers=ADMIN)
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/html")
    assert "Security headers" in r.text
    assert 'class="dir-size"' in r.text
    assert "/api/admin/status/dir-size" in r.text


def test_report_unavailable_when_database_fails(client, monkeypatch):
    def broken(app_, cfg):
        raise DatabaseUnavailable("no driver")

    monkeypatch.setattr(admin_status, "build_collaborators", broken)
    r = client.get("/api/admin/status", headers=ADMIN)
    assert r.status_code == 503
    assert r.json()["detail"] == "Status report unavailable"


def test_dir_size_for_configured_directory(client, monkeypatch, tmp_path):
    (tmp_path / "file.bin").write_bytes(b"x" * 2048)
    monkeypatch.setattr(report_settings, "MEDIA_DIR", str(tmp_path))
    r = client.get("/api/admin/status/dir-size", params={"path": str(tmp_path)}, headers=ADMIN)
    assert r.status_code == 200
    assert r.json() == {"path": str(tmp_path), "bytes": 2048, "formatted": "0.00 MB"}


def test_dir_size_rejects_other_paths(client):
    r = client.get("/api/admin/status/dir-size", params={"path": "/etc"}, headers=ADMIN)
    assert r.status_code == 404


def test_route_provider_marks_admin_routes_secured():
    routes = {r.path: r.requires_auth for r in FastAPIRouteProvider(app).routes()}
    assert routes["/api/admin/status"] is True
    assert routes["/api/admin/status/dir-size"] is True
    assert routes["/api/healthz"] is False


def test_admin_scheme_documented_in_openapi():
    schema = app.openapi()
    assert ADMIN_SCHEME in schema["components"]["securitySchemes"]
    assert {ADMIN_SCHEME: []} in schema["paths"]["/api/admin/status"]["get"]["security"]
    assert "security" not in schema["paths"]["/api/healthz"]["get"]


def test_backend_url_builder():
    urls = BackendUrlBuilder("/admin/")
    assert urls.backend_page("cronjob/cronjobs", {"func": "edit", "oid": 3}) == "/admin/cronjob/cronjobs?func=edit&oid=3"
    assert urls.backend_page("/system") == "/admin/system"


def test_request_context_from_request(client, monkeypatch):
    seen = {}

    def capture(request: Request):
        seen["ctx"] = request_context(request)
        return {"ok": True}

    app.add_api_route("/_ctx_probe", capture, include_in_schema=False)
    try:
        client.get("/_ctx_probe", headers={"Host": "cms.example:8443"})
    finally:
        app.router.routes = [r for r in app.router.routes if getattr(r, "path", "") != "/_ctx_probe"]
    ctx = seen["ctx"]
    assert ctx.host == "cms.example:8443"
    assert ctx.scheme == "http"
    assert ctx.server_interface.startswith("ASGI ")
