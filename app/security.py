"""Admin gate of the status panel.

Every admin route depends on :func:`admin_required`. Its bearer scheme is
registered in the OpenAPI document as ``ADMIN_SCHEME``; the API-routes
section of the report uses that name to tell secured routes from public ones.
"""
from __future__ import annotations

from typing import Optional

import jwt
from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .settings import settings

ADMIN_SCHEME = "StatusAdmin"
ADMIN_ROLES = {"admin", "superuser"}

admin_bearer = HTTPBearer(auto_error=False, scheme_name=ADMIN_SCHEME,
                          description="JWT with an admin role, or send X-Admin-Token instead")


def _admin_claims(token: str) -> Optional[dict]:
    try:
        claims = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return claims if claims.get("role") in ADMIN_ROLES else None


def admin_required(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(admin_bearer),
    x_admin_token: Optional[str] = Header(default=None, alias="X-Admin-Token"),
) -> dict:
    if x_admin_token and settings.ADMIN_TOKEN and x_admin_token == settings.ADMIN_TOKEN:
        return {"sub": "admin", "role": "admin", "method": "x-admin-token"}

    if creds and creds.scheme.lower() == "bearer":
        claims = _admin_claims(creds.credentials)
        if claims is not None:
            return claims

    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
