"""HTTP response headers of the live site."""
from __future__ import annotations

from typing import Iterable, List
from urllib.parse import urlsplit

import httpx
from loguru import logger
from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

from services.contracts import HeaderFetcher, RequestContext

_HTTP_URL = TypeAdapter(AnyHttpUrl)


def is_valid_url(url: str | None) -> bool:
    if not url:
        return False
    url = url.strip()
    try:
        parts = urlsplit(url)
        parts.port  # raises for an out-of-range port
        _HTTP_URL.validate_python(url)
    except (ValueError, ValidationError):
        return False
    return parts.scheme in ("http", "https") and bool(parts.hostname)


def resolve_base_url(configured: str | None, request: RequestContext) -> str:
    """Configured URL if usable, else ``scheme://host`` of the current request."""
    if is_valid_url(configured):
        return configured.strip()
    scheme = "https" if request.scheme == "https" else "http"
    return f"{scheme}://{request.host}"


def has_header(headers: Iterable[str], name: str) -> bool:
    prefix = name.lower()
    return any(h.lower().startswith(prefix) for h in headers)


def matching_lines(headers: Iterable[str], name: str) -> List[str]:
    prefix = name.lower()
    return [h for h in headers if h.lower().startswith(prefix)]


class HttpxHeaderFetcher:
    """Collects ``Name: value`` lines from every response of the redirect chain."""

    def __init__(self, timeout: float = 10.0, transport: httpx.BaseTransport | None = None) -> None:
        self.timeout = timeout
        self.transport = transport

    def fetch(self, url: str) -> List[str]:
        lines: List[str] = []
        with httpx.Client(timeout=self.timeout, follow_redirects=True, transport=self.transport) as client:
            resp = client.get(url, headers={"User-Agent": "status-report/1.0"})
            for r in [*resp.history, resp]:
                lines.append(f"HTTP/{r.http_version.split('/')[-1]} {r.status_code} {r.reason_phrase}".rstrip())
                lines.extend(f"{k.decode('latin-1')}: {v.decode('latin-1')}" for k, v in r.headers.raw)
        return lines


def fetch_headers_safely(fetcher: HeaderFetcher, url: str) -> List[str]:
    try:
        return list(fetcher.fetch(url))
    except Exception as e:
        logger.warning(f"Could not fetch headers from {url}: {e}")
        return []
