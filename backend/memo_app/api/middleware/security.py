from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from starlette.middleware.base import BaseHTTPMiddleware

from memo_app.config import settings
from memo_app.utils.logging import get_logger

if TYPE_CHECKING:
    from fastapi import Request
    from starlette.types import ASGIApp

logger = get_logger(__name__)

WRITE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


def build_csp(supabase_url: str) -> str:
    """Content-Security-Policy allowing XHR only to ourselves and the configured Supabase project."""
    parts = urlsplit(supabase_url)
    supabase_origin = f"{parts.scheme}://{parts.netloc}" if parts.netloc else "https://*.supabase.co"
    return (
        "default-src 'self'; "
        "img-src 'self' data: https:; "
        f"connect-src 'self' {supabase_origin}; "
        "frame-ancestors 'none';"
    )


class SecurityMiddleware(BaseHTTPMiddleware):
    """Adds security headers and logs every memo write with its outcome."""

    def __init__(self, app: ASGIApp, supabase_url: str | None = None):
        super().__init__(app)
        self._csp = build_csp(supabase_url or settings.supabase_url)

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = self._csp

        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = "max-age=15552000; includeSubDomains"

        # memo lists change on every write; never serve them from a shared cache
        response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
        response.headers["Pragma"] = "no-cache"

        if request.method in WRITE_METHODS:
            log = logger.warning if response.status_code >= 400 else logger.info
            log(
                "Memo write %s %s -> %s",
                request.method,
                request.url.path,
                response.status_code,
                extra={"path": request.url.path, "method": request.method, "status_code": response.status_code},
            )

        return response
