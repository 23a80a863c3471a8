from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.gzip import GZipMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from .api.middleware.security import SecurityMiddleware
from .api.v1.router import api_router
from .config import settings
from .core.errors import ConfigurationError, ConflictError, DataAccessError
from .utils.logging import get_logger, setup_logging

if TYPE_CHECKING:
    from fastapi import Request

logger = get_logger(__name__)


async def data_access_error_handler(request: Request, exc: DataAccessError) -> JSONResponse:
    logger.error(
        "Data store error",
        extra={"path": request.url.path, "method": request.method, "error": exc.message},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": exc.message},
    )


async def conflict_error_handler(request: Request, exc: ConflictError) -> JSONResponse:
    logger.warning("Write conflict", extra={"path": request.url.path, "error": exc.message})
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": exc.message})


async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error("Configuration error", extra={"path": request.url.path, "error": exc.message})
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": exc.message},
    )


def create_app() -> FastAPI:
    setup_logging()

    app = FastAPI(
        title="Memo API",
        debug=settings.debug,
        version="0.1.0",
        root_path=settings.root_path or "",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_origin_regex=settings.cors_origin_regex,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=[
            "Accept",
            "Accept-Language",
            "Content-Language",
            "Content-Type",
            "X-Requested-With",
        ],
        max_age=600,  # Cache preflight requests for 10 minutes
    )

    # Proxy headers (X-Forwarded-*) when behind ALB/ingress
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])

    # Trusted hosts (configure in env for production)
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.trusted_hosts)

    # GZip compression
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    app.add_middleware(SecurityMiddleware)

    app.add_exception_handler(ConflictError, conflict_error_handler)
    app.add_exception_handler(DataAccessError, data_access_error_handler)
    app.add_exception_handler(ConfigurationError, configuration_error_handler)

    app.include_router(api_router, prefix=settings.api_prefix)
    return app


app = create_app()
