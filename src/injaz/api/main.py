"""FastAPI application factory."""

import time
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from injaz import __version__
from injaz.api.routes import ROUTERS
from injaz.config import bind_request_context, configure_logging
from injaz.db.session import init_db
from injaz.services.errors import ServiceError

logger = structlog.get_logger(__name__)


def create_app(create_tables: bool = True) -> FastAPI:
    configure_logging()
    if create_tables:
        init_db()

    app = FastAPI(
        title="Injaz",
        description="Business management backend with a Gemini-powered assistant",
        version=__version__,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or uuid4().hex[:12]
        bind_request_context(request_id=request_id, method=request.method, path=request.url.path)
        started = time.perf_counter()
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        logger.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        return response

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        logger.info(
            "service_error",
            path=request.url.path,
            status_code=exc.status_code,
            error=str(exc),
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": str(exc), "details": exc.details},
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled_error", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    for router in ROUTERS:
        app.include_router(router)

    return app
