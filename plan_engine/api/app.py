"""
FastAPI Application

Main entry point for the API.
"""

import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from .plans import router as plans_router
from ..executor.engine import PlanExecutionService
from ..executor.deferral import AsyncioDeferral
from ..executor.plan_manager import PlanManager
from ..config.logging import get_logger, request_id_var
from ..config.settings import Settings
from .. import __version__

logger = get_logger("api")


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every incoming HTTP request with method, path, status and duration.
    Sets X-Request-ID for log correlation."""

    async def dispatch(self, request: Request, call_next) -> Response:
        req_id = uuid.uuid4().hex[:8]
        request.state.request_id = req_id
        token = request_id_var.set(req_id)

        start = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        duration_ms = round((time.perf_counter() - start) * 1000, 1)

        response.headers["X-Request-ID"] = req_id

        logger.info(
            "%s %s -> %d [%.1fms]",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={"extra_data": {
                "request_id": req_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            }}
        )
        return response


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    service: PlanExecutionService = app.state.service
    logger.info(
        "Plan engine ready (%d step handlers)",
        len(service.handlers.list()),
    )

    yield

    # Graceful shutdown: drop pending auto-advances
    deferral = service.deferral
    if isinstance(deferral, AsyncioDeferral):
        deferral.cancel_all()
    active = service.active_plan_ids()
    if active:
        logger.info("Shutting down with %d active plan(s)", len(active))


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def create_app(service: Optional[PlanExecutionService] = None) -> FastAPI:
    """Create FastAPI application."""

    app = FastAPI(
        title="Plan Engine API",
        description="Step-by-step execution of AI-generated plans",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.service = service or PlanExecutionService.from_settings(Settings.from_env())
    app.state.plan_manager = PlanManager()

    app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(plans_router)

    @app.get("/health")
    async def health():
        svc: PlanExecutionService = app.state.service
        return {
            "status": "ok",
            "active_plans": len(svc.active_plan_ids()),
            "handlers": [t.value for t in svc.handlers.list_types()],
        }

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception: %s %s: %s",
            request.method, request.url.path, exc,
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": str(exc),
            }
        )

    return app


# Create app instance
app = create_app()
