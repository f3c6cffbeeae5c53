"""
FastAPI application entry point.
Mounts the v1 API, Prometheus metrics and the domain error handlers.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from money_manager.api.v1.router import api_router
from money_manager.config import get_settings
from money_manager.core.exceptions import LedgerError
from money_manager.core.logging_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("Starting %s", app.title)
    yield


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    """NotFound / ValidationError / Unauthorized / Forbidden / Conflict surface as-is."""
    logger.info("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        description="Collection tracker: items, price history, holdings and a per-day portfolio valuation ledger.",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["*"],
    )

    app.add_exception_handler(LedgerError, ledger_error_handler)

    # Prometheus metrics at /metrics
    metrics_app = make_asgi_app()
    app.mount("/metrics", metrics_app)

    app.include_router(api_router, prefix="/api")

    return app


app = create_app()
