from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, Response

from psychocalc import __version__
from psychocalc.core.config import settings
from psychocalc.core.formatting import format_decimal
from psychocalc.core.logging import CORRELATION_HEADER, configure_logging, correlation_context, get_logger
from psychocalc.core.metrics import get_counters, get_last_runs, get_metrics, inc_counter
from psychocalc.i18n import preload_i18n_resources
from psychocalc.routers.aiken import router as aiken_router
from psychocalc.routers.baremos import router as baremos_router
from psychocalc.routers.cronbach import router as cronbach_router
from psychocalc.routers.exceptions import register_exception_handlers
from psychocalc.routers.help import router as help_router
from psychocalc.routers.recode import router as recode_router
from psychocalc.routers.survey import router as survey_router
from psychocalc.routers.tables import exports_router, imports_router
from psychocalc.routers.workspaces import router as workspaces_router
from psychocalc.services.workspaces import workspace_registry


configure_logging(environment=settings.environment)
logger = get_logger("psychocalc.main", component="app")

# Store application startup time for health endpoint
_app_start_time = datetime.now(timezone.utc)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Warm the label and help catalogs; there is nothing to tear down."""
    stats = preload_i18n_resources()
    logger.info("i18n_preload_complete", extra={"structured_data": stats})
    logger.info(
        "startup_complete",
        extra={
            "structured_data": {
                "environment": settings.environment,
                "locale": settings.locale,
                "help_ai_enabled": settings.help_ai_enabled,
            }
        },
    )
    yield


app = FastAPI(title=settings.app_name, version=__version__, lifespan=lifespan)
register_exception_handlers(app)


@app.middleware("http")
async def bind_correlation_id(request: Request, call_next) -> Response:
    with correlation_context(request.headers.get(CORRELATION_HEADER)) as correlation_id:
        inc_counter("http.requests.total")
        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


# Register routers at import time so tests see routes without requiring startup
app.include_router(aiken_router)
app.include_router(cronbach_router)
app.include_router(baremos_router)
app.include_router(survey_router)
app.include_router(recode_router)
app.include_router(imports_router)
app.include_router(exports_router)
app.include_router(workspaces_router)
app.include_router(help_router)


@app.get("/health")
def health():
    """Application status, uptime and a metrics summary.

    Suitable for load balancer checks: there are no external dependencies to
    check, so a responding process reports ``healthy``.
    """
    now = datetime.now(timezone.utc)
    uptime = (now - _app_start_time).total_seconds()
    counters = get_counters()
    metrics = get_metrics()
    return {
        "status": "healthy",
        "version": __version__,
        "started_at": _app_start_time.isoformat(),
        "uptime_seconds": format_decimal(uptime, decimals=2),
        "environment": settings.environment,
        "total_requests": int(counters.get("http.requests.total", 0)),
        "workspaces": workspace_registry.stats(),
        "help_ai_enabled": settings.help_ai_enabled,
        "metrics_summary": {
            "tracked_operations": len(metrics),
            "tracked_counters": len(counters),
            "last_runs": get_last_runs(),
        },
    }


@app.get("/", include_in_schema=False)
def root():
    """Lightweight index to avoid 404s and point to docs."""
    return {
        "name": settings.app_name,
        "status": "ok",
        "docs": "/docs",
        "redoc": "/redoc",
        "health": "/health",
    }


@app.get("/favicon.ico", include_in_schema=False)
def favicon():
    """Empty favicon to prevent 404 noise in logs."""
    return Response(status_code=204)
