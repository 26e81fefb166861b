from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from psychocalc.core.errors import DomainError
from psychocalc.core.logging import get_correlation_id, get_logger
from psychocalc.core.metrics import inc_counter

logger = get_logger("psychocalc.routers.exceptions", component="api")


def register_exception_handlers(app: FastAPI) -> None:
    """Register shared HTTP translators for domain-layer exceptions."""

    @app.exception_handler(DomainError)
    async def _handle_domain_error(request: Request, exc: DomainError) -> JSONResponse:
        if isinstance(exc.detail, dict):
            detail_payload: dict[str, Any] = {**exc.detail}
            detail_payload.setdefault("message", exc.message)
        elif exc.detail is not None:
            detail_payload = {"message": exc.message, "extra": exc.detail}
        else:
            detail_payload = {"message": exc.message}
        payload: dict[str, Any] = {
            "error": exc.error_code,
            "detail": detail_payload,
        }
        correlation_id = get_correlation_id()
        if correlation_id:
            payload["correlation_id"] = correlation_id
        inc_counter(f"errors.{exc.error_code}")
        logger.info(
            "domain_error",
            extra={"structured_data": {"error": exc.error_code, "path": request.url.path, "status": exc.status_code}},
        )
        return JSONResponse(status_code=exc.status_code, content=payload)
