"""Logging helpers with request correlation."""

from __future__ import annotations

import logging
import os
import time
import uuid
from typing import Any

from flask import Flask, g, request

ROOT_LOGGER = "nimbus_calc"
DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the application logger, or a child of it for ``name``."""

    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        root.addHandler(handler)
        root.setLevel(os.environ.get("NIMBUS_CALC_LOG_LEVEL", "INFO").upper())
    if not name or name == ROOT_LOGGER:
        return root
    return root.getChild(name)


def _request_context() -> dict[str, Any]:
    return {
        "request_id": getattr(g, "request_id", "-"),
        "path": request.path,
        "method": request.method,
    }


def install_request_logging(app: Flask) -> None:
    logger = get_logger("requests")

    @app.before_request
    def _begin_request() -> None:
        g.request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        g.request_started = time.perf_counter()

    @app.after_request
    def _after_request(response):
        duration_ms = 0.0
        if hasattr(g, "request_started"):
            duration_ms = (time.perf_counter() - g.request_started) * 1000
        context = _request_context()
        logger.info(
            "%s %s -> %s in %.2f ms [%s]",
            context["method"],
            context["path"],
            response.status_code,
            duration_ms,
            context["request_id"],
            extra={**context, "status": response.status_code, "duration_ms": round(duration_ms, 2)},
        )
        response.headers.setdefault("X-Request-ID", getattr(g, "request_id", ""))
        return response

    @app.teardown_request
    def _teardown_request(exc):  # pragma: no cover - flask hooks
        if exc is not None:
            logger.exception("request error", extra=_request_context())


__all__ = ["ROOT_LOGGER", "get_logger", "install_request_logging"]
