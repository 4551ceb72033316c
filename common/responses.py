"""Standardized JSON and file response helpers."""

from __future__ import annotations

from io import BytesIO
from typing import Any, Mapping

from flask import Response, g, has_request_context, jsonify, send_file

from .errors import AppError


def _envelope(payload: dict[str, Any]) -> dict[str, Any]:
    if has_request_context() and getattr(g, "request_id", None):
        payload["request_id"] = g.request_id
    return payload


def ok(data: Any, *, status: int = 200) -> Response:
    """Return a success envelope."""

    response = jsonify(_envelope({"success": True, "data": data}))
    response.status_code = status
    return response


def fail(error: AppError | Mapping[str, Any], *, status: int | None = None) -> Response:
    """Return a standardized failure envelope."""

    if isinstance(error, AppError):
        response = jsonify(_envelope({"success": False, "error": error.to_dict()}))
        response.status_code = status or error.status_code
        return response

    response = jsonify(_envelope({"success": False, "error": dict(error)}))
    response.status_code = status or 400
    return response


def attachment(text: str, *, mimetype: str, filename: str) -> Response:
    """Send ``text`` as a UTF-8 encoded download."""

    return send_file(
        BytesIO(text.encode("utf-8")),
        mimetype=mimetype,
        as_attachment=True,
        download_name=filename,
    )


__all__ = ["ok", "fail", "attachment"]
