"""Standardized JSON response envelopes."""

from __future__ import annotations

from typing import Any, Mapping

from flask import Response, g, has_request_context, jsonify

from .errors import AppError


def _meta() -> dict[str, Any]:
    if has_request_context() and getattr(g, "request_id", None):
        return {"request_id": g.request_id}
    return {}


def ok(data: Any, *, status: int = 200) -> Response:
    """Return a success envelope."""

    response = jsonify({"success": True, "data": data, "meta": _meta()})
    response.status_code = status
    return response


def fail(error: AppError | Mapping[str, Any], *, status: int | None = None) -> Response:
    """Return a standardized failure envelope."""

    if isinstance(error, AppError):
        body = error.to_dict()
        status = status or error.status_code
    else:
        body = dict(error)
        status = status or 400
    response = jsonify({"success": False, "error": body, "meta": _meta()})
    response.status_code = status
    return response


__all__ = ["ok", "fail"]
