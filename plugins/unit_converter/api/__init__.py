"""Unit converter API with standardized responses."""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Callable, Mapping

from flask import Blueprint, Response, current_app, request

from common.errors import ConflictAppError, NotFoundAppError, ValidationAppError
from common.responses import fail, ok
from common.validation import SchemaModel, ValidationError, parse_model

from ..core import (
    ConverterSession,
    HistoryEntryNotFoundError,
    SessionLimitError,
    SessionNotFoundError,
    SwapRejectedError,
    UnknownCategoryError,
    UnknownRuleError,
    configure_session_store,
    convert_once,
    delete_session,
    get_session,
    list_catalog,
    new_session,
)


class CustomPayload(SchemaModel):
    from_unit: str = ""
    to_unit: str = ""
    factor: str | float | int = ""


class ConvertPayload(SchemaModel):
    category: str
    value: str | float | int
    rule_index: int = 0
    swapped: bool = False
    custom: CustomPayload | None = None


class CategoryPayload(SchemaModel):
    category: str


class RulePayload(SchemaModel):
    index: int


class InputPayload(SchemaModel):
    value: str | float | int = ""


class CustomUpdatePayload(SchemaModel):
    from_unit: str | None = None
    to_unit: str | None = None
    factor: str | float | int | None = None


api_bp = Blueprint("unit_converter_api", __name__, url_prefix="/api/unit_converter")


def _settings() -> Mapping[str, Any]:
    return current_app.config.get("PLUGIN_SETTINGS", {}).get("unit_converter", {}) or {}


def _session_limits(settings: Mapping[str, Any]) -> tuple[int, timedelta]:
    try:
        max_sessions = int(settings.get("max_sessions", 64))
    except (TypeError, ValueError):
        max_sessions = 64
    try:
        ttl_minutes = float(settings.get("session_ttl_minutes", 30))
    except (TypeError, ValueError):
        ttl_minutes = 30.0
    return max(max_sessions, 1), timedelta(minutes=max(ttl_minutes, 1.0))


def _as_text(value: str | float | int | None) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return repr(value) if isinstance(value, float) else str(value)


def _invalid_request(exc: ValidationError) -> Response:
    return fail(
        ValidationAppError(
            message=str(exc),
            code="unit.invalid_request",
            details=getattr(exc, "details", None),
        )
    )


def _session_error(exc: Exception) -> Response:
    if isinstance(exc, SessionNotFoundError):
        return fail(NotFoundAppError(message=str(exc), code="unit.session_not_found"))
    if isinstance(exc, HistoryEntryNotFoundError):
        return fail(NotFoundAppError(message=str(exc), code="unit.history_not_found"))
    if isinstance(exc, UnknownCategoryError):
        return fail(ValidationAppError(message=str(exc), code="unit.invalid_category"))
    if isinstance(exc, UnknownRuleError):
        return fail(ValidationAppError(message=str(exc), code="unit.invalid_rule"))
    if isinstance(exc, SwapRejectedError):
        return fail(
            ConflictAppError(
                message=exc.message,
                code="unit.swap_rejected",
                details={"title": exc.title},
            )
        )
    raise exc


def _apply(session_id: str, action: Callable[[ConverterSession], Any]) -> Response:
    try:
        session = get_session(session_id)
        action(session)
    except (
        SessionNotFoundError,
        HistoryEntryNotFoundError,
        UnknownCategoryError,
        UnknownRuleError,
        SwapRejectedError,
    ) as exc:
        return _session_error(exc)
    return ok(session.to_dict())


@api_bp.get("/categories")
def categories() -> Response:
    return ok({"categories": list_catalog()})


@api_bp.post("/convert")
def convert_endpoint() -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(ConvertPayload, raw_payload)
    except ValidationError as exc:
        return _invalid_request(exc)
    custom = payload.custom or CustomPayload()
    try:
        result = convert_once(
            _as_text(payload.value),
            payload.category,
            rule_index=payload.rule_index,
            swapped=payload.swapped,
            custom_from=custom.from_unit,
            custom_to=custom.to_unit,
            custom_factor=_as_text(custom.factor),
        )
    except UnknownCategoryError as exc:
        return fail(ValidationAppError(message=str(exc), code="unit.invalid_category"))
    except UnknownRuleError as exc:
        return fail(ValidationAppError(message=str(exc), code="unit.invalid_rule"))
    return ok(result)


@api_bp.post("/sessions")
def create_session() -> Response:
    max_sessions, ttl = _session_limits(_settings())
    configure_session_store(max_sessions, ttl)
    try:
        session = new_session()
    except SessionLimitError as exc:
        return fail(ValidationAppError(message=str(exc), code="unit.session_limit"))
    return ok(session.to_dict(), status=201)


@api_bp.get("/sessions/<session_id>")
def session_state(session_id: str) -> Response:
    return _apply(session_id, lambda session: None)


@api_bp.delete("/sessions/<session_id>")
def remove_session(session_id: str) -> Response:
    if not delete_session(session_id):
        return _session_error(SessionNotFoundError("Session expired or not found"))
    return ok({"session_id": session_id, "deleted": True})


@api_bp.post("/sessions/<session_id>/category")
def select_category(session_id: str) -> Response:
    try:
        payload = parse_model(CategoryPayload, request.get_json(silent=True) or {})
    except ValidationError as exc:
        return _invalid_request(exc)
    return _apply(session_id, lambda session: session.select_category(payload.category))


@api_bp.post("/sessions/<session_id>/rule")
def select_rule(session_id: str) -> Response:
    try:
        payload = parse_model(RulePayload, request.get_json(silent=True) or {})
    except ValidationError as exc:
        return _invalid_request(exc)
    return _apply(session_id, lambda session: session.select_rule(payload.index))


@api_bp.post("/sessions/<session_id>/input")
def set_input(session_id: str) -> Response:
    try:
        payload = parse_model(InputPayload, request.get_json(silent=True) or {})
    except ValidationError as exc:
        return _invalid_request(exc)
    return _apply(session_id, lambda session: session.set_input(_as_text(payload.value)))


@api_bp.post("/sessions/<session_id>/custom")
def update_custom(session_id: str) -> Response:
    try:
        payload = parse_model(CustomUpdatePayload, request.get_json(silent=True) or {})
    except ValidationError as exc:
        return _invalid_request(exc)

    def _update(session: ConverterSession) -> None:
        if payload.from_unit is not None or payload.to_unit is not None:
            session.set_custom_units(payload.from_unit, payload.to_unit)
        if payload.factor is not None:
            session.set_custom_factor(_as_text(payload.factor))

    return _apply(session_id, _update)


@api_bp.post("/sessions/<session_id>/swap")
def swap_direction(session_id: str) -> Response:
    return _apply(session_id, lambda session: session.swap())


@api_bp.delete("/sessions/<session_id>/history")
def clear_history(session_id: str) -> Response:
    return _apply(session_id, lambda session: session.clear_history())


@api_bp.post("/sessions/<session_id>/history/<entry_id>/recall")
def recall_history(session_id: str, entry_id: str) -> Response:
    return _apply(session_id, lambda session: session.recall(entry_id))


blueprints = [api_bp]


__all__ = [
    "blueprints",
    "categories",
    "convert_endpoint",
    "create_session",
    "session_state",
    "remove_session",
    "select_category",
    "select_rule",
    "set_input",
    "update_custom",
    "swap_direction",
    "clear_history",
    "recall_history",
]
