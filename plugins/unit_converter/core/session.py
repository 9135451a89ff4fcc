"""Converter screen state and the in-memory registry of active screens."""

from __future__ import annotations

import threading
import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from common.logging import get_logger

from .catalog import CUSTOM_CATEGORY_ID, lookup
from .engine import (
    CatalogSelection,
    CustomSelection,
    DisplayModel,
    Selection,
    SwapRejectedError,
    UnknownCategoryError,
    UnknownRuleError,
    compute_view,
    swap,
)
from .history import HISTORY_LIMIT, ConversionHistory

logger = get_logger("quickconvert.session")

DEFAULT_CATEGORY = "length"
DEFAULT_MAX_SESSIONS = 64
DEFAULT_SESSION_TTL = timedelta(minutes=30)


class SessionNotFoundError(KeyError):
    """Raised when a session id is unknown or expired."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "Session expired or not found"


class SessionLimitError(RuntimeError):
    """Raised when the store already holds the maximum number of sessions."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConverterSession:
    """Single converter screen: selection, raw input, result and history.

    Every event handler mutates the state and then recomputes the view
    synchronously. A history entry is only added when the selection or the
    trimmed input differs from the one seen on the previous recompute.
    """

    def __init__(self, session_id: str = "", *, history_limit: int = HISTORY_LIMIT) -> None:
        self.session_id = session_id
        self.created_at = _utcnow()
        self.last_accessed = self.created_at
        self.selection: Selection = CatalogSelection(DEFAULT_CATEGORY)
        self.raw_input = ""
        self.history = ConversionHistory(history_limit)
        self._custom = CustomSelection()
        self._last_key: Optional[tuple[Selection, str]] = None
        self.view: DisplayModel = self._recompute()

    def touch(self) -> None:
        self.last_accessed = _utcnow()

    def _recompute(self) -> DisplayModel:
        view = compute_view(self.selection, self.raw_input)
        record = view.record
        if record is None:
            self._last_key = None
        else:
            key = (self.selection, record.input_value)
            if key != self._last_key:
                self.history.record(
                    input_value=record.input_value,
                    input_unit=record.input_unit,
                    result_value=record.result_value,
                    output_unit=record.output_unit,
                    category_label=record.category_label,
                )
            self._last_key = key
        self.view = view
        return view

    # ---- Events ----------------------------------------------------------
    def select_category(self, category_id: str) -> DisplayModel:
        category = lookup(category_id)
        if category is None:
            raise UnknownCategoryError(f"Unknown category '{category_id}'.")
        if category.id == CUSTOM_CATEGORY_ID:
            self._custom = replace(self._custom, swapped=False)
            self.selection = self._custom
        else:
            self.selection = CatalogSelection(category.id)
        self.raw_input = ""
        return self._recompute()

    def select_rule(self, index: int) -> DisplayModel:
        if isinstance(self.selection, CustomSelection):
            raise UnknownRuleError("Custom conversions have no unit pairs to select.")
        category = lookup(self.selection.category_id)
        if category is None or not 0 <= index < len(category.rules):
            raise UnknownRuleError(f"Unit pair {index} does not exist in '{self.selection.category_id}'.")
        self.selection = CatalogSelection(category.id, index)
        self.raw_input = ""
        return self._recompute()

    def set_input(self, text: str) -> DisplayModel:
        self.raw_input = text or ""
        return self._recompute()

    def set_custom_units(
        self, from_unit: Optional[str] = None, to_unit: Optional[str] = None
    ) -> DisplayModel:
        changes: dict[str, Any] = {}
        if from_unit is not None:
            changes["from_unit"] = from_unit
        if to_unit is not None:
            changes["to_unit"] = to_unit
        return self._update_custom(**changes)

    def set_custom_factor(self, factor_text: str) -> DisplayModel:
        return self._update_custom(factor_text=factor_text or "")

    def _update_custom(self, **changes: Any) -> DisplayModel:
        if isinstance(self.selection, CustomSelection):
            self._custom = replace(self.selection, **changes)
            self.selection = self._custom
        else:
            self._custom = replace(self._custom, **changes)
        return self._recompute()

    def swap(self) -> DisplayModel:
        try:
            selection, raw_input = swap(self.selection, self.view.result.text)
        except SwapRejectedError as exc:
            logger.info("swap rejected for session %s: %s", self.session_id or "-", exc.title)
            raise
        self.selection = selection
        if isinstance(selection, CustomSelection):
            self._custom = selection
        self.raw_input = raw_input
        return self._recompute()

    def clear_history(self) -> None:
        self.history.clear()

    def recall(self, entry_id: str) -> DisplayModel:
        entry = self.history.get(entry_id)
        self.raw_input = entry.input_value
        return self._recompute()

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "view": self.view.to_dict(),
            "history": [entry.to_dict() for entry in self.history],
        }


class SessionStore:
    """Thread-safe in-memory session registry with TTL purging."""

    def __init__(
        self,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
        ttl: timedelta = DEFAULT_SESSION_TTL,
    ) -> None:
        self._items: dict[str, ConverterSession] = {}
        self._lock = threading.Lock()
        self.max_sessions = max_sessions
        self.ttl = ttl

    def configure(self, *, max_sessions: int, ttl: timedelta) -> None:
        with self._lock:
            self.max_sessions = max(1, max_sessions)
            self.ttl = ttl

    def _purge_locked(self) -> None:
        now = _utcnow()
        expired = [
            session_id
            for session_id, session in self._items.items()
            if now - session.last_accessed > self.ttl
        ]
        for session_id in expired:
            self._items.pop(session_id, None)
        if expired:
            logger.info("purged %d expired converter sessions", len(expired))

    def create(self) -> ConverterSession:
        session_id = uuid.uuid4().hex
        with self._lock:
            self._purge_locked()
            if len(self._items) >= self.max_sessions:
                raise SessionLimitError("Too many active sessions; try again later.")
            session = ConverterSession(session_id)
            self._items[session_id] = session
        logger.info("created converter session %s", session_id)
        return session

    def get(self, session_id: str) -> ConverterSession:
        with self._lock:
            self._purge_locked()
            try:
                session = self._items[session_id]
            except KeyError as exc:
                raise SessionNotFoundError("Session expired or not found") from exc
            session.touch()
            return session

    def delete(self, session_id: str) -> bool:
        with self._lock:
            return self._items.pop(session_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


_SESSION_STORE = SessionStore()


def configure_session_store(max_sessions: int, ttl: timedelta = DEFAULT_SESSION_TTL) -> None:
    _SESSION_STORE.configure(max_sessions=max_sessions, ttl=ttl)


def new_session() -> ConverterSession:
    return _SESSION_STORE.create()


def get_session(session_id: str) -> ConverterSession:
    return _SESSION_STORE.get(session_id)


def delete_session(session_id: str) -> bool:
    return _SESSION_STORE.delete(session_id)


def reset_session_store() -> None:
    _SESSION_STORE.clear()


__all__ = [
    "ConverterSession",
    "SessionLimitError",
    "SessionNotFoundError",
    "SessionStore",
    "configure_session_store",
    "delete_session",
    "get_session",
    "new_session",
    "reset_session_store",
]
