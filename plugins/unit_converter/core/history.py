"""Bounded, most-recent-first history of successful conversions."""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterator, Optional

HISTORY_LIMIT = 10


class HistoryEntryNotFoundError(KeyError):
    """Raised when a history entry id is unknown."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "History entry not found"


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """Immutable record of one successful conversion."""

    id: str
    sequence: int
    timestamp: datetime
    input_value: str
    input_unit: str
    result_value: str
    output_unit: str
    category_label: str

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "input_value": self.input_value,
            "input_unit": self.input_unit,
            "result_value": self.result_value,
            "output_unit": self.output_unit,
            "category": self.category_label,
        }


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConversionHistory:
    """Most-recent-first list of :class:`HistoryEntry` capped at ``limit``."""

    def __init__(
        self,
        limit: int = HISTORY_LIMIT,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if limit < 1:
            raise ValueError("History limit must be positive.")
        self.limit = limit
        self._clock = clock
        self._sequence = itertools.count(1)
        self._entries: list[HistoryEntry] = []

    def record(
        self,
        *,
        input_value: str,
        input_unit: str,
        result_value: str,
        output_unit: str,
        category_label: str,
    ) -> HistoryEntry:
        sequence = next(self._sequence)
        entry = HistoryEntry(
            id=f"h{sequence}",
            sequence=sequence,
            timestamp=self._clock(),
            input_value=input_value,
            input_unit=input_unit,
            result_value=result_value,
            output_unit=output_unit,
            category_label=category_label,
        )
        self._entries.insert(0, entry)
        del self._entries[self.limit :]
        return entry

    def clear(self) -> None:
        self._entries.clear()

    def get(self, entry_id: str) -> HistoryEntry:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        raise HistoryEntryNotFoundError(f"History entry '{entry_id}' not found")

    def latest(self) -> Optional[HistoryEntry]:
        return self._entries[0] if self._entries else None

    def entries(self) -> list[HistoryEntry]:
        return list(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)


__all__ = [
    "ConversionHistory",
    "HISTORY_LIMIT",
    "HistoryEntry",
    "HistoryEntryNotFoundError",
]
