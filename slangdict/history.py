"""
slangdict/history.py

Search history: newest-first log of (query, kind, result keys).
Entries are frozen and hold copies of the matched keys, so later edits to the
dictionary never change what an entry says was found.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from slangdict.utils import load_json, write_json

logger = logging.getLogger(__name__)


class SearchKind(str, Enum):
    BY_WORD = "BY_WORD"
    BY_DEFINITION = "BY_DEFINITION"


@dataclass(frozen=True)
class HistoryEntry:
    query: str
    kind: SearchKind
    result_keys: tuple[str, ...] = ()

    def __str__(self):
        results = ", ".join(self.result_keys) if self.result_keys else "(no results)"
        return f'{self.kind.value}: "{self.query}" -> {results}'


class SearchHistory:
    """
    Ordered log of past searches, newest first.

    Growth is unbounded unless `max_entries` is given, in which case the oldest
    entries are dropped as new ones arrive.
    """

    def __init__(self, max_entries: int | None = None):
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self._entries: list[HistoryEntry] = []

    def record(self, query, kind: SearchKind, result_keys=()) -> HistoryEntry:
        entry = HistoryEntry(
            query=query if query is not None else "",
            kind=SearchKind(kind),
            result_keys=tuple(result_keys or ()),
        )
        self._entries.insert(0, entry)
        if self.max_entries is not None:
            del self._entries[self.max_entries:]
        return entry

    def entries(self) -> tuple[HistoryEntry, ...]:
        return tuple(self._entries)

    def delete_at(self, index: int) -> bool:
        if not isinstance(index, int) or index < 0 or index >= len(self._entries):
            return False
        del self._entries[index]
        return True

    def clear(self) -> None:
        self._entries.clear()

    # persistence ---------------------------------------------------------

    def to_records(self) -> list[dict]:
        return [
            {"query": e.query, "kind": e.kind.value, "result_keys": list(e.result_keys)}
            for e in self._entries
        ]

    @classmethod
    def from_records(cls, records, max_entries: int | None = None) -> "SearchHistory":
        hist = cls(max_entries=max_entries)
        if not isinstance(records, list):
            raise ValueError("history must be a list of entries")
        for r in records:
            if not isinstance(r, dict):
                raise ValueError(f"bad history entry: {r!r}")
            query = r.get("query") or ""
            result_keys = r.get("result_keys") or []
            if not isinstance(query, str) or not isinstance(result_keys, list):
                raise ValueError(f"bad history entry: {r!r}")
            hist._entries.append(HistoryEntry(
                query=query,
                kind=SearchKind(r.get("kind")),
                result_keys=tuple(str(k) for k in result_keys),
            ))
        if max_entries is not None:
            del hist._entries[max_entries:]
        return hist

    def save(self, path: str) -> None:
        write_json(self.to_records(), path)
        logger.info("History saved: %d entries to %s", len(self._entries), path)

    @classmethod
    def load(cls, path: str, max_entries: int | None = None) -> "SearchHistory":
        """Missing file -> empty history."""
        records = load_json(path, default=[])
        hist = cls.from_records(records, max_entries=max_entries)
        logger.info("History loaded: %d entries from %s", len(hist), path)
        return hist

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        return iter(tuple(self._entries))

    def __getitem__(self, i):
        return self._entries[i]
