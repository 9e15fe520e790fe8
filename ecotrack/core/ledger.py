"""History Ledger - One saved entry per calendar date, newest first."""

import logging
from datetime import date
from typing import Iterable

from .errors import StateInvariantViolation
from .models import HistoryEntry


logger = logging.getLogger(__name__)


def _sorted_newest_first(entries: Iterable[HistoryEntry]) -> list[HistoryEntry]:
    return sorted(entries, key=lambda e: e.entry_date, reverse=True)


class HistoryLedger:
    """In-memory collection of history entries keyed by date.

    Every mutation builds a new list and swaps it in, so readers never see a
    half-applied upsert.
    """

    def __init__(self, entries: Iterable[HistoryEntry] = ()) -> None:
        """Initialize the ledger.

        Args:
            entries: Existing entries in any order

        Raises:
            StateInvariantViolation: If two entries share a date
        """
        entries = list(entries)
        dates = [e.entry_date for e in entries]
        if len(set(dates)) != len(dates):
            raise StateInvariantViolation("History ledger contains duplicate dates")
        self._entries: list[HistoryEntry] = _sorted_newest_first(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def upsert(self, entry: HistoryEntry) -> None:
        """Insert an entry, replacing any entry with the same date."""
        kept = [e for e in self._entries if e.entry_date != entry.entry_date]
        if len(kept) != len(self._entries):
            logger.debug("Replacing history entry for %s", entry.entry_date)
        kept.append(entry)
        self._entries = _sorted_newest_first(kept)

    def remove_by_date(self, day: date) -> bool:
        """Remove the entry for a date.

        Args:
            day: Date of the entry to remove

        Returns:
            True if an entry was removed, False if none existed
        """
        kept = [e for e in self._entries if e.entry_date != day]
        removed = len(kept) != len(self._entries)
        self._entries = kept
        return removed

    def clear(self) -> None:
        """Remove every entry."""
        self._entries = []

    def get(self, day: date) -> HistoryEntry | None:
        """Get the entry for a date, if any."""
        return next((e for e in self._entries if e.entry_date == day), None)

    def list(self, limit: int | None = None) -> list[HistoryEntry]:
        """List entries, newest first.

        Args:
            limit: Maximum number of entries (None for all)

        Returns:
            Copy of the entries, sorted by date descending
        """
        if limit is None:
            return list(self._entries)
        return self._entries[:max(limit, 0)]
