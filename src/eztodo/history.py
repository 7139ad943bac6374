from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from threading import RLock
from typing import Callable, List, Optional, Union

from . import codec
from .ids import IdAllocator
from .models import HistoryEntry, HistoryEvent, SubjectKind

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class HistoryLedger:
    """
    Append-only record of completions and generated plan occurrences.

    When `path` is None the ledger lives in memory only. Entries are never
    updated or removed, and their subject ids are weak references.
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        self._lock = RLock()
        self._path = Path(path) if path is not None else None
        self._clock = clock or datetime.now
        self._entries: List[HistoryEntry] = codec.load(self._path, HistoryEntry) if self._path else []
        self._allocate_id = IdAllocator(id_factory, (e.id for e in self._entries))

    def append(
        self,
        subject_kind: SubjectKind,
        subject_id: str,
        event: HistoryEvent,
        title: str = "",
        occurred_at: Optional[datetime] = None,
    ) -> HistoryEntry:
        """
        Record one event. Raises PersistenceError (leaving the ledger unchanged)
        when the ledger file cannot be written.
        """
        with self._lock:
            entry = HistoryEntry(
                id=self._allocate_id(),
                subject_kind=subject_kind,
                subject_id=subject_id,
                event=event,
                title=title,
                occurred_at=occurred_at or self._clock(),
            )
            entries = [*self._entries, entry]
            if self._path is not None:
                codec.save(self._path, entries, HistoryEntry)
            self._entries = entries
            logger.debug("History: %s %s %s", event.value, subject_kind.value, subject_id)
            return entry.model_copy()

    def list(self) -> List[HistoryEntry]:
        """Entries ordered by occurred_at; equal timestamps keep insertion order."""
        with self._lock:
            return [e.model_copy() for e in sorted(self._entries, key=lambda e: e.occurred_at)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
