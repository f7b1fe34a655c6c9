"""
history.py - Append-only History Log

A HistoryLog is a per-entity ordered sequence of audit events addressed by
(entity_id, index), paired with a per-entity counter.

Invariants:
    - count(entity) is 0 until the first append for that entity
    - append() writes at index count(entity) and then stores count + 1
    - entries exist at every index in [0, count) and nowhere else
    - entries are never overwritten or removed

Callers must append only after every guard of the originating operation has
passed; the log itself does not check authorization.
"""

from __future__ import annotations
from typing import Any, List, Optional

from .core import RecordKey, ErrorCode
from .store import Journal, RecordStore


class HistoryLog:
    """
    Append-only, gap-free event log keyed by entity.

    Backed by two RecordStores: "<name>-entries" keyed by (entity_id, index)
    and "<name>-counts" keyed by entity_id.

    Example:
        log = HistoryLog("batch-history")
        log.append("BATCH001", entry)   # -> 0
        log.append("BATCH001", entry2)  # -> 1
        log.count("BATCH001")           # -> 2
        log.read("BATCH001", 1)         # -> entry2
    """

    def __init__(self, name: str, journal: Optional[Journal] = None):
        self.name = name
        self._entries = RecordStore(f"{name}-entries", journal)
        self._counts = RecordStore(f"{name}-counts", journal)

    @property
    def stores(self) -> List[RecordStore]:
        return [self._entries, self._counts]

    def append(self, entity_id: RecordKey, event: Any) -> int:
        """
        Append an event at the entity's next index.

        Args:
            entity_id: Entity the event belongs to
            event: Immutable event record

        Returns:
            The index the event was written at
        """
        index = self.count(entity_id)
        # create() guards against overwriting, which would mean the counter drifted
        self._entries.create((entity_id, index), event, error=ErrorCode.INVALID_STATE)
        self._counts.put(entity_id, index + 1)
        return index

    def read(self, entity_id: RecordKey, index: int) -> Optional[Any]:
        """Return the event at (entity_id, index), or None."""
        return self._entries.get((entity_id, index))

    def count(self, entity_id: RecordKey) -> int:
        """Return the number of events appended for entity_id (0 if none)."""
        return self._counts.get(entity_id) or 0

    def entries(self, entity_id: RecordKey) -> List[Any]:
        """Return every event for entity_id in index order."""
        return [self._entries.get((entity_id, i)) for i in range(self.count(entity_id))]

    def __repr__(self) -> str:
        return f"HistoryLog({self.name}, {len(self._counts)} entities, {len(self._entries)} entries)"
