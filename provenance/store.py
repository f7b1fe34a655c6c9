"""
store.py - Keyed Record Store

A RecordStore is one addressable map from a key to a record value. Each record
family (batches, codes, thresholds, history entries, counters) gets its own
store, so keys from different domains can never collide. Composite keys are
tuples such as (batch_id, index); keys are never built by string concatenation.

Write semantics:
    create()  - insert, fails with AlreadyExists if the key is present
    replace() - overwrite, fails with NotFound if the key is absent
    put()     - upsert, never fails
    delete()  - remove, fails with NotFound if the key is absent

Every write is reported to the Journal the store is bound to. The Journal
brackets a single chain call so that a rejected call can be rolled back
completely, and so that an accepted call carries the exact list of
StateChange records it produced.
"""

from __future__ import annotations
from dataclasses import dataclass, fields, is_dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .core import (
    RecordKey, ErrorCode,
    AlreadyExists, NotFound, ProvenanceError,
)


# ============================================================================
# STATE CHANGE
# ============================================================================

@dataclass(frozen=True, slots=True)
class StateChange:
    """
    Record of one store write, for receipts and rollback.

    Attributes:
        store: Name of the store that was written
        key: Key that was written
        old_value: Value before the write (None if the key was absent)
        new_value: Value after the write (None if the key was deleted)
    """
    store: str
    key: RecordKey
    old_value: Any
    new_value: Any

    def changed_fields(self) -> Dict[str, Tuple[Any, Any]]:
        """
        Compute fields that differ between old and new value.

        Dataclass records are compared field by field; anything else is
        reported under the pseudo-field "value".

        Returns:
            Dict mapping field name to (old_value, new_value) tuples.
        """
        old_fields = _as_fields(self.old_value)
        new_fields = _as_fields(self.new_value)
        changes = {}
        for name in list(old_fields) + [n for n in new_fields if n not in old_fields]:
            old_val = old_fields.get(name)
            new_val = new_fields.get(name)
            if old_val != new_val:
                changes[name] = (old_val, new_val)
        return changes

    def __repr__(self) -> str:
        return f"StateChange({self.store}[{self.key!r}]: {self.old_value!r} → {self.new_value!r})"


def _as_fields(value: Any) -> Dict[str, Any]:
    if value is None:
        return {}
    if is_dataclass(value):
        return {f.name: getattr(value, f.name) for f in fields(value)}
    return {"value": value}


# ============================================================================
# JOURNAL
# ============================================================================

class Journal:
    """
    Write journal shared by every store of a chain.

    Lifecycle of one call:
        journal.begin()
        ... contract writes through its stores ...
        changes = journal.commit()     # accepted
        changes = journal.rollback()   # rejected, every write undone

    Writes made while no call is open (e.g. seeding state in tests) are
    applied but not recorded.
    """

    def __init__(self):
        self._pending: Optional[List[Tuple[RecordStore, StateChange]]] = None

    @property
    def active(self) -> bool:
        return self._pending is not None

    def begin(self) -> None:
        if self._pending is not None:
            raise ProvenanceError("Journal already has an open call")
        self._pending = []

    def record(self, store: RecordStore, change: StateChange) -> None:
        if self._pending is not None:
            self._pending.append((store, change))

    def commit(self) -> Tuple[StateChange, ...]:
        """Close the open call, keeping its writes. Returns the writes in order."""
        pending = self._close()
        return tuple(change for _, change in pending)

    def rollback(self) -> Tuple[StateChange, ...]:
        """Close the open call, undoing its writes in reverse order. Returns the undone writes."""
        pending = self._close()
        for store, change in reversed(pending):
            store._restore(change.key, change.old_value)
        return tuple(change for _, change in pending)

    def _close(self) -> List[Tuple[RecordStore, StateChange]]:
        if self._pending is None:
            raise ProvenanceError("Journal has no open call")
        pending = self._pending
        self._pending = None
        return pending


# ============================================================================
# RECORD STORE
# ============================================================================

class RecordStore:
    """
    Addressable map from a key to a record value.

    Values are expected to be immutable (frozen dataclasses or scalars); a
    record is updated by building a new value with dataclasses.replace() and
    passing it to replace(). Entries are never evicted.

    Iteration follows insertion order, which is deterministic because the
    chain executes one call at a time.

    Example:
        batches = RecordStore("batches")
        batches.create("BATCH001", batch, error=ErrorCode.BATCH_EXISTS)
        batch = batches.get("BATCH001")
        batches.replace("BATCH001", replace(batch, status="shipped"))
    """

    def __init__(self, name: str, journal: Optional[Journal] = None):
        self.name = name
        self._records: Dict[RecordKey, Any] = {}
        self._journal = journal

    def bind(self, journal: Journal) -> None:
        """Attach the journal that records this store's writes."""
        self._journal = journal

    # ------------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------------

    def get(self, key: RecordKey) -> Optional[Any]:
        """Return the value at key, or None if absent. Never raises."""
        return self._records.get(key)

    def __contains__(self, key: RecordKey) -> bool:
        return key in self._records

    def __len__(self) -> int:
        return len(self._records)

    def keys(self) -> List[RecordKey]:
        return list(self._records.keys())

    def items(self) -> Iterator[Tuple[RecordKey, Any]]:
        return iter(list(self._records.items()))

    # ------------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------------

    def create(self, key: RecordKey, value: Any, error: ErrorCode = ErrorCode.ALREADY_EXISTS) -> bool:
        """
        Insert a new record.

        Args:
            key: Record key
            value: Record value
            error: Code reported if the key is already present

        Returns:
            True

        Raises:
            AlreadyExists: If key is already present (store unchanged)
        """
        if key in self._records:
            raise AlreadyExists(f"{self.name}: {key!r} already exists", code=error)
        self._write(key, None, value)
        return True

    def replace(self, key: RecordKey, value: Any, error: ErrorCode = ErrorCode.NOT_FOUND) -> bool:
        """
        Overwrite an existing record.

        Raises:
            NotFound: If key is absent (store unchanged)
        """
        if key not in self._records:
            raise NotFound(f"{self.name}: {key!r} not found", code=error)
        self._write(key, self._records[key], value)
        return True

    def put(self, key: RecordKey, value: Any) -> None:
        """Insert or overwrite a record."""
        self._write(key, self._records.get(key), value)

    def delete(self, key: RecordKey, error: ErrorCode = ErrorCode.NOT_FOUND) -> bool:
        """
        Remove a record.

        Raises:
            NotFound: If key is absent (store unchanged)
        """
        if key not in self._records:
            raise NotFound(f"{self.name}: {key!r} not found", code=error)
        old_value = self._records.pop(key)
        self._log(key, old_value, None)
        return True

    def _write(self, key: RecordKey, old_value: Any, new_value: Any) -> None:
        self._records[key] = new_value
        self._log(key, old_value, new_value)

    def _log(self, key: RecordKey, old_value: Any, new_value: Any) -> None:
        if self._journal is not None:
            self._journal.record(self, StateChange(self.name, key, old_value, new_value))

    def _restore(self, key: RecordKey, old_value: Any) -> None:
        # Rollback path: bypasses the journal.
        if old_value is None:
            self._records.pop(key, None)
        else:
            self._records[key] = old_value

    def __repr__(self) -> str:
        return f"RecordStore({self.name}, {len(self._records)} records)"
