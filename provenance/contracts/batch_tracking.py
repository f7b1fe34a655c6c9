"""
batch_tracking.py - Batch Custody State Machine

This module tracks product batches from production through every custody hand-off:
1. Batch / BatchHistoryEntry - immutable records
2. BatchTracking.register_batch() - create a batch owned by its manufacturer
3. BatchTracking.transfer_batch() - hand custody to a new principal
4. Read-only queries over the batch record and its history log

Lifecycle:
    unregistered --register_batch--> produced --transfer_batch--> <action> --> ...

The status is whatever action string the custodian supplies on transfer; it is
opaque data, not a closed set. The manufacturer is fixed at registration.

Invariants:
    - current_custodian is the new_custodian of the most recent accepted
      transfer, or the manufacturer if there was none
    - history index 0 is always {custodian: manufacturer, action: "produced"}
    - history count == 1 + number of accepted transfers
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Any, List, Optional

from ..core import (
    BATCH_TRACKING, ErrorCode, Principal, BlockHeight,
    NotFound,
)
from ..context import CallContext
from ..contract import Contract
from ..guards import require_custodian
from ..history import HistoryLog
from ..store import RecordStore


# Status assigned at registration and action label of history entry 0.
BATCH_STATUS_PRODUCED = "produced"


@dataclass(frozen=True, slots=True)
class Batch:
    """
    Product batch record.

    Attributes:
        manufacturer: Principal that registered the batch (never changes)
        product_id: Product identifier
        production_date: Opaque ordinal value, not checked against the clock
        expiry_date: Opaque ordinal value, not checked against the clock
        current_custodian: Principal accountable for the batch right now
        status: Last action label ("produced", "shipped", ...)
    """
    manufacturer: Principal
    product_id: str
    production_date: Any
    expiry_date: Any
    current_custodian: Principal
    status: str


@dataclass(frozen=True, slots=True)
class BatchHistoryEntry:
    """One custody event: who holds the batch after the event, and why."""
    timestamp: BlockHeight
    custodian: Principal
    action: str


class BatchTracking(Contract):
    """
    Batch custody contract.

    Example:
        chain.call(BATCH_TRACKING, "register_batch", "BATCH001", "PROD001", 20230101, 20250101)
        chain.call(BATCH_TRACKING, "transfer_batch", "BATCH001", "distributor", "shipped")
        chain.read(BATCH_TRACKING, "get_batch_info", "BATCH001").current_custodian  # "distributor"
    """

    name = BATCH_TRACKING
    ERRORS = {
        ErrorCode.NOT_AUTHORIZED: 100,
        ErrorCode.BATCH_EXISTS: 101,
        ErrorCode.BATCH_NOT_FOUND: 102,
        ErrorCode.NOT_CURRENT_CUSTODIAN: 103,
    }
    PUBLIC_FUNCTIONS = ("register_batch", "transfer_batch")
    READ_ONLY_FUNCTIONS = (
        "get_batch_info", "get_batch_history_entry", "get_history_count", "get_batch_history",
    )

    def __init__(self):
        super().__init__()
        self.batches = RecordStore("batches")
        self.history = HistoryLog("batch-history")

    def stores(self) -> List[RecordStore]:
        return [self.batches, *self.history.stores]

    # ========================================================================
    # PUBLIC FUNCTIONS
    # ========================================================================

    def register_batch(
        self,
        ctx: CallContext,
        batch_id: str,
        product_id: str,
        production_date: Any,
        expiry_date: Any,
    ) -> bool:
        """
        Register a new batch with the caller as manufacturer and first custodian.

        Args:
            ctx: Caller and clock
            batch_id: Unique batch identifier
            product_id: Product identifier
            production_date: Opaque ordinal value
            expiry_date: Opaque ordinal value

        Returns:
            True

        Raises:
            AlreadyExists (BATCH_EXISTS): If batch_id is already registered
        """
        batch = Batch(
            manufacturer=ctx.sender,
            product_id=product_id,
            production_date=production_date,
            expiry_date=expiry_date,
            current_custodian=ctx.sender,
            status=BATCH_STATUS_PRODUCED,
        )
        self.batches.create(batch_id, batch, error=ErrorCode.BATCH_EXISTS)
        self.history.append(batch_id, BatchHistoryEntry(
            timestamp=ctx.block_height,
            custodian=ctx.sender,
            action=BATCH_STATUS_PRODUCED,
        ))
        return True

    def transfer_batch(
        self,
        ctx: CallContext,
        batch_id: str,
        new_custodian: Principal,
        action: str,
    ) -> bool:
        """
        Hand custody of a batch to new_custodian and set its status to action.

        Raises:
            NotFound (BATCH_NOT_FOUND): If batch_id is not registered
            NotCurrentCustodian: If the caller does not hold the batch
        """
        batch = self.batches.get(batch_id)
        if batch is None:
            raise NotFound(f"Batch {batch_id} not found", code=ErrorCode.BATCH_NOT_FOUND)
        require_custodian(ctx.sender, batch.current_custodian)

        self.batches.replace(batch_id, replace(batch, current_custodian=new_custodian, status=action))
        self.history.append(batch_id, BatchHistoryEntry(
            timestamp=ctx.block_height,
            custodian=new_custodian,
            action=action,
        ))
        return True

    # ========================================================================
    # READ-ONLY FUNCTIONS
    # ========================================================================

    def get_batch_info(self, batch_id: str) -> Optional[Batch]:
        return self.batches.get(batch_id)

    def get_batch_history_entry(self, batch_id: str, index: int) -> Optional[BatchHistoryEntry]:
        return self.history.read(batch_id, index)

    def get_history_count(self, batch_id: str) -> int:
        return self.history.count(batch_id)

    def get_batch_history(self, batch_id: str) -> List[BatchHistoryEntry]:
        """Full custody trail of a batch, oldest first."""
        return self.history.entries(batch_id)
