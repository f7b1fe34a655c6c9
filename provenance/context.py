"""
context.py - Identity Context

Every mutating contract function receives a CallContext describing who is
calling and at what logical time. Contracts read it; only the Chain creates it.
"""

from __future__ import annotations
from dataclasses import dataclass

from .core import Principal, BlockHeight


@dataclass(frozen=True, slots=True)
class CallContext:
    """
    Immutable per-invocation identity and clock.

    Attributes:
        sender: The already-authenticated calling principal (tx-sender).
        block_height: Logical clock value at the time of the call. Used as the
                      timestamp of every history entry and reading the call writes.
    """
    sender: Principal
    block_height: BlockHeight

    def __post_init__(self):
        if not isinstance(self.block_height, int) or isinstance(self.block_height, bool):
            raise ValueError(f"block_height must be an int, got {type(self.block_height)}")
        if self.block_height < 0:
            raise ValueError(f"block_height cannot be negative, got {self.block_height}")

    def __repr__(self) -> str:
        return f"CallContext({self.sender}@{self.block_height})"
