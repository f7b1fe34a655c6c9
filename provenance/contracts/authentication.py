"""
authentication.py - Authentication Code Registry

Per-unit authentication codes that consumers, pharmacies and inspectors scan to
check that a product is genuine.

1. generate_authentication_code() - issue a code for a batch/product (any caller)
2. verify_authentication_code() - record a scan and return what the code belongs to
3. invalidate_authentication_code() - admin-only, one-way revocation

Invariants:
    - is_valid only ever goes True -> False
    - verification_count on the record == verification history count
    - history entry i was written by the (i+1)-th accepted verification
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import List, Optional

from ..core import (
    AUTHENTICATION, ErrorCode, Principal, BlockHeight,
    NotFound, InvalidState,
)
from ..context import CallContext
from ..contract import Contract
from ..history import HistoryLog
from ..store import RecordStore


@dataclass(frozen=True, slots=True)
class AuthenticationCode:
    """
    Authentication code record.

    Attributes:
        batch_id: Batch the unit belongs to (set once)
        product_id: Product identifier (set once)
        is_valid: False once an admin has revoked the code
        verification_count: Number of accepted verifications
    """
    batch_id: str
    product_id: str
    is_valid: bool = True
    verification_count: int = 0


@dataclass(frozen=True, slots=True)
class VerificationEntry:
    """One accepted scan of a code."""
    verifier: Principal
    timestamp: BlockHeight
    location: str


@dataclass(frozen=True, slots=True)
class VerificationResult:
    """Value returned by a successful verification."""
    batch_id: str
    product_id: str
    verification_count: int


class Authentication(Contract):
    """
    Authentication code contract.

    Example:
        chain.call(AUTHENTICATION, "generate_authentication_code", "AUTH1", "BATCH001", "PROD001")
        result = chain.call(AUTHENTICATION, "verify_authentication_code", "AUTH1", "Pharmacy A")
        result.value.verification_count  # 1
    """

    name = AUTHENTICATION
    ERRORS = {
        ErrorCode.NOT_AUTHORIZED: 100,
        ErrorCode.CODE_EXISTS: 101,
        ErrorCode.CODE_NOT_FOUND: 102,
        ErrorCode.CODE_INVALID: 103,
    }
    PUBLIC_FUNCTIONS = (
        "generate_authentication_code",
        "verify_authentication_code",
        "invalidate_authentication_code",
    )
    READ_ONLY_FUNCTIONS = (
        "get_authentication_info",
        "get_verification_history",
        "get_verification_count",
        "get_verification_log",
    )

    def __init__(self):
        super().__init__()
        self.codes = RecordStore("authentication-codes")
        self.history = HistoryLog("verification-history")

    def stores(self) -> List[RecordStore]:
        return [self.codes, *self.history.stores]

    # ========================================================================
    # PUBLIC FUNCTIONS
    # ========================================================================

    def generate_authentication_code(
        self,
        ctx: CallContext,
        code: str,
        batch_id: str,
        product_id: str,
    ) -> bool:
        """
        Issue a new, valid authentication code.

        Any principal may generate codes.

        Raises:
            AlreadyExists (CODE_EXISTS): If the code was already issued
        """
        record = AuthenticationCode(batch_id=batch_id, product_id=product_id)
        self.codes.create(code, record, error=ErrorCode.CODE_EXISTS)
        return True

    def verify_authentication_code(
        self,
        ctx: CallContext,
        code: str,
        location: str,
    ) -> VerificationResult:
        """
        Record a verification scan of a code.

        Args:
            ctx: Caller (recorded as verifier) and clock (recorded as timestamp)
            code: Code being scanned
            location: Free-form location label

        Returns:
            VerificationResult with the post-increment verification_count

        Raises:
            NotFound (CODE_NOT_FOUND): If the code was never issued
            InvalidState (CODE_INVALID): If the code has been invalidated
        """
        record = self._get_code(code)
        if not record.is_valid:
            raise InvalidState(f"Code {code} has been invalidated", code=ErrorCode.CODE_INVALID)

        new_count = record.verification_count + 1
        self.codes.replace(code, replace(record, verification_count=new_count))
        self.history.append(code, VerificationEntry(
            verifier=ctx.sender,
            timestamp=ctx.block_height,
            location=location,
        ))
        return VerificationResult(
            batch_id=record.batch_id,
            product_id=record.product_id,
            verification_count=new_count,
        )

    def invalidate_authentication_code(self, ctx: CallContext, code: str) -> bool:
        """
        Permanently invalidate a code. Admin only.

        Invalidating an already-invalid code succeeds and changes nothing.

        Raises:
            NotFound (CODE_NOT_FOUND): If the code was never issued
            NotAuthorized: If the caller is not the admin
        """
        record = self._get_code(code)
        self.admin.require(ctx)
        if record.is_valid:
            self.codes.replace(code, replace(record, is_valid=False))
        return True

    def _get_code(self, code: str) -> AuthenticationCode:
        record = self.codes.get(code)
        if record is None:
            raise NotFound(f"Code {code} not found", code=ErrorCode.CODE_NOT_FOUND)
        return record

    # ========================================================================
    # READ-ONLY FUNCTIONS
    # ========================================================================

    def get_authentication_info(self, code: str) -> Optional[AuthenticationCode]:
        return self.codes.get(code)

    def get_verification_history(self, code: str, index: int) -> Optional[VerificationEntry]:
        return self.history.read(code, index)

    def get_verification_count(self, code: str) -> int:
        """Number of verification history entries for code (0 if unknown)."""
        return self.history.count(code)

    def get_verification_log(self, code: str) -> List[VerificationEntry]:
        return self.history.entries(code)
