"""
manufacturer_verification.py - Verified Manufacturer Registry

Admin-managed set of manufacturers that have passed verification. Presence in
the store means verified; absence means unverified. No history is kept.

Also exposes transfer_admin(), the only way to move the chain-wide admin role.
"""

from __future__ import annotations
from typing import List

from ..core import MANUFACTURER_VERIFICATION, ErrorCode, Principal
from ..context import CallContext
from ..contract import Contract
from ..store import RecordStore


class ManufacturerVerification(Contract):
    """Manufacturer verification contract."""

    name = MANUFACTURER_VERIFICATION
    ERRORS = {
        ErrorCode.NOT_AUTHORIZED: 100,
        ErrorCode.ALREADY_VERIFIED: 101,
        ErrorCode.MANUFACTURER_NOT_FOUND: 102,
    }
    PUBLIC_FUNCTIONS = ("verify_manufacturer", "revoke_verification", "transfer_admin")
    READ_ONLY_FUNCTIONS = ("is_verified", "get_admin")

    def __init__(self):
        super().__init__()
        self.verified = RecordStore("verified-manufacturers")

    def stores(self) -> List[RecordStore]:
        return [self.verified]

    def verify_manufacturer(self, ctx: CallContext, manufacturer: Principal) -> bool:
        """
        Mark a manufacturer as verified. Admin only.

        Raises:
            NotAuthorized: If the caller is not the admin
            AlreadyExists (ALREADY_VERIFIED): If already verified
        """
        self.admin.require(ctx)
        self.verified.create(manufacturer, True, error=ErrorCode.ALREADY_VERIFIED)
        return True

    def revoke_verification(self, ctx: CallContext, manufacturer: Principal) -> bool:
        """
        Remove a manufacturer's verification. Admin only.

        Raises:
            NotAuthorized: If the caller is not the admin
            NotFound (MANUFACTURER_NOT_FOUND): If not currently verified
        """
        self.admin.require(ctx)
        self.verified.delete(manufacturer, error=ErrorCode.MANUFACTURER_NOT_FOUND)
        return True

    def transfer_admin(self, ctx: CallContext, new_admin: Principal) -> bool:
        """
        Hand the admin role to new_admin. Admin only.

        Raises:
            NotAuthorized: If the caller is not the admin
        """
        return self.admin.transfer(ctx, new_admin)

    def is_verified(self, manufacturer: Principal) -> bool:
        return manufacturer in self.verified

    def get_admin(self) -> Principal:
        return self.admin.holder
