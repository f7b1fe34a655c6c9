"""
guards.py - Authorization Guards

Pure predicates evaluated before any mutation. A failing guard raises and the
operation stops before touching a store or a history log.

Also defines AdminRole, the single process-wide admin principal shared by the
contracts that have admin-only functions.
"""

from __future__ import annotations
from typing import List, Optional

from .core import Principal, NotAuthorized, NotCurrentCustodian
from .context import CallContext
from .store import Journal, RecordStore


def require_admin(current: Principal, admin: Principal) -> None:
    """
    Require that the caller is the admin.

    Raises:
        NotAuthorized: If current != admin
    """
    if current != admin:
        raise NotAuthorized(f"{current} is not the admin")


def require_custodian(current: Principal, custodian: Principal) -> None:
    """
    Require that the caller is the record's current custodian.

    Raises:
        NotCurrentCustodian: If current != custodian
    """
    if current != custodian:
        raise NotCurrentCustodian(f"{current} is not the current custodian ({custodian})")


class AdminRole:
    """
    Holder of the current admin principal.

    Only the current admin can hand the role to a new principal. No record of
    previous admins is kept. The value lives in a RecordStore so a transfer is
    journaled and rolled back like any other write.
    """

    _KEY = "admin"

    def __init__(self, admin: Principal, journal: Optional[Journal] = None):
        self._store = RecordStore("admin-role", journal)
        self._store.put(self._KEY, admin)

    @property
    def holder(self) -> Principal:
        return self._store.get(self._KEY)

    @property
    def stores(self) -> List[RecordStore]:
        return [self._store]

    def require(self, ctx: CallContext) -> None:
        """Raise NotAuthorized unless ctx.sender is the admin."""
        require_admin(ctx.sender, self.holder)

    def transfer(self, ctx: CallContext, new_admin: Principal) -> bool:
        """
        Hand the admin role to new_admin.

        Raises:
            NotAuthorized: If ctx.sender is not the current admin
        """
        self.require(ctx)
        self._store.replace(self._KEY, new_admin)
        return True

    def __repr__(self) -> str:
        return f"AdminRole({self.holder})"
