"""
contract.py - Contract base class

A contract is a named bundle of record stores plus the functions that read and
write them. Public functions take a CallContext first and may raise
ContractError; read-only functions take only their arguments and never write.

The Chain is the only caller of public functions. It binds each deployed
contract to the chain's Journal and AdminRole before the first call.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Tuple

from .core import ErrorCode, ChainError
from .guards import AdminRole
from .store import Journal, RecordStore


class Contract:
    """
    Base class for deployable contracts.

    Subclasses declare:
        name: Contract name used by Chain.call()
        ERRORS: ErrorCode -> numeric code published by this contract
        PUBLIC_FUNCTIONS: names callable through Chain.call()
        READ_ONLY_FUNCTIONS: names callable through Chain.read()
    and implement stores() to list every RecordStore they own.
    """

    name: str = ""
    ERRORS: Dict[ErrorCode, int] = {}
    PUBLIC_FUNCTIONS: Tuple[str, ...] = ()
    READ_ONLY_FUNCTIONS: Tuple[str, ...] = ()

    def __init__(self):
        self._admin: Optional[AdminRole] = None

    def stores(self) -> List[RecordStore]:
        raise NotImplementedError

    def bind(self, journal: Journal, admin: AdminRole) -> None:
        """Attach the chain's journal and admin role."""
        self._admin = admin
        for store in self.stores():
            store.bind(journal)

    @property
    def admin(self) -> AdminRole:
        if self._admin is None:
            raise ChainError(f"Contract {self.name} is not deployed")
        return self._admin

    def error_number(self, code: ErrorCode) -> Optional[int]:
        """Return the numeric code this contract publishes for code, if any."""
        return self.ERRORS.get(code)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name})"
