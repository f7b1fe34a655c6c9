"""
Core types for the provenance ledger.

This module provides the foundational data structures shared by every contract:
1. Constants: contract names, default deployer and genesis block height
2. Type aliases: Principal, BlockHeight, RecordKey
3. ErrorCode: the symbolic rejection taxonomy
4. Exceptions: ProvenanceError and its contract-level subclasses
5. Result: the value returned to callers of Chain.call()

Contract functions raise ContractError subclasses; the Chain converts them into
Result.failure() after rolling back the call. Callers never see a contract
exception, only a Result.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Hashable, Optional


# ============================================================================
# CONSTANTS
# ============================================================================

# Contract names (strings, not enum, matching how receipts and call sites refer to them).
BATCH_TRACKING = "batch-tracking"
AUTHENTICATION = "authentication"
TEMPERATURE_MONITORING = "temperature-monitoring"
MANUFACTURER_VERIFICATION = "manufacturer-verification"

# Principal that deploys the contracts. It is the initial admin and the
# initial tx-sender of a freshly created chain.
DEFAULT_DEPLOYER = "deployer"

# Logical clock value of a freshly created chain.
DEFAULT_BLOCK_HEIGHT = 0


# ============================================================================
# TYPE ALIASES
# ============================================================================

# Opaque authenticated identity. Compared by equality only.
Principal = str

# Logical clock value supplied by the chain. Never wall-clock time.
BlockHeight = int

# Store key: a plain identifier or a tuple for composite keys.
RecordKey = Hashable


# ============================================================================
# ERROR CODES
# ============================================================================

class ErrorCode(Enum):
    """
    Symbolic rejection codes.

    Each contract maps the subset it can produce to the numeric code it
    publishes (see the ERRORS table on each contract class). Numeric codes
    only need to be unique within one contract.
    """
    NOT_AUTHORIZED = "not_authorized"
    ALREADY_EXISTS = "already_exists"
    BATCH_EXISTS = "batch_exists"
    CODE_EXISTS = "code_exists"
    ALREADY_VERIFIED = "already_verified"
    NOT_FOUND = "not_found"
    BATCH_NOT_FOUND = "batch_not_found"
    CODE_NOT_FOUND = "code_not_found"
    MANUFACTURER_NOT_FOUND = "manufacturer_not_found"
    INVALID_STATE = "invalid_state"
    CODE_INVALID = "code_invalid"
    NOT_CURRENT_CUSTODIAN = "not_current_custodian"
    INVALID_PARAMETERS = "invalid_parameters"
    THRESHOLD_NOT_SET = "threshold_not_set"


# ============================================================================
# EXCEPTIONS
# ============================================================================

class ProvenanceError(Exception):
    """Base exception for all provenance-ledger errors."""
    pass


class ChainError(ProvenanceError):
    """Raised when the chain is misused: unknown contract, unknown function, bad deployment."""
    pass


class ContractError(ProvenanceError):
    """
    A business-rule rejection raised inside a contract function.

    Carries the ErrorCode reported back to the caller. Never escapes
    Chain.call(); the chain rolls the call back and returns Result.failure().
    """

    default_code: ErrorCode = ErrorCode.INVALID_STATE

    def __init__(self, message: str = "", code: Optional[ErrorCode] = None):
        super().__init__(message)
        self.code = code or self.default_code


class NotAuthorized(ContractError):
    """Raised when the caller does not hold the admin role."""
    default_code = ErrorCode.NOT_AUTHORIZED


class AlreadyExists(ContractError):
    """Raised when a create targets a key that is already present."""
    default_code = ErrorCode.ALREADY_EXISTS


class NotFound(ContractError):
    """Raised when an operation targets a missing key."""
    default_code = ErrorCode.NOT_FOUND


class InvalidState(ContractError):
    """Raised when a record's state disallows the requested action."""
    default_code = ErrorCode.INVALID_STATE


class NotCurrentCustodian(ContractError):
    """Raised when a custody transfer is attempted by anyone but the current custodian."""
    default_code = ErrorCode.NOT_CURRENT_CUSTODIAN


class InvalidParameters(ContractError):
    """Raised when threshold configuration violates min < max."""
    default_code = ErrorCode.INVALID_PARAMETERS


class ThresholdNotSet(ContractError):
    """Raised when a reading is recorded for a batch with no thresholds."""
    default_code = ErrorCode.THRESHOLD_NOT_SET


# ============================================================================
# RESULT
# ============================================================================

@dataclass(frozen=True, slots=True)
class Result:
    """
    Outcome of a contract call.

    Exactly one of two shapes:
        success: value is set, error is None
        failure: error is set (with the contract's numeric code), value is None

    Attributes:
        value: Return value of the contract function on success.
        error: Symbolic rejection code on failure.
        error_number: Numeric code published by the rejecting contract.
        message: Human-readable reason for the rejection.
    """
    value: Any = None
    error: Optional[ErrorCode] = None
    error_number: Optional[int] = None
    message: str = ""

    @classmethod
    def success(cls, value: Any = True) -> Result:
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorCode, error_number: Optional[int] = None, message: str = "") -> Result:
        return cls(error=error, error_number=error_number, message=message)

    @property
    def ok(self) -> bool:
        """True if the call was accepted."""
        return self.error is None

    def unwrap(self) -> Any:
        """
        Return the success value.

        Raises:
            ContractError: If the result is a failure, carrying its error code.
        """
        if self.error is not None:
            raise ContractError(self.message or self.error.value, code=self.error)
        return self.value

    def __repr__(self) -> str:
        if self.ok:
            return f"Result(ok: {self.value!r})"
        return f"Result(err: {self.error.value} [{self.error_number}])"
