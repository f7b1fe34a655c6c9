"""
provenance - Supply-Chain Provenance Ledger

Authorization-gated, key-addressed records with append-only history logs for
tracking product batches, per-unit authentication codes, verified manufacturers
and cold-chain compliance.

Usage:
    from provenance import create_default_chain, BATCH_TRACKING, AUTHENTICATION

    chain = create_default_chain(initial_block_height=100)

    # Manufacturer registers a batch and ships it
    chain.call(BATCH_TRACKING, "register_batch", "BATCH001", "PROD001", 20230101, 20250101,
               sender="manufacturer")
    chain.advance_block_height(10)
    chain.call(BATCH_TRACKING, "transfer_batch", "BATCH001", "distributor", "shipped",
               sender="manufacturer")

    # Issue and scan an authentication code
    chain.call(AUTHENTICATION, "generate_authentication_code", "AUTH1", "BATCH001", "PROD001")
    result = chain.call(AUTHENTICATION, "verify_authentication_code", "AUTH1", "Pharmacy A",
                        sender="pharmacist")
    result.value.verification_count  # 1
"""

# Core types
from .core import (
    Result,
    ErrorCode,
    ProvenanceError,
    ChainError,
    ContractError,
    NotAuthorized,
    AlreadyExists,
    NotFound,
    InvalidState,
    NotCurrentCustodian,
    InvalidParameters,
    ThresholdNotSet,
    Principal,
    BlockHeight,
    BATCH_TRACKING,
    AUTHENTICATION,
    TEMPERATURE_MONITORING,
    MANUFACTURER_VERIFICATION,
    DEFAULT_DEPLOYER,
    DEFAULT_BLOCK_HEIGHT,
)

# Ledger primitives
from .context import CallContext
from .store import RecordStore, Journal, StateChange
from .history import HistoryLog
from .guards import AdminRole, require_admin, require_custodian
from .contract import Contract

# Chain
from .chain import Chain, Receipt, create_default_chain

# Contracts
from .contracts import (
    Batch,
    BatchHistoryEntry,
    BatchTracking,
    BATCH_STATUS_PRODUCED,
    AuthenticationCode,
    VerificationEntry,
    VerificationResult,
    Authentication,
    ReadingStatus,
    Thresholds,
    TemperatureReading,
    TemperatureMonitoring,
    check_reading,
    ManufacturerVerification,
)

__all__ = [
    # Core
    'Result', 'ErrorCode',
    'ProvenanceError', 'ChainError', 'ContractError',
    'NotAuthorized', 'AlreadyExists', 'NotFound', 'InvalidState',
    'NotCurrentCustodian', 'InvalidParameters', 'ThresholdNotSet',
    'Principal', 'BlockHeight',
    'BATCH_TRACKING', 'AUTHENTICATION', 'TEMPERATURE_MONITORING', 'MANUFACTURER_VERIFICATION',
    'DEFAULT_DEPLOYER', 'DEFAULT_BLOCK_HEIGHT',
    # Primitives
    'CallContext', 'RecordStore', 'Journal', 'StateChange', 'HistoryLog',
    'AdminRole', 'require_admin', 'require_custodian', 'Contract',
    # Chain
    'Chain', 'Receipt', 'create_default_chain',
    # Batch tracking
    'Batch', 'BatchHistoryEntry', 'BatchTracking', 'BATCH_STATUS_PRODUCED',
    # Authentication
    'AuthenticationCode', 'VerificationEntry', 'VerificationResult', 'Authentication',
    # Temperature monitoring
    'ReadingStatus', 'Thresholds', 'TemperatureReading', 'TemperatureMonitoring', 'check_reading',
    # Manufacturer verification
    'ManufacturerVerification',
]

__version__ = '1.0.0'
