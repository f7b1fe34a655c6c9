"""
Contracts module - the four supply-chain contracts.

- BatchTracking: batch registration and custody transfer
- Authentication: per-unit authentication codes
- TemperatureMonitoring: temperature/humidity compliance
- ManufacturerVerification: verified manufacturers and the admin role

All contracts and their record types are re-exported here for convenience.
"""

from .batch_tracking import (
    Batch,
    BatchHistoryEntry,
    BatchTracking,
    BATCH_STATUS_PRODUCED,
)

from .authentication import (
    AuthenticationCode,
    VerificationEntry,
    VerificationResult,
    Authentication,
)

from .temperature_monitoring import (
    ReadingStatus,
    Thresholds,
    TemperatureReading,
    TemperatureMonitoring,
    check_reading,
)

from .manufacturer_verification import ManufacturerVerification

__all__ = [
    'Batch', 'BatchHistoryEntry', 'BatchTracking', 'BATCH_STATUS_PRODUCED',
    'AuthenticationCode', 'VerificationEntry', 'VerificationResult', 'Authentication',
    'ReadingStatus', 'Thresholds', 'TemperatureReading', 'TemperatureMonitoring', 'check_reading',
    'ManufacturerVerification',
]
