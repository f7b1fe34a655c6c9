"""
temperature_monitoring.py - Cold-chain Compliance Monitor

Temperature/humidity compliance for batches in transit or storage:
1. set_batch_thresholds() - configure the allowed band for a batch
2. record_temperature() - store a reading and flag it if out of band
3. check_reading() - pure bound check, usable without a chain

Readings are keyed by (batch_id, block_height). Two readings for the same batch
at the same block height share a key and the later one replaces the earlier
one without error.

A bound is breached only by a strictly lower/higher value; a reading equal to a
bound is compliant.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from ..core import (
    TEMPERATURE_MONITORING, ErrorCode, Principal, BlockHeight,
    InvalidParameters, ThresholdNotSet,
)
from ..context import CallContext
from ..contract import Contract
from ..store import RecordStore


class ReadingStatus(Enum):
    """Outcome of recording a reading."""
    COMPLIANT = "compliant"
    VIOLATION = "violation"


@dataclass(frozen=True, slots=True)
class Thresholds:
    """Allowed band for a batch. min < max holds for both dimensions."""
    min_temp: float
    max_temp: float
    min_humidity: float
    max_humidity: float


@dataclass(frozen=True, slots=True)
class TemperatureReading:
    """A recorded reading."""
    temperature: float
    humidity: float
    recorder: Principal
    location: str


def check_reading(thresholds: Thresholds, temperature: float, humidity: float) -> List[str]:
    """
    Return the names of the bounds a reading breaches.

    Args:
        thresholds: Configured band
        temperature: Measured temperature
        humidity: Measured humidity

    Returns:
        Subset of ["min_temp", "max_temp", "min_humidity", "max_humidity"],
        empty if the reading is compliant.

    Example:
        check_reading(Thresholds(-5, 25, 30, 60), 15, 25)  # ["min_humidity"]
    """
    breached = []
    if temperature < thresholds.min_temp:
        breached.append("min_temp")
    if temperature > thresholds.max_temp:
        breached.append("max_temp")
    if humidity < thresholds.min_humidity:
        breached.append("min_humidity")
    if humidity > thresholds.max_humidity:
        breached.append("max_humidity")
    return breached


class TemperatureMonitoring(Contract):
    """
    Compliance monitoring contract.

    Example:
        chain.call(TEMPERATURE_MONITORING, "set_batch_thresholds", "BATCH001", -5, 25, 30, 60)
        chain.call(TEMPERATURE_MONITORING, "record_temperature", "BATCH001", 30, 45, "Warehouse A")
        # Result(ok: <ReadingStatus.VIOLATION: 'violation'>)
    """

    name = TEMPERATURE_MONITORING
    ERRORS = {
        ErrorCode.NOT_AUTHORIZED: 100,
        ErrorCode.INVALID_PARAMETERS: 101,
        ErrorCode.THRESHOLD_NOT_SET: 102,
    }
    PUBLIC_FUNCTIONS = ("set_batch_thresholds", "record_temperature")
    READ_ONLY_FUNCTIONS = (
        "get_temperature_record", "get_batch_thresholds",
        "get_violation_count", "get_temperature_records",
    )

    def __init__(self):
        super().__init__()
        self.thresholds = RecordStore("batch-thresholds")
        self.readings = RecordStore("temperature-records")
        self.violations = RecordStore("temperature-violations")

    def stores(self) -> List[RecordStore]:
        return [self.thresholds, self.readings, self.violations]

    # ========================================================================
    # PUBLIC FUNCTIONS
    # ========================================================================

    def set_batch_thresholds(
        self,
        ctx: CallContext,
        batch_id: str,
        min_temp: float,
        max_temp: float,
        min_humidity: float,
        max_humidity: float,
    ) -> bool:
        """
        Configure (or reconfigure) the allowed band for a batch.

        The violation counter is created at 0 the first time; reconfiguring
        keeps the existing count.

        Raises:
            InvalidParameters: If min_temp >= max_temp or min_humidity >= max_humidity
        """
        # Written as "not <" so NaN bounds are rejected too
        if not min_temp < max_temp:
            raise InvalidParameters(f"min_temp {min_temp} must be below max_temp {max_temp}")
        if not min_humidity < max_humidity:
            raise InvalidParameters(
                f"min_humidity {min_humidity} must be below max_humidity {max_humidity}"
            )

        self.thresholds.put(batch_id, Thresholds(min_temp, max_temp, min_humidity, max_humidity))
        if batch_id not in self.violations:
            self.violations.create(batch_id, 0)
        return True

    def record_temperature(
        self,
        ctx: CallContext,
        batch_id: str,
        temperature: float,
        humidity: float,
        location: str,
    ) -> ReadingStatus:
        """
        Store a reading at the current block height and check it against the band.

        Returns:
            ReadingStatus.VIOLATION if any bound is breached (the violation
            counter is incremented), else ReadingStatus.COMPLIANT

        Raises:
            ThresholdNotSet: If no thresholds are configured for batch_id
        """
        thresholds = self.thresholds.get(batch_id)
        if thresholds is None:
            raise ThresholdNotSet(f"No thresholds set for batch {batch_id}")

        self.readings.put((batch_id, ctx.block_height), TemperatureReading(
            temperature=temperature,
            humidity=humidity,
            recorder=ctx.sender,
            location=location,
        ))

        if check_reading(thresholds, temperature, humidity):
            self.violations.replace(batch_id, self.violations.get(batch_id) + 1)
            return ReadingStatus.VIOLATION
        return ReadingStatus.COMPLIANT

    # ========================================================================
    # READ-ONLY FUNCTIONS
    # ========================================================================

    def get_temperature_record(self, batch_id: str, timestamp: BlockHeight) -> Optional[TemperatureReading]:
        return self.readings.get((batch_id, timestamp))

    def get_batch_thresholds(self, batch_id: str) -> Optional[Thresholds]:
        return self.thresholds.get(batch_id)

    def get_violation_count(self, batch_id: str) -> int:
        return self.violations.get(batch_id) or 0

    def get_temperature_records(self, batch_id: str) -> List[Tuple[BlockHeight, TemperatureReading]]:
        """All readings for a batch as (timestamp, reading) pairs, oldest first."""
        return sorted(
            ((key[1], reading) for key, reading in self.readings.items() if key[0] == batch_id),
            key=lambda pair: pair[0],
        )
