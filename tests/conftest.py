"""
conftest.py - Shared pytest fixtures for provenance tests

Provides common fixtures used across unit, conformance and functional tests:
- Principals (admin/manufacturer, distributor, outsider, pharmacist)
- A default chain at block height 100 with every contract deployed
- Chains pre-loaded with a registered batch, an issued code, configured thresholds
"""

import pytest

from provenance import (
    Chain, create_default_chain,
    BATCH_TRACKING, AUTHENTICATION, TEMPERATURE_MONITORING,
)
from tests.principals import MANUFACTURER, DISTRIBUTOR, OUTSIDER, PHARMACIST, GENESIS_HEIGHT


# =============================================================================
# PRINCIPALS
# =============================================================================

@pytest.fixture
def manufacturer():
    return MANUFACTURER


@pytest.fixture
def distributor():
    return DISTRIBUTOR


@pytest.fixture
def outsider():
    return OUTSIDER


@pytest.fixture
def pharmacist():
    return PHARMACIST


# =============================================================================
# CHAIN FIXTURES
# =============================================================================

@pytest.fixture
def chain() -> Chain:
    """Quiet chain at block height 100, every contract deployed by MANUFACTURER."""
    return create_default_chain(
        name="test",
        deployer=MANUFACTURER,
        initial_block_height=GENESIS_HEIGHT,
        verbose=False,
    )


@pytest.fixture
def batch_chain(chain) -> Chain:
    """Chain with BATCH001 registered by MANUFACTURER at block 100."""
    result = chain.call(BATCH_TRACKING, "register_batch", "BATCH001", "PROD001", 20230101, 20250101)
    assert result.ok
    return chain


@pytest.fixture
def code_chain(chain) -> Chain:
    """Chain with code AUTH123456789 issued for BATCH001/PROD001."""
    result = chain.call(AUTHENTICATION, "generate_authentication_code", "AUTH123456789", "BATCH001", "PROD001")
    assert result.ok
    return chain


@pytest.fixture
def threshold_chain(chain) -> Chain:
    """Chain with BATCH001 thresholds set to temp [-5, 25], humidity [30, 60]."""
    result = chain.call(TEMPERATURE_MONITORING, "set_batch_thresholds", "BATCH001", -5, 25, 30, 60)
    assert result.ok
    return chain
