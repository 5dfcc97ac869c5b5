"""
Test configuration and fixtures for poi-consensus tests
"""

import os
from typing import List, Sequence, Tuple

import pytest

FIXED_TIMESTAMP = 1_700_000_000


def make_submission(
    validator_uid: int,
    weights: Sequence[Tuple[int, int]],
    subnet_id: int = 1,
    epoch: int = 42,
    timestamp: int = FIXED_TIMESTAMP,
):
    """Build a WeightSubmission from (miner_uid, weight) pairs."""
    from poi_core.core.datatypes import WeightEntry, WeightSubmission

    return WeightSubmission(
        validator_uid=validator_uid,
        subnet_id=subnet_id,
        epoch=epoch,
        weights=tuple(WeightEntry(miner_uid=m, weight=w) for m, w in weights),
        timestamp=timestamp,
    )


@pytest.fixture
def submission():
    """Factory for WeightSubmission records"""
    return make_submission


@pytest.fixture
def clock():
    """Deterministic clock for ledger and finalizer timestamps"""
    return lambda: FIXED_TIMESTAMP


@pytest.fixture
def equal_stakes():
    """Every validator carries stake weight 1"""
    from poi_core.consensus.stake import StaticStakeProvider

    return StaticStakeProvider({}, default=1)


@pytest.fixture
def metrics():
    """Metrics manager with a fresh Prometheus registry"""
    from poi_core.monitoring.metrics import MetricsManager

    manager = MetricsManager()
    manager.reset_metrics()
    return manager


@pytest.fixture
def registry(equal_stakes, clock):
    """Unrestricted registry with default parameters"""
    from poi_core.consensus.params import ConsensusParams
    from poi_core.consensus.registry import ConsensusRegistry

    return ConsensusRegistry(
        stake_provider=equal_stakes,
        params=ConsensusParams(),
        clock=clock,
    )


@pytest.fixture
def three_validator_submissions() -> List:
    """Validators 0, 1 and 2 report 10, 20 and 30 for miner 7"""
    return [
        make_submission(0, [(7, 10)]),
        make_submission(1, [(7, 20)]),
        make_submission(2, [(7, 30)]),
    ]


# Setup test environment
def pytest_configure(config):
    """Configure test environment"""
    os.environ["POI_LOG_LEVEL"] = "DEBUG"

    # Register custom markers
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "unit: mark test as unit test")
