"""Shared fixtures for vesting domain tests."""

import pytest

from vesting_domain import InMemoryLedger, StaticAuthorizer, VestingEngine
from vesting_domain.schemas import SECONDS_PER_DAY

DAY = SECONDS_PER_DAY
ADMIN = "admin"


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: int = 0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ledger():
    return InMemoryLedger()


@pytest.fixture
def engine(clock, ledger):
    return VestingEngine(
        authorizer=StaticAuthorizer([ADMIN]),
        transfer=ledger,
        clock=clock,
    )


def linear_pool(asset="ABC", start=0, cliff_days=30, initial=1000, duration_days=90, **extra):
    """Config for the reference linear pool: 30d cliff, 10% initial, 90d linear."""
    return {
        "name": extra.pop("name", "Linear"),
        "asset": asset,
        "start": start,
        "cliff_duration": cliff_days * DAY,
        "initial_unlock_percent": initial,
        "strategy": {"type": "linear", "duration": duration_days * DAY},
        **extra,
    }


def interval_pool(asset="ABC", start=0, interval_days=10, unlock=1000, **extra):
    return {
        "name": extra.pop("name", "Interval"),
        "asset": asset,
        "start": start,
        "strategy": {
            "type": "interval",
            "interval_length": interval_days * DAY,
            "unlock_per_interval": unlock,
        },
        **extra,
    }
