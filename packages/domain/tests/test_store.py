"""Tests for AllocationStore.

Tests cover:
- Whitelisting, duplicate detection and soft removal
- Grant changes guarded by the distribution floor
- Revocation
- Distributed amount bookkeeping
"""

import pytest

from vesting_domain.errors import (
    AllocationNotFound,
    AlreadyWhitelisted,
    InvalidConfig,
    NotWhitelisted,
    PoolNotFound,
)
from vesting_domain.registry import PoolRegistry
from vesting_domain.schemas import SECONDS_PER_DAY
from vesting_domain.store import AllocationStore

DAY = SECONDS_PER_DAY


@pytest.fixture
def registry():
    registry = PoolRegistry()
    # Pool 0: 30d cliff, 10% initial, 90d linear, revocable
    registry.create_pool(
        {
            "asset": "ABC",
            "start": 0,
            "cliff_duration": 30 * DAY,
            "initial_unlock_percent": 1000,
            "revocable": True,
            "strategy": {"type": "linear", "duration": 90 * DAY},
        },
        now=0,
    )
    # Pool 1: same asset, not revocable
    registry.create_pool(
        {"asset": "ABC", "start": 0, "strategy": {"type": "linear", "duration": DAY}},
        now=0,
    )
    return registry


@pytest.fixture
def store(registry):
    store = AllocationStore()
    for pool in registry:
        store.register_pool(pool.pool_id)
    return store


# =============================================================================
# Whitelisting
# =============================================================================

def test_add_allocation(store):
    allocation = store.add_allocation(0, "alice", 1000, now=5)
    assert allocation.total_granted == 1000
    assert allocation.distributed_amount == 0
    assert allocation.join_time == 5
    assert store.get(0, "alice") is allocation


def test_add_to_unknown_pool(store):
    with pytest.raises(PoolNotFound):
        store.add_allocation(9, "alice", 1000, now=0)


def test_duplicate_rejected(store):
    store.add_allocation(0, "alice", 1000, now=0)
    with pytest.raises(AlreadyWhitelisted):
        store.add_allocation(0, "alice", 5, now=0)


def test_same_beneficiary_in_two_pools(store):
    store.add_allocation(0, "alice", 1000, now=0)
    store.add_allocation(1, "alice", 50, now=0)
    assert [a.pool_id for a in store.allocations_of("alice")] == [0, 1]


def test_negative_amount_rejected(store):
    with pytest.raises(InvalidConfig):
        store.add_allocation(0, "alice", -1, now=0)
    assert store.find(0, "alice") is None


def test_zero_amount_allowed(store):
    assert store.add_allocation(0, "alice", 0, now=0).total_granted == 0


def test_get_missing_allocation(store):
    with pytest.raises(AllocationNotFound, match="No allocation for bob in pool 0"):
        store.get(0, "bob")


# =============================================================================
# Removal
# =============================================================================

def test_remove_is_soft(store):
    store.add_allocation(0, "alice", 1000, now=0)
    store.remove_allocation(0, "alice")

    assert store.get(0, "alice").disabled
    assert store.allocations_for(0) == []
    assert [a.beneficiary for a in store.allocations_for(0, include_removed=True)] == ["alice"]
    assert store.allocations_of("alice") == []


def test_removed_beneficiary_cannot_be_added_again(store):
    store.add_allocation(0, "alice", 1000, now=0)
    store.remove_allocation(0, "alice")
    with pytest.raises(AlreadyWhitelisted):
        store.add_allocation(0, "alice", 1000, now=0)


def test_remove_twice(store):
    store.add_allocation(0, "alice", 1000, now=0)
    store.remove_allocation(0, "alice")
    with pytest.raises(NotWhitelisted):
        store.remove_allocation(0, "alice")


def test_remove_unknown(store):
    with pytest.raises(NotWhitelisted):
        store.remove_allocation(0, "nobody")


def test_allocations_keep_insertion_order(store):
    for name in ("carol", "alice", "bob"):
        store.add_allocation(0, name, 10, now=0)
    assert [a.beneficiary for a in store.allocations_for(0)] == ["carol", "alice", "bob"]


# =============================================================================
# Grant Changes
# =============================================================================

class TestSetAllocationAmount:

    def test_increase(self, registry, store):
        store.add_allocation(0, "alice", 1000, now=0)
        assert store.set_allocation_amount(registry.get(0), "alice", 2000, now=0).total_granted == 2000

    def test_below_distributed_rejected(self, registry, store):
        store.add_allocation(0, "alice", 1000, now=0)
        store.advance_distributed(0, "alice", 550)

        with pytest.raises(InvalidConfig, match="below the 550 already distributed"):
            store.set_allocation_amount(registry.get(0), "alice", 500, now=75 * DAY)
        assert store.get(0, "alice").total_granted == 1000

    def test_vested_below_distributed_rejected(self, registry, store):
        """A 600 grant vests only 330 at 75d, less than the 550 paid."""
        store.add_allocation(0, "alice", 1000, now=0)
        store.advance_distributed(0, "alice", 550)

        with pytest.raises(InvalidConfig, match="would vest only 330"):
            store.set_allocation_amount(registry.get(0), "alice", 600, now=75 * DAY)
        assert store.get(0, "alice").total_granted == 1000

    def test_decrease_within_floor(self, registry, store):
        store.add_allocation(0, "alice", 1000, now=0)
        store.advance_distributed(0, "alice", 100)
        allocation = store.set_allocation_amount(registry.get(0), "alice", 500, now=40 * DAY)
        assert allocation.total_granted == 500

    def test_negative_rejected(self, registry, store):
        store.add_allocation(0, "alice", 1000, now=0)
        with pytest.raises(InvalidConfig, match="non-negative"):
            store.set_allocation_amount(registry.get(0), "alice", -1, now=0)

    def test_missing_allocation(self, registry, store):
        with pytest.raises(AllocationNotFound):
            store.set_allocation_amount(registry.get(0), "bob", 10, now=0)


# =============================================================================
# Revocation
# =============================================================================

class TestRevokeAllocation:

    def test_revoke(self, registry, store):
        store.add_allocation(0, "alice", 1000, now=0)
        store.advance_distributed(0, "alice", 100)

        allocation = store.revoke_allocation(registry.get(0), "alice", now=40 * DAY)
        assert allocation.revoked
        assert allocation.revoke_time == 40 * DAY
        assert allocation.outstanding() == 0
        assert allocation.frozen_vested == 100

    def test_frozen_amount_bounds_new_total(self, registry, store):
        store.add_allocation(0, "alice", 1000, now=0)
        store.advance_distributed(0, "alice", 550)
        store.revoke_allocation(registry.get(0), "alice", now=75 * DAY)
        store.advance_distributed(0, "alice", -550)

        with pytest.raises(InvalidConfig, match="frozen at revocation"):
            store.set_allocation_amount(registry.get(0), "alice", 500, now=80 * DAY)
        assert store.set_allocation_amount(registry.get(0), "alice", 550, now=80 * DAY).total_granted == 550

    def test_pool_not_revocable(self, registry, store):
        store.add_allocation(1, "alice", 1000, now=0)
        with pytest.raises(InvalidConfig, match="not revocable"):
            store.revoke_allocation(registry.get(1), "alice", now=0)

    def test_revoke_twice(self, registry, store):
        store.add_allocation(0, "alice", 1000, now=0)
        store.revoke_allocation(registry.get(0), "alice", now=0)
        with pytest.raises(NotWhitelisted):
            store.revoke_allocation(registry.get(0), "alice", now=0)

    def test_revoke_removed(self, registry, store):
        store.add_allocation(0, "alice", 1000, now=0)
        store.remove_allocation(0, "alice")
        with pytest.raises(NotWhitelisted):
            store.revoke_allocation(registry.get(0), "alice", now=0)


# =============================================================================
# Bookkeeping
# =============================================================================

def test_advance_and_roll_back_distributed(store):
    store.add_allocation(0, "alice", 1000, now=0)
    store.advance_distributed(0, "alice", 300)
    assert store.get(0, "alice").distributed_amount == 300
    store.advance_distributed(0, "alice", -300)
    assert store.get(0, "alice").distributed_amount == 0
