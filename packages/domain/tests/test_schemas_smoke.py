"""Smoke tests for schema validation.

These tests verify that:
1. All schemas can be imported
2. Basic instantiation works
3. Field validation catches obvious errors
4. Discriminated unions work correctly
"""

import pytest
from pydantic import ValidationError

from vesting_domain.schemas import (
    # Base
    DomainModel,
    BPS_DENOMINATOR,
    # Strategies
    LinearStrategy,
    IntervalStrategy,
    MonthlyStrategy,
    CustomStrategy,
    # Pools
    PoolConfig,
    PoolUpdate,
    VestingPool,
    # Allocations
    Allocation,
    # Reports
    AllocationLine,
    WalletSummary,
    # Config
    EngineCFG,
    VestingWorkbookCFG,
)


class TestBasicInstantiation:
    """Test that basic schema instantiation works."""

    def test_linear_pool_config(self):
        config = PoolConfig(
            name="Seed",
            asset="ABC",
            start=0,
            cliff_duration=30 * 86_400,
            initial_unlock_percent=1000,
            strategy=LinearStrategy(duration=90 * 86_400),
        )
        assert isinstance(config, DomainModel)
        assert config.strategy.type == "linear"
        assert config.revocable is False

    def test_pool_cliff_is_derived(self):
        pool = VestingPool(
            pool_id=0,
            asset="ABC",
            start=1_000,
            cliff_duration=500,
            strategy=LinearStrategy(duration=100),
        )
        assert pool.cliff == 1_500
        assert pool.strategy_type == "linear"
        assert pool.paused is False

    def test_allocation_defaults(self):
        allocation = Allocation(pool_id=0, beneficiary="alice", total_granted=1000, join_time=0)
        assert allocation.distributed_amount == 0
        assert allocation.is_active
        assert allocation.outstanding() == 1000

    def test_revoked_allocation_has_nothing_outstanding(self):
        allocation = Allocation(
            pool_id=0,
            beneficiary="alice",
            total_granted=1000,
            distributed_amount=300,
            join_time=0,
            revoked=True,
            revoke_time=10,
        )
        assert allocation.outstanding() == 0

    def test_report_models(self):
        line = AllocationLine(beneficiary="alice", claimed=10, remaining=90)
        summary = WalletSummary(beneficiary="alice", blacklisted=False, total_claimed=0, total_remaining=0)
        assert line.remaining == 90
        assert summary.pools == []

    def test_engine_cfg_defaults(self):
        config = EngineCFG()
        assert config.require_future_start is False
        assert config.default_decimals == 0


class TestDiscriminatedUnions:
    """Test that the strategy union selects the right schema from 'type'."""

    @pytest.mark.parametrize("strategy,expected", [
        ({"type": "linear", "duration": 100}, LinearStrategy),
        ({"type": "interval", "interval_length": 10, "unlock_per_interval": 500}, IntervalStrategy),
        ({"type": "monthly", "unlock_per_interval": 1000, "month_gap": 1}, MonthlyStrategy),
        ({"type": "custom", "timestamps": [10, 20], "unlock_percentages": [5000, 5000]}, CustomStrategy),
    ])
    def test_strategy_from_mapping(self, strategy, expected):
        config = PoolConfig.model_validate({"asset": "ABC", "start": 0, "strategy": strategy})
        assert isinstance(config.strategy, expected)

    def test_unknown_strategy_type_rejected(self):
        with pytest.raises(ValidationError):
            PoolConfig.model_validate({"asset": "ABC", "start": 0, "strategy": {"type": "exponential"}})


class TestFieldValidation:
    """Test that obviously invalid values are rejected."""

    def test_initial_unlock_above_100_percent(self):
        with pytest.raises(ValidationError):
            PoolConfig(
                asset="ABC",
                start=0,
                initial_unlock_percent=BPS_DENOMINATOR + 1,
                strategy=LinearStrategy(duration=10),
            )

    def test_missing_asset(self):
        with pytest.raises(ValidationError):
            PoolConfig(asset="", start=0, strategy=LinearStrategy(duration=10))

    def test_negative_cliff(self):
        with pytest.raises(ValidationError):
            PoolConfig(asset="ABC", start=0, cliff_duration=-1, strategy=LinearStrategy(duration=10))

    @pytest.mark.parametrize("kwargs", [
        {"interval_length": 0, "unlock_per_interval": 1000},
        {"interval_length": 10, "unlock_per_interval": 0},
    ])
    def test_interval_requires_positive_parameters(self, kwargs):
        with pytest.raises(ValidationError):
            IntervalStrategy(**kwargs)

    @pytest.mark.parametrize("kwargs", [
        {"unlock_per_interval": 0, "month_gap": 1},
        {"unlock_per_interval": 1000, "month_gap": 0},
    ])
    def test_monthly_requires_positive_parameters(self, kwargs):
        with pytest.raises(ValidationError):
            MonthlyStrategy(**kwargs)

    def test_custom_arrays_must_match(self):
        with pytest.raises(ValidationError, match="same length"):
            CustomStrategy(timestamps=[10, 20], unlock_percentages=[10000])

    def test_custom_arrays_must_not_be_empty(self):
        with pytest.raises(ValidationError, match="at least one"):
            CustomStrategy(timestamps=[], unlock_percentages=[])

    def test_custom_timestamps_must_ascend(self):
        with pytest.raises(ValidationError, match="strictly ascending"):
            CustomStrategy(timestamps=[20, 10], unlock_percentages=[5000, 5000])

    def test_linear_pool_cannot_carry_schedule(self):
        with pytest.raises(ValidationError, match="explicit unlock schedule"):
            VestingPool(
                pool_id=0,
                asset="ABC",
                start=0,
                strategy=LinearStrategy(duration=10),
                timestamps=[5],
                unlock_percentages=[10000],
            )

    def test_negative_grant_rejected(self):
        with pytest.raises(ValidationError):
            Allocation(pool_id=0, beneficiary="alice", total_granted=-1, join_time=0)

    def test_assignment_is_validated(self):
        allocation = Allocation(pool_id=0, beneficiary="alice", total_granted=10, join_time=0)
        with pytest.raises(ValidationError):
            allocation.distributed_amount = -5

    def test_update_schedule_arrays_go_together(self):
        with pytest.raises(ValidationError, match="updated together"):
            PoolUpdate(timestamps=[10])

    def test_empty_update(self):
        assert PoolUpdate().is_empty()
        assert not PoolUpdate(cliff_duration=0).is_empty()

    def test_projection_times_sorted_and_deduplicated(self):
        config = VestingWorkbookCFG(projection_times=[30, 10, 20, 10])
        assert config.projection_times == [10, 20, 30]
