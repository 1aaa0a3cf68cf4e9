"""Vesting pool models.

A pool is a named vesting schedule shared by every beneficiary allocated
into it. PoolConfig is what an administrator submits; VestingPool is the
stored record with its assigned id and derived schedule; PoolUpdate carries
the fields an administrator may change after creation.
"""

from typing import List, Optional
from pydantic import Field, model_validator

from .base import (
    DomainModel,
    PoolId,
    AssetId,
    BasisPoints,
    Duration,
    Timestamp,
)
from .strategies import VestingStrategy, validate_schedule_arrays


# =============================================================================
# Pool Config
# =============================================================================

class PoolConfig(DomainModel):
    """Administrator input for creating a pool.

    Example:
        PoolConfig(
            name="Seed investors",
            asset="ABC",
            start=1_704_067_200,               # 2024-01-01
            cliff_duration=30 * 86_400,
            initial_unlock_percent=1000,       # 10% at start
            strategy=LinearStrategy(duration=90 * 86_400),
        )
    """

    name: str = Field(
        default="",
        description="Display name"
    )

    asset: AssetId = Field(
        description="Asset vested by this pool"
    )

    start: Timestamp = Field(
        description="Vesting start; nothing is vested before this time"
    )

    cliff_duration: Duration = Field(
        default=0,
        description="Seconds after start before the strategy begins releasing"
    )

    initial_unlock_percent: BasisPoints = Field(
        default=0,
        description="Basis points of each grant released at start"
    )

    revocable: bool = Field(
        default=False,
        description="Whether administrators may revoke allocations in this pool"
    )

    strategy: VestingStrategy = Field(
        description="How the post-initial remainder unlocks after the cliff"
    )


# =============================================================================
# Vesting Pool
# =============================================================================

class VestingPool(DomainModel):
    """Stored pool record.

    For Monthly pools, timestamps/unlock_percentages are derived from the
    cliff at creation. For Custom pools they are copied from the strategy.
    Linear and Interval pools carry empty schedule arrays.
    """

    pool_id: PoolId = Field(
        description="Immutable pool identifier"
    )

    name: str = Field(
        default="",
        description="Display name"
    )

    asset: AssetId = Field(
        description="Asset vested by this pool"
    )

    start: Timestamp = Field(
        description="Vesting start"
    )

    cliff_duration: Duration = Field(
        default=0,
        description="Seconds after start before the strategy begins releasing"
    )

    initial_unlock_percent: BasisPoints = Field(
        default=0,
        description="Basis points released at start"
    )

    revocable: bool = Field(
        default=False,
        description="Whether allocations may be revoked"
    )

    paused: bool = Field(
        default=False,
        description="While paused, nothing in this pool is releasable"
    )

    strategy: VestingStrategy = Field(
        description="Strategy variant (kind fixed at creation)"
    )

    timestamps: List[Timestamp] = Field(
        default_factory=list,
        description="Unlock timestamps for Monthly/Custom pools, strictly ascending"
    )

    unlock_percentages: List[BasisPoints] = Field(
        default_factory=list,
        description="Basis points released at the parallel timestamp"
    )

    @property
    def cliff(self) -> int:
        """Time at which the strategy starts releasing (start + cliff_duration)."""
        return self.start + self.cliff_duration

    @property
    def strategy_type(self) -> str:
        return self.strategy.type

    @model_validator(mode='after')
    def validate_schedule(self):
        """Index-based pools need a schedule; time-based pools must not carry one."""
        if self.strategy.type in ("monthly", "custom"):
            validate_schedule_arrays(self.timestamps, self.unlock_percentages)
        elif self.timestamps or self.unlock_percentages:
            raise ValueError(
                f"{self.strategy.type} pools do not use an explicit unlock schedule"
            )
        return self


# =============================================================================
# Pool Update
# =============================================================================

class PoolUpdate(DomainModel):
    """Fields an administrator may change on an existing pool.

    Fields left as None are unchanged.

    Field mapping:
        - duration: Linear duration, or Interval interval_length
        - timestamps / unlock_percentages: Custom pools only, supplied together

    Monthly schedules are regenerated when start or cliff_duration changes.
    """

    start: Optional[Timestamp] = None

    cliff_duration: Optional[Duration] = None

    duration: Optional[Duration] = None

    initial_unlock_percent: Optional[BasisPoints] = None

    timestamps: Optional[List[Timestamp]] = None

    unlock_percentages: Optional[List[BasisPoints]] = None

    @model_validator(mode='after')
    def validate_schedule_pair(self):
        """A replacement schedule must supply both arrays."""
        if (self.timestamps is None) != (self.unlock_percentages is None):
            raise ValueError("timestamps and unlock_percentages must be updated together")
        return self

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)
