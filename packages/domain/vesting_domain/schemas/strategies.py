"""Vesting strategies using discriminated unions for type safety.

A strategy describes how the part of a grant above the initial unlock is
released once the cliff has passed:
- Linear: continuously over a fixed duration
- Interval: a fixed basis-point step every fixed number of seconds
- Monthly: a fixed basis-point step every N calendar months
- Custom: an explicit list of (timestamp, basis points) unlock events

The strategy kind of a pool is fixed at creation. Using discriminated unions
ensures invalid strategy configurations are rejected before a pool exists.
"""

from typing import Annotated, Union, Literal, List
from pydantic import Field, model_validator

from .base import DomainModel, Duration, BasisPoints, Timestamp


# =============================================================================
# Linear
# =============================================================================

class LinearStrategy(DomainModel):
    """Continuous vesting from the cliff to cliff + duration.

    Example:
        initial_unlock_percent=1000 (10%), duration=90 days, grant=1000
        At the cliff: 100 vested (the initial unlock)
        45 days after the cliff: 100 + 900 * 45/90 = 550
        90 days after the cliff: 1000

    A zero duration releases everything at the cliff.
    """

    type: Literal["linear"] = "linear"

    duration: Duration = Field(
        description="Seconds from the cliff until the grant is fully vested"
    )


# =============================================================================
# Interval
# =============================================================================

class IntervalStrategy(DomainModel):
    """Step vesting: unlock_per_interval basis points every interval_length seconds.

    Example:
        interval_length=10 days, unlock_per_interval=1000 (10%)
        25 days after the cliff: 2 intervals elapsed -> 20% of the remainder
    """

    type: Literal["interval"] = "interval"

    interval_length: int = Field(
        gt=0,
        description="Seconds per interval"
    )

    unlock_per_interval: BasisPoints = Field(
        gt=0,
        description="Basis points of the post-initial remainder released per interval"
    )


# =============================================================================
# Monthly
# =============================================================================

class MonthlyStrategy(DomainModel):
    """Calendar-month step vesting.

    The unlock timestamps are generated once at pool creation by stepping
    month_gap calendar months at a time from the cliff (day-of-month clamped
    to the target month's length) until the cumulative unlock reaches 100%.

    Example:
        cliff=2024-01-31, month_gap=1, unlock_per_interval=2500
        unlock dates: 2024-02-29, 2024-03-31, 2024-04-30, 2024-05-31
    """

    type: Literal["monthly"] = "monthly"

    unlock_per_interval: BasisPoints = Field(
        gt=0,
        description="Basis points released at each generated unlock date"
    )

    month_gap: int = Field(
        gt=0,
        description="Calendar months between unlock dates"
    )


# =============================================================================
# Custom
# =============================================================================

class CustomStrategy(DomainModel):
    """Explicit unlock events.

    Each entry of unlock_percentages is released once its parallel timestamp
    has passed. The total is clamped at 10000 bp when computing vested amounts,
    but it is not required to reach 10000 at creation time (a schedule can be
    extended later with a pool modification).
    """

    type: Literal["custom"] = "custom"

    timestamps: List[Timestamp] = Field(
        description="Unlock times, strictly ascending"
    )

    unlock_percentages: List[BasisPoints] = Field(
        description="Basis points released at the parallel timestamp"
    )

    @model_validator(mode='after')
    def validate_schedule(self):
        """Arrays must be non-empty, of equal length, and strictly ascending."""
        validate_schedule_arrays(self.timestamps, self.unlock_percentages)
        return self


def validate_schedule_arrays(timestamps: List[int], unlock_percentages: List[int]) -> None:
    """Check a (timestamps, unlock_percentages) pair.

    Raises:
        ValueError: If the arrays are empty, differ in length, or timestamps
            are not strictly ascending
    """
    if not timestamps:
        raise ValueError("Schedule must contain at least one unlock timestamp")
    if len(timestamps) != len(unlock_percentages):
        raise ValueError(
            f"timestamps ({len(timestamps)}) and unlock_percentages "
            f"({len(unlock_percentages)}) must have the same length"
        )
    for earlier, later in zip(timestamps, timestamps[1:]):
        if later <= earlier:
            raise ValueError(
                f"Schedule timestamps must be strictly ascending, got {earlier} then {later}"
            )


# =============================================================================
# Discriminated Union
# =============================================================================

VestingStrategy = Annotated[
    Union[
        LinearStrategy,
        IntervalStrategy,
        MonthlyStrategy,
        CustomStrategy,
    ],
    Field(discriminator='type')
]
"""Discriminated union of all vesting strategies.

The 'type' field selects the schema, so a plain mapping validates into the
right class:

    PoolConfig(..., strategy={"type": "interval", "interval_length": 864000,
                              "unlock_per_interval": 1000})
"""
