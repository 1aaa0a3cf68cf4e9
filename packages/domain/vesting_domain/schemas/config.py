"""Engine and report configuration.

EngineCFG configures a VestingEngine instance; VestingWorkbookCFG is what gets
passed to the Excel renderer to generate a report workbook.
"""

from typing import List, Optional
from pydantic import Field, field_validator

from .base import DomainModel, PoolId, Timestamp


# =============================================================================
# Engine Configuration
# =============================================================================

class EngineCFG(DomainModel):
    """Configuration for a VestingEngine.

    Examples:
        # Defaults: pools may start in the past, assets without metadata
        # are reported with 0 decimals
        EngineCFG()

        # Launchpad-style: every pool must start in the future
        EngineCFG(name="launchpad", require_future_start=True)
    """

    name: str = Field(
        default="vesting",
        description="Instance name used in log messages"
    )

    require_future_start: bool = Field(
        default=False,
        description="Reject pools whose start lies before the current time"
    )

    default_decimals: int = Field(
        default=0,
        ge=0,
        description="Decimals used for display when no asset metadata collaborator is configured"
    )


# =============================================================================
# Workbook Configuration
# =============================================================================

class VestingWorkbookCFG(DomainModel):
    """Configuration for the vesting report workbook.

    Example:
        VestingWorkbookCFG(
            title="Q3 vesting report",
            as_of=1_727_740_800,
            projection_times=[1_704_067_200, 1_711_929_600, 1_719_792_000],
        )
    """

    title: str = Field(
        default="Vesting Report",
        description="Title written at the top of each sheet"
    )

    as_of: Optional[Timestamp] = Field(
        default=None,
        description="Valuation time for the ledger. None = engine clock at render time"
    )

    projection_times: List[Timestamp] = Field(
        default_factory=list,
        description="Times at which the unlock schedule sheet samples each pool"
    )

    pool_ids: Optional[List[PoolId]] = Field(
        default=None,
        description="Pools to include. None = all pools"
    )

    include_removed: bool = Field(
        default=False,
        description="Include soft-removed allocations in the ledger"
    )

    @field_validator('projection_times')
    @classmethod
    def sort_projection_times(cls, v: List[int]) -> List[int]:
        """Projection columns are always rendered chronologically."""
        return sorted(set(v))
