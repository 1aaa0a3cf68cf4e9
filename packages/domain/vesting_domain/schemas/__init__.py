"""Vesting domain schemas.

This package contains all Pydantic models for the vesting domain layer:
- Base types and scale conventions
- Vesting strategies (linear, interval, monthly, custom)
- Pools and pool updates
- Allocations
- Report models (pool listings, wallet summaries, claim receipts)
- Engine and workbook configuration

Usage:
    from vesting_domain.schemas import (
        PoolConfig, LinearStrategy, IntervalStrategy,
        VestingPool, Allocation, WalletSummary, EngineCFG
    )
"""

# Base types
from .base import (
    BPS_DENOMINATOR,
    SECONDS_PER_DAY,
    DomainModel,
    TokenAmount,
    BasisPoints,
    Timestamp,
    Duration,
    PoolId,
    BeneficiaryId,
    AssetId,
)

# Strategies
from .strategies import (
    VestingStrategy,
    LinearStrategy,
    IntervalStrategy,
    MonthlyStrategy,
    CustomStrategy,
)

# Pools
from .pool import (
    PoolConfig,
    VestingPool,
    PoolUpdate,
)

# Allocations
from .allocation import Allocation

# Reports
from .reports import (
    AllocationLine,
    PoolBreakdown,
    WalletSummary,
    ClaimReceipt,
)

# Configuration
from .config import (
    EngineCFG,
    VestingWorkbookCFG,
)

__all__ = [
    # Base types
    "BPS_DENOMINATOR",
    "SECONDS_PER_DAY",
    "DomainModel",
    "TokenAmount",
    "BasisPoints",
    "Timestamp",
    "Duration",
    "PoolId",
    "BeneficiaryId",
    "AssetId",
    # Strategies
    "VestingStrategy",
    "LinearStrategy",
    "IntervalStrategy",
    "MonthlyStrategy",
    "CustomStrategy",
    # Pools
    "PoolConfig",
    "VestingPool",
    "PoolUpdate",
    # Allocations
    "Allocation",
    # Reports
    "AllocationLine",
    "PoolBreakdown",
    "WalletSummary",
    "ClaimReceipt",
    # Configuration
    "EngineCFG",
    "VestingWorkbookCFG",
]
