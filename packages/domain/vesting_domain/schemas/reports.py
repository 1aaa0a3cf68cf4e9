"""Read-only report models returned by engine queries and claims."""

from typing import Dict, List
from pydantic import Field

from .base import DomainModel, PoolId, BeneficiaryId, AssetId, TokenAmount


# =============================================================================
# Pool Allocation Listing
# =============================================================================

class AllocationLine(DomainModel):
    """One row of allocations_for_pool()."""

    beneficiary: BeneficiaryId
    claimed: TokenAmount = Field(description="Raw units already paid out")
    remaining: TokenAmount = Field(description="Raw units still to be paid (0 once revoked)")


# =============================================================================
# Wallet Summary
# =============================================================================

class PoolBreakdown(DomainModel):
    """A beneficiary's position in one pool.

    Raw fields are in the asset's smallest unit; display_* fields are divided
    by 10**decimals (integer division) for presentation only.
    """

    pool_id: PoolId
    pool_name: str
    asset: AssetId
    total_granted: TokenAmount
    claimed: TokenAmount
    remaining: TokenAmount
    releasable: TokenAmount
    revoked: bool = False
    decimals: int = Field(default=0, ge=0)
    display_claimed: int = 0
    display_remaining: int = 0


class WalletSummary(DomainModel):
    """Everything a beneficiary holds across pools.

    total_claimed and total_remaining are sums of display units, since pools
    may vest different assets with different decimals.
    """

    beneficiary: BeneficiaryId
    blacklisted: bool = False
    total_claimed: int = 0
    total_remaining: int = 0
    pools: List[PoolBreakdown] = Field(default_factory=list)


# =============================================================================
# Claim Receipt
# =============================================================================

class ClaimReceipt(DomainModel):
    """Result of a successful claim.

    contributions maps each pool that paid out to the raw amount it
    contributed; the values sum to amount.
    """

    beneficiary: BeneficiaryId
    asset: AssetId
    amount: TokenAmount
    display_amount: int = 0
    contributions: Dict[int, int] = Field(default_factory=dict)
    claimed_at: int
