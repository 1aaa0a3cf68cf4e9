"""Allocation tracking for pool beneficiaries.

An Allocation is one beneficiary's grant inside one pool, together with
how much of it has already been paid out.
"""

from typing import Optional
from pydantic import Field

from .base import DomainModel, PoolId, BeneficiaryId, TokenAmount, Timestamp


# =============================================================================
# Allocation
# =============================================================================

class Allocation(DomainModel):
    """A beneficiary's grant record within one pool.

    Key distinction:
        - total_granted: everything the beneficiary will eventually receive
        - distributed_amount: what has already been transferred

    Lifecycle flags:
        - revoked: vesting is frozen at frozen_vested, the distributed_amount
          recorded when the allocation was revoked (revoke_time records when)
        - disabled: soft-removed; the record is kept, so the beneficiary can
          never be added to the same pool again

    Invariant maintained by the engine:
        distributed_amount <= vested_amount(now) <= total_granted
    """

    pool_id: PoolId = Field(
        description="Pool this allocation belongs to"
    )

    beneficiary: BeneficiaryId = Field(
        description="Identity receiving the tokens"
    )

    total_granted: TokenAmount = Field(
        description="Total grant in raw token units"
    )

    distributed_amount: TokenAmount = Field(
        default=0,
        description="Raw token units already paid out"
    )

    join_time: Timestamp = Field(
        description="Time the allocation was added"
    )

    revoked: bool = Field(
        default=False,
        description="True once vesting has been frozen by an administrator"
    )

    revoke_time: Optional[Timestamp] = Field(
        default=None,
        description="Time of revocation (None = not revoked)"
    )

    frozen_vested: Optional[TokenAmount] = Field(
        default=None,
        description="Vested amount fixed at revocation (None = not revoked)"
    )

    disabled: bool = Field(
        default=False,
        description="True once the allocation has been removed"
    )

    @property
    def is_active(self) -> bool:
        """Whether the allocation still takes part in claims."""
        return not self.disabled

    def outstanding(self) -> int:
        """Grant not yet paid out.

        Returns:
            total_granted - distributed_amount, or once revoked whatever of
            the frozen vested amount is still unpaid
        """
        if self.revoked:
            return max(self.vested_ceiling() - self.distributed_amount, 0)
        return max(self.total_granted - self.distributed_amount, 0)

    def vested_ceiling(self) -> int:
        """Frozen vested amount of a revoked allocation.

        Records revoked without a frozen_vested value fall back to
        distributed_amount.
        """
        if self.frozen_vested is None:
            return self.distributed_amount
        return self.frozen_vested
