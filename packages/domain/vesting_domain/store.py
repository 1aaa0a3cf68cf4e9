"""Allocation store: per-pool beneficiary grant records.

Each pool owns an independent dict keyed by beneficiary. Records are never
deleted: removal only disables them, which is also why a removed
beneficiary cannot be added back to the same pool.
"""

import logging
from typing import Dict, List, Mapping

from .calculator import vested_amount
from .errors import (
    AllocationNotFound,
    AlreadyWhitelisted,
    InvalidConfig,
    NotWhitelisted,
    PoolNotFound,
)
from .schemas.allocation import Allocation
from .schemas.pool import VestingPool

logger = logging.getLogger(__name__)


class AllocationStore:
    """Owns every allocation, grouped by pool id.

    Pools must be registered (register_pool) before allocations can be added.
    """

    def __init__(self):
        self._by_pool: Dict[int, Dict[str, Allocation]] = {}

    def register_pool(self, pool_id: int) -> None:
        self._by_pool.setdefault(pool_id, {})

    def _pool_map(self, pool_id: int) -> Dict[str, Allocation]:
        try:
            return self._by_pool[pool_id]
        except KeyError:
            raise PoolNotFound(pool_id) from None

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def get(self, pool_id: int, beneficiary: str) -> Allocation:
        """Look up an allocation record (active or removed).

        Raises:
            PoolNotFound: If the pool is unknown
            AllocationNotFound: If the beneficiary was never added to the pool
        """
        allocation = self._pool_map(pool_id).get(beneficiary)
        if allocation is None:
            raise AllocationNotFound(pool_id, beneficiary)
        return allocation

    def find(self, pool_id: int, beneficiary: str):
        """Like get(), but returns None instead of raising for a missing record."""
        return self._by_pool.get(pool_id, {}).get(beneficiary)

    def allocations_for(self, pool_id: int, include_removed: bool = False) -> List[Allocation]:
        """Allocations of a pool, in insertion order."""
        allocations = self._pool_map(pool_id).values()
        return [a for a in allocations if include_removed or a.is_active]

    def allocations_of(self, beneficiary: str, include_removed: bool = False) -> List[Allocation]:
        """Allocations of a beneficiary across all pools, in pool id order."""
        found = []
        for pool_id in sorted(self._by_pool):
            allocation = self._by_pool[pool_id].get(beneficiary)
            if allocation is not None and (include_removed or allocation.is_active):
                found.append(allocation)
        return found

    # ------------------------------------------------------------------ #
    # Administrative operations
    # ------------------------------------------------------------------ #

    def add_allocation(self, pool_id: int, beneficiary: str, total_granted: int, now: int) -> Allocation:
        """Whitelist a beneficiary in a pool.

        Raises:
            PoolNotFound: If the pool is unknown
            AlreadyWhitelisted: If a record exists, even a removed one
            InvalidConfig: If the amount or identity fails validation
        """
        return self.add_allocations(pool_id, {beneficiary: total_granted}, now)[0]

    def add_allocations(self, pool_id: int, grants: Mapping[str, int], now: int) -> List[Allocation]:
        """Whitelist several beneficiaries in a pool; all or none are added.

        Every record is built and validated before any is stored.

        Raises:
            PoolNotFound: If the pool is unknown
            AlreadyWhitelisted: If any beneficiary already has a record
            InvalidConfig: If any amount or identity fails validation
        """
        allocations = self._pool_map(pool_id)

        built = []
        for beneficiary, total_granted in grants.items():
            if beneficiary in allocations:
                raise AlreadyWhitelisted(f"{beneficiary} already has an allocation in pool {pool_id}")
            try:
                built.append(Allocation(
                    pool_id=pool_id,
                    beneficiary=beneficiary,
                    total_granted=total_granted,
                    join_time=now,
                ))
            except (TypeError, ValueError) as exc:
                raise InvalidConfig(f"Invalid allocation for {beneficiary!r}: {exc}") from exc

        for allocation in built:
            allocations[allocation.beneficiary] = allocation
            logger.info(
                "Allocation added: pool=%d beneficiary=%s amount=%d",
                pool_id, allocation.beneficiary, allocation.total_granted,
            )
        return built

    def remove_allocation(self, pool_id: int, beneficiary: str) -> Allocation:
        """Soft-remove an allocation; the record is kept.

        Raises:
            PoolNotFound: If the pool is unknown
            NotWhitelisted: If there is no active allocation
        """
        allocation = self._pool_map(pool_id).get(beneficiary)
        if allocation is None or allocation.disabled:
            raise NotWhitelisted(f"{beneficiary} has no active allocation in pool {pool_id}")

        allocation.disabled = True
        logger.info("Allocation removed: pool=%d beneficiary=%s", pool_id, beneficiary)
        return allocation

    def set_allocation_amount(
        self, pool: VestingPool, beneficiary: str, new_total: int, now: int
    ) -> Allocation:
        """Change a beneficiary's total grant.

        The new grant may not fall below what has already been distributed,
        nor make the currently vested amount fall below it.

        Raises:
            AllocationNotFound: If the beneficiary has no record in the pool
            InvalidConfig: If the new total breaks the distribution floor
        """
        allocation = self.get(pool.pool_id, beneficiary)

        if new_total < 0:
            raise InvalidConfig(f"Allocation amount must be non-negative, got {new_total}")
        if new_total < allocation.distributed_amount:
            raise InvalidConfig(
                f"New total {new_total} for {beneficiary} is below the "
                f"{allocation.distributed_amount} already distributed"
            )

        if allocation.revoked:
            if new_total < allocation.vested_ceiling():
                raise InvalidConfig(
                    f"New total {new_total} for {beneficiary} is below the "
                    f"{allocation.vested_ceiling()} frozen at revocation"
                )
        else:
            candidate = allocation.model_copy(update={"total_granted": new_total})
            vested = vested_amount(pool, candidate, now)
            if vested < allocation.distributed_amount:
                raise InvalidConfig(
                    f"New total {new_total} for {beneficiary} would vest only {vested}, "
                    f"below the {allocation.distributed_amount} already distributed"
                )

        previous = allocation.total_granted
        allocation.total_granted = new_total
        logger.info(
            "Allocation amount changed: pool=%d beneficiary=%s %d -> %d",
            pool.pool_id, beneficiary, previous, new_total,
        )
        return allocation

    def revoke_allocation(self, pool: VestingPool, beneficiary: str, now: int) -> Allocation:
        """Freeze an allocation at its distributed amount.

        Raises:
            InvalidConfig: If the pool is not revocable
            AllocationNotFound: If the beneficiary has no record in the pool
            NotWhitelisted: If the allocation is removed or already revoked
        """
        if not pool.revocable:
            raise InvalidConfig(f"Pool {pool.pool_id} is not revocable")

        allocation = self.get(pool.pool_id, beneficiary)
        if allocation.disabled or allocation.revoked:
            raise NotWhitelisted(
                f"{beneficiary} has no revocable allocation in pool {pool.pool_id}"
            )

        # Amounts reserved by an in-flight claim count as distributed here
        allocation.frozen_vested = allocation.distributed_amount
        allocation.revoked = True
        allocation.revoke_time = now
        logger.info(
            "Allocation revoked: pool=%d beneficiary=%s frozen_at=%d",
            pool.pool_id, beneficiary, allocation.frozen_vested,
        )
        return allocation

    # ------------------------------------------------------------------ #
    # Distribution bookkeeping (used by ClaimAggregator)
    # ------------------------------------------------------------------ #

    def advance_distributed(self, pool_id: int, beneficiary: str, amount: int) -> None:
        """Add amount (may be negative to roll back) to distributed_amount."""
        allocation = self.get(pool_id, beneficiary)
        allocation.distributed_amount = allocation.distributed_amount + amount
