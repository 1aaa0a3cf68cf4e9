"""VestingEngine: the single owner of all vesting state.

The engine wires the pool registry, allocation store, deny-list and claim
aggregator together, applies capability guards at its public boundary, and
runs every operation atomically under one state lock.

Example:
    engine = VestingEngine(
        authorizer=StaticAuthorizer(["admin"]),
        transfer=InMemoryLedger(),
        clock=lambda: 1_704_067_200,
    )
    pool_id = engine.create_pool("admin", PoolConfig(
        name="Team",
        asset="ABC",
        start=1_704_067_200,
        cliff_duration=365 * 86_400,
        strategy=MonthlyStrategy(unlock_per_interval=1000, month_gap=1),
        revocable=True,
    ))
    engine.add_allocation("admin", pool_id, "alice", 1_000_000)
    ...
    receipt = engine.claim("alice", "ABC")
"""

import logging
import threading
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from . import calculator
from .aggregator import ClaimAggregator
from .collaborators import (
    AssetMetadata,
    AssetTransfer,
    Authorizer,
    Clock,
    system_clock,
    to_display_units,
)
from .deny_list import DenyList
from .guards import rejects_blocked, requires_admin
from .registry import PoolRegistry
from .schemas.allocation import Allocation
from .schemas.config import EngineCFG
from .schemas.pool import PoolConfig, PoolUpdate, VestingPool
from .schemas.reports import (
    AllocationLine,
    ClaimReceipt,
    PoolBreakdown,
    WalletSummary,
)
from .store import AllocationStore

logger = logging.getLogger(__name__)


class VestingEngine:
    """Token-grant vesting engine.

    Args:
        authorizer: Decides who may run administrative operations
        transfer: Moves claimed tokens to beneficiaries
        clock: Returns the current integer timestamp (default: wall clock)
        metadata: Asset decimals for display (default: config.default_decimals)
        config: Engine configuration
    """

    def __init__(
        self,
        authorizer: Authorizer,
        transfer: AssetTransfer,
        clock: Optional[Clock] = None,
        metadata: Optional[AssetMetadata] = None,
        config: Optional[EngineCFG] = None,
    ):
        self.config = config or EngineCFG()
        self.authorizer = authorizer
        self.transfer = transfer
        self.metadata = metadata
        self._clock = clock or system_clock
        self._lock = threading.RLock()

        self.registry = PoolRegistry(require_future_start=self.config.require_future_start)
        self.store = AllocationStore()
        self.deny_list = DenyList()
        self.aggregator = ClaimAggregator(
            self.registry,
            self.store,
            transfer,
            state_lock=self._lock,
            decimals_of=self.decimals_of,
        )
        logger.info(
            "VestingEngine %s initialized (require_future_start=%s)",
            self.config.name, self.config.require_future_start,
        )

    # ------------------------------------------------------------------ #
    # Collaborator access
    # ------------------------------------------------------------------ #

    def now(self) -> int:
        """Current time from the clock collaborator."""
        timestamp = self._clock()
        try:
            return int(timestamp)
        except (TypeError, ValueError) as exc:
            raise ValueError("clock must return an integer timestamp") from exc

    def decimals_of(self, asset: str) -> int:
        if self.metadata is None:
            return self.config.default_decimals
        return self.metadata.decimals(asset)

    # ------------------------------------------------------------------ #
    # Pool administration
    # ------------------------------------------------------------------ #

    @requires_admin
    def create_pool(self, caller: str, config: Union[PoolConfig, Mapping[str, Any]]) -> int:
        """Create a pool and return its id. See PoolRegistry.create_pool."""
        with self._lock:
            pool_id = self.registry.create_pool(config, self.now())
            self.store.register_pool(pool_id)
            return pool_id

    @requires_admin
    def modify_pool(
        self,
        caller: str,
        pool_id: int,
        update: Union[PoolUpdate, Mapping[str, Any], None] = None,
        **fields: Any,
    ) -> VestingPool:
        """Change pool timing. Accepts a PoolUpdate, a mapping, or keyword fields.

        Example:
            engine.modify_pool("admin", pool_id, cliff_duration=60 * 86_400)
        """
        if update is None:
            update = fields
        with self._lock:
            allocations = self.store.allocations_for(pool_id) if pool_id in self.registry else []
            return self.registry.modify_pool(pool_id, update, allocations, self.now())

    @requires_admin
    def set_paused(self, caller: str, pool_id: int, paused: bool) -> None:
        with self._lock:
            self.registry.set_paused(pool_id, paused)

    # ------------------------------------------------------------------ #
    # Allocation administration
    # ------------------------------------------------------------------ #

    @requires_admin
    def add_allocation(self, caller: str, pool_id: int, beneficiary: str, total_granted: int) -> Allocation:
        with self._lock:
            self.registry.get(pool_id)
            return self.store.add_allocation(pool_id, beneficiary, total_granted, self.now())

    @requires_admin
    def add_allocations(self, caller: str, pool_id: int, grants: Mapping[str, int]) -> List[Allocation]:
        """Whitelist several beneficiaries at once; all or none are added.

        Raises:
            AlreadyWhitelisted: If any beneficiary already has a record
            InvalidConfig: If any amount or identity is invalid
        """
        with self._lock:
            self.registry.get(pool_id)
            return self.store.add_allocations(pool_id, grants, self.now())

    @requires_admin
    def remove_allocation(self, caller: str, pool_id: int, beneficiary: str) -> None:
        with self._lock:
            self.registry.get(pool_id)
            self.store.remove_allocation(pool_id, beneficiary)

    @requires_admin
    def set_allocation_amount(self, caller: str, pool_id: int, beneficiary: str, new_total: int) -> Allocation:
        with self._lock:
            pool = self.registry.get(pool_id)
            return self.store.set_allocation_amount(pool, beneficiary, new_total, self.now())

    @requires_admin
    def revoke_allocation(self, caller: str, pool_id: int, beneficiary: str) -> Allocation:
        with self._lock:
            pool = self.registry.get(pool_id)
            return self.store.revoke_allocation(pool, beneficiary, self.now())

    @requires_admin
    def set_blocked(self, caller: str, identity: str, blocked: bool) -> None:
        with self._lock:
            self.deny_list.set_blocked(identity, blocked)

    # ------------------------------------------------------------------ #
    # Claims
    # ------------------------------------------------------------------ #

    @rejects_blocked
    def claim(
        self,
        beneficiary: str,
        asset: str,
        pool_ids: Optional[Iterable[int]] = None,
    ) -> ClaimReceipt:
        """Claim everything releasable for asset across pools (or the given subset)."""
        return self.aggregator.claim(beneficiary, asset, self.now(), pool_ids)

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def get_pool(self, pool_id: int) -> VestingPool:
        with self._lock:
            return self.registry.get(pool_id).model_copy(deep=True)

    def pools(self) -> List[VestingPool]:
        with self._lock:
            return [pool.model_copy(deep=True) for pool in self.registry]

    def get_allocation(self, pool_id: int, beneficiary: str) -> Allocation:
        with self._lock:
            self.registry.get(pool_id)
            return self.store.get(pool_id, beneficiary).model_copy()

    def allocation_records(self, pool_id: int, include_removed: bool = False) -> List[Allocation]:
        """Copies of a pool's allocation records, in insertion order."""
        with self._lock:
            self.registry.get(pool_id)
            return [
                allocation.model_copy()
                for allocation in self.store.allocations_for(pool_id, include_removed)
            ]

    def is_blocked(self, identity: str) -> bool:
        return self.deny_list.is_blocked(identity)

    def vested_amount(self, pool_id: int, beneficiary: str, at: Optional[int] = None) -> int:
        """Vested amount of an allocation at time at (default: now).

        Raises:
            PoolNotFound, AllocationNotFound
        """
        with self._lock:
            pool = self.registry.get(pool_id)
            allocation = self.store.get(pool_id, beneficiary)
            return calculator.vested_amount(pool, allocation, self.now() if at is None else at)

    def releasable_amount(self, pool_id: int, beneficiary: str, at: Optional[int] = None) -> int:
        """Amount claimable from one pool at time at (default: now); 0 while paused.

        Raises:
            PoolNotFound, AllocationNotFound
        """
        with self._lock:
            pool = self.registry.get(pool_id)
            allocation = self.store.get(pool_id, beneficiary)
            return calculator.releasable_amount(pool, allocation, self.now() if at is None else at)

    def allocations_for_pool(self, pool_id: int) -> List[AllocationLine]:
        """(beneficiary, claimed, remaining) for every active allocation of a pool."""
        with self._lock:
            self.registry.get(pool_id)
            return [
                AllocationLine(
                    beneficiary=allocation.beneficiary,
                    claimed=allocation.distributed_amount,
                    remaining=allocation.outstanding(),
                )
                for allocation in self.store.allocations_for(pool_id)
            ]

    def wallet_summary(self, beneficiary: str) -> WalletSummary:
        """Deny-list status and per-pool breakdown for one beneficiary.

        Raw amounts are summed per asset first and converted to display units
        once per asset, so fractional units split across pools still count.
        """
        with self._lock:
            now = self.now()
            breakdowns = []
            raw_by_asset: Dict[str, List[int]] = {}
            for allocation in self.store.allocations_of(beneficiary):
                pool = self.registry.get(allocation.pool_id)
                decimals = self.decimals_of(pool.asset)
                remaining = allocation.outstanding()
                breakdowns.append(
                    PoolBreakdown(
                        pool_id=pool.pool_id,
                        pool_name=pool.name,
                        asset=pool.asset,
                        total_granted=allocation.total_granted,
                        claimed=allocation.distributed_amount,
                        remaining=remaining,
                        releasable=calculator.releasable_amount(pool, allocation, now),
                        revoked=allocation.revoked,
                        decimals=decimals,
                        display_claimed=to_display_units(allocation.distributed_amount, decimals),
                        display_remaining=to_display_units(remaining, decimals),
                    )
                )
                claimed_raw, remaining_raw = raw_by_asset.setdefault(pool.asset, [0, 0])
                raw_by_asset[pool.asset] = [
                    claimed_raw + allocation.distributed_amount,
                    remaining_raw + remaining,
                ]

            total_claimed = total_remaining = 0
            for asset, (claimed_raw, remaining_raw) in raw_by_asset.items():
                decimals = self.decimals_of(asset)
                total_claimed += to_display_units(claimed_raw, decimals)
                total_remaining += to_display_units(remaining_raw, decimals)

            return WalletSummary(
                beneficiary=beneficiary,
                blacklisted=self.deny_list.is_blocked(beneficiary),
                total_claimed=total_claimed,
                total_remaining=total_remaining,
                pools=breakdowns,
            )
