"""Claim aggregation across every pool of one asset.

A claim runs in three phases:

    1. reserve   - under the state lock, compute each pool's releasable amount
                   and advance its distributed_amount by exactly that much
    2. transfer  - hand the total to the transfer collaborator (no state lock)
    3. commit    - keep the reservation on success; on failure subtract every
                   reserved amount again and raise TransferFailed

Claims by the same beneficiary are serialized by a per-beneficiary lock held
across all three phases, so two concurrent claims can never both pay the
same unlocked units.
"""

import logging
import threading
import weakref
from typing import Callable, Dict, Iterable, Optional

from .calculator import releasable_amount
from .collaborators import AssetTransfer, to_display_units
from .errors import NothingToClaim, TransferFailed
from .registry import PoolRegistry
from .schemas.reports import ClaimReceipt
from .store import AllocationStore

logger = logging.getLogger(__name__)


class _ClaimLock:
    """Per-beneficiary mutex that can be held in a WeakValueDictionary."""

    __slots__ = ("_lock", "__weakref__")

    def __init__(self):
        self._lock = threading.Lock()

    def __enter__(self):
        self._lock.acquire()
        return self

    def __exit__(self, *exc_info):
        self._lock.release()


class ClaimAggregator:
    """Computes and pays out releasable amounts for a beneficiary.

    Args:
        registry: Pool registry
        store: Allocation store
        transfer: Collaborator that moves tokens
        state_lock: Lock guarding all engine state (shared with the engine)
        decimals_of: Asset decimals lookup, for the receipt's display amount
    """

    def __init__(
        self,
        registry: PoolRegistry,
        store: AllocationStore,
        transfer: AssetTransfer,
        state_lock: threading.RLock,
        decimals_of: Callable[[str], int] = lambda asset: 0,
    ):
        self.registry = registry
        self.store = store
        self.transfer = transfer
        self.decimals_of = decimals_of
        self._state_lock = state_lock
        # Entries disappear once no claim holds the lock
        self._claim_locks = weakref.WeakValueDictionary()
        self._claim_locks_guard = threading.Lock()

    def _claim_lock(self, beneficiary: str) -> _ClaimLock:
        with self._claim_locks_guard:
            lock = self._claim_locks.get(beneficiary)
            if lock is None:
                lock = _ClaimLock()
                self._claim_locks[beneficiary] = lock
            return lock

    def releasable_by_pool(
        self,
        beneficiary: str,
        asset: str,
        now: int,
        pool_ids: Optional[Iterable[int]] = None,
    ) -> Dict[int, int]:
        """Positive releasable amounts per pool for one beneficiary and asset.

        Pools that are paused, or where the beneficiary has no active
        allocation, are skipped silently.

        Raises:
            PoolNotFound: If pool_ids names an unknown pool
        """
        pools = self.registry.pools_for_asset(asset)
        if pool_ids is not None:
            wanted = set(pool_ids)
            for pool_id in wanted:
                self.registry.get(pool_id)
            pools = [pool for pool in pools if pool.pool_id in wanted]

        amounts: Dict[int, int] = {}
        for pool in pools:
            if pool.paused:
                continue
            allocation = self.store.find(pool.pool_id, beneficiary)
            if allocation is None or allocation.disabled:
                continue
            amount = releasable_amount(pool, allocation, now)
            if amount > 0:
                amounts[pool.pool_id] = amount
        return amounts

    def claim(
        self,
        beneficiary: str,
        asset: str,
        now: int,
        pool_ids: Optional[Iterable[int]] = None,
    ) -> ClaimReceipt:
        """Pay out everything releasable for asset in a single transfer.

        Args:
            beneficiary: Identity claiming
            asset: Asset to claim
            now: Current time
            pool_ids: Optional subset of pools to claim from

        Returns:
            ClaimReceipt with the total and per-pool contributions

        Raises:
            PoolNotFound: If pool_ids names an unknown pool
            NothingToClaim: If nothing is releasable (no transfer attempted)
            TransferFailed: If the transfer failed (all reservations rolled back)
        """
        lock = self._claim_lock(beneficiary)
        with lock:
            with self._state_lock:
                contributions = self.releasable_by_pool(beneficiary, asset, now, pool_ids)
                total = sum(contributions.values())
                if total == 0:
                    logger.warning("Nothing to claim for %s in %s", beneficiary, asset)
                    raise NothingToClaim(f"{beneficiary} has nothing releasable in {asset}")
                for pool_id, amount in contributions.items():
                    self.store.advance_distributed(pool_id, beneficiary, amount)

            try:
                transferred = self.transfer.transfer(asset, beneficiary, total)
            except Exception as exc:
                self._roll_back(beneficiary, contributions)
                raise TransferFailed(
                    f"Transfer of {total} {asset} to {beneficiary} raised: {exc}"
                ) from exc

            if not transferred:
                self._roll_back(beneficiary, contributions)
                raise TransferFailed(f"Transfer of {total} {asset} to {beneficiary} was refused")

        logger.info(
            "Claim committed: beneficiary=%s asset=%s amount=%d pools=%s",
            beneficiary, asset, total, sorted(contributions),
        )
        return ClaimReceipt(
            beneficiary=beneficiary,
            asset=asset,
            amount=total,
            display_amount=to_display_units(total, self.decimals_of(asset)),
            contributions=contributions,
            claimed_at=now,
        )

    def _roll_back(self, beneficiary: str, contributions: Dict[int, int]) -> None:
        with self._state_lock:
            for pool_id, amount in contributions.items():
                self.store.advance_distributed(pool_id, beneficiary, -amount)
        logger.warning(
            "Transfer failed for %s; rolled back reservations in pools %s",
            beneficiary, sorted(contributions),
        )
