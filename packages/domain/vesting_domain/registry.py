"""Pool registry: creation, modification and pausing of vesting pools.

Pools live in an arena indexed by their integer id (ids are list positions,
assigned in creation order and never reused).
"""

import logging
from typing import Any, Iterable, Iterator, List, Mapping, Tuple, Type, TypeVar, Union

from pydantic import ValidationError

from .calculator import vested_amount
from .calendar_math import add_months
from .errors import InvalidConfig, PoolNotFound
from .schemas.allocation import Allocation
from .schemas.base import BPS_DENOMINATOR, DomainModel
from .schemas.pool import PoolConfig, PoolUpdate, VestingPool
from .schemas.strategies import MonthlyStrategy

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=DomainModel)


def coerce_model(model_cls: Type[ModelT], data: Union[ModelT, Mapping[str, Any]]) -> ModelT:
    """Validate raw input into model_cls, reporting failures as InvalidConfig.

    Args:
        model_cls: Target pydantic model
        data: Either an instance of model_cls (returned as is) or a mapping

    Raises:
        InvalidConfig: If pydantic validation fails
    """
    if isinstance(data, model_cls):
        return data
    try:
        return model_cls.model_validate(data)
    except ValidationError as exc:
        raise InvalidConfig(f"Invalid {model_cls.__name__}: {exc}") from exc


def monthly_schedule(cliff: int, strategy: MonthlyStrategy) -> Tuple[List[int], List[int]]:
    """Generate the unlock dates of a Monthly pool.

    Steps month_gap calendar months at a time from the cliff until the
    cumulative unlock reaches 10000 bp. Each date is computed from the cliff
    directly (add_months(cliff, k * month_gap)), so a clamped day-of-month in
    one step does not drift into later steps.

    Returns:
        (timestamps, unlock_percentages)

    Example:
        cliff=2024-01-31, month_gap=1, unlock_per_interval=3000
        -> 2024-02-29, 2024-03-31, 2024-04-30, 2024-05-31 (4 steps, 12000 bp)
    """
    step_count = -(-BPS_DENOMINATOR // strategy.unlock_per_interval)  # ceil
    timestamps = [
        add_months(cliff, step * strategy.month_gap)
        for step in range(1, step_count + 1)
    ]
    return timestamps, [strategy.unlock_per_interval] * step_count


class PoolRegistry:
    """Owns every vesting pool.

    Example:
        registry = PoolRegistry()
        pool_id = registry.create_pool(
            {"asset": "ABC", "start": 0, "cliff_duration": 2_592_000,
             "strategy": {"type": "linear", "duration": 7_776_000}},
            now=0,
        )
        registry.get(pool_id).cliff  -> 2592000
    """

    def __init__(self, require_future_start: bool = False):
        self.require_future_start = require_future_start
        self._pools: List[VestingPool] = []

    def __len__(self) -> int:
        return len(self._pools)

    def __iter__(self) -> Iterator[VestingPool]:
        return iter(list(self._pools))

    def __contains__(self, pool_id: object) -> bool:
        return isinstance(pool_id, int) and 0 <= pool_id < len(self._pools)

    def get(self, pool_id: int) -> VestingPool:
        """Look up a pool.

        Raises:
            PoolNotFound: If pool_id was never assigned
        """
        if pool_id not in self:
            raise PoolNotFound(pool_id)
        return self._pools[pool_id]

    def pools(self) -> List[VestingPool]:
        """All pools in id order."""
        return list(self._pools)

    def pools_for_asset(self, asset: str) -> List[VestingPool]:
        """Pools vesting asset, in id order."""
        return [pool for pool in self._pools if pool.asset == asset]

    # ------------------------------------------------------------------ #
    # Administrative operations
    # ------------------------------------------------------------------ #

    def create_pool(self, config: Union[PoolConfig, Mapping[str, Any]], now: int) -> int:
        """Validate a pool configuration and store it.

        Args:
            config: PoolConfig or an equivalent mapping
            now: Current time (used by require_future_start)

        Returns:
            The new pool's id

        Raises:
            InvalidConfig: On any violated precondition; no pool is created
        """
        config = coerce_model(PoolConfig, config)

        if self.require_future_start and config.start < now:
            raise InvalidConfig(f"Pool start {config.start} lies before the current time {now}")

        data = config.model_dump()
        data["pool_id"] = len(self._pools)
        data["timestamps"], data["unlock_percentages"] = self._schedule_for(
            config.strategy, config.start + config.cliff_duration
        )

        pool = coerce_model(VestingPool, data)
        self._pools.append(pool)
        logger.info(
            "Pool %d (%s) created: asset=%s strategy=%s start=%d cliff=%d",
            pool.pool_id, pool.name, pool.asset, pool.strategy_type, pool.start, pool.cliff,
        )
        return pool.pool_id

    def modify_pool(
        self,
        pool_id: int,
        update: Union[PoolUpdate, Mapping[str, Any]],
        allocations: Iterable[Allocation],
        now: int,
    ) -> VestingPool:
        """Change the timing parameters of an existing pool.

        The modified pool is validated as a whole, then checked against every
        live allocation: an edit that would leave any allocation with less
        vested than it has already been paid is rejected. Only then is the
        stored pool replaced.

        Args:
            pool_id: Pool to modify
            update: Fields to change (see PoolUpdate)
            allocations: The pool's allocations, for the distribution floor check
            now: Current time

        Returns:
            The updated pool

        Raises:
            PoolNotFound: If pool_id is unknown
            InvalidConfig: If the update is invalid or breaks the floor
        """
        update = coerce_model(PoolUpdate, update)
        pool = self.get(pool_id)
        if update.is_empty():
            raise InvalidConfig("Pool update does not change any field")

        data = pool.model_dump()
        strategy = data["strategy"]

        for field_name in ("start", "cliff_duration", "initial_unlock_percent"):
            value = getattr(update, field_name)
            if value is not None:
                data[field_name] = value

        if update.duration is not None:
            if strategy["type"] == "linear":
                strategy["duration"] = update.duration
            elif strategy["type"] == "interval":
                strategy["interval_length"] = update.duration
            else:
                raise InvalidConfig(f"{strategy['type']} pools have no duration to modify")

        if update.timestamps is not None:
            if strategy["type"] != "custom":
                raise InvalidConfig(
                    f"Unlock schedules can only be replaced on custom pools, not {strategy['type']}"
                )
            strategy["timestamps"] = update.timestamps
            strategy["unlock_percentages"] = update.unlock_percentages
            data["timestamps"] = update.timestamps
            data["unlock_percentages"] = update.unlock_percentages

        if strategy["type"] == "monthly" and (
            update.start is not None or update.cliff_duration is not None
        ):
            data["timestamps"], data["unlock_percentages"] = self._schedule_for(
                pool.strategy, data["start"] + data["cliff_duration"]
            )

        candidate = coerce_model(VestingPool, data)
        self._check_distribution_floor(candidate, allocations, now)

        self._pools[pool_id] = candidate
        logger.info(
            "Pool %d modified: %s", pool_id, update.model_dump(exclude_none=True)
        )
        return candidate

    def set_paused(self, pool_id: int, paused: bool) -> None:
        """Stop (paused=True) or resume releases from a pool."""
        pool = self.get(pool_id)
        pool.paused = paused
        logger.info("Pool %d %s", pool_id, "paused" if paused else "resumed")

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _schedule_for(strategy, cliff: int) -> Tuple[List[int], List[int]]:
        if strategy.type == "monthly":
            return monthly_schedule(cliff, strategy)
        if strategy.type == "custom":
            return list(strategy.timestamps), list(strategy.unlock_percentages)
        return [], []

    @staticmethod
    def _check_distribution_floor(
        candidate: VestingPool, allocations: Iterable[Allocation], now: int
    ) -> None:
        for allocation in allocations:
            if allocation.revoked or allocation.disabled:
                continue
            vested = vested_amount(candidate, allocation, now)
            if vested < allocation.distributed_amount:
                raise InvalidConfig(
                    f"Modification would leave {allocation.beneficiary} in pool "
                    f"{candidate.pool_id} with {vested} vested but "
                    f"{allocation.distributed_amount} already distributed"
                )
