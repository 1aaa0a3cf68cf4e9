"""Vested and releasable amount computation.

Pure functions of (pool, allocation, now). All arithmetic is on Python ints;
divisions truncate toward zero (every operand is non-negative).

Vesting timeline for one allocation:

    now <= start < cliff        -> 0
    start < now < cliff         -> initial unlock
    now >= cliff                -> initial + strategy share of the remainder
    revoked                     -> frozen at the amount recorded on revocation

With a zero cliff, now == start == cliff falls in the now >= cliff row, so the
initial unlock is already vested at start.
"""

from .schemas.base import BPS_DENOMINATOR
from .schemas.pool import VestingPool
from .schemas.allocation import Allocation
from .schedule_index import ScheduleIndex


def initial_unlock(pool: VestingPool, allocation: Allocation) -> int:
    """Part of the grant released at start."""
    return allocation.total_granted * pool.initial_unlock_percent // BPS_DENOMINATOR


def unlocked_basis_points(pool: VestingPool, now: int) -> int:
    """Basis points of the post-initial remainder released by a step strategy at now.

    Only meaningful for interval, monthly and custom pools with now >= cliff.
    The result may exceed 10000 for interval/monthly pools; callers clamp.
    """
    strategy = pool.strategy

    if strategy.type == "interval":
        steps = (now - pool.cliff) // strategy.interval_length
        return steps * strategy.unlock_per_interval

    if strategy.type == "monthly":
        steps = ScheduleIndex(pool.timestamps).steps_elapsed(now)
        return steps * strategy.unlock_per_interval

    if strategy.type == "custom":
        index = ScheduleIndex(pool.timestamps, weights=pool.unlock_percentages)
        return min(index.unlocked_weight(now), BPS_DENOMINATOR)

    raise ValueError(f"{strategy.type} pools do not unlock in steps")


def vested_amount(pool: VestingPool, allocation: Allocation, now: int) -> int:
    """Cumulative amount vested for an allocation at time now.

    Args:
        pool: Pool the allocation belongs to
        allocation: The beneficiary's grant record
        now: Evaluation time

    Returns:
        Vested raw amount, in [0, total_granted]

    Example:
        start=0, cliff_duration=30d, initial=10%, Linear(90d), grant=1000
        now=0    -> 0
        now=10d  -> 100
        now=30d  -> 100
        now=75d  -> 550
        now=120d -> 1000

    Note:
        A revoked allocation returns the distributed_amount recorded when it
        was revoked; nothing further accrues, and a later rollback of an
        in-flight claim does not lower it.
    """
    total = allocation.total_granted
    initial = initial_unlock(pool, allocation)

    if allocation.revoked:
        return allocation.vested_ceiling()

    if now < pool.cliff:
        # The initial unlock is released once start has passed
        return initial if now > pool.start else 0

    remaining = total - initial
    strategy = pool.strategy

    if strategy.type == "linear":
        if now >= pool.cliff + strategy.duration:
            return total
        return initial + remaining * (now - pool.cliff) // strategy.duration

    unlocked_bp = unlocked_basis_points(pool, now)
    if unlocked_bp >= BPS_DENOMINATOR:
        return total
    return initial + remaining * unlocked_bp // BPS_DENOMINATOR


def releasable_amount(pool: VestingPool, allocation: Allocation, now: int) -> int:
    """Amount the beneficiary could claim from this pool at time now.

    Returns 0 (not an error) for paused pools and removed allocations.
    Never negative.
    """
    if pool.paused or allocation.disabled:
        return 0
    return max(vested_amount(pool, allocation, now) - allocation.distributed_amount, 0)
