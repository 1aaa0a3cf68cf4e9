"""Unlock projection block.

Samples each pool's unlock curve at a list of times, expressed in basis
points of a grant, so pools with different strategies can be compared on
one chart or sheet.
"""

from typing import List, Optional

import pandas as pd

from .base import Block, BlockContext
from .. import calculator
from ..schemas import Allocation, BPS_DENOMINATOR

PROJECTION_COLUMNS = ["pool_id", "pool_name", "strategy", "time", "unlocked_bp"]


class UnlockProjectionBlock(Block):
    """Projects the unlocked share of a grant over time, per pool.

    Inputs (from context):
        - vesting_engine: VestingEngine to read
        - projection_times: Timestamps to sample

    Outputs (to context):
        - unlock_projection: DataFrame with columns:
            * pool_id, pool_name, strategy
            * time: Sample timestamp
            * unlocked_bp: Basis points of a grant vested at time (0..10000)

    The projection uses a nominal 10000-unit grant, so vested units equal
    basis points. Revocation and pausing do not apply to the projection.
    """

    def __init__(
        self,
        engine_key: str = "vesting_engine",
        times_key: str = "projection_times",
        pool_ids: Optional[List[int]] = None,
    ):
        self.engine_key = engine_key
        self.times_key = times_key
        self.pool_ids = pool_ids

    def inputs(self) -> List[str]:
        return [self.engine_key, self.times_key]

    def outputs(self) -> List[str]:
        return ["unlock_projection"]

    def execute(self, context: BlockContext) -> None:
        engine = context.get(self.engine_key)
        times: List[int] = sorted(context.get(self.times_key))

        rows = []
        for pool in engine.pools():
            if self.pool_ids is not None and pool.pool_id not in self.pool_ids:
                continue
            nominal = Allocation(
                pool_id=pool.pool_id,
                beneficiary="projection",
                total_granted=BPS_DENOMINATOR,
                join_time=pool.start,
            )
            for t in times:
                rows.append({
                    "pool_id": pool.pool_id,
                    "pool_name": pool.name,
                    "strategy": pool.strategy_type,
                    "time": t,
                    "unlocked_bp": calculator.vested_amount(pool, nominal, t),
                })

        context.set("unlock_projection", pd.DataFrame(rows, columns=PROJECTION_COLUMNS))
