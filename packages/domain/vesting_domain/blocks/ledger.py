"""Allocation ledger block.

Converts engine state at a valuation time into DataFrames for Excel
rendering or analysis.

Output DataFrames:
- allocation_ledger: one row per (pool, beneficiary) with vested/claimed/releasable amounts
- pool_summary: the ledger aggregated per pool
"""

from typing import List, Optional

import pandas as pd

from .base import Block, BlockContext
from .. import calculator

LEDGER_COLUMNS = [
    "pool_id",
    "pool_name",
    "asset",
    "strategy",
    "beneficiary",
    "total_granted",
    "vested",
    "claimed",
    "releasable",
    "remaining",
    "revoked",
    "removed",
]

SUMMARY_COLUMNS = [
    "pool_id",
    "pool_name",
    "asset",
    "strategy",
    "paused",
    "beneficiaries",
    "total_granted",
    "vested",
    "claimed",
    "releasable",
    "remaining",
]


class AllocationLedgerBlock(Block):
    """Per-allocation and per-pool vesting ledger.

    Inputs (from context):
        - vesting_engine: VestingEngine to read
        - as_of: Valuation timestamp

    Outputs (to context):
        - allocation_ledger: DataFrame with columns:
            * pool_id, pool_name, asset, strategy
            * beneficiary
            * total_granted: Grant in raw units
            * vested: Vested at as_of
            * claimed: Already distributed
            * releasable: Claimable at as_of (0 for paused pools)
            * remaining: Grant not yet distributed (0 once revoked)
            * revoked, removed: Lifecycle flags

        - pool_summary: DataFrame with one row per pool:
            * pool_id, pool_name, asset, strategy, paused
            * beneficiaries: Number of allocations in the ledger
            * total_granted, vested, claimed, releasable, remaining: Sums

    Example:
        context = BlockContext()
        context.set("vesting_engine", engine)
        context.set("as_of", engine.now())

        AllocationLedgerBlock().execute(context)
        context.get("pool_summary")
    """

    def __init__(
        self,
        engine_key: str = "vesting_engine",
        as_of_key: str = "as_of",
        pool_ids: Optional[List[int]] = None,
        include_removed: bool = False,
    ):
        """Initialize AllocationLedgerBlock.

        Args:
            engine_key: Context key for the VestingEngine
            as_of_key: Context key for the valuation timestamp
            pool_ids: Pools to include (None = all)
            include_removed: Also list soft-removed allocations
        """
        self.engine_key = engine_key
        self.as_of_key = as_of_key
        self.pool_ids = pool_ids
        self.include_removed = include_removed

    def inputs(self) -> List[str]:
        return [self.engine_key, self.as_of_key]

    def outputs(self) -> List[str]:
        return ["allocation_ledger", "pool_summary"]

    def execute(self, context: BlockContext) -> None:
        engine = context.get(self.engine_key)
        as_of: int = context.get(self.as_of_key)

        pools = [
            pool for pool in engine.pools()
            if self.pool_ids is None or pool.pool_id in self.pool_ids
        ]

        ledger_df = self._compute_ledger(engine, pools, as_of)
        context.set("allocation_ledger", ledger_df)
        context.set("pool_summary", self._compute_summary(pools, ledger_df))

    def _compute_ledger(self, engine, pools, as_of: int) -> pd.DataFrame:
        rows = []
        for pool in pools:
            for allocation in engine.allocation_records(pool.pool_id, self.include_removed):
                rows.append({
                    "pool_id": pool.pool_id,
                    "pool_name": pool.name,
                    "asset": pool.asset,
                    "strategy": pool.strategy_type,
                    "beneficiary": allocation.beneficiary,
                    "total_granted": allocation.total_granted,
                    "vested": calculator.vested_amount(pool, allocation, as_of),
                    "claimed": allocation.distributed_amount,
                    "releasable": calculator.releasable_amount(pool, allocation, as_of),
                    "remaining": allocation.outstanding(),
                    "revoked": allocation.revoked,
                    "removed": allocation.disabled,
                })

        return pd.DataFrame(rows, columns=LEDGER_COLUMNS)

    def _compute_summary(self, pools, ledger_df: pd.DataFrame) -> pd.DataFrame:
        rows = []
        for pool in pools:
            pool_rows = ledger_df[ledger_df["pool_id"] == pool.pool_id]
            rows.append({
                "pool_id": pool.pool_id,
                "pool_name": pool.name,
                "asset": pool.asset,
                "strategy": pool.strategy_type,
                "paused": pool.paused,
                "beneficiaries": len(pool_rows),
                "total_granted": int(pool_rows["total_granted"].sum()),
                "vested": int(pool_rows["vested"].sum()),
                "claimed": int(pool_rows["claimed"].sum()),
                "releasable": int(pool_rows["releasable"].sum()),
                "remaining": int(pool_rows["remaining"].sum()),
            })

        return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)
