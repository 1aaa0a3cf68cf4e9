"""Report blocks for vesting analysis.

This package contains the computation layer that transforms engine state into
DataFrames suitable for Excel rendering or other consumption.

Architecture:
    Engine state (pools, allocations) → Blocks (computation) → DataFrames (output)

Available blocks:
- AllocationLedgerBlock: Per-allocation ledger and per-pool summary at a valuation time
- UnlockProjectionBlock: Unlocked basis points per pool at sampled times

Usage:
    from vesting_domain.blocks import BlockExecutor, BlockContext, AllocationLedgerBlock

    context = BlockContext()
    context.set("vesting_engine", engine)
    context.set("as_of", engine.now())

    BlockExecutor([AllocationLedgerBlock()]).execute(context)
    ledger_df = context.get("allocation_ledger")
"""

from .base import Block, BlockExecutor, BlockContext
from .ledger import AllocationLedgerBlock
from .projection import UnlockProjectionBlock

__all__ = [
    "Block",
    "BlockExecutor",
    "BlockContext",
    "AllocationLedgerBlock",
    "UnlockProjectionBlock",
]
