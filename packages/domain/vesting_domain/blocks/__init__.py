"""Reporting blocks for vesting pools.

This package contains the computation layer that turns a VestingPool into
DataFrames suitable for Excel rendering or other consumption.

Architecture:
    Schemas (pool + schedules) → Blocks (computation) → DataFrames (output)

Available blocks:
- PoolPositionsBlock: Per-beneficiary release/claim state and pool totals
- ReleaseScheduleBlock: Cumulative release projection per period

Usage:
    from vesting_domain.blocks import BlockExecutor, BlockContext, PoolPositionsBlock

    context = BlockContext()
    context.set("vesting_pool", pool)
    context.set("as_of", pool.now())

    BlockExecutor([PoolPositionsBlock()]).execute(context)
    positions_df = context.get("pool_positions")
"""

from .base import Block, BlockExecutor, BlockContext
from .positions import PoolPositionsBlock
from .release_schedule import ReleaseScheduleBlock

__all__ = [
    "Block",
    "BlockExecutor",
    "BlockContext",
    "PoolPositionsBlock",
    "ReleaseScheduleBlock",
]
