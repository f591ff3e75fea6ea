"""Pool positions block.

Converts a VestingPool into per-beneficiary DataFrames as of a given time.

Output DataFrames:
- pool_positions: one row per beneficiary with release/claim state
- pool_summary: single row of pool-wide totals and custody check

Amounts stay Python ints so they are exact; pandas stores columns that
exceed int64 (e.g. 18-decimal tokens) with object dtype.
"""

from typing import List
import pandas as pd

from .base import Block, BlockContext
from ..schemas import (
    ReleaseBreakdown,
    VestingPool,
    fully_released_time,
    lockup_release_time,
    vesting_start_time,
)


POSITION_COLUMNS = [
    "beneficiary",
    "lockup_amount",
    "vesting_amount",
    "total_amount",
    "lockup_released",
    "vesting_released",
    "total_released",
    "claimed",
    "claimable",
    "locked",
    "pct_released",
    "lockup_release_time",
    "vesting_start_time",
    "fully_released_time",
]


class PoolPositionsBlock(Block):
    """Per-beneficiary release and claim state.

    Inputs (from context):
        - vesting_pool: VestingPool to report on
        - as_of: Timestamp to evaluate releases at

    Outputs (to context):
        - pool_positions: DataFrame with POSITION_COLUMNS, in admission order
        - pool_summary: DataFrame with single row:
            * schedules: Number of schedules
            * total_committed: Sum of lockup + vesting amounts
            * total_released: Sum released as of as_of
            * total_claimed: Sum already claimed
            * total_claimable: Sum claimable as of as_of
            * outstanding_obligation: total_committed - total_claimed
            * custody_balance: Tokens held by the pool
            * custody_surplus: custody_balance - outstanding_obligation (>= 0 for a healthy pool)

    Example:
        context = BlockContext()
        context.set("vesting_pool", pool)
        context.set("as_of", pool.now())

        block = PoolPositionsBlock()
        block.execute(context)

        positions_df = context.get("pool_positions")
    """

    def __init__(self, pool_key: str = "vesting_pool", as_of_key: str = "as_of"):
        self.pool_key = pool_key
        self.as_of_key = as_of_key

    def inputs(self) -> List[str]:
        return [self.pool_key, self.as_of_key]

    def outputs(self) -> List[str]:
        return ["pool_positions", "pool_summary"]

    def execute(self, context: BlockContext) -> None:
        pool: VestingPool = context.get(self.pool_key)
        as_of: int = context.get(self.as_of_key)

        positions_df = self._compute_positions(pool, as_of)
        context.set("pool_positions", positions_df)
        context.set("pool_summary", self._compute_summary(pool, positions_df))

    def _compute_positions(self, pool: VestingPool, as_of: int) -> pd.DataFrame:
        rows = []
        launch = pool.launch_time
        unit = pool.UNIT_VESTING_INTERVAL

        for schedule in pool.schedules():
            breakdown = ReleaseBreakdown.compute(schedule, launch, as_of, unit)
            total = schedule.total_amount
            rows.append({
                "beneficiary": schedule.beneficiary,
                "lockup_amount": schedule.lockup_amount,
                "vesting_amount": schedule.vesting_amount,
                "total_amount": total,
                "lockup_released": breakdown.lockup_released,
                "vesting_released": breakdown.vesting_released,
                "total_released": breakdown.total_released,
                "claimed": breakdown.claimed,
                "claimable": breakdown.claimable,
                "locked": breakdown.locked,
                # display only; exact amounts are in the int columns
                "pct_released": breakdown.total_released / total * 100 if total > 0 else 100.0,
                "lockup_release_time": lockup_release_time(schedule, launch),
                "vesting_start_time": vesting_start_time(schedule, launch, unit),
                "fully_released_time": fully_released_time(schedule, launch, unit),
            })

        return pd.DataFrame(rows, columns=POSITION_COLUMNS)

    def _compute_summary(self, pool: VestingPool, positions_df: pd.DataFrame) -> pd.DataFrame:
        def column_total(name: str) -> int:
            return sum(int(value) for value in positions_df[name]) if not positions_df.empty else 0

        outstanding = pool.outstanding_obligation()
        custody = pool.custody_balance()

        return pd.DataFrame([{
            "schedules": len(positions_df),
            "total_committed": column_total("total_amount"),
            "total_released": column_total("total_released"),
            "total_claimed": column_total("claimed"),
            "total_claimable": column_total("claimable"),
            "outstanding_obligation": outstanding,
            "custody_balance": custody,
            "custody_surplus": custody - outstanding,
        }])
