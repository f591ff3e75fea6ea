"""Release schedule block.

Projects every schedule of a pool forward from launch time at a fixed
interval, producing the cumulative amount released at each point.

Output DataFrames:
- release_schedule: long form, one row per (beneficiary, period)
- release_schedule_totals: one row per period, aggregated over beneficiaries
"""

from typing import Dict, List
import pandas as pd

from .base import Block, BlockContext
from ..schemas import (
    ReleaseScheduleCFG,
    VestingPool,
    fully_released_time,
    project_release,
)


class ReleaseScheduleBlock(Block):
    """Projects cumulative releases per beneficiary per period.

    Inputs (from context):
        - vesting_pool: VestingPool to project
        - release_schedule_cfg: ReleaseScheduleCFG (horizon, interval, deltas)

    Outputs (to context):
        - release_schedule: DataFrame with columns:
            * beneficiary: Beneficiary address
            * period: Interval index (0 = launch time)
            * timestamp: launch_time + period * interval
            * lockup_released: Lockup tranche released by timestamp
            * vesting_released: Vesting tranche released by timestamp
            * total_released: Cumulative released by timestamp
            * newly_released: Released during this period (if include_deltas)

        - release_schedule_totals: DataFrame with columns:
            * period, timestamp
            * total_released: Sum over beneficiaries
            * newly_released: Sum over beneficiaries (if include_deltas)
            * pct_released: total_released / total committed * 100

    Example:
        context.set("vesting_pool", pool)
        context.set("release_schedule_cfg", ReleaseScheduleCFG(periods=24))

        ReleaseScheduleBlock().execute(context)
        totals_df = context.get("release_schedule_totals")
    """

    def __init__(
        self,
        pool_key: str = "vesting_pool",
        config_key: str = "release_schedule_cfg",
    ):
        self.pool_key = pool_key
        self.config_key = config_key

    def inputs(self) -> List[str]:
        return [self.pool_key, self.config_key]

    def outputs(self) -> List[str]:
        return ["release_schedule", "release_schedule_totals"]

    def execute(self, context: BlockContext) -> None:
        pool: VestingPool = context.get(self.pool_key)
        config: ReleaseScheduleCFG = context.get(self.config_key)

        periods = self.horizon(pool, config)
        schedule_df = self._compute_schedule(pool, config, periods)
        context.set("release_schedule", schedule_df)
        context.set("release_schedule_totals", self._compute_totals(pool, config, schedule_df))

    @staticmethod
    def horizon(pool: VestingPool, config: ReleaseScheduleCFG) -> int:
        """Number of periods to project.

        When not configured: enough periods for the last schedule to be
        fully released, rounded up to a whole interval and capped at
        config.max_periods.
        """
        if config.periods is not None:
            return config.periods

        launch = pool.launch_time
        latest = launch
        for schedule in pool.schedules():
            latest = max(latest, fully_released_time(schedule, launch, pool.UNIT_VESTING_INTERVAL))
        return min(-(-(latest - launch) // config.interval), config.max_periods)

    def _compute_schedule(
        self,
        pool: VestingPool,
        config: ReleaseScheduleCFG,
        periods: int,
    ) -> pd.DataFrame:
        columns = [
            "beneficiary",
            "period",
            "timestamp",
            "lockup_released",
            "vesting_released",
            "total_released",
        ]
        if config.include_deltas:
            columns.append("newly_released")

        rows = []
        for schedule in pool.schedules():
            points = project_release(
                schedule,
                pool.launch_time,
                periods,
                unit=pool.UNIT_VESTING_INTERVAL,
                step=config.interval,
            )

            previous_total = 0
            for period, (timestamp, lockup, vesting) in enumerate(points):
                total = lockup + vesting
                row = {
                    "beneficiary": schedule.beneficiary,
                    "period": period,
                    "timestamp": timestamp,
                    "lockup_released": lockup,
                    "vesting_released": vesting,
                    "total_released": total,
                }
                if config.include_deltas:
                    row["newly_released"] = total - previous_total
                previous_total = total
                rows.append(row)

        return pd.DataFrame(rows, columns=columns)

    def _compute_totals(
        self,
        pool: VestingPool,
        config: ReleaseScheduleCFG,
        schedule_df: pd.DataFrame,
    ) -> pd.DataFrame:
        columns = ["period", "timestamp", "total_released"]
        if config.include_deltas:
            columns.append("newly_released")
        columns.append("pct_released")

        if schedule_df.empty:
            return pd.DataFrame(columns=columns)

        # aggregate in Python to keep amounts exact beyond int64
        totals: Dict[int, Dict[str, int]] = {}
        for row in schedule_df.itertuples(index=False):
            bucket = totals.setdefault(int(row.period), {
                "period": int(row.period),
                "timestamp": int(row.timestamp),
                "total_released": 0,
                "newly_released": 0,
            })
            bucket["total_released"] += int(row.total_released)
            if config.include_deltas:
                bucket["newly_released"] += int(row.newly_released)

        committed = pool.total_committed()
        rows = []
        for period in sorted(totals):
            bucket = totals[period]
            row = {
                "period": bucket["period"],
                "timestamp": bucket["timestamp"],
                "total_released": bucket["total_released"],
            }
            if config.include_deltas:
                row["newly_released"] = bucket["newly_released"]
            row["pct_released"] = (
                bucket["total_released"] / committed * 100 if committed > 0 else 100.0
            )
            rows.append(row)

        return pd.DataFrame(rows, columns=columns)
