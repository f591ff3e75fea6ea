"""Release formula: how much of a schedule is unlocked at a given time.

All arithmetic is integer-only. For a schedule evaluated at time t:

    lockup_release_time  = launch_time + lockup_duration
    vesting_grace        = unit if lockup_amount > 0 else 0
    vesting_start_time   = lockup_release_time + vesting_grace

    lockup_released(t)   = lockup_amount if t >= lockup_release_time else 0

    vesting_released(t)  = 0                               if t < vesting_start_time
                         = vesting_amount                  if t - vesting_start_time >= vesting_duration
                         = vesting_amount * elapsed_units // vesting_duration   otherwise
        where elapsed_units = (t - vesting_start_time) // unit * unit

    released(t)          = lockup_released(t) + vesting_released(t)
    claimable(t)         = released(t) - claimed

Quantizing to whole intervals means amounts only change at interval
boundaries, so the same amount is claimable anywhere inside an interval.
A non-zero lockup tranche pushes the start of linear vesting out by one
interval ("first tranche pushes vesting out by one period").

Properties:
    - released(t) is non-decreasing in t
    - released(t) == 0 for every t < launch_time
    - released(t) <= lockup_amount + vesting_amount
"""

from typing import List, Optional, Tuple
from pydantic import Field

from .base import DomainModel, TokenAmount, Timestamp, UNIT_VESTING_INTERVAL
from .schedules import VestingScheduleConfig, VestingSchedule


def lockup_release_time(schedule: VestingScheduleConfig, launch_time: int) -> int:
    return launch_time + schedule.lockup_duration


def vesting_start_time(
    schedule: VestingScheduleConfig,
    launch_time: int,
    unit: int = UNIT_VESTING_INTERVAL,
) -> int:
    grace = unit if schedule.lockup_amount > 0 else 0
    return lockup_release_time(schedule, launch_time) + grace


def lockup_released(schedule: VestingScheduleConfig, launch_time: int, now: int) -> int:
    """Lockup tranche unlocked at `now` (all or nothing)."""
    if now >= lockup_release_time(schedule, launch_time):
        return schedule.lockup_amount
    return 0


def vesting_released(
    schedule: VestingScheduleConfig,
    launch_time: int,
    now: int,
    unit: int = UNIT_VESTING_INTERVAL,
) -> int:
    """Vesting tranche unlocked at `now`, in whole-interval steps.

    Division truncates, so partial units of the token are held back until
    the schedule completes and the full vesting_amount is released.
    """
    start = vesting_start_time(schedule, launch_time, unit)
    if now < start:
        return 0

    elapsed = now - start
    if elapsed >= schedule.vesting_duration:
        return schedule.vesting_amount

    elapsed_units = elapsed // unit * unit
    return schedule.vesting_amount * elapsed_units // schedule.vesting_duration


def total_released(
    schedule: VestingScheduleConfig,
    launch_time: int,
    now: int,
    unit: int = UNIT_VESTING_INTERVAL,
) -> int:
    return (
        lockup_released(schedule, launch_time, now)
        + vesting_released(schedule, launch_time, now, unit)
    )


def claimable_amount(
    schedule: VestingSchedule,
    launch_time: int,
    now: int,
    unit: int = UNIT_VESTING_INTERVAL,
) -> int:
    """Released but not yet claimed. Zero for invalid (unregistered) records."""
    if not schedule.valid:
        return 0
    released = total_released(schedule, launch_time, now, unit)
    # released is non-decreasing and claimed was computed from an earlier
    # released value, so this never goes negative
    return max(released - schedule.claimed, 0)


def fully_released_time(
    schedule: VestingScheduleConfig,
    launch_time: int,
    unit: int = UNIT_VESTING_INTERVAL,
) -> int:
    """Earliest time at which the whole schedule is released.

    A zero tranche never delays completion; a schedule with nothing to
    release is complete at launch.
    """
    candidates = [launch_time]
    if schedule.lockup_amount > 0:
        candidates.append(lockup_release_time(schedule, launch_time))
    if schedule.vesting_amount > 0:
        candidates.append(
            vesting_start_time(schedule, launch_time, unit) + schedule.vesting_duration
        )
    return max(candidates)


# =============================================================================
# Release Breakdown
# =============================================================================

class ReleaseBreakdown(DomainModel):
    """Snapshot of a schedule's release state at a point in time.

    Example:
        breakdown = pool.release_breakdown(beneficiary)
        breakdown.claimable == breakdown.total_released - breakdown.claimed
    """

    as_of: Timestamp = Field(
        description="Time the breakdown was computed for"
    )

    lockup_released: TokenAmount = Field(
        default=0,
        description="Lockup tranche unlocked as of as_of"
    )

    vesting_released: TokenAmount = Field(
        default=0,
        description="Vesting tranche unlocked as of as_of"
    )

    total_released: TokenAmount = Field(
        default=0,
        description="lockup_released + vesting_released"
    )

    claimed: TokenAmount = Field(
        default=0,
        description="Already transferred to the beneficiary"
    )

    claimable: TokenAmount = Field(
        default=0,
        description="total_released - claimed"
    )

    locked: TokenAmount = Field(
        default=0,
        description="Committed but not yet released"
    )

    @classmethod
    def compute(
        cls,
        schedule: VestingSchedule,
        launch_time: int,
        now: int,
        unit: int = UNIT_VESTING_INTERVAL,
    ) -> "ReleaseBreakdown":
        if not schedule.valid:
            return cls(as_of=now)

        lockup = lockup_released(schedule, launch_time, now)
        vesting = vesting_released(schedule, launch_time, now, unit)
        released = lockup + vesting
        return cls(
            as_of=now,
            lockup_released=lockup,
            vesting_released=vesting,
            total_released=released,
            claimed=schedule.claimed,
            claimable=claimable_amount(schedule, launch_time, now, unit),
            locked=schedule.total_amount - released,
        )


def project_release(
    schedule: VestingScheduleConfig,
    launch_time: int,
    periods: int,
    unit: int = UNIT_VESTING_INTERVAL,
    step: Optional[int] = None,
) -> List[Tuple[int, int, int]]:
    """Cumulative released amounts at launch_time + k * step for k in [0, periods].

    `step` defaults to `unit`; releases are always quantized to `unit`.

    Returns:
        List of (timestamp, lockup_released, vesting_released) tuples
    """
    step = unit if step is None else step
    points = []
    for period in range(periods + 1):
        ts = launch_time + period * step
        points.append((
            ts,
            lockup_released(schedule, launch_time, ts),
            vesting_released(schedule, launch_time, ts, unit),
        ))
    return points
