"""Tests for the release formula.

Tests cover:
- Lockup tranche (all or nothing at lockup end)
- Vesting grace interval after a non-zero lockup
- Linear vesting quantized to whole intervals
- Monotonicity and upper bound over a schedule's lifetime
- Degenerate schedules (zero durations, zero amounts)
"""

import pytest

from vesting_domain.schemas import (
    ReleaseBreakdown,
    SECONDS_PER_DAY,
    UNIT_VESTING_INTERVAL as UNIT,
    VestingSchedule,
    VestingScheduleConfig,
    claimable_amount,
    fully_released_time,
    lockup_release_time,
    lockup_released,
    project_release,
    total_released,
    vesting_released,
    vesting_start_time,
)


LAUNCH = 1_700_000_000
ALICE = "0x" + "a1" * 20


def make_schedule(**kwargs) -> VestingSchedule:
    return VestingSchedule.from_config(VestingScheduleConfig(beneficiary=ALICE, **kwargs))


@pytest.fixture
def listing_schedule():
    """10% on listing, 90% over 18 intervals."""
    return make_schedule(
        lockup_amount=1_000,
        lockup_duration=0,
        vesting_amount=9_000,
        vesting_duration=18 * UNIT,
    )


# =============================================================================
# Reference scenarios
# =============================================================================

class TestReferenceScenarios:
    """Small-integer schedules that pin down rounding and the grace interval."""

    def test_vesting_rounds_down_over_long_duration(self):
        """2 tokens over 60 intervals: nothing after the first interval."""
        schedule = make_schedule(vesting_amount=2, vesting_duration=60 * UNIT)
        assert total_released(schedule, LAUNCH, LAUNCH + UNIT) == 0

    def test_vesting_duration_given_in_days(self):
        """2 tokens over 60 days (2 intervals): 1 token after the first interval."""
        schedule = make_schedule(vesting_amount=2, vesting_duration=60 * SECONDS_PER_DAY)
        assert total_released(schedule, LAUNCH, LAUNCH + UNIT) == 1
        assert total_released(schedule, LAUNCH, LAUNCH + 2 * UNIT) == 2

    def test_lockup_released_at_launch(self, listing_schedule):
        """Lockup with zero duration is claimable at launch; vesting waits out the grace interval."""
        assert claimable_amount(listing_schedule, LAUNCH, LAUNCH) == 1_000

    def test_first_vesting_step_after_grace(self, listing_schedule):
        assert claimable_amount(listing_schedule, LAUNCH, LAUNCH + 2 * UNIT) == 1_500


# =============================================================================
# Lockup tranche
# =============================================================================

def test_lockup_all_or_nothing():
    schedule = make_schedule(lockup_amount=500, lockup_duration=3 * UNIT)
    assert lockup_released(schedule, LAUNCH, LAUNCH + 3 * UNIT - 1) == 0
    assert lockup_released(schedule, LAUNCH, LAUNCH + 3 * UNIT) == 500
    assert lockup_release_time(schedule, LAUNCH) == LAUNCH + 3 * UNIT


def test_nothing_released_before_launch(listing_schedule):
    assert total_released(listing_schedule, LAUNCH, LAUNCH - 1) == 0
    assert total_released(listing_schedule, LAUNCH, 0) == 0


# =============================================================================
# Vesting tranche
# =============================================================================

def test_grace_interval_only_with_lockup():
    with_lockup = make_schedule(lockup_amount=1, vesting_amount=10, vesting_duration=10 * UNIT)
    without_lockup = make_schedule(vesting_amount=10, vesting_duration=10 * UNIT)

    assert vesting_start_time(with_lockup, LAUNCH) == LAUNCH + UNIT
    assert vesting_start_time(without_lockup, LAUNCH) == LAUNCH

    assert vesting_released(with_lockup, LAUNCH, LAUNCH + UNIT) == 0
    assert vesting_released(without_lockup, LAUNCH, LAUNCH + UNIT) == 1


def test_vesting_quantized_to_whole_intervals(listing_schedule):
    start = vesting_start_time(listing_schedule, LAUNCH)
    assert vesting_released(listing_schedule, LAUNCH, start + UNIT - 1) == 0
    assert vesting_released(listing_schedule, LAUNCH, start + UNIT) == 500
    # constant across the whole interval
    assert vesting_released(listing_schedule, LAUNCH, start + 2 * UNIT - 1) == 500
    assert vesting_released(listing_schedule, LAUNCH, start + 2 * UNIT) == 1_000


def test_vesting_completes_exactly(listing_schedule):
    end = fully_released_time(listing_schedule, LAUNCH)
    assert end == LAUNCH + 19 * UNIT
    assert total_released(listing_schedule, LAUNCH, end - 1) < 10_000
    assert total_released(listing_schedule, LAUNCH, end) == 10_000
    assert total_released(listing_schedule, LAUNCH, end + 100 * UNIT) == 10_000


def test_truncated_remainder_released_at_end():
    schedule = make_schedule(vesting_amount=10, vesting_duration=3 * UNIT)
    assert [total_released(schedule, LAUNCH, LAUNCH + k * UNIT) for k in range(4)] == [0, 3, 6, 10]


def test_vesting_duration_not_a_multiple_of_unit():
    schedule = make_schedule(vesting_amount=100, vesting_duration=UNIT + UNIT // 2)
    assert total_released(schedule, LAUNCH, LAUNCH + UNIT) == 66
    assert total_released(schedule, LAUNCH, LAUNCH + UNIT + UNIT // 2) == 100


def test_zero_vesting_duration_releases_at_start():
    schedule = make_schedule(vesting_amount=700, vesting_duration=0)
    assert vesting_released(schedule, LAUNCH, LAUNCH - 1) == 0
    assert vesting_released(schedule, LAUNCH, LAUNCH) == 700


def test_zero_vesting_duration_after_lockup_waits_for_grace():
    schedule = make_schedule(lockup_amount=300, lockup_duration=UNIT, vesting_amount=700)
    assert total_released(schedule, LAUNCH, LAUNCH + UNIT) == 300
    assert total_released(schedule, LAUNCH, LAUNCH + 2 * UNIT) == 1_000
    assert fully_released_time(schedule, LAUNCH) == LAUNCH + 2 * UNIT


def test_empty_schedule_completes_at_launch():
    schedule = make_schedule()
    assert fully_released_time(schedule, LAUNCH) == LAUNCH
    assert total_released(schedule, LAUNCH, LAUNCH + UNIT) == 0


# =============================================================================
# Properties
# =============================================================================

def test_release_is_monotonic_and_bounded():
    schedules = [
        make_schedule(lockup_amount=1_000, vesting_amount=9_000, vesting_duration=18 * UNIT),
        make_schedule(lockup_amount=7, lockup_duration=5 * UNIT + 3, vesting_amount=13, vesting_duration=7 * UNIT + 11),
        make_schedule(vesting_amount=10**24, vesting_duration=36 * UNIT),
    ]
    step = UNIT // 4
    for schedule in schedules:
        previous = 0
        for k in range(-4, 4 * 45):
            released = total_released(schedule, LAUNCH, LAUNCH + k * step)
            assert previous <= released <= schedule.total_amount
            previous = released
        assert previous == schedule.total_amount


def test_claimable_subtracts_claimed(listing_schedule):
    listing_schedule.claimed = 1_000
    assert claimable_amount(listing_schedule, LAUNCH, LAUNCH) == 0
    assert claimable_amount(listing_schedule, LAUNCH, LAUNCH + 2 * UNIT) == 500


def test_invalid_schedule_has_nothing_claimable():
    schedule = VestingSchedule(beneficiary=ALICE, lockup_amount=100)
    assert claimable_amount(schedule, LAUNCH, LAUNCH) == 0


# =============================================================================
# Breakdown and projection
# =============================================================================

def test_release_breakdown(listing_schedule):
    listing_schedule.claimed = 400
    breakdown = ReleaseBreakdown.compute(listing_schedule, LAUNCH, LAUNCH + 3 * UNIT)
    assert breakdown.lockup_released == 1_000
    assert breakdown.vesting_released == 1_000
    assert breakdown.total_released == 2_000
    assert breakdown.claimed == 400
    assert breakdown.claimable == 1_600
    assert breakdown.locked == 8_000


def test_release_breakdown_of_empty_schedule():
    breakdown = ReleaseBreakdown.compute(VestingSchedule.empty(), LAUNCH, LAUNCH)
    assert breakdown.total_released == 0
    assert breakdown.claimable == 0


def test_project_release(listing_schedule):
    points = project_release(listing_schedule, LAUNCH, periods=3)
    assert points == [
        (LAUNCH, 1_000, 0),
        (LAUNCH + UNIT, 1_000, 0),
        (LAUNCH + 2 * UNIT, 1_000, 500),
        (LAUNCH + 3 * UNIT, 1_000, 1_000),
    ]


def test_project_release_with_custom_step(listing_schedule):
    points = project_release(listing_schedule, LAUNCH, periods=2, step=UNIT + UNIT // 2)
    assert [ts for ts, _, _ in points] == [LAUNCH, LAUNCH + UNIT + UNIT // 2, LAUNCH + 3 * UNIT]
    assert [vesting for _, _, vesting in points] == [0, 0, 1_000]
