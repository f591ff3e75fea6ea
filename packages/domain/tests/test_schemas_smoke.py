"""Smoke tests for schema validation.

These tests verify that:
1. All schemas can be imported
2. Basic instantiation works
3. Field validation catches obvious errors
"""

import pytest
from decimal import Decimal
from pydantic import ValidationError

from vesting_domain.schemas import (
    # Base
    MAX_UINT256,
    UNIT_VESTING_INTERVAL,
    ZERO_ADDRESS,
    to_address,
    new_address,
    to_base_units,
    # Schedules
    VestingScheduleConfig,
    VestingSchedule,
    # Events
    ERC20ReleasedEvent,
    ScheduleCreatedEvent,
    # Errors
    VestingPoolError,
    NotAuthorized,
    InvalidBeneficiary,
    ScheduleAlreadyExists,
    NoClaimableBalance,
    TokenTransferFailed,
    InvalidTokenCollaborator,
    # Manifest / reporting
    ManifestEntry,
    ReleaseScheduleCFG,
    VestingWorkbookCFG,
)


ALICE = "0x" + "a1" * 20


def test_imports():
    """Test that all schemas can be imported."""
    assert VestingScheduleConfig is not None
    assert VestingSchedule is not None
    assert ManifestEntry is not None
    assert VestingWorkbookCFG is not None


def test_unit_vesting_interval_is_thirty_days():
    assert UNIT_VESTING_INTERVAL == 2_592_000


# =============================================================================
# Addresses and amounts
# =============================================================================

def test_address_is_normalised_to_lower_case():
    assert to_address("0x" + "AB" * 20) == "0x" + "ab" * 20


@pytest.mark.parametrize("value", ["", "0x123", "ab" * 20, "0x" + "g" * 40])
def test_malformed_address_rejected(value):
    with pytest.raises(ValidationError):
        to_address(value)


def test_new_address_is_valid_and_non_zero():
    address = new_address()
    assert to_address(address) == address
    assert address != ZERO_ADDRESS


def test_to_base_units():
    assert to_base_units("1.5", 18) == 1_500_000_000_000_000_000
    assert to_base_units(Decimal("16666666.66"), 2) == 1_666_666_666
    assert to_base_units(7, 0) == 7


@pytest.mark.parametrize("value", ["-1", "0.001", "abc", "NaN"])
def test_to_base_units_rejects_bad_amounts(value):
    with pytest.raises(ValueError):
        to_base_units(value, 2)


# =============================================================================
# Schedules
# =============================================================================

def test_schedule_config_defaults():
    config = VestingScheduleConfig(beneficiary=ALICE)
    assert config.lockup_amount == 0
    assert config.vesting_duration == 0
    assert config.total_amount == 0


def test_schedule_config_total():
    config = VestingScheduleConfig(beneficiary=ALICE, lockup_amount=1_000, vesting_amount=9_000)
    assert config.total_amount == 10_000


def test_schedule_config_rejects_negative_amounts():
    with pytest.raises(ValidationError):
        VestingScheduleConfig(beneficiary=ALICE, lockup_amount=-1)


def test_schedule_config_rejects_total_overflow():
    with pytest.raises(ValidationError, match="uint256"):
        VestingScheduleConfig(beneficiary=ALICE, lockup_amount=MAX_UINT256, vesting_amount=1)


def test_stored_schedule_from_config_is_valid():
    config = VestingScheduleConfig(beneficiary=ALICE, vesting_amount=100, vesting_duration=UNIT_VESTING_INTERVAL)
    schedule = VestingSchedule.from_config(config)
    assert schedule.valid
    assert schedule.claimed == 0
    assert schedule.remaining == 100


def test_empty_schedule_is_zero_valued():
    schedule = VestingSchedule.empty()
    assert schedule.valid is False
    assert schedule.beneficiary == ZERO_ADDRESS
    assert schedule.total_amount == 0


def test_claimed_cannot_exceed_total():
    schedule = VestingSchedule.from_config(VestingScheduleConfig(beneficiary=ALICE, lockup_amount=10))
    with pytest.raises(ValidationError):
        schedule.claimed = 11


# =============================================================================
# Errors and events
# =============================================================================

@pytest.mark.parametrize("error_cls, code, reason", [
    (NotAuthorized, "NOT_AUTHORIZED", "Ownable: caller is not the owner"),
    (InvalidBeneficiary, "INVALID_BENEFICIARY", "Beneficiary is zero address"),
    (ScheduleAlreadyExists, "SCHEDULE_ALREADY_EXISTS", "Vesting schedule already exists"),
    (NoClaimableBalance, "NO_CLAIMABLE_BALANCE", "No claimable balance"),
    (TokenTransferFailed, "TOKEN_TRANSFER_FAILED", "SafeERC20: ERC20 operation did not succeed"),
    (InvalidTokenCollaborator, "INVALID_TOKEN_COLLABORATOR", None),
])
def test_error_codes_and_reasons(error_cls, code, reason):
    error = error_cls()
    assert isinstance(error, VestingPoolError)
    assert error.code == code
    if reason is not None:
        assert error.message == reason
        assert str(error) == reason


def test_event_types():
    created = ScheduleCreatedEvent(
        pool=ALICE,
        timestamp=0,
        beneficiary=ALICE,
        lockup_amount=1,
        lockup_duration=0,
        vesting_amount=2,
        vesting_duration=UNIT_VESTING_INTERVAL,
    )
    released = ERC20ReleasedEvent(pool=ALICE, timestamp=0, token=ALICE, amount=1, beneficiary=ALICE)
    assert created.event_type == "schedule_created"
    assert released.event_type == "erc20_released"


# =============================================================================
# Manifest and reporting config
# =============================================================================

def test_manifest_entry_to_config():
    entry = ManifestEntry(
        pool="seed",
        wallet=ALICE,
        tokens=Decimal("1000"),
        lockup_perc=20,
        lockup_months=6,
        vesting_months=12,
    )
    config = entry.to_config(decimals=2)
    assert config.lockup_amount == 20_000
    assert config.vesting_amount == 80_000
    assert config.lockup_duration == 6 * UNIT_VESTING_INTERVAL
    assert config.vesting_duration == 12 * UNIT_VESTING_INTERVAL


def test_manifest_entry_lockup_rounds_down_and_sums_to_total():
    entry = ManifestEntry(pool="seed", wallet=ALICE, tokens=Decimal("0.07"), lockup_perc=33)
    config = entry.to_config(decimals=2)
    assert config.lockup_amount == 2
    assert config.total_amount == 7


def test_manifest_entry_rejects_percentage_above_100():
    with pytest.raises(ValidationError):
        ManifestEntry(pool="seed", wallet=ALICE, tokens=Decimal("1"), lockup_perc=101)


def test_release_schedule_cfg_defaults():
    config = ReleaseScheduleCFG()
    assert config.periods is None
    assert config.interval == UNIT_VESTING_INTERVAL
    assert config.include_deltas
    assert config.max_periods == 1200


def test_release_schedule_cfg_rejects_periods_above_cap():
    with pytest.raises(ValidationError, match="exceeds max_periods"):
        ReleaseScheduleCFG(periods=13, max_periods=12)
    assert ReleaseScheduleCFG(periods=12, max_periods=12).periods == 12


def test_workbook_cfg_requires_a_sheet():
    with pytest.raises(ValidationError, match="At least one sheet"):
        VestingWorkbookCFG(
            include_schedules_sheet=False,
            include_release_sheet=False,
            include_summary_sheet=False,
        )
