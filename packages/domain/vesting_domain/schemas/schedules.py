"""Vesting schedule models.

A VestingScheduleConfig is what the administrator submits; a VestingSchedule
is what the pool stores for each beneficiary once the config is admitted.

Each schedule combines two tranches, both measured from the pool's launch time:
    - Lockup tranche: released in full once lockup_duration has elapsed
    - Vesting tranche: released linearly over vesting_duration, quantized to
      whole UNIT_VESTING_INTERVAL steps
"""

from pydantic import Field, model_validator

from .base import (
    DomainModel,
    Address,
    TokenAmount,
    Duration,
    MAX_UINT256,
    ZERO_ADDRESS,
)


# =============================================================================
# Schedule Config
# =============================================================================

class VestingScheduleConfig(DomainModel):
    """Schedule parameters submitted by the administrator.

    Example:
        # 20% on listing, remaining 80% over 12 months (after a one month grace)
        VestingScheduleConfig(
            beneficiary="0x5aeda56215b167893e80b4fe645ba6d5bab767de",
            lockup_amount=200_000,
            lockup_duration=0,
            vesting_amount=800_000,
            vesting_duration=12 * UNIT_VESTING_INTERVAL,
        )
    """

    beneficiary: Address = Field(
        description="Account entitled to the releases (zero address is rejected at registration)"
    )

    lockup_amount: TokenAmount = Field(
        default=0,
        description="Amount released atomically once the lockup period elapses"
    )

    lockup_duration: Duration = Field(
        default=0,
        description="Seconds after launch time before the lockup tranche is released"
    )

    vesting_amount: TokenAmount = Field(
        default=0,
        description="Amount released linearly over vesting_duration"
    )

    vesting_duration: Duration = Field(
        default=0,
        description="Seconds over which the vesting tranche is released"
    )

    @model_validator(mode='after')
    def validate_total_fits_uint256(self):
        """lockup_amount + vesting_amount must not overflow a uint256."""
        if self.lockup_amount + self.vesting_amount > MAX_UINT256:
            raise ValueError("lockup_amount + vesting_amount exceeds uint256 range")
        return self

    @property
    def total_amount(self) -> int:
        """Amount pulled into custody when the schedule is admitted."""
        return self.lockup_amount + self.vesting_amount


# =============================================================================
# Stored Schedule
# =============================================================================

class VestingSchedule(VestingScheduleConfig):
    """Schedule record stored by the pool, one per beneficiary.

    Everything except `claimed` is immutable once the schedule is created.
    `claimed` only grows, and never exceeds total_amount.
    """

    claimed: TokenAmount = Field(
        default=0,
        description="Cumulative amount already transferred to the beneficiary"
    )

    valid: bool = Field(
        default=False,
        description="Existence flag; True for every admitted schedule"
    )

    @model_validator(mode='after')
    def validate_claimed_within_total(self):
        if self.claimed > self.total_amount:
            raise ValueError(
                f"claimed ({self.claimed}) exceeds schedule total ({self.total_amount})"
            )
        return self

    @classmethod
    def from_config(cls, config: VestingScheduleConfig) -> "VestingSchedule":
        return cls(
            beneficiary=config.beneficiary,
            lockup_amount=config.lockup_amount,
            lockup_duration=config.lockup_duration,
            vesting_amount=config.vesting_amount,
            vesting_duration=config.vesting_duration,
            claimed=0,
            valid=True,
        )

    @classmethod
    def empty(cls) -> "VestingSchedule":
        """Zero-valued record returned for beneficiaries without a schedule."""
        return cls(beneficiary=ZERO_ADDRESS)

    @property
    def remaining(self) -> int:
        """Amount still held in custody for this beneficiary."""
        return self.total_amount - self.claimed
