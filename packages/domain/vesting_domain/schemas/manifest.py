"""Distribution manifest rows.

A manifest is the spreadsheet an issuer keeps of who gets what: one row per
wallet, naming the pool the wallet belongs to, its whole-token allocation,
the share released on listing, and the lockup/vesting lengths in months.

Example row:
    pool=seed, wallet=0x..., tokens=16666666.66, lockupPerc=20,
    lockupMonths=6, vestingMonths=12

    → lockup_amount  = 20% of the allocation, released after 6 months
    → vesting_amount = the other 80%, vested monthly over 12 months
"""

from decimal import Decimal
from pydantic import Field

from .base import DomainModel, Address, UNIT_VESTING_INTERVAL, to_base_units
from .schedules import VestingScheduleConfig


class ManifestEntry(DomainModel):
    """One manifest row."""

    pool: str = Field(
        min_length=1,
        description="Name of the pool this allocation belongs to (e.g. 'seed', 'team')"
    )

    wallet: Address = Field(
        description="Beneficiary account"
    )

    tokens: Decimal = Field(
        ge=0,
        description="Allocation in whole tokens (scaled by the token's decimals)"
    )

    lockup_perc: int = Field(
        default=0,
        ge=0,
        le=100,
        description="Percentage of the allocation released once the lockup ends"
    )

    lockup_months: int = Field(
        default=0,
        ge=0,
        description="Lockup length in unit vesting intervals"
    )

    vesting_months: int = Field(
        default=0,
        ge=0,
        description="Vesting length in unit vesting intervals"
    )

    def total_amount(self, decimals: int) -> int:
        return to_base_units(self.tokens, decimals)

    def to_config(
        self,
        decimals: int,
        unit: int = UNIT_VESTING_INTERVAL,
    ) -> VestingScheduleConfig:
        """Schedule config for this row.

        The lockup share is rounded down; the remainder goes to vesting so
        the two tranches always add up to the full allocation.
        """
        total = self.total_amount(decimals)
        lockup_amount = total * self.lockup_perc // 100
        return VestingScheduleConfig(
            beneficiary=self.wallet,
            lockup_amount=lockup_amount,
            lockup_duration=self.lockup_months * unit,
            vesting_amount=total - lockup_amount,
            vesting_duration=self.vesting_months * unit,
        )
