"""Reporting configuration.

CFG models drive the computation blocks and the Excel renderer:
- ReleaseScheduleCFG: how far ahead and at what granularity releases are projected
- VestingWorkbookCFG: root configuration handed to the workbook renderer
"""

from typing import Optional
from pydantic import Field, model_validator

from .base import DomainModel, UNIT_VESTING_INTERVAL


class ReleaseScheduleCFG(DomainModel):
    """Configuration for release projections.

    Examples:
        # Project until every schedule is fully released (default)
        ReleaseScheduleCFG()

        # Project exactly 24 monthly periods
        ReleaseScheduleCFG(periods=24)
    """

    periods: Optional[int] = Field(
        default=None,
        ge=0,
        description=(
            "Number of intervals to project after launch. "
            "None = until the last schedule is fully released"
        )
    )

    interval: int = Field(
        default=UNIT_VESTING_INTERVAL,
        gt=0,
        description="Seconds between projected points (default: one unit vesting interval)"
    )

    max_periods: int = Field(
        default=1200,
        gt=0,
        description=(
            "Upper bound on projected intervals, applied to `periods` and to the "
            "automatic horizon (default: 100 years of monthly points)"
        )
    )

    include_deltas: bool = Field(
        default=True,
        description="Include the amount newly released in each period"
    )

    @model_validator(mode='after')
    def validate_periods_within_cap(self):
        """An explicit horizon may not exceed max_periods."""
        if self.periods is not None and self.periods > self.max_periods:
            raise ValueError(
                f"periods ({self.periods}) exceeds max_periods ({self.max_periods})"
            )
        return self


class VestingWorkbookCFG(DomainModel):
    """Root configuration for the vesting workbook.

    Example:
        VestingWorkbookCFG(
            title="KING token distribution",
            token_symbol="KING",
            display_decimals=18,
            release_schedule=ReleaseScheduleCFG(periods=24),
        )
    """

    title: str = Field(
        default="Vesting Pool",
        description="Title written at the top of each sheet"
    )

    token_symbol: str = Field(
        default="TOKEN",
        description="Symbol shown next to amounts"
    )

    display_decimals: int = Field(
        default=0,
        ge=0,
        le=77,
        description="Amounts are divided by 10**display_decimals for display (18 = whole tokens)"
    )

    as_of: Optional[int] = Field(
        default=None,
        ge=0,
        description="Timestamp for the positions/summary sheets (None = pool clock)"
    )

    release_schedule: ReleaseScheduleCFG = Field(
        default_factory=ReleaseScheduleCFG,
        description="Release projection settings"
    )

    include_schedules_sheet: bool = Field(default=True)
    include_release_sheet: bool = Field(default=True)
    include_summary_sheet: bool = Field(default=True)

    @model_validator(mode='after')
    def validate_some_sheet(self):
        """A workbook needs at least one sheet."""
        if not (self.include_schedules_sheet or self.include_release_sheet or self.include_summary_sheet):
            raise ValueError("At least one sheet must be included")
        return self
