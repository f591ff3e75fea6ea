"""Pool events.

Events are immutable records of what happened to a pool, appended to the
pool's event log in the order they occurred. External indexers and the
factory read them to learn about admitted schedules and releases.

An event emitted inside a call that is later rolled back is removed from
the log together with the rest of that call's effects.
"""

from typing import Literal
from pydantic import Field

from .base import DomainModel, Address, TokenAmount, Duration, Timestamp


class PoolEvent(DomainModel):
    """Base class for all pool events."""

    pool: Address = Field(
        description="Address of the pool that emitted the event"
    )

    timestamp: Timestamp = Field(
        description="Pool clock time when the event was emitted"
    )


class ScheduleCreatedEvent(PoolEvent):
    """A vesting schedule was admitted for a beneficiary."""

    event_type: Literal["schedule_created"] = "schedule_created"

    beneficiary: Address = Field(
        description="Beneficiary of the new schedule"
    )

    lockup_amount: TokenAmount
    lockup_duration: Duration
    vesting_amount: TokenAmount
    vesting_duration: Duration


class ERC20ReleasedEvent(PoolEvent):
    """Tokens were released to a beneficiary by a successful claim."""

    event_type: Literal["erc20_released"] = "erc20_released"

    token: Address = Field(
        description="Address of the released token"
    )

    amount: TokenAmount = Field(
        description="Amount transferred by this claim"
    )

    beneficiary: Address = Field(
        description="Account that received the tokens"
    )
