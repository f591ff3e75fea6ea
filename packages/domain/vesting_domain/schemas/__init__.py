"""Vesting domain schemas.

This package contains the models and the stateful pool of the vesting domain:
- Base types, constants and conventions
- Vesting schedule configs and stored schedules
- The release formula
- Error taxonomy and pool events
- Token collaborator protocol and the in-memory ERC20 ledger
- Administrator gate
- The vesting pool (registry + claim engine)
- Manifest rows and reporting configuration

Usage:
    from vesting_domain.schemas import (
        VestingPool, VestingScheduleConfig, OwnerAuthority, ERC20Token,
        UNIT_VESTING_INTERVAL,
    )
"""

# Base types
from .base import (
    DomainModel,
    Address,
    TokenAmount,
    Timestamp,
    Duration,
    UNIT_VESTING_INTERVAL,
    SECONDS_PER_DAY,
    MAX_UINT256,
    ZERO_ADDRESS,
    to_address,
    new_address,
    to_base_units,
)

# Errors
from .errors import (
    VestingPoolError,
    NotAuthorized,
    InvalidBeneficiary,
    ScheduleAlreadyExists,
    NoClaimableBalance,
    TokenTransferFailed,
    InvalidTokenCollaborator,
)

# Schedules
from .schedules import (
    VestingScheduleConfig,
    VestingSchedule,
)

# Release formula
from .release import (
    ReleaseBreakdown,
    lockup_release_time,
    vesting_start_time,
    lockup_released,
    vesting_released,
    total_released,
    claimable_amount,
    fully_released_time,
    project_release,
)

# Events
from .events import (
    PoolEvent,
    ScheduleCreatedEvent,
    ERC20ReleasedEvent,
)

# Collaborators
from .token import (
    FungibleToken,
    ERC20Token,
    ERC20Error,
)
from .access import (
    Authority,
    OwnerAuthority,
)

# Pool
from .pool import VestingPool

# Manifest and reporting configuration
from .manifest import ManifestEntry
from .workbook import (
    ReleaseScheduleCFG,
    VestingWorkbookCFG,
)

__all__ = [
    # Base types
    "DomainModel",
    "Address",
    "TokenAmount",
    "Timestamp",
    "Duration",
    "UNIT_VESTING_INTERVAL",
    "SECONDS_PER_DAY",
    "MAX_UINT256",
    "ZERO_ADDRESS",
    "to_address",
    "new_address",
    "to_base_units",
    # Errors
    "VestingPoolError",
    "NotAuthorized",
    "InvalidBeneficiary",
    "ScheduleAlreadyExists",
    "NoClaimableBalance",
    "TokenTransferFailed",
    "InvalidTokenCollaborator",
    # Schedules
    "VestingScheduleConfig",
    "VestingSchedule",
    # Release formula
    "ReleaseBreakdown",
    "lockup_release_time",
    "vesting_start_time",
    "lockup_released",
    "vesting_released",
    "total_released",
    "claimable_amount",
    "fully_released_time",
    "project_release",
    # Events
    "PoolEvent",
    "ScheduleCreatedEvent",
    "ERC20ReleasedEvent",
    # Collaborators
    "FungibleToken",
    "ERC20Token",
    "ERC20Error",
    "Authority",
    "OwnerAuthority",
    # Pool
    "VestingPool",
    # Manifest and reporting
    "ManifestEntry",
    "ReleaseScheduleCFG",
    "VestingWorkbookCFG",
]
