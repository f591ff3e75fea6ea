"""Base classes and type system for vesting domain models.

This module provides the foundational types, constants and validators
used throughout the vesting schema system.
"""

import secrets
from decimal import Decimal, InvalidOperation, localcontext
from typing import Annotated, Union
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, TypeAdapter

# =============================================================================
# Base Model
# =============================================================================

class DomainModel(BaseModel):
    """Base class for all domain models.

    Provides common configuration for all Pydantic models in the domain layer:
    - Validation on assignment for runtime safety
    - Enum value serialization
    """

    model_config = ConfigDict(
        frozen=False,  # claimed is updated in place
        validate_assignment=True,
        use_enum_values=True,
        arbitrary_types_allowed=True,
    )


# =============================================================================
# Constants
# =============================================================================

# Quantization step for vesting releases: one "month" of 30 days.
UNIT_VESTING_INTERVAL = 30 * 24 * 60 * 60

SECONDS_PER_DAY = 24 * 60 * 60

MAX_UINT256 = 2 ** 256 - 1

ZERO_ADDRESS = "0x" + "0" * 40


# =============================================================================
# Type Aliases
# =============================================================================

Address = Annotated[
    str,
    Field(
        pattern=r'^0x[0-9a-fA-F]{40}$',
        description="20-byte account identifier, 0x-prefixed hex (normalised to lower case)"
    ),
    AfterValidator(str.lower),
]

TokenAmount = Annotated[
    int,
    Field(ge=0, le=MAX_UINT256, description="Token amount in base units (uint256 range)")
]

Timestamp = Annotated[
    int,
    Field(ge=0, description="Unix epoch seconds")
]

Duration = Annotated[
    int,
    Field(ge=0, description="Length of time in seconds")
]


_ADDRESS = TypeAdapter(Address)


def to_address(value: str) -> str:
    """Validate and normalise an account identifier.

    Raises:
        pydantic.ValidationError: If value is not a 0x-prefixed 40-hex-digit string
    """
    return _ADDRESS.validate_python(value)


def new_address() -> str:
    """Generate a random, non-zero account identifier."""
    while True:
        address = "0x" + secrets.token_hex(20)
        if address != ZERO_ADDRESS:
            return address


def to_base_units(amount: Union[Decimal, int, str], decimals: int) -> int:
    """Convert a whole-token amount into integer base units.

    Example:
        to_base_units("1.5", 18) == 1_500_000_000_000_000_000

    Raises:
        ValueError: If the amount is negative, malformed, or finer than the token precision
    """
    with localcontext() as ctx:
        ctx.prec = 100
        try:
            value = Decimal(str(amount)).scaleb(decimals)
        except InvalidOperation as exc:
            raise ValueError(f"Invalid token amount: {amount!r}") from exc
    if not value.is_finite():
        raise ValueError(f"Invalid token amount: {amount!r}")
    if value < 0:
        raise ValueError(f"Token amount must be non-negative, got: {amount}")
    if value != value.to_integral_value():
        raise ValueError(f"Token amount {amount} has more than {decimals} decimal places")
    return int(value)
