"""Error taxonomy for vesting pool operations.

Every rejected pool call raises exactly one of these. Each error carries:
    - code: machine-checkable identifier (e.g. "NO_CLAIMABLE_BALANCE")
    - reason: the Solidity-style revert string for the same condition

A failed call never leaves partial state behind, so callers can fix the
condition and resubmit.
"""

from typing import Optional


class VestingPoolError(Exception):
    """Base class for all rejected vesting pool calls."""

    code: str = "VESTING_POOL_ERROR"
    reason: str = "Vesting pool call rejected"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.reason
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class NotAuthorized(VestingPoolError):
    """Caller lacks administrator capability."""

    code = "NOT_AUTHORIZED"
    reason = "Ownable: caller is not the owner"


class InvalidBeneficiary(VestingPoolError):
    """Beneficiary is the null/zero identifier."""

    code = "INVALID_BENEFICIARY"
    reason = "Beneficiary is zero address"


class ScheduleAlreadyExists(VestingPoolError):
    """A valid schedule for the beneficiary already exists."""

    code = "SCHEDULE_ALREADY_EXISTS"
    reason = "Vesting schedule already exists"


class NoClaimableBalance(VestingPoolError):
    """Claim attempted while nothing is claimable."""

    code = "NO_CLAIMABLE_BALANCE"
    reason = "No claimable balance"


class TokenTransferFailed(VestingPoolError):
    """Token collaborator rejected a transfer (balance, allowance, or bad return value)."""

    code = "TOKEN_TRANSFER_FAILED"
    reason = "SafeERC20: ERC20 operation did not succeed"


class InvalidTokenCollaborator(VestingPoolError):
    """Token handle does not behave like a fungible token."""

    code = "INVALID_TOKEN_COLLABORATOR"
    reason = "Token does not implement the fungible token interface"
