"""Administrator gate.

Restricted pool operations ask an Authority whether the caller is the
administrator before doing anything else. The pool does not care how the
answer is produced; OwnerAuthority is the single-owner gate used by default.
"""

from typing import Protocol, runtime_checkable

from .base import to_address
from .errors import NotAuthorized


@runtime_checkable
class Authority(Protocol):
    """Predicate deciding who may administer a pool."""

    def is_administrator(self, account: str) -> bool: ...


class OwnerAuthority:
    """Single-owner gate (Ownable semantics)."""

    def __init__(self, owner: str):
        self.owner = to_address(owner)

    def __repr__(self) -> str:
        return f"OwnerAuthority(owner={self.owner!r})"

    def is_administrator(self, account: str) -> bool:
        return to_address(account) == self.owner

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        """Hand the gate to another account. Only the current owner may do this.

        Raises:
            NotAuthorized: If caller is not the current owner
        """
        if not self.is_administrator(caller):
            raise NotAuthorized()
        self.owner = to_address(new_owner)
