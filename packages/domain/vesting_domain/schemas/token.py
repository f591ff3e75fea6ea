"""Fungible token collaborator.

The pool only depends on the FungibleToken protocol below. ERC20Token is an
in-memory ledger implementing it with OpenZeppelin ERC20 semantics and
revert strings; it is used for simulations and tests, and as the reference
for what a conforming collaborator must do.

Calls carry the calling account explicitly (`caller`), standing in for the
implicit message sender of an on-chain call.

Receive hooks:
    A hook registered with `on_receive(account, hook)` runs every time
    `account` is credited, after balances are updated and before the
    transfer returns. Hooks may call back into anything (including the pool
    that initiated the transfer); this is how reentrancy is exercised. If a
    hook raises, the transfer and everything done inside the hook on this
    token is rolled back.
"""

import logging
from typing import Callable, Dict, List, Optional, Protocol, Tuple, runtime_checkable

from .base import MAX_UINT256, ZERO_ADDRESS, new_address, to_address
from ..journal import Journal

logger = logging.getLogger(__name__)


ReceiveHook = Callable[["ERC20Token", str, int], None]


@runtime_checkable
class FungibleToken(Protocol):
    """Interface the pool requires from its token."""

    address: str

    def decimals(self) -> int: ...

    def balance_of(self, account: str) -> int: ...

    def allowance(self, owner: str, spender: str) -> int: ...

    def approve(self, caller: str, spender: str, amount: int) -> bool: ...

    def transfer(self, caller: str, recipient: str, amount: int) -> bool: ...

    def transfer_from(self, caller: str, owner: str, recipient: str, amount: int) -> bool: ...


class ERC20Error(Exception):
    """Token call reverted."""
    pass


class ERC20Token:
    """In-memory ERC20 ledger.

    Example:
        token = ERC20Token(name="King", symbol="KING")
        token.mint(owner, 1_000_000)
        token.approve(owner, pool.address, 1_000_000)
        token.transfer_from(pool.address, owner, pool.address, 1_000_000)
    """

    def __init__(
        self,
        name: str = "Mintable Token",
        symbol: str = "MTK",
        decimals: int = 18,
        address: Optional[str] = None,
    ):
        self.name = name
        self.symbol = symbol
        self.address = to_address(address) if address else new_address()
        self._decimals = decimals
        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}
        self._total_supply = 0
        self._hooks: Dict[str, List[ReceiveHook]] = {}
        self._journal = Journal()

    def __repr__(self) -> str:
        return f"ERC20Token(symbol={self.symbol!r}, address={self.address!r})"

    # ------------------------------------------------------------------ #
    # Views
    # ------------------------------------------------------------------ #

    def decimals(self) -> int:
        return self._decimals

    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: str) -> int:
        return self._balances.get(to_address(account), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((to_address(owner), to_address(spender)), 0)

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #

    def mint(self, account: str, amount: int) -> None:
        account = to_address(account)
        if account == ZERO_ADDRESS:
            raise ERC20Error("ERC20: mint to the zero address")
        self._check_amount(amount)
        if self._total_supply + amount > MAX_UINT256:
            raise ERC20Error("ERC20: total supply overflow")

        with self._journal.transaction():
            previous_supply = self._total_supply
            self._total_supply = previous_supply + amount
            self._journal.record(lambda: setattr(self, "_total_supply", previous_supply))
            self._set_balance(account, self.balance_of(account) + amount)

    def approve(self, caller: str, spender: str, amount: int) -> bool:
        owner = to_address(caller)
        spender = to_address(spender)
        if spender == ZERO_ADDRESS:
            raise ERC20Error("ERC20: approve to the zero address")
        self._check_amount(amount)

        with self._journal.transaction():
            self._set_allowance(owner, spender, amount)
        return True

    def transfer(self, caller: str, recipient: str, amount: int) -> bool:
        with self._journal.transaction():
            self._transfer(to_address(caller), to_address(recipient), amount)
        return True

    def transfer_from(self, caller: str, owner: str, recipient: str, amount: int) -> bool:
        spender = to_address(caller)
        owner = to_address(owner)

        with self._journal.transaction():
            current = self.allowance(owner, spender)
            if current != MAX_UINT256:
                if current < amount:
                    raise ERC20Error("ERC20: insufficient allowance")
                self._set_allowance(owner, spender, current - amount)
            self._transfer(owner, to_address(recipient), amount)
        return True

    def on_receive(self, account: str, hook: ReceiveHook) -> None:
        """Run `hook(token, sender, amount)` whenever `account` is credited."""
        self._hooks.setdefault(to_address(account), []).append(hook)

    def clear_hooks(self, account: str) -> None:
        self._hooks.pop(to_address(account), None)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _transfer(self, sender: str, recipient: str, amount: int) -> None:
        if sender == ZERO_ADDRESS:
            raise ERC20Error("ERC20: transfer from the zero address")
        if recipient == ZERO_ADDRESS:
            raise ERC20Error("ERC20: transfer to the zero address")
        self._check_amount(amount)

        sender_balance = self.balance_of(sender)
        if sender_balance < amount:
            raise ERC20Error("ERC20: transfer amount exceeds balance")

        self._set_balance(sender, sender_balance - amount)
        self._set_balance(recipient, self.balance_of(recipient) + amount)
        logger.debug("%s transfer %s -> %s: %d", self.symbol, sender, recipient, amount)

        for hook in list(self._hooks.get(recipient, [])):
            hook(self, sender, amount)

    def _set_balance(self, account: str, value: int) -> None:
        previous = self._balances.get(account)
        self._balances[account] = value

        def undo():
            if previous is None:
                self._balances.pop(account, None)
            else:
                self._balances[account] = previous

        self._journal.record(undo)

    def _set_allowance(self, owner: str, spender: str, value: int) -> None:
        key = (owner, spender)
        previous = self._allowances.get(key)
        self._allowances[key] = value

        def undo():
            if previous is None:
                self._allowances.pop(key, None)
            else:
                self._allowances[key] = previous

        self._journal.record(undo)

    @staticmethod
    def _check_amount(amount: int) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise ERC20Error(f"ERC20: amount must be an integer, got {type(amount).__name__}")
        if amount < 0 or amount > MAX_UINT256:
            raise ERC20Error(f"ERC20: amount out of uint256 range: {amount}")
