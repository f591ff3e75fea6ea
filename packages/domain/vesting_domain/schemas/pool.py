"""Vesting pool: schedule registry, claim engine and token custody.

A VestingPool custodies a fixed pool of one fungible token and releases it
to beneficiaries according to one VestingSchedule each. It is bound to one
token and one launch time at construction, and neither changes afterwards.

Data flow:
    1. Administrator approves the pool and registers schedule(s)
    2. Pool pulls lockup_amount + vesting_amount from the administrator
    3. Anyone queries a beneficiary's schedule; the beneficiary queries
       its claimable amount at any time
    4. Beneficiary claims; pool records the delta as claimed, then
       transfers it out

Transactions:
    Every mutating call is all-or-nothing. State changes are recorded in a
    Journal and undone if anything later in the call raises, including the
    token transfer or code that runs reentrantly during it.

Reentrancy (checks-effects-interactions):
    claim() stores the new `claimed` value BEFORE calling the token, and
    registration stores the new schedules BEFORE pulling tokens. Code run by
    the token during the transfer (e.g. a receive hook) therefore sees the
    updated state: a nested claim() finds nothing claimable, and a nested
    registration of the same beneficiary fails with ScheduleAlreadyExists.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Type, Union

from pydantic import TypeAdapter

from .access import Authority
from .base import Timestamp, UNIT_VESTING_INTERVAL, ZERO_ADDRESS, new_address, to_address
from .errors import (
    InvalidBeneficiary,
    InvalidTokenCollaborator,
    NoClaimableBalance,
    NotAuthorized,
    ScheduleAlreadyExists,
    TokenTransferFailed,
    VestingPoolError,
)
from .events import ERC20ReleasedEvent, PoolEvent, ScheduleCreatedEvent
from .release import ReleaseBreakdown, claimable_amount, total_released
from .schedules import VestingSchedule, VestingScheduleConfig
from .token import ERC20Error, FungibleToken
from ..clock import SystemClock
from ..journal import Journal

logger = logging.getLogger(__name__)

ScheduleInput = Union[VestingScheduleConfig, Mapping[str, Any]]

_TIMESTAMP = TypeAdapter(Timestamp)


class VestingPool:
    """Token-vesting escrow for one token and one launch time.

    Example:
        authority = OwnerAuthority(admin)
        pool = VestingPool(token, launch_time, authority, clock=clock)

        token.approve(admin, pool.address, 10_000)
        pool.add_vesting_schedule(
            VestingScheduleConfig(
                beneficiary=alice,
                lockup_amount=1_000,
                vesting_amount=9_000,
                vesting_duration=18 * UNIT_VESTING_INTERVAL,
            ),
            caller=admin,
        )

        pool.get_claimable(alice)   # 1_000 at launch
        pool.claim(alice)           # transfers 1_000 to alice
    """

    UNIT_VESTING_INTERVAL = UNIT_VESTING_INTERVAL

    def __init__(
        self,
        token: FungibleToken,
        launch_time: int,
        authority: Authority,
        clock: Optional[Callable[[], int]] = None,
        address: Optional[str] = None,
    ):
        """Initialize the pool.

        Args:
            token: Fungible token to custody
            launch_time: Epoch seconds all schedules are measured from (may be past or future)
            authority: Administrator gate for registration
            clock: Time provider returning epoch seconds (default: wall clock)
            address: Pool account identifier (default: random)

        Raises:
            InvalidTokenCollaborator: If token does not behave like a fungible token
            TypeError: If authority does not implement is_administrator()
        """
        if not isinstance(authority, Authority):
            raise TypeError(f"authority must implement is_administrator(), got {authority!r}")

        self._address = to_address(address) if address else new_address()
        self._token = self._check_token(token, self._address)
        self._launch_time = _TIMESTAMP.validate_python(launch_time)
        self._authority = authority
        self._clock = clock or SystemClock()

        self._schedules: Dict[str, VestingSchedule] = {}
        self._events: List[PoolEvent] = []
        self._journal = Journal()

        logger.info(
            "Vesting pool %s created for token %s, launch time %d",
            self._address,
            self._token.address,
            self._launch_time,
        )

    def __repr__(self) -> str:
        return (
            f"VestingPool(address={self._address!r}, token={self.token_address!r}, "
            f"launch_time={self._launch_time}, schedules={len(self._schedules)})"
        )

    # ------------------------------------------------------------------ #
    # Immutable properties
    # ------------------------------------------------------------------ #

    @property
    def address(self) -> str:
        return self._address

    @property
    def token(self) -> FungibleToken:
        return self._token

    @property
    def token_address(self) -> str:
        return to_address(self._token.address)

    @property
    def launch_time(self) -> int:
        return self._launch_time

    @property
    def authority(self) -> Authority:
        return self._authority

    def get_king_token_address(self) -> str:
        """Address of the custodied token."""
        return self.token_address

    def now(self) -> int:
        """Current pool time from the injected clock."""
        return int(self._clock())

    # ------------------------------------------------------------------ #
    # Schedule registry
    # ------------------------------------------------------------------ #

    def add_vesting_schedule(self, config: ScheduleInput, caller: str) -> VestingSchedule:
        """Admit one schedule and pull its total into custody.

        Args:
            config: Schedule parameters (model or mapping of its fields)
            caller: Account submitting the call

        Returns:
            Copy of the stored schedule

        Raises:
            NotAuthorized: If caller is not the administrator
            InvalidBeneficiary: If beneficiary is the zero address or missing (None)
            ScheduleAlreadyExists: If beneficiary already has a schedule
            TokenTransferFailed: If the token pull fails (balance or allowance too low)
        """
        return self.add_vesting_schedules([config], caller=caller)[0]

    def add_vesting_schedules(
        self,
        configs: Iterable[ScheduleInput],
        caller: str,
    ) -> List[VestingSchedule]:
        """Admit a batch of schedules atomically and pull the aggregate once.

        Every item is validated before anything is stored. If any item is
        invalid, or the pull fails, no schedule from the batch is admitted.
        Duplicate beneficiaries inside one batch fail like duplicates of
        existing schedules.

        Raises:
            Same as add_vesting_schedule()
        """
        administrator = to_address(caller)
        self._require_administrator(administrator)

        batch = [self._as_config(config) for config in configs]
        self._validate_batch(batch)
        if not batch:
            return []

        total = sum(config.total_amount for config in batch)

        with self._journal.transaction():
            now = self.now()
            stored = [self._store(config, now) for config in batch]
            self._pull(administrator, total)

        logger.info(
            "Admitted %d vesting schedule(s) into pool %s, pulled %d from %s",
            len(stored),
            self._address,
            total,
            administrator,
        )
        return [schedule.model_copy() for schedule in stored]

    def get_vesting_schedule(self, beneficiary: str) -> VestingSchedule:
        """Schedule for beneficiary, or the zero-valued invalid record if none exists."""
        schedule = self._schedules.get(to_address(beneficiary))
        if schedule is None:
            return VestingSchedule.empty()
        return schedule.model_copy()

    def has_schedule(self, beneficiary: str) -> bool:
        schedule = self._schedules.get(to_address(beneficiary))
        return schedule is not None and schedule.valid

    def beneficiaries(self) -> List[str]:
        """Beneficiaries in admission order."""
        return list(self._schedules.keys())

    def schedules(self) -> List[VestingSchedule]:
        """Copies of all stored schedules in admission order."""
        return [schedule.model_copy() for schedule in self._schedules.values()]

    def __len__(self) -> int:
        return len(self._schedules)

    def __contains__(self, beneficiary: str) -> bool:
        return self.has_schedule(beneficiary)

    # ------------------------------------------------------------------ #
    # Claim engine
    # ------------------------------------------------------------------ #

    def get_claimable(self, caller: str) -> int:
        """Amount the caller could claim right now (0 without a schedule)."""
        schedule = self._schedules.get(to_address(caller))
        if schedule is None:
            return 0
        return claimable_amount(schedule, self._launch_time, self.now(), self.UNIT_VESTING_INTERVAL)

    def get_total_released(self, caller: str) -> int:
        """Cumulative amount released to the caller so far, before subtracting claims."""
        schedule = self._schedules.get(to_address(caller))
        if schedule is None:
            return 0
        return total_released(schedule, self._launch_time, self.now(), self.UNIT_VESTING_INTERVAL)

    def release_breakdown(self, beneficiary: str, at: Optional[int] = None) -> ReleaseBreakdown:
        """Full release state of a beneficiary at `at` (default: now)."""
        schedule = self._schedules.get(to_address(beneficiary)) or VestingSchedule.empty()
        as_of = self.now() if at is None else at
        return ReleaseBreakdown.compute(
            schedule, self._launch_time, as_of, self.UNIT_VESTING_INTERVAL
        )

    def claim(self, caller: str) -> int:
        """Transfer everything currently claimable to the caller.

        Order is fixed: compute the delta, add it to `claimed`, transfer it,
        then emit ERC20ReleasedEvent. Code that runs during the transfer
        observes the updated `claimed` and sees nothing left to claim.

        Returns:
            Amount transferred

        Raises:
            NoClaimableBalance: If nothing is claimable (claimed is left untouched)
            TokenTransferFailed: If the token rejects the transfer
        """
        beneficiary = to_address(caller)

        with self._journal.transaction():
            now = self.now()
            schedule = self._schedules.get(beneficiary)
            amount = 0
            if schedule is not None:
                amount = claimable_amount(
                    schedule, self._launch_time, now, self.UNIT_VESTING_INTERVAL
                )
            if amount == 0:
                logger.warning("Rejected claim from %s: nothing claimable at %d", beneficiary, now)
                raise NoClaimableBalance()

            # effects
            previous = schedule.claimed
            schedule.claimed = previous + amount
            self._journal.record(lambda: setattr(schedule, "claimed", previous))

            # interaction
            self._push(beneficiary, amount)

            self._emit(ERC20ReleasedEvent(
                pool=self._address,
                timestamp=now,
                token=self.token_address,
                amount=amount,
                beneficiary=beneficiary,
            ))

        logger.info("Released %d to %s from pool %s", amount, beneficiary, self._address)
        return amount

    # ------------------------------------------------------------------ #
    # Pool-wide accounting
    # ------------------------------------------------------------------ #

    def total_committed(self) -> int:
        """Sum of lockup_amount + vesting_amount over all schedules."""
        return sum(schedule.total_amount for schedule in self._schedules.values())

    def total_claimed(self) -> int:
        return sum(schedule.claimed for schedule in self._schedules.values())

    def outstanding_obligation(self) -> int:
        """Amount still owed to beneficiaries (committed - claimed)."""
        return sum(schedule.remaining for schedule in self._schedules.values())

    def custody_balance(self) -> int:
        """Tokens actually held by the pool."""
        return self._token.balance_of(self._address)

    @property
    def events(self) -> List[PoolEvent]:
        """Copy of the event log, oldest first."""
        return list(self._events)

    def events_of_type(self, event_type: Type[PoolEvent]) -> List[PoolEvent]:
        return [event for event in self._events if isinstance(event, event_type)]

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _require_administrator(self, caller: str) -> None:
        if not self._authority.is_administrator(caller):
            logger.warning("Rejected administrator call from %s on pool %s", caller, self._address)
            raise NotAuthorized()

    @staticmethod
    def _as_config(config: ScheduleInput) -> VestingScheduleConfig:
        if isinstance(config, VestingScheduleConfig):
            return config
        if isinstance(config, Mapping) and config.get("beneficiary") is None:
            raise InvalidBeneficiary()
        return VestingScheduleConfig.model_validate(config)

    def _validate_batch(self, batch: List[VestingScheduleConfig]) -> None:
        seen = set()
        for config in batch:
            if config.beneficiary == ZERO_ADDRESS:
                raise InvalidBeneficiary()
            if config.beneficiary in seen or self.has_schedule(config.beneficiary):
                raise ScheduleAlreadyExists(
                    f"{ScheduleAlreadyExists.reason}: {config.beneficiary}"
                )
            seen.add(config.beneficiary)

    def _store(self, config: VestingScheduleConfig, now: int) -> VestingSchedule:
        # re-checked here: a reentrant call may have admitted it since validation
        if self.has_schedule(config.beneficiary):
            raise ScheduleAlreadyExists(f"{ScheduleAlreadyExists.reason}: {config.beneficiary}")

        schedule = VestingSchedule.from_config(config)
        key = schedule.beneficiary
        self._schedules[key] = schedule
        self._journal.record(lambda: self._schedules.pop(key, None))

        self._emit(ScheduleCreatedEvent(
            pool=self._address,
            timestamp=now,
            beneficiary=key,
            lockup_amount=schedule.lockup_amount,
            lockup_duration=schedule.lockup_duration,
            vesting_amount=schedule.vesting_amount,
            vesting_duration=schedule.vesting_duration,
        ))
        return schedule

    def _emit(self, event: PoolEvent) -> None:
        self._events.append(event)
        self._journal.record(self._events.pop)

    def _pull(self, administrator: str, amount: int) -> None:
        self._settle(
            lambda: self._token.transfer_from(self._address, administrator, self._address, amount),
            "pull",
            administrator,
            self._address,
            amount,
        )

    def _push(self, recipient: str, amount: int) -> None:
        self._settle(
            lambda: self._token.transfer(self._address, recipient, amount),
            "transfer",
            self._address,
            recipient,
            amount,
        )

    def _settle(
        self,
        call: Callable[[], Any],
        action: str,
        sender: str,
        recipient: str,
        amount: int,
    ) -> None:
        """Run a token transfer and decide whether it happened.

        A raised ERC20Error means nothing moved. A return value other than
        True is judged by the recipient's balance: if the full amount
        arrived, the transfer stands (empty return data, as SafeERC20
        accepts it); otherwise it failed and nothing is recorded.
        """
        before = self._token.balance_of(recipient)
        try:
            ok = call()
        except VestingPoolError:
            raise
        except ERC20Error as exc:
            logger.warning(
                "Token %s of %d from %s to %s failed: %s",
                action,
                amount,
                sender,
                recipient,
                exc,
            )
            raise TokenTransferFailed(f"{TokenTransferFailed.reason}: {exc}") from exc
        if ok is True:
            return

        moved = self._token.balance_of(recipient) - before
        if moved == amount:
            logger.warning(
                "Token %s of %d from %s to %s returned %r; balance moved, accepting",
                action,
                amount,
                sender,
                recipient,
                ok,
            )
            return

        logger.warning(
            "Token %s of %d from %s to %s returned %r and moved %d",
            action,
            amount,
            sender,
            recipient,
            ok,
            moved,
        )
        raise TokenTransferFailed(f"{TokenTransferFailed.reason}: returned {ok!r}")

    @staticmethod
    def _check_token(token: Any, pool_address: str) -> FungibleToken:
        if token is None or not isinstance(token, FungibleToken):
            raise InvalidTokenCollaborator()

        try:
            token_address = to_address(token.address)
            decimals = token.decimals()
            balance = token.balance_of(pool_address)
            # zero-amount self transfer: mutators must report success with True
            transferred = token.transfer(pool_address, pool_address, 0)
        except Exception as exc:
            raise InvalidTokenCollaborator(
                f"{InvalidTokenCollaborator.reason}: {exc}"
            ) from exc

        if token_address == ZERO_ADDRESS:
            raise InvalidTokenCollaborator(f"{InvalidTokenCollaborator.reason}: zero address")
        for view, value in (("decimals()", decimals), ("balance_of()", balance)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidTokenCollaborator(
                    f"{InvalidTokenCollaborator.reason}: {view} returned {value!r}"
                )
        if transferred is not True:
            raise InvalidTokenCollaborator(
                f"{InvalidTokenCollaborator.reason}: transfer() returned {transferred!r}"
            )
        return token
