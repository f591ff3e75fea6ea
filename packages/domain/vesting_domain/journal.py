"""In-memory undo log for all-or-nothing state changes.

Mutating operations run inside `Journal.transaction()` and register an undo
callback for every change they make. If the outermost transaction (or any
nested one) raises, the callbacks recorded since that transaction began are
replayed newest-first and the exception propagates unchanged.

Nested transactions share the log, so work done by a reentrant call is
undone together with the outer call that triggered it.

Example:
    journal = Journal()
    with journal.transaction():
        previous = schedule.claimed
        schedule.claimed = previous + amount
        journal.record(lambda: setattr(schedule, "claimed", previous))
        token.transfer(...)  # raises -> claimed is restored
"""

from contextlib import contextmanager
from typing import Callable, Iterator, List


class Journal:
    """Undo log shared by nested transactions."""

    def __init__(self):
        self._undo: List[Callable[[], None]] = []
        self._depth = 0

    @property
    def depth(self) -> int:
        """Number of transactions currently open (0 = none)."""
        return self._depth

    def record(self, undo: Callable[[], None]) -> None:
        """Register an undo callback for a change made in the open transaction.

        Raises:
            RuntimeError: If no transaction is open
        """
        if self._depth == 0:
            raise RuntimeError("Journal.record() called outside a transaction")
        self._undo.append(undo)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        mark = len(self._undo)
        self._depth += 1
        try:
            yield
        except BaseException:
            self._rollback(mark)
            raise
        finally:
            self._depth -= 1
            if self._depth == 0:
                # committed; nothing left to undo
                self._undo.clear()

    def _rollback(self, mark: int) -> None:
        while len(self._undo) > mark:
            undo = self._undo.pop()
            undo()
