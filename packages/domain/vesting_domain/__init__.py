"""Vesting Domain Engine - token-vesting escrow models and claim logic.

This package provides the foundational layer for token vesting:
- Per-beneficiary schedules combining a lockup tranche and a linear,
  interval-quantized vesting tranche
- A pool that custodies the tokens and releases them on claim
- Transactional, reentrancy-safe state changes
- Reporting blocks producing pandas DataFrames

The domain layer is designed to be:
- Framework-agnostic (no web or chain dependencies)
- Testable (pure Python with Pydantic validation, injectable clock)
- Integer-exact (no floating point in any released amount)
"""

from .schemas import *  # noqa: F403, F401
from .clock import SystemClock, ManualClock  # noqa: F401
from .journal import Journal  # noqa: F401
from .factory import VestingPoolFactory  # noqa: F401

__version__ = "0.1.0"
