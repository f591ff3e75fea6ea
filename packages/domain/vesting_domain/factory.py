"""Batch deployment of vesting pools from a manifest.

The factory groups manifest rows by their `pool` column and, for each group:
    1. Constructs an independent VestingPool (same token and launch time)
    2. Approves the pool for the group's aggregate amount on behalf of the administrator
    3. Admits every schedule of the group in one batch call

Each pool is self-contained; a failure in one group leaves pools already
deployed untouched and stops the run.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional

from .schemas import (
    ERC20ReleasedEvent,
    FungibleToken,
    ManifestEntry,
    OwnerAuthority,
    VestingPool,
    VestingScheduleConfig,
    to_address,
)

logger = logging.getLogger(__name__)


class VestingPoolFactory:
    """Deploys one VestingPool per manifest pool name.

    Example:
        factory = VestingPoolFactory(token, launch_time, administrator=admin, clock=clock)
        pools = factory.deploy(load_manifest("distribution.xlsx"))
        pools["seed"].get_claimable(wallet)
    """

    def __init__(
        self,
        token: FungibleToken,
        launch_time: int,
        administrator: str,
        clock: Optional[Callable[[], int]] = None,
    ):
        self.token = token
        self.launch_time = launch_time
        self.administrator = to_address(administrator)
        self.clock = clock
        self.pools: Dict[str, VestingPool] = {}

    def deploy(self, entries: Iterable[ManifestEntry]) -> Dict[str, VestingPool]:
        """Deploy and fund a pool per distinct `pool` value, in first-seen order.

        Returns:
            Mapping of pool name → deployed VestingPool (only the pools from this call)

        Raises:
            ValueError: If a pool name was already deployed by this factory
            VestingPoolError: If admitting a group fails (see VestingPool.add_vesting_schedules)
        """
        decimals = self.token.decimals()
        groups: Dict[str, List[VestingScheduleConfig]] = {}
        for entry in entries:
            groups.setdefault(entry.pool, []).append(
                entry.to_config(decimals, VestingPool.UNIT_VESTING_INTERVAL)
            )

        duplicates = [name for name in groups if name in self.pools]
        if duplicates:
            raise ValueError(f"Pools already deployed by this factory: {duplicates}")

        deployed: Dict[str, VestingPool] = {}
        for name, configs in groups.items():
            deployed[name] = self._deploy_one(name, configs)
        return deployed

    def _deploy_one(self, name: str, configs: List[VestingScheduleConfig]) -> VestingPool:
        pool = VestingPool(
            self.token,
            self.launch_time,
            OwnerAuthority(self.administrator),
            clock=self.clock,
        )
        total = sum(config.total_amount for config in configs)
        self.token.approve(self.administrator, pool.address, total)
        try:
            pool.add_vesting_schedules(configs, caller=self.administrator)
        except Exception:
            # pool is discarded; leave no allowance behind for it
            self.token.approve(self.administrator, pool.address, 0)
            logger.warning("Deploying pool %r at %s failed; allowance revoked", name, pool.address)
            raise

        self.pools[name] = pool
        logger.info(
            "Deployed pool %r at %s with %d schedule(s) totalling %d",
            name,
            pool.address,
            len(configs),
            total,
        )
        return pool

    def released_events(self) -> List[ERC20ReleasedEvent]:
        """Release events across every pool deployed by this factory, in pool order."""
        events = []
        for pool in self.pools.values():
            events.extend(pool.events_of_type(ERC20ReleasedEvent))
        return events
