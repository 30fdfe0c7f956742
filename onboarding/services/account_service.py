"""Account creation backend.

There is no real identity backend yet. SimulatedAccountService has the same
contract a real one would: one awaitable call per record, success or an
AccountCreationError, no batch API.
"""

import asyncio
import random
from typing import Protocol

from onboarding.core.config import ProvisioningConfig
from onboarding.core.errors import AccountCreationError
from onboarding.pydantic_models import Record


class AccountCreationService(Protocol):
    """Contract of the account backend."""

    async def create(self, record: Record) -> None:
        """Create one account.

        Raises:
            AccountCreationError: If the backend refused or failed.
        """
        ...


class SimulatedAccountService:
    """Sleeps for a random latency and fails at a configured rate."""

    def __init__(
        self,
        failure_rate: float = ProvisioningConfig.SIMULATED_FAILURE_RATE,
        min_delay: float = ProvisioningConfig.SIMULATED_MIN_DELAY,
        max_delay: float = ProvisioningConfig.SIMULATED_MAX_DELAY,
        seed: int | None = None,
    ) -> None:
        self.failure_rate = failure_rate
        self.min_delay = min_delay
        self.max_delay = max_delay
        self._rng = random.Random(seed)
        self.created: list[str] = []

    async def create(self, record: Record) -> None:
        await asyncio.sleep(self._rng.uniform(self.min_delay, self.max_delay))
        if self._rng.random() < self.failure_rate:
            raise AccountCreationError("Account creation failed")
        self.created.append(record.id)
