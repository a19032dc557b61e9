"""UnitOfWork — one atomic boundary per multi-step money movement.

Every ledger append and the balance mutation it pairs with must commit or roll
back together. `atomic()` gives a service exactly that:

  1. acquire one in-process asyncio.Lock per key (account id, investment id),
     always in sorted order so two units never wait on each other in a cycle;
  2. bound the whole unit (lock wait included) by TRANSACTION_TIMEOUT_SECONDS;
  3. commit on clean exit, roll back on any exception or timeout.

Cross-process serialization is provided by the repositories, which re-read the
rows they mutate with SELECT ... FOR UPDATE inside the unit.
"""

import asyncio
import logging
from collections import defaultdict
from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pf_common.errors import TransactionTimeoutError

logger = logging.getLogger(__name__)


class UnitOfWork:
    def __init__(self, timeout_seconds: float | None = None) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        # Units holding or waiting on each key; the lock is dropped at zero.
        self._holders: dict[str, int] = defaultdict(int)
        self._timeout = (
            timeout_seconds
            if timeout_seconds is not None
            else settings.TRANSACTION_TIMEOUT_SECONDS
        )

    @asynccontextmanager
    async def _hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._holders[key] += 1
        try:
            async with lock:
                yield
        finally:
            self._holders[key] -= 1
            if not self._holders[key]:
                del self._holders[key]
                del self._locks[key]

    def is_locked(self, key: str) -> bool:
        return key in self._locks and self._locks[key].locked()

    @asynccontextmanager
    async def atomic(self, db: AsyncSession, *keys: str | None) -> AsyncIterator[None]:
        """Run the body as one all-or-nothing unit. None keys are ignored."""
        lock_keys = sorted({k for k in keys if k})
        try:
            async with asyncio.timeout(self._timeout):
                async with AsyncExitStack() as stack:
                    for key in lock_keys:
                        await stack.enter_async_context(self._hold(key))
                    yield
                    await db.commit()
        except TimeoutError:
            await db.rollback()
            logger.warning("Unit rolled back after %.1fs timeout: keys=%s", self._timeout, lock_keys)
            raise TransactionTimeoutError(self._timeout) from None
        except Exception:
            await db.rollback()
            logger.warning("Unit rolled back: keys=%s", lock_keys)
            raise


# One lock registry for every service, so a key is serialized across modules.
default_unit_of_work = UnitOfWork()
