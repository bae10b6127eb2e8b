"""RedisMutex — single-instance distributed mutex."""

from __future__ import annotations

import asyncio
import contextlib
import time
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import TypeVar

import structlog

from .exceptions import MutexError, MutexErrorCodes, RedisMutexAcquisitionError
from .models import LockGuard, OptimisticLockOptions
from .store import LockStore

T = TypeVar("T")

logger = structlog.stdlib.get_logger(__name__)


class RedisMutex:
    """Distributed mutex identified by ``name`` and ``id``.

    The store is the source of truth: the mutex object keeps no lock state
    of its own, so one instance can be shared by concurrent tasks. Each
    successful acquisition writes a fresh random token under
    ``lock:{name}:{id}`` with a TTL of ``timeout`` milliseconds, and only the
    holder of that token can release it.
    """

    def __init__(self, name: str, id: str, timeout: int, store: LockStore) -> None:
        if timeout <= 0:
            raise MutexError(
                code=MutexErrorCodes.INVALID_OPTIONS,
                message=f"timeout must be a positive number of milliseconds: {timeout}",
            )
        self._name = name
        self._id = id
        self._timeout = timeout
        self._store = store

    @property
    def name(self) -> str:
        return self._name

    @property
    def id(self) -> str:
        return self._id

    @property
    def timeout(self) -> int:
        """Lock TTL in milliseconds."""
        return self._timeout

    def get_redis_key(self) -> str:
        return f"lock:{self._name}:{self._id}"

    async def force_reset_lock(self) -> None:
        """Delete the lock record regardless of who holds it."""
        key = self.get_redis_key()
        await self._store.delete(key)
        logger.warning("mutex.force_reset", key=key)

    async def acquire(self) -> str | None:
        """Try to take the lock once.

        Returns:
            The holder token on success, ``None`` if the lock is already held.
        """
        key = self.get_redis_key()
        token = str(uuid.uuid4())
        if not await self._store.set_if_absent(key, token, self._timeout):
            return None
        logger.debug("mutex.acquired", key=key, ttl_ms=self._timeout)
        return token

    async def release(self, token: str) -> None:
        """Release the lock if it is still owned by ``token``.

        A lock that already expired or now belongs to another holder is left
        untouched; that is not an error.
        """
        key = self.get_redis_key()
        released = await self._store.delete_if_equals(key, token)
        logger.debug("mutex.released", key=key, released=released)

    async def acquire_optimistically(self, options: OptimisticLockOptions) -> str | None:
        """Poll :meth:`acquire` until it succeeds or the budget runs out.

        The first attempt is always made; the deadline is only checked after
        a failed attempt. Every attempt mints its own token.

        Returns:
            The holder token on success, ``None`` on timeout or when
            ``max_attempts`` is exhausted.
        """
        start = time.monotonic()
        spin_seconds = options.spin_time / 1000
        attempts = 0

        while True:
            token = await self.acquire()
            if token is not None:
                return token
            attempts += 1

            if options.max_attempts is not None and attempts >= options.max_attempts:
                break
            elapsed_ms = (time.monotonic() - start) * 1000
            if elapsed_ms > options.max_wait_time:
                break

            await asyncio.sleep(spin_seconds)

        logger.debug(
            "mutex.wait_exhausted",
            key=self.get_redis_key(),
            attempts=attempts,
            max_wait_time=options.max_wait_time,
        )
        return None

    async def with_lock(self, run: Callable[[], Awaitable[T]]) -> T:
        """Run ``run`` while holding the lock, taking it in a single attempt.

        Raises:
            RedisMutexAcquisitionError: the lock is held by someone else.
        """
        token = await self.acquire()
        if token is None:
            raise RedisMutexAcquisitionError(lock_name=self._name, lock_id=self._id)

        try:
            return await run()
        finally:
            await self.release(token)

    async def with_optimistic_lock(
        self,
        run: Callable[[], Awaitable[T]],
        options: OptimisticLockOptions,
    ) -> T:
        """Run ``run`` while holding the lock, waiting for it per ``options``.

        Raises:
            RedisMutexAcquisitionError: the lock could not be taken in budget.
        """
        token = await self.acquire_optimistically(options)
        if token is None:
            raise RedisMutexAcquisitionError(lock_name=self._name, lock_id=self._id)

        try:
            return await run()
        finally:
            await self.release(token)

    @contextlib.asynccontextmanager
    async def locked(
        self, options: OptimisticLockOptions | None = None
    ) -> AsyncIterator[LockGuard]:
        """``async with`` form of :meth:`with_lock` / :meth:`with_optimistic_lock`."""
        if options is None:
            token = await self.acquire()
        else:
            token = await self.acquire_optimistically(options)
        if token is None:
            raise RedisMutexAcquisitionError(lock_name=self._name, lock_id=self._id)

        try:
            yield LockGuard(key=self.get_redis_key(), token=token)
        finally:
            await self.release(token)
