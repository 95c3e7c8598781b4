"""Per-slot mutual exclusion for the booking write path."""

import asyncio
import threading
import time
import uuid
from contextlib import asynccontextmanager
from datetime import date
from typing import AsyncIterator, Optional

import structlog

from scheduling_core.core.config import Settings
from scheduling_core.core.exceptions import ConflictError, ConflictReason
from scheduling_core.core.redis import RedisClient

logger = structlog.get_logger(__name__)

SLOT_BUSY_MESSAGE = "This time slot is being booked by someone else. Please try again."


def slot_lock_key(day: date, clock_time: str, staff_id: Optional[str] = None) -> str:
    key = f"slot:{day.isoformat()}:{clock_time}"
    if staff_id:
        key = f"{key}:{staff_id}"
    return key


def staff_day_lock_key(day: date, staff_id: str) -> str:
    """One key per staff member per day, covering every start time on it."""
    return f"staff:{day.isoformat()}:{staff_id}"


class _LockEntry:
    __slots__ = ("lock", "refs")

    def __init__(self):
        self.lock = asyncio.Lock()
        self.refs = 0


class SlotLockManager:
    """In-process table of slot locks.

    Callers for the same key queue behind each other; different keys never
    contend. An entry lives only while it has a holder or a waiter.
    """

    def __init__(self, acquire_timeout: Optional[float] = None):
        self.acquire_timeout = acquire_timeout
        self._entries: dict[str, _LockEntry] = {}
        self._mutex = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def _checkout(self, key: str) -> _LockEntry:
        with self._mutex:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _LockEntry()
            entry.refs += 1
            return entry

    def _checkin(self, key: str, entry: _LockEntry) -> None:
        with self._mutex:
            entry.refs -= 1
            if entry.refs == 0:
                del self._entries[key]

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        entry = self._checkout(key)
        try:
            try:
                await asyncio.wait_for(entry.lock.acquire(), self.acquire_timeout)
            except asyncio.TimeoutError:
                logger.warning("Slot lock wait timed out", key=key)
                raise ConflictError(SLOT_BUSY_MESSAGE, ConflictReason.SLOT_BUSY)
            try:
                yield
            finally:
                entry.lock.release()
        finally:
            self._checkin(key, entry)


class RedisSlotLockManager:
    """Slot locks shared by every process talking to the same Redis."""

    def __init__(
        self,
        redis_client: RedisClient,
        ttl: int = 30,
        poll_interval: float = 0.05,
        acquire_timeout: Optional[float] = None,
    ):
        self.redis_client = redis_client
        self.ttl = ttl
        self.poll_interval = poll_interval
        self.acquire_timeout = acquire_timeout

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        token = str(uuid.uuid4())
        lock_key = f"lock:{key}"
        deadline = (
            time.monotonic() + self.acquire_timeout
            if self.acquire_timeout is not None
            else None
        )

        while not await self.redis_client.acquire_lock(lock_key, token, self.ttl):
            if deadline is not None and time.monotonic() >= deadline:
                logger.warning("Slot lock wait timed out", key=key)
                raise ConflictError(SLOT_BUSY_MESSAGE, ConflictReason.SLOT_BUSY)
            await asyncio.sleep(self.poll_interval)

        try:
            yield
        finally:
            released = await self.redis_client.release_lock(lock_key, token)
            if not released:
                logger.warning("Slot lock was not released", key=key)


def build_lock_manager(settings: Settings, redis_client: Optional[RedisClient] = None):
    """Lock manager for the configured ``SLOT_LOCK_BACKEND``."""
    if settings.SLOT_LOCK_BACKEND == "redis":
        return RedisSlotLockManager(
            redis_client or RedisClient(settings.REDIS_URL),
            ttl=settings.SLOT_LOCK_TTL_SECONDS,
            acquire_timeout=settings.SLOT_LOCK_TIMEOUT_SECONDS,
        )
    return SlotLockManager(acquire_timeout=settings.SLOT_LOCK_TIMEOUT_SECONDS)
