"""InMemoryLockStore 実装"""

from __future__ import annotations

import asyncio
import time

from .store import LockStore


class _LockEntry:
    __slots__ = ("value", "expires_at")

    def __init__(self, value: str, ttl_ms: int) -> None:
        self.value = value
        self.expires_at = time.monotonic() + ttl_ms / 1000

    def is_expired(self) -> bool:
        return time.monotonic() >= self.expires_at


class InMemoryLockStore(LockStore):
    """テスト用インメモリロックストア。"""

    def __init__(self) -> None:
        self._entries: dict[str, _LockEntry] = {}
        self._lock = asyncio.Lock()

    def _live_entry(self, key: str) -> _LockEntry | None:
        entry = self._entries.get(key)
        if entry is not None and entry.is_expired():
            del self._entries[key]
            return None
        return entry

    async def get(self, key: str) -> str | None:
        """キーに対応する値を取得する。存在しない・期限切れなら None。"""
        async with self._lock:
            entry = self._live_entry(key)
            return entry.value if entry is not None else None

    async def exists(self, key: str) -> bool:
        return await self.get(key) is not None

    async def set_if_absent(self, key: str, value: str, ttl_ms: int) -> bool:
        async with self._lock:
            if self._live_entry(key) is not None:
                return False
            self._entries[key] = _LockEntry(value, ttl_ms)
            return True

    async def delete(self, key: str) -> bool:
        async with self._lock:
            if self._live_entry(key) is None:
                return False
            del self._entries[key]
            return True

    async def delete_if_equals(self, key: str, value: str) -> bool:
        async with self._lock:
            entry = self._live_entry(key)
            if entry is None or entry.value != value:
                return False
            del self._entries[key]
            return True
