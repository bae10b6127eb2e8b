"""Redis-backed lock store."""

from __future__ import annotations

import redis.asyncio as aioredis

from .store import LockStore

# GET and DEL run inside one server-side script so no other client can
# expire or reacquire the key between the comparison and the delete.
RELEASE_SCRIPT = "\n".join(
    [
        'if redis.call("get", KEYS[1]) == ARGV[1] then',
        '  return redis.call("del", KEYS[1])',
        "else",
        "  return 0",
        "end",
    ]
)


class RedisLockStore(LockStore):
    """LockStore over an injected ``redis.asyncio.Redis`` client.

    The client is owned by the caller. Connection and command errors are
    not caught here and reach the caller as ``redis.exceptions.RedisError``.
    """

    def __init__(self, client: aioredis.Redis) -> None:
        self._client = client

    @property
    def client(self) -> aioredis.Redis:
        return self._client

    async def set_if_absent(self, key: str, value: str, ttl_ms: int) -> bool:
        result = await self._client.set(key, value, px=ttl_ms, nx=True)
        return bool(result)

    async def delete(self, key: str) -> bool:
        return await self._client.delete(key) > 0

    async def delete_if_equals(self, key: str, value: str) -> bool:
        result = await self._client.eval(RELEASE_SCRIPT, 1, key, value)
        return int(result) == 1
