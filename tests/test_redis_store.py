"""RedisLockStore のユニットテスト"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from k1s0_redis_mutex import (
    RELEASE_SCRIPT,
    OptimisticLockOptions,
    RedisLockStore,
    RedisMutex,
)


def make_client() -> MagicMock:
    client = MagicMock()
    client.set = AsyncMock(return_value=True)
    client.delete = AsyncMock(return_value=1)
    client.eval = AsyncMock(return_value=1)
    return client


async def test_set_if_absent_uses_set_nx_px() -> None:
    client = make_client()
    store = RedisLockStore(client)
    assert await store.set_if_absent("lock:jobs:1", "token-1", ttl_ms=5000) is True
    client.set.assert_awaited_once_with("lock:jobs:1", "token-1", px=5000, nx=True)


async def test_set_if_absent_returns_false_when_key_exists() -> None:
    """SET NX がキー存在時に返す None を False に変換すること。"""
    client = make_client()
    client.set = AsyncMock(return_value=None)
    store = RedisLockStore(client)
    assert await store.set_if_absent("lock:jobs:1", "token-1", ttl_ms=5000) is False


async def test_delete_issues_del() -> None:
    client = make_client()
    store = RedisLockStore(client)
    assert await store.delete("lock:jobs:1") is True
    client.delete.assert_awaited_once_with("lock:jobs:1")


async def test_delete_missing_key() -> None:
    client = make_client()
    client.delete = AsyncMock(return_value=0)
    store = RedisLockStore(client)
    assert await store.delete("lock:jobs:1") is False


async def test_delete_if_equals_runs_release_script() -> None:
    client = make_client()
    store = RedisLockStore(client)
    assert await store.delete_if_equals("lock:jobs:1", "token-1") is True
    client.eval.assert_awaited_once_with(RELEASE_SCRIPT, 1, "lock:jobs:1", "token-1")


async def test_delete_if_equals_mismatch() -> None:
    client = make_client()
    client.eval = AsyncMock(return_value=0)
    store = RedisLockStore(client)
    assert await store.delete_if_equals("lock:jobs:1", "token-1") is False


def test_release_script_compares_before_delete() -> None:
    assert 'redis.call("get", KEYS[1]) == ARGV[1]' in RELEASE_SCRIPT
    assert 'redis.call("del", KEYS[1])' in RELEASE_SCRIPT


async def test_with_lock_against_redis_client() -> None:
    """RedisMutex が SET NX PX と解放スクリプトを同じトークンで呼ぶこと。"""
    client = make_client()
    mutex = RedisMutex(name="jobs", id="1", timeout=3000, store=RedisLockStore(client))

    async def work() -> int:
        return 42

    assert await mutex.with_lock(work) == 42
    key, token = client.set.await_args.args
    assert key == "lock:jobs:1"
    assert client.set.await_args.kwargs == {"px": 3000, "nx": True}
    client.eval.assert_awaited_once_with(RELEASE_SCRIPT, 1, "lock:jobs:1", token)


async def test_force_reset_lock_against_redis_client() -> None:
    client = make_client()
    mutex = RedisMutex(name="jobs", id="1", timeout=3000, store=RedisLockStore(client))
    await mutex.force_reset_lock()
    client.delete.assert_awaited_once_with("lock:jobs:1")
    client.eval.assert_not_awaited()


async def test_store_error_on_acquire_propagates() -> None:
    """Redis 通信エラーはラップされずにそのまま伝播すること。"""
    client = make_client()
    client.set = AsyncMock(side_effect=RedisConnectionError("connection refused"))
    mutex = RedisMutex(name="jobs", id="1", timeout=3000, store=RedisLockStore(client))

    async def work() -> None:
        pytest.fail("work must not run")

    with pytest.raises(RedisConnectionError):
        await mutex.with_optimistic_lock(work, OptimisticLockOptions(max_wait_time=100))
    client.set.assert_awaited_once()


async def test_store_error_on_release_propagates_after_work() -> None:
    client = make_client()
    client.eval = AsyncMock(side_effect=RedisConnectionError("connection lost"))
    mutex = RedisMutex(name="jobs", id="1", timeout=3000, store=RedisLockStore(client))
    calls: list[int] = []

    async def work() -> None:
        calls.append(1)

    with pytest.raises(RedisConnectionError):
        await mutex.with_lock(work)
    assert calls == [1]
    client.eval.assert_awaited_once()
