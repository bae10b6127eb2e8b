"""k1s0 redis mutex library."""

from .config import (
    LogSection,
    MutexConfig,
    MutexSection,
    OptimisticSection,
    RedisSection,
    create_mutex,
    create_redis_client,
    load,
)
from .exceptions import MutexError, MutexErrorCodes, RedisMutexAcquisitionError
from .logger import new_logger
from .memory import InMemoryLockStore
from .models import LockGuard, OptimisticLockOptions
from .mutex import RedisMutex
from .redis_store import RELEASE_SCRIPT, RedisLockStore
from .store import LockStore

__all__ = [
    "RedisMutex",
    "LockGuard",
    "OptimisticLockOptions",
    "LockStore",
    "RedisLockStore",
    "InMemoryLockStore",
    "RELEASE_SCRIPT",
    "MutexError",
    "MutexErrorCodes",
    "RedisMutexAcquisitionError",
    "MutexConfig",
    "RedisSection",
    "MutexSection",
    "OptimisticSection",
    "LogSection",
    "load",
    "create_redis_client",
    "create_mutex",
    "new_logger",
]
