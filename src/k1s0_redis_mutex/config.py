"""設定型定義と YAML 読み込み"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import redis.asyncio as aioredis
import yaml
from pydantic import BaseModel, Field, ValidationError

from .exceptions import MutexError, MutexErrorCodes
from .models import OptimisticLockOptions
from .mutex import RedisMutex
from .redis_store import RedisLockStore


class RedisSection(BaseModel):
    """Redis 接続設定。"""

    host: str = "localhost"
    port: int = Field(default=6379, ge=1, le=65535)
    password: str = ""
    db: int = Field(default=0, ge=0)
    socket_timeout: float | None = None


class OptimisticSection(BaseModel):
    """楽観的ロック取得のリトライ設定（ミリ秒）。"""

    max_wait_time: int = 1000
    max_attempts: int | None = Field(default=None, ge=1)
    time_between_attempts: int | None = Field(default=None, ge=0)

    def to_options(self) -> OptimisticLockOptions:
        return OptimisticLockOptions(
            max_wait_time=self.max_wait_time,
            max_attempts=self.max_attempts,
            time_between_attempts=self.time_between_attempts,
        )


class MutexSection(BaseModel):
    """ロック TTL とリトライ既定値。"""

    timeout: int = Field(default=10_000, gt=0)
    optimistic: OptimisticSection = Field(default_factory=OptimisticSection)


class LogSection(BaseModel):
    """ログ設定。"""

    level: str = "INFO"
    format: Literal["json", "text"] = "json"


class MutexConfig(BaseModel):
    """redis_mutex 設定全体。"""

    redis: RedisSection = Field(default_factory=RedisSection)
    mutex: MutexSection = Field(default_factory=MutexSection)
    log: LogSection = Field(default_factory=LogSection)

    def optimistic_options(self) -> OptimisticLockOptions:
        """with_optimistic_lock にそのまま渡せるリトライ設定を返す。"""
        return self.mutex.optimistic.to_options()


def load(path: Path) -> MutexConfig:
    """mutex 設定ファイル（YAML）を読み込んで MutexConfig を返す。

    空ファイルはすべて既定値として扱う。失敗は MutexError（READ_FILE_ERROR /
    PARSE_YAML_ERROR / VALIDATION_ERROR）として送出する。
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise MutexError(
            code=MutexErrorCodes.READ_FILE,
            message=f"Failed to read mutex config: {path}",
            cause=e,
        ) from e
    try:
        data: Any = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise MutexError(
            code=MutexErrorCodes.PARSE_YAML,
            message=f"Mutex config is not valid YAML: {path}",
            cause=e,
        ) from e
    try:
        return MutexConfig.model_validate(data)
    except ValidationError as e:
        raise MutexError(
            code=MutexErrorCodes.VALIDATION,
            message=f"Invalid mutex config {path}: {e}",
            cause=e,
        ) from e


def create_redis_client(section: RedisSection) -> aioredis.Redis:
    """RedisSection から非同期 Redis クライアントを生成する。接続は初回コマンド時。"""
    return aioredis.Redis(
        host=section.host,
        port=section.port,
        password=section.password or None,
        db=section.db,
        socket_timeout=section.socket_timeout,
        decode_responses=True,
    )


def create_mutex(
    config: MutexConfig,
    name: str,
    id: str,
    client: aioredis.Redis | None = None,
) -> RedisMutex:
    """設定から RedisMutex を組み立てる。

    client を渡した場合はそれを共有し、省略時は config.redis から新しく生成する。
    """
    if client is None:
        client = create_redis_client(config.redis)
    return RedisMutex(
        name=name,
        id=id,
        timeout=config.mutex.timeout,
        store=RedisLockStore(client),
    )
