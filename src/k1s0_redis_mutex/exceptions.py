"""redis_mutex ライブラリの例外型定義"""

from __future__ import annotations


class MutexError(Exception):
    """redis_mutex ライブラリのエラー基底クラス。"""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class MutexErrorCodes:
    """MutexError のエラーコード定数。"""

    ACQUISITION_FAILED: str = "ACQUISITION_FAILED"
    INVALID_OPTIONS: str = "INVALID_OPTIONS"
    READ_FILE: str = "READ_FILE_ERROR"
    PARSE_YAML: str = "PARSE_YAML_ERROR"
    VALIDATION: str = "VALIDATION_ERROR"


class RedisMutexAcquisitionError(MutexError):
    """ロックを取得できなかった場合のエラー。

    Redis 通信エラーとは区別される（そちらは redis.exceptions.RedisError のまま伝播する）。
    """

    def __init__(self, lock_name: str, lock_id: str) -> None:
        self.lock_name = lock_name
        self.lock_id = lock_id
        super().__init__(
            code=MutexErrorCodes.ACQUISITION_FAILED,
            message=f"Failed to acquire redis mutex with name '{lock_name}' (id: {lock_id})",
        )
