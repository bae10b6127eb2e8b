"""LockStore 抽象基底クラス"""

from __future__ import annotations

from abc import ABC, abstractmethod


class LockStore(ABC):
    """ロックレコードを保持するキーバリューストアの抽象基底クラス。"""

    @abstractmethod
    async def set_if_absent(self, key: str, value: str, ttl_ms: int) -> bool:
        """キーが存在しない場合のみ TTL（ミリ秒）付きで値を設定する。設定できたら True。"""
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """キーを無条件に削除する。削除できたら True。"""
        ...

    @abstractmethod
    async def delete_if_equals(self, key: str, value: str) -> bool:
        """値が一致する場合のみキーを削除する。比較と削除は単一のアトミック操作。"""
        ...
