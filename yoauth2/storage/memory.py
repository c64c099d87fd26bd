"""内存存储后端

基于 cachetools.TLRUCache 实现，每个条目有独立的过期时间。
适用于单实例部署和测试，重启后数据丢失。
"""

import copy
import math
import threading
import time
from typing import Any, Callable, Optional

from cachetools import TLRUCache

from yoauth2.log import get_logger
from .base import TokenStorage

logger = get_logger("storage.memory")


class _Entry:
    """缓存条目，记录写入时的 TTL 供 TLRUCache 计算过期时间"""

    __slots__ = ("value", "ttl")

    def __init__(self, value: Any, ttl: int):
        self.value = value
        self.ttl = ttl


def _time_to_use(key: str, entry: _Entry, now: float) -> float:
    if entry.ttl is None or entry.ttl <= 0:
        return math.inf
    return now + entry.ttl


class MemoryTokenStorage(TokenStorage):
    """内存 Token 存储

    对象在写入和读取时都会深拷贝，调用方修改返回值不会影响已保存的记录，
    行为与跨进程的存储保持一致。

    使用示例:
        storage = MemoryTokenStorage()
        storage.set("k", "v", ttl=60)
        storage.get("k")  # -> "v"

        # 测试中可注入时钟
        clock = FakeClock()
        storage = MemoryTokenStorage(timer=clock)
    """

    def __init__(
        self,
        maxsize: int = 100000,
        timer: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            maxsize: 最大条目数，超出后按最近最少使用淘汰
            timer: 计时函数，默认 time.monotonic
        """
        self._cache = TLRUCache(maxsize=maxsize, ttu=_time_to_use, timer=timer)
        self._lock = threading.RLock()
        logger.debug(f"MemoryTokenStorage initialized: maxsize={maxsize}")

    def _get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._cache.get(key)
            return None if entry is None else entry.value

    def _set(self, key: str, value: Any, ttl: int) -> None:
        with self._lock:
            self._cache[key] = _Entry(value, ttl)

    def _delete(self, key: str) -> None:
        with self._lock:
            self._cache.pop(key, None)

    def get(self, key: str) -> Optional[str]:
        return self._get(key)

    def set(self, key: str, value: str, ttl: int) -> None:
        self._set(key, value, ttl)

    def delete(self, key: str) -> None:
        self._delete(key)

    def get_object(self, key: str) -> Optional[Any]:
        return copy.deepcopy(self._get(key))

    def set_object(self, key: str, value: Any, ttl: int) -> None:
        self._set(key, copy.deepcopy(value), ttl)

    def delete_object(self, key: str) -> None:
        self._delete(key)

    def pop_object(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._cache.pop(key, None)
        return None if entry is None else entry.value

    def expire(self) -> None:
        """立即清除已过期的条目（读取时也会跳过过期条目）"""
        with self._lock:
            self._cache.expire()

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
        logger.info("MemoryTokenStorage cleared")

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
