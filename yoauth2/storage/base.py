"""存储后端抽象

OAuth2 的所有记录（code、token 及其索引）都保存在外部的 KV 存储中，
引擎本身不持有任何状态。此处定义引擎对存储的最小要求。
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class TokenStorage(ABC):
    """Token 存储抽象基类

    约定:
        - ``ttl`` 单位为秒，``ttl <= 0`` 表示永不过期
        - 过期由存储自身负责，引擎从不主动扫描
        - 字符串与对象分开读写，对象的序列化方式由具体后端决定
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """读取字符串值，不存在或已过期返回 None"""
        pass

    @abstractmethod
    def set(self, key: str, value: str, ttl: int) -> None:
        """写入字符串值"""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """删除字符串值，不存在时什么也不做"""
        pass

    @abstractmethod
    def get_object(self, key: str) -> Optional[Any]:
        """读取对象，不存在或已过期返回 None"""
        pass

    @abstractmethod
    def set_object(self, key: str, value: Any, ttl: int) -> None:
        """写入对象"""
        pass

    @abstractmethod
    def delete_object(self, key: str) -> None:
        """删除对象，不存在时什么也不做"""
        pass

    def pop_object(self, key: str) -> Optional[Any]:
        """读取并删除对象

        用作一次性凭证（如授权码）的消费闸门：同一个 key 并发调用时，
        只应有一个调用方拿到对象。默认实现是先读后删，不是原子的，
        支持原子操作的后端应当覆盖此方法。

        Returns:
            被删除的对象，不存在返回 None
        """
        value = self.get_object(key)
        if value is not None:
            self.delete_object(key)
        return value
