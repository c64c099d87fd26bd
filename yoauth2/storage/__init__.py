"""存储模块

提供 OAuth2 记录的存储后端。

使用示例:
    from yoauth2.storage import MemoryTokenStorage, RedisTokenStorage

    storage = MemoryTokenStorage()

    import redis
    storage = RedisTokenStorage(redis.Redis(), prefix="myapp:")
"""

from .base import TokenStorage
from .memory import MemoryTokenStorage
from .redis_backend import RedisTokenStorage
from .serializers import PickleSerializer, JsonSerializer

__all__ = [
    "TokenStorage",
    "MemoryTokenStorage",
    "RedisTokenStorage",
    "PickleSerializer",
    "JsonSerializer",
]
