"""Redis 存储后端

支持多实例共享 token 状态。授权码的消费使用 GETDEL（Redis 6.2+），
保证同一个 code 只能被兑换一次。
"""

from typing import Any, Optional

import redis
from redis.exceptions import RedisError

from yoauth2.exceptions import StorageException
from yoauth2.log import get_logger
from .base import TokenStorage
from .serializers import default_serializer

logger = get_logger("storage.redis")


class RedisTokenStorage(TokenStorage):
    """Redis Token 存储

    Redis 读写失败时记录日志并抛出 StorageException，
    由调用方按“未认证”处理，不会静默返回空值。

    使用示例:
        import redis
        redis_client = redis.Redis(host='localhost', port=6379, db=0)
        storage = RedisTokenStorage(redis_client, prefix="myapp:")

        # 使用 JSON 序列化
        storage = RedisTokenStorage(redis_client, serializer=JsonSerializer())
    """

    def __init__(
        self,
        redis_client,
        prefix: str = "",
        serializer: Optional[Any] = None,
    ):
        """
        Args:
            redis_client: Redis 客户端实例
            prefix: 键前缀（在 token_name 之外再加一层隔离）
            serializer: 对象序列化器，默认使用 PickleSerializer
        """
        self._redis = redis_client
        self._prefix = prefix
        self._serializer = serializer or default_serializer

        logger.debug(f"RedisTokenStorage initialized: prefix={prefix!r}")

    @classmethod
    def from_settings(cls, settings, prefix: str = "", serializer: Optional[Any] = None) -> "RedisTokenStorage":
        """根据 RedisSettings 创建存储

        Args:
            settings: RedisSettings 实例
        """
        client = redis.Redis.from_url(
            settings.url,
            max_connections=settings.max_connections,
        )
        return cls(client, prefix=prefix, serializer=serializer)

    def _make_key(self, key: str) -> str:
        """生成完整的 Redis 键"""
        return f"{self._prefix}{key}"

    def _write(self, key: str, data: Any, ttl: int) -> None:
        try:
            if ttl is not None and ttl > 0:
                self._redis.set(self._make_key(key), data, ex=ttl)
            else:
                self._redis.set(self._make_key(key), data)
        except RedisError as e:
            logger.error(f"Redis set error: key={key}, {e}")
            raise StorageException(details=[str(e)]) from e

    def _read(self, key: str) -> Optional[Any]:
        try:
            return self._redis.get(self._make_key(key))
        except RedisError as e:
            logger.error(f"Redis get error: key={key}, {e}")
            raise StorageException(details=[str(e)]) from e

    def _remove(self, key: str) -> None:
        try:
            self._redis.delete(self._make_key(key))
        except RedisError as e:
            logger.error(f"Redis delete error: key={key}, {e}")
            raise StorageException(details=[str(e)]) from e

    def get(self, key: str) -> Optional[str]:
        data = self._read(key)
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return data

    def set(self, key: str, value: str, ttl: int) -> None:
        self._write(key, value, ttl)

    def delete(self, key: str) -> None:
        self._remove(key)

    def get_object(self, key: str) -> Optional[Any]:
        data = self._read(key)
        if data is None:
            return None
        return self._serializer.loads(data)

    def set_object(self, key: str, value: Any, ttl: int) -> None:
        self._write(key, self._serializer.dumps(value), ttl)

    def delete_object(self, key: str) -> None:
        self._remove(key)

    def pop_object(self, key: str) -> Optional[Any]:
        try:
            data = self._redis.getdel(self._make_key(key))
        except RedisError as e:
            logger.error(f"Redis getdel error: key={key}, {e}")
            raise StorageException(details=[str(e)]) from e
        if data is None:
            return None
        return self._serializer.loads(data)
