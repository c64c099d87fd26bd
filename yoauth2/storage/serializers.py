"""对象序列化器

RedisTokenStorage 默认使用 pickle；需要在 Redis 中直接查看数据时可换成 JSON。
"""

import json
import pickle
from typing import Any


class PickleSerializer:
    """pickle 序列化器（RedisTokenStorage 默认）

    可序列化任意 Python 对象，读回的仍是原来的模型类型。
    """

    def dumps(self, value: Any) -> bytes:
        return pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)

    def loads(self, data: bytes) -> Any:
        return pickle.loads(data)


class JsonSerializer:
    """JSON 序列化器

    带有 ``to_dict()`` 的模型按字典写入，读回的是字典，
    由上层（OAuth2Store）负责用 ``from_dict()`` 还原。
    """

    def dumps(self, value: Any) -> str:
        if hasattr(value, "to_dict"):
            value = value.to_dict()
        return json.dumps(value, default=str, ensure_ascii=False)

    def loads(self, data: Any) -> Any:
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return json.loads(data)


# 默认序列化器实例（全局复用，无状态）
default_serializer = PickleSerializer()
