"""Client 数据加载

业务项目实现 ``OAuth2DataLoader``，告诉引擎有哪些 client 以及用户的 openid。
"""

import hashlib
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Optional

from .models import ClientModel

DEFAULT_OPENID_DIGEST_PREFIX = "openid_default_digest_prefix"


class OAuth2DataLoader(ABC):
    """Client 数据加载器

    使用示例:
        class DbDataLoader(OAuth2DataLoader):
            def get_client_model(self, client_id):
                row = OAuthApp.get_or_none(client_id=client_id)
                if row is None:
                    return None
                return settings.oauth2.new_client(
                    row.client_id,
                    client_secret=row.client_secret,
                    contract_scope=row.contract_scope,
                    allow_url=row.allow_url,
                )
    """

    openid_digest_prefix: Optional[str] = None

    def __init__(self, openid_digest_prefix: Optional[str] = None):
        # 为 None 时由 OAuth2Manager 按配置的 openid_digest_prefix 填入
        self.openid_digest_prefix = openid_digest_prefix

    @abstractmethod
    def get_client_model(self, client_id: str) -> Optional[ClientModel]:
        """根据 client_id 获取 client 配置，不存在返回 None"""
        pass

    def get_openid(self, client_id: str, login_id: Any) -> Optional[str]:
        """获取用户在某个 client 下的 openid

        默认为 md5(前缀_client_id_login_id)，同一用户在不同 client 下的 openid 不同。
        """
        prefix = self.openid_digest_prefix or DEFAULT_OPENID_DIGEST_PREFIX
        raw = f"{prefix}_{client_id}_{login_id}"
        return hashlib.md5(raw.encode("utf-8")).hexdigest()


class InMemoryDataLoader(OAuth2DataLoader):
    """内存 client 注册表

    适用于 client 固定写在配置中的场景和测试。

    使用示例:
        loader = InMemoryDataLoader()
        loader.register_client(ClientModel("app", client_secret="secret"))
    """

    def __init__(
        self,
        clients: Optional[Iterable[ClientModel]] = None,
        openid_digest_prefix: Optional[str] = None,
    ):
        super().__init__(openid_digest_prefix=openid_digest_prefix)
        self._clients: Dict[str, ClientModel] = {}
        self._lock = threading.Lock()
        for client in clients or []:
            self.register_client(client)

    def register_client(self, client: ClientModel) -> None:
        with self._lock:
            self._clients[client.client_id] = client

    def remove_client(self, client_id: str) -> bool:
        with self._lock:
            return self._clients.pop(client_id, None) is not None

    def get_client_model(self, client_id: str) -> Optional[ClientModel]:
        if client_id is None:
            return None
        return self._clients.get(client_id)
