"""OAuth2 记录持久化

负责各类记录及其索引的读写，键由 OAuth2KeyBuilder 生成。
读取时已过期的记录视为不存在；以字典形式读回的记录（JSON 序列化）
会还原为对应的模型。
"""

from typing import Any, Optional, Type, TypeVar

from yoauth2.log import get_logger
from yoauth2.storage import TokenStorage
from .keys import OAuth2KeyBuilder
from .models import (
    CodeModel,
    AccessTokenModel,
    RefreshTokenModel,
    ClientTokenModel,
)

logger = get_logger()

M = TypeVar("M")


class OAuth2Store:
    """OAuth2 记录存储

    每种记录有一个主键（按令牌值）和一个索引键（按 client_id、login_id），
    索引中保存的是令牌值。

    使用示例:
        store = OAuth2Store(MemoryTokenStorage(), OAuth2KeyBuilder("myapp"))
        store.save_access_token(at)
        store.save_access_token_index(at)
        store.get_access_token_value("app", 10001)  # -> at.access_token
    """

    def __init__(self, storage: TokenStorage, keys: OAuth2KeyBuilder):
        self.storage = storage
        self.keys = keys

    def _load(self, key: str, model_cls: Type[M]) -> Optional[M]:
        data = self.storage.get_object(key)
        return self._restore(key, data, model_cls)

    def _restore(self, key: str, data: Any, model_cls: Type[M]) -> Optional[M]:
        if data is None:
            return None
        if isinstance(data, dict):
            data = model_cls.from_dict(data)
        if data.is_expired():
            logger.debug(f"Expired record ignored: {key}")
            return None
        return data

    # ---------- 授权码 ----------

    def save_code(self, cm: CodeModel) -> None:
        self.storage.set_object(self.keys.code(cm.code), cm, cm.storage_ttl())

    def save_code_index(self, cm: CodeModel) -> None:
        self.storage.set(self.keys.code_index(cm.client_id, cm.login_id), cm.code, cm.storage_ttl())

    def get_code(self, code: Optional[str]) -> Optional[CodeModel]:
        if not code:
            return None
        return self._load(self.keys.code(code), CodeModel)

    def get_code_value(self, client_id: str, login_id: Any) -> Optional[str]:
        return self.storage.get(self.keys.code_index(client_id, login_id))

    def delete_code(self, code: Optional[str]) -> None:
        if code:
            self.storage.delete_object(self.keys.code(code))

    def delete_code_index(self, client_id: str, login_id: Any) -> None:
        self.storage.delete(self.keys.code_index(client_id, login_id))

    def consume_code(self, code: Optional[str]) -> Optional[CodeModel]:
        """取出并删除授权码，并发调用时只有一个调用方能拿到记录"""
        if not code:
            return None
        key = self.keys.code(code)
        return self._restore(key, self.storage.pop_object(key), CodeModel)

    # ---------- Access-Token ----------

    def save_access_token(self, at: AccessTokenModel) -> None:
        self.storage.set_object(self.keys.access_token(at.access_token), at, at.storage_ttl())

    def save_access_token_index(self, at: AccessTokenModel) -> None:
        self.storage.set(
            self.keys.access_token_index(at.client_id, at.login_id), at.access_token, at.storage_ttl()
        )

    def get_access_token(self, access_token: Optional[str]) -> Optional[AccessTokenModel]:
        if not access_token:
            return None
        return self._load(self.keys.access_token(access_token), AccessTokenModel)

    def get_access_token_value(self, client_id: str, login_id: Any) -> Optional[str]:
        return self.storage.get(self.keys.access_token_index(client_id, login_id))

    def delete_access_token(self, access_token: Optional[str]) -> None:
        if access_token:
            self.storage.delete_object(self.keys.access_token(access_token))

    def delete_access_token_index(self, client_id: str, login_id: Any) -> None:
        self.storage.delete(self.keys.access_token_index(client_id, login_id))

    # ---------- Refresh-Token ----------

    def save_refresh_token(self, rt: RefreshTokenModel) -> None:
        self.storage.set_object(self.keys.refresh_token(rt.refresh_token), rt, rt.storage_ttl())

    def save_refresh_token_index(self, rt: RefreshTokenModel) -> None:
        self.storage.set(
            self.keys.refresh_token_index(rt.client_id, rt.login_id), rt.refresh_token, rt.storage_ttl()
        )

    def get_refresh_token(self, refresh_token: Optional[str]) -> Optional[RefreshTokenModel]:
        if not refresh_token:
            return None
        return self._load(self.keys.refresh_token(refresh_token), RefreshTokenModel)

    def get_refresh_token_value(self, client_id: str, login_id: Any) -> Optional[str]:
        return self.storage.get(self.keys.refresh_token_index(client_id, login_id))

    def delete_refresh_token(self, refresh_token: Optional[str]) -> None:
        if refresh_token:
            self.storage.delete_object(self.keys.refresh_token(refresh_token))

    def delete_refresh_token_index(self, client_id: str, login_id: Any) -> None:
        self.storage.delete(self.keys.refresh_token_index(client_id, login_id))

    # ---------- Client-Token ----------

    def save_client_token(self, ct: ClientTokenModel) -> None:
        self.storage.set_object(self.keys.client_token(ct.client_token), ct, ct.storage_ttl())

    def save_client_token_index(self, ct: ClientTokenModel) -> None:
        self.storage.set(self.keys.client_token_index(ct.client_id), ct.client_token, ct.storage_ttl())

    def get_client_token(self, client_token: Optional[str]) -> Optional[ClientTokenModel]:
        if not client_token:
            return None
        return self._load(self.keys.client_token(client_token), ClientTokenModel)

    def get_client_token_value(self, client_id: str) -> Optional[str]:
        return self.storage.get(self.keys.client_token_index(client_id))

    def delete_client_token(self, client_token: Optional[str]) -> None:
        if client_token:
            self.storage.delete_object(self.keys.client_token(client_token))

    def delete_client_token_index(self, client_id: str) -> None:
        self.storage.delete(self.keys.client_token_index(client_id))

    def save_past_client_token_index(self, ct: ClientTokenModel, ttl: int) -> None:
        self.storage.set(self.keys.past_client_token_index(ct.client_id), ct.client_token, ttl)

    def get_past_client_token_value(self, client_id: str) -> Optional[str]:
        return self.storage.get(self.keys.past_client_token_index(client_id))

    def delete_past_client_token_index(self, client_id: str) -> None:
        self.storage.delete(self.keys.past_client_token_index(client_id))

    # ---------- 授权范围 ----------

    def save_grant_scope(self, client_id: str, login_id: Any, scope: str, ttl: int) -> None:
        self.storage.set(self.keys.grant_scope(client_id, login_id), scope, ttl)

    def get_grant_scope(self, client_id: str, login_id: Any) -> Optional[str]:
        return self.storage.get(self.keys.grant_scope(client_id, login_id))

    def delete_grant_scope(self, client_id: str, login_id: Any) -> None:
        self.storage.delete(self.keys.grant_scope(client_id, login_id))
