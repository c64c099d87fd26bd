"""OAuth2 记录存储测试"""

from datetime import datetime, timezone, timedelta

from yoauth2.oauth2 import AccessTokenModel, CodeModel, OAuth2KeyBuilder, OAuth2Store
from yoauth2.storage import JsonSerializer, RedisTokenStorage

from tests.helpers import FakeRedis


def _at(expires_in: float = 3600) -> AccessTokenModel:
    return AccessTokenModel(
        access_token="T",
        client_id="app",
        login_id=10001,
        scope="userinfo",
        openid="oid",
        expires_at=datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    )


class TestOAuth2Store:
    """OAuth2Store 测试"""

    def test_record_and_index(self, store):
        """测试记录按值保存，索引按 client_id 与 login_id 保存"""
        at = _at()
        store.save_access_token(at)
        store.save_access_token_index(at)

        assert store.get_access_token("T") == at
        assert store.get_access_token_value("app", 10001) == "T"

        store.delete_access_token("T")
        store.delete_access_token_index("app", 10001)
        assert store.get_access_token("T") is None
        assert store.get_access_token_value("app", 10001) is None

    def test_empty_value_lookups(self, store):
        """测试空值查询直接返回 None"""
        assert store.get_code(None) is None
        assert store.get_access_token("") is None
        assert store.consume_code(None) is None
        store.delete_refresh_token(None)

    def test_storage_ttl_follows_record(self, store, clock):
        """测试写入存储的 TTL 与记录的过期时间一致"""
        store.save_access_token(_at(expires_in=30))
        clock.advance(31)
        assert store.get_access_token("T") is None

    def test_expired_record_is_absent(self, store):
        """测试已过期但仍在存储中的记录视为不存在"""
        at = _at(expires_in=-10)
        store.storage.set_object(store.keys.access_token("T"), at, 0)
        assert store.get_access_token("T") is None

    def test_consume_code(self, store):
        """测试授权码只能取出一次"""
        cm = CodeModel(code="X", client_id="app", login_id=1)
        store.save_code(cm)

        assert store.consume_code("X") == cm
        assert store.consume_code("X") is None

    def test_grant_scope(self, store):
        store.save_grant_scope("app", 1, "userinfo,openid", 60)
        assert store.get_grant_scope("app", 1) == "userinfo,openid"
        store.delete_grant_scope("app", 1)
        assert store.get_grant_scope("app", 1) is None

    def test_json_records_are_rebuilt(self):
        """测试 JSON 序列化时读回的字典还原为模型"""
        redis = FakeRedis()
        store = OAuth2Store(
            RedisTokenStorage(redis, serializer=JsonSerializer()),
            OAuth2KeyBuilder("test"),
        )
        at = _at()
        store.save_access_token(at)

        assert isinstance(redis.store["test:oauth2:access-token:T"], bytes)
        loaded = store.get_access_token("T")
        assert isinstance(loaded, AccessTokenModel)
        assert loaded == at

        cm = CodeModel(code="X", client_id="app", login_id=1, scope="userinfo")
        store.save_code(cm)
        assert store.consume_code("X") == cm
