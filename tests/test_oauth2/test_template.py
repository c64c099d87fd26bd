"""OAuth2 令牌生命周期测试"""

import hashlib
import logging

import pytest

from yoauth2.exceptions import OAuth2Error, OAuth2ErrorCode, OAuth2Exception
from yoauth2.oauth2 import MappingRequest, RequestAuthModel


class TestGenerateRequestAuth:
    """构建授权请求测试"""

    def test_required_and_optional_params(self, template):
        request = MappingRequest({
            "client_id": "app",
            "response_type": "code",
            "redirect_uri": "https://app.example.com/callback",
        })
        ra = template.generate_request_auth(request, 10001)

        assert ra.client_id == "app"
        assert ra.login_id == 10001
        assert ra.response_type == "code"
        assert ra.scope == ""
        assert ra.state is None

    def test_missing_param(self, template):
        """测试缺少必填参数"""
        request = MappingRequest({"client_id": "app", "response_type": "code"})
        with pytest.raises(OAuth2Exception) as exc_info:
            template.generate_request_auth(request, 10001)

        assert exc_info.value.error == OAuth2Error.MISSING_PARAMETER
        assert exc_info.value.error_code == OAuth2ErrorCode.CODE_30101


class TestCode:
    """授权码测试"""

    def test_generate_code(self, template, store, request_auth):
        cm = template.generate_code(request_auth)

        assert len(cm.code) == 60
        assert cm.redirect_uri == request_auth.redirect_uri
        assert 299 <= cm.expires_in() <= 300
        assert store.get_code(cm.code) == cm
        assert store.get_code_value("app", 10001) == cm.code

    def test_new_code_replaces_old(self, template, store, request_auth):
        """测试同一用户再次申请授权码时旧授权码失效"""
        first = template.generate_code(request_auth)
        second = template.generate_code(request_auth)

        assert store.get_code(first.code) is None
        assert store.get_code(second.code) == second
        assert store.get_code_value("app", 10001) == second.code

    def test_code_expires(self, template, store, clock, request_auth):
        cm = template.generate_code(request_auth)
        clock.advance(301)
        assert store.get_code(cm.code) is None

    def test_unknown_client(self, template):
        ra = RequestAuthModel(client_id="nobody", login_id=1)
        with pytest.raises(OAuth2Exception) as exc_info:
            template.generate_code(ra)
        assert exc_info.value.error == OAuth2Error.UNKNOWN_CLIENT


class TestExchangeCode:
    """用授权码换取 token 测试"""

    def test_exchange(self, template, store, request_auth):
        """测试换取的 Access-Token 关联到对应的 Refresh-Token"""
        cm = template.generate_code(request_auth)
        at = template.generate_access_token(cm.code)

        assert at.client_id == "app"
        assert at.login_id == 10001
        assert at.scope == "userinfo"
        assert 7199 <= at.expires_in() <= 7200

        rt = store.get_refresh_token(at.refresh_token)
        assert rt is not None
        assert (rt.client_id, rt.login_id, rt.scope, rt.openid) == (at.client_id, at.login_id, at.scope, at.openid)
        assert at.refresh_expires_at == rt.expires_at

        assert store.get_access_token(at.access_token) == at
        assert store.get_access_token_value("app", 10001) == at.access_token
        assert store.get_refresh_token_value("app", 10001) == rt.refresh_token

        # 授权码已被消费
        assert store.get_code(cm.code) is None
        assert store.get_code_value("app", 10001) is None

    def test_default_openid(self, template, request_auth):
        """测试默认 openid 为 md5(前缀_client_id_login_id)"""
        at = template.generate_access_token(template.generate_code(request_auth).code)
        expected = hashlib.md5(b"openid_default_digest_prefix_app_10001").hexdigest()
        assert at.openid == expected

    def test_code_is_single_use(self, template, request_auth):
        """测试同一授权码不能兑换两次"""
        cm = template.generate_code(request_auth)
        template.generate_access_token(cm.code)

        with pytest.raises(OAuth2Exception) as exc_info:
            template.generate_access_token(cm.code)
        assert exc_info.value.error == OAuth2Error.INVALID_CODE
        assert exc_info.value.error_code == OAuth2ErrorCode.CODE_30110

    def test_exchange_replaces_old_tokens(self, template, store, request_auth):
        """测试再次换取时旧 token 失效"""
        first = template.generate_access_token(template.generate_code(request_auth).code)
        second = template.generate_access_token(template.generate_code(request_auth).code)

        assert store.get_access_token(first.access_token) is None
        assert store.get_refresh_token(first.refresh_token) is None
        assert store.get_access_token(second.access_token) == second

    def test_exchange_keeps_newer_code_index(self, template, store, request_auth):
        """测试兑换旧授权码时不删除指向新授权码的索引"""
        first = template.generate_code(request_auth)
        second = template.generate_code(request_auth)
        # 直接写回旧授权码，模拟两个授权码同时存在
        store.save_code(first)

        template.generate_access_token(first.code)
        assert store.get_code_value("app", 10001) == second.code


class TestRefresh:
    """刷新 Access-Token 测试"""

    def test_refresh_keeps_refresh_token(self, template, store, request_auth):
        """测试默认沿用原 Refresh-Token"""
        old_at = template.generate_access_token(template.generate_code(request_auth).code)
        new_at = template.refresh_access_token(old_at.refresh_token)

        assert new_at.access_token != old_at.access_token
        assert new_at.refresh_token == old_at.refresh_token
        assert store.get_access_token(old_at.access_token) is None
        assert store.get_access_token(new_at.access_token) == new_at
        assert store.get_access_token_value("app", 10001) == new_at.access_token
        assert store.get_refresh_token(old_at.refresh_token) is not None

    def test_refresh_rotates_refresh_token(self, template, store):
        """测试 is_new_refresh 时换发新的 Refresh-Token"""
        ra = RequestAuthModel(client_id="app2", login_id=7, scope="userinfo")
        old_at = template.generate_access_token(template.generate_code(ra).code)
        new_at = template.refresh_access_token(old_at.refresh_token)

        assert new_at.refresh_token != old_at.refresh_token
        assert store.get_refresh_token(old_at.refresh_token) is None
        assert store.get_refresh_token(new_at.refresh_token) is not None
        assert store.get_refresh_token_value("app2", 7) == new_at.refresh_token

    def test_invalid_refresh_token(self, template):
        with pytest.raises(OAuth2Exception) as exc_info:
            template.refresh_access_token("nope")
        assert exc_info.value.error == OAuth2Error.INVALID_REFRESH_TOKEN
        assert exc_info.value.error_code == OAuth2ErrorCode.CODE_30111


class TestDirectIssue:
    """隐藏式、密码式直接生成 token 测试"""

    def test_implicit(self, template, store, request_auth):
        at = template.generate_access_token_by_request(request_auth)

        assert at.refresh_token is None
        assert store.get_access_token(at.access_token) == at
        assert store.get_refresh_token_value("app", 10001) is None

    def test_password_with_refresh_token(self, template, store, request_auth):
        at = template.generate_access_token_by_request(request_auth, create_refresh=True)

        rt = store.get_refresh_token(at.refresh_token)
        assert rt is not None
        assert rt.login_id == 10001
        assert store.get_refresh_token_value("app", 10001) == rt.refresh_token

    def test_reissue_deletes_old(self, template, store, request_auth):
        first = template.generate_access_token_by_request(request_auth, create_refresh=True)
        second = template.generate_access_token_by_request(request_auth, create_refresh=True)

        assert store.get_access_token(first.access_token) is None
        assert store.get_refresh_token(first.refresh_token) is None
        assert store.get_access_token(second.access_token) == second


class TestClientToken:
    """Client-Token 测试"""

    def test_generate(self, template, store):
        ct = template.generate_client_token("app", "userinfo")

        assert ct.scope == "userinfo"
        assert store.get_client_token(ct.client_token) == ct
        assert store.get_client_token_value("app") == ct.client_token
        assert store.get_past_client_token_value("app") is None

    def test_old_token_becomes_past_token(self, template, store):
        """测试旧 Client-Token 降级为 Past-Token 后仍然有效"""
        first = template.generate_client_token("app", "userinfo")
        second = template.generate_client_token("app", "userinfo")

        assert store.get_client_token_value("app") == second.client_token
        assert store.get_past_client_token_value("app") == first.client_token
        assert store.get_client_token(first.client_token) == first

    def test_past_token_history_depth_is_one(self, template, store):
        """测试更早的 Past-Token 被删除"""
        first = template.generate_client_token("app")
        second = template.generate_client_token("app")
        third = template.generate_client_token("app")

        assert store.get_client_token(first.client_token) is None
        assert store.get_past_client_token_value("app") == second.client_token
        assert store.get_client_token(third.client_token) is not None

    def test_past_token_timeout(self, template, store, data_loader, clock, oauth2_settings):
        """测试配置了保留期时，Past-Token 在保留期后失效"""
        data_loader.register_client(oauth2_settings.new_client("svc", client_secret="s", past_client_token_timeout=60))
        first = template.generate_client_token("svc")
        template.generate_client_token("svc")

        past = store.get_client_token(first.client_token)
        assert 59 <= past.expires_in() <= 60

        clock.advance(61)
        assert store.get_client_token(first.client_token) is None
        assert store.get_past_client_token_value("svc") is None

    def test_past_token_keeps_original_ttl(self, template, store, clock):
        """测试未配置保留期时沿用原有效期"""
        first = template.generate_client_token("app")
        template.generate_client_token("app")

        clock.advance(7000)
        assert store.get_client_token(first.client_token) is not None
        clock.advance(201)
        assert store.get_client_token(first.client_token) is None


class TestRevoke:
    """回收 Access-Token 测试"""

    def test_revoke_unknown_is_noop(self, template, storage, request_auth):
        template.generate_code(request_auth)
        size = len(storage)

        template.revoke_access_token("unknown")
        assert len(storage) == size

    def test_revoke(self, template, store, request_auth):
        """测试回收后 Access-Token、Refresh-Token 及其索引全部删除"""
        at = template.generate_access_token(template.generate_code(request_auth).code)
        template.revoke_access_token(at.access_token)

        assert store.get_access_token(at.access_token) is None
        assert store.get_access_token_value("app", 10001) is None
        assert store.get_refresh_token(at.refresh_token) is None
        assert store.get_refresh_token_value("app", 10001) is None

        # 重复回收不报错
        template.revoke_access_token(at.access_token)

    def test_get_login_id_by_access_token(self, template, request_auth):
        at = template.generate_access_token_by_request(request_auth)
        assert template.get_login_id_by_access_token(at.access_token) == 10001

        with pytest.raises(OAuth2Exception) as exc_info:
            template.get_login_id_by_access_token("unknown")
        assert exc_info.value.error == OAuth2Error.INVALID_ACCESS_TOKEN


class TestGrantScope:
    """授权范围记录测试"""

    def test_save_and_delete(self, template):
        template.save_grant_scope("app", 10001, "userinfo,openid")
        assert template.get_grant_scope("app", 10001) == "userinfo,openid"

        template.delete_grant_scope("app", 10001)
        assert template.get_grant_scope("app", 10001) is None

    def test_empty_scope_not_saved(self, template):
        template.save_grant_scope("app", 10001, "")
        assert template.get_grant_scope("app", 10001) is None

    def test_grant_scope_ttl(self, template, clock):
        """测试有效期与 Access-Token 相同"""
        template.save_grant_scope("app", 10001, "userinfo")
        clock.advance(7200)
        assert template.get_grant_scope("app", 10001) is None


class TestRedirectUri:
    """重定向地址构建测试"""

    def test_build_redirect_uri(self, template):
        assert template.build_redirect_uri("https://a.com/cb", "X", "S") == "https://a.com/cb?code=X&state=S"
        assert template.build_redirect_uri("https://a.com/cb?x=1", "X", "S") == "https://a.com/cb?x=1&code=X&state=S"
        assert template.build_redirect_uri("https://a.com/cb", "X") == "https://a.com/cb?code=X"
        assert template.build_redirect_uri("https://a.com/cb", "X", "") == "https://a.com/cb?code=X"

    def test_build_implicit_redirect_uri(self, template):
        assert template.build_implicit_redirect_uri("https://a.com/cb", "T", "S") == "https://a.com/cb#token=T&state=S"
        assert template.build_implicit_redirect_uri("https://a.com/cb", "T") == "https://a.com/cb#token=T"


class TestLogging:
    """生命周期日志测试"""

    def test_tokens_are_masked(self, template, request_auth, caplog):
        caplog.set_level(logging.INFO, logger="yoauth2.oauth2.template")
        at = template.generate_access_token(template.generate_code(request_auth).code)

        assert "Access-Token issued by code" in caplog.text
        assert at.access_token not in caplog.text
        assert at.refresh_token not in caplog.text
        assert at.access_token[:4] + "****" + at.access_token[-4:] in caplog.text
