"""日志过滤钩子测试

测试凭证遮盖和钩子管理
"""

from typing import Any, Dict

import pytest

from yoauth2.log import (
    DEFAULT_SENSITIVE_PATTERNS,
    LogFilterHook,
    LogFilterHookManager,
    SensitiveDataFilterHook,
    log_filter_hook_manager,
    mask_token,
)


class TestMaskToken:
    """mask_token 测试"""

    def test_mask(self):
        assert mask_token("abcdefghijklmnop") == "abcd****mnop"

    def test_short_value(self):
        """测试过短的值全部遮盖"""
        assert mask_token("abcd") == "****"
        assert mask_token("") == ""

    def test_none(self):
        assert mask_token(None) is None

    def test_custom_keep(self):
        assert mask_token("abcdefghij", keep=2) == "ab****ij"


class TestSensitiveDataFilterHook:
    """SensitiveDataFilterHook 测试"""

    def test_masks_credentials(self):
        hook = SensitiveDataFilterHook()
        data = {
            "client_id": "app",
            "access_token": "abcdefghijklmnop",
            "client_secret": "secret-value-123",
            "code": "codevalue12345",
            "login_id": 10001,
        }
        result = hook.filter(data)

        assert result["client_id"] == "app"
        assert result["access_token"] == "abcd****mnop"
        assert result["client_secret"] == "secr****-123"
        assert result["code"] == "code****2345"
        assert result["login_id"] == 10001
        # 原始数据不被修改
        assert data["access_token"] == "abcdefghijklmnop"

    def test_nested(self):
        hook = SensitiveDataFilterHook()
        result = hook.filter({
            "token": {"refresh_token": "abcdefghijklmnop"},
            "items": [{"password": "p4ssw0rd-long"}, "plain"],
        })
        assert result["token"]["refresh_token"] == "abcd****mnop"
        assert result["items"][0]["password"] == "p4ss****long"
        assert result["items"][1] == "plain"

    def test_code_pattern_is_exact(self):
        """测试只有名为 code 的字段才被视为授权码"""
        hook = SensitiveDataFilterHook()
        assert hook.filter({"error_code": "30110"})["error_code"] == "30110"

    def test_custom_patterns(self):
        hook = SensitiveDataFilterHook(sensitive_patterns=[r".*openid.*"])
        result = hook.filter({"openid": "abcdefghijklmnop", "access_token": "abcdefghijklmnop"})
        assert result["openid"] == "abcd****mnop"
        assert result["access_token"] == "abcdefghijklmnop"

    def test_default_patterns(self):
        assert r".*token.*" in DEFAULT_SENSITIVE_PATTERNS


class TestLogFilterHookManager:
    """LogFilterHookManager 测试"""

    def test_abstract_hook(self):
        with pytest.raises(TypeError):
            LogFilterHook()

    def test_register_and_apply(self):
        class DropOpenidHook(LogFilterHook):
            def should_apply(self, log_data: Dict[str, Any]) -> bool:
                return "openid" in log_data

            def filter(self, log_data: Dict[str, Any]) -> Dict[str, Any]:
                result = log_data.copy()
                result.pop("openid")
                return result

        manager = LogFilterHookManager()
        hook = DropOpenidHook()
        manager.register_hook(hook)

        assert manager.apply_filters({"openid": "x", "a": 1}) == {"a": 1}
        assert manager.apply_filters({"a": 1}) == {"a": 1}

        manager.unregister_hook(hook)
        assert manager.get_hooks() == []
        assert manager.apply_filters({"openid": "x"}) == {"openid": "x"}

    def test_clear_hooks(self):
        manager = LogFilterHookManager()
        manager.register_hook(SensitiveDataFilterHook())
        manager.clear_hooks()
        assert manager.get_hooks() == []

    def test_global_manager_masks_by_default(self):
        hooks = log_filter_hook_manager.get_hooks()
        assert any(isinstance(h, SensitiveDataFilterHook) for h in hooks)
        assert log_filter_hook_manager.apply_filters({"access_token": "abcdefghijklmnop"}) == {
            "access_token": "abcd****mnop"
        }
