"""异常测试"""

import pytest
from fastapi import status

from yoauth2.exceptions import (
    BusinessException,
    ErrorCode,
    OAuth2Error,
    OAuth2ErrorCode,
    OAuth2Exception,
    StorageException,
)


class TestOAuth2Error:
    """OAuth2Error 测试"""

    @pytest.mark.parametrize(
        "error, wire_error",
        [
            (OAuth2Error.UNKNOWN_CLIENT, "invalid_client"),
            (OAuth2Error.INVALID_CLIENT_SECRET, "invalid_client"),
            (OAuth2Error.INVALID_CODE, "invalid_grant"),
            (OAuth2Error.INVALID_ACCESS_TOKEN, "invalid_token"),
            (OAuth2Error.INSUFFICIENT_SCOPE, "insufficient_scope"),
            (OAuth2Error.SCOPE_NOT_CONTRACTED, "invalid_scope"),
            (OAuth2Error.REDIRECT_NOT_ALLOWED, "invalid_request"),
            (OAuth2Error.UNAUTHORIZED_GRANT_TYPE, "unauthorized_client"),
        ],
    )
    def test_wire_error(self, error, wire_error):
        assert error.wire_error == wire_error

    def test_every_kind_has_wire_error(self):
        for error in OAuth2Error:
            assert error.wire_error

    def test_status_code(self):
        assert OAuth2Error.INVALID_ACCESS_TOKEN.status_code == status.HTTP_401_UNAUTHORIZED
        assert OAuth2Error.INSUFFICIENT_SCOPE.status_code == status.HTTP_403_FORBIDDEN
        assert OAuth2Error.INVALID_CODE.status_code == status.HTTP_400_BAD_REQUEST


class TestOAuth2Exception:
    """OAuth2Exception 测试"""

    def test_attributes(self):
        exc = OAuth2Exception(
            "无效 code",
            error=OAuth2Error.INVALID_CODE,
            error_code=OAuth2ErrorCode.CODE_30110,
        )
        assert isinstance(exc, BusinessException)
        assert exc.message == "无效 code"
        assert exc.code == ErrorCode.OAUTH2_ERROR
        assert exc.status_code == status.HTTP_400_BAD_REQUEST
        assert str(exc) == "无效 code"

    def test_to_oauth2_response(self):
        exc = OAuth2Exception(
            "无效 access_token",
            error=OAuth2Error.INVALID_ACCESS_TOKEN,
            error_code=OAuth2ErrorCode.CODE_30106,
        )
        assert exc.to_oauth2_response() == {
            "error": "invalid_token",
            "error_description": "无效 access_token",
            "code": 30106,
        }

    def test_to_dict(self):
        exc = OAuth2Exception(
            "缺少参数: state",
            error=OAuth2Error.MISSING_PARAMETER,
            error_code=OAuth2ErrorCode.CODE_30101,
            param="state",
        )
        data = exc.to_dict()
        assert data["error"] == "missing_parameter"
        assert data["error_code"] == 30101
        assert data["extra"] == {"param": "state"}

    def test_repr(self):
        exc = OAuth2Exception("x", error=OAuth2Error.INVALID_CODE, error_code=30110)
        assert "invalid_code" in repr(exc)
        assert "30110" in repr(exc)


class TestStorageException:
    """StorageException 测试"""

    def test_defaults(self):
        exc = StorageException(details=["connection refused"])
        assert exc.code == ErrorCode.STORAGE_ERROR
        assert exc.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert exc.to_dict()["details"] == ["connection refused"]
