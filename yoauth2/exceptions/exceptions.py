"""业务异常类定义

定义框架使用的业务异常类体系，以及 OAuth2 模块的错误类型与错误码。
"""

import copy
from typing import Optional, List, Any, Dict, Union
from fastapi import status
from enum import Enum


class ErrorCode(str, Enum):
    """通用错误代码枚举

    继承自 str，可以直接作为字符串使用。
    """

    BUSINESS_ERROR = "BUSINESS_ERROR"
    INVALID_PARAMETER = "INVALID_PARAMETER"
    OAUTH2_ERROR = "OAUTH2_ERROR"
    STORAGE_ERROR = "STORAGE_ERROR"


# 类型别名，支持枚举和字符串
ErrorCodeType = Union[str, ErrorCode]


class BusinessException(Exception):
    """业务异常基类

    所有业务异常都应该继承此类。

    属性:
        message: 错误消息（面向用户）
        code: 错误代码（用于程序判断，支持 ErrorCode 枚举或字符串）
        status_code: HTTP 状态码
        details: 详细错误信息列表
        extra: 额外的上下文信息
    """

    def __init__(
        self,
        message: str,
        code: ErrorCodeType = ErrorCode.BUSINESS_ERROR,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: Optional[List[str]] = None,
        **extra: Any
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or []
        self.extra = extra
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        return {
            "message": self.message,
            "code": self.code,
            "status_code": self.status_code,
            # 返回深拷贝，避免调用方修改返回值反向污染异常对象内部状态
            "details": copy.deepcopy(self.details),
            "extra": copy.deepcopy(self.extra)
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"status_code={self.status_code})"
        )


class OAuth2Error(str, Enum):
    """OAuth2 错误类型

    每种类型一一对应协议层的错误（见 ``wire_error``），
    HTTP 层据此映射响应，核心层只负责给出类型。

    使用示例:
        if exc.error == OAuth2Error.INVALID_CODE:
            ...
    """

    UNKNOWN_CLIENT = "unknown_client"
    INVALID_CLIENT_SECRET = "invalid_client_secret"
    INVALID_CODE = "invalid_code"
    INVALID_ACCESS_TOKEN = "invalid_access_token"
    INVALID_REFRESH_TOKEN = "invalid_refresh_token"
    INVALID_CLIENT_TOKEN = "invalid_client_token"
    INSUFFICIENT_SCOPE = "insufficient_scope"
    SCOPE_NOT_CONTRACTED = "scope_not_contracted"
    MALFORMED_URL = "malformed_url"
    REDIRECT_NOT_ALLOWED = "redirect_not_allowed"
    CLIENT_ID_MISMATCH = "client_id_mismatch"
    REDIRECT_URI_MISMATCH = "redirect_uri_mismatch"
    MISSING_PARAMETER = "missing_parameter"
    UNAUTHORIZED_GRANT_TYPE = "unauthorized_grant_type"

    @property
    def wire_error(self) -> str:
        """RFC 6749 / RFC 6750 中的 error 取值"""
        return _WIRE_ERRORS[self]

    @property
    def status_code(self) -> int:
        """建议的 HTTP 状态码"""
        return _STATUS_CODES.get(self, status.HTTP_400_BAD_REQUEST)


_WIRE_ERRORS = {
    OAuth2Error.UNKNOWN_CLIENT: "invalid_client",
    OAuth2Error.INVALID_CLIENT_SECRET: "invalid_client",
    OAuth2Error.INVALID_CODE: "invalid_grant",
    OAuth2Error.INVALID_ACCESS_TOKEN: "invalid_token",
    OAuth2Error.INVALID_REFRESH_TOKEN: "invalid_grant",
    OAuth2Error.INVALID_CLIENT_TOKEN: "invalid_token",
    OAuth2Error.INSUFFICIENT_SCOPE: "insufficient_scope",
    OAuth2Error.SCOPE_NOT_CONTRACTED: "invalid_scope",
    OAuth2Error.MALFORMED_URL: "invalid_request",
    OAuth2Error.REDIRECT_NOT_ALLOWED: "invalid_request",
    OAuth2Error.CLIENT_ID_MISMATCH: "invalid_grant",
    OAuth2Error.REDIRECT_URI_MISMATCH: "invalid_grant",
    OAuth2Error.MISSING_PARAMETER: "invalid_request",
    OAuth2Error.UNAUTHORIZED_GRANT_TYPE: "unauthorized_client",
}

_STATUS_CODES = {
    OAuth2Error.UNKNOWN_CLIENT: status.HTTP_401_UNAUTHORIZED,
    OAuth2Error.INVALID_CLIENT_SECRET: status.HTTP_401_UNAUTHORIZED,
    OAuth2Error.INVALID_ACCESS_TOKEN: status.HTTP_401_UNAUTHORIZED,
    OAuth2Error.INVALID_CLIENT_TOKEN: status.HTTP_401_UNAUTHORIZED,
    OAuth2Error.INSUFFICIENT_SCOPE: status.HTTP_403_FORBIDDEN,
}


class OAuth2ErrorCode:
    """OAuth2 数值错误码

    每个校验点各有一个错误码，便于定位是哪一步校验失败。
    """

    # 缺少必填参数
    CODE_30101 = 30101
    # client 未开启该授权模式
    CODE_30102 = 30102
    # 无效 client_id
    CODE_30105 = 30105
    # 无效 access_token
    CODE_30106 = 30106
    # 无效 client_token
    CODE_30107 = 30107
    # access_token 不具备指定 scope
    CODE_30108 = 30108
    # client_token 不具备指定 scope
    CODE_30109 = 30109
    # 无效 code
    CODE_30110 = 30110
    # 无效 refresh_token
    CODE_30111 = 30111
    # 请求的 scope 暂未签约
    CODE_30112 = 30112
    # 无效 redirect_url
    CODE_30113 = 30113
    # 非法 redirect_url
    CODE_30114 = 30114
    # 无效 client_secret
    CODE_30115 = 30115
    # 请求的 scope 暂未签约（校验 client_secret 时）
    CODE_30116 = 30116
    # 无效 code（用 code 换 token 时）
    CODE_30117 = 30117
    # client_id 与 code 不匹配
    CODE_30118 = 30118
    # 无效 client_secret（用 code 换 token 时）
    CODE_30119 = 30119
    # redirect_uri 与申请 code 时不一致
    CODE_30120 = 30120
    # 无效 refresh_token（刷新时）
    CODE_30121 = 30121
    # client_id 与 refresh_token 不匹配
    CODE_30122 = 30122
    # 无效 client_secret（刷新时）
    CODE_30123 = 30123
    # client_id 与 access_token 不匹配
    CODE_30124 = 30124


class OAuth2Exception(BusinessException):
    """OAuth2 异常

    属性:
        error: 错误类型（OAuth2Error）
        error_code: 数值错误码（OAuth2ErrorCode）

    使用示例:
        raise OAuth2Exception(
            "无效 code",
            error=OAuth2Error.INVALID_CODE,
            error_code=OAuth2ErrorCode.CODE_30110,
        )
    """

    def __init__(
        self,
        message: str,
        error: OAuth2Error,
        error_code: Optional[int] = None,
        details: Optional[List[str]] = None,
        **extra: Any
    ):
        self.error = error
        self.error_code = error_code
        super().__init__(
            message=message,
            code=ErrorCode.OAUTH2_ERROR,
            status_code=error.status_code,
            details=details,
            **extra
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["error"] = self.error.value
        data["error_code"] = self.error_code
        return data

    def to_oauth2_response(self) -> Dict[str, Any]:
        """转换为 OAuth 2.0 标准错误响应格式"""
        return {
            "error": self.error.wire_error,
            "error_description": self.message,
            "code": self.error_code,
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error={self.error.value!r}, "
            f"error_code={self.error_code})"
        )


class StorageException(BusinessException):
    """存储异常

    存储后端读写失败时抛出，调用方应按“未认证”处理。
    """

    def __init__(
        self,
        message: str = "存储服务不可用",
        details: Optional[List[str]] = None,
        **extra: Any
    ):
        super().__init__(
            message=message,
            code=ErrorCode.STORAGE_ERROR,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            details=details,
            **extra
        )
