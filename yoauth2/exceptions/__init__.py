"""异常模块

提供业务异常基类与 OAuth2 错误类型。

使用示例:
    from yoauth2.exceptions import OAuth2Exception, OAuth2Error

    try:
        manager.generate_access_token(code)
    except OAuth2Exception as e:
        return e.to_oauth2_response()
"""

from .exceptions import (
    ErrorCode,
    ErrorCodeType,
    BusinessException,
    OAuth2Error,
    OAuth2ErrorCode,
    OAuth2Exception,
    StorageException,
)

__all__ = [
    "ErrorCode",
    "ErrorCodeType",
    "BusinessException",
    "OAuth2Error",
    "OAuth2ErrorCode",
    "OAuth2Exception",
    "StorageException",
]
