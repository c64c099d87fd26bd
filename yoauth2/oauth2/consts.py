"""OAuth2 协议词汇

参数名、response_type、grant_type 的字符串常量，由路由层使用。
"""

from enum import Enum


class Param:
    """请求参数名"""
    RESPONSE_TYPE = "response_type"
    CLIENT_ID = "client_id"
    CLIENT_SECRET = "client_secret"
    REDIRECT_URI = "redirect_uri"
    SCOPE = "scope"
    STATE = "state"
    CODE = "code"
    TOKEN = "token"
    ACCESS_TOKEN = "access_token"
    REFRESH_TOKEN = "refresh_token"
    GRANT_TYPE = "grant_type"
    USERNAME = "username"
    PASSWORD = "password"


class ResponseType(str, Enum):
    """授权请求的 response_type"""
    CODE = "code"
    TOKEN = "token"


class GrantType(str, Enum):
    """授权类型"""
    AUTHORIZATION_CODE = "authorization_code"
    REFRESH_TOKEN = "refresh_token"
    PASSWORD = "password"
    CLIENT_CREDENTIALS = "client_credentials"
    IMPLICIT = "implicit"
