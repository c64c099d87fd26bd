"""OAuth2 模块

授权码、Access-Token、Refresh-Token、Client-Token 的生成、轮换、回收与校验。

使用示例:
    from yoauth2.oauth2 import OAuth2Manager, InMemoryDataLoader, MappingRequest
    from yoauth2.storage import MemoryTokenStorage

    manager = OAuth2Manager(MemoryTokenStorage(), InMemoryDataLoader())
"""

from .consts import Param, ResponseType, GrantType
from .models import (
    LoginId,
    ClientModel,
    RequestAuthModel,
    CodeModel,
    AccessTokenModel,
    RefreshTokenModel,
    ClientTokenModel,
)
from .keys import OAuth2KeyBuilder
from .generators import TokenGenerator, random_string
from .data_loader import OAuth2DataLoader, InMemoryDataLoader
from .request import OAuth2Request, MappingRequest
from .results import CheckResult
from .store import OAuth2Store
from .validator import (
    OAuth2Validator,
    UrlMatcher,
    exact_url_matcher,
    wildcard_url_matcher,
    is_granted,
    require_scopes,
)
from .template import OAuth2Template
from .manager import OAuth2Manager

__all__ = [
    # 协议词汇
    "Param",
    "ResponseType",
    "GrantType",
    # 模型
    "LoginId",
    "ClientModel",
    "RequestAuthModel",
    "CodeModel",
    "AccessTokenModel",
    "RefreshTokenModel",
    "ClientTokenModel",
    # 基础组件
    "OAuth2KeyBuilder",
    "TokenGenerator",
    "random_string",
    "OAuth2DataLoader",
    "InMemoryDataLoader",
    "OAuth2Request",
    "MappingRequest",
    "CheckResult",
    "OAuth2Store",
    # 校验
    "OAuth2Validator",
    "UrlMatcher",
    "exact_url_matcher",
    "wildcard_url_matcher",
    "is_granted",
    "require_scopes",
    # 生命周期
    "OAuth2Template",
    "OAuth2Manager",
]
