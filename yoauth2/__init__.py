"""yoauth2 - OAuth2 授权服务核心

提供授权码、Access-Token、Refresh-Token、Client-Token 的生成、轮换、
回收与校验，存储可选内存或 Redis。

使用示例:
    from yoauth2 import OAuth2Manager, OAuth2Settings, InMemoryDataLoader, MemoryTokenStorage

    settings = OAuth2Settings(token_name="myapp")
    loader = InMemoryDataLoader([settings.new_client("app", client_secret="secret")])
    manager = OAuth2Manager(MemoryTokenStorage(), loader, settings)
"""

__version__ = "0.1.0"

from .config import AppSettings, OAuth2Settings, LoggingSettings, RedisSettings, load_yaml_config
from .exceptions import OAuth2Error, OAuth2ErrorCode, OAuth2Exception, StorageException
from .log import get_logger, setup_logger
from .storage import TokenStorage, MemoryTokenStorage, RedisTokenStorage
from .oauth2 import (
    OAuth2Manager,
    OAuth2Template,
    OAuth2Validator,
    OAuth2DataLoader,
    InMemoryDataLoader,
    MappingRequest,
    CheckResult,
    ClientModel,
    RequestAuthModel,
    CodeModel,
    AccessTokenModel,
    RefreshTokenModel,
    ClientTokenModel,
)

__all__ = [
    "__version__",
    "AppSettings",
    "OAuth2Settings",
    "LoggingSettings",
    "RedisSettings",
    "load_yaml_config",
    "OAuth2Error",
    "OAuth2ErrorCode",
    "OAuth2Exception",
    "StorageException",
    "get_logger",
    "setup_logger",
    "TokenStorage",
    "MemoryTokenStorage",
    "RedisTokenStorage",
    "OAuth2Manager",
    "OAuth2Template",
    "OAuth2Validator",
    "OAuth2DataLoader",
    "InMemoryDataLoader",
    "MappingRequest",
    "CheckResult",
    "ClientModel",
    "RequestAuthModel",
    "CodeModel",
    "AccessTokenModel",
    "RefreshTokenModel",
    "ClientTokenModel",
]
