"""
配置模块
提供 OAuth2 核心的默认配置，业务项目可以继承并覆盖
"""

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Any


class OAuth2Settings(BaseSettings):
    """OAuth2 配置

    client 未单独配置的有效期与授权模式开关，取此处的默认值。

    使用示例:
        from yoauth2.config import OAuth2Settings

        oauth2_config = OAuth2Settings(
            token_name="myapp",
            access_token_timeout=3600,
            is_password=True,
        )

        client = oauth2_config.new_client(
            "app-1",
            client_secret="secret",
            contract_scope="userinfo,openid",
            allow_url="https://app.example.com/callback",
        )

    配置说明:
        - token_name: 存储键前缀，所有键形如 ``<token_name>:oauth2:<kind>:<...>``
        - past_client_token_timeout: 旧 Client-Token 被替换后的保留时间（秒），-1 表示沿用其原有效期
        - is_new_refresh: 刷新 Access-Token 时是否同时换发新的 Refresh-Token
    """
    token_name: str = Field(default="yoauth2", description="存储键前缀")
    code_timeout: int = Field(default=300, description="授权码有效期（秒）")
    access_token_timeout: int = Field(default=7200, description="Access-Token 有效期（秒）")
    refresh_token_timeout: int = Field(default=2592000, description="Refresh-Token 有效期（秒）")
    client_token_timeout: int = Field(default=7200, description="Client-Token 有效期（秒）")
    past_client_token_timeout: int = Field(default=-1, description="Past-Client-Token 有效期（秒），-1 表示沿用原有效期")

    is_code: bool = Field(default=True, description="是否开启授权码模式")
    is_implicit: bool = Field(default=False, description="是否开启隐藏式模式")
    is_password: bool = Field(default=False, description="是否开启密码式模式")
    is_client: bool = Field(default=False, description="是否开启凭证式模式")
    is_new_refresh: bool = Field(default=False, description="刷新时是否换发新的 Refresh-Token")

    token_length: int = Field(default=60, description="随机令牌长度")
    openid_digest_prefix: str = Field(default="openid_default_digest_prefix", description="默认 openid 摘要前缀")

    def new_client(self, client_id: str, **overrides: Any):
        """创建 ClientModel，未指定的字段取本配置的默认值

        Args:
            client_id: 应用 ID
            **overrides: ClientModel 的其他字段

        Returns:
            ClientModel
        """
        from ..oauth2.models import ClientModel

        values = {
            "is_code": self.is_code,
            "is_implicit": self.is_implicit,
            "is_password": self.is_password,
            "is_client": self.is_client,
            "is_new_refresh": self.is_new_refresh,
            "code_timeout": self.code_timeout,
            "access_token_timeout": self.access_token_timeout,
            "refresh_token_timeout": self.refresh_token_timeout,
            "client_token_timeout": self.client_token_timeout,
            "past_client_token_timeout": self.past_client_token_timeout,
        }
        values.update(overrides)
        return ClientModel(client_id=client_id, **values)

    class Config:
        env_prefix = "YOAUTH2_OAUTH2_"


class LoggingSettings(BaseSettings):
    """日志配置

    使用示例:
        from yoauth2.config import LoggingSettings

        log_config = LoggingSettings(level="DEBUG", file_path="logs/oauth2.log")
    """
    level: str = Field(default="INFO", description="日志级别")
    file_path: str = Field(default="", description="日志文件路径，为空则不写文件")
    enable_console: bool = Field(default=True, description="是否启用控制台输出")

    class Config:
        env_prefix = "YOAUTH2_LOG_"


class RedisSettings(BaseSettings):
    """Redis 配置

    使用示例:
        from yoauth2.config import RedisSettings

        redis_config = RedisSettings(url="redis://localhost:6379/0")
    """
    url: str = Field(default="", description="Redis连接URL")
    max_connections: int = Field(default=10, description="最大连接数")

    class Config:
        env_prefix = "YOAUTH2_REDIS_"


class AppSettings(BaseSettings):
    """应用基础配置

    将各子配置类聚合为嵌套结构，业务项目继承后只需添加项目特有的配置项。

    配置优先级（从高到低）:
        环境变量 > YAML 配置文件 > 代码中的默认值

    内置子配置及环境变量前缀:
        - oauth2:   OAuth2Settings   (YOAUTH2_OAUTH2_)
        - logging:  LoggingSettings  (YOAUTH2_LOG_)
        - redis:    RedisSettings    (YOAUTH2_REDIS_)

    YAML 配置示例 (config/settings.yaml):
        oauth2:
          token_name: "myapp"
          access_token_timeout: 3600
          is_password: true
        logging:
          level: "INFO"
        redis:
          url: "redis://localhost:6379/0"
    """
    oauth2: OAuth2Settings = OAuth2Settings()
    logging: LoggingSettings = LoggingSettings()
    redis: RedisSettings = RedisSettings()
