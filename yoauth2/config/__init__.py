"""配置模块

提供配置管理功能：
- AppSettings: 应用基础配置，支持 YAML + 环境变量
- 子配置类: OAuth2Settings, LoggingSettings, RedisSettings
- ConfigLoader: YAML 配置加载器

快速开始:
    from yoauth2.config import AppSettings, load_yaml_config

    settings = load_yaml_config("config/settings.yaml", AppSettings)
    manager = OAuth2Manager(storage, data_loader, settings=settings.oauth2)

配置优先级: 环境变量 > YAML 文件 > 默认值
"""

from .settings import (
    AppSettings,
    OAuth2Settings,
    LoggingSettings,
    RedisSettings,
)

from .loader import (
    ConfigLoader,
    load_yaml_config,
)

__all__ = [
    "AppSettings",
    "OAuth2Settings",
    "LoggingSettings",
    "RedisSettings",
    "ConfigLoader",
    "load_yaml_config",
]
