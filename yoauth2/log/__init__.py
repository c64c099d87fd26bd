"""日志模块

提供日志配置与凭证遮盖：
- 日志记录器的创建与配置
- 敏感数据过滤（令牌、密钥只输出首尾字符）

使用示例:
    from yoauth2.log import get_logger, setup_logger, mask_token

    logger = setup_logger("yoauth2", level="DEBUG")
    logger.info("issued %s", mask_token(access_token))
"""

from .logger import (
    setup_logger,
    setup_logger_from_config,
    create_formatter,
    MicrosecondFormatter,
    DEFAULT_LOG_FORMAT,
    get_logger,
)

from .filter_hooks import (
    LogFilterHook,
    SensitiveDataFilterHook,
    LogFilterHookManager,
    log_filter_hook_manager,
    mask_token,
    DEFAULT_SENSITIVE_PATTERNS,
)

__all__ = [
    # 日志工具
    "setup_logger",
    "setup_logger_from_config",
    "create_formatter",
    "MicrosecondFormatter",
    "DEFAULT_LOG_FORMAT",
    "get_logger",

    # 日志过滤钩子
    "LogFilterHook",
    "SensitiveDataFilterHook",
    "LogFilterHookManager",
    "log_filter_hook_manager",
    "mask_token",
    "DEFAULT_SENSITIVE_PATTERNS",
]
