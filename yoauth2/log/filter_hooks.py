"""日志过滤钩子模块

提供日志数据的过滤功能，用于：
- 遮盖令牌、密钥等凭证的值
- 自定义日志过滤规则

使用示例:
    from yoauth2.log import (
        log_filter_hook_manager,
        SensitiveDataFilterHook,
        LogFilterHook,
    )

    # 使用默认配置（已自动注册敏感数据过滤器）
    filtered_data = log_filter_hook_manager.apply_filters(log_data)

    # 自定义敏感字段模式
    custom_hook = SensitiveDataFilterHook(
        sensitive_patterns=[r'.*openid.*'],
    )
    log_filter_hook_manager.register_hook(custom_hook)
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional
import re

# 默认敏感字段名模式
DEFAULT_SENSITIVE_PATTERNS = [
    r'.*(password|pwd|passwd).*',
    r'.*token.*',
    r'.*secret.*',
    r'^code$',
]

# 遮盖时首尾各保留的字符数
MASK_KEEP_CHARS = 4


def mask_token(value: Optional[str], keep: int = MASK_KEEP_CHARS) -> Optional[str]:
    """遮盖凭证值，只保留首尾若干字符

    Args:
        value: 原始值
        keep: 首尾各保留的字符数

    Returns:
        遮盖后的字符串，如 ``abcd****wxyz``；过短的值全部遮盖

    使用示例:
        mask_token("abcdefghijklmnop")  # -> "abcd****mnop"
    """
    if value is None:
        return None
    value = str(value)
    if len(value) <= keep * 2:
        return "*" * len(value)
    return f"{value[:keep]}****{value[-keep:]}"


class LogFilterHook(ABC):
    """日志过滤钩子抽象基类

    继承此类可以自定义日志过滤逻辑。

    使用示例:
        class DropOpenidHook(LogFilterHook):
            def should_apply(self, log_data: Dict[str, Any]) -> bool:
                return "openid" in log_data

            def filter(self, log_data: Dict[str, Any]) -> Dict[str, Any]:
                filtered = log_data.copy()
                filtered.pop("openid")
                return filtered

        log_filter_hook_manager.register_hook(DropOpenidHook())
    """

    @abstractmethod
    def should_apply(self, log_data: Dict[str, Any]) -> bool:
        """判断是否应该应用此过滤器

        Args:
            log_data: 日志数据

        Returns:
            bool: 是否应该应用此过滤器
        """
        pass

    @abstractmethod
    def filter(self, log_data: Dict[str, Any]) -> Dict[str, Any]:
        """过滤日志数据

        Args:
            log_data: 日志数据

        Returns:
            Dict[str, Any]: 过滤后的日志数据
        """
        pass


class SensitiveDataFilterHook(LogFilterHook):
    """敏感数据过滤器

    根据字段名模式遮盖日志中的凭证值（access_token、refresh_token、
    client_secret、code 等），支持嵌套字典和列表的递归过滤。

    Args:
        sensitive_patterns: 敏感字段名模式列表（正则表达式）
    """

    def __init__(self, sensitive_patterns: List[str] = None):
        self.sensitive_patterns = sensitive_patterns if sensitive_patterns is not None else DEFAULT_SENSITIVE_PATTERNS

        # 编译正则表达式以提高性能
        self.compiled_patterns = [
            re.compile(pattern, re.IGNORECASE)
            for pattern in self.sensitive_patterns
        ]

    def should_apply(self, log_data: Dict[str, Any]) -> bool:
        return True

    def filter(self, log_data: Dict[str, Any]) -> Dict[str, Any]:
        return self._filter_sensitive_fields_in_dict(log_data)

    def _is_sensitive(self, key: str) -> bool:
        return any(pattern.search(key) for pattern in self.compiled_patterns)

    def _filter_sensitive_fields_in_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """在字典中过滤敏感字段，只遮盖敏感字段的值"""
        filtered_data = {}
        for key, value in data.items():
            if self._is_sensitive(str(key)) and isinstance(value, str):
                filtered_data[key] = mask_token(value)
            elif isinstance(value, dict):
                filtered_data[key] = self._filter_sensitive_fields_in_dict(value)
            elif isinstance(value, list):
                filtered_data[key] = self._filter_sensitive_fields_in_list(value)
            else:
                filtered_data[key] = value
        return filtered_data

    def _filter_sensitive_fields_in_list(self, data: List[Any]) -> List[Any]:
        """在列表中过滤敏感字段"""
        filtered_data = []
        for item in data:
            if isinstance(item, dict):
                filtered_data.append(self._filter_sensitive_fields_in_dict(item))
            elif isinstance(item, list):
                filtered_data.append(self._filter_sensitive_fields_in_list(item))
            else:
                filtered_data.append(item)
        return filtered_data


class LogFilterHookManager:
    """日志过滤钩子管理器

    管理所有已注册的日志过滤钩子。

    使用示例:
        from yoauth2.log import log_filter_hook_manager

        log_filter_hook_manager.register_hook(MyCustomHook())
        filtered_log = log_filter_hook_manager.apply_filters(raw_log_data)
        log_filter_hook_manager.unregister_hook(my_hook)
    """

    def __init__(self):
        self._hooks: List[LogFilterHook] = []

    def register_hook(self, hook: LogFilterHook):
        self._hooks.append(hook)

    def unregister_hook(self, hook: LogFilterHook):
        if hook in self._hooks:
            self._hooks.remove(hook)

    def clear_hooks(self):
        """清除所有已注册的钩子"""
        self._hooks.clear()

    def get_hooks(self) -> List[LogFilterHook]:
        """获取所有已注册的钩子"""
        return self._hooks.copy()

    def apply_filters(self, log_data: Dict[str, Any]) -> Dict[str, Any]:
        """应用所有已注册的过滤器

        Args:
            log_data: 原始日志数据

        Returns:
            Dict[str, Any]: 过滤后的日志数据
        """
        filtered_data = log_data.copy()
        for hook in self._hooks:
            if hook.should_apply(filtered_data):
                filtered_data = hook.filter(filtered_data)
        return filtered_data


# 创建全局实例
log_filter_hook_manager = LogFilterHookManager()

# 注册默认的敏感数据过滤器
log_filter_hook_manager.register_hook(SensitiveDataFilterHook())
