"""通用工具函数"""

from .strings import is_empty, convert_string_to_list, convert_list_to_string
from .urls import is_url, strip_query, join_param, join_sharp_param

__all__ = [
    "is_empty",
    "convert_string_to_list",
    "convert_list_to_string",
    "is_url",
    "strip_query",
    "join_param",
    "join_sharp_param",
]
