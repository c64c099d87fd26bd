"""字符串工具

scope、allow_url 等配置项以逗号（或空白）分隔的字符串存储，
此处提供与列表之间的转换。
"""

import re
from typing import Iterable, List, Optional

_LIST_SEPARATOR = re.compile(r"[,\s]+")


def is_empty(value: Optional[str]) -> bool:
    """判断字符串是否为 None 或空串"""
    return value is None or value == ""


def convert_string_to_list(value: Optional[str]) -> List[str]:
    """将逗号/空白分隔的字符串转换为列表，忽略空项

    使用示例:
        convert_string_to_list("userinfo, openid")  # -> ["userinfo", "openid"]
        convert_string_to_list("")                   # -> []
    """
    if is_empty(value):
        return []
    return [item for item in _LIST_SEPARATOR.split(value.strip()) if item]


def convert_list_to_string(values: Optional[Iterable[str]]) -> str:
    """将列表拼接为逗号分隔的字符串"""
    if not values:
        return ""
    return ",".join(values)
