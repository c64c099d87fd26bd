"""URL 工具

用于重定向地址的格式校验与参数拼接。参数值按原样拼接，不做编码。
"""

import re
from typing import Optional

_URL_PATTERN = re.compile(
    r"^(https?|ftp|file)://[-a-zA-Z0-9+&@#/%?=~_|!:,.;]*[-a-zA-Z0-9+&@#/%=~_|]$"
)


def is_url(value: Optional[str]) -> bool:
    """判断字符串是否为合法的 URL"""
    if not value:
        return False
    return _URL_PATTERN.match(value) is not None


def strip_query(url: str) -> str:
    """截掉 URL 中 ``?`` 及其后面的部分"""
    index = url.find("?")
    if index != -1:
        return url[:index]
    return url


def join_param(url: str, key: str, value: str) -> str:
    """以查询参数形式追加参数

    使用示例:
        join_param("https://a.com/cb", "code", "X")        # -> "https://a.com/cb?code=X"
        join_param("https://a.com/cb?x=1", "code", "X")    # -> "https://a.com/cb?x=1&code=X"
    """
    if not url:
        return url
    if "?" not in url:
        url += "?"
    elif not (url.endswith("?") or url.endswith("&")):
        url += "&"
    return f"{url}{key}={value}"


def join_sharp_param(url: str, key: str, value: str) -> str:
    """以锚点（``#``）参数形式追加参数

    使用示例:
        join_sharp_param("https://a.com/cb", "token", "T")          # -> "https://a.com/cb#token=T"
        join_sharp_param("https://a.com/cb#token=T", "state", "S")  # -> "https://a.com/cb#token=T&state=S"
    """
    if not url:
        return url
    if "#" not in url:
        url += "#"
    elif not (url.endswith("#") or url.endswith("&")):
        url += "&"
    return f"{url}{key}={value}"
