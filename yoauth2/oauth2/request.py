"""请求参数读取

引擎不依赖具体 Web 框架，只要求请求对象能按名称取参数。
"""

from typing import Any, Mapping, Optional, Protocol, runtime_checkable

from yoauth2.exceptions import OAuth2Error, OAuth2ErrorCode, OAuth2Exception


@runtime_checkable
class OAuth2Request(Protocol):
    """请求参数协议"""

    def get_param(self, name: str) -> Optional[str]:
        """读取参数，不存在返回 None"""
        ...

    def get_param_not_null(self, name: str) -> str:
        """读取参数，不存在或为空时抛出 OAuth2Exception"""
        ...


class MappingRequest:
    """基于字典的请求参数

    使用示例:
        # FastAPI
        params = {**request.query_params, **(await request.form())}
        req = MappingRequest(params)
        req.get_param("state")
    """

    def __init__(self, params: Optional[Mapping[str, Any]] = None):
        self._params = dict(params or {})

    def get_param(self, name: str) -> Optional[str]:
        value = self._params.get(name)
        if value is None:
            return None
        return str(value)

    def get_param_not_null(self, name: str) -> str:
        value = self.get_param(name)
        if value is None or value == "":
            raise OAuth2Exception(
                f"缺少参数: {name}",
                error=OAuth2Error.MISSING_PARAMETER,
                error_code=OAuth2ErrorCode.CODE_30101,
                param=name,
            )
        return value
