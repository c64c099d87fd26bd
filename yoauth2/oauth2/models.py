"""OAuth2 数据模型

定义 client 配置与持久化的五种记录：授权请求、授权码、
Access-Token、Refresh-Token、Client-Token。

所有过期时间均为带时区的 UTC 时间，``expires_at`` 为 None 表示永不过期。
"""

import math
from dataclasses import dataclass, asdict
from datetime import datetime, timezone, timedelta
from typing import Optional, List, Dict, Any, Union

from yoauth2.utils import convert_string_to_list

# 登录 ID 由业务决定，可以是字符串或整数，核心只把它当作键的一部分
LoginId = Union[str, int]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def expires_after(timeout: int) -> Optional[datetime]:
    """计算过期时间，``timeout <= 0`` 表示永不过期"""
    if timeout is None or timeout <= 0:
        return None
    return utcnow() + timedelta(seconds=timeout)


def _to_iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _from_iso(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass
class ClientModel:
    """Client 配置

    Attributes:
        client_id: 应用 ID
        client_secret: 应用秘钥，为 None 时任何秘钥校验都不通过
        contract_scope: 签约的权限，逗号分隔
        allow_url: 允许的重定向地址，逗号分隔
        past_client_token_timeout: 旧 Client-Token 的保留时间（秒），-1 表示沿用原有效期
    """
    client_id: str
    client_secret: Optional[str] = None
    contract_scope: str = ""
    allow_url: str = ""

    is_code: bool = True
    is_implicit: bool = False
    is_password: bool = False
    is_client: bool = False
    is_new_refresh: bool = False

    code_timeout: int = 300
    access_token_timeout: int = 7200
    refresh_token_timeout: int = 2592000
    client_token_timeout: int = 7200
    past_client_token_timeout: int = -1

    @property
    def contract_scopes(self) -> List[str]:
        return convert_string_to_list(self.contract_scope)

    @property
    def allow_urls(self) -> List[str]:
        return convert_string_to_list(self.allow_url)

    def to_dict(self, include_secret: bool = False) -> Dict[str, Any]:
        """转换为字典

        Args:
            include_secret: 是否包含秘钥
        """
        data = asdict(self)
        if not include_secret:
            data.pop("client_secret", None)
        return data


@dataclass
class RequestAuthModel:
    """授权请求

    由 ``generate_request_auth`` 从请求参数构建，用于生成授权码
    或（隐藏式、密码式下）直接生成 Access-Token。
    """
    client_id: str
    login_id: LoginId
    scope: str = ""
    redirect_uri: Optional[str] = None
    response_type: Optional[str] = None
    state: Optional[str] = None

    @property
    def scopes(self) -> List[str]:
        return convert_string_to_list(self.scope)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class _ExpiringRecord:
    """带过期时间的记录的公共方法"""

    expires_at: Optional[datetime]

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """检查是否过期"""
        if self.expires_at is None:
            return False
        return (now or utcnow()) >= self.expires_at

    def expires_in(self, now: Optional[datetime] = None) -> int:
        """剩余有效秒数

        Returns:
            int: 永不过期返回 -1，已过期返回 0
        """
        return _remaining_seconds(self.expires_at, now)

    def storage_ttl(self, now: Optional[datetime] = None) -> int:
        """写入存储时使用的 TTL，至少为 1 秒，永不过期返回 -1"""
        remaining = self.expires_in(now)
        if remaining == -1:
            return -1
        return max(1, remaining)


def _remaining_seconds(expires_at: Optional[datetime], now: Optional[datetime] = None) -> int:
    if expires_at is None:
        return -1
    remaining = (expires_at - (now or utcnow())).total_seconds()
    if remaining <= 0:
        return 0
    return math.ceil(remaining)


@dataclass
class CodeModel(_ExpiringRecord):
    """授权码"""
    code: str
    client_id: str
    login_id: LoginId
    scope: str = ""
    redirect_uri: Optional[str] = None
    expires_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "client_id": self.client_id,
            "login_id": self.login_id,
            "scope": self.scope,
            "redirect_uri": self.redirect_uri,
            "expires_at": _to_iso(self.expires_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CodeModel":
        return cls(
            code=data["code"],
            client_id=data["client_id"],
            login_id=data["login_id"],
            scope=data.get("scope", ""),
            redirect_uri=data.get("redirect_uri"),
            expires_at=_from_iso(data.get("expires_at")),
        )


@dataclass
class AccessTokenModel(_ExpiringRecord):
    """Access-Token

    ``refresh_token`` 与 ``refresh_expires_at`` 记录与之配对的 Refresh-Token，
    隐藏式模式下为空。
    """
    access_token: str
    client_id: str
    login_id: LoginId
    scope: str = ""
    openid: Optional[str] = None
    expires_at: Optional[datetime] = None
    refresh_token: Optional[str] = None
    refresh_expires_at: Optional[datetime] = None

    def refresh_expires_in(self, now: Optional[datetime] = None) -> int:
        """Refresh-Token 剩余有效秒数，没有 Refresh-Token 时返回 0"""
        if not self.refresh_token:
            return 0
        return _remaining_seconds(self.refresh_expires_at, now)

    def to_response(self) -> Dict[str, Any]:
        """转换为返回给 client 的响应格式"""
        response = {
            "access_token": self.access_token,
            "token_type": "Bearer",
            "expires_in": self.expires_in(),
            "client_id": self.client_id,
            "scope": self.scope,
            "openid": self.openid,
        }
        if self.refresh_token:
            response["refresh_token"] = self.refresh_token
            response["refresh_expires_in"] = self.refresh_expires_in()
        return response

    def to_dict(self) -> Dict[str, Any]:
        return {
            "access_token": self.access_token,
            "client_id": self.client_id,
            "login_id": self.login_id,
            "scope": self.scope,
            "openid": self.openid,
            "expires_at": _to_iso(self.expires_at),
            "refresh_token": self.refresh_token,
            "refresh_expires_at": _to_iso(self.refresh_expires_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AccessTokenModel":
        return cls(
            access_token=data["access_token"],
            client_id=data["client_id"],
            login_id=data["login_id"],
            scope=data.get("scope", ""),
            openid=data.get("openid"),
            expires_at=_from_iso(data.get("expires_at")),
            refresh_token=data.get("refresh_token"),
            refresh_expires_at=_from_iso(data.get("refresh_expires_at")),
        )


@dataclass
class RefreshTokenModel(_ExpiringRecord):
    """Refresh-Token"""
    refresh_token: str
    client_id: str
    login_id: LoginId
    scope: str = ""
    openid: Optional[str] = None
    expires_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "refresh_token": self.refresh_token,
            "client_id": self.client_id,
            "login_id": self.login_id,
            "scope": self.scope,
            "openid": self.openid,
            "expires_at": _to_iso(self.expires_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RefreshTokenModel":
        return cls(
            refresh_token=data["refresh_token"],
            client_id=data["client_id"],
            login_id=data["login_id"],
            scope=data.get("scope", ""),
            openid=data.get("openid"),
            expires_at=_from_iso(data.get("expires_at")),
        )


@dataclass
class ClientTokenModel(_ExpiringRecord):
    """Client-Token

    代表 client 自身（而非某个用户）的凭证，用于凭证式授权。
    """
    client_token: str
    client_id: str
    scope: str = ""
    expires_at: Optional[datetime] = None

    def to_response(self) -> Dict[str, Any]:
        return {
            "client_token": self.client_token,
            "token_type": "Bearer",
            "expires_in": self.expires_in(),
            "client_id": self.client_id,
            "scope": self.scope,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "client_token": self.client_token,
            "client_id": self.client_id,
            "scope": self.scope,
            "expires_at": _to_iso(self.expires_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClientTokenModel":
        return cls(
            client_token=data["client_token"],
            client_id=data["client_id"],
            scope=data.get("scope", ""),
            expires_at=_from_iso(data.get("expires_at")),
        )
