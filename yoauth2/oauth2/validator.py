"""OAuth2 校验

各授权流程在写入任何记录之前调用这里的校验。
所有校验都返回 CheckResult，不抛异常；组合校验在第一个失败处返回。
"""

import hmac
from typing import Any, Callable, Iterable, List, Optional

from yoauth2.exceptions import OAuth2Error, OAuth2ErrorCode, OAuth2Exception
from yoauth2.log import get_logger, mask_token
from yoauth2.utils import convert_string_to_list, is_empty, is_url, strip_query
from .consts import GrantType, ResponseType
from .data_loader import OAuth2DataLoader
from .models import ClientModel, AccessTokenModel, ClientTokenModel, CodeModel, RefreshTokenModel
from .results import CheckResult
from .store import OAuth2Store

logger = get_logger()

# (允许地址列表, 待校验地址) -> 是否允许
UrlMatcher = Callable[[List[str], str], bool]


def exact_url_matcher(allow_urls: List[str], url: str) -> bool:
    """精确匹配（默认）"""
    return url in allow_urls


def wildcard_url_matcher(allow_urls: List[str], url: str) -> bool:
    """支持通配符的匹配

    以 ``*`` 结尾的地址按前缀匹配，单独的 ``*`` 允许任意地址，其余精确匹配。

    使用示例:
        wildcard_url_matcher(["https://a.com/*"], "https://a.com/cb")  # -> True
    """
    for allow in allow_urls:
        if allow.endswith("*"):
            if url.startswith(allow[:-1]):
                return True
        elif url == allow:
            return True
    return False


def is_granted(granted_scope: Optional[str], required_scope: Any) -> bool:
    """判断已授权范围是否包含所需范围，所需范围为空时恒为 True

    Args:
        granted_scope: 已授权范围（逗号分隔）
        required_scope: 所需范围，字符串（逗号分隔）或列表
    """
    required = _as_scope_list(required_scope)
    if not required:
        return True
    granted = set(convert_string_to_list(granted_scope))
    return all(scope in granted for scope in required)


def _as_scope_list(scope: Any) -> List[str]:
    if scope is None:
        return []
    if isinstance(scope, str):
        return convert_string_to_list(scope)
    return [s for s in scope if s]


def _secret_matches(expected: Optional[str], candidate: Optional[str]) -> bool:
    if expected is None or candidate is None:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), candidate.encode("utf-8"))


def _fail(message: str, error: OAuth2Error, error_code: int) -> CheckResult:
    logger.debug(f"OAuth2 check failed: [{error_code}] {message}")
    return CheckResult.fail(OAuth2Exception(message, error=error, error_code=error_code))


def require_scopes(
    granted_scope: Optional[str],
    required_scopes: Iterable[str],
    error_code: int = OAuth2ErrorCode.CODE_30108,
    subject: str = "Access-Token",
) -> CheckResult:
    """校验已授权范围包含全部所需范围，所需范围为空时直接通过"""
    granted = convert_string_to_list(granted_scope)
    for scope in _as_scope_list(required_scopes):
        if scope not in granted:
            return _fail(f"该 {subject} 不具备 scope: {scope}", OAuth2Error.INSUFFICIENT_SCOPE, error_code)
    return CheckResult.ok(granted)


class OAuth2Validator:
    """OAuth2 校验器

    使用示例:
        validator = OAuth2Validator(store, data_loader)

        is_valid, result = validator.check_right_url("app", redirect_uri)
        if not is_valid:
            return JSONResponse(result.to_oauth2_response(), status_code=result.status_code)

        # 或者直接抛出
        client = validator.check_client_secret("app", secret).unwrap()

        # 允许通配符回调地址
        validator = OAuth2Validator(store, data_loader, url_matcher=wildcard_url_matcher)
    """

    def __init__(
        self,
        store: OAuth2Store,
        data_loader: OAuth2DataLoader,
        url_matcher: Optional[UrlMatcher] = None,
    ):
        self.store = store
        self.data_loader = data_loader
        self.url_matcher = url_matcher or exact_url_matcher

    # ---------- 单项校验 ----------

    def check_client_model(self, client_id: Optional[str]) -> CheckResult:
        """校验 client_id，返回 ClientModel"""
        client = self.data_loader.get_client_model(client_id) if client_id else None
        if client is None:
            return _fail(f"无效 client_id: {client_id}", OAuth2Error.UNKNOWN_CLIENT, OAuth2ErrorCode.CODE_30105)
        return CheckResult.ok(client)

    def check_access_token(self, access_token: Optional[str]) -> CheckResult:
        """校验 Access-Token，返回 AccessTokenModel"""
        at = self.store.get_access_token(access_token)
        if at is None:
            return _fail(
                f"无效 access_token: {mask_token(access_token)}",
                OAuth2Error.INVALID_ACCESS_TOKEN,
                OAuth2ErrorCode.CODE_30106,
            )
        return CheckResult.ok(at)

    def check_client_token(self, client_token: Optional[str]) -> CheckResult:
        """校验 Client-Token（包括仍在保留期内的旧 Client-Token），返回 ClientTokenModel"""
        ct = self.store.get_client_token(client_token)
        if ct is None:
            return _fail(
                f"无效 client_token: {mask_token(client_token)}",
                OAuth2Error.INVALID_CLIENT_TOKEN,
                OAuth2ErrorCode.CODE_30107,
            )
        return CheckResult.ok(ct)

    def check_scope(self, access_token: Optional[str], *scopes: str) -> CheckResult:
        """校验 Access-Token 具备全部指定 scope，未指定 scope 时直接通过"""
        if not scopes:
            return CheckResult.ok()
        result = self.check_access_token(access_token)
        if not result:
            return result
        at: AccessTokenModel = result.value
        checked = require_scopes(at.scope, scopes, OAuth2ErrorCode.CODE_30108, "Access-Token")
        return checked if not checked else CheckResult.ok(at)

    def check_client_token_scope(self, client_token: Optional[str], *scopes: str) -> CheckResult:
        """校验 Client-Token 具备全部指定 scope，未指定 scope 时直接通过"""
        if not scopes:
            return CheckResult.ok()
        result = self.check_client_token(client_token)
        if not result:
            return result
        ct: ClientTokenModel = result.value
        checked = require_scopes(ct.scope, scopes, OAuth2ErrorCode.CODE_30109, "Client-Token")
        return checked if not checked else CheckResult.ok(ct)

    def is_grant(self, login_id: Any, client_id: str, scope: Any) -> bool:
        """用户是否已对 client 授权过指定 scope，scope 为空时恒为 True"""
        if not _as_scope_list(scope):
            return True
        return is_granted(self.store.get_grant_scope(client_id, login_id), scope)

    def check_contract(self, client_id: str, scope: Any) -> CheckResult:
        """校验 client 签约了指定 scope"""
        result = self.check_client_model(client_id)
        if not result:
            return result
        return self._require_contract(result.value, scope, OAuth2ErrorCode.CODE_30112)

    def _require_contract(self, client: ClientModel, scope: Any, error_code: int) -> CheckResult:
        contracted = set(client.contract_scopes)
        if not all(s in contracted for s in _as_scope_list(scope)):
            return _fail("请求的 scope 暂未签约", OAuth2Error.SCOPE_NOT_CONTRACTED, error_code)
        return CheckResult.ok(client)

    def check_right_url(self, client_id: str, url: Optional[str]) -> CheckResult:
        """校验重定向地址格式正确，且（去掉查询串后）在 client 的允许列表中"""
        if not is_url(url):
            return _fail(f"无效 redirect_url: {url}", OAuth2Error.MALFORMED_URL, OAuth2ErrorCode.CODE_30113)
        url = strip_query(url)
        result = self.check_client_model(client_id)
        if not result:
            return result
        if not self.url_matcher(result.value.allow_urls, url):
            return _fail(f"非法 redirect_url: {url}", OAuth2Error.REDIRECT_NOT_ALLOWED, OAuth2ErrorCode.CODE_30114)
        return CheckResult.ok(result.value)

    def check_client_secret(self, client_id: str, client_secret: Optional[str]) -> CheckResult:
        """校验 client_secret，返回 ClientModel"""
        return self._require_secret(client_id, client_secret, OAuth2ErrorCode.CODE_30115)

    def _require_secret(self, client_id: str, client_secret: Optional[str], error_code: int) -> CheckResult:
        result = self.check_client_model(client_id)
        if not result:
            return result
        if not _secret_matches(result.value.client_secret, client_secret):
            return _fail(
                f"无效 client_secret: {mask_token(client_secret)}",
                OAuth2Error.INVALID_CLIENT_SECRET,
                error_code,
            )
        return result

    def check_grant_type(self, client: ClientModel, grant_type: str) -> CheckResult:
        """校验 client 开启了指定授权模式

        ``grant_type`` 可以是 GrantType 或 ResponseType 的取值。
        """
        enabled = {
            GrantType.AUTHORIZATION_CODE.value: client.is_code,
            ResponseType.CODE.value: client.is_code,
            GrantType.IMPLICIT.value: client.is_implicit,
            ResponseType.TOKEN.value: client.is_implicit,
            GrantType.PASSWORD.value: client.is_password,
            GrantType.CLIENT_CREDENTIALS.value: client.is_client,
            GrantType.REFRESH_TOKEN.value: client.is_code or client.is_password,
        }
        key = grant_type.value if isinstance(grant_type, (GrantType, ResponseType)) else grant_type
        if not enabled.get(key, False):
            return _fail(
                f"应用暂未开启授权模式: {key}",
                OAuth2Error.UNAUTHORIZED_GRANT_TYPE,
                OAuth2ErrorCode.CODE_30102,
            )
        return CheckResult.ok(client)

    def check_response_type(self, client: ClientModel, response_type: Optional[str]) -> CheckResult:
        """校验授权请求的 response_type，只接受 code 与 token，且 client 已开启对应模式"""
        if response_type not in {rt.value for rt in ResponseType}:
            return _fail(
                f"无效 response_type: {response_type}",
                OAuth2Error.UNAUTHORIZED_GRANT_TYPE,
                OAuth2ErrorCode.CODE_30102,
            )
        return self.check_grant_type(client, response_type)

    # ---------- 组合校验 ----------

    def check_client_secret_and_scope(self, client_id: str, client_secret: Optional[str], scope: Any) -> CheckResult:
        """先校验 client_secret，再校验签约 scope"""
        result = self.check_client_secret(client_id, client_secret)
        if not result:
            return result
        return self._require_contract(result.value, scope, OAuth2ErrorCode.CODE_30116)

    def check_gain_token_param(
        self,
        code: Optional[str],
        client_id: str,
        client_secret: Optional[str],
        redirect_uri: Optional[str] = None,
    ) -> CheckResult:
        """用 code 换 token 时的参数校验，返回 CodeModel

        依次校验: code 存在、client_id 一致、client_secret 正确、
        redirect_uri（提供时）与申请 code 时一致。
        """
        cm: Optional[CodeModel] = self.store.get_code(code)
        if cm is None:
            return _fail(f"无效 code: {mask_token(code)}", OAuth2Error.INVALID_CODE, OAuth2ErrorCode.CODE_30117)
        if cm.client_id != client_id:
            return _fail(f"无效 client_id: {client_id}", OAuth2Error.CLIENT_ID_MISMATCH, OAuth2ErrorCode.CODE_30118)
        result = self._require_secret(client_id, client_secret, OAuth2ErrorCode.CODE_30119)
        if not result:
            return result
        if not is_empty(redirect_uri) and redirect_uri != cm.redirect_uri:
            return _fail(
                f"无效 redirect_uri: {redirect_uri}",
                OAuth2Error.REDIRECT_URI_MISMATCH,
                OAuth2ErrorCode.CODE_30120,
            )
        return CheckResult.ok(cm)

    def check_refresh_token_param(
        self,
        client_id: str,
        client_secret: Optional[str],
        refresh_token: Optional[str],
    ) -> CheckResult:
        """刷新 Access-Token 时的参数校验，返回 RefreshTokenModel"""
        rt: Optional[RefreshTokenModel] = self.store.get_refresh_token(refresh_token)
        if rt is None:
            return _fail(
                f"无效 refresh_token: {mask_token(refresh_token)}",
                OAuth2Error.INVALID_REFRESH_TOKEN,
                OAuth2ErrorCode.CODE_30121,
            )
        if rt.client_id != client_id:
            return _fail(f"无效 client_id: {client_id}", OAuth2Error.CLIENT_ID_MISMATCH, OAuth2ErrorCode.CODE_30122)
        result = self._require_secret(client_id, client_secret, OAuth2ErrorCode.CODE_30123)
        if not result:
            return result
        return CheckResult.ok(rt)

    def check_access_token_param(
        self,
        client_id: str,
        client_secret: Optional[str],
        access_token: Optional[str],
    ) -> CheckResult:
        """校验 Access-Token、client_id、client_secret 三者匹配，返回 AccessTokenModel"""
        result = self.check_access_token(access_token)
        if not result:
            return result
        at: AccessTokenModel = result.value
        if at.client_id != client_id:
            return _fail(f"无效 client_id: {client_id}", OAuth2Error.CLIENT_ID_MISMATCH, OAuth2ErrorCode.CODE_30124)
        result = self.check_client_secret(client_id, client_secret)
        if not result:
            return result
        return CheckResult.ok(at)
