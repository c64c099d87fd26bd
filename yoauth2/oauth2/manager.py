"""OAuth2 管理器

把存储、client 数据加载器、配置、校验器与生命周期引擎组装在一起，
对外提供统一入口。不使用全局单例，所有依赖都通过构造参数传入。
"""

from typing import Any, Optional

from yoauth2.config import AppSettings, OAuth2Settings
from yoauth2.exceptions import OAuth2Exception
from yoauth2.log import get_logger
from yoauth2.storage import MemoryTokenStorage, RedisTokenStorage, TokenStorage
from .consts import GrantType
from .data_loader import OAuth2DataLoader
from .generators import TokenGenerator
from .keys import OAuth2KeyBuilder
from .models import (
    RequestAuthModel,
    CodeModel,
    AccessTokenModel,
    RefreshTokenModel,
    ClientTokenModel,
)
from .request import OAuth2Request
from .results import CheckResult
from .store import OAuth2Store
from .template import OAuth2Template
from .validator import OAuth2Validator, UrlMatcher

logger = get_logger()


class OAuth2Manager:
    """OAuth2 管理器

    提供:
    - 各授权流程的完整处理（先校验、后写入），返回 CheckResult
    - 生命周期与校验操作的直接调用

    使用示例:
        settings = OAuth2Settings(token_name="myapp")
        loader = InMemoryDataLoader([
            settings.new_client(
                "app",
                client_secret="secret",
                contract_scope="userinfo",
                allow_url="https://app.example.com/callback",
            ),
        ])
        manager = OAuth2Manager(MemoryTokenStorage(), loader, settings)

        # 授权码模式
        is_valid, result = manager.authorize(MappingRequest(params), login_id=10001)
        if not is_valid:
            return result.to_oauth2_response()
        cm = manager.generate_code(result)
        url = manager.build_redirect_uri(result.redirect_uri, cm.code, result.state)

        # 用授权码换 token
        is_valid, result = manager.exchange_code(code, "app", "secret", redirect_uri)
        if is_valid:
            return result.to_response()
    """

    def __init__(
        self,
        storage: TokenStorage,
        data_loader: OAuth2DataLoader,
        settings: Optional[OAuth2Settings] = None,
        url_matcher: Optional[UrlMatcher] = None,
        generator: Optional[TokenGenerator] = None,
    ):
        """
        Args:
            storage: 存储后端
            data_loader: client 数据加载器
            settings: OAuth2 配置，默认使用 OAuth2Settings()
            url_matcher: 重定向地址匹配策略，默认精确匹配
            generator: 令牌生成器，默认长度取自配置
        """
        self.settings = settings or OAuth2Settings()
        self.storage = storage
        self.data_loader = data_loader
        if data_loader.openid_digest_prefix is None:
            data_loader.openid_digest_prefix = self.settings.openid_digest_prefix
        self.keys = OAuth2KeyBuilder(self.settings.token_name)
        self.store = OAuth2Store(storage, self.keys)
        self.validator = OAuth2Validator(self.store, data_loader, url_matcher=url_matcher)
        self.template = OAuth2Template(
            self.store,
            data_loader,
            generator=generator or TokenGenerator(self.settings.token_length),
        )

        logger.debug(f"OAuth2Manager initialized: token_name={self.settings.token_name}")

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings,
        data_loader: OAuth2DataLoader,
        url_matcher: Optional[UrlMatcher] = None,
    ) -> "OAuth2Manager":
        """根据应用配置创建管理器

        配置了 ``redis.url`` 时使用 Redis 存储，否则使用内存存储。
        """
        if settings.redis.url:
            storage = RedisTokenStorage.from_settings(settings.redis)
        else:
            storage = MemoryTokenStorage()
        return cls(storage, data_loader, settings.oauth2, url_matcher=url_matcher)

    # ==================== 授权流程 ====================

    def authorize(self, request: OAuth2Request, login_id: Any) -> CheckResult:
        """处理授权请求（授权码模式与隐藏式的第一步）

        依次校验: 必填参数、client_id、授权模式、签约 scope、重定向地址。

        Returns:
            CheckResult: 成功时 value 为 RequestAuthModel
        """
        try:
            ra = self.template.generate_request_auth(request, login_id)
        except OAuth2Exception as e:
            return CheckResult.fail(e)

        result = self.validator.check_client_model(ra.client_id)
        if not result:
            return result
        client = result.value

        for check in (
            lambda: self.validator.check_response_type(client, ra.response_type),
            lambda: self.validator.check_contract(ra.client_id, ra.scope),
            lambda: self.validator.check_right_url(ra.client_id, ra.redirect_uri),
        ):
            result = check()
            if not result:
                return result
        return CheckResult.ok(ra)

    def exchange_code(
        self,
        code: str,
        client_id: str,
        client_secret: Optional[str],
        redirect_uri: Optional[str] = None,
    ) -> CheckResult:
        """用授权码换取 Access-Token

        Returns:
            CheckResult: 成功时 value 为 AccessTokenModel
        """
        result = self.validator.check_gain_token_param(code, client_id, client_secret, redirect_uri)
        if not result:
            return result
        result = self._check_client_grant(client_id, GrantType.AUTHORIZATION_CODE)
        if not result:
            return result
        return self._run(self.template.generate_access_token, code)

    def refresh_token(self, client_id: str, client_secret: Optional[str], refresh_token: str) -> CheckResult:
        """用 Refresh-Token 换取新的 Access-Token

        Returns:
            CheckResult: 成功时 value 为 AccessTokenModel
        """
        result = self.validator.check_refresh_token_param(client_id, client_secret, refresh_token)
        if not result:
            return result
        result = self._check_client_grant(client_id, GrantType.REFRESH_TOKEN)
        if not result:
            return result
        return self._run(self.template.refresh_access_token, refresh_token)

    def implicit_token(self, ra: RequestAuthModel) -> CheckResult:
        """隐藏式: 直接下放 Access-Token（不生成 Refresh-Token）

        ``ra`` 应来自 ``authorize()`` 的成功结果。
        """
        return self._run(self.template.generate_access_token_by_request, ra, False)

    def password_token(
        self,
        client_id: str,
        client_secret: Optional[str],
        login_id: Any,
        scope: str = "",
    ) -> CheckResult:
        """密码式: 业务方校验完用户名密码后，为 login_id 生成 Access-Token 与 Refresh-Token"""
        result = self.validator.check_client_secret_and_scope(client_id, client_secret, scope)
        if not result:
            return result
        result = self.validator.check_grant_type(result.value, GrantType.PASSWORD)
        if not result:
            return result
        ra = RequestAuthModel(client_id=client_id, login_id=login_id, scope=scope or "")
        return self._run(self.template.generate_access_token_by_request, ra, True)

    def client_credentials_token(self, client_id: str, client_secret: Optional[str], scope: str = "") -> CheckResult:
        """凭证式: 生成 Client-Token"""
        result = self.validator.check_client_secret_and_scope(client_id, client_secret, scope)
        if not result:
            return result
        result = self.validator.check_grant_type(result.value, GrantType.CLIENT_CREDENTIALS)
        if not result:
            return result
        return self._run(self.template.generate_client_token, client_id, scope or "")

    def _check_client_grant(self, client_id: str, grant_type: GrantType) -> CheckResult:
        result = self.validator.check_client_model(client_id)
        if not result:
            return result
        return self.validator.check_grant_type(result.value, grant_type)

    def _run(self, operation, *args: Any) -> CheckResult:
        try:
            return CheckResult.ok(operation(*args))
        except OAuth2Exception as e:
            logger.debug(f"OAuth2 operation failed: {e!r}")
            return CheckResult.fail(e)

    # ==================== 生命周期 ====================

    def generate_request_auth(self, request: OAuth2Request, login_id: Any) -> RequestAuthModel:
        return self.template.generate_request_auth(request, login_id)

    def generate_code(self, ra: RequestAuthModel) -> CodeModel:
        return self.template.generate_code(ra)

    def generate_access_token(self, code: str) -> AccessTokenModel:
        return self.template.generate_access_token(code)

    def refresh_access_token(self, refresh_token: str) -> AccessTokenModel:
        return self.template.refresh_access_token(refresh_token)

    def generate_access_token_by_request(self, ra: RequestAuthModel, create_refresh: bool = False) -> AccessTokenModel:
        return self.template.generate_access_token_by_request(ra, create_refresh)

    def generate_client_token(self, client_id: str, scope: str = "") -> ClientTokenModel:
        return self.template.generate_client_token(client_id, scope)

    def revoke_access_token(self, access_token: str) -> None:
        self.template.revoke_access_token(access_token)

    def build_redirect_uri(self, redirect_uri: str, code: str, state: Optional[str] = None) -> str:
        return self.template.build_redirect_uri(redirect_uri, code, state)

    def build_implicit_redirect_uri(self, redirect_uri: str, token: str, state: Optional[str] = None) -> str:
        return self.template.build_implicit_redirect_uri(redirect_uri, token, state)

    def get_login_id_by_access_token(self, access_token: str) -> Any:
        return self.template.get_login_id_by_access_token(access_token)

    def save_grant_scope(self, client_id: str, login_id: Any, scope: str) -> None:
        self.template.save_grant_scope(client_id, login_id, scope)

    def get_grant_scope(self, client_id: str, login_id: Any) -> Optional[str]:
        return self.template.get_grant_scope(client_id, login_id)

    def delete_grant_scope(self, client_id: str, login_id: Any) -> None:
        self.template.delete_grant_scope(client_id, login_id)

    # ==================== 查询 ====================

    def get_code(self, code: str) -> Optional[CodeModel]:
        return self.store.get_code(code)

    def get_access_token(self, access_token: str) -> Optional[AccessTokenModel]:
        return self.store.get_access_token(access_token)

    def get_refresh_token(self, refresh_token: str) -> Optional[RefreshTokenModel]:
        return self.store.get_refresh_token(refresh_token)

    def get_client_token(self, client_token: str) -> Optional[ClientTokenModel]:
        return self.store.get_client_token(client_token)

    def get_past_client_token(self, client_id: str) -> Optional[ClientTokenModel]:
        """获取 client 上一个（仍在保留期内的）Client-Token"""
        return self.store.get_client_token(self.store.get_past_client_token_value(client_id))

    # ==================== 校验 ====================

    def check_client_model(self, client_id: str) -> CheckResult:
        return self.validator.check_client_model(client_id)

    def check_access_token(self, access_token: str) -> CheckResult:
        return self.validator.check_access_token(access_token)

    def check_client_token(self, client_token: str) -> CheckResult:
        return self.validator.check_client_token(client_token)

    def check_scope(self, access_token: str, *scopes: str) -> CheckResult:
        return self.validator.check_scope(access_token, *scopes)

    def check_client_token_scope(self, client_token: str, *scopes: str) -> CheckResult:
        return self.validator.check_client_token_scope(client_token, *scopes)

    def is_grant(self, login_id: Any, client_id: str, scope: Any) -> bool:
        return self.validator.is_grant(login_id, client_id, scope)

    def check_contract(self, client_id: str, scope: Any) -> CheckResult:
        return self.validator.check_contract(client_id, scope)

    def check_right_url(self, client_id: str, url: str) -> CheckResult:
        return self.validator.check_right_url(client_id, url)

    def check_client_secret(self, client_id: str, client_secret: Optional[str]) -> CheckResult:
        return self.validator.check_client_secret(client_id, client_secret)

    def check_client_secret_and_scope(self, client_id: str, client_secret: Optional[str], scope: Any) -> CheckResult:
        return self.validator.check_client_secret_and_scope(client_id, client_secret, scope)

    def check_gain_token_param(
        self,
        code: str,
        client_id: str,
        client_secret: Optional[str],
        redirect_uri: Optional[str] = None,
    ) -> CheckResult:
        return self.validator.check_gain_token_param(code, client_id, client_secret, redirect_uri)

    def check_refresh_token_param(self, client_id: str, client_secret: Optional[str], refresh_token: str) -> CheckResult:
        return self.validator.check_refresh_token_param(client_id, client_secret, refresh_token)

    def check_access_token_param(self, client_id: str, client_secret: Optional[str], access_token: str) -> CheckResult:
        return self.validator.check_access_token_param(client_id, client_secret, access_token)
