"""OAuth2 令牌生命周期

授权码、Access-Token、Refresh-Token、Client-Token 的生成、轮换与回收。

所有操作都是对存储的一串顺序读写，没有跨调用的事务：
同一个 (client_id, login_id) 总是先删除旧记录再写入新记录，
以此保证任一时刻最多只有一个有效的授权码 / Access-Token / Refresh-Token。
中途失败时最多留下"没有令牌"的状态，调用方按未认证处理。
"""

from typing import Any, Optional

from yoauth2.exceptions import OAuth2Error, OAuth2ErrorCode, OAuth2Exception
from yoauth2.log import get_logger, log_filter_hook_manager
from yoauth2.utils import is_empty, join_param, join_sharp_param
from .consts import Param
from .data_loader import OAuth2DataLoader
from .generators import TokenGenerator
from .models import (
    ClientModel,
    RequestAuthModel,
    CodeModel,
    AccessTokenModel,
    RefreshTokenModel,
    ClientTokenModel,
    expires_after,
)
from .request import OAuth2Request
from .store import OAuth2Store

logger = get_logger()


class OAuth2Template:
    """OAuth2 令牌生命周期引擎

    校验（OAuth2Validator）应在调用这里的方法之前完成。

    使用示例:
        template = OAuth2Template(store, data_loader)

        # 授权码模式
        ra = template.generate_request_auth(request, login_id=10001)
        cm = template.generate_code(ra)
        url = template.build_redirect_uri(ra.redirect_uri, cm.code, ra.state)

        at = template.generate_access_token(cm.code)
        at = template.refresh_access_token(at.refresh_token)
        template.revoke_access_token(at.access_token)
    """

    def __init__(
        self,
        store: OAuth2Store,
        data_loader: OAuth2DataLoader,
        generator: Optional[TokenGenerator] = None,
    ):
        self.store = store
        self.data_loader = data_loader
        self.generator = generator or TokenGenerator()

    def _log(self, event: str, **fields: Any) -> None:
        data = log_filter_hook_manager.apply_filters(fields)
        logger.info(f"{event}: {data}")

    def _client(self, client_id: str) -> ClientModel:
        client = self.data_loader.get_client_model(client_id) if client_id else None
        if client is None:
            raise OAuth2Exception(
                f"无效 client_id: {client_id}",
                error=OAuth2Error.UNKNOWN_CLIENT,
                error_code=OAuth2ErrorCode.CODE_30105,
            )
        return client

    def get_openid(self, client_id: str, login_id: Any) -> Optional[str]:
        return self.data_loader.get_openid(client_id, login_id)

    # ---------- 构建请求 ----------

    def generate_request_auth(self, request: OAuth2Request, login_id: Any) -> RequestAuthModel:
        """从请求参数构建授权请求

        client_id、response_type、redirect_uri 必填，state、scope 可选。
        """
        return RequestAuthModel(
            client_id=request.get_param_not_null(Param.CLIENT_ID),
            login_id=login_id,
            scope=request.get_param(Param.SCOPE) or "",
            redirect_uri=request.get_param_not_null(Param.REDIRECT_URI),
            response_type=request.get_param_not_null(Param.RESPONSE_TYPE),
            state=request.get_param(Param.STATE),
        )

    # ---------- 授权码 ----------

    def generate_code(self, ra: RequestAuthModel) -> CodeModel:
        """生成授权码，同一 (client_id, login_id) 的旧授权码会先被删除"""
        client = self._client(ra.client_id)

        self.store.delete_code(self.store.get_code_value(ra.client_id, ra.login_id))

        cm = CodeModel(
            code=self.generator.create_code(ra.client_id, ra.login_id, ra.scope),
            client_id=ra.client_id,
            login_id=ra.login_id,
            scope=ra.scope,
            redirect_uri=ra.redirect_uri,
            expires_at=expires_after(client.code_timeout),
        )
        self.store.save_code(cm)
        self.store.save_code_index(cm)

        self._log("Code issued", client_id=cm.client_id, login_id=cm.login_id, code=cm.code)
        return cm

    def generate_access_token(self, code: str) -> AccessTokenModel:
        """用授权码换取 Access-Token 与 Refresh-Token

        授权码只能使用一次：从存储中原子地取出并删除，
        并发兑换同一个授权码时只有一个请求能成功。

        Raises:
            OAuth2Exception: 授权码无效（INVALID_CODE）
        """
        cm = self.store.consume_code(code)
        if cm is None:
            raise OAuth2Exception(
                "无效 code",
                error=OAuth2Error.INVALID_CODE,
                error_code=OAuth2ErrorCode.CODE_30110,
            )
        if self.store.get_code_value(cm.client_id, cm.login_id) == cm.code:
            self.store.delete_code_index(cm.client_id, cm.login_id)

        client = self._client(cm.client_id)

        self.store.delete_access_token(self.store.get_access_token_value(cm.client_id, cm.login_id))
        self.store.delete_refresh_token(self.store.get_refresh_token_value(cm.client_id, cm.login_id))

        at = self.convert_code_to_access_token(cm, client)
        rt = self.convert_access_token_to_refresh_token(at, client)
        at.refresh_token = rt.refresh_token
        at.refresh_expires_at = rt.expires_at

        self.store.save_access_token(at)
        self.store.save_access_token_index(at)
        self.store.save_refresh_token(rt)
        self.store.save_refresh_token_index(rt)

        self._log(
            "Access-Token issued by code",
            client_id=at.client_id,
            login_id=at.login_id,
            access_token=at.access_token,
            refresh_token=rt.refresh_token,
        )
        return at

    def refresh_access_token(self, refresh_token: str) -> AccessTokenModel:
        """用 Refresh-Token 换取新的 Access-Token

        client 开启 ``is_new_refresh`` 时同时换发新的 Refresh-Token，
        否则沿用原 Refresh-Token。

        Raises:
            OAuth2Exception: Refresh-Token 无效（INVALID_REFRESH_TOKEN）
        """
        rt = self.store.get_refresh_token(refresh_token)
        if rt is None:
            raise OAuth2Exception(
                "无效 refresh_token",
                error=OAuth2Error.INVALID_REFRESH_TOKEN,
                error_code=OAuth2ErrorCode.CODE_30111,
            )
        client = self._client(rt.client_id)

        if client.is_new_refresh:
            self.store.delete_refresh_token(rt.refresh_token)
            rt = self.convert_refresh_token_to_refresh_token(rt, client)
            self.store.save_refresh_token(rt)
            self.store.save_refresh_token_index(rt)

        self.store.delete_access_token(self.store.get_access_token_value(rt.client_id, rt.login_id))

        at = self.convert_refresh_token_to_access_token(rt, client)
        self.store.save_access_token(at)
        self.store.save_access_token_index(at)

        self._log(
            "Access-Token refreshed",
            client_id=at.client_id,
            login_id=at.login_id,
            access_token=at.access_token,
            refresh_token=rt.refresh_token,
            new_refresh=client.is_new_refresh,
        )
        return at

    def generate_access_token_by_request(self, ra: RequestAuthModel, create_refresh: bool = False) -> AccessTokenModel:
        """直接生成 Access-Token（隐藏式、密码式）

        Args:
            ra: 授权请求
            create_refresh: 是否同时生成 Refresh-Token（隐藏式下应为 False）
        """
        client = self._client(ra.client_id)

        self.store.delete_access_token(self.store.get_access_token_value(ra.client_id, ra.login_id))
        if create_refresh:
            self.store.delete_refresh_token(self.store.get_refresh_token_value(ra.client_id, ra.login_id))

        at = AccessTokenModel(
            access_token=self.generator.create_access_token(ra.client_id, ra.login_id, ra.scope),
            client_id=ra.client_id,
            login_id=ra.login_id,
            scope=ra.scope,
            openid=self.get_openid(ra.client_id, ra.login_id),
            expires_at=expires_after(client.access_token_timeout),
        )

        if create_refresh:
            rt = self.convert_access_token_to_refresh_token(at, client)
            at.refresh_token = rt.refresh_token
            at.refresh_expires_at = rt.expires_at
            self.store.save_refresh_token(rt)
            self.store.save_refresh_token_index(rt)

        self.store.save_access_token(at)
        self.store.save_access_token_index(at)

        self._log(
            "Access-Token issued",
            client_id=at.client_id,
            login_id=at.login_id,
            access_token=at.access_token,
            refresh_token=at.refresh_token,
        )
        return at

    # ---------- Client-Token ----------

    def generate_client_token(self, client_id: str, scope: str = "") -> ClientTokenModel:
        """生成 Client-Token

        当前 Client-Token 降级为 Past-Token，在保留期内仍然有效；
        更早的 Past-Token 被删除。保留期为 client 的 ``past_client_token_timeout``
        （大于 0 时），否则沿用其原有效期。
        """
        client = self._client(client_id)

        self.store.delete_client_token(self.store.get_past_client_token_value(client_id))

        old_ct = self.store.get_client_token(self.store.get_client_token_value(client_id))
        if old_ct is not None:
            if client.past_client_token_timeout > 0:
                old_ct.expires_at = expires_after(client.past_client_token_timeout)
                self.store.save_client_token(old_ct)
            self.store.save_past_client_token_index(old_ct, old_ct.storage_ttl())
            logger.debug(f"Client-Token demoted to past token: client_id={client_id}")
        else:
            self.store.delete_past_client_token_index(client_id)

        ct = ClientTokenModel(
            client_token=self.generator.create_client_token(client_id, scope),
            client_id=client_id,
            scope=scope,
            expires_at=expires_after(client.client_token_timeout),
        )
        self.store.save_client_token(ct)
        self.store.save_client_token_index(ct)

        self._log("Client-Token issued", client_id=client_id, client_token=ct.client_token)
        return ct

    # ---------- 回收 ----------

    def revoke_access_token(self, access_token: str) -> None:
        """回收 Access-Token 及其对应的 Refresh-Token，令牌不存在时什么也不做"""
        at = self.store.get_access_token(access_token)
        if at is None:
            return

        self.store.delete_access_token(at.access_token)
        self.store.delete_access_token_index(at.client_id, at.login_id)

        self.store.delete_refresh_token(self.store.get_refresh_token_value(at.client_id, at.login_id))
        self.store.delete_refresh_token_index(at.client_id, at.login_id)

        self._log("Access-Token revoked", client_id=at.client_id, login_id=at.login_id, access_token=access_token)

    # ---------- 查询 ----------

    def get_login_id_by_access_token(self, access_token: str) -> Any:
        """获取 Access-Token 对应的 login_id

        Raises:
            OAuth2Exception: Access-Token 无效（INVALID_ACCESS_TOKEN）
        """
        at = self.store.get_access_token(access_token)
        if at is None:
            raise OAuth2Exception(
                "无效 access_token",
                error=OAuth2Error.INVALID_ACCESS_TOKEN,
                error_code=OAuth2ErrorCode.CODE_30106,
            )
        return at.login_id

    # ---------- 授权范围 ----------

    def save_grant_scope(self, client_id: str, login_id: Any, scope: str) -> None:
        """记录用户对 client 授权的 scope，有效期与 Access-Token 相同，scope 为空时不记录"""
        if is_empty(scope):
            return
        client = self._client(client_id)
        self.store.save_grant_scope(client_id, login_id, scope, client.access_token_timeout)

    def get_grant_scope(self, client_id: str, login_id: Any) -> Optional[str]:
        return self.store.get_grant_scope(client_id, login_id)

    def delete_grant_scope(self, client_id: str, login_id: Any) -> None:
        self.store.delete_grant_scope(client_id, login_id)

    # ---------- 重定向地址 ----------

    def build_redirect_uri(self, redirect_uri: str, code: str, state: Optional[str] = None) -> str:
        """构建下放授权码的地址（查询参数形式）"""
        url = join_param(redirect_uri, Param.CODE, code)
        if not is_empty(state):
            url = join_param(url, Param.STATE, state)
        return url

    def build_implicit_redirect_uri(self, redirect_uri: str, token: str, state: Optional[str] = None) -> str:
        """构建下放 Access-Token 的地址（锚点参数形式，隐藏式）"""
        url = join_sharp_param(redirect_uri, Param.TOKEN, token)
        if not is_empty(state):
            url = join_sharp_param(url, Param.STATE, state)
        return url

    # ---------- 模型转换 ----------

    def convert_code_to_access_token(self, cm: CodeModel, client: ClientModel) -> AccessTokenModel:
        return AccessTokenModel(
            access_token=self.generator.create_access_token(cm.client_id, cm.login_id, cm.scope),
            client_id=cm.client_id,
            login_id=cm.login_id,
            scope=cm.scope,
            openid=self.get_openid(cm.client_id, cm.login_id),
            expires_at=expires_after(client.access_token_timeout),
        )

    def convert_access_token_to_refresh_token(self, at: AccessTokenModel, client: ClientModel) -> RefreshTokenModel:
        return RefreshTokenModel(
            refresh_token=self.generator.create_refresh_token(at.client_id, at.login_id, at.scope),
            client_id=at.client_id,
            login_id=at.login_id,
            scope=at.scope,
            openid=at.openid,
            expires_at=expires_after(client.refresh_token_timeout),
        )

    def convert_refresh_token_to_access_token(self, rt: RefreshTokenModel, client: ClientModel) -> AccessTokenModel:
        return AccessTokenModel(
            access_token=self.generator.create_access_token(rt.client_id, rt.login_id, rt.scope),
            client_id=rt.client_id,
            login_id=rt.login_id,
            scope=rt.scope,
            openid=rt.openid,
            expires_at=expires_after(client.access_token_timeout),
            refresh_token=rt.refresh_token,
            refresh_expires_at=rt.expires_at,
        )

    def convert_refresh_token_to_refresh_token(self, rt: RefreshTokenModel, client: ClientModel) -> RefreshTokenModel:
        return RefreshTokenModel(
            refresh_token=self.generator.create_refresh_token(rt.client_id, rt.login_id, rt.scope),
            client_id=rt.client_id,
            login_id=rt.login_id,
            scope=rt.scope,
            openid=rt.openid,
            expires_at=expires_after(client.refresh_token_timeout),
        )
