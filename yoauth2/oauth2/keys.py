"""存储键构建

所有键形如 ``<token_name>:oauth2:<kind>:<discriminator>``。
"""

from typing import Any


def _escape(part: Any) -> str:
    # 组成部分内的 ":" 需要转义，否则 ("a:b", "c") 与 ("a", "b:c") 会得到同一个键
    return str(part).replace("%", "%25").replace(":", "%3A")


class OAuth2KeyBuilder:
    """OAuth2 存储键构建器

    使用示例:
        keys = OAuth2KeyBuilder("myapp")
        keys.code("X")                     # -> "myapp:oauth2:code:X"
        keys.access_token_index("app", 1)  # -> "myapp:oauth2:access-token-index:app:1"
    """

    def __init__(self, token_name: str = "yoauth2"):
        self.token_name = token_name

    def _key(self, kind: str, *parts: Any) -> str:
        return ":".join([self.token_name, "oauth2", kind] + [_escape(p) for p in parts])

    def code(self, code: str) -> str:
        return self._key("code", code)

    def code_index(self, client_id: str, login_id: Any) -> str:
        return self._key("code-index", client_id, login_id)

    def access_token(self, access_token: str) -> str:
        return self._key("access-token", access_token)

    def access_token_index(self, client_id: str, login_id: Any) -> str:
        return self._key("access-token-index", client_id, login_id)

    def refresh_token(self, refresh_token: str) -> str:
        return self._key("refresh-token", refresh_token)

    def refresh_token_index(self, client_id: str, login_id: Any) -> str:
        return self._key("refresh-token-index", client_id, login_id)

    def client_token(self, client_token: str) -> str:
        return self._key("client-token", client_token)

    def client_token_index(self, client_id: str) -> str:
        return self._key("client-token-index", client_id)

    def past_client_token_index(self, client_id: str) -> str:
        return self._key("past-token-index", client_id)

    def grant_scope(self, client_id: str, login_id: Any) -> str:
        return self._key("grant-scope", client_id, login_id)
