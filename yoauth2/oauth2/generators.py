"""随机令牌生成

令牌由字母和数字组成，与 client_id、login_id、scope 无关。
这些参数只作为上下文传入，便于子类定制令牌格式。
"""

import secrets
import string
from typing import Any

ALPHABET = string.ascii_letters + string.digits
DEFAULT_TOKEN_LENGTH = 60


def random_string(length: int = DEFAULT_TOKEN_LENGTH) -> str:
    """生成随机字符串

    Args:
        length: 长度

    Returns:
        str: 由大小写字母和数字组成的随机串
    """
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


class TokenGenerator:
    """令牌生成器

    使用示例:
        generator = TokenGenerator(length=40)
        generator.create_access_token("app", 10001, "userinfo")

        # 自定义格式
        class PrefixedGenerator(TokenGenerator):
            def create_access_token(self, client_id, login_id, scope):
                return "at_" + super().create_access_token(client_id, login_id, scope)
    """

    def __init__(self, length: int = DEFAULT_TOKEN_LENGTH):
        self.length = length

    def create_code(self, client_id: str, login_id: Any, scope: str) -> str:
        return random_string(self.length)

    def create_access_token(self, client_id: str, login_id: Any, scope: str) -> str:
        return random_string(self.length)

    def create_refresh_token(self, client_id: str, login_id: Any, scope: str) -> str:
        return random_string(self.length)

    def create_client_token(self, client_id: str, scope: str) -> str:
        return random_string(self.length)
