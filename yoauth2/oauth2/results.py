"""校验结果"""

from dataclasses import dataclass
from typing import Any, Generic, Iterator, Optional, TypeVar

from yoauth2.exceptions import OAuth2Exception

T = TypeVar("T")


@dataclass(frozen=True)
class CheckResult(Generic[T]):
    """校验结果

    校验函数不抛异常，而是返回结果对象；需要异常时调用 ``unwrap()``。
    也可以像 ``(is_valid, value_or_error)`` 元组一样解包。

    使用示例:
        is_valid, result = validator.check_client_model("app")
        if not is_valid:
            return result.to_oauth2_response()

        client = validator.check_client_model("app").unwrap()
    """
    is_valid: bool
    value: Optional[T] = None
    error: Optional[OAuth2Exception] = None

    @classmethod
    def ok(cls, value: Any = None) -> "CheckResult":
        return cls(True, value=value)

    @classmethod
    def fail(cls, error: OAuth2Exception) -> "CheckResult":
        return cls(False, error=error)

    def unwrap(self) -> T:
        """校验通过返回值，否则抛出携带的 OAuth2Exception"""
        if not self.is_valid:
            raise self.error
        return self.value

    def __bool__(self) -> bool:
        return self.is_valid

    def __iter__(self) -> Iterator[Any]:
        yield self.is_valid
        yield self.value if self.is_valid else self.error
