"""测试辅助模块"""

from .fakes import FakeClock, FakeRedis, FakeBadRedis

__all__ = ["FakeClock", "FakeRedis", "FakeBadRedis"]
