"""测试公共配置

提供内存存储、client 注册表与 OAuth2Manager 的 fixtures。
"""

import pytest

from yoauth2.config import OAuth2Settings
from yoauth2.oauth2 import InMemoryDataLoader, OAuth2Manager, RequestAuthModel
from yoauth2.storage import MemoryTokenStorage

from tests.helpers import FakeClock

CALLBACK_URL = "https://app.example.com/callback"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def oauth2_settings():
    return OAuth2Settings(
        token_name="test",
        is_implicit=True,
        is_password=True,
        is_client=True,
    )


@pytest.fixture
def client(oauth2_settings):
    """普通 client: 刷新时沿用 Refresh-Token"""
    return oauth2_settings.new_client(
        "app",
        client_secret="secret",
        contract_scope="userinfo,openid",
        allow_url=f"{CALLBACK_URL},https://app.example.com/implicit",
    )


@pytest.fixture
def rotating_client(oauth2_settings):
    """刷新时换发新 Refresh-Token 的 client"""
    return oauth2_settings.new_client(
        "app2",
        client_secret="secret2",
        contract_scope="userinfo",
        allow_url=CALLBACK_URL,
        is_new_refresh=True,
    )


@pytest.fixture
def data_loader(client, rotating_client):
    return InMemoryDataLoader([client, rotating_client])


@pytest.fixture
def storage(clock):
    return MemoryTokenStorage(timer=clock)


@pytest.fixture
def manager(storage, data_loader, oauth2_settings):
    return OAuth2Manager(storage, data_loader, oauth2_settings)


@pytest.fixture
def template(manager):
    return manager.template


@pytest.fixture
def validator(manager):
    return manager.validator


@pytest.fixture
def store(manager):
    return manager.store


@pytest.fixture
def request_auth():
    return RequestAuthModel(
        client_id="app",
        login_id=10001,
        scope="userinfo",
        redirect_uri=CALLBACK_URL,
        response_type="code",
        state="S",
    )
