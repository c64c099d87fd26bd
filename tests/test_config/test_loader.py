"""YAML 配置加载测试"""

import pytest

from yoauth2.config import AppSettings, ConfigLoader, OAuth2Settings, load_yaml_config

YAML_CONTENT = """
oauth2:
  token_name: "myapp"
  access_token_timeout: 3600
  is_password: true
logging:
  level: "DEBUG"
redis:
  url: "redis://localhost:6379/0"
"""


@pytest.fixture(autouse=True)
def clear_config_cache():
    ConfigLoader.clear_cache()
    yield
    ConfigLoader.clear_cache()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text(YAML_CONTENT, encoding="utf-8")
    return path


class TestConfigLoader:
    """ConfigLoader 测试"""

    def test_load(self, config_file):
        config = ConfigLoader.load(str(config_file))
        assert config["oauth2"]["token_name"] == "myapp"
        assert str(config_file) in ConfigLoader.get_cached_paths()

    def test_relative_path_with_base_dir(self, config_file):
        config = ConfigLoader.load("settings.yaml", base_dir=str(config_file.parent))
        assert config["logging"]["level"] == "DEBUG"

    def test_cache_and_reload(self, config_file):
        """测试缓存生效，reload 重新读取"""
        ConfigLoader.load(str(config_file))
        config_file.write_text("oauth2:\n  token_name: changed\n", encoding="utf-8")

        assert ConfigLoader.load(str(config_file))["oauth2"]["token_name"] == "myapp"
        assert ConfigLoader.reload(str(config_file))["oauth2"]["token_name"] == "changed"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert ConfigLoader.load(str(path)) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigLoader.load(str(tmp_path / "missing.yaml"))


class TestLoadYamlConfig:
    """load_yaml_config 测试"""

    def test_app_settings(self, config_file):
        settings = load_yaml_config(str(config_file), AppSettings)

        assert settings.oauth2.token_name == "myapp"
        assert settings.oauth2.access_token_timeout == 3600
        assert settings.oauth2.is_password is True
        assert settings.oauth2.refresh_token_timeout == 2592000
        assert settings.logging.level == "DEBUG"
        assert settings.redis.url == "redis://localhost:6379/0"

    def test_overrides(self, tmp_path):
        """测试覆盖参数优先，且不污染缓存"""
        path = tmp_path / "oauth2.yaml"
        path.write_text("token_name: myapp\nis_new_refresh: false\n", encoding="utf-8")

        settings = load_yaml_config(str(path), OAuth2Settings, is_new_refresh=True)
        assert settings.token_name == "myapp"
        assert settings.is_new_refresh is True
        assert ConfigLoader.load(str(path))["is_new_refresh"] is False
