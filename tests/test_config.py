"""
Layered configuration loading.
"""

import json

import pytest

from authguard.config import ConfigLoader, GuardConfig
from authguard.cookies import FOREVER_MINUTES
from authguard.faults import ConfigFault, ConfigInvalidFault


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    import os

    for key in list(os.environ):
        if key.startswith("AUTHGUARD_"):
            monkeypatch.delenv(key, raising=False)


class TestConfigLoader:

    def test_defaults(self):
        config = ConfigLoader.load().get_guard_config()

        assert config["name"] is None
        assert config["secret_key"] is None
        assert config["cookie"]["samesite"] == "lax"
        assert config["remember_minutes"] == FOREVER_MINUTES

    def test_json_file(self, tmp_path):
        path = tmp_path / "auth.json"
        path.write_text(json.dumps({"guard": {"name": "web", "cookie": {"secure": True}}}))

        config = ConfigLoader.load(paths=[str(path)]).get_guard_config()

        assert config["name"] == "web"
        assert config["cookie"]["secure"] is True
        assert config["cookie"]["httponly"] is True

    def test_missing_json_file_is_skipped(self, tmp_path):
        loader = ConfigLoader.load(paths=[str(tmp_path / "missing.json")])
        assert loader.to_dict() == {}

    def test_env_file(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text(
            "AUTHGUARD_GUARD__SECRET_KEY=from-dotenv\n"
            "AUTHGUARD_GUARD__REMEMBER_MINUTES=60\n"
            "UNRELATED=ignored\n"
        )

        loader = ConfigLoader.load(env_file=str(env))

        assert loader.get("guard.secret_key") == "from-dotenv"
        assert loader.get("guard.remember_minutes") == 60
        assert loader.get("unrelated") is None

    def test_environment_overrides_env_file(self, tmp_path, monkeypatch):
        env = tmp_path / ".env"
        env.write_text("AUTHGUARD_GUARD__SECRET_KEY=from-dotenv\n")
        monkeypatch.setenv("AUTHGUARD_GUARD__SECRET_KEY", "from-environ")

        loader = ConfigLoader.load(env_file=str(env))
        assert loader.get("guard.secret_key") == "from-environ"

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("AUTHGUARD_GUARD__NAME", "env")
        loader = ConfigLoader.load(overrides={"guard": {"name": "override"}})
        assert loader.get("guard.name") == "override"

    def test_value_parsing(self, monkeypatch):
        monkeypatch.setenv("AUTHGUARD_GUARD__COOKIE__SECURE", "true")
        monkeypatch.setenv("AUTHGUARD_GUARD__COOKIE__HTTPONLY", "no")
        monkeypatch.setenv("AUTHGUARD_EXTRA__RATIO", "0.5")
        monkeypatch.setenv("AUTHGUARD_EXTRA__LIST", "[1, 2]")

        loader = ConfigLoader.load()

        assert loader.get("guard.cookie.secure") is True
        assert loader.get("guard.cookie.httponly") is False
        assert loader.get("extra.ratio") == 0.5
        assert loader.get("extra.list") == [1, 2]

    def test_get_default(self):
        assert ConfigLoader.load().get("guard.nothing", "fallback") == "fallback"

    def test_custom_prefix(self, monkeypatch):
        monkeypatch.setenv("MYAPP_GUARD__NAME", "custom")
        assert ConfigLoader.load(env_prefix="MYAPP_").get("guard.name") == "custom"


class TestGuardConfig:

    def test_from_defaults(self):
        config = GuardConfig.from_dict(ConfigLoader.load().get_guard_config())

        assert config.secret_key is None
        assert config.cookie.path == "/"
        assert config.remember_minutes == FOREVER_MINUTES

    def test_numeric_secret_is_stringified(self):
        assert GuardConfig.from_dict({"secret_key": 12345}).secret_key == "12345"

    def test_samesite_normalised(self):
        assert GuardConfig.from_dict({"cookie": {"samesite": "Strict"}}).cookie.samesite == "strict"

    def test_invalid_samesite(self):
        with pytest.raises(ConfigInvalidFault) as exc_info:
            GuardConfig.from_dict({"cookie": {"samesite": "sometimes"}})
        assert exc_info.value.metadata["key"] == "guard.cookie.samesite"

    def test_invalid_lifetime(self):
        with pytest.raises(ConfigFault):
            GuardConfig.from_dict({"remember_minutes": 0})

    def test_unknown_cookie_key(self):
        with pytest.raises(ConfigInvalidFault):
            GuardConfig.from_dict({"cookie": {"colour": "blue"}})

    def test_string_keys_kept_verbatim(self, monkeypatch):
        monkeypatch.setenv("AUTHGUARD_GUARD__NAME", "1234")
        monkeypatch.setenv("AUTHGUARD_GUARD__SECRET_KEY", "007")
        monkeypatch.setenv("AUTHGUARD_GUARD__COOKIE__DOMAIN", "yes")

        loader = ConfigLoader.load()

        assert loader.get("guard.name") == "1234"
        assert loader.get("guard.secret_key") == "007"
        assert loader.get("guard.cookie.domain") == "yes"

    def test_string_keys_from_env_file(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text("AUTHGUARD_GUARD__SECRET_KEY=true\n")

        assert ConfigLoader.load(env_file=str(env)).get("guard.secret_key") == "true"

    def test_numeric_name_is_stringified(self):
        assert GuardConfig.from_dict({"name": 1234}).name == "1234"
        assert GuardConfig.from_dict({"name": 0}).name == "0"
