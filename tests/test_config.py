"""Tests for AppConfig and environment loading."""

import pytest

from roost.config import AppConfig
from roost.errors import ConfigurationError


class TestDefaults:
    def test_defaults(self) -> None:
        config = AppConfig()
        assert config.host == "127.0.0.1"
        assert config.port == 8000
        assert config.debug is False
        assert config.secret_key == ""
        assert config.session_ttl == 3600
        assert config.session_cookie == "roost_session"

    def test_frozen(self) -> None:
        with pytest.raises(AttributeError):
            AppConfig().debug = True  # type: ignore[misc]


class TestFromEnv:
    def test_environ(self, tmp_path) -> None:
        config = AppConfig.from_env(
            tmp_path / "missing.env",
            environ={"ROOST_PORT": "9000", "ROOST_DEBUG": "yes", "ROOST_SECRET_KEY": "k"},
        )
        assert config.port == 9000
        assert config.debug is True
        assert config.secret_key == "k"

    def test_dotenv_file(self, tmp_path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("ROOST_SESSION_TTL=60\nROOST_HOST=0.0.0.0\n")
        config = AppConfig.from_env(env_file, environ={})
        assert config.session_ttl == 60
        assert config.host == "0.0.0.0"

    def test_environment_beats_file(self, tmp_path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("ROOST_PORT=1000\n")
        config = AppConfig.from_env(env_file, environ={"ROOST_PORT": "2000"})
        assert config.port == 2000

    def test_overrides_win(self, tmp_path) -> None:
        config = AppConfig.from_env(None, environ={"ROOST_PORT": "2000"}, port=3000)
        assert config.port == 3000

    def test_unprefixed_ignored(self) -> None:
        assert AppConfig.from_env(None, environ={"PORT": "1"}).port == 8000

    def test_bad_integer(self) -> None:
        with pytest.raises(ConfigurationError, match="ROOST_PORT must be an integer"):
            AppConfig.from_env(None, environ={"ROOST_PORT": "eighty"})

    def test_bad_boolean(self) -> None:
        with pytest.raises(ConfigurationError, match="ROOST_DEBUG must be a boolean"):
            AppConfig.from_env(None, environ={"ROOST_DEBUG": "maybe"})

    def test_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ROOST_ROOT_PATH", "/portal")
        assert AppConfig.from_env(None).root_path == "/portal"
