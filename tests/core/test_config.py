"""Tests for the Config system."""

import pytest
from pathlib import Path

from blackout.core.config import (
    DEFAULT_REPORT_ENDPOINT,
    BlackoutConfig,
    _convert_value,
    _deep_merge,
    _ENV_MAPPING,
    _substitute_env_vars,
)
from blackout.core.errors import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate every test from the caller's environment and home directory."""
    for env_var, _ in _ENV_MAPPING:
        monkeypatch.delenv(env_var, raising=False)
    monkeypatch.setattr(Path, "home", lambda: tmp_path)
    monkeypatch.chdir(tmp_path)


def test_default_config():
    """Default config has sensible values."""
    config = BlackoutConfig()

    assert config.telegram.token == ""
    assert config.telegram.proxy is None
    assert config.telegram.poll_timeout == 30
    assert config.report.endpoint == DEFAULT_REPORT_ENDPOINT
    assert config.scheduler.timezone == "Asia/Tehran"
    assert config.language == "en"
    assert config.get_db_path() == Path("~/.blackout/bot.db").expanduser()


def test_legacy_env_names(monkeypatch):
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123456:ABC")
    monkeypatch.setenv("SOCKS5_PROXY", "socks5://127.0.0.1:1080")
    monkeypatch.setenv("API_ENDPOINT", "https://example.test/report")
    monkeypatch.setenv("LANGUAGE", "fa")

    config = BlackoutConfig.load()

    assert config.telegram.token == "123456:ABC"
    assert config.telegram.proxy == "socks5://127.0.0.1:1080"
    assert config.report.endpoint == "https://example.test/report"
    assert config.language == "fa"


def test_prefixed_env_wins_over_legacy(monkeypatch):
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "legacy")
    monkeypatch.setenv("BLACKOUT_TELEGRAM_TOKEN", "preferred")
    assert BlackoutConfig.load().telegram.token == "preferred"


def test_numeric_token_stays_string(monkeypatch):
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123456")
    assert BlackoutConfig.load().telegram.token == "123456"


def test_numeric_env_values(monkeypatch):
    monkeypatch.setenv("BLACKOUT_TELEGRAM_POLL_TIMEOUT", "50")
    monkeypatch.setenv("BLACKOUT_REPORT_TIMEOUT", "7.5")
    config = BlackoutConfig.load()
    assert config.telegram.poll_timeout == 50
    assert config.report.timeout == 7.5


def test_project_toml_over_user_toml(tmp_path):
    user = tmp_path / "user.toml"
    user.write_text('language = "fa"\n[scheduler]\ntimezone = "Asia/Dubai"\n')
    project = tmp_path / "blackout.toml"
    project.write_text('[scheduler]\ntimezone = "UTC"\n')

    config = BlackoutConfig.load(project_path=project, user_path=user)

    assert config.scheduler.timezone == "UTC"
    assert config.language == "fa"


def test_env_over_toml(monkeypatch, tmp_path):
    project = tmp_path / "blackout.toml"
    project.write_text('[telegram]\ntoken = "from-file"\n')
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "from-env")
    assert BlackoutConfig.load(project_path=project).telegram.token == "from-env"


def test_load_with_overrides(monkeypatch):
    """Explicit overrides take highest precedence."""
    monkeypatch.setenv("BLACKOUT_LANGUAGE", "fa")
    config = BlackoutConfig.load(overrides={"language": "en", "store": {"db_path": "/tmp/x.db"}})
    assert config.language == "en"
    assert config.get_db_path() == Path("/tmp/x.db")


def test_toml_env_substitution(monkeypatch, tmp_path):
    project = tmp_path / "blackout.toml"
    project.write_text('[telegram]\ntoken = "${MY_BOT_TOKEN}"\n')
    monkeypatch.setenv("MY_BOT_TOKEN", "substituted")
    assert BlackoutConfig.load(project_path=project).telegram.token == "substituted"


def test_unsupported_language_falls_back():
    assert BlackoutConfig(language="DE").language == "en"
    assert BlackoutConfig(language=" FA ").language == "fa"


@pytest.mark.parametrize(
    "value,expected",
    [("fa_IR:fa", "fa"), ("fa_IR.UTF-8", "fa"), ("en_US:en", "en"), ("no", "en"), ("123", "en")],
)
def test_system_language_variable(monkeypatch, value, expected):
    """The gettext LANGUAGE variable is matched on its language prefix and never type-converted."""
    monkeypatch.setenv("LANGUAGE", value)
    assert BlackoutConfig.load().language == expected


def test_unknown_timezone_is_config_error():
    with pytest.raises(ConfigError):
        BlackoutConfig.load(overrides={"scheduler": {"timezone": "Mars/Olympus"}})


def test_broken_toml_is_config_error(tmp_path):
    project = tmp_path / "blackout.toml"
    project.write_text("[telegram\ntoken = ")
    with pytest.raises(ConfigError):
        BlackoutConfig.load(project_path=project)


def test_require_token():
    with pytest.raises(ConfigError):
        BlackoutConfig().require_token()
    config = BlackoutConfig.load(overrides={"telegram": {"token": "  abc  "}})
    assert config.require_token() == "abc"


def test_deep_merge():
    base = {"a": 1, "nested": {"x": 1, "y": 2}}
    _deep_merge(base, {"b": 2, "nested": {"y": 3}})
    assert base == {"a": 1, "b": 2, "nested": {"x": 1, "y": 3}}


def test_substitute_missing_var_is_empty(monkeypatch):
    monkeypatch.delenv("NOT_SET_ANYWHERE", raising=False)
    data = {"key": "pre-${NOT_SET_ANYWHERE}-post"}
    _substitute_env_vars(data)
    assert data["key"] == "pre--post"


def test_convert_value():
    assert _convert_value("true") is True
    assert _convert_value("No") is False
    assert _convert_value("42") == 42
    assert _convert_value("1.5") == 1.5
    assert _convert_value("socks5://host") == "socks5://host"
