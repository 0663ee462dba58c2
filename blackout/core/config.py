"""
Blackout Configuration — loads and merges config from multiple sources.

Precedence (highest to lowest):
1. Explicit overrides (passed in code)
2. Environment variables (BLACKOUT_* and the legacy bot names)
3. Project config (./blackout.toml)
4. User config (~/.blackout/config.toml)
5. Defaults (hardcoded)

Environment variable mapping:
    BLACKOUT_TELEGRAM_TOKEN / TELEGRAM_BOT_TOKEN → telegram.token
    BLACKOUT_TELEGRAM_PROXY / SOCKS5_PROXY       → telegram.proxy
    BLACKOUT_REPORT_ENDPOINT / API_ENDPOINT      → report.endpoint
    BLACKOUT_LANGUAGE / LANGUAGE                 → language
    BLACKOUT_TIMEZONE                            → scheduler.timezone
    BLACKOUT_DB_PATH                             → store.db_path
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator

from blackout.core.errors import ConfigError

DEFAULT_REPORT_ENDPOINT = "https://uiapi2.saapa.ir/api/ebills/PlannedBlackoutsReport"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/136.0.0.0 Safari/537.36"
)
SUPPORTED_LANGUAGES = ("en", "fa")

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Config Sub-Models
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TelegramConfig(BaseModel):
    """Telegram bot transport configuration."""

    token: str = ""
    proxy: str | None = None  # e.g. socks5://127.0.0.1:1080, Telegram traffic only
    api_base: str = "https://api.telegram.org"
    poll_timeout: int = 30  # seconds, getUpdates long-poll

    @property
    def configured(self) -> bool:
        return bool(self.token.strip())


class ReportConfig(BaseModel):
    """Upstream planned-outage report endpoint."""

    endpoint: str = DEFAULT_REPORT_ENDPOINT
    timeout: float = 15.0
    user_agent: str = DEFAULT_USER_AGENT


class SchedulerConfig(BaseModel):
    """Daily trigger configuration."""

    timezone: str = "Asia/Tehran"

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {value!r}") from e
        return value

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


class StoreConfig(BaseModel):
    """Subscriber store configuration."""

    db_path: str = "~/.blackout/bot.db"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Main Config
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class BlackoutConfig(BaseModel):
    """Root configuration for Blackout."""

    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    language: str = "en"
    log_dir: str = "~/.blackout/logs"

    @field_validator("language")
    @classmethod
    def _fallback_language(cls, value: str) -> str:
        # Accepts locale forms such as "fa_IR.UTF-8" or gettext lists like "fa_IR:fa"
        value = re.split(r"[:_.\-@]", value.strip().lower(), maxsplit=1)[0]
        return value if value in SUPPORTED_LANGUAGES else "en"

    @staticmethod
    def load(
        overrides: dict[str, Any] | None = None,
        project_path: Path | None = None,
        user_path: Path | None = None,
    ) -> BlackoutConfig:
        """
        Load configuration from all sources and merge.

        Precedence: overrides > env vars > project toml > user toml > defaults
        """
        merged: dict[str, Any] = {}

        # Layer 1: User config (~/.blackout/config.toml)
        user_config_path = user_path or Path.home() / ".blackout" / "config.toml"
        if user_config_path.exists():
            _deep_merge(merged, _load_toml(user_config_path))

        # Layer 2: Project config (./blackout.toml)
        project_config_path = project_path or Path.cwd() / "blackout.toml"
        if project_config_path.exists():
            _deep_merge(merged, _load_toml(project_config_path))

        # Layer 3: Environment variables
        _deep_merge(merged, _load_from_env())

        # Layer 4: Explicit overrides
        if overrides:
            _deep_merge(merged, overrides)

        _substitute_env_vars(merged)

        try:
            return BlackoutConfig(**merged)
        except Exception as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    def require_token(self) -> str:
        """Return the bot token or raise ConfigError — the bot cannot start without it."""
        if not self.telegram.configured:
            raise ConfigError(
                "Telegram bot token is required. Set TELEGRAM_BOT_TOKEN or "
                "[telegram] token in blackout.toml"
            )
        return self.telegram.token.strip()

    def get_db_path(self) -> Path:
        return Path(self.store.db_path).expanduser()

    def get_log_dir(self) -> Path:
        return Path(self.log_dir).expanduser()


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Internal Helpers
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def _load_toml(path: Path) -> dict[str, Any]:
    """Load a TOML file."""
    try:
        import tomllib
    except ImportError:
        import tomli as tomllib  # type: ignore[no-redef]

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except Exception as e:
        raise ConfigError(f"Failed to load config from {path}: {e}") from e


# Later entries win, so BLACKOUT_* overrides the legacy names.
_ENV_MAPPING: list[tuple[str, tuple[str, ...]]] = [
    ("TELEGRAM_BOT_TOKEN", ("telegram", "token")),
    ("SOCKS5_PROXY", ("telegram", "proxy")),
    ("API_ENDPOINT", ("report", "endpoint")),
    ("LANGUAGE", ("language",)),
    ("BLACKOUT_TELEGRAM_TOKEN", ("telegram", "token")),
    ("BLACKOUT_TELEGRAM_PROXY", ("telegram", "proxy")),
    ("BLACKOUT_TELEGRAM_POLL_TIMEOUT", ("telegram", "poll_timeout")),
    ("BLACKOUT_REPORT_ENDPOINT", ("report", "endpoint")),
    ("BLACKOUT_REPORT_TIMEOUT", ("report", "timeout")),
    ("BLACKOUT_LANGUAGE", ("language",)),
    ("BLACKOUT_TIMEZONE", ("scheduler", "timezone")),
    ("BLACKOUT_DB_PATH", ("store", "db_path")),
    ("BLACKOUT_LOG_DIR", ("log_dir",)),
]

# Values that must stay strings even when they look numeric.
_STRING_KEYS = {
    ("telegram", "token"),
    ("telegram", "proxy"),
    ("report", "endpoint"),
    ("language",),
}


def _load_from_env() -> dict[str, Any]:
    """Load configuration from environment variables."""
    result: dict[str, Any] = {}

    for env_var, path in _ENV_MAPPING:
        value = os.environ.get(env_var)
        if value is None or value == "":
            continue
        target = result
        for key in path[:-1]:
            target = target.setdefault(key, {})
        target[path[-1]] = value if path in _STRING_KEYS else _convert_value(value)

    return result


def _convert_value(value: str) -> Any:
    """Convert string value to appropriate type."""
    if value.lower() in ("true", "yes"):
        return True
    if value.lower() in ("false", "no"):
        return False
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        pass
    return value


def _deep_merge(base: dict, override: dict) -> None:
    """Deep merge override into base (mutates base)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


def _substitute_env_vars(data: dict) -> None:
    """Recursively substitute ${ENV_VAR} patterns in string values."""
    pattern = re.compile(r"\$\{([^}]+)\}")

    for key, value in data.items():
        if isinstance(value, dict):
            _substitute_env_vars(value)
        elif isinstance(value, str):
            for var_name in pattern.findall(value):
                value = value.replace(f"${{{var_name}}}", os.environ.get(var_name, ""))
            data[key] = value
