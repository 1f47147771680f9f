"""Configuration loading, validation, and access."""

from __future__ import annotations

import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from goldpulse.core.exceptions import ConfigError

# Flat variable names used by earlier deployments, mapped onto nested keys.
# Applied last, so they win over GOLDPULSE_* variables.
_LEGACY_ENV_KEYS: dict[str, tuple[str, ...]] = {
    "GOLD_API_TOKEN": ("sources", "world", "api_token"),
    "DOJI_API_KEY": ("sources", "doji", "api_key"),
    "BTMC_API_KEY": ("sources", "btmc", "api_key"),
    "TELEGRAM_BOT_TOKEN": ("telegram", "bot_token"),
    "TELEGRAM_CHAT_ID": ("telegram", "chat_id"),
}

SECRET_FIELDS = frozenset({"api_token", "api_key", "bot_token"})

# Opaque identifiers: env values for these stay exactly as written
_VERBATIM_FIELDS = SECRET_FIELDS | {"chat_id"}


def _credential(v: object) -> str:
    # YAML loads all-digit tokens and chat ids as int
    if isinstance(v, int) and not isinstance(v, bool):
        v = str(v)
    if not isinstance(v, str):
        raise ValueError("must be a string")
    if not v.strip():
        raise ValueError("must not be empty")
    return v.strip()


class WorldSourceConfig(BaseModel):
    """goldapi.io access for the world spot price."""

    model_config = ConfigDict(frozen=True)

    api_token: str
    url: str = "https://www.goldapi.io/api/XAU/USD"

    @field_validator("api_token", mode="before")
    @classmethod
    def token_present(cls, v: object) -> str:
        return _credential(v)


class DojiSourceConfig(BaseModel):
    """DOJI XML price feed."""

    model_config = ConfigDict(frozen=True)

    api_key: str
    url: str = "http://giavang.doji.vn/api/giavang/"

    @field_validator("api_key", mode="before")
    @classmethod
    def key_present(cls, v: object) -> str:
        return _credential(v)


class BtmcSourceConfig(BaseModel):
    """Bao Tin Minh Chau JSON price feed."""

    model_config = ConfigDict(frozen=True)

    api_key: str
    url: str = "http://api.btmc.vn/api/BTMCAPI/getpricebtmc"

    @field_validator("api_key", mode="before")
    @classmethod
    def key_present(cls, v: object) -> str:
        return _credential(v)


class SourcesConfig(BaseModel):
    """Credentials and endpoints for the three price sources."""

    model_config = ConfigDict(frozen=True)

    world: WorldSourceConfig
    doji: DojiSourceConfig
    btmc: BtmcSourceConfig


class TelegramConfig(BaseModel):
    """Telegram Bot API delivery target."""

    model_config = ConfigDict(frozen=True)

    bot_token: str
    chat_id: str
    api_base: str = "https://api.telegram.org"

    @field_validator("bot_token", "chat_id", mode="before")
    @classmethod
    def credentials_present(cls, v: object) -> str:
        return _credential(v)


class ScheduleConfig(BaseModel):
    """Recurring trigger settings."""

    model_config = ConfigDict(frozen=True)

    interval_minutes: int = 10
    run_on_start: bool = False

    @field_validator("interval_minutes")
    @classmethod
    def interval_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("interval_minutes must be >= 1")
        return v


class HttpConfig(BaseModel):
    """Outbound HTTP settings shared by all sources and the notifier."""

    model_config = ConfigDict(frozen=True)

    timeout_seconds: float = 20.0
    user_agent: str = "goldpulse/0.1"

    @field_validator("timeout_seconds")
    @classmethod
    def timeout_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout_seconds must be > 0")
        return v


class ReportConfig(BaseModel):
    """Report rendering settings."""

    model_config = ConfigDict(frozen=True)

    timezone: str = "Asia/Ho_Chi_Minh"

    @field_validator("timezone")
    @classmethod
    def timezone_known(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"unknown timezone: {v!r}") from e
        return v


class GoldPulseConfig(BaseModel):
    """Root configuration for goldpulse."""

    model_config = ConfigDict(frozen=True)

    sources: SourcesConfig
    telegram: TelegramConfig
    schedule: ScheduleConfig = ScheduleConfig()
    http: HttpConfig = HttpConfig()
    report: ReportConfig = ReportConfig()


def load_config(
    config_path: str | None = None,
    env_prefix: str = "GOLDPULSE_",
) -> GoldPulseConfig:
    """Load configuration from environment + YAML file + defaults.

    Resolution order (highest priority first):
    1. Legacy flat variables (GOLD_API_TOKEN, TELEGRAM_CHAT_ID, ...)
    2. Environment variables (GOLDPULSE_SOURCES__DOJI__API_KEY, etc.)
    3. YAML file at config_path
    4. Built-in defaults

    Nested keys use double-underscore in env vars:
        GOLDPULSE_SCHEDULE__INTERVAL_MINUTES=5  ->  schedule.interval_minutes = 5

    Raises:
        ConfigError: on a missing credential or any invalid value. The
            offending dotted field path is in ``context["field"]``.
    """
    try:
        yaml_path = _resolve_config_path(config_path)
        base: dict = {}
        if yaml_path is not None:
            base = _load_yaml(yaml_path)

        merged = _merge_env_vars(base, env_prefix)
        merged = _merge_legacy_env_vars(merged)
        return GoldPulseConfig.model_validate(merged)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise ConfigError(
            f"Invalid configuration for {field}: {first['msg']}",
            context={"field": field, "errors": e.error_count()},
        ) from e
    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(str(e), context={"source": "load_config"}) from e


def redacted(config: GoldPulseConfig) -> dict:
    """Return the config as a dict with credentials masked."""

    def _mask(node: object) -> object:
        if isinstance(node, dict):
            return {
                k: ("***" if k in SECRET_FIELDS and v else _mask(v))
                for k, v in node.items()
            }
        return node

    return _mask(config.model_dump())  # type: ignore[return-value]


def _resolve_config_path(explicit: str | None) -> Path | None:
    """Determine config file path."""
    if explicit is not None:
        p = Path(explicit)
        if not p.exists():
            raise ConfigError(
                f"Config file not found: {explicit}",
                context={"field": "config_path", "value": explicit},
            )
        return p

    env_path = os.environ.get("GOLDPULSE_CONFIG")
    if env_path:
        p = Path(env_path)
        if not p.exists():
            raise ConfigError(
                f"Config file from GOLDPULSE_CONFIG not found: {env_path}",
                context={"field": "GOLDPULSE_CONFIG", "value": env_path},
            )
        return p

    default = Path("goldpulse.yml")
    if default.exists():
        return default

    return None


def _load_yaml(path: Path) -> dict:
    """Load and parse YAML file."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(
                f"YAML config must be a mapping, got {type(data).__name__}",
                context={"field": "config_file", "value": str(path)},
            )
        return data
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Failed to parse YAML config: {e}",
            context={"field": "config_file", "value": str(path)},
        ) from e


def _set_nested(target: dict, parts: tuple[str, ...] | list[str], value: object) -> None:
    for part in parts[:-1]:
        child = target.get(part)
        if not isinstance(child, dict):
            child = {}
            target[part] = child
        target = child
    target[parts[-1]] = value


def _merge_env_vars(base: dict, prefix: str) -> dict:
    """Overlay environment variables onto base config dict.

    Double-underscore separates nesting levels.
    Values are auto-cast: "true"/"false" -> bool, numeric strings -> int.
    Credentials and chat ids are never cast.
    """
    result = _copy_tree(base)

    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue

        remainder = key[len(prefix) :]
        parts = [p.lower() for p in remainder.split("__")]

        # Skip the CONFIG env var itself
        if parts == ["config"]:
            continue

        if parts[-1] not in _VERBATIM_FIELDS:
            value = _auto_cast(value)
        _set_nested(result, parts, value)

    return result


def _merge_legacy_env_vars(base: dict) -> dict:
    """Overlay the flat legacy variables. Values are kept as raw strings."""
    result = _copy_tree(base)
    for env_key, path in _LEGACY_ENV_KEYS.items():
        value = os.environ.get(env_key)
        if value:
            _set_nested(result, path, value)
    return result


def _copy_tree(node: dict) -> dict:
    return {k: _copy_tree(v) if isinstance(v, dict) else v for k, v in node.items()}


def _auto_cast(value: str) -> str | int | float | bool:
    """Auto-cast string values from environment variables."""
    if value.lower() == "true":
        return True
    if value.lower() == "false":
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
