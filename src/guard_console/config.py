"""Configuration management for the guard operations console."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from guard_console.utils.http import normalize_base_url

_config_logger = logging.getLogger(__name__)


class LoggingSettings(BaseModel):
    level: str = Field(default="INFO", description="Python logging level name")
    file: str | None = Field(default=None, description="Optional log file path")


class ApiSettings(BaseModel):
    base_url: str = Field(default="http://localhost:8000/api")
    token: str | None = Field(default=None, description="Bearer token sent with every call")
    timeout_seconds: float = Field(default=30.0, ge=0.1, le=300.0)

    @field_validator("base_url")
    @classmethod
    def _validate_base_url(cls, value: str) -> str:
        return normalize_base_url(value)


class ConsoleSettings(BaseModel):
    per_page: int = Field(default=10, ge=1, le=200)
    confirm_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        le=300.0,
        description="How long a mutating command waits for the user to confirm.",
    )
    step_back_on_empty: bool = Field(
        default=False,
        description=(
            "If True, a refresh that lands on an empty page beyond the first "
            "re-fetches the previous page."
        ),
    )


class PolicySettings(BaseModel):
    transitions_path: str = Field(default="./transitions.yaml")


class Settings(BaseModel):
    api: ApiSettings = Field(default_factory=ApiSettings)
    console: ConsoleSettings = Field(default_factory=ConsoleSettings)
    policy: PolicySettings = Field(default_factory=PolicySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


ENV_KEYS = {
    "api_url": "CONSOLE_API_URL",
    "api_token": "CONSOLE_API_TOKEN",
    "api_timeout": "CONSOLE_API_TIMEOUT_SECONDS",
    "per_page": "CONSOLE_PER_PAGE",
    "confirm_timeout": "CONSOLE_CONFIRM_TIMEOUT_SECONDS",
    "step_back_on_empty": "CONSOLE_STEP_BACK_ON_EMPTY",
    "transitions_path": "TRANSITIONS_PATH",
    "log_level": "LOG_LEVEL",
    "log_file": "LOG_FILE",
}

_TRUE_VALUES = frozenset({"1", "true", "yes"})


def _project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _resolve_path(path: str) -> str:
    candidate = Path(path)
    root = _project_root().resolve()
    if candidate.is_absolute():
        resolved = candidate.resolve()
    else:
        resolved = (root / candidate).resolve()
    if not resolved.is_relative_to(root):
        raise ValueError(f"Path traversal detected: '{path}' resolves outside project root")
    return str(resolved)


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        _config_logger.warning(
            "Invalid integer value for %s: %r, using default %d", key, value, default
        )
        return default


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        _config_logger.warning(
            "Invalid float value for %s: %r, using default %s", key, value, default
        )
        return default


def load_settings() -> Settings:
    """Load configuration and cache the result."""

    return _load_settings_cached()


@lru_cache(maxsize=1)
def _load_settings_cached() -> Settings:
    load_dotenv(dotenv_path=_project_root() / ".env")
    log_file_env = os.getenv(ENV_KEYS["log_file"])

    settings_data: dict[str, object] = {
        "api": {
            "base_url": os.getenv(ENV_KEYS["api_url"], ApiSettings().base_url),
            "token": os.getenv(ENV_KEYS["api_token"], "").strip() or None,
            "timeout_seconds": _env_float(
                ENV_KEYS["api_timeout"],
                ApiSettings().timeout_seconds,
            ),
        },
        "console": {
            "per_page": _env_int(ENV_KEYS["per_page"], ConsoleSettings().per_page),
            "confirm_timeout_seconds": _env_float(
                ENV_KEYS["confirm_timeout"],
                ConsoleSettings().confirm_timeout_seconds,
            ),
            "step_back_on_empty": _env_bool(
                ENV_KEYS["step_back_on_empty"],
                ConsoleSettings().step_back_on_empty,
            ),
        },
        "policy": {
            "transitions_path": _resolve_path(
                os.getenv(ENV_KEYS["transitions_path"], PolicySettings().transitions_path)
            ),
        },
        "logging": {
            "level": os.getenv(ENV_KEYS["log_level"], LoggingSettings().level),
            "file": _resolve_path(log_file_env) if log_file_env else None,
        },
    }

    try:
        return Settings.model_validate(settings_data)
    except ValidationError as exc:
        raise RuntimeError(f"Invalid configuration: {exc}") from exc
