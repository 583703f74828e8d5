"""
Workdeck Planner Configuration — Load and validate workdeck.yaml at startup.

Usage:
    from workdeck_planner.engine.config import load_config, get_config

Environment overrides (applied after the file):
    WORKDECK_BASE_URL  → api.base_url
    WORKDECK_ENV       → environment
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from workdeck_planner.engine.errors import ConfigError

DEFAULT_BASE_URL = "https://test-api.workdeck.com"
TOKEN_STORAGE_KEY = "workdeck_token"
CONFIG_FILENAME = "workdeck.yaml"


class ApiConfig(BaseModel):
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
    connect_timeout: float = 10.0

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must start with http:// or https://, got '{v}'")
        return v.rstrip("/")


class TokenStorageConfig(BaseModel):
    key: str = TOKEN_STORAGE_KEY
    path: str = "~/.workdeck/storage.json"

    @property
    def resolved_path(self) -> Path:
        return Path(self.path).expanduser()


class LoggingConfig(BaseModel):
    level: str = "INFO"
    enabled: bool = True
    directory: str = ".workdeck/logs"

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level '{v}'")
        return v


class PlannerConfig(BaseModel):
    """Root model for workdeck.yaml."""
    name: str = "Workdeck Resource Planner"
    environment: str = "dev"

    api: ApiConfig = ApiConfig()
    token: TokenStorageConfig = TokenStorageConfig()
    logging: LoggingConfig = LoggingConfig()

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        if v not in ("dev", "staging", "prod"):
            raise ValueError(f"environment must be dev/staging/prod, got '{v}'")
        return v


# ---------------------------------------------------------------------------
# Config Loading Functions
# ---------------------------------------------------------------------------

_config: Optional[PlannerConfig] = None


def _find_config_file() -> Path:
    """Walk up from CWD looking for workdeck.yaml."""
    current = Path.cwd()
    for parent in [current, *current.parents]:
        if (parent / CONFIG_FILENAME).exists():
            return parent / CONFIG_FILENAME
    return current / CONFIG_FILENAME


def load_config(config_path: Optional[str] = None) -> PlannerConfig:
    """
    Load and validate workdeck.yaml.

    Args:
        config_path: Explicit path to the file. If None, auto-discovers.

    Returns:
        Validated PlannerConfig instance (defaults when the file is absent).

    Raises:
        ConfigError: if the file or an override holds an invalid value.
    """
    global _config

    path = Path(config_path) if config_path else _find_config_file()

    raw: dict = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            try:
                raw = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {path}: {e}", path=str(path)) from e
        if not isinstance(raw, dict):
            raise ConfigError(f"Config root must be a mapping: {path}", path=str(path))

    # Optional top-level "planner:" wrapper
    data = raw.get("planner", raw)
    if not isinstance(data, dict):
        raise ConfigError(f"'planner' section must be a mapping: {path}", path=str(path))
    data = dict(data)

    base_url = os.environ.get("WORKDECK_BASE_URL")
    if base_url:
        data["api"] = {**(data.get("api") or {}), "base_url": base_url}
    env = os.environ.get("WORKDECK_ENV")
    if env:
        data["environment"] = env

    try:
        _config = PlannerConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}", path=str(path)) from e
    return _config


def get_config() -> PlannerConfig:
    """Get the currently loaded config, loading if necessary."""
    global _config
    if _config is None:
        _config = load_config()
    return _config
