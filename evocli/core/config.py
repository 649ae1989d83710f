"""
Configuration Management.

Loads secrets from the environment / config/.env and settings from
config/settings/*.yaml.

Secrets (.env or environment):
    ALICE_API_TOKEN      - bearer token ("client_id:secret")
    ALICE_API_BASE_URL   - optional base URL override

Settings (YAML):
    application.yaml   - App identity, API endpoint, timeout, status policy
    logging.yaml       - Logging configuration

The settings directory is EVOCLI_CONFIG_DIR when set, otherwise
config/settings under the project root (marked by .project_root).
When no directory is found the schema defaults apply.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from evocli.core.config_schema import ApplicationSchema, LoggingSchema
from evocli.core.exceptions import ConfigurationError

CONFIG_DIR_ENV = "EVOCLI_CONFIG_DIR"


def find_project_root() -> Path | None:
    """Find project root by looking for .project_root marker file."""
    current = Path.cwd()
    while current != current.parent:
        if (current / ".project_root").exists():
            return current
        current = current.parent
    return None


def find_config_dir() -> Path | None:
    """Resolve the YAML settings directory, or None when there is none."""
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override)

    project_root = find_project_root()
    if project_root is None:
        return None

    config_dir = project_root / "config" / "settings"
    return config_dir if config_dir.is_dir() else None


def load_yaml_config(filename: str) -> dict[str, Any]:
    """
    Load a YAML configuration file from the settings directory.

    Returns an empty mapping when the directory or the file does not exist,
    so that schema defaults take over.
    """
    config_dir = find_config_dir()
    if config_dir is None:
        return {}

    config_path = config_dir / filename
    if not config_path.exists():
        return {}

    with open(config_path) as f:
        try:
            loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigurationError(f"Expected a mapping at the top of {config_path}")
    return loaded


class Settings(BaseSettings):
    """Secrets loaded from the environment and config/.env."""

    alice_api_token: str = ""
    alice_api_base_url: str | None = None

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def _load_validated(schema_cls: type, filename: str) -> Any:
    """Load YAML and validate against schema. Returns typed model instance."""
    raw = load_yaml_config(filename)
    try:
        return schema_cls(**raw)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration in {filename}:\n{e}"
        ) from e


class AppConfig:
    """
    Application configuration loaded from YAML files.

    Each YAML file is validated against its Pydantic schema at load time.
    Properties return typed Pydantic model instances with attribute access.
    """

    def __init__(self) -> None:
        self._application = _load_validated(ApplicationSchema, "application.yaml")
        self._logging = _load_validated(LoggingSchema, "logging.yaml")

    @property
    def application(self) -> ApplicationSchema:
        """Application settings."""
        return self._application

    @property
    def logging(self) -> LoggingSchema:
        """Logging settings."""
        return self._logging


@lru_cache
def get_settings() -> Settings:
    """Get cached secrets instance. Reads config/.env when a project root exists."""
    project_root = find_project_root()
    if project_root is None:
        return Settings()
    env_path = project_root / "config" / ".env"
    return Settings(_env_file=str(env_path))


@lru_cache
def get_app_config() -> AppConfig:
    """Get cached application configuration."""
    return AppConfig()

