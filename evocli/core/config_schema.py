"""
Configuration Schemas.

Pydantic models defining the expected structure of each YAML config file.
Used by AppConfig to validate configuration at load time. If a YAML file
has unknown keys or wrong types, a clear error is raised at startup instead
of a cryptic KeyError deep in application code.

Every field has a default so the CLI also runs outside a project checkout.

Each top-level class corresponds to one file in config/settings/:
    ApplicationSchema  → application.yaml
    LoggingSchema      → logging.yaml
"""

from pydantic import BaseModel, ConfigDict, Field


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# application.yaml
# =============================================================================


class ApiSchema(_StrictBase):
    base_url: str = "https://app.alice.ws/cli/v1"
    timeout_seconds: float = Field(default=60.0, gt=0)
    enforce_envelope_status: bool = False


class ApplicationSchema(_StrictBase):
    name: str = "evocli"
    version: str = "0.1.0"
    description: str = "Command-line client for the Alice EVO cloud API"
    api: ApiSchema = Field(default_factory=ApiSchema)


# =============================================================================
# logging.yaml
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool = True


class FileHandlerSchema(_StrictBase):
    enabled: bool = False
    path: str = "logs/evocli.jsonl"
    max_bytes: int = 10485760
    backup_count: int = 5


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema = Field(default_factory=ConsoleHandlerSchema)
    file: FileHandlerSchema = Field(default_factory=FileHandlerSchema)


class LoggingSchema(_StrictBase):
    level: str = "WARNING"
    format: str = "console"
    handlers: HandlersSchema = Field(default_factory=HandlersSchema)
