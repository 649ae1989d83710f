"""
Client Session.

Immutable connection settings shared by every API call of one process.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from evocli.core.config import AppConfig, get_app_config, get_settings

DEFAULT_BASE_URL = "https://app.alice.ws/cli/v1"
DEFAULT_TIMEOUT = 60.0


class ClientSession(BaseModel):
    """
    Base URL, bearer token and transport policy for the API client.

    Created once at startup and passed explicitly to the client. Frozen, so
    no call can change the session another call sees.
    """

    base_url: str = DEFAULT_BASE_URL
    token: str = Field(repr=False, min_length=1)
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    enforce_envelope_status: bool = False

    model_config = ConfigDict(frozen=True)

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def auth_header(self) -> str:
        return f"Bearer {self.token}"


def build_session(
    token: str,
    app_config: AppConfig | None = None,
    *,
    enforce_envelope_status: bool | None = None,
) -> ClientSession:
    """
    Build a session from a token and the application configuration.

    Args:
        token: API bearer token.
        app_config: Loaded configuration. Defaults to get_app_config().
            ALICE_API_BASE_URL, when set, wins over api.base_url.
        enforce_envelope_status: Overrides api.enforce_envelope_status when given.
    """
    api = (app_config or get_app_config()).application.api
    base_url = get_settings().alice_api_base_url or api.base_url
    return ClientSession(
        base_url=base_url,
        token=token,
        timeout=api.timeout_seconds,
        enforce_envelope_status=(
            api.enforce_envelope_status if enforce_envelope_status is None
            else enforce_envelope_status
        ),
    )
