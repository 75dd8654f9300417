from typing import Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import InvalidInputError

DEFAULT_BASE_URL = "https://api.vortexsoftware.com/api/v1"
DEFAULT_TIMEOUT = 30.0


class VortexSettings(BaseSettings):
    """
    Settings for the Vortex client and webhook verifier.

    Environment variables: VORTEX_API_KEY (required), VORTEX_BASE_URL,
    VORTEX_WEBHOOK_SECRET and VORTEX_TIMEOUT.
    """

    model_config = SettingsConfigDict(
        env_prefix="VORTEX_",
        case_sensitive=False,
        extra="ignore",
    )

    api_key: str = Field(min_length=1, repr=False)
    base_url: str = DEFAULT_BASE_URL
    webhook_secret: Optional[str] = Field(default=None, repr=False)
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls) -> "VortexSettings":
        """Load settings from the environment, raising InvalidInputError when invalid."""
        try:
            return cls()
        except ValidationError as e:
            raise InvalidInputError(f"Invalid Vortex settings (VORTEX_API_KEY, VORTEX_TIMEOUT, ...): {e}") from e
