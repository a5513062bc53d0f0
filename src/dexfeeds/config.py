"""Application configuration using Pydantic Settings."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dexfeeds.networks import Network

SUPPORTED_DEXES = ("native", "renegade")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Chain the adapters price on
    network: int = Field(
        default=Network.ARBITRUM,
        ge=1,
        description="EVM chain id the adapters serve (default: Arbitrum One)",
    )
    enabled_dexes: list[str] = Field(default_factory=lambda: ["renegade"])

    # Slave instances read caches but never poll upstreams
    is_slave: bool = False

    # DEX Credentials
    native_api_key: str = ""
    renegade_api_key: str = ""
    renegade_api_secret: str = ""

    # Transport
    http_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Timeout applied by the HTTP transport to every upstream call",
    )

    # How often adapters re-read poller-written state (token metadata)
    pool_state_refresh_seconds: float = Field(default=300.0, gt=0)

    # Logging
    log_json: bool = True

    # Database
    database_url: str = ""

    @field_validator("enabled_dexes", mode="before")
    @classmethod
    def validate_enabled_dexes(cls, v):
        """Normalize and validate the list of enabled DEX keys.

        Accepts a list or a comma-separated string ("native,renegade").
        From the environment the list is JSON: ENABLED_DEXES=["native"].

        Raises:
            ValueError: If a key is not a supported DEX
        """
        if isinstance(v, str):
            v = v.split(",")
        keys = [str(key).strip().lower() for key in v if str(key).strip()]
        unknown = [key for key in keys if key not in SUPPORTED_DEXES]
        if unknown:
            raise ValueError(
                f"Unknown DEX keys {unknown}; supported: {', '.join(SUPPORTED_DEXES)}"
            )
        return keys

    def __init__(self, **data):
        """Initialize settings with computed defaults."""
        super().__init__(**data)
        # Use absolute path for database if not overridden
        if not self.database_url:
            db_path = Path(__file__).parent.parent.parent / "dexfeeds.db"
            self.database_url = f"sqlite+aiosqlite:///{db_path}"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


# Module-level singleton instance
_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get application settings instance (singleton pattern)."""
    global _settings_instance
    if _settings_instance is None:
        try:
            _settings_instance = Settings()
        except Exception as e:
            msg = (
                "Failed to initialize settings. "
                "Check NETWORK and ENABLED_DEXES in the environment."
            )
            raise RuntimeError(msg) from e
    return _settings_instance
