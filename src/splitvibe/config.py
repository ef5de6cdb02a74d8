"""Configuration management for SplitVibe."""

from decimal import Decimal
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SPLITVIBE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Ledger currency (single currency, no FX)
    currency: str = Field(default="USD", min_length=1, max_length=10)

    # Allowed drift when percentages are checked against 100
    percentage_tolerance: Decimal = Field(default=Decimal("0.001"), ge=0)

    # Balances within this distance of zero are treated as settled
    settled_epsilon: Decimal = Field(default=Decimal("0.001"), gt=0)

    # Settlements can be soft-deleted for this long after creation
    settlement_deletion_window_hours: int = Field(default=24, ge=0)

    # Ledger snapshot read by the CLI
    ledger_path: Path = Path("ledger.json")


def load_settings(**overrides) -> Settings:
    """Load application settings from environment variables."""
    try:
        return Settings(**overrides)
    except Exception as e:
        raise ConfigurationError(
            f"Failed to load settings. Check the SPLITVIBE_* environment "
            f"variables and your .env file.\n"
            f"Error: {e}"
        ) from e
