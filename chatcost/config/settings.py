"""Configuration management for ChatCost."""

import os
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from chatcost.core.provider import ProviderIdentity


class Settings(BaseSettings):
    """Configuration settings for ChatCost."""

    model_config = SettingsConfigDict(
        env_prefix="CHATCOST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Session defaults
    default_provider: ProviderIdentity = Field(
        default=ProviderIdentity.GOOGLE,
        description="Provider selected when a session starts: openai, google, anthropic or custom"
    )
    temperature: float = Field(
        default=0.7,
        description="Sampling temperature sent with every request"
    )
    request_timeout: Optional[float] = Field(
        default=None,
        description="HTTP timeout in seconds (None = no timeout)"
    )

    # Token estimation settings
    token_estimation_mode: str = Field(
        default="heuristic",
        description="Token estimation mode: 'heuristic' or 'tiktoken'"
    )

    # Storage settings
    database_path: str = Field(
        default="chatcost.db",
        description="Path to SQLite database file (prompt library and exchange ledger)"
    )
    pricing_file_path: Optional[str] = Field(
        default=None,
        description="Path to pricing JSON file (None = use default)"
    )

    # OpenAI
    openai_api_key: Optional[str] = Field(
        default=None,
        description="OpenAI API key",
        validation_alias=AliasChoices("CHATCOST_OPENAI_API_KEY", "OPENAI_API_KEY"),
    )
    openai_model: Optional[str] = Field(default=None, description="OpenAI model override")
    openai_base_url: Optional[str] = Field(default=None, description="OpenAI base URL override")

    # Google (Gemini)
    google_api_key: Optional[str] = Field(
        default=None,
        description="Google generative-language API key",
        validation_alias=AliasChoices("CHATCOST_GOOGLE_API_KEY", "GEMINI_API_KEY", "GOOGLE_API_KEY"),
    )
    google_model: Optional[str] = Field(default=None, description="Gemini model override")
    google_base_url: Optional[str] = Field(default=None, description="Gemini base URL override")

    # Anthropic (Claude)
    anthropic_api_key: Optional[str] = Field(
        default=None,
        description="Anthropic API key for Claude",
        validation_alias=AliasChoices("CHATCOST_ANTHROPIC_API_KEY", "ANTHROPIC_API_KEY"),
    )
    anthropic_model: Optional[str] = Field(default=None, description="Claude model override")
    anthropic_base_url: Optional[str] = Field(default=None, description="Anthropic base URL override")

    # Custom OpenAI-compatible endpoint
    custom_api_key: Optional[str] = Field(default=None, description="API key for the custom endpoint")
    custom_model: Optional[str] = Field(default=None, description="Model id for the custom endpoint")
    custom_base_url: Optional[str] = Field(default=None, description="Base URL for the custom endpoint")

    @field_validator("default_provider", mode="before")
    @classmethod
    def normalize_default_provider(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    def __init__(self, **kwargs):
        """Initialize settings with environment variable support."""
        super().__init__(**kwargs)

        # Expand ~ in database path
        if self.database_path.startswith("~"):
            self.database_path = str(Path(self.database_path).expanduser())

    @classmethod
    def load_from_file(cls, config_file: str) -> "Settings":
        """Load settings from a YAML config file.

        Args:
            config_file: Path to YAML config file

        Returns:
            Settings instance
        """
        import yaml

        with open(config_file, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}

        return cls(**config_data)

    def get_database_path(self) -> Path:
        """Get the database path as a Path object, creating its parent directory."""
        path = Path(self.database_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    def get_api_key(self, provider: str) -> Optional[str]:
        """Get the API key configured for a provider ("openai", "google", ...)."""
        return getattr(self, f"{provider}_api_key", None) or None

    def get_model(self, provider: str) -> Optional[str]:
        """Get the model override configured for a provider."""
        return getattr(self, f"{provider}_model", None) or None

    def get_base_url(self, provider: str) -> Optional[str]:
        """Get the base URL override configured for a provider."""
        return getattr(self, f"{provider}_base_url", None) or os.getenv(
            f"{provider.upper()}_BASE_URL"
        ) or None
