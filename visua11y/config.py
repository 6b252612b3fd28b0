"""
Configuration module for the Visua11y accessibility engine.

Uses Pydantic Settings to load configuration from .env file.
All environment variables are validated and type-checked, and every field
has a default so the package imports cleanly without a .env file.
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """
    Application configuration loaded from environment variables.

    Environment variables are automatically loaded from .env file.
    All settings are validated using Pydantic.
    """

    # ============ OPENAI API ============
    OPENAI_API_URL: str = Field(
        default="https://api.openai.com/v1/chat/completions",
        description="OpenAI chat completions endpoint"
    )
    OPENAI_MODEL: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model for summaries, digests and screenshot analysis"
    )

    # ============ GEMINI API ============
    GEMINI_API_BASE: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Base URL of the Gemini generative language API"
    )
    GEMINI_TEXT_MODEL: str = Field(
        default="models/gemini-1.5-flash-latest",
        description="Gemini model for text operations"
    )
    GEMINI_VISION_MODEL: str = Field(
        default="models/gemini-1.5-flash-latest",
        description="Gemini multimodal model for screenshot analysis"
    )

    # ============ ON-DEVICE SUMMARIZER ============
    ON_DEVICE_ENABLED: bool = Field(
        default=True,
        description="Try the local summarizer before any cloud provider"
    )
    OLLAMA_BASE_URL: str = Field(
        default="http://localhost:11434",
        description="Base URL of the local Ollama server"
    )
    ON_DEVICE_MODEL: str = Field(
        default="gemma2:2b",
        description="Local model used for on-device summaries"
    )
    ON_DEVICE_AWAIT_DOWNLOAD: bool = Field(
        default=False,
        description="Pull a missing local model before summarizing instead of skipping it"
    )
    ON_DEVICE_MAX_TOKENS: int = Field(
        default=1024,
        description="Max tokens generated by the local summarizer"
    )
    ON_DEVICE_DOWNLOAD_TIMEOUT_SEC: float = Field(
        default=1800.0,
        description="Timeout for pulling a missing local model in seconds"
    )

    # ============ CREDENTIALS ============
    CREDENTIAL_STORE_PATH: str = Field(
        default=str(Path.home() / ".visua11y" / "credentials.json"),
        description="JSON file holding the configured API keys"
    )

    # ============ LIMITS ============
    PROVIDER_TIMEOUT_SEC: float = Field(
        default=30.0,
        description="Timeout for a single provider request in seconds"
    )
    PAGE_CONTENT_MAX_CHARS: int = Field(
        default=8000,
        description="Body text budget for page digests before truncation"
    )

    # ============ APPLICATION ============
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    ENVIRONMENT: str = Field(
        default="production",
        description="Environment name (development, staging, production)"
    )
    API_HOST: str = Field(
        default="127.0.0.1",
        description="Bind address for the message channel HTTP server"
    )
    API_PORT: int = Field(
        default=8765,
        description="Port for the message channel HTTP server"
    )

    # Pydantic settings configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # ============ VALIDATORS ============

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        allowed_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in allowed_levels:
            raise ValueError(
                f"LOG_LEVEL must be one of {allowed_levels}, got {v}"
            )
        return v_upper

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is one of the allowed values."""
        allowed_envs = {"development", "staging", "production"}
        v_lower = v.lower()
        if v_lower not in allowed_envs:
            raise ValueError(
                f"ENVIRONMENT must be one of {allowed_envs}, got {v}"
            )
        return v_lower

    @field_validator(
        "PROVIDER_TIMEOUT_SEC",
        "PAGE_CONTENT_MAX_CHARS",
        "ON_DEVICE_MAX_TOKENS",
        "ON_DEVICE_DOWNLOAD_TIMEOUT_SEC",
    )
    @classmethod
    def validate_positive(cls, v):
        """Timeouts and budgets must be positive."""
        if v <= 0:
            raise ValueError(f"Value must be positive, got {v}")
        return v

    # ============ HELPER PROPERTIES ============

    @property
    def credential_store_path(self) -> Path:
        """Expanded path of the credential store file."""
        return Path(self.CREDENTIAL_STORE_PATH).expanduser()


# ============ SINGLETON INSTANCE ============

# Usage: from visua11y.config import config
config = Config()
