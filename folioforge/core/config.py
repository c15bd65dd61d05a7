"""Application configuration with validation."""

from enum import Enum
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class ConfigurationError(Exception):
    """Raised when application configuration is invalid for the environment."""
    pass


class Settings(BaseSettings):
    """
    Application settings with validation.

    Uses Pydantic for configuration validation, preventing
    common security issues like wildcard CORS.
    """

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production)"
    )

    # CORS Configuration
    cors_allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Allowed CORS origins (comma-separated)"
    )

    # Database Configuration (portfolio drafts)
    database_url: str = Field(
        default="sqlite:///./folioforge.db",
        description="Database connection URL"
    )

    # Generation Configuration
    # LiteLLM model string, e.g. "anthropic/claude-sonnet-4-20250514", "openai/gpt-4o".
    # Empty string = generation disabled (generation routes return 503).
    generation_model: str = Field(
        default="anthropic/claude-sonnet-4-20250514",
        description="LiteLLM model string for portfolio generation (empty = disabled)"
    )
    generation_api_key: str = Field(
        default="",
        description="API key for the generation provider (empty = provider env var)"
    )
    generation_api_base: str = Field(
        default="",
        description="Base URL for the generation provider (optional)"
    )
    generation_max_tokens: int = Field(
        default=8000,
        description="Output token cap per model call"
    )
    generation_temperature: float = Field(
        default=0.7,
        description="Sampling temperature for generation and continuation calls"
    )
    generation_timeout: int = Field(
        default=180,
        description="Seconds before a single model call is abandoned"
    )

    # Continuation loop
    # The analyzer's lenient completeness rule is tuned for exactly this ceiling.
    continuation_max_attempts: int = Field(
        default=2,
        ge=1,
        description="Maximum continuation rounds before returning a partial result"
    )
    continuation_retry_delay: float = Field(
        default=1.0,
        ge=0,
        description="Seconds to wait after a failed model call before the next attempt"
    )

    # Circuit breaker (per generation model)
    circuit_failure_threshold: int = Field(
        default=3,
        description="Consecutive model-call failures before the circuit opens"
    )
    circuit_cooldown_seconds: float = Field(
        default=60,
        description="Seconds the circuit stays open before a trial request"
    )

    # Rate Limiting
    # MODEL_CALLS_PER_MINUTE: per-IP budget of model calls. Each generation
    # route is charged its worst-case call count up front; 0 disables it.
    model_calls_per_minute: int = Field(
        default=30,
        ge=0,
        description="Model calls a client may trigger per minute"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: 'json' for structured, 'text' for human-readable"
    )

    def get_cors_origins(self) -> List[str]:
        """
        Get CORS origins as a list.

        Parses comma-separated string and validates no wildcards.
        """
        origins = [origin.strip() for origin in self.cors_allowed_origins.split(',') if origin.strip()]

        # SECURITY: Prevent wildcard CORS
        if "*" in origins:
            raise ValueError(
                "Wildcard CORS (*) not allowed. "
                "Specify explicit origins in CORS_ALLOWED_ORIGINS"
            )

        return origins

    def is_generation_configured(self) -> bool:
        """Generation needs a model string; the key may come from the provider's env var."""
        return bool(self.generation_model)

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v_upper

    def validate_production_config(self) -> None:
        """Validate configuration for production environment.

        In production, fails startup if generation or CORS settings are unsafe.
        In development, returns silently and main.py logs warnings.

        Raises:
            ConfigurationError: If production config is insecure or incomplete.
        """
        errors: list[str] = []

        if not self.generation_api_key:
            errors.append(
                "GENERATION_API_KEY is empty. "
                "Set an explicit provider key for production."
            )

        # Check for localhost CORS origins
        origins = self.get_cors_origins()
        localhost_origins = [o for o in origins if "localhost" in o or "127.0.0.1" in o]
        if localhost_origins:
            errors.append(
                f"CORS allows localhost origins: {localhost_origins}. "
                "Remove localhost origins for production."
            )

        if errors:
            if self.environment == Environment.PRODUCTION:
                raise ConfigurationError(
                    "Production configuration is insecure:\n  - " + "\n  - ".join(errors)
                )
            return

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        # Allow reading from environment variables with different case
        case_sensitive = False


# Global settings instance
settings = Settings()
