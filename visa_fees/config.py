"""Configuration management using environment variables"""
import os
import logging
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

DEFAULT_AI_MODEL = "claude-3-5-haiku-latest"


def _get_bool(key: str, default: str) -> bool:
    return os.getenv(key, default).strip().lower() in ("1", "true", "yes")


class Settings:
    """Application settings - only what the service reads today"""

    def __init__(self):
        # Environment
        self.environment = os.getenv("ENVIRONMENT", "development")

        # AI semantic validation
        self.ai_validation_enabled = _get_bool("AI_VALIDATION_ENABLED", "true")
        self.ai_model = os.getenv("AI_MODEL", DEFAULT_AI_MODEL)
        self.ai_max_tokens = int(os.getenv("AI_MAX_TOKENS", "512"))

        if self.environment == "production" and self.ai_validation_enabled:
            self.anthropic_api_key = self._get_required("ANTHROPIC_API_KEY")
        else:
            # Development mode: Load from .env file (never commit secrets to git)
            self.anthropic_api_key = os.getenv("ANTHROPIC_API_KEY", "")
            self._warn_missing_credentials()

        # Store behaviour
        self.seed_demo_data = _get_bool("SEED_DEMO_DATA", "true")
        # Simulated latency before a delete is applied
        self.delete_latency_seconds = float(os.getenv("DELETE_LATENCY_SECONDS", "0.5"))

        # Server configuration
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = int(os.getenv("PORT", "8000"))

        # CORS origins (comma-separated list)
        self.cors_origins = os.getenv("CORS_ORIGINS", "")

        # Logging
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    def _get_required(self, key: str) -> str:
        """Get required environment variable or raise error."""
        value = os.getenv(key, "").strip()
        if not value:
            raise ValueError(
                f"Missing required environment variable: {key}. "
                f"Required in production mode."
            )
        return value

    def _warn_missing_credentials(self) -> None:
        """Warn about missing credentials in development mode."""
        if self.ai_validation_enabled and not self.anthropic_api_key.strip():
            logging.getLogger(__name__).warning(
                "⚠️  Missing ANTHROPIC_API_KEY - every submission will fail with "
                "'AI validation service is unavailable'. Set the key in .env or "
                "set AI_VALIDATION_ENABLED=false for local development."
            )


# Global settings instance
settings = Settings()
