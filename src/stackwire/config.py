"""Configuration management using Pydantic Settings."""

from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Backend settings loaded from ``STACKWIRE_`` prefixed environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="STACKWIRE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Backend identity
    backend_namespace: str = "stackwire"
    backend_name: str = "sandbox"
    deployment_type: Literal["sandbox", "branch", "standalone"] = "sandbox"
    region: Optional[str] = None

    # Validation
    disable_import_path_verification: bool = False

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "console"] = "console"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
