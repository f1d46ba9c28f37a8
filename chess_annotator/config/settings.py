# chess_annotator/config/settings.py
"""
Configuration settings for the Chess Annotator session core, powered by Pydantic.

This module centralizes all tunable parameters and default values. Using
Pydantic allows for type-safe, self-documenting configuration that can be
loaded from environment variables, providing a clear separation of
configuration from code.
"""

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Nested Models for Configuration Schemas ---

class AnalysisServiceSettings(BaseModel):
    """Configuration for the advisory position-analysis backend."""
    enabled: bool = Field(True, description="When false, no analysis requests are sent at all.")
    base_url: str = Field("http://localhost:5000", description="Root URL of the analysis backend.")
    timeout_s: float = Field(10.0, description="Per-request timeout in seconds.")
    search_depth: int = Field(15, description="Default search depth sent with every request.")
    retry_attempts: int = Field(2, description="Total attempts for a request that fails with a transient error.")
    initial_backoff_s: float = Field(0.25, description="Delay before the first retry.")

    @field_validator("search_depth", "retry_attempts")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """Ensures depth and attempt counts are at least one."""
        if value < 1:
            raise ValueError("Configuration error: value must be at least 1.")
        return value


class SessionSettings(BaseModel):
    """Behavioural switches for the Game Session."""
    verify_captures: bool = Field(
        False,
        description="Cross-check incremental captures against a diff of the board after every operation.",
    )

# --- Main Application Settings Class ---

class Settings(BaseSettings):
    """
    Main configuration class for the application.

    It loads settings from environment variables with the prefix 'CHESS_ANNOTATOR_'.
    Nested models can be configured using a double underscore delimiter, e.g.,
    `CHESS_ANNOTATOR_ANALYSIS_SERVICE__BASE_URL=http://engine:5000`.
    """
    model_config = SettingsConfigDict(env_prefix='CHESS_ANNOTATOR_', env_nested_delimiter='__')

    analysis_service: AnalysisServiceSettings = Field(default_factory=AnalysisServiceSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)
    log_level: str = "INFO"
    log_json: bool = False

# A singleton instance of the settings, accessible throughout the application.
settings = Settings()
