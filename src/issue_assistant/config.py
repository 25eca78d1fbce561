"""Issue assistant configuration using pydantic-settings.

This module defines the AssistantSettings class that reads configuration
from the environment variables a GitHub Actions workflow provides. All
required fields must be set for the assistant to start; a validation
error here is a fatal configuration error.

Required:
- GITHUB_TOKEN: token for reading contents and posting comments/labels
- OPENAI_API_KEY: model provider API key
- AI_TYPE: model provider identifier (resolved via the provider registry)
- GITHUB_EVENT_PATH: path to the triggering event JSON
- ENABLE_COMMENT / ENABLE_LABEL: at least one must be true
"""

from typing import Optional

from pydantic import ValidationInfo, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.issue_assistant.ai.models import ParsingMode
from src.issue_assistant.capabilities import Capability


class AssistantSettings(BaseSettings):
    """Issue assistant configuration from environment variables.

    Variable names match the field names, case-insensitively
    (e.g., GITHUB_TOKEN, ENABLE_LABEL).
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )

    # -------------------------------------------------------------------------
    # GitHub Configuration
    # -------------------------------------------------------------------------
    # GitHub API token for reading contents, comments and labels
    github_token: str

    # Base URL for GitHub API (supports GitHub Enterprise)
    github_base_url: str = "https://api.github.com"

    # Path to the JSON file describing the triggering event
    github_event_path: str

    # -------------------------------------------------------------------------
    # AI Configuration
    # -------------------------------------------------------------------------
    # Provider identifier, resolved through the provider registry
    ai_type: str

    # API key for the model provider
    openai_api_key: str

    # Chat model used for analysis
    ai_model: str = "gpt-4o-mini"

    # Sampling temperature for the first attempt
    ai_temperature: float = 0.1

    # Temperature decrease after each failed attempt (0 keeps it fixed)
    ai_temperature_step: float = 0.0

    # Upper bound on generated tokens per response
    ai_max_tokens: int = 2000

    # Timeout in seconds for a single model request
    ai_timeout_seconds: float = 60.0

    # Output convention for code analysis responses
    parsing_mode: ParsingMode = ParsingMode.STRUCTURED

    # -------------------------------------------------------------------------
    # Capabilities
    # -------------------------------------------------------------------------
    enable_comment: bool = False
    enable_label: bool = False

    # Minimum confidence for a suggested label to be applied
    label_confidence_threshold: float = 0.7

    # Abort the harvest on the first file that cannot be fetched
    strict_harvest: bool = True

    # -------------------------------------------------------------------------
    # Runtime
    # -------------------------------------------------------------------------
    # Deadline for processing the event; unset means no deadline
    run_timeout_seconds: Optional[float] = None

    log_level: str = "INFO"

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("github_token", "openai_api_key", "github_event_path")
    @classmethod
    def validate_not_blank(cls, v: str, info: ValidationInfo) -> str:
        """Validate that required string values are not empty."""
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} cannot be empty")
        return v

    @field_validator("ai_type")
    @classmethod
    def validate_ai_type(cls, v: str) -> str:
        """Normalize the provider identifier to lower case."""
        if not v or not v.strip():
            raise ValueError("ai_type cannot be empty")
        return v.strip().lower()

    @field_validator("github_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate that the GitHub base URL has a valid format."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("github_base_url must start with http:// or https://")
        return v

    @field_validator("label_confidence_threshold", "ai_temperature")
    @classmethod
    def validate_unit_interval(cls, v: float, info: ValidationInfo) -> float:
        """Validate that the value is within [0, 1]."""
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"{info.field_name} must be between 0 and 1")
        return v

    @field_validator("ai_temperature_step")
    @classmethod
    def validate_temperature_step(cls, v: float) -> float:
        """Validate that the temperature step is not negative."""
        if v < 0:
            raise ValueError("ai_temperature_step cannot be negative")
        return v

    @field_validator("ai_max_tokens")
    @classmethod
    def validate_max_tokens(cls, v: int) -> int:
        """Validate that max tokens is positive."""
        if v < 1:
            raise ValueError("ai_max_tokens must be at least 1")
        return v

    @field_validator("ai_timeout_seconds", "run_timeout_seconds")
    @classmethod
    def validate_timeout(
        cls, v: Optional[float], info: ValidationInfo
    ) -> Optional[float]:
        """Validate that timeouts are positive."""
        if v is not None and v <= 0:
            raise ValueError(f"{info.field_name} must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that the log level is a standard logging level name."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log_level: {v}")
        return level

    @model_validator(mode="after")
    def validate_capabilities(self) -> "AssistantSettings":
        """Validate that at least one capability is enabled."""
        if not (self.enable_comment or self.enable_label):
            raise ValueError(
                "at least one feature must be enabled (ENABLE_COMMENT or ENABLE_LABEL)"
            )
        return self

    @property
    def enabled_capabilities(self) -> tuple[Capability, ...]:
        """Enabled capabilities, comment before label."""
        capabilities = []
        if self.enable_comment:
            capabilities.append(Capability.COMMENT)
        if self.enable_label:
            capabilities.append(Capability.LABEL)
        return tuple(capabilities)


def get_settings() -> AssistantSettings:
    """Create and return AssistantSettings instance.

    Returns:
        AssistantSettings: Configured settings instance.

    Raises:
        pydantic.ValidationError: If required fields are missing or invalid.
    """
    return AssistantSettings()
