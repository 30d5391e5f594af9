"""
Configuration settings - Infrastructure component for managing tag configuration.
Uses pydantic-settings for validation and environment variable loading.
"""

from __future__ import annotations
from typing import Annotated, Any, Dict, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from ...domain.models.render import TriggerPolicy


class ResponseTagSettings(BaseSettings):
    """Response tag configuration.

    Every field can be set from the environment with the ``RESPONSE_TAG_``
    prefix, e.g. ``RESPONSE_TAG_DEFAULT_CHARSET=latin-1``.
    """

    model_config = SettingsConfigDict(
        env_prefix='RESPONSE_TAG_',
        env_file='.env',
        case_sensitive=False,
        extra='ignore',
    )

    # Extraction
    default_charset: str = Field('utf-8')

    # Trigger behavior
    default_trigger: str = Field(TriggerPolicy.NEVER.value)
    recursion_marker: str = Field('fromResponseTag')

    # Extra tag plugin directories (comma-separated)
    plugin_paths: Annotated[List[str], NoDecode] = Field(default_factory=list)

    # Logging
    log_level: str = Field('INFO')
    log_format: str = Field('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    @field_validator('default_charset')
    @classmethod
    def validate_default_charset(cls, v):
        """Blank charsets fall back to utf-8."""
        return (v or '').strip() or 'utf-8'

    @field_validator('default_trigger')
    @classmethod
    def validate_default_trigger(cls, v):
        return TriggerPolicy.parse(v).value

    @field_validator('recursion_marker')
    @classmethod
    def validate_recursion_marker(cls, v):
        if not v or not v.strip():
            raise ValueError('recursion_marker must not be empty')
        return v.strip()

    @field_validator('plugin_paths', mode='before')
    @classmethod
    def parse_plugin_paths(cls, v):
        """Parse comma-separated plugin paths."""
        if not v:
            return []
        if isinstance(v, str):
            return [path.strip() for path in v.split(',') if path.strip()]
        return list(v)

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            return 'INFO'
        return v.upper()

    @property
    def default_trigger_policy(self) -> TriggerPolicy:
        return TriggerPolicy.parse(self.default_trigger)

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary for serialization."""
        return self.model_dump()


# Global settings instance
_settings: Optional[ResponseTagSettings] = None


def get_settings() -> ResponseTagSettings:
    """Get global settings instance (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = ResponseTagSettings()
    return _settings


def reload_settings() -> ResponseTagSettings:
    """Reload settings from environment (for testing)."""
    global _settings
    _settings = ResponseTagSettings()
    return _settings
