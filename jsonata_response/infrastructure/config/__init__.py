"""Configuration infrastructure package."""

from .settings import ResponseTagSettings, get_settings, reload_settings

__all__ = ['ResponseTagSettings', 'get_settings', 'reload_settings']
