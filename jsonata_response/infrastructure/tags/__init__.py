"""Template tag infrastructure package."""

from .registry import DefaultTagRegistry, PluginTagAdapter

__all__ = ['DefaultTagRegistry', 'PluginTagAdapter']
