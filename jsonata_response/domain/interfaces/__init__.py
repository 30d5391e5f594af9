"""Domain interfaces package."""

from .host import NetworkSender, RenderHost, RequestStore, ResponseStore, TagRenderContext
from .tag_plugin import TagRegistry, TemplateTag

__all__ = [
    "NetworkSender",
    "RenderHost",
    "RequestStore",
    "ResponseStore",
    "TagRenderContext",
    "TagRegistry",
    "TemplateTag",
]
