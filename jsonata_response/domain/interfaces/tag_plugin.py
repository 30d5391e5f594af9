"""
Template tag protocol interface.
Defines the contract for tag implementations and the registry that runs them.
"""

from __future__ import annotations
from typing import Any, List, Optional, Protocol

from ..models.tag import TagCall, TagDescriptor, TagResult
from .host import TagRenderContext


class TemplateTag(Protocol):
    """Protocol for template tag implementations."""

    def get_descriptor(self) -> TagDescriptor:
        """Get the tag registration metadata."""
        ...

    async def render(self, context: TagRenderContext, *args: Any) -> str:
        """Render the tag with already-decoded arguments."""
        ...


class TagRegistry(Protocol):
    """Protocol for tag registry implementations."""

    def register_tag(self, tag: TemplateTag) -> None:
        ...

    def get_tag(self, name: str) -> Optional[TemplateTag]:
        ...

    def list_tags(self) -> List[str]:
        ...

    def get_descriptors(self) -> List[TagDescriptor]:
        ...

    async def render(self, tag_call: TagCall, context: TagRenderContext) -> TagResult:
        """Render one tag occurrence, attaching any failure to the result."""
        ...
