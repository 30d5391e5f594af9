"""
Tag registry implementation - Infrastructure component managing template tags.
Integrates with the tag loader while implementing domain interfaces.
"""

from __future__ import annotations
import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ...domain.interfaces.host import TagRenderContext
from ...domain.interfaces.tag_plugin import TagRegistry, TemplateTag
from ...domain.models.errors import ResponseTagError
from ...domain.models.tag import TagCall, TagDescriptor, TagResult
from ...tag_loader import TagManager, get_manager


class PluginTagAdapter(TemplateTag):
    """Adapter to wrap loaded plugin callables as TemplateTag interface."""

    def __init__(
        self,
        schema: Dict[str, Any],
        implementation: Callable[..., Awaitable[str]],
    ):
        self._schema = schema
        self._implementation = implementation

    def get_descriptor(self) -> TagDescriptor:
        return TagDescriptor.from_schema(self._schema)

    async def render(self, context: TagRenderContext, *args: Any) -> str:
        return await self._implementation(context, *args)


class DefaultTagRegistry(TagRegistry):
    """Default implementation of tag registry using the tag loader."""

    def __init__(
        self,
        tag_manager: Optional[TagManager] = None,
        logger: Optional[logging.Logger] = None
    ):
        self._tag_manager = tag_manager or get_manager()
        self._logger = logger or logging.getLogger(__name__)
        self._tags: Dict[str, TemplateTag] = {}

        self._load_tags_from_plugins()

    def _load_tags_from_plugins(self) -> None:
        """Load tags from the plugin system."""
        functions = self._tag_manager.tag_functions
        for schema in self._tag_manager.tag_schemas:
            tag_name = schema.get('name')
            implementation = functions.get(tag_name)
            if not implementation:
                self._logger.warning(f"No implementation found for tag: {tag_name}")
                continue
            self._tags[tag_name] = PluginTagAdapter(schema=schema, implementation=implementation)
            self._logger.debug(f"Registered tag: {tag_name}")

        self._logger.info(f"Loaded {len(self._tags)} tags from plugins")

    def register_tag(self, tag: TemplateTag) -> None:
        """Register a template tag."""
        descriptor = tag.get_descriptor()
        self._tags[descriptor.name] = tag
        self._logger.debug(f"Registered tag: {descriptor.name}")

    def get_tag(self, name: str) -> Optional[TemplateTag]:
        return self._tags.get(name)

    def list_tags(self) -> List[str]:
        return list(self._tags.keys())

    def get_descriptors(self) -> List[TagDescriptor]:
        return [tag.get_descriptor() for tag in self._tags.values()]

    async def render(
        self,
        tag_call: TagCall,
        context: TagRenderContext
    ) -> TagResult:
        """Render a tag occurrence; failures are attached to the result."""
        tag = self.get_tag(tag_call.name)
        if not tag:
            return TagResult(
                tag_call=tag_call,
                success=False,
                content="",
                error=f"Tag '{tag_call.name}' not found"
            )

        start_time = time.time()
        try:
            content = await tag.render(context, *tag_call.arguments)
            return TagResult(
                tag_call=tag_call,
                success=True,
                content=content,
                execution_time_ms=(time.time() - start_time) * 1000
            )
        except ResponseTagError as e:
            self._logger.info(f"Tag {tag_call.name} failed ({e.kind.value}): {e}")
            return TagResult(
                tag_call=tag_call,
                success=False,
                content="",
                execution_time_ms=(time.time() - start_time) * 1000,
                error=str(e),
                error_kind=e.kind
            )
        except Exception as e:
            self._logger.error(f"Tag {tag_call.name} render failed: {e}")
            return TagResult(
                tag_call=tag_call,
                success=False,
                content="",
                execution_time_ms=(time.time() - start_time) * 1000,
                error=f"Tag render error: {e}"
            )

    def reload_tags(self) -> None:
        """Reload tags from the plugin system."""
        self._tags.clear()
        self._tag_manager.load(reset=True)
        self._load_tags_from_plugins()
        self._logger.info("Tags reloaded from plugins")
