"""Application layer - services orchestrating the domain for the template host."""

from .response_tag_service import ResponseTagService

__all__ = ["ResponseTagService"]
