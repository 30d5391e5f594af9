"""
Host collaborator protocols.
Defines what the template-rendering host must provide to the response tag.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence

from ..models.http import Request, Response
from ..models.render import ExtraTag, RenderCallContext


class RequestStore(Protocol):
    """Protocol for looking up stored requests."""

    async def get_by_id(self, request_id: str) -> Optional[Request]:
        """Get a request by id, or None when it does not exist."""
        ...


class ResponseStore(Protocol):
    """Protocol for reading response history."""

    async def get_latest_for_request_id(self, request_id: str) -> Optional[Response]:
        """Get the most recent response of a request."""
        ...

    def get_body_buffer(self, response: Response, default: bytes = b"") -> bytes:
        """Get the raw body bytes of a response."""
        ...


class NetworkSender(Protocol):
    """Protocol for sending a request through the host's transport."""

    async def send_request(self, request: Request, extra_tags: Sequence[ExtraTag]) -> Response:
        """Send the request and return its new response.

        ``extra_tags`` must reach the render context of the request being sent.
        """
        ...


@dataclass(frozen=True)
class RenderHost:
    """The host collaborators consumed by the response tag."""
    requests: RequestStore
    responses: ResponseStore
    network: NetworkSender


@dataclass(frozen=True)
class TagRenderContext:
    """What a tag implementation receives from the template engine."""
    host: RenderHost
    call: RenderCallContext = field(default_factory=RenderCallContext)
