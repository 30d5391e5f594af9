"""
In-memory host adapters - reference implementations of the host protocols.

Useful for embedding the tag in scripts and for tests. Nothing is persisted;
the stores are plain dictionaries owned by the caller.
"""

from __future__ import annotations
import logging
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from ...domain.interfaces.host import NetworkSender, RequestStore, ResponseStore
from ...domain.models.http import Request, Response
from ...domain.models.render import ExtraTag, RenderCallContext, RenderPurpose

# Called with the request being sent and the render context its own
# templates must be rendered with.
Responder = Callable[[Request, RenderCallContext], Awaitable[Response]]


class InMemoryRequestStore(RequestStore):
    def __init__(self, requests: Optional[List[Request]] = None) -> None:
        self._requests: Dict[str, Request] = {}
        for request in requests or []:
            self.add(request)

    def add(self, request: Request) -> Request:
        self._requests[request.id] = request
        return request

    async def get_by_id(self, request_id: str) -> Optional[Request]:
        return self._requests.get(request_id)


class InMemoryResponseStore(ResponseStore):
    """Keeps response history per request; the last one added is the latest."""

    def __init__(self) -> None:
        self._history: Dict[str, List[Response]] = {}

    def add(self, response: Response) -> Response:
        self._history.setdefault(response.request_id, []).append(response)
        return response

    def history(self, request_id: str) -> List[Response]:
        return list(self._history.get(request_id, []))

    async def get_latest_for_request_id(self, request_id: str) -> Optional[Response]:
        history = self._history.get(request_id)
        return history[-1] if history else None

    def get_body_buffer(self, response: Response, default: bytes = b"") -> bytes:
        return response.body if response.body is not None else default


class CallbackNetworkSender(NetworkSender):
    """Network sender delegating the actual exchange to a coroutine.

    Each send builds the nested render context from the extra tags, awaits the
    responder with it and records the result as the request's latest response.
    """

    def __init__(
        self,
        responder: Responder,
        responses: InMemoryResponseStore,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._responder = responder
        self._responses = responses
        self._logger = logger or logging.getLogger(__name__)
        self.sent: List[Tuple[Request, Tuple[ExtraTag, ...]]] = []

    async def send_request(self, request: Request, extra_tags: Sequence[ExtraTag]) -> Response:
        self.sent.append((request, tuple(extra_tags)))
        nested = RenderCallContext.from_tags(RenderPurpose.SEND, extra_tags)
        self._logger.debug(f"Sending {request.id} with tags {[t.name for t in extra_tags]}")
        response = await self._responder(request, nested)
        return self._responses.add(response)
