"""
Trigger resolver - decides whether a dependency request must be (re-)sent.
"""

from __future__ import annotations
import logging
from typing import Optional, Union

from ..interfaces.host import TagRenderContext
from ..models.http import Request, Response
from ..models.render import TriggerPolicy

DEFAULT_RECURSION_MARKER = "fromResponseTag"


def should_resend(
    policy: Union[TriggerPolicy, str, None],
    has_existing_response: bool,
    is_nested: bool,
) -> bool:
    """Resend decision table; the first matching rule wins."""
    if is_nested:
        return False
    policy = TriggerPolicy.parse(policy)
    if policy is TriggerPolicy.NEVER:
        return False
    if policy is TriggerPolicy.NO_HISTORY:
        return not has_existing_response
    return policy is TriggerPolicy.ALWAYS


class TriggerResolver:
    """Applies the trigger policy and performs the dependency send.

    At most one level of auto-resend happens per originating render: the send
    carries the recursion marker, and a render that sees the marker never
    resends.
    """

    def __init__(
        self,
        marker: str = DEFAULT_RECURSION_MARKER,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._marker = marker
        self._logger = logger or logging.getLogger(__name__)

    @property
    def marker(self) -> str:
        return self._marker

    async def resolve(
        self,
        context: TagRenderContext,
        request: Request,
        response: Optional[Response],
        policy: Union[TriggerPolicy, str, None],
    ) -> Optional[Response]:
        """Return the response to extract from, sending the request first if needed."""
        nested = context.call.is_nested(self._marker)
        if nested:
            self._logger.info("[response tag] Preventing recursive render")

        if not should_resend(policy, response is not None, nested):
            return response

        if not context.call.is_send:
            self._logger.debug(
                f"[response tag] Skipping resend of {request.id} for {context.call.purpose.value} render"
            )
            return response

        self._logger.info(f"[response tag] Resending dependency {request.id}")
        return await context.host.network.send_request(
            request, context.call.dependency_tags(self._marker)
        )
