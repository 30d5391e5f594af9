"""
Response tag service - Application service behind the ``jsonata_response`` tag.
Coordinates request lookup, the trigger resolver and the body extractor.
"""

from __future__ import annotations
import logging
from typing import Optional, Union

from ..domain.interfaces.host import TagRenderContext
from ..domain.models.errors import ErrorKind, ResponseTagError
from ..domain.models.render import TriggerPolicy
from ..domain.services.body_extractor import BodyExtractor, check_response
from ..domain.services.trigger_resolver import TriggerResolver
from ..infrastructure.config.settings import ResponseTagSettings, get_settings
from ..utils import truncate_text


class ResponseTagService:
    """Renders a value taken from another request's latest response."""

    def __init__(
        self,
        trigger_resolver: Optional[TriggerResolver] = None,
        body_extractor: Optional[BodyExtractor] = None,
        settings: Optional[ResponseTagSettings] = None,
        logger: Optional[logging.Logger] = None
    ):
        self._settings = settings or get_settings()
        self._logger = logger or logging.getLogger(__name__)
        self._trigger_resolver = trigger_resolver or TriggerResolver(
            marker=self._settings.recursion_marker, logger=self._logger
        )
        self._body_extractor = body_extractor or BodyExtractor(self._settings.default_charset)

    async def run(
        self,
        context: TagRenderContext,
        request_id: Optional[str],
        query: Optional[str],
        trigger_behavior: Union[TriggerPolicy, str, None] = None
    ) -> str:
        """Render the tag; raises ResponseTagError on any failure."""
        query = query or ''
        policy = TriggerPolicy.parse(trigger_behavior or self._settings.default_trigger)

        if not request_id:
            raise ResponseTagError.no_request_specified()

        request = await context.host.requests.get_by_id(request_id)
        if request is None:
            raise ResponseTagError.request_not_found(request_id)

        response = await context.host.responses.get_latest_for_request_id(request_id)
        response = await self._trigger_resolver.resolve(context, request, response, policy)
        response = check_response(response)

        body = context.host.responses.get_body_buffer(response, b'')
        try:
            return self._body_extractor.extract(response, query, body or b'')
        except ResponseTagError as e:
            if e.kind is ErrorKind.INVALID_JSON:
                self._logger.debug(
                    f"[response tag] Body of {response.id} is not JSON: {truncate_text(repr(body), 120)}"
                )
            raise
