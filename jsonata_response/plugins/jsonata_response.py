"""JSONata response tag plugin

Reference values from other requests' responses, filtered with JSONata.
"""
from __future__ import annotations

from typing import Optional

from ..application.response_tag_service import ResponseTagService
from ..domain.interfaces.host import TagRenderContext

TAG_SCHEMA = {
    "name": "jsonata_response",
    "displayName": "jsonata_response",
    "description": "reference values from other request's responses -JSONpath -Xpath +JSONata filter",
    "args": [
        {
            "displayName": "Request",
            "type": "model",
            "model": "Request",
        },
        {
            "displayName": "JSONata expression",
            "type": "string",
            "encoding": "base64",
        },
        {
            "displayName": "Trigger Behavior",
            "help": "Configure when to resend the dependent request",
            "type": "enum",
            "options": [
                {
                    "displayName": "Never",
                    "description": "never resend request",
                    "value": "never",
                },
                {
                    "displayName": "No History",
                    "description": "resend when no responses present",
                    "value": "no-history",
                },
                {
                    "displayName": "Always",
                    "description": "resend request when needed",
                    "value": "always",
                },
            ],
        },
    ],
}


async def jsonata_response(
    context: TagRenderContext,
    request_id: Optional[str] = None,
    query: Optional[str] = None,
    trigger_behavior: Optional[str] = None,
) -> str:
    """Evaluate a JSONata query against the latest response of another request."""
    return await ResponseTagService().run(context, request_id, query, trigger_behavior)


TAG_IMPLEMENTATION = jsonata_response
TAG_AUTHOR = "core"
TAG_VERSION = "1.0.0"
