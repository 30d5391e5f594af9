"""Pytest session bootstrap for this repository.

Responsibilities:
- Ensure the project root (containing `jsonata_response`) is importable
- Reset environment-driven settings around every test
- Provide an in-memory host for rendering the response tag
"""

import json
import os
import sys

import pytest

HERE = os.path.dirname(__file__)
ROOT = os.path.abspath(os.path.join(HERE, '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from jsonata_response.domain.interfaces.host import RenderHost, TagRenderContext
from jsonata_response.domain.models.http import Request, Response
from jsonata_response.domain.models.render import RenderCallContext, RenderPurpose
from jsonata_response.infrastructure.config.settings import reload_settings
from jsonata_response.infrastructure.stores.memory import (
    CallbackNetworkSender,
    InMemoryRequestStore,
    InMemoryResponseStore,
)


@pytest.fixture(autouse=True)
def _settings_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith('RESPONSE_TAG_'):
            monkeypatch.delenv(key, raising=False)
    reload_settings()
    yield
    reload_settings()


def make_response(request_id='req_1', body=None, status_code=200, error=None,
                  content_type='application/json', response_id=None):
    if body is None:
        body = {'ok': True}
    if not isinstance(body, (bytes, str)):
        body = json.dumps(body)
    if isinstance(body, str):
        body = body.encode('utf-8')
    return Response(
        id=response_id or f'res_{request_id}',
        request_id=request_id,
        status_code=status_code,
        error=error,
        content_type=content_type,
        body=body,
    )


class FakeHost:
    """In-memory host with a scripted network."""

    def __init__(self):
        self.requests = InMemoryRequestStore([Request(id='req_1')])
        self.responses = InMemoryResponseStore()
        self.fresh_body = {'token': 'fresh'}
        self.sender = CallbackNetworkSender(self._respond, self.responses)
        self.nested_contexts = []

    async def _respond(self, request, nested_context):
        self.nested_contexts.append(nested_context)
        return make_response(request.id, self.fresh_body, response_id=f'res_sent_{len(self.nested_contexts)}')

    def render_host(self):
        return RenderHost(requests=self.requests, responses=self.responses, network=self.sender)

    def context(self, purpose=RenderPurpose.SEND, extra_info=None):
        return TagRenderContext(
            host=self.render_host(),
            call=RenderCallContext(purpose=purpose, extra_info=extra_info or {}),
        )


@pytest.fixture
def fake_host():
    return FakeHost()
