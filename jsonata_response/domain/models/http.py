"""
Request/response domain models - read-only views of what the host stores.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Request:
    """Opaque handle for a stored request."""
    id: str
    attributes: Dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class Response:
    """Immutable response belonging to exactly one request.

    A missing ``status_code`` means the request never completed; ``error``
    carries the host's failure text when sending failed.
    """
    id: str
    request_id: str
    status_code: Optional[int] = None
    error: Optional[str] = None
    content_type: Optional[str] = None
    body: bytes = b""
