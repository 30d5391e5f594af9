"""Domain layer - trigger policy, recursion guard and body extraction."""

from .models import (
    ErrorKind,
    ExtraTag,
    RenderCallContext,
    RenderPurpose,
    Request,
    Response,
    ResponseTagError,
    TriggerPolicy,
)

__all__ = [
    "ErrorKind",
    "ExtraTag",
    "RenderCallContext",
    "RenderPurpose",
    "Request",
    "Response",
    "ResponseTagError",
    "TriggerPolicy",
]
