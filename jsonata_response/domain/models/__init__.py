"""Domain models package."""

from .errors import ErrorKind, ResponseTagError
from .http import Request, Response
from .render import ExtraTag, RenderCallContext, RenderPurpose, TriggerPolicy
from .tag import TagCall, TagDescriptor, TagResult

__all__ = [
    "ErrorKind",
    "ResponseTagError",
    "Request",
    "Response",
    "ExtraTag",
    "RenderCallContext",
    "RenderPurpose",
    "TriggerPolicy",
    "TagCall",
    "TagDescriptor",
    "TagResult",
]
