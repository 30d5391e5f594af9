"""Domain services package."""

from .body_extractor import BodyExtractor, check_response, decode_body, match_jsonata, resolve_charset
from .trigger_resolver import DEFAULT_RECURSION_MARKER, TriggerResolver, should_resend

__all__ = [
    "BodyExtractor",
    "check_response",
    "decode_body",
    "match_jsonata",
    "resolve_charset",
    "DEFAULT_RECURSION_MARKER",
    "TriggerResolver",
    "should_resend",
]
