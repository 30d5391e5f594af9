"""
JSONata response tag - reference values from other requests' responses in HTTP request templates.
"""

__version__ = "1.0.0"

__all__ = [
    "ResponseTagService",
    "DefaultTagRegistry",
    "ResponseTagError",
    "ErrorKind",
    "TriggerPolicy",
]

# Lazy attribute access so importing a submodule does not load the tag plugins.
def __getattr__(name: str):  # pragma: no cover - simple lazy loader
    if name == "ResponseTagService":
        from .application.response_tag_service import ResponseTagService as _S
        return _S
    if name == "DefaultTagRegistry":
        from .infrastructure.tags.registry import DefaultTagRegistry as _R
        return _R
    if name in {"ResponseTagError", "ErrorKind", "TriggerPolicy"}:
        from .domain import models
        return getattr(models, name)
    raise AttributeError(f"module 'jsonata_response' has no attribute {name!r}")
