"""
Render domain models - trigger policy and the per-render call context.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable, List, Mapping, Optional, Union


class TriggerPolicy(Enum):
    """When the dependency request should be (re-)sent."""
    NEVER = "never"
    NO_HISTORY = "no-history"
    ALWAYS = "always"

    @classmethod
    def parse(cls, value: Union[TriggerPolicy, str, None]) -> TriggerPolicy:
        """Normalize user text; empty or unknown values mean ``never``."""
        if isinstance(value, cls):
            return value
        text = (value or "").strip().lower()
        for policy in cls:
            if policy.value == text:
                return policy
        return cls.NEVER


class RenderPurpose(Enum):
    """Why the host is rendering the template."""
    SEND = "send"
    PREVIEW = "preview"
    GENERAL = "general"

    @classmethod
    def parse(cls, value: Union[RenderPurpose, str, None]) -> RenderPurpose:
        if isinstance(value, cls):
            return value
        text = (value or "").strip().lower()
        for purpose in cls:
            if purpose.value == text:
                return purpose
        return cls.GENERAL


@dataclass(frozen=True)
class ExtraTag:
    """Name/value pair handed to the network sender with a dependency send."""
    name: str
    value: Any


@dataclass(frozen=True)
class RenderCallContext:
    """Immutable state of one render pass.

    The host builds one per render and discards it afterwards. Nested renders
    triggered by a dependency send get their own context built from the extra
    tags of that send (see ``from_tags``), which is how the recursion marker
    travels down the call chain.
    """
    purpose: RenderPurpose = RenderPurpose.GENERAL
    extra_info: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "purpose", RenderPurpose.parse(self.purpose))
        object.__setattr__(self, "extra_info", MappingProxyType(dict(self.extra_info)))

    @property
    def is_send(self) -> bool:
        return self.purpose is RenderPurpose.SEND

    def get_extra_info(self, key: str) -> Optional[Any]:
        return self.extra_info.get(key)

    def is_nested(self, marker: str) -> bool:
        """Check if this render was itself triggered by a dependency resend."""
        return bool(self.get_extra_info(marker))

    @staticmethod
    def dependency_tags(marker: str) -> List[ExtraTag]:
        return [ExtraTag(name=marker, value=True)]

    @classmethod
    def from_tags(
        cls,
        purpose: Union[RenderPurpose, str, None],
        tags: Iterable[ExtraTag],
    ) -> RenderCallContext:
        return cls(purpose=RenderPurpose.parse(purpose), extra_info={t.name: t.value for t in tags})
