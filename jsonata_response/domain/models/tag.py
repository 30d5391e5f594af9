"""
Template tag domain models - descriptors, calls and render results.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .errors import ErrorKind


@dataclass
class TagCall:
    """One occurrence of a tag inside a template, with its raw arguments."""
    name: str
    arguments: List[Any] = field(default_factory=list)
    call_id: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class TagResult:
    """Outcome of rendering one tag occurrence."""
    tag_call: TagCall
    success: bool
    content: str
    execution_time_ms: Optional[float] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class TagDescriptor:
    """Registration metadata of a template tag, as shown by the host UI."""
    name: str
    display_name: str
    description: str
    args: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_schema(cls, schema: Dict[str, Any]) -> TagDescriptor:
        return cls(
            name=schema["name"],
            display_name=schema.get("displayName") or schema["name"],
            description=schema.get("description", ""),
            args=list(schema.get("args", [])),
        )

    def to_api_format(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "displayName": self.display_name,
            "description": self.description,
            "args": self.args,
        }

    def base64_arg_positions(self) -> List[int]:
        """Positions of string arguments the host delivers base64-encoded."""
        return [
            i for i, arg in enumerate(self.args)
            if arg.get("type") == "string" and arg.get("encoding") == "base64"
        ]
