"""
Dynamic plugin loader for template tags.

- Discovers tag plugins from the internal package `jsonata_response.plugins/`
  and from extra directories listed in RESPONSE_TAG_PLUGIN_PATHS
- Validates tag descriptors (name, displayName, description, args) using jsonschema
- Builds TEMPLATE_TAGS and TAG_FUNCTIONS for the host
- Exposes a TagManager for advanced usage and testing

Plugin contract (any Python module):
- Must define TAG_SCHEMA: dict with keys {"name": str, "displayName": str, "description": str, "args": list}
- Must provide an implementation, one of:
  * attribute TAG_IMPLEMENTATION: callable
  * a function named the same as TAG_SCHEMA['name']
  * a function named 'run'
- Optional: TAG_VERSION: str, TAG_AUTHOR: str

Implementations are called as ``impl(context, *args)``. Arguments declared as
``{"type": "string", "encoding": "base64"}`` arrive from the host in the
``b64::<data>::46b`` envelope and are decoded before the call.
"""
from __future__ import annotations

import base64
import binascii
import importlib
import importlib.util
import inspect
import logging
import os
import re
import sys
import threading
from dataclasses import dataclass
from types import ModuleType
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

from .domain.models.tag import TagDescriptor
from .infrastructure.config.settings import get_settings


_ARG_OPTION_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["displayName", "value"],
    "properties": {
        "displayName": {"type": "string", "minLength": 1},
        "description": {"type": "string"},
        "value": {"type": ["string", "number", "boolean"]},
    },
}

# JSON Schema for the tag descriptor structure itself
_TAG_DEFINITION_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["name", "displayName", "description", "args"],
    "properties": {
        "name": {"type": "string", "pattern": r"^[A-Za-z_][A-Za-z0-9_]*$"},
        "displayName": {"type": "string", "minLength": 1},
        "description": {"type": "string", "minLength": 1},
        "args": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["displayName", "type"],
                "properties": {
                    "displayName": {"type": "string", "minLength": 1},
                    "help": {"type": "string"},
                    "type": {"enum": ["string", "number", "boolean", "enum", "model", "file"]},
                    "encoding": {"enum": ["base64"]},
                    "model": {"type": "string"},
                    "options": {"type": "array", "items": _ARG_OPTION_SCHEMA, "minItems": 1},
                },
                "allOf": [
                    {
                        "if": {"properties": {"type": {"const": "enum"}}},
                        "then": {"required": ["options"]},
                    },
                    {
                        "if": {"properties": {"type": {"const": "model"}}},
                        "then": {"required": ["model"]},
                    },
                ],
                "additionalProperties": True,
            },
        },
    },
    "additionalProperties": True,
}

_B64_ENVELOPE = re.compile(r"^b64::(.*)::46b$", re.DOTALL)


@dataclass(frozen=True)
class TagPlugin:
    name: str
    schema: Dict[str, Any]
    implementation: Callable[..., Awaitable[str]]
    module: ModuleType
    source_path: str


class TagLoadError(Exception):
    pass


def encode_base64_arg(value: str) -> str:
    """Wrap a value in the envelope hosts use for base64 tag arguments."""
    return f"b64::{base64.b64encode(value.encode('utf-8')).decode('ascii')}::46b"


def decode_base64_arg(value: Any) -> Any:
    """Unwrap a ``b64::...::46b`` argument; anything else is returned untouched."""
    if not isinstance(value, str):
        return value
    match = _B64_ENVELOPE.match(value)
    if not match:
        return value
    try:
        return base64.b64decode(match.group(1)).decode("utf-8", errors="replace")
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 argument: {e}")


class TagManager:
    def __init__(self, plugin_paths: Optional[List[str]] = None, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._lock = threading.RLock()
        self._plugin_paths = plugin_paths or []
        self._plugins: List[TagPlugin] = []
        self._schemas: List[Dict[str, Any]] = []
        self._functions: Dict[str, Callable[..., Awaitable[str]]] = {}

    @staticmethod
    def _default_paths() -> List[str]:
        """Compute default plugin search paths.
        - Internal: jsonata_response/plugins/
        - Optional: RESPONSE_TAG_PLUGIN_PATHS (comma-separated)
        """
        here = os.path.dirname(os.path.abspath(__file__))
        paths = [os.path.join(here, "plugins")]
        paths.extend(get_settings().plugin_paths)
        # Deduplicate while preserving order
        seen: set = set()
        out: List[str] = []
        for p in paths:
            ap = os.path.abspath(p)
            if ap not in seen:
                seen.add(ap)
                out.append(ap)
        return out

    def _iter_module_files(self, base_dir: str) -> List[str]:
        files: List[str] = []
        if not os.path.isdir(base_dir):
            return files
        for name in sorted(os.listdir(base_dir)):
            if name.startswith("_"):
                continue
            path = os.path.join(base_dir, name)
            if os.path.isdir(path):
                # support package-style plugins: tags/foo/__init__.py
                init_py = os.path.join(path, "__init__.py")
                if os.path.isfile(init_py):
                    files.append(init_py)
            elif name.endswith(".py"):
                files.append(path)
        return files

    def _import_module_from_path(self, file_path: str, pkg_base: Optional[str]) -> ModuleType:
        base_name = os.path.basename(file_path)
        if base_name == "__init__.py":
            rel = os.path.basename(os.path.dirname(file_path))
        else:
            rel = os.path.splitext(base_name)[0]
        if pkg_base:
            # Built-in plugins use relative imports, so import them as package members
            return importlib.import_module(f"{pkg_base}.{rel}")
        module_name = f"tag_plugin_{rel}_{abs(hash(file_path))}"
        spec = importlib.util.spec_from_file_location(module_name, file_path)
        if spec is None or spec.loader is None:
            raise TagLoadError(f"Cannot create import spec for {file_path}")
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        spec.loader.exec_module(module)  # type: ignore[attr-defined]
        return module

    def _validate_tag_schema(self, schema: Dict[str, Any]) -> None:
        errors = sorted(Draft202012Validator(_TAG_DEFINITION_SCHEMA).iter_errors(schema), key=lambda e: [str(p) for p in e.path])
        if errors:
            first: ValidationError = errors[0]
            where = "/".join(str(p) for p in first.path) or "<root>"
            raise TagLoadError(f"Tag definition failed validation at {where}: {first.message}")

    def _wrap_with_arg_decoding(self, name: str, schema: Dict[str, Any], func: Callable[..., Any]) -> Callable[..., Awaitable[str]]:
        positions = set(TagDescriptor.from_schema(schema).base64_arg_positions())
        logger = self._logger

        async def wrapper(context: Any, *args: Any) -> str:
            decoded = []
            for i, value in enumerate(args):
                if i in positions:
                    try:
                        value = decode_base64_arg(value)
                    except ValueError as e:
                        raise ValueError(f"Argument {i} of {name}: {e}")
                decoded.append(value)
            logger.debug(f"Rendering tag '{name}' with {len(decoded)} argument(s)")
            result = func(context, *decoded)
            if inspect.isawaitable(result):
                result = await result
            return result

        # Preserve nicer debug names
        wrapper.__name__ = f"tag_{name}"
        wrapper.__doc__ = f"Auto-generated wrapper for tag '{name}' decoding base64 arguments."
        return wrapper

    def _extract_plugin(self, module: ModuleType, source_path: str) -> TagPlugin:
        # Locate TAG_SCHEMA
        schema = getattr(module, "TAG_SCHEMA", None)
        if not isinstance(schema, dict):
            raise TagLoadError("Missing or invalid TAG_SCHEMA (must be a dict)")
        self._validate_tag_schema(schema)
        name = schema["name"]
        # Find implementation
        impl = getattr(module, "TAG_IMPLEMENTATION", None)
        if not callable(impl):
            impl = getattr(module, name, None)
        if not callable(impl):
            impl = getattr(module, "run", None)
        if not callable(impl):
            raise TagLoadError("No callable implementation found (TAG_IMPLEMENTATION, tag name, or run)")

        wrapped = self._wrap_with_arg_decoding(name, schema, impl)
        return TagPlugin(name=name, schema=schema, implementation=wrapped, module=module, source_path=source_path)

    def load(self, reset: bool = False, additional_paths: Optional[List[str]] = None) -> Tuple[List[Dict[str, Any]], Dict[str, Callable[..., Awaitable[str]]]]:
        with self._lock:
            if reset:
                self._plugins = []
                self._schemas = []
                self._functions = {}

            search_paths = list(self._plugin_paths or self._default_paths())
            if additional_paths:
                for p in additional_paths:
                    ap = os.path.abspath(p)
                    if ap not in search_paths:
                        search_paths.append(ap)

            self._logger.debug(f"Tag plugin search paths: {search_paths}")

            here = os.path.dirname(os.path.abspath(__file__))
            internal = os.path.join(here, "plugins")
            loaded_names: set = set(self._functions.keys())
            for path in search_paths:
                # Paths inside our package import as package members
                pkg_base = f"{__package__}.plugins" if os.path.abspath(path) == internal else None

                for file_path in self._iter_module_files(path):
                    try:
                        module = self._import_module_from_path(file_path, pkg_base)
                        plugin = self._extract_plugin(module, file_path)
                        if plugin.name in loaded_names:
                            self._logger.warning(f"Duplicate tag name '{plugin.name}' from {file_path}; skipping")
                            continue
                        self._plugins.append(plugin)
                        self._schemas.append(plugin.schema)
                        self._functions[plugin.name] = plugin.implementation
                        loaded_names.add(plugin.name)
                        self._logger.info(f"Loaded tag '{plugin.name}' from {file_path}")
                    except Exception as e:
                        self._logger.error(f"Failed to load tag plugin from {file_path}: {e}")
                        continue

            return list(self._schemas), dict(self._functions)

    @property
    def tag_schemas(self) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self._schemas)

    @property
    def tag_functions(self) -> Dict[str, Callable[..., Awaitable[str]]]:
        with self._lock:
            return dict(self._functions)


# Module-level default manager and aggregates for host usage
_default_manager = TagManager()
TEMPLATE_TAGS, TAG_FUNCTIONS = _default_manager.load(reset=True)


def get_manager() -> TagManager:
    return _default_manager


def reload_tags(additional_paths: Optional[List[str]] = None) -> Tuple[List[Dict[str, Any]], Dict[str, Callable[..., Awaitable[str]]]]:
    """Reload tags into the default manager and update module-level aggregates."""
    global TEMPLATE_TAGS, TAG_FUNCTIONS
    schemas, funcs = _default_manager.load(reset=True, additional_paths=additional_paths)
    TEMPLATE_TAGS, TAG_FUNCTIONS = schemas, funcs
    return schemas, funcs
