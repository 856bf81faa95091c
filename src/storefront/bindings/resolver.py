"""Binding Resolver.

Resolves dotted/bracketed paths (``product.variants[0].id``) against the
request context. Resolution only ever indexes mappings by key and sequences
by position: no attribute access, no calls. Anything that cannot be resolved
yields ``UNDEFINED`` instead of raising, so store-authored content degrades
to component defaults.
"""

import re
from functools import lru_cache
from typing import Any, Mapping, Sequence

from .context import RuntimeContext, thaw

MAX_PATH_LENGTH = 256
MAX_SEGMENTS = 32

PATH_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*(\.[a-zA-Z_][a-zA-Z0-9_]*|\[\d+\])*$")
_SEGMENT_PATTERN = re.compile(r"\.?([a-zA-Z_][a-zA-Z0-9_]*)|\[(\d+)\]")

FORBIDDEN_SEGMENTS = frozenset(
    {
        "__proto__",
        "constructor",
        "prototype",
        "__class__",
        "__dict__",
        "__globals__",
        "__builtins__",
        "__import__",
        "__subclasses__",
        "__bases__",
        "__mro__",
        "__code__",
        "__closure__",
        "__getattribute__",
        "__init__",
        "__module__",
        "mro",
        "gi_frame",
        "f_globals",
        "tb_frame",
    }
)


class _Undefined:
    """Marker for an unresolvable binding, distinct from a present ``None``."""

    _instance: "_Undefined | None" = None

    def __new__(cls) -> "_Undefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __reduce__(self) -> str:
        return "UNDEFINED"


UNDEFINED = _Undefined()

Segment = str | int


class BindingPathError(ValueError):
    """Binding path is malformed or touches a forbidden segment."""


@lru_cache(maxsize=2048)
def _parse(path: str) -> tuple[Segment, ...]:
    if len(path) > MAX_PATH_LENGTH:
        raise BindingPathError(f"path longer than {MAX_PATH_LENGTH} characters")
    if not PATH_PATTERN.match(path):
        raise BindingPathError(f"malformed path: {path!r}")

    segments: list[Segment] = []
    for match in _SEGMENT_PATTERN.finditer(path):
        name, index = match.groups()
        if name is not None:
            if name.startswith("_") or name in FORBIDDEN_SEGMENTS:
                raise BindingPathError(f"forbidden segment: {name!r}")
            segments.append(name)
        else:
            segments.append(int(index))

    if len(segments) > MAX_SEGMENTS:
        raise BindingPathError(f"path deeper than {MAX_SEGMENTS} segments")
    return tuple(segments)


def parse_path(path: str) -> tuple[Segment, ...]:
    """
    Split a binding path into key and index segments.

    Raises:
        BindingPathError: Malformed path or forbidden segment
    """
    if not isinstance(path, str):
        raise BindingPathError("path must be a string")
    return _parse(path)


def validate_binding_path(path: Any) -> tuple[bool, str | None]:
    """Save-time check. Returns ``(ok, error)``."""
    try:
        parse_path(path)
        return True, None
    except BindingPathError as e:
        return False, str(e)


def _step(current: Any, segment: Segment) -> Any:
    if isinstance(segment, int):
        if isinstance(current, (str, bytes, bytearray)) or not isinstance(current, Sequence):
            return UNDEFINED
        if segment >= len(current):
            return UNDEFINED
        return current[segment]

    if not isinstance(current, Mapping):
        return UNDEFINED
    if segment not in current:
        return UNDEFINED
    return current[segment]


def resolve(path: str, context: Any) -> Any:
    """
    Resolve ``path`` against ``context``.

    Args:
        path: Binding path
        context: RuntimeContext or plain mapping

    Returns:
        The value found, or UNDEFINED
    """
    try:
        segments = parse_path(path)
    except BindingPathError:
        return UNDEFINED

    current = context.as_mapping() if isinstance(context, RuntimeContext) else context
    for segment in segments:
        current = _step(current, segment)
        if current is UNDEFINED or callable(current):
            return UNDEFINED
    return current


def resolve_bindings(
    props: Mapping[str, Any] | None,
    bindings: Mapping[str, str] | None,
    context: Any,
) -> dict[str, Any]:
    """
    Merge resolved bindings into a copy of ``props``.

    A binding that resolves to UNDEFINED leaves the static prop untouched (or
    absent), so the component default applies.
    """
    resolved = dict(props or {})
    for prop, path in (bindings or {}).items():
        value = resolve(path, context)
        if value is not UNDEFINED:
            resolved[prop] = thaw(value)
    return resolved


def resolve_payload_bindings(
    payload: Mapping[str, Any] | None,
    payload_bindings: Mapping[str, str] | None,
    context: Any,
) -> dict[str, Any]:
    """Effective action payload: static payload with resolved bindings on top."""
    return resolve_bindings(payload, payload_bindings, context)


__all__ = [
    "UNDEFINED",
    "FORBIDDEN_SEGMENTS",
    "BindingPathError",
    "parse_path",
    "validate_binding_path",
    "resolve",
    "resolve_bindings",
    "resolve_payload_bindings",
]
