"""
Binding Resolver
Safe path resolution over an immutable request context
"""

from .context import CONTEXT_ROOTS, RuntimeContext, build_runtime_context, freeze, thaw
from .resolver import (
    UNDEFINED,
    BindingPathError,
    parse_path,
    resolve,
    resolve_bindings,
    resolve_payload_bindings,
    validate_binding_path,
)

__all__ = [
    "CONTEXT_ROOTS",
    "RuntimeContext",
    "build_runtime_context",
    "freeze",
    "thaw",
    "UNDEFINED",
    "BindingPathError",
    "parse_path",
    "resolve",
    "resolve_bindings",
    "resolve_payload_bindings",
    "validate_binding_path",
]
