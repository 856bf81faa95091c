"""
Component Registry
Type name to props shape and renderer
"""

from .registry import ComponentRegistry, ComponentSpec, OpenProps
from .builtin import PALETTE, STRUCTURAL_TYPES, create_component_registry, register_builtin_components

__all__ = [
    "ComponentRegistry",
    "ComponentSpec",
    "OpenProps",
    "PALETTE",
    "STRUCTURAL_TYPES",
    "create_component_registry",
    "register_builtin_components",
]
