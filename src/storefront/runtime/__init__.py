"""
Rendering Runtime
Composes documents into JSON-serialisable render trees
"""

from .renderer import (
    BROKEN_REFERENCE,
    FRAGMENT,
    RenderedNode,
    RenderResult,
    RenderWarning,
    Renderer,
    apply_overrides,
)

__all__ = [
    "BROKEN_REFERENCE",
    "FRAGMENT",
    "RenderedNode",
    "RenderResult",
    "RenderWarning",
    "Renderer",
    "apply_overrides",
]
