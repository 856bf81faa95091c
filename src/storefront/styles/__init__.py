"""
Style Schema + Compiler
Typed style vocabulary, layer compilation and theme tokens
"""

from .schema import (
    LAYER_KEYS,
    BREAKPOINTS,
    STATES,
    StyleLayer,
    StyleObject,
    validate_style_object,
)
from .compiler import (
    STYLE_PROPERTIES,
    FlatStyleMap,
    StyleCompiler,
    compile_styles,
    compile_layer,
    present_layers,
)
from .theme import DEFAULT_THEME, compile_theme, theme_stylesheet, token_name, validate_theme

__all__ = [
    "LAYER_KEYS",
    "BREAKPOINTS",
    "STATES",
    "StyleLayer",
    "StyleObject",
    "validate_style_object",
    "STYLE_PROPERTIES",
    "FlatStyleMap",
    "StyleCompiler",
    "compile_styles",
    "compile_layer",
    "present_layers",
    "DEFAULT_THEME",
    "compile_theme",
    "theme_stylesheet",
    "token_name",
    "validate_theme",
]
