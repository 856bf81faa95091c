"""Style Compiler.

Turns a validated style object into a flat, renderer-native map of kebab-case
CSS properties for one layer. Compilation is pure and total: anything that is
not of a recognised kind is skipped and logged, never raised.
"""

import re
from typing import Any, Callable, Mapping

from pydantic import BaseModel

from ..core.cache import LRUCache
from ..core.hash import content_checksum
from ..core.logging_config import get_logger
from .schema import BREAKPOINTS, HEX_COLOR_PATTERN, LAYER_KEYS, STATES, TOKEN_VAR_PATTERN

logger = get_logger(__name__)

FlatStyleMap = dict[str, str]

_TOKEN_RE = re.compile(TOKEN_VAR_PATTERN)
_HEX_RE = re.compile(HEX_COLOR_PATTERN)

DEFAULT_SHADOW_COLOR = "rgba(0, 0, 0, 0.2)"
DEFAULT_EASING = "ease"
TRANSITION_DURATIONS = {"fast": "150ms", "base": "250ms", "slow": "400ms"}

STYLE_PROPERTIES = frozenset(
    {
        # layout
        "display", "width", "height", "min-width", "max-width", "min-height",
        "max-height", "aspect-ratio", "overflow", "visibility",
        # spacing
        "margin-top", "margin-right", "margin-bottom", "margin-left",
        "padding-top", "padding-right", "padding-bottom", "padding-left", "gap",
        # position
        "position", "top", "right", "bottom", "left", "z-index", "transform",
        # flex
        "flex-direction", "justify-content", "align-items", "flex-wrap",
        # grid
        "grid-template-columns", "grid-template-rows", "column-gap", "row-gap",
        "justify-items",
        # background
        "background-color", "background-image", "background-size",
        "background-position", "background-repeat",
        # border
        "border-width", "border-style", "border-color",
        "border-top-left-radius", "border-top-right-radius",
        "border-bottom-right-radius", "border-bottom-left-radius",
        # effects
        "opacity", "box-shadow",
        # typography
        "font-family", "font-size", "line-height", "letter-spacing", "font-weight",
        "text-align", "text-transform", "text-decoration", "color",
        # transition
        "transition",
    }
)


class _InvalidValue(Exception):
    pass


def _violation(group: str, prop: str, value: Any) -> None:
    logger.warning("style_invariant_violation", group=group, prop=prop, value=repr(value)[:200])


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value == value


def _num(value: Any) -> str:
    if not _is_number(value):
        raise _InvalidValue(value)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def _length(value: Any) -> str:
    if isinstance(value, str) and _TOKEN_RE.match(value):
        return value
    return f"{_num(value)}px"


def _color(value: Any) -> str:
    if isinstance(value, str) and (_TOKEN_RE.match(value) or _HEX_RE.match(value)):
        return value
    raise _InvalidValue(value)


def _keyword(value: Any) -> str:
    if isinstance(value, str) and re.fullmatch(r"[a-z-]+", value):
        return value
    raise _InvalidValue(value)


def _emit(
    out: FlatStyleMap,
    group: str,
    source: Mapping[str, Any],
    prop: str,
    css: str,
    fmt: Callable[[Any], str],
) -> None:
    value = source.get(prop)
    if value is None:
        return
    try:
        out[css] = fmt(value)
    except _InvalidValue:
        _violation(group, prop, value)


def _group(layer: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = layer.get(name)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        _violation(name, "*", value)
        return {}
    return value


def _compile_layout(g: Mapping[str, Any], out: FlatStyleMap) -> None:
    _emit(out, "layout", g, "display", "display", _keyword)
    for prop, css in (
        ("width", "width"),
        ("height", "height"),
        ("minWidth", "min-width"),
        ("maxWidth", "max-width"),
        ("minHeight", "min-height"),
        ("maxHeight", "max-height"),
    ):
        _emit(out, "layout", g, prop, css, _length)
    _emit(out, "layout", g, "aspectRatio", "aspect-ratio", _num)
    _emit(out, "layout", g, "overflow", "overflow", _keyword)
    _emit(out, "layout", g, "visibility", "visibility", _keyword)


def _compile_box(g: Mapping[str, Any], name: str, out: FlatStyleMap) -> None:
    box = g.get(name)
    if box is None:
        return
    if not isinstance(box, Mapping):
        _violation("spacing", name, box)
        return
    for side in ("top", "right", "bottom", "left"):
        _emit(out, "spacing", box, side, f"{name}-{side}", _length)


def _compile_spacing(g: Mapping[str, Any], out: FlatStyleMap) -> None:
    _compile_box(g, "margin", out)
    _compile_box(g, "padding", out)
    _emit(out, "spacing", g, "gap", "gap", _length)


def _transform(value: Any) -> str:
    if not isinstance(value, Mapping):
        raise _InvalidValue(value)
    parts = []
    if value.get("translateX") is not None:
        parts.append(f"translateX({_length(value['translateX'])})")
    if value.get("translateY") is not None:
        parts.append(f"translateY({_length(value['translateY'])})")
    if value.get("rotateDeg") is not None:
        parts.append(f"rotate({_num(value['rotateDeg'])}deg)")
    if value.get("scale") is not None:
        parts.append(f"scale({_num(value['scale'])})")
    if not parts:
        raise _InvalidValue(value)
    return " ".join(parts)


def _compile_position(g: Mapping[str, Any], out: FlatStyleMap) -> None:
    _emit(out, "position", g, "position", "position", _keyword)
    for side in ("top", "right", "bottom", "left"):
        _emit(out, "position", g, side, side, _length)
    _emit(out, "position", g, "zIndex", "z-index", _num)
    if g.get("transform") is not None:
        try:
            out["transform"] = _transform(g["transform"])
        except _InvalidValue:
            # An empty transform object emits nothing
            if g["transform"] != {}:
                _violation("position", "transform", g["transform"])


def _compile_flex(g: Mapping[str, Any], out: FlatStyleMap) -> None:
    _emit(out, "flex", g, "direction", "flex-direction", _keyword)
    _emit(out, "flex", g, "justify", "justify-content", _keyword)
    _emit(out, "flex", g, "align", "align-items", _keyword)
    _emit(out, "flex", g, "wrap", "flex-wrap", _keyword)


def _repeat(value: Any) -> str:
    if not isinstance(value, int) or isinstance(value, bool) or value < 1:
        raise _InvalidValue(value)
    return f"repeat({value}, minmax(0, 1fr))"


def _compile_grid(g: Mapping[str, Any], out: FlatStyleMap) -> None:
    _emit(out, "grid", g, "columns", "grid-template-columns", _repeat)
    _emit(out, "grid", g, "rows", "grid-template-rows", _repeat)
    _emit(out, "grid", g, "columnGap", "column-gap", _length)
    _emit(out, "grid", g, "rowGap", "row-gap", _length)
    _emit(out, "grid", g, "justifyItems", "justify-items", _keyword)
    _emit(out, "grid", g, "alignItems", "align-items", _keyword)


def _gradient(value: Any) -> str:
    if not isinstance(value, Mapping):
        raise _InvalidValue(value)
    stops = value.get("stops")
    if not isinstance(stops, (list, tuple)) or not 2 <= len(stops) <= 6:
        raise _InvalidValue(value)
    rendered = []
    for stop in stops:
        if not isinstance(stop, Mapping):
            raise _InvalidValue(stop)
        rendered.append(f"{_color(stop.get('color'))} {_num(stop.get('position'))}%")
    angle = value.get("angleDeg", 180)
    return f"linear-gradient({_num(angle)}deg, {', '.join(rendered)})"


def _compile_background(g: Mapping[str, Any], out: FlatStyleMap) -> None:
    kind = g.get("type", "none")
    if kind == "none":
        return
    if kind == "color":
        _emit(out, "background", g, "color", "background-color", _color)
    elif kind == "gradient":
        _emit(out, "background", g, "gradient", "background-image", _gradient)
    elif kind == "image":
        image = g.get("image")
        if not isinstance(image, Mapping) or not (image.get("url") or image.get("assetId")):
            _violation("background", "image", image)
            return
        source = image.get("url") or image.get("assetId")
        if not isinstance(source, str) or re.search(r"[\s()'\"\\<>;{}]", source):
            _violation("background", "image", source)
            return
        out["background-image"] = f"url({source})"
        _emit(out, "background", image, "fit", "background-size", _keyword)
        _emit(out, "background", image, "position", "background-position", _keyword)
        _emit(out, "background", image, "repeat", "background-repeat", _keyword)
    else:
        _violation("background", "type", kind)


def _compile_border(g: Mapping[str, Any], out: FlatStyleMap) -> None:
    _emit(out, "border", g, "width", "border-width", _length)
    _emit(out, "border", g, "style", "border-style", _keyword)
    _emit(out, "border", g, "color", "border-color", _color)
    radius = g.get("radius")
    if radius is None:
        return
    if not isinstance(radius, Mapping):
        _violation("border", "radius", radius)
        return
    for corner, css in (
        ("tl", "border-top-left-radius"),
        ("tr", "border-top-right-radius"),
        ("br", "border-bottom-right-radius"),
        ("bl", "border-bottom-left-radius"),
    ):
        value = radius.get(corner)
        if value is None:
            out[css] = "0px"
            continue
        try:
            out[css] = _length(value)
        except _InvalidValue:
            _violation("border", f"radius.{corner}", value)


def _shadow(value: Any) -> str:
    if not isinstance(value, Mapping):
        raise _InvalidValue(value)
    spread = value.get("spread")
    color = value.get("color")
    parts = [
        _length(value.get("x", 0)),
        _length(value.get("y", 0)),
        _length(value.get("blur", 0)),
        _length(spread) if spread is not None else "0px",
        _color(color) if color is not None else DEFAULT_SHADOW_COLOR,
    ]
    if value.get("inset") is True:
        parts.insert(0, "inset")
    return " ".join(parts)


def _compile_effects(g: Mapping[str, Any], out: FlatStyleMap) -> None:
    _emit(out, "effects", g, "opacity", "opacity", _num)
    _emit(out, "effects", g, "shadow", "box-shadow", _shadow)


def _font_family(value: Any) -> str:
    if isinstance(value, str) and value and re.fullmatch(r"[A-Za-z0-9 ,'\"-]+", value):
        return value
    raise _InvalidValue(value)


def _compile_typography(g: Mapping[str, Any], out: FlatStyleMap) -> None:
    _emit(out, "typography", g, "fontFamily", "font-family", _font_family)
    _emit(out, "typography", g, "fontSize", "font-size", _length)
    _emit(out, "typography", g, "lineHeight", "line-height", _num)
    _emit(out, "typography", g, "letterSpacing", "letter-spacing", _length)
    _emit(out, "typography", g, "fontWeight", "font-weight", _num)
    _emit(out, "typography", g, "textAlign", "text-align", _keyword)
    _emit(out, "typography", g, "textTransform", "text-transform", _keyword)
    _emit(out, "typography", g, "textDecoration", "text-decoration", _keyword)
    _emit(out, "typography", g, "color", "color", _color)


def _compile_transition(g: Mapping[str, Any], out: FlatStyleMap) -> None:
    preset = g.get("preset")
    easing = g.get("easing") or DEFAULT_EASING
    if preset is None and g.get("easing") is None:
        return
    if preset == "none":
        out["transition"] = "none"
        return
    try:
        easing = _keyword(easing)
    except _InvalidValue:
        _violation("transition", "easing", easing)
        easing = DEFAULT_EASING
    duration = TRANSITION_DURATIONS.get(preset, TRANSITION_DURATIONS["base"])
    out["transition"] = f"all {duration} {easing}"


_GROUP_COMPILERS = (
    ("layout", _compile_layout),
    ("spacing", _compile_spacing),
    ("position", _compile_position),
    ("flex", _compile_flex),
    ("grid", _compile_grid),
    ("background", _compile_background),
    ("border", _compile_border),
    ("effects", _compile_effects),
    ("typography", _compile_typography),
    ("transition", _compile_transition),
)


def compile_layer(layer: Mapping[str, Any] | None) -> FlatStyleMap:
    """Compile a single style layer to a flat property map."""
    out: FlatStyleMap = {}
    if not layer:
        return out
    if not isinstance(layer, Mapping):
        _violation("layer", "*", layer)
        return out
    for name, compile_group in _GROUP_COMPILERS:
        compile_group(_group(layer, name), out)
    return out


def select_layer(style_object: Mapping[str, Any] | None, layer_key: str = "base") -> Mapping[str, Any]:
    """Pick the layer named by ``layer_key``, falling back to base."""
    if not isinstance(style_object, Mapping):
        return {}
    base = style_object.get("base") or {}
    if layer_key in BREAKPOINTS:
        container = style_object.get("breakpoints") or {}
    elif layer_key in STATES:
        container = style_object.get("states") or {}
    else:
        return base
    overlay = container.get(layer_key) if isinstance(container, Mapping) else None
    return overlay if overlay is not None else base


def _as_mapping(style_object: Any) -> Mapping[str, Any] | None:
    if isinstance(style_object, BaseModel):
        return style_object.model_dump(exclude_none=True)
    return style_object


def compile_styles(style_object: Any, layer_key: str = "base") -> FlatStyleMap:
    """
    Compile a style object for one layer.

    Args:
        style_object: Validated style object (mapping or StyleObject model)
        layer_key: base, sm, md, lg, hover, pressed, focus or disabled.
            Unknown or absent layers fall back to base.

    Returns:
        Flat map of kebab-case CSS property names to values
    """
    return compile_layer(select_layer(_as_mapping(style_object), layer_key))


def present_layers(style_object: Any) -> list[str]:
    """Layer keys that carry their own content, base first."""
    mapping = _as_mapping(style_object)
    if not isinstance(mapping, Mapping):
        return []
    keys = ["base"]
    for key in LAYER_KEYS[1:]:
        container = mapping.get("breakpoints" if key in BREAKPOINTS else "states") or {}
        if isinstance(container, Mapping) and container.get(key):
            keys.append(key)
    return keys


class StyleCompiler:
    """
    Caching front for ``compile_styles``.

    Compiled layers are cached by (style checksum, layer) so that prefab
    instances and repeater rows sharing a style object compile once.
    """

    def __init__(self, cache_size: int = 512, metrics: Any = None) -> None:
        self.cache: LRUCache[FlatStyleMap] = LRUCache(max_size=cache_size)
        self.metrics = metrics

    def compile(self, style_object: Any, layer_key: str = "base") -> FlatStyleMap:
        mapping = _as_mapping(style_object)
        if not mapping:
            return {}
        key = f"{content_checksum(mapping)}:{layer_key}"
        cached = self.cache.get(key)
        if self.metrics is not None:
            self.metrics.record_style_cache(cached is not None)
        if cached is None:
            cached = compile_styles(mapping, layer_key)
            self.cache.set(key, cached)
        return dict(cached)

    def compile_all(self, style_object: Any) -> dict[str, FlatStyleMap]:
        """Compile every layer the style object defines."""
        return {key: self.compile(style_object, key) for key in present_layers(style_object)}


__all__ = [
    "FlatStyleMap",
    "STYLE_PROPERTIES",
    "DEFAULT_SHADOW_COLOR",
    "compile_styles",
    "compile_layer",
    "select_layer",
    "present_layers",
    "StyleCompiler",
]
