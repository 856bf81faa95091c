"""Style Schema.

Closed, typed vocabulary for node presentation. Every leaf is a pixel number,
a theme token reference, a hex color, a bounded number or a closed enum.
Free-form CSS strings are never accepted.
"""

from typing import Annotated, Any, Literal, Mapping, Union

import pydantic
from pydantic import BaseModel, ConfigDict, Field, Strict, StringConstraints, model_validator

from ..core.errors import Issue, ValidationError, issues_from_pydantic

TOKEN_VAR_PATTERN = r"^var\(--[a-z0-9-]+\)$"
HEX_COLOR_PATTERN = r"^#([0-9a-fA-F]{6}|[0-9a-fA-F]{8})$"
FONT_FAMILY_PATTERN = r"^[A-Za-z0-9 ,\x27\x22-]+$"
ASSET_ID_PATTERN = r"^[A-Za-z0-9_-]{1,128}$"
IMAGE_URL_PATTERN = r"^(https?://|/)[^\s()\x27\x22\\<>;{}]*$"

BREAKPOINTS = ("sm", "md", "lg")
STATES = ("hover", "pressed", "focus", "disabled")
LAYER_KEYS = ("base",) + BREAKPOINTS + STATES

TokenVar = Annotated[str, StringConstraints(pattern=TOKEN_VAR_PATTERN)]
HexColor = Annotated[str, StringConstraints(pattern=HEX_COLOR_PATTERN)]
Number = Annotated[float, Strict(), Field(allow_inf_nan=False)]
Length = Union[Number, TokenVar]
Color = Union[TokenVar, HexColor]


class StyleModel(BaseModel):
    """Base for all style groups: strict, closed and immutable."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class Box4(StyleModel):
    top: Length | None = None
    right: Length | None = None
    bottom: Length | None = None
    left: Length | None = None


class Radius4(StyleModel):
    tl: Length | None = None
    tr: Length | None = None
    br: Length | None = None
    bl: Length | None = None


class Shadow(StyleModel):
    x: Length
    y: Length
    blur: Length
    spread: Length | None = None
    color: Color | None = None
    inset: Annotated[bool, Strict()] | None = None


class Transform(StyleModel):
    translateX: Length | None = None
    translateY: Length | None = None
    rotateDeg: Annotated[float, Strict(), Field(ge=-360, le=360, allow_inf_nan=False)] | None = None
    scale: Annotated[float, Strict(), Field(ge=0, le=10, allow_inf_nan=False)] | None = None


class LayoutStyle(StyleModel):
    display: Literal["block", "inline-block", "flex", "grid", "none"] | None = None
    width: Length | None = None
    height: Length | None = None
    minWidth: Length | None = None
    maxWidth: Length | None = None
    minHeight: Length | None = None
    maxHeight: Length | None = None
    aspectRatio: Annotated[float, Strict(), Field(gt=0, le=100, allow_inf_nan=False)] | None = None
    overflow: Literal["visible", "hidden", "auto", "scroll"] | None = None
    visibility: Literal["visible", "hidden"] | None = None


class SpacingStyle(StyleModel):
    margin: Box4 | None = None
    padding: Box4 | None = None
    gap: Length | None = None


class PositionStyle(StyleModel):
    position: Literal["static", "relative", "absolute", "fixed", "sticky"] | None = None
    top: Length | None = None
    right: Length | None = None
    bottom: Length | None = None
    left: Length | None = None
    zIndex: Annotated[int, Strict(), Field(ge=-1000, le=1000)] | None = None
    transform: Transform | None = None


class FlexStyle(StyleModel):
    direction: Literal["row", "row-reverse", "column", "column-reverse"] | None = None
    justify: Literal[
        "flex-start", "center", "flex-end", "space-between", "space-around", "space-evenly"
    ] | None = None
    align: Literal["stretch", "flex-start", "center", "flex-end", "baseline"] | None = None
    wrap: Literal["nowrap", "wrap", "wrap-reverse"] | None = None


class GridStyle(StyleModel):
    columns: Annotated[int, Strict(), Field(ge=1, le=24)] | None = None
    rows: Annotated[int, Strict(), Field(ge=1, le=24)] | None = None
    columnGap: Length | None = None
    rowGap: Length | None = None
    justifyItems: Literal["start", "center", "end", "stretch"] | None = None
    alignItems: Literal["start", "center", "end", "stretch"] | None = None


class GradientStop(StyleModel):
    color: Color
    position: Annotated[float, Strict(), Field(ge=0, le=100, allow_inf_nan=False)]


class Gradient(StyleModel):
    kind: Literal["linear"] = "linear"
    angleDeg: Annotated[float, Strict(), Field(ge=0, le=360, allow_inf_nan=False)] = 180
    stops: list[GradientStop] = Field(min_length=2, max_length=6)


class BackgroundImage(StyleModel):
    assetId: Annotated[str, StringConstraints(pattern=ASSET_ID_PATTERN)] | None = None
    url: Annotated[str, StringConstraints(pattern=IMAGE_URL_PATTERN, max_length=2048)] | None = None
    fit: Literal["cover", "contain", "auto"] | None = None
    position: Literal["center", "top", "bottom", "left", "right"] | None = None
    repeat: Literal["no-repeat", "repeat", "repeat-x", "repeat-y"] | None = None

    @model_validator(mode="after")
    def check_source(self) -> "BackgroundImage":
        if self.url is None and self.assetId is None:
            raise ValueError("image background needs a url or an assetId")
        return self


class BackgroundStyle(StyleModel):
    type: Literal["none", "color", "gradient", "image"] = "none"
    color: Color | None = None
    gradient: Gradient | None = None
    image: BackgroundImage | None = None

    @model_validator(mode="after")
    def check_variant(self) -> "BackgroundStyle":
        if self.type == "color" and self.color is None:
            raise ValueError("color background needs a color")
        if self.type == "gradient" and self.gradient is None:
            raise ValueError("gradient background needs a gradient")
        if self.type == "image" and self.image is None:
            raise ValueError("image background needs an image")
        return self


class BorderStyle(StyleModel):
    width: Length | None = None
    style: Literal["none", "solid", "dashed", "dotted"] | None = None
    color: Color | None = None
    radius: Radius4 | None = None


class EffectsStyle(StyleModel):
    opacity: Annotated[float, Strict(), Field(ge=0, le=1, allow_inf_nan=False)] | None = None
    shadow: Shadow | None = None


class TypographyStyle(StyleModel):
    fontFamily: Union[
        TokenVar, Annotated[str, StringConstraints(pattern=FONT_FAMILY_PATTERN, max_length=200)]
    ] | None = None
    fontSize: Length | None = None
    lineHeight: Annotated[float, Strict(), Field(ge=0, le=10, allow_inf_nan=False)] | None = None
    letterSpacing: Annotated[float, Strict(), Field(ge=-20, le=50, allow_inf_nan=False)] | None = None
    fontWeight: Annotated[int, Strict(), Field(ge=100, le=900, multiple_of=100)] | None = None
    textAlign: Literal["left", "center", "right", "justify"] | None = None
    textTransform: Literal["none", "uppercase", "lowercase", "capitalize"] | None = None
    textDecoration: Literal["none", "underline", "line-through"] | None = None
    color: Color | None = None


class TransitionStyle(StyleModel):
    preset: Literal["none", "fast", "base", "slow"] | None = None
    easing: Literal["ease", "ease-in", "ease-out", "ease-in-out", "linear"] | None = None


class StyleLayer(StyleModel):
    """Sparse map over the fixed style groups."""

    layout: LayoutStyle | None = None
    spacing: SpacingStyle | None = None
    position: PositionStyle | None = None
    flex: FlexStyle | None = None
    grid: GridStyle | None = None
    background: BackgroundStyle | None = None
    border: BorderStyle | None = None
    effects: EffectsStyle | None = None
    typography: TypographyStyle | None = None
    transition: TransitionStyle | None = None


class Breakpoints(StyleModel):
    sm: StyleLayer | None = None
    md: StyleLayer | None = None
    lg: StyleLayer | None = None


class States(StyleModel):
    hover: StyleLayer | None = None
    pressed: StyleLayer | None = None
    focus: StyleLayer | None = None
    disabled: StyleLayer | None = None


class StyleObject(StyleModel):
    """Base layer plus optional breakpoint and state overlays."""

    base: StyleLayer = Field(default_factory=StyleLayer)
    breakpoints: Breakpoints | None = None
    states: States | None = None


def validate_style_object(raw: Mapping[str, Any] | None, location: str = "styles") -> StyleObject:
    """
    Validate a raw style object.

    Args:
        raw: Style object as authored (JSON-compatible mapping)
        location: Location prefix used in reported issues

    Returns:
        Parsed StyleObject

    Raises:
        ValidationError: With one issue per offending field
    """
    if raw is None:
        return StyleObject()
    if not isinstance(raw, Mapping):
        raise ValidationError("Invalid style object", [Issue(location, "must be an object")])
    try:
        return StyleObject.model_validate(dict(raw))
    except pydantic.ValidationError as e:
        raise ValidationError("Invalid style object", issues_from_pydantic(e, location)) from e


__all__ = [
    "TOKEN_VAR_PATTERN",
    "HEX_COLOR_PATTERN",
    "BREAKPOINTS",
    "STATES",
    "LAYER_KEYS",
    "StyleLayer",
    "StyleObject",
    "Shadow",
    "Gradient",
    "validate_style_object",
]
