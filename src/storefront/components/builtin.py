"""Built-in component palette."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..bindings.resolver import PATH_PATTERN
from .registry import ComponentRegistry, ComponentSpec, OpenProps

SAFE_HREF_PATTERN = r"^(/([^/\s<>\x22\x27][^\s<>\x22\x27]*)?|(https://|mailto:|tel:)[^\s<>\x22\x27]*)$"
SAFE_SRC_PATTERN = r"^(/([^/\s<>\x22\x27][^\s<>\x22\x27]*)?|https://[^\s<>\x22\x27]*)$"
KEY_PATTERN = r"^[A-Za-z0-9_:./-]{1,128}$"

STRUCTURAL_TYPES = frozenset({"Repeater", "Conditional", "Slot", "PrefabInstance"})


class TextProps(OpenProps):
    text: str | int | float | None = None
    variant: Literal["body", "caption", "label", "muted"] = "body"


class HeadingProps(OpenProps):
    text: str | int | float | None = None
    level: int = Field(default=2, ge=1, le=6)


class LinkProps(OpenProps):
    href: str = Field(default="/", pattern=SAFE_HREF_PATTERN, max_length=2048)
    label: str | None = None
    newTab: bool = False


class ImageProps(OpenProps):
    src: str | None = Field(default=None, pattern=SAFE_SRC_PATTERN, max_length=2048)
    assetId: str | None = Field(default=None, pattern=r"^[A-Za-z0-9_-]{1,128}$")
    alt: str = ""


class ButtonProps(OpenProps):
    label: str | int | float = "Button"
    variant: Literal["primary", "secondary", "outline", "ghost", "link"] = "primary"
    disabled: bool = False


class SpacerProps(OpenProps):
    size: float = Field(default=16, ge=0, le=1000)


class PriceDisplayProps(OpenProps):
    amount: float | int | None = None
    currency: str = Field(default="USD", pattern=r"^[A-Z]{3}$")
    compareAt: float | int | None = None


class ProductGridProps(OpenProps):
    columns: int = Field(default=4, ge=1, le=12)
    limit: int = Field(default=12, ge=1, le=100)


class RepeaterProps(OpenProps):
    dataPath: str = Field(..., pattern=PATH_PATTERN.pattern, max_length=256)
    limit: int | None = Field(default=None, ge=1, le=500)
    emptyText: str | None = None


class ConditionalProps(OpenProps):
    show: Any = None


class NodeOverride(BaseModel):
    model_config = ConfigDict(extra="forbid")

    props: dict[str, Any] | None = None
    styles: dict[str, Any] | None = None


class PrefabInstanceProps(OpenProps):
    prefabKey: str = Field(..., pattern=KEY_PATTERN)
    overrides: dict[str, NodeOverride] | None = None

    @field_validator("overrides")
    @classmethod
    def limit_overrides(cls, v: dict[str, NodeOverride] | None) -> dict[str, NodeOverride] | None:
        if v is not None and len(v) > 200:
            raise ValueError("too many overrides")
        return v


def _render_heading(props: dict[str, Any]) -> dict[str, Any]:
    level = props.get("level")
    props["tag"] = f"h{level}" if level in (1, 2, 3, 4, 5, 6) else "h2"
    return props


def _render_link(props: dict[str, Any]) -> dict[str, Any]:
    if props.get("newTab"):
        props["rel"] = "noopener noreferrer"
        props["target"] = "_blank"
    return props


PALETTE: dict[str, list[str]] = {
    "layout": ["Container", "Row", "Column", "Section", "Grid", "Flex", "Spacer", "Divider"],
    "navigation": ["Header", "Footer", "Navbar", "NavItem", "NavMenu", "Breadcrumb", "Link"],
    "content": ["Text", "Heading", "Image", "Video", "Icon", "Badge", "Avatar"],
    "commerce": [
        "ProductCard", "ProductGrid", "ProductDetails", "VariantSelector", "PriceDisplay",
        "AddToCartButton", "BuyNowButton", "QuantitySelector", "CartSidebar", "CartItem",
        "SimilarProducts", "CollectionFilters", "CollectionSort",
    ],
    "auth": ["LoginForm", "SignupForm", "UserMenu", "ProfileCard"],
    "checkout": ["CheckoutForm", "DeliveryModeSelector", "OrderSummary", "PaymentMethods"],
    "orders": ["OrderList", "OrderCard", "OrderDetails", "OrderTimeline"],
    "forms": ["Input", "Select", "Checkbox", "RadioGroup", "Textarea", "Button", "Form"],
    "utility": ["Repeater", "Conditional", "Slot", "PrefabInstance"],
}

PROPS_MODELS: dict[str, type[BaseModel]] = {
    "Text": TextProps,
    "Heading": HeadingProps,
    "Link": LinkProps,
    "NavItem": LinkProps,
    "Image": ImageProps,
    "Button": ButtonProps,
    "AddToCartButton": ButtonProps,
    "BuyNowButton": ButtonProps,
    "Spacer": SpacerProps,
    "PriceDisplay": PriceDisplayProps,
    "ProductGrid": ProductGridProps,
    "Repeater": RepeaterProps,
    "Conditional": ConditionalProps,
    "PrefabInstance": PrefabInstanceProps,
}

RENDERERS = {
    "Heading": _render_heading,
    "Link": _render_link,
    "NavItem": _render_link,
}

LEAF_TYPES = frozenset(
    {
        "Spacer", "Divider", "Text", "Heading", "Image", "Video", "Icon", "Badge",
        "Avatar", "Slot", "PrefabInstance", "Input", "Textarea",
    }
)


def register_builtin_components(registry: ComponentRegistry) -> ComponentRegistry:
    for category, type_names in PALETTE.items():
        for type_name in type_names:
            kwargs: dict[str, Any] = {"accepts_children": type_name not in LEAF_TYPES}
            if type_name in PROPS_MODELS:
                kwargs["props_model"] = PROPS_MODELS[type_name]
            if type_name in RENDERERS:
                kwargs["renderer"] = RENDERERS[type_name]
            registry.register(ComponentSpec(type_name=type_name, category=category, **kwargs))
    return registry


def create_component_registry() -> ComponentRegistry:
    """Registry holding the built-in palette."""
    return register_builtin_components(ComponentRegistry())
