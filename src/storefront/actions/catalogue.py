"""Payload shapes for the closed action catalogue."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ActionPayload(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class AddToCartPayload(ActionPayload):
    variantId: str | None = Field(default=None, min_length=1, max_length=128)
    quantity: int = Field(default=1, ge=1, le=999)
    openCart: bool = True


class BuyNowPayload(ActionPayload):
    variantId: str | None = Field(default=None, min_length=1, max_length=128)
    quantity: int = Field(default=1, ge=1, le=999)


class SelectVariantPayload(ActionPayload):
    variantId: str = Field(..., min_length=1, max_length=128)


class ApplyDiscountPayload(ActionPayload):
    code: str | None = Field(default=None, max_length=64)


class SetDeliveryModePayload(ActionPayload):
    mode: Literal["DELIVERY", "PICKUP"]


class OpenCartSidebarPayload(ActionPayload):
    open: bool = True


class NavigatePayload(ActionPayload):
    # Relative paths only
    to: str = Field(..., pattern=r"^/([^/\s\\][^\s\\]*)?$", max_length=2048)
    params: dict[str, str | int | float | bool] | None = None
    replace: bool = False


class UpdateUIStatePayload(ActionPayload):
    key: str = Field(..., pattern=r"^[a-zA-Z][a-zA-Z0-9_-]{0,63}$")
    value: Any = None


class SubmitFormPayload(ActionPayload):
    formType: Literal["checkout", "login", "signup", "profile", "contact"]
    data: dict[str, Any] | None = None


ACTION_IDS = (
    "ADD_TO_CART",
    "BUY_NOW",
    "SELECT_VARIANT",
    "APPLY_DISCOUNT",
    "SET_DELIVERY_MODE",
    "OPEN_CART_SIDEBAR",
    "NAVIGATE",
    "UPDATE_UI_STATE",
    "SUBMIT_FORM",
)

PAYLOAD_MODELS: dict[str, type[ActionPayload]] = {
    "ADD_TO_CART": AddToCartPayload,
    "BUY_NOW": BuyNowPayload,
    "SELECT_VARIANT": SelectVariantPayload,
    "APPLY_DISCOUNT": ApplyDiscountPayload,
    "SET_DELIVERY_MODE": SetDeliveryModePayload,
    "OPEN_CART_SIDEBAR": OpenCartSidebarPayload,
    "NAVIGATE": NavigatePayload,
    "UPDATE_UI_STATE": UpdateUIStatePayload,
    "SUBMIT_FORM": SubmitFormPayload,
}
