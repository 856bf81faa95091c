"""
Built-in Action Handlers
Client-side actions return instruction data; server actions delegate to
the cart, discount and form collaborators.
"""

from typing import Any

from ..core.logging_config import get_logger
from .catalogue import PAYLOAD_MODELS
from .registry import ActionRegistry
from .types import ActionDefinition, ActionResult, CartService, DiscountService, FormService

logger = get_logger(__name__)

CHECKOUT_PATH = "/checkout"


def _missing_variant() -> ActionResult:
    return ActionResult(
        success=False,
        error="variantId is required",
        metadata={"code": "missing_variant"},
    )


class BuiltinHandlers:
    """Executors for the built-in catalogue."""

    def __init__(
        self,
        cart: CartService | None = None,
        discounts: DiscountService | None = None,
        forms: FormService | None = None,
    ) -> None:
        self.cart = cart
        self.discounts = discounts
        self.forms = forms

    def _unavailable(self, name: str) -> ActionResult:
        logger.error("collaborator_unavailable", service=name)
        return ActionResult(success=False, error=f"{name} service unavailable")

    # Server actions

    def add_to_cart(self, payload: dict[str, Any], store_id: str) -> ActionResult:
        if not payload.get("variantId"):
            return _missing_variant()
        if self.cart is None:
            return self._unavailable("cart")
        cart = self.cart.add_item(store_id, payload["variantId"], payload["quantity"])
        data: dict[str, Any] = {"cart": cart}
        if payload.get("openCart"):
            data["ui_state"] = {"cartOpen": True}
        return ActionResult(success=True, data=data)

    def buy_now(self, payload: dict[str, Any], store_id: str) -> ActionResult:
        if not payload.get("variantId"):
            return _missing_variant()
        if self.cart is None:
            return self._unavailable("cart")
        cart = self.cart.add_item(store_id, payload["variantId"], payload["quantity"])
        return ActionResult(success=True, data={"cart": cart, "redirect": CHECKOUT_PATH})

    def apply_discount(self, payload: dict[str, Any], store_id: str) -> ActionResult:
        code = (payload.get("code") or "").strip()
        if not code:
            return ActionResult(success=False, error="code is required", metadata={"code": "missing_code"})
        if self.discounts is None:
            return self._unavailable("discount")
        return ActionResult(success=True, data={"discount": self.discounts.apply_code(store_id, code)})

    def set_delivery_mode(self, payload: dict[str, Any], store_id: str) -> ActionResult:
        if self.cart is None:
            return self._unavailable("cart")
        return ActionResult(success=True, data={"cart": self.cart.set_delivery_mode(store_id, payload["mode"])})

    def submit_form(self, payload: dict[str, Any], store_id: str) -> ActionResult:
        if self.forms is None:
            return self._unavailable("form")
        result = self.forms.submit(store_id, payload["formType"], payload.get("data") or {})
        return ActionResult(success=True, data={"form": result})

    # Client-side actions

    def select_variant(self, payload: dict[str, Any], store_id: str) -> dict[str, Any]:
        return {"ui_state": {"selectedVariantId": payload["variantId"]}}

    def open_cart_sidebar(self, payload: dict[str, Any], store_id: str) -> dict[str, Any]:
        return {"ui_state": {"cartOpen": payload["open"]}}

    def navigate(self, payload: dict[str, Any], store_id: str) -> dict[str, Any]:
        return {
            "navigate": {
                "to": payload["to"],
                "params": payload.get("params") or {},
                "replace": payload["replace"],
            }
        }

    def update_ui_state(self, payload: dict[str, Any], store_id: str) -> dict[str, Any]:
        return {"ui_state": {payload["key"]: payload.get("value")}}


def register_builtin_actions(
    registry: ActionRegistry,
    cart: CartService | None = None,
    discounts: DiscountService | None = None,
    forms: FormService | None = None,
) -> ActionRegistry:
    """Register the built-in catalogue on ``registry``."""
    handlers = BuiltinHandlers(cart=cart, discounts=discounts, forms=forms)
    entries = (
        ("ADD_TO_CART", handlers.add_to_cart, "Add to cart", "Add a variant to the cart", ("variantId", "quantity")),
        ("BUY_NOW", handlers.buy_now, "Buy now", "Add a variant and go to checkout", ("variantId", "quantity")),
        ("SELECT_VARIANT", handlers.select_variant, "Select variant", "Select a product variant", ("variantId",)),
        ("APPLY_DISCOUNT", handlers.apply_discount, "Apply discount", "Apply a discount code", ("code",)),
        ("SET_DELIVERY_MODE", handlers.set_delivery_mode, "Set delivery mode", "Switch delivery or pickup", ("mode",)),
        ("OPEN_CART_SIDEBAR", handlers.open_cart_sidebar, "Open cart", "Open or close the cart sidebar", ()),
        ("NAVIGATE", handlers.navigate, "Navigate", "Go to a storefront path", ("to", "params")),
        ("UPDATE_UI_STATE", handlers.update_ui_state, "Update UI state", "Set a UI state key", ("value",)),
        ("SUBMIT_FORM", handlers.submit_form, "Submit form", "Submit a storefront form", ("data",)),
    )
    for action_id, handler, display_name, description, bindable in entries:
        registry.register(
            ActionDefinition(
                action_id=action_id,
                payload_model=PAYLOAD_MODELS[action_id],
                handler=handler,
                display_name=display_name,
                description=description,
                bindable=bindable,
            )
        )
    return registry


def create_action_registry(
    cart: CartService | None = None,
    discounts: DiscountService | None = None,
    forms: FormService | None = None,
) -> ActionRegistry:
    """Fresh registry carrying the built-in catalogue."""
    return register_builtin_actions(ActionRegistry(), cart=cart, discounts=discounts, forms=forms)
