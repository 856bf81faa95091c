"""
Action Type Definitions
Descriptors, definitions, results and collaborator protocols
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

from pydantic import BaseModel, ConfigDict, Field


class ActionDescriptor(BaseModel):
    """Declarative action attached to a node event."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    action_id: str = Field(..., alias="actionId", min_length=1)
    payload: dict[str, Any] | None = None
    payload_bindings: dict[str, str] | None = Field(default=None, alias="payloadBindings")


class StoreContext(BaseModel):
    """Tenant scope an action executes under."""

    store_id: str = Field(..., min_length=1)
    user_id: str | None = None
    session_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class ActionResult(BaseModel):
    """Result of an action dispatch."""

    success: bool
    data: Any = None
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


ActionHandler = Callable[[dict[str, Any], str], ActionResult | dict[str, Any]]


@dataclass(frozen=True)
class ActionDefinition:
    """Catalogue entry: id, payload shape and executor."""

    action_id: str
    payload_model: type[BaseModel]
    handler: ActionHandler
    display_name: str = ""
    description: str = ""
    bindable: tuple[str, ...] = field(default_factory=tuple)

    def describe(self) -> dict[str, Any]:
        """Editor-facing description including the payload JSON schema."""
        return {
            "actionId": self.action_id,
            "displayName": self.display_name or self.action_id,
            "description": self.description,
            "bindable": list(self.bindable),
            "payloadSchema": self.payload_model.model_json_schema(),
        }


class CartService(Protocol):
    """Cart collaborator"""

    def add_item(self, store_id: str, variant_id: str, quantity: int) -> dict[str, Any]:
        ...

    def set_delivery_mode(self, store_id: str, mode: str) -> dict[str, Any]:
        ...


class DiscountService(Protocol):
    """Discount collaborator"""

    def apply_code(self, store_id: str, code: str) -> dict[str, Any]:
        ...


class FormService(Protocol):
    """Form submission collaborator"""

    def submit(self, store_id: str, form_type: str, data: dict[str, Any]) -> dict[str, Any]:
        ...
