"""
Action Dispatcher
Closed catalogue of store-scoped actions
"""

from .types import (
    ActionDefinition,
    ActionDescriptor,
    ActionHandler,
    ActionResult,
    CartService,
    DiscountService,
    FormService,
    StoreContext,
)
from .catalogue import ACTION_IDS, PAYLOAD_MODELS
from .registry import ActionRegistry
from .dispatcher import ActionDispatcher
from .handlers import BuiltinHandlers, create_action_registry, register_builtin_actions

__all__ = [
    "ActionDefinition",
    "ActionDescriptor",
    "ActionHandler",
    "ActionResult",
    "CartService",
    "DiscountService",
    "FormService",
    "StoreContext",
    "ACTION_IDS",
    "PAYLOAD_MODELS",
    "ActionRegistry",
    "ActionDispatcher",
    "BuiltinHandlers",
    "create_action_registry",
    "register_builtin_actions",
]
