"""
Action Dispatcher
Validated, store-scoped invocation of catalogue actions
"""

from typing import Any, Mapping

import pydantic

from ..bindings import RuntimeContext, resolve_payload_bindings
from ..core.errors import (
    CrossTenantError,
    NotFoundError,
    ValidationError,
    UnknownActionError,
    issues_from_pydantic,
)
from ..core.logging_config import get_logger
from .registry import ActionRegistry
from .types import ActionDescriptor, ActionResult, StoreContext

logger = get_logger(__name__)

# Payload keys that claim a tenant. Never trusted, never forwarded.
TENANT_KEYS = ("storeId", "store_id")


def _store_id(store_context: StoreContext | str) -> str:
    return store_context if isinstance(store_context, str) else store_context.store_id


class ActionDispatcher:
    """
    Dispatches actions through the registry.

    Responsibility ends at validated, store-scoped invocation: side effects
    belong to the collaborator services the handlers delegate to.
    """

    def __init__(self, registry: ActionRegistry, metrics: Any = None) -> None:
        self.registry = registry
        self.metrics = metrics

    def _record(self, action_id: str, status: str) -> None:
        if self.metrics is not None:
            self.metrics.record_action(action_id, status)

    def dispatch(
        self,
        action_id: str,
        payload: Mapping[str, Any] | None,
        store_context: StoreContext | str,
    ) -> ActionResult:
        """
        Dispatch an action.

        Args:
            action_id: Catalogue action id
            payload: Effective payload, bindings already resolved
            store_context: Current store scope (or bare store id)

        Returns:
            ActionResult from the handler

        Raises:
            UnknownActionError: Action id not in the catalogue
            CrossTenantError: Payload names a different store
            ValidationError: Payload does not match the declared shape
        """
        store_id = _store_id(store_context)
        definition = self.registry.get(action_id)
        if definition is None:
            logger.error("action_config_error", action_id=action_id, store_id=store_id)
            self._record(action_id if isinstance(action_id, str) else "?", "unknown")
            raise UnknownActionError(action_id)

        scoped = dict(payload or {})
        for key in TENANT_KEYS:
            if key in scoped:
                claimed = scoped.pop(key)
                if claimed != store_id:
                    logger.warning(
                        "cross_tenant_action",
                        action_id=action_id,
                        store_id=store_id,
                        claimed_store_id=str(claimed),
                    )
                    self._record(action_id, "rejected")
                    raise CrossTenantError(store_id, str(claimed))

        try:
            validated = definition.payload_model.model_validate(scoped)
        except pydantic.ValidationError as e:
            self._record(action_id, "invalid")
            raise ValidationError(
                f"Invalid payload for {action_id}", issues_from_pydantic(e, "payload")
            ) from e

        try:
            outcome = definition.handler(validated.model_dump(), store_id)
        except (NotFoundError, CrossTenantError):
            self._record(action_id, "error")
            raise
        except Exception as e:
            logger.error("action_failed", action_id=action_id, store_id=store_id, error=str(e), exc_info=True)
            self._record(action_id, "error")
            return ActionResult(success=False, error=str(e))

        result = outcome if isinstance(outcome, ActionResult) else ActionResult(success=True, data=outcome)
        self._record(action_id, "success" if result.success else "failure")
        logger.info("action_dispatched", action_id=action_id, store_id=store_id, success=result.success)
        return result

    def dispatch_descriptor(
        self,
        descriptor: ActionDescriptor | Mapping[str, Any],
        context: RuntimeContext | Mapping[str, Any],
        store_context: StoreContext | str,
    ) -> ActionResult:
        """Resolve a descriptor's payload bindings against ``context`` and dispatch it."""
        if not isinstance(descriptor, ActionDescriptor):
            try:
                descriptor = ActionDescriptor.model_validate(descriptor)
            except pydantic.ValidationError as e:
                raise ValidationError("Invalid action descriptor", issues_from_pydantic(e, "action")) from e

        store_id = _store_id(store_context)
        if isinstance(context, RuntimeContext) and context.store_id != store_id:
            raise CrossTenantError(store_id, context.store_id)

        payload = resolve_payload_bindings(descriptor.payload, descriptor.payload_bindings, context)
        return self.dispatch(descriptor.action_id, payload, store_context)
