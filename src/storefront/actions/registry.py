"""
Action Registry
Central catalogue of dispatchable actions
"""

from typing import Any

from ..core.errors import UnknownActionError
from ..core.logging_config import get_logger
from .types import ActionDefinition

logger = get_logger(__name__)


class ActionRegistry:
    """
    Closed catalogue of actions.
    Maps action ids to their payload shape and executor.
    """

    def __init__(self) -> None:
        self.actions: dict[str, ActionDefinition] = {}

    def register(self, definition: ActionDefinition) -> None:
        """
        Register an action.

        Args:
            definition: Action definition
        """
        if definition.action_id in self.actions:
            logger.warning("action_already_registered", action_id=definition.action_id)
            return

        self.actions[definition.action_id] = definition
        logger.debug(
            "action_registered",
            action_id=definition.action_id,
            bindable=len(definition.bindable),
        )

    def unregister(self, action_id: str) -> None:
        """Unregister an action"""
        if self.actions.pop(action_id, None) is not None:
            logger.info("action_unregistered", action_id=action_id)

    def get(self, action_id: str) -> ActionDefinition | None:
        """Get action definition by id"""
        return self.actions.get(action_id)

    def require(self, action_id: str) -> ActionDefinition:
        """Get action definition by id, raising UnknownActionError if absent"""
        definition = self.actions.get(action_id)
        if definition is None:
            raise UnknownActionError(action_id)
        return definition

    def list_all(self) -> list[ActionDefinition]:
        return sorted(self.actions.values(), key=lambda d: d.action_id)

    def catalogue(self) -> list[dict[str, Any]]:
        """Editor-facing catalogue with payload schemas."""
        return [definition.describe() for definition in self.list_all()]

    def __contains__(self, action_id: object) -> bool:
        return action_id in self.actions

    def __len__(self) -> int:
        return len(self.actions)
