"""
Component Registry
Maps component type names to their props shape and renderer
"""

from dataclasses import dataclass
from typing import Any, Callable, Mapping

import pydantic
from pydantic import BaseModel, ConfigDict

from ..core.errors import Issue, issues_from_pydantic
from ..core.logging_config import get_logger

logger = get_logger(__name__)

PropsRenderer = Callable[[dict[str, Any]], dict[str, Any]]


class OpenProps(BaseModel):
    """Props are inert data: unknown keys pass through untouched."""

    model_config = ConfigDict(extra="allow")


def passthrough(props: dict[str, Any]) -> dict[str, Any]:
    return props


@dataclass(frozen=True)
class ComponentSpec:
    """Registry entry for one component type."""

    type_name: str
    category: str
    props_model: type[BaseModel] = OpenProps
    renderer: PropsRenderer = passthrough
    accepts_children: bool = True


class ComponentRegistry:
    """
    Closed component vocabulary.

    Dispatch over node ``type`` goes through this registry rather than
    inspecting types at render time.
    """

    def __init__(self) -> None:
        self.components: dict[str, ComponentSpec] = {}

    def register(self, spec: ComponentSpec) -> None:
        if spec.type_name in self.components:
            logger.warning("component_already_registered", type=spec.type_name)
            return
        self.components[spec.type_name] = spec

    def get(self, type_name: str) -> ComponentSpec | None:
        return self.components.get(type_name)

    def types(self) -> frozenset[str]:
        return frozenset(self.components)

    def by_category(self) -> dict[str, list[str]]:
        """Palette grouped by category, for the editor."""
        palette: dict[str, list[str]] = {}
        for spec in self.components.values():
            palette.setdefault(spec.category, []).append(spec.type_name)
        return palette

    def validate_props(
        self,
        type_name: str,
        props: Mapping[str, Any] | None,
        bound: frozenset[str] = frozenset(),
        location: str = "props",
    ) -> list[Issue]:
        """
        Save-time check of static props.

        Problems with props that a binding supplies at render time are ignored.
        """
        spec = self.components.get(type_name)
        if spec is None:
            return []
        static = {key: value for key, value in (props or {}).items() if key not in bound}
        try:
            spec.props_model.model_validate(static)
        except pydantic.ValidationError as e:
            kept = [
                error
                for error in e.errors()
                if not (error["loc"] and error["loc"][0] in bound)
            ]
            if not kept:
                return []
            issues = issues_from_pydantic(e, location)
            return [issue for issue, error in zip(issues, e.errors()) if error in kept]
        return []

    def render_props(self, type_name: str, props: dict[str, Any]) -> dict[str, Any]:
        """
        Apply the component's props shape and renderer.

        A prop that fails the shape is dropped and logged, so the component
        default applies and a bad binding value degrades instead of breaking
        the page. Only props that validate ever reach the renderer.
        """
        spec = self.components.get(type_name)
        if spec is None:
            return props
        return spec.renderer(self._normalize(spec, type_name, props))

    def _normalize(self, spec: ComponentSpec, type_name: str, props: dict[str, Any]) -> dict[str, Any]:
        remaining = dict(props)
        while True:
            try:
                return spec.props_model.model_validate(remaining).model_dump(exclude_none=True)
            except pydantic.ValidationError as e:
                failed = {error["loc"][0] for error in e.errors() if error["loc"]} & remaining.keys()
                logger.warning(
                    "component_props_invalid", type=type_name, dropped=sorted(map(str, failed)), errors=e.error_count()
                )
                if not failed:
                    # Only missing required props left; every remaining key passed
                    return remaining
                remaining = {key: value for key, value in remaining.items() if key not in failed}

    def __contains__(self, type_name: object) -> bool:
        return type_name in self.components

    def __len__(self) -> int:
        return len(self.components)
