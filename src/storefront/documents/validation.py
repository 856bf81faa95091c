"""Tree validation run before every draft write."""

from typing import Any, Collection, Iterator

import pydantic
from returns.result import Failure, Result, Success

from ..actions.catalogue import ACTION_IDS
from ..bindings import validate_binding_path
from ..components import ComponentRegistry, create_component_registry
from ..core.errors import Issue, ValidationError, issues_from_pydantic
from ..core.json import JSONParseError, validate_json_depth, validate_json_size
from ..styles import validate_style_object
from .models import DocumentKind, Node

DEFAULT_MAX_TREE_SIZE = 512 * 1024
DEFAULT_MAX_TREE_DEPTH = 64

_default_components: ComponentRegistry | None = None


def _components() -> ComponentRegistry:
    global _default_components
    if _default_components is None:
        _default_components = create_component_registry()
    return _default_components


def walk(tree: dict[str, Any], path: str = "tree") -> Iterator[tuple[dict[str, Any], str]]:
    """Depth-first (node, location) pairs."""
    yield tree, path
    for i, child in enumerate(tree.get("children") or []):
        yield from walk(child, f"{path}.children[{i}]")


def _override_style_issues(node: dict[str, Any], path: str) -> list[Issue]:
    overrides = (node.get("props") or {}).get("overrides")
    if not isinstance(overrides, dict):
        return []

    issues: list[Issue] = []
    for target, override in overrides.items():
        if not isinstance(override, dict) or override.get("styles") is None:
            continue
        try:
            validate_style_object(override["styles"], f"{path}.props.overrides.{target}.styles")
        except ValidationError as e:
            issues.extend(e.issues)
    return issues


def collect_issues(
    tree: Any,
    kind: DocumentKind,
    key: str | None = None,
    *,
    components: ComponentRegistry | None = None,
    action_ids: Collection[str] | None = None,
    max_size: int = DEFAULT_MAX_TREE_SIZE,
    max_depth: int = DEFAULT_MAX_TREE_DEPTH,
) -> list[Issue]:
    """
    Check a raw tree against every structural invariant.

    Returns:
        All issues found (empty when valid)
    """
    if not isinstance(tree, dict):
        return [Issue("tree", "must be an object")]

    try:
        validate_json_size(tree, max_size, "tree")
        validate_json_depth(tree, max_depth)
    except JSONParseError as e:
        return [Issue("tree", str(e))]

    try:
        Node.model_validate(tree)
    except pydantic.ValidationError as e:
        return issues_from_pydantic(e, "tree")

    components = components or _components()
    known_actions = frozenset(action_ids if action_ids is not None else ACTION_IDS)
    kind = DocumentKind(kind)

    issues: list[Issue] = []
    seen: dict[str, str] = {}
    slots = 0

    for node, path in walk(tree):
        node_id, node_type = node["id"], node["type"]

        if node_id in seen:
            issues.append(Issue(f"{path}.id", f"duplicate node id {node_id!r} (first at {seen[node_id]})"))
        else:
            seen[node_id] = path

        spec = components.get(node_type)
        if spec is None:
            issues.append(Issue(f"{path}.type", f"unknown component type {node_type!r}"))
        elif node.get("children") and not spec.accepts_children:
            issues.append(Issue(f"{path}.children", f"{node_type} does not accept children"))

        if node.get("styles") is not None:
            try:
                validate_style_object(node["styles"], f"{path}.styles")
            except ValidationError as e:
                issues.extend(e.issues)

        bindings = node.get("bindings") or {}
        for prop, binding in bindings.items():
            ok, error = validate_binding_path(binding)
            if not ok:
                issues.append(Issue(f"{path}.bindings.{prop}", error or "invalid path"))

        for event, action in (node.get("actions") or {}).items():
            action_id = action.get("actionId", action.get("action_id"))
            if action_id not in known_actions:
                issues.append(Issue(f"{path}.actions.{event}.actionId", f"unknown action {action_id!r}"))
            for field, binding in (action.get("payloadBindings") or {}).items():
                ok, error = validate_binding_path(binding)
                if not ok:
                    issues.append(Issue(f"{path}.actions.{event}.payloadBindings.{field}", error or "invalid path"))

        if spec is not None:
            issues.extend(
                components.validate_props(node_type, node.get("props"), frozenset(bindings), f"{path}.props")
            )

        if node_type == "Slot":
            slots += 1
        elif node_type == "Repeater" and not node.get("children"):
            issues.append(Issue(f"{path}.children", "Repeater needs a template child"))
        elif node_type == "PrefabInstance":
            prefab_key = (node.get("props") or {}).get("prefabKey")
            if kind == DocumentKind.PREFAB and key is not None and prefab_key == key:
                issues.append(Issue(f"{path}.props.prefabKey", "prefab cannot reference itself"))
            issues.extend(_override_style_issues(node, path))

    if kind == DocumentKind.LAYOUT and slots != 1:
        issues.append(Issue("tree", f"layout must contain exactly one Slot, found {slots}"))

    return issues


def validate_tree(tree: Any, kind: DocumentKind, key: str | None = None, **limits: Any) -> None:
    """
    Raise ValidationError when the tree breaks any invariant.

    Raises:
        ValidationError: With every issue found
    """
    issues = collect_issues(tree, kind, key, **limits)
    if issues:
        raise ValidationError(f"Invalid {DocumentKind(kind).value.lower()} tree", issues)


def check_tree(
    tree: Any, kind: DocumentKind, key: str | None = None, **limits: Any
) -> Result[dict[str, Any], list[Issue]]:
    """
    Validate tree (Result pattern version) for inline editor feedback.

    Returns:
        Success(tree) or Failure(issues)
    """
    issues = collect_issues(tree, kind, key, **limits)
    if issues:
        return Failure(issues)
    return Success(tree)
