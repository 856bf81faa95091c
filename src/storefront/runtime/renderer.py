"""
Rendering Runtime
Walks a document tree and composes layouts, slots, prefabs and repeaters
into a JSON-serialisable render tree
"""

import copy
import time
from typing import Any, Collection, Mapping

from pydantic import BaseModel, Field

from ..bindings import RuntimeContext, resolve, resolve_bindings, resolve_payload_bindings
from ..components import ComponentRegistry, create_component_registry
from ..core.errors import NotFoundError
from ..core.logging_config import get_logger
from ..documents import DocumentKind, DocumentService, DocumentStatus, ThemeService
from ..documents.defaults import GLOBAL_LAYOUT_KEY
from ..styles import StyleCompiler, compile_theme, theme_stylesheet

logger = get_logger(__name__)

BROKEN_REFERENCE = "BrokenReference"
FRAGMENT = "Fragment"


class RenderedNode(BaseModel):
    """One node of the composed output."""

    id: str
    type: str
    key: str | None = None
    props: dict[str, Any] = Field(default_factory=dict)
    styles: dict[str, dict[str, Any]] | None = None
    actions: dict[str, dict[str, Any]] | None = None
    children: list["RenderedNode"] = Field(default_factory=list)


RenderedNode.model_rebuild()


class RenderWarning(BaseModel):
    node_id: str
    reason: str
    detail: str = ""


class RenderResult(BaseModel):
    """Render tree plus the theme variables to inject ahead of it."""

    root: RenderedNode
    theme: dict[str, str] = Field(default_factory=dict)
    stylesheet: str = ""
    warnings: list[RenderWarning] = Field(default_factory=list)

    def to_api(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class _RenderState:
    """Per-render bookkeeping: prefab lookups, the prefab stack and warnings."""

    def __init__(self, store_id: str, status: DocumentStatus) -> None:
        self.store_id = store_id
        self.status = status
        self.prefabs: dict[str, dict[str, Any] | None] = {}
        self.prefab_stack: list[str] = []
        self.warnings: list[RenderWarning] = []
        self.slot: dict[str, Any] | None = None

    def warn(self, node_id: str, reason: str, detail: str = "") -> None:
        self.warnings.append(RenderWarning(node_id=node_id, reason=reason, detail=detail))


def apply_overrides(tree: dict[str, Any], overrides: Mapping[str, Any] | None) -> dict[str, Any]:
    """
    Copy of a prefab tree with per-instance overrides layered on top.

    Override props are merged over the node's props; override styles replace
    the node's styles. The shared prefab tree is never mutated.
    """
    result = copy.deepcopy(tree)
    if not overrides:
        return result

    def visit(node: dict[str, Any]) -> None:
        override = overrides.get(node.get("id"))
        if isinstance(override, Mapping):
            if override.get("props"):
                node["props"] = {**(node.get("props") or {}), **override["props"]}
            if override.get("styles"):
                node["styles"] = copy.deepcopy(override["styles"])
        for child in node.get("children") or []:
            visit(child)

    visit(result)
    return result


class Renderer:
    """
    Composes documents into render trees.

    Per node: styles are compiled for every layer the node defines, bindings
    are resolved against the request context and applied over static props,
    and action descriptors are wired with their effective payloads. Live
    renders read PUBLISHED documents; previews read DRAFT.
    """

    def __init__(
        self,
        documents: DocumentService,
        themes: ThemeService | None = None,
        components: ComponentRegistry | None = None,
        style_compiler: StyleCompiler | None = None,
        action_ids: Collection[str] | None = None,
        metrics: Any = None,
    ) -> None:
        self.documents = documents
        self.themes = themes or documents.themes
        self.components = components or create_component_registry()
        self.style_compiler = style_compiler or StyleCompiler()
        self.action_ids = frozenset(action_ids) if action_ids is not None else None
        self.metrics = metrics

    def render_page(
        self,
        store_id: str,
        kind: DocumentKind | str,
        key: str,
        context: RuntimeContext,
        preview: bool = False,
        layout_key: str | None = GLOBAL_LAYOUT_KEY,
    ) -> RenderResult:
        """
        Render one document, wrapped in the layout for PAGE and TEMPLATE kinds.

        Raises:
            NotFoundError: The document does not exist in the requested status
        """
        kind = DocumentKind(kind)
        status = DocumentStatus.DRAFT if preview else DocumentStatus.PUBLISHED
        mode = "preview" if preview else "live"
        start = time.perf_counter()
        try:
            doc = self.documents.get_version(store_id, kind, key, status)
            if doc is None:
                raise NotFoundError("document", f"{kind.value}:{key}")
            layout = None
            if layout_key and kind in (DocumentKind.PAGE, DocumentKind.TEMPLATE):
                layout = self.documents.get_version(store_id, DocumentKind.LAYOUT, layout_key, status)
            result = self.render_tree(
                store_id, doc.tree, context, status, layout.tree if layout is not None else None
            )
        except NotFoundError:
            self._record(mode, "not_found", start)
            raise
        self._record(mode, "success", start)
        logger.info(
            "page_rendered",
            store_id=store_id,
            kind=kind.value,
            key=key,
            mode=mode,
            warnings=len(result.warnings),
        )
        return result

    def render_product(
        self,
        store_id: str,
        schema_id: str | None,
        context: RuntimeContext,
        preview: bool = False,
        layout_key: str | None = GLOBAL_LAYOUT_KEY,
    ) -> RenderResult:
        """Render the product template for a schema, falling back to the default template."""
        status = DocumentStatus.DRAFT if preview else DocumentStatus.PUBLISHED
        template = self.documents.resolve_template(store_id, schema_id, status)
        if template is None:
            raise NotFoundError("template", schema_id or "default")
        return self.render_page(store_id, DocumentKind.TEMPLATE, template.key, context, preview, layout_key)

    def render_tree(
        self,
        store_id: str,
        tree: dict[str, Any],
        context: RuntimeContext,
        status: DocumentStatus = DocumentStatus.PUBLISHED,
        layout: dict[str, Any] | None = None,
    ) -> RenderResult:
        """Render a raw tree, optionally placing it in a layout's Slot."""
        state = _RenderState(store_id, DocumentStatus(status))
        if layout is not None:
            state.slot = tree
            rendered = self._render(layout, context, state)
        else:
            rendered = self._render(tree, context, state)

        if len(rendered) == 1:
            root = rendered[0]
        else:
            root = RenderedNode(id=str(tree.get("id", "root")), type=FRAGMENT, children=rendered)

        theme_vars = self.themes.get_theme_vars(store_id, state.status)
        return RenderResult(
            root=root,
            theme=compile_theme(theme_vars),
            stylesheet=theme_stylesheet(theme_vars),
            warnings=state.warnings,
        )

    def _record(self, mode: str, status: str, start: float) -> None:
        if self.metrics is not None:
            self.metrics.record_render(mode, status, time.perf_counter() - start)

    # Node dispatch

    def _render(self, node: dict[str, Any], context: RuntimeContext, state: _RenderState) -> list[RenderedNode]:
        node_type = node.get("type")
        node_id = str(node.get("id", ""))

        if node_type == "Slot":
            if state.slot is None:
                return [RenderedNode(id=node_id, type="Slot")]
            page, state.slot = state.slot, None
            return self._render(page, context, state)
        if node_type == "Repeater":
            return self._render_repeater(node, context, state)
        if node_type == "Conditional":
            return self._render_conditional(node, context, state)
        if node_type == "PrefabInstance":
            return [self._render_prefab(node, context, state)]
        if node_type not in self.components:
            logger.warning("unknown_component_skipped", node_id=node_id, type=node_type)
            state.warn(node_id, "unknown_type", str(node_type))
            return []

        props = resolve_bindings(node.get("props"), node.get("bindings"), context)
        return [
            RenderedNode(
                id=node_id,
                type=node_type,
                props=self.components.render_props(node_type, props),
                styles=self._styles(node),
                actions=self._actions(node, context, state),
                children=self._render_children(node, context, state),
            )
        ]

    def _render_children(
        self, node: dict[str, Any], context: RuntimeContext, state: _RenderState
    ) -> list[RenderedNode]:
        rendered: list[RenderedNode] = []
        for child in node.get("children") or []:
            rendered.extend(self._render(child, context, state))
        return rendered

    def _styles(self, node: dict[str, Any]) -> dict[str, dict[str, Any]] | None:
        if not node.get("styles"):
            return None
        return self.style_compiler.compile_all(node["styles"])

    def _actions(
        self, node: dict[str, Any], context: RuntimeContext, state: _RenderState
    ) -> dict[str, dict[str, Any]] | None:
        actions = node.get("actions")
        if not actions:
            return None
        wired = {}
        for event, descriptor in actions.items():
            action_id = descriptor.get("actionId", descriptor.get("action_id"))
            if self.action_ids is not None and action_id not in self.action_ids:
                logger.warning("action_config_error", node_id=node.get("id"), action_id=action_id)
                state.warn(str(node.get("id", "")), "unknown_action", str(action_id))
                continue
            wired[event] = {
                "actionId": action_id,
                "payload": resolve_payload_bindings(
                    descriptor.get("payload"),
                    descriptor.get("payloadBindings", descriptor.get("payload_bindings")),
                    context,
                ),
            }
        return wired or None

    # Structural nodes

    def _render_repeater(
        self, node: dict[str, Any], context: RuntimeContext, state: _RenderState
    ) -> list[RenderedNode]:
        props = resolve_bindings(node.get("props"), node.get("bindings"), context)
        children = node.get("children") or []
        items = resolve(props.get("dataPath", ""), context)
        items = list(items) if isinstance(items, (list, tuple)) else []
        limit = props.get("limit")
        if isinstance(limit, int) and limit >= 0:
            items = items[:limit]

        if not items or not children:
            empty_text = props.get("emptyText")
            if empty_text:
                return [RenderedNode(id=f"{node.get('id')}-empty", type="Text", props={"text": empty_text})]
            return []

        template = children[0]
        rendered: list[RenderedNode] = []
        for index, item in enumerate(items):
            row = self._render(template, context.with_scope(item, index), state)
            item_key = item.get("id") if isinstance(item, Mapping) else None
            for output in row:
                output.key = str(item_key if item_key is not None else index)
            rendered.extend(row)
        return rendered

    def _render_conditional(
        self, node: dict[str, Any], context: RuntimeContext, state: _RenderState
    ) -> list[RenderedNode]:
        props = resolve_bindings(node.get("props"), node.get("bindings"), context)
        if not props.get("show"):
            return []
        return self._render_children(node, context, state)

    def _render_prefab(
        self, node: dict[str, Any], context: RuntimeContext, state: _RenderState
    ) -> RenderedNode:
        node_id = str(node.get("id", ""))
        props = resolve_bindings(node.get("props"), node.get("bindings"), context)
        prefab_key = props.get("prefabKey")

        if prefab_key in state.prefab_stack:
            return self._broken(node_id, prefab_key, "cycle", state)
        prefab = self._load_prefab(prefab_key, state)
        if prefab is None:
            return self._broken(node_id, prefab_key, "missing", state)

        state.prefab_stack.append(prefab_key)
        try:
            body = self._render(apply_overrides(prefab, props.get("overrides")), context, state)
        finally:
            state.prefab_stack.pop()

        return RenderedNode(
            id=node_id,
            type="PrefabInstance",
            props={"prefabKey": prefab_key},
            styles=self._styles(node),
            children=body,
        )

    def _load_prefab(self, prefab_key: Any, state: _RenderState) -> dict[str, Any] | None:
        if not isinstance(prefab_key, str) or not prefab_key:
            return None
        if prefab_key not in state.prefabs:
            doc = self.documents.get_version(state.store_id, DocumentKind.PREFAB, prefab_key, state.status)
            state.prefabs[prefab_key] = doc.tree if doc is not None else None
        return state.prefabs[prefab_key]

    def _broken(self, node_id: str, prefab_key: Any, reason: str, state: _RenderState) -> RenderedNode:
        logger.warning(
            "broken_reference", store_id=state.store_id, node_id=node_id, prefab_key=prefab_key, reason=reason
        )
        state.warn(node_id, f"broken_reference:{reason}", str(prefab_key))
        if self.metrics is not None:
            self.metrics.record_broken_reference(reason)
        return RenderedNode(
            id=node_id,
            type=BROKEN_REFERENCE,
            props={"prefabKey": prefab_key, "reason": reason},
        )


__all__ = [
    "BROKEN_REFERENCE",
    "FRAGMENT",
    "RenderedNode",
    "RenderWarning",
    "RenderResult",
    "Renderer",
    "apply_overrides",
]
