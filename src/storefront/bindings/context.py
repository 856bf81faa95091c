"""Runtime Context.

Explicit, request-scoped, read-only view of the data bindings may reference.
Built fresh for every render from plain collaborator data and deep-frozen, so
no live objects, methods or handles are reachable from any field.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel

from ..core.id import new_request_id

CONTEXT_ROOTS = (
    "store",
    "settings",
    "user",
    "cart",
    "route",
    "uiState",
    "collection",
    "facets",
    "product",
    "selectedVariant",
    "similarProducts",
    "orders",
)
SCOPE_KEYS = ("item", "index")

_SCALARS = (str, int, float, bool, type(None))
_DROP = object()

EMPTY = MappingProxyType({})


def freeze(value: Any) -> Any:
    """
    Deep-freeze plain data into read-only mappings and tuples.

    Values that are not plain data (objects, functions, classes) are
    dropped, as are keys starting with an underscore.
    """
    frozen = _freeze(value)
    return None if frozen is _DROP else frozen


def _freeze(value: Any) -> Any:
    if isinstance(value, _SCALARS):
        return value
    if isinstance(value, BaseModel):
        return _freeze(value.model_dump(mode="json"))
    if isinstance(value, Mapping):
        items = {}
        for key, item in value.items():
            if not isinstance(key, str) or key.startswith("_"):
                continue
            frozen = _freeze(item)
            if frozen is not _DROP:
                items[key] = frozen
        return MappingProxyType(items)
    if isinstance(value, (list, tuple)):
        return tuple(item for item in map(_freeze, value) if item is not _DROP)
    return _DROP


def thaw(value: Any) -> Any:
    """Plain, JSON-serialisable copy of frozen data."""
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw(item) for item in value]
    return value


@dataclass(frozen=True)
class RuntimeContext:
    """Read-only per-request context walked by the binding resolver."""

    store_id: str
    data: Mapping[str, Any] = field(default_factory=lambda: EMPTY)
    request_id: str = field(default_factory=new_request_id)

    def as_mapping(self) -> Mapping[str, Any]:
        return self.data

    def get(self, root: str, default: Any = None) -> Any:
        return self.data.get(root, default)

    def with_scope(self, item: Any, index: int) -> "RuntimeContext":
        """Child context for one repeater row, exposing ``item`` and ``index``."""
        data = dict(self.data)
        data["item"] = freeze(item)
        data["index"] = index
        return replace(self, data=MappingProxyType(data))

    def with_values(self, **values: Any) -> "RuntimeContext":
        data = dict(self.data)
        data.update({key: freeze(value) for key, value in values.items()})
        return replace(self, data=MappingProxyType(data))


def build_runtime_context(
    store_id: str,
    *,
    store: Mapping[str, Any] | None = None,
    settings: Mapping[str, Any] | None = None,
    user: Mapping[str, Any] | None = None,
    cart: Mapping[str, Any] | None = None,
    route: Mapping[str, Any] | None = None,
    ui_state: Mapping[str, Any] | None = None,
    collection: Any = None,
    facets: Any = None,
    product: Mapping[str, Any] | None = None,
    selected_variant: Mapping[str, Any] | None = None,
    similar_products: Any = None,
    orders: Any = None,
    request_id: str | None = None,
) -> RuntimeContext:
    """
    Build a frozen runtime context from collaborator data.

    Args:
        store_id: Current store; also exposed as ``store.id`` when no store
            data is given
        ui_state: Exposed to bindings as ``uiState``

    Returns:
        RuntimeContext
    """
    roots = {
        "store": store if store is not None else {"id": store_id},
        "settings": settings,
        "user": user,
        "cart": cart,
        "route": route,
        "uiState": ui_state if ui_state is not None else {},
        "collection": collection,
        "facets": facets,
        "product": product,
        "selectedVariant": selected_variant,
        "similarProducts": similar_products,
        "orders": orders,
    }
    data = {name: freeze(value) for name, value in roots.items() if value is not None}
    return RuntimeContext(
        store_id=store_id,
        data=MappingProxyType(data),
        request_id=request_id or new_request_id(),
    )


__all__ = [
    "CONTEXT_ROOTS",
    "SCOPE_KEYS",
    "RuntimeContext",
    "build_runtime_context",
    "freeze",
    "thaw",
]
