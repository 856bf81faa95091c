"""Pytest configuration and fixtures."""

import os
from typing import Any

import pytest
import respx
from prometheus_client import CollectorRegistry

from storefront.actions import ActionDispatcher, create_action_registry
from storefront.bindings import build_runtime_context
from storefront.components import create_component_registry
from storefront.core import Settings, create_container
from storefront.documents import (
    DocumentService,
    InMemoryDocumentStore,
    SQLiteDocumentStore,
    ThemeService,
)
from storefront.monitoring import MetricsCollector
from storefront.runtime import Renderer
from storefront.styles import StyleCompiler


# ============================================================================
# Pytest Hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with environment variables."""
    os.environ["SF_LOG_LEVEL"] = "DEBUG"
    os.environ["SF_DATABASE_PATH"] = ""
    os.environ["SF_COMMERCE_URL"] = "http://commerce.test"


# ============================================================================
# Core Fixtures
# ============================================================================

@pytest.fixture
def settings():
    """Test settings."""
    return Settings(database_path="", commerce_url="http://commerce.test")


@pytest.fixture
def di_container(settings):
    """Dependency injection container for testing."""
    return create_container(settings)


@pytest.fixture
def metrics():
    """Metrics collector on an isolated registry."""
    return MetricsCollector(registry=CollectorRegistry())


# ============================================================================
# Collaborator Fakes
# ============================================================================

class FakeCart:
    """Records cart calls."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []

    def add_item(self, store_id: str, variant_id: str, quantity: int) -> dict[str, Any]:
        self.calls.append(("add_item", store_id, variant_id, quantity))
        return {"items": [{"variantId": variant_id, "quantity": quantity}]}

    def set_delivery_mode(self, store_id: str, mode: str) -> dict[str, Any]:
        self.calls.append(("set_delivery_mode", store_id, mode))
        return {"deliveryMode": mode}


class FakeDiscounts:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    def apply_code(self, store_id: str, code: str) -> dict[str, Any]:
        self.calls.append((store_id, code))
        return {"code": code, "amount": 5}


class FakeForms:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str, dict[str, Any]]] = []

    def submit(self, store_id: str, form_type: str, data: dict[str, Any]) -> dict[str, Any]:
        self.calls.append((store_id, form_type, data))
        return {"submitted": True}


@pytest.fixture
def cart():
    return FakeCart()


@pytest.fixture
def discounts():
    return FakeDiscounts()


@pytest.fixture
def forms():
    return FakeForms()


# ============================================================================
# Action Fixtures
# ============================================================================

@pytest.fixture
def action_registry(cart, discounts, forms):
    """Built-in catalogue backed by fakes."""
    return create_action_registry(cart=cart, discounts=discounts, forms=forms)


@pytest.fixture
def dispatcher(action_registry, metrics):
    return ActionDispatcher(action_registry, metrics=metrics)


# ============================================================================
# Document Fixtures
# ============================================================================

@pytest.fixture
def memory_store():
    return InMemoryDocumentStore()


@pytest.fixture
def sqlite_store(tmp_path):
    store = SQLiteDocumentStore(str(tmp_path / "documents.db"))
    yield store
    store.close()


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    """Each reference store implementation."""
    if request.param == "memory":
        yield InMemoryDocumentStore()
    else:
        sqlite = SQLiteDocumentStore(str(tmp_path / "documents.db"))
        yield sqlite
        sqlite.close()


@pytest.fixture
def components():
    return create_component_registry()


@pytest.fixture
def theme_service(memory_store):
    return ThemeService(memory_store)


@pytest.fixture
def document_service(memory_store, components, theme_service, metrics):
    return DocumentService(memory_store, components=components, themes=theme_service, metrics=metrics)


@pytest.fixture
def renderer(document_service, theme_service, components, metrics):
    return Renderer(
        document_service,
        themes=theme_service,
        components=components,
        style_compiler=StyleCompiler(cache_size=64, metrics=metrics),
        metrics=metrics,
    )


@pytest.fixture
def runtime_context():
    """Request context with one product and a two-product collection."""
    return build_runtime_context(
        "store_1",
        store={"id": "store_1", "name": "Acme", "currency": "EUR"},
        cart={"items": [], "total": 0},
        product={
            "id": "prod_1",
            "name": "Shirt",
            "customData": {"material": "Cotton"},
            "defaultVariant": {"id": "var_123", "price": 25},
        },
        collection={
            "name": "Summer",
            "products": [
                {"id": "p1", "name": "Hat", "url": "/products/hat", "defaultVariant": {"id": "v1", "price": 10}},
                {"id": "p2", "name": "Scarf", "url": "/products/scarf", "defaultVariant": {"id": "v2", "price": 15}},
            ],
        },
        ui_state={"cartOpen": False},
    )


# ============================================================================
# HTTP/Network Fixtures
# ============================================================================

@pytest.fixture
def mock_httpx_client():
    """Mock httpx transport."""
    with respx.mock(base_url="http://commerce.test", assert_all_called=False) as router:
        yield router


# ============================================================================
# Data Fixtures
# ============================================================================

@pytest.fixture
def page_tree():
    """Small valid page tree."""
    return {
        "id": "root",
        "type": "Container",
        "children": [
            {
                "id": "title",
                "type": "Heading",
                "props": {"level": 1, "text": "Hello"},
                "bindings": {"text": "store.name"},
                "styles": {"base": {"spacing": {"padding": {"top": 8, "left": 16}}}},
            },
            {
                "id": "cta",
                "type": "Button",
                "props": {"label": "Buy"},
                "actions": {
                    "onClick": {
                        "actionId": "ADD_TO_CART",
                        "payload": {"quantity": 1},
                        "payloadBindings": {"variantId": "product.defaultVariant.id"},
                    }
                },
            },
        ],
    }


@pytest.fixture
def layout_tree():
    """Layout with a single Slot."""
    return {
        "id": "layout",
        "type": "Container",
        "children": [
            {"id": "header", "type": "Header", "children": [{"id": "brand", "type": "Text", "bindings": {"text": "store.name"}}]},
            {"id": "slot", "type": "Slot"},
        ],
    }
