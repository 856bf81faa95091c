"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from storefront.actions import ActionRegistry, create_action_registry
from storefront.server import create_app
from storefront.styles import DEFAULT_THEME


@pytest.fixture
def app_container(di_container, cart, discounts, forms):
    """Container whose action catalogue is backed by fakes."""
    di_container.binder.bind(
        ActionRegistry, to=create_action_registry(cart=cart, discounts=discounts, forms=forms)
    )
    return di_container


@pytest.fixture
def client(app_container):
    with TestClient(create_app(app_container)) as test_client:
        yield test_client


def save(client, store_id, kind, key, tree):
    response = client.post(f"/stores/{store_id}/documents", json={"kind": kind, "key": key, "tree": tree})
    assert response.status_code == 201, response.text
    return response.json()


# ============================================================================
# Service endpoints
# ============================================================================

@pytest.mark.unit
class TestServiceEndpoints:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "storefront"}

    def test_request_id_header(self, client):
        assert client.get("/health", headers={"x-request-id": "req_fixed"}).headers["x-request-id"] == "req_fixed"
        assert client.get("/health").headers["x-request-id"].startswith("req_")

    def test_metrics(self, client, page_tree):
        save(client, "s1", "PAGE", "home", page_tree)
        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert b"storefront_documents_saved_total" in response.content

    def test_components(self, client):
        palette = client.get("/components").json()["palette"]
        assert "Repeater" in palette["utility"]

    def test_actions(self, client):
        ids = [entry["actionId"] for entry in client.get("/actions").json()["actions"]]
        assert "ADD_TO_CART" in ids


# ============================================================================
# Documents
# ============================================================================

@pytest.mark.unit
class TestDocumentEndpoints:
    def test_save_and_publish(self, client, page_tree):
        draft = save(client, "s1", "PAGE", "home", page_tree)
        assert draft["status"] == "DRAFT"
        assert draft["store_id"] == "s1"
        assert draft["tree"] == page_tree

        response = client.post("/stores/s1/documents/publish", json={"kind": "PAGE", "key": "home"})
        assert response.status_code == 200
        assert response.json()["status"] == "PUBLISHED"
        assert response.json()["checksum"] == draft["checksum"]

    def test_invalid_tree(self, client):
        response = client.post(
            "/stores/s1/documents",
            json={"kind": "LAYOUT", "key": "GLOBAL_LAYOUT", "tree": {"id": "root", "type": "Container"}},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["issues"][0]["location"] == "tree"
        assert client.get("/stores/s1/documents").json()["documents"] == []

    def test_publish_without_draft(self, client):
        response = client.post("/stores/s1/documents/publish", json={"kind": "PAGE", "key": "home"})

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_list_filters(self, client, page_tree, layout_tree):
        save(client, "s1", "PAGE", "home", page_tree)
        save(client, "s1", "LAYOUT", "GLOBAL_LAYOUT", layout_tree)

        assert len(client.get("/stores/s1/documents").json()["documents"]) == 2
        assert len(client.get("/stores/s1/documents", params={"kind": "PAGE"}).json()["documents"]) == 1
        assert client.get("/stores/s1/documents", params={"status": "PUBLISHED"}).json()["documents"] == []
        assert client.get("/stores/s2/documents").json()["documents"] == []

    def test_get_and_delete(self, client, page_tree):
        draft = save(client, "s1", "PAGE", "home", page_tree)

        assert client.get(f"/stores/s1/documents/{draft['id']}").json()["key"] == "home"
        assert client.get(f"/stores/s2/documents/{draft['id']}").status_code == 403
        assert client.delete(f"/stores/s2/documents/{draft['id']}").status_code == 403

        assert client.delete(f"/stores/s1/documents/{draft['id']}").status_code == 204
        assert client.get(f"/stores/s1/documents/{draft['id']}").status_code == 404

    def test_editor_document(self, client):
        response = client.get("/stores/s1/editor/TEMPLATE/PDP:default")

        assert response.status_code == 200
        assert response.json()["key"] == "PDP:default"
        assert response.json()["status"] == "DRAFT"

    def test_defaults(self, client):
        response = client.post("/stores/s1/documents/defaults")

        assert response.status_code == 201
        assert response.json()["created"] == 24
        assert client.post("/stores/s1/documents/defaults").json()["created"] == 0


# ============================================================================
# Theme
# ============================================================================

@pytest.mark.unit
class TestThemeEndpoints:
    def test_default_theme(self, client):
        body = client.get("/stores/s1/theme").json()
        assert body["vars"] == DEFAULT_THEME

    def test_save_and_publish(self, client):
        response = client.put("/stores/s1/theme", json={"vars": {"primary": "#ff0000"}})
        assert response.status_code == 200
        assert client.get("/stores/s1/theme", params={"status": "DRAFT"}).json()["vars"] == {"primary": "#ff0000"}

        assert client.post("/stores/s1/theme/publish").json()["vars"] == {"primary": "#ff0000"}
        assert client.get("/stores/s1/theme").json()["vars"] == {"primary": "#ff0000"}

    def test_invalid_vars(self, client):
        response = client.put("/stores/s1/theme", json={"vars": {"primary": "url(x)"}})
        assert response.status_code == 400

    def test_publish_without_draft(self, client):
        assert client.post("/stores/s1/theme/publish").status_code == 404


# ============================================================================
# Render and actions
# ============================================================================

@pytest.mark.unit
class TestRenderEndpoint:
    def test_render_published(self, client, page_tree):
        save(client, "s1", "PAGE", "home", page_tree)
        client.post("/stores/s1/documents/publish", json={"kind": "PAGE", "key": "home"})

        response = client.post(
            "/stores/s1/render",
            json={"key": "home", "context": {"store": {"name": "Acme"}, "product": {"defaultVariant": {"id": "v1"}}}},
        )

        assert response.status_code == 200
        root = response.json()["root"]
        assert root["children"][0]["props"]["text"] == "Acme"
        assert root["children"][1]["actions"]["onClick"]["payload"] == {"quantity": 1, "variantId": "v1"}
        assert response.json()["stylesheet"].startswith(":root{")

    def test_preview(self, client, page_tree):
        save(client, "s1", "PAGE", "home", page_tree)

        assert client.post("/stores/s1/render", json={"key": "home"}).status_code == 404
        assert client.post("/stores/s1/render", json={"key": "home", "preview": True}).status_code == 200

    def test_product_template(self, client):
        template = {"id": "pdp", "type": "Heading", "bindings": {"text": "product.name"}}
        save(client, "s1", "TEMPLATE", "PDP:default", template)

        response = client.post(
            "/stores/s1/render",
            json={"kind": "TEMPLATE", "schemaId": "shirts", "preview": True, "context": {"product": {"name": "Shirt"}}},
        )

        assert response.status_code == 200
        assert response.json()["root"]["props"]["text"] == "Shirt"

    def test_key_required(self, client):
        assert client.post("/stores/s1/render", json={"kind": "PAGE"}).status_code == 400


@pytest.mark.unit
class TestActionEndpoint:
    def test_client_side_action(self, client):
        response = client.post("/stores/s1/actions", json={"actionId": "OPEN_CART_SIDEBAR"})

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert response.json()["data"] == {"ui_state": {"cartOpen": True}}

    def test_add_to_cart_with_bindings(self, client, cart):
        response = client.post(
            "/stores/s1/actions",
            json={
                "actionId": "ADD_TO_CART",
                "payload": {"quantity": 1},
                "payloadBindings": {"variantId": "product.defaultVariant.id"},
                "context": {"product": {"defaultVariant": {"id": "var_123"}}},
            },
        )

        assert response.status_code == 200
        assert cart.calls == [("add_item", "s1", "var_123", 1)]

    def test_cross_tenant_payload(self, client, cart):
        response = client.post(
            "/stores/s1/actions",
            json={"actionId": "ADD_TO_CART", "payload": {"variantId": "v1", "storeId": "s2"}},
        )

        assert response.status_code == 403
        assert response.json()["error"] == "cross_tenant"
        assert cart.calls == []

    def test_unknown_action(self, client):
        response = client.post("/stores/s1/actions", json={"actionId": "TELEPORT"})

        assert response.status_code == 422
        assert response.json()["error"] == "unknown_action"

    def test_invalid_payload(self, client):
        response = client.post("/stores/s1/actions", json={"actionId": "NAVIGATE", "payload": {"to": "//evil"}})
        assert response.status_code == 400


# ============================================================================
# Authorization
# ============================================================================

@pytest.mark.unit
def test_authorizer_denies_other_stores(app_container, page_tree):
    def only_s1(request, store_id):
        return store_id == "s1"

    with TestClient(create_app(app_container, authorizer=only_s1)) as client:
        assert client.get("/stores/s1/documents").status_code == 200

        response = client.post("/stores/s2/documents", json={"kind": "PAGE", "key": "home", "tree": page_tree})
        assert response.status_code == 403
        assert response.json() == {"detail": "forbidden"}
        assert client.get("/health").status_code == 200
