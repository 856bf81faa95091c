"""Tests for the rendering runtime."""

import pytest

from storefront.core.errors import NotFoundError
from storefront.runtime import BROKEN_REFERENCE, FRAGMENT, Renderer, apply_overrides
from storefront.styles import DEFAULT_THEME, compile_theme


def walk(node):
    yield node
    for child in node.children:
        yield from walk(child)


def by_id(result, node_id):
    return [node for node in walk(result.root) if node.id == node_id]


def publish(service, kind, key, tree, store_id="store_1"):
    service.save_draft(store_id, kind, key, tree)
    service.publish(store_id, kind, key)


def card_prefab():
    return {"id": "card", "type": "Text", "props": {"variant": "caption"}, "bindings": {"text": "item.name"}}


def repeater(**props):
    return {
        "id": "rep",
        "type": "Repeater",
        "props": {"dataPath": "collection.products", **props},
        "children": [{"id": "row", "type": "Text", "bindings": {"text": "item.name"}}],
    }


# ============================================================================
# Pages and layouts
# ============================================================================

@pytest.mark.unit
class TestRenderPage:
    def test_page_in_layout(self, renderer, document_service, runtime_context, page_tree, layout_tree):
        publish(document_service, "PAGE", "home", page_tree)
        publish(document_service, "LAYOUT", "GLOBAL_LAYOUT", layout_tree)

        result = renderer.render_page("store_1", "PAGE", "home", runtime_context)

        assert result.root.id == "layout"
        assert [child.id for child in result.root.children] == ["header", "root"]
        assert by_id(result, "brand")[0].props["text"] == "Acme"
        assert by_id(result, "slot") == []

    def test_node_output(self, renderer, document_service, runtime_context, page_tree):
        publish(document_service, "PAGE", "home", page_tree)

        result = renderer.render_page("store_1", "PAGE", "home", runtime_context)
        title = by_id(result, "title")[0]
        cta = by_id(result, "cta")[0]

        assert title.props == {"text": "Acme", "level": 1, "tag": "h1"}
        assert title.styles == {"base": {"padding-top": "8px", "padding-left": "16px"}}
        assert cta.actions == {"onClick": {"actionId": "ADD_TO_CART", "payload": {"quantity": 1, "variantId": "var_123"}}}
        assert cta.styles is None

    def test_without_layout(self, renderer, document_service, runtime_context, page_tree):
        publish(document_service, "PAGE", "home", page_tree)
        assert renderer.render_page("store_1", "PAGE", "home", runtime_context).root.id == "root"

    def test_layout_skipped(self, renderer, document_service, runtime_context, page_tree, layout_tree):
        publish(document_service, "PAGE", "home", page_tree)
        publish(document_service, "LAYOUT", "GLOBAL_LAYOUT", layout_tree)

        result = renderer.render_page("store_1", "PAGE", "home", runtime_context, layout_key=None)
        assert result.root.id == "root"

    def test_layout_alone_keeps_empty_slot(self, renderer, document_service, runtime_context, layout_tree):
        publish(document_service, "LAYOUT", "GLOBAL_LAYOUT", layout_tree)

        result = renderer.render_page("store_1", "LAYOUT", "GLOBAL_LAYOUT", runtime_context)
        assert by_id(result, "slot")[0].type == "Slot"

    def test_live_reads_published_only(self, renderer, document_service, runtime_context, page_tree, metrics):
        document_service.save_draft("store_1", "PAGE", "home", page_tree)

        with pytest.raises(NotFoundError):
            renderer.render_page("store_1", "PAGE", "home", runtime_context)
        assert metrics.registry.get_sample_value(
            "storefront_renders_total", {"mode": "live", "status": "not_found"}
        ) == 1

        preview = renderer.render_page("store_1", "PAGE", "home", runtime_context, preview=True)
        assert preview.root.id == "root"
        assert metrics.registry.get_sample_value(
            "storefront_renders_total", {"mode": "preview", "status": "success"}
        ) == 1

    def test_other_store_not_visible(self, renderer, document_service, runtime_context, page_tree):
        publish(document_service, "PAGE", "home", page_tree, store_id="store_2")

        with pytest.raises(NotFoundError):
            renderer.render_page("store_1", "PAGE", "home", runtime_context)

    def test_theme(self, renderer, document_service, theme_service, runtime_context, page_tree):
        publish(document_service, "PAGE", "home", page_tree)

        result = renderer.render_page("store_1", "PAGE", "home", runtime_context)
        assert result.theme == compile_theme(DEFAULT_THEME)

        theme_service.save_theme_draft("store_1", {"primary": "#ff0000"})
        assert renderer.render_page("store_1", "PAGE", "home", runtime_context).theme == compile_theme(DEFAULT_THEME)

        preview = renderer.render_page("store_1", "PAGE", "home", runtime_context, preview=True)
        assert preview.theme == {"--primary": "#ff0000"}
        assert preview.stylesheet == ":root{--primary:#ff0000}"

    def test_to_api_omits_absent_fields(self, renderer, document_service, runtime_context, page_tree):
        publish(document_service, "PAGE", "home", page_tree)

        data = renderer.render_page("store_1", "PAGE", "home", runtime_context).to_api()

        assert data["root"]["id"] == "root"
        assert "styles" not in data["root"]
        assert "key" not in data["root"]
        assert data["warnings"] == []


@pytest.mark.unit
class TestRenderProduct:
    def test_falls_back_to_default_template(self, renderer, document_service, runtime_context):
        template = {"id": "pdp", "type": "Heading", "props": {"level": 1}, "bindings": {"text": "product.name"}}
        publish(document_service, "TEMPLATE", "PDP:default", template)

        result = renderer.render_product("store_1", "shirts", runtime_context)

        assert result.root.props["text"] == "Shirt"

    def test_schema_template(self, renderer, document_service, runtime_context):
        publish(document_service, "TEMPLATE", "PDP:default", {"id": "pdp", "type": "Text"})
        publish(document_service, "TEMPLATE", "PDP:shirts", {"id": "pdp_shirts", "type": "Text"})

        assert renderer.render_product("store_1", "shirts", runtime_context).root.id == "pdp_shirts"

    def test_no_template(self, renderer, runtime_context):
        with pytest.raises(NotFoundError):
            renderer.render_product("store_1", "shirts", runtime_context)


# ============================================================================
# Structural nodes
# ============================================================================

@pytest.mark.unit
class TestRepeater:
    def test_rows(self, renderer, runtime_context):
        tree = {"id": "root", "type": "Container", "children": [repeater()]}

        result = renderer.render_tree("store_1", tree, runtime_context)
        rows = result.root.children

        assert [row.props["text"] for row in rows] == ["Hat", "Scarf"]
        assert [row.key for row in rows] == ["p1", "p2"]

    def test_limit(self, renderer, runtime_context):
        tree = {"id": "root", "type": "Container", "children": [repeater(limit=1)]}
        assert [row.props["text"] for row in renderer.render_tree("store_1", tree, runtime_context).root.children] == ["Hat"]

    def test_index_keys(self, renderer, runtime_context):
        context = runtime_context.with_values(orders=[{"number": "A"}, {"number": "B"}])
        tree = {
            "id": "root",
            "type": "Container",
            "children": [
                {
                    "id": "orders",
                    "type": "Repeater",
                    "props": {"dataPath": "orders"},
                    "children": [{"id": "order", "type": "Text", "bindings": {"text": "item.number"}}],
                }
            ],
        }

        rows = renderer.render_tree("store_1", tree, context).root.children
        assert [(row.key, row.props["text"]) for row in rows] == [("0", "A"), ("1", "B")]

    def test_empty_text(self, renderer, runtime_context):
        tree = {
            "id": "root",
            "type": "Container",
            "children": [
                {
                    "id": "rep",
                    "type": "Repeater",
                    "props": {"dataPath": "cart.items", "emptyText": "Nothing here"},
                    "children": [{"id": "row", "type": "Text"}],
                }
            ],
        }

        children = renderer.render_tree("store_1", tree, runtime_context).root.children
        assert [(c.id, c.type, c.props) for c in children] == [("rep-empty", "Text", {"text": "Nothing here"})]

    def test_non_list_data(self, renderer, runtime_context):
        tree = {"id": "root", "type": "Container", "children": [repeater(dataPath="store.name")]}
        assert renderer.render_tree("store_1", tree, runtime_context).root.children == []

    def test_root_repeater_becomes_fragment(self, renderer, runtime_context):
        result = renderer.render_tree("store_1", repeater(), runtime_context)

        assert result.root.type == FRAGMENT
        assert result.root.id == "rep"
        assert len(result.root.children) == 2


@pytest.mark.unit
class TestConditional:
    def tree(self):
        return {
            "id": "root",
            "type": "Container",
            "children": [
                {
                    "id": "cond",
                    "type": "Conditional",
                    "bindings": {"show": "uiState.cartOpen"},
                    "children": [{"id": "panel", "type": "Text", "props": {"text": "Cart"}}],
                }
            ],
        }

    def test_hidden(self, renderer, runtime_context):
        assert renderer.render_tree("store_1", self.tree(), runtime_context).root.children == []

    def test_shown(self, renderer, runtime_context):
        context = runtime_context.with_values(uiState={"cartOpen": True})
        children = renderer.render_tree("store_1", self.tree(), context).root.children
        assert [child.id for child in children] == ["panel"]

    def test_missing_binding_hides(self, renderer, runtime_context):
        tree = self.tree()
        tree["children"][0]["bindings"] = {"show": "user.loggedIn"}
        assert renderer.render_tree("store_1", tree, runtime_context).root.children == []


# ============================================================================
# Prefabs
# ============================================================================

@pytest.mark.unit
class TestPrefabs:
    def test_instance_renders_prefab(self, renderer, document_service, runtime_context):
        publish(document_service, "PREFAB", "Card", card_prefab())
        tree = {"id": "inst", "type": "PrefabInstance", "props": {"prefabKey": "Card"}}

        result = renderer.render_tree("store_1", tree, runtime_context.with_scope({"name": "Hat"}, 0))

        assert result.root.type == "PrefabInstance"
        assert result.root.props == {"prefabKey": "Card"}
        assert result.root.children[0].props == {"text": "Hat", "variant": "caption"}

    def test_overrides(self, renderer, document_service, runtime_context):
        publish(document_service, "PREFAB", "Card", card_prefab())
        tree = {
            "id": "inst",
            "type": "PrefabInstance",
            "props": {"prefabKey": "Card", "overrides": {"card": {"props": {"variant": "muted"}}}},
        }

        result = renderer.render_tree("store_1", tree, runtime_context)
        assert result.root.children[0].props["variant"] == "muted"

    def test_edits_propagate_on_publish(self, renderer, document_service, runtime_context):
        publish(document_service, "PREFAB", "Card", card_prefab())
        tree = {"id": "inst", "type": "PrefabInstance", "props": {"prefabKey": "Card"}}

        edited = card_prefab()
        edited["props"]["variant"] = "label"
        publish(document_service, "PREFAB", "Card", edited)

        result = renderer.render_tree("store_1", tree, runtime_context)
        assert result.root.children[0].props["variant"] == "label"

    def test_missing_prefab(self, renderer, runtime_context, metrics):
        tree = {"id": "inst", "type": "PrefabInstance", "props": {"prefabKey": "Nope"}}

        result = renderer.render_tree("store_1", tree, runtime_context)

        assert result.root.type == BROKEN_REFERENCE
        assert result.root.props == {"prefabKey": "Nope", "reason": "missing"}
        assert [w.reason for w in result.warnings] == ["broken_reference:missing"]
        assert metrics.registry.get_sample_value("storefront_broken_references_total", {"reason": "missing"}) == 1

    def test_draft_prefab_only_in_preview(self, renderer, document_service, runtime_context):
        document_service.save_draft("store_1", "PREFAB", "Card", card_prefab())
        page = {"id": "root", "type": "Container", "children": [{"id": "inst", "type": "PrefabInstance", "props": {"prefabKey": "Card"}}]}
        publish(document_service, "PAGE", "home", page)

        live = renderer.render_page("store_1", "PAGE", "home", runtime_context)
        assert by_id(live, "inst")[0].type == BROKEN_REFERENCE

        preview = renderer.render_page("store_1", "PAGE", "home", runtime_context, preview=True)
        assert by_id(preview, "inst")[0].type == "PrefabInstance"

    def test_cycle(self, renderer, document_service, runtime_context, metrics):
        for key, other in (("A", "B"), ("B", "A")):
            publish(
                document_service,
                "PREFAB",
                key,
                {
                    "id": f"{key}_root",
                    "type": "Container",
                    "children": [{"id": f"{key}_ref", "type": "PrefabInstance", "props": {"prefabKey": other}}],
                },
            )
        tree = {"id": "inst", "type": "PrefabInstance", "props": {"prefabKey": "A"}}

        result = renderer.render_tree("store_1", tree, runtime_context)

        broken = by_id(result, "B_ref")[0]
        assert broken.type == BROKEN_REFERENCE
        assert broken.props["reason"] == "cycle"
        assert by_id(result, "A_ref")[0].type == "PrefabInstance"
        assert metrics.registry.get_sample_value("storefront_broken_references_total", {"reason": "cycle"}) == 1

    def test_same_prefab_twice_is_not_a_cycle(self, renderer, document_service, runtime_context):
        publish(document_service, "PREFAB", "Card", card_prefab())
        tree = {
            "id": "root",
            "type": "Container",
            "children": [
                {"id": "one", "type": "PrefabInstance", "props": {"prefabKey": "Card"}},
                {"id": "two", "type": "PrefabInstance", "props": {"prefabKey": "Card"}},
            ],
        }

        result = renderer.render_tree("store_1", tree, runtime_context)
        assert [child.type for child in result.root.children] == ["PrefabInstance", "PrefabInstance"]
        assert result.warnings == []

    def test_apply_overrides_does_not_mutate(self):
        prefab = {"id": "card", "type": "Text", "props": {"text": "a"}, "styles": {"base": {}}}

        result = apply_overrides(prefab, {"card": {"props": {"variant": "muted"}, "styles": {"base": {"layout": {"width": 1}}}}})

        assert result["props"] == {"text": "a", "variant": "muted"}
        assert result["styles"] == {"base": {"layout": {"width": 1}}}
        assert prefab == {"id": "card", "type": "Text", "props": {"text": "a"}, "styles": {"base": {}}}


# ============================================================================
# Degradation
# ============================================================================

@pytest.mark.unit
class TestDegradation:
    def test_unknown_type_skipped(self, renderer, runtime_context):
        tree = {"id": "root", "type": "Container", "children": [{"id": "m", "type": "Marquee"}, {"id": "t", "type": "Text"}]}

        result = renderer.render_tree("store_1", tree, runtime_context)

        assert [child.id for child in result.root.children] == ["t"]
        assert [(w.node_id, w.reason) for w in result.warnings] == [("m", "unknown_type")]

    def test_unknown_action_dropped(self, document_service, runtime_context, page_tree):
        renderer = Renderer(document_service, action_ids=["NAVIGATE"])

        result = renderer.render_tree("store_1", page_tree, runtime_context)

        assert by_id(result, "cta")[0].actions is None
        assert [w.reason for w in result.warnings] == ["unknown_action"]

    def test_unresolved_binding_uses_default(self, renderer, runtime_context):
        tree = {"id": "t", "type": "Text", "bindings": {"text": "user.name"}}
        assert renderer.render_tree("store_1", tree, runtime_context).root.props == {"variant": "body"}

    @pytest.mark.parametrize("url", ["javascript:alert(1)", "//evil.test"])
    def test_unsafe_bound_href_falls_back_to_default(self, renderer, runtime_context, url):
        context = runtime_context.with_values(product={"customData": {"url": url}})
        tree = {"id": "l", "type": "Link", "props": {"label": "More"}, "bindings": {"href": "product.customData.url"}}

        props = renderer.render_tree("store_1", tree, context).root.props

        assert props == {"href": "/", "label": "More", "newTab": False}

    def test_unsafe_override_src_dropped(self, renderer, document_service, runtime_context):
        publish(document_service, "PREFAB", "Hero", {"id": "img", "type": "Image", "props": {"src": "/hero.png"}})
        tree = {
            "id": "inst",
            "type": "PrefabInstance",
            "props": {"prefabKey": "Hero", "overrides": {"img": {"props": {"src": "javascript:alert(1)"}}}},
        }

        result = renderer.render_tree("store_1", tree, runtime_context)

        assert "src" not in by_id(result, "img")[0].props


# ============================================================================
# Default documents
# ============================================================================

@pytest.mark.unit
def test_default_home_page_renders_cleanly(renderer, document_service, runtime_context):
    document_service.create_default_documents("store_1")

    result = renderer.render_page("store_1", "PAGE", "HOME", runtime_context)

    assert result.warnings == []
    assert result.root.id == "layout_global"
    cards = by_id(result, "featured_card")
    assert [card.key for card in cards] == ["p1", "p2"]
    product_cards = by_id(result, "ProductCard_default")
    assert product_cards[0].actions["onClick"]["payload"] == {"to": "/products/hat"}
    assert by_id(result, "hero_heading")[0].props["text"] == "Acme"
