"""Default documents seeded for a new store."""

import copy
from typing import Any

from .models import DEFAULT_TEMPLATE_KEY, DocumentKind

GLOBAL_LAYOUT_KEY = "GLOBAL_LAYOUT"


def _node(node_id: str, node_type: str, **fields: Any) -> dict[str, Any]:
    node: dict[str, Any] = {"id": node_id, "type": node_type}
    node.update({key: value for key, value in fields.items() if value is not None})
    return node


def _pad(px: int) -> dict[str, Any]:
    return {"spacing": {"padding": {"top": px, "right": px, "bottom": px, "left": px}}}


MUTED_TEXT = {"typography": {"color": "var(--muted-foreground)"}}

GLOBAL_LAYOUT = _node(
    "layout_global",
    "Container",
    styles={"base": {"layout": {"display": "flex", "minHeight": "var(--screen-height)"}, "flex": {"direction": "column"}}},
    children=[
        _node(
            "layout_header",
            "Header",
            children=[
                _node(
                    "layout_navbar",
                    "Navbar",
                    bindings={"storeName": "store.name", "logoUrl": "store.logoUrl"},
                    children=[
                        _node("nav_home", "NavItem", props={"label": "Home", "href": "/"}),
                        _node("nav_shop", "NavItem", props={"label": "Shop", "href": "/collection"}),
                    ],
                )
            ],
        ),
        _node("layout_main", "Section", children=[_node("layout_slot", "Slot")]),
        _node("layout_footer", "Footer", props={"copyright": "All rights reserved."}, bindings={"storeName": "store.name"}),
        _node(
            "layout_cart_sidebar",
            "CartSidebar",
            bindings={
                "isOpen": "uiState.cartOpen",
                "items": "cart.items",
                "subtotal": "cart.subtotal",
                "total": "cart.total",
                "currency": "store.currency",
            },
        ),
    ],
)

HOME_PAGE = _node(
    "page_home",
    "Container",
    children=[
        _node(
            "home_hero",
            "Section",
            styles={
                "base": {
                    **_pad(64),
                    "typography": {"textAlign": "center"},
                    "background": {"type": "color", "color": "var(--muted)"},
                }
            },
            children=[
                _node(
                    "hero_heading",
                    "Heading",
                    props={"level": 1, "text": "Welcome to Our Store"},
                    bindings={"text": "store.name"},
                    styles={"base": {"typography": {"fontSize": 48, "fontWeight": 700}}},
                ),
                _node(
                    "hero_subtext",
                    "Text",
                    props={"text": "Discover our collection"},
                    styles={"base": {"typography": {"fontSize": 20, "color": "var(--muted-foreground)"}}},
                ),
                _node(
                    "hero_cta",
                    "Button",
                    props={"label": "Shop now"},
                    actions={"onClick": {"actionId": "NAVIGATE", "payload": {"to": "/collection"}}},
                ),
            ],
        ),
        _node(
            "home_featured",
            "Section",
            styles={"base": _pad(32)},
            children=[
                _node("featured_heading", "Heading", props={"level": 2, "text": "Featured products"}),
                _node(
                    "featured_grid",
                    "Grid",
                    styles={"base": {"grid": {"columns": 4, "columnGap": 24, "rowGap": 24}}},
                    children=[
                        _node(
                            "featured_repeater",
                            "Repeater",
                            props={"dataPath": "collection.products", "limit": 8},
                            children=[_node("featured_card", "PrefabInstance", props={"prefabKey": "ProductCard"})],
                        )
                    ],
                ),
            ],
        ),
    ],
)

COLLECTION_PAGE = _node(
    "page_collection",
    "Container",
    styles={"base": _pad(32)},
    children=[
        _node("collection_title", "Heading", props={"level": 1, "text": "Shop"}, bindings={"text": "collection.name"}),
        _node(
            "collection_toolbar",
            "Row",
            styles={"base": {"flex": {"justify": "space-between", "align": "center"}}},
            children=[
                _node("collection_filters", "CollectionFilters", bindings={"facets": "facets"}),
                _node("collection_sort", "CollectionSort", bindings={"value": "route.query.sort"}),
            ],
        ),
        _node(
            "collection_grid",
            "Grid",
            styles={"base": {"grid": {"columns": 3, "columnGap": 24, "rowGap": 24}}},
            children=[
                _node(
                    "collection_repeater",
                    "Repeater",
                    props={"dataPath": "collection.products", "emptyText": "No products found"},
                    children=[_node("collection_card", "PrefabInstance", props={"prefabKey": "ProductCard"})],
                )
            ],
        ),
    ],
)

CHECKOUT_PAGE = _node(
    "page_checkout",
    "Container",
    styles={"base": _pad(32)},
    children=[
        _node("checkout_title", "Heading", props={"level": 1, "text": "Checkout"}),
        _node(
            "checkout_delivery",
            "DeliveryModeSelector",
            bindings={"value": "cart.deliveryMode"},
            actions={"onChange": {"actionId": "SET_DELIVERY_MODE", "payloadBindings": {"mode": "uiState.deliveryMode"}}},
        ),
        _node(
            "checkout_form",
            "CheckoutForm",
            bindings={"user": "user"},
            actions={"onSubmit": {"actionId": "SUBMIT_FORM", "payload": {"formType": "checkout"}}},
        ),
        _node("checkout_summary", "OrderSummary", bindings={"items": "cart.items", "total": "cart.total"}),
        _node("checkout_payment", "PaymentMethods", bindings={"methods": "settings.paymentMethods"}),
    ],
)

ORDERS_PAGE = _node(
    "page_orders",
    "Container",
    styles={"base": _pad(32)},
    children=[
        _node("orders_title", "Heading", props={"level": 1, "text": "Your orders"}),
        _node(
            "orders_list",
            "OrderList",
            children=[
                _node(
                    "orders_repeater",
                    "Repeater",
                    props={"dataPath": "orders", "emptyText": "No orders yet"},
                    children=[_node("orders_card", "PrefabInstance", props={"prefabKey": "OrderCard"})],
                )
            ],
        ),
    ],
)

PROFILE_PAGE = _node(
    "page_profile",
    "Container",
    styles={"base": _pad(32)},
    children=[
        _node("profile_title", "Heading", props={"level": 1, "text": "Profile"}),
        _node(
            "profile_card",
            "ProfileCard",
            bindings={"name": "user.name", "email": "user.email"},
            actions={"onSubmit": {"actionId": "SUBMIT_FORM", "payload": {"formType": "profile"}}},
        ),
    ],
)

LOGIN_PAGE = _node(
    "page_login",
    "Container",
    styles={"base": {**_pad(32), "layout": {"maxWidth": 420}}},
    children=[
        _node("login_title", "Heading", props={"level": 1, "text": "Sign in"}),
        _node(
            "login_form",
            "LoginForm",
            actions={"onSubmit": {"actionId": "SUBMIT_FORM", "payload": {"formType": "login"}}},
        ),
        _node("login_signup_link", "Link", props={"href": "/signup", "label": "Create an account"}),
    ],
)

PDP_TEMPLATE = _node(
    "template_pdp",
    "Container",
    children=[
        _node(
            "pdp_main",
            "Row",
            styles={
                "base": {
                    "layout": {"display": "flex"},
                    "flex": {"direction": "column"},
                    "spacing": {"gap": 32, **_pad(32)["spacing"]},
                },
                "breakpoints": {"lg": {"flex": {"direction": "row"}}},
            },
            children=[
                _node(
                    "pdp_gallery",
                    "Column",
                    children=[
                        _node(
                            "pdp_image",
                            "Image",
                            props={"alt": "Product image"},
                            bindings={"src": "selectedVariant.images[0].url", "alt": "product.name"},
                            styles={
                                "base": {
                                    "layout": {"width": "var(--full-width)", "aspectRatio": 1},
                                    "border": {"radius": {"tl": 8, "tr": 8, "br": 8, "bl": 8}},
                                }
                            },
                        )
                    ],
                ),
                _node(
                    "pdp_details",
                    "Column",
                    children=[
                        _node("pdp_title", "Heading", props={"level": 1}, bindings={"text": "product.name"}),
                        _node(
                            "pdp_price",
                            "PriceDisplay",
                            bindings={"amount": "selectedVariant.price", "currency": "store.currency"},
                        ),
                        _node(
                            "pdp_description",
                            "Text",
                            bindings={"text": "product.description"},
                            styles={"base": MUTED_TEXT},
                        ),
                        _node(
                            "pdp_variants",
                            "VariantSelector",
                            bindings={"variants": "product.variants", "selected": "selectedVariant.id"},
                            actions={
                                "onChange": {"actionId": "SELECT_VARIANT", "payloadBindings": {"variantId": "uiState.variantId"}}
                            },
                        ),
                        _node(
                            "pdp_actions",
                            "Row",
                            styles={"base": {"layout": {"display": "flex"}, "spacing": {"gap": 16}}},
                            children=[
                                _node(
                                    "pdp_add_to_cart",
                                    "AddToCartButton",
                                    props={"label": "Add to cart"},
                                    actions={
                                        "onClick": {
                                            "actionId": "ADD_TO_CART",
                                            "payload": {"quantity": 1},
                                            "payloadBindings": {"variantId": "selectedVariant.id"},
                                        }
                                    },
                                ),
                                _node(
                                    "pdp_buy_now",
                                    "BuyNowButton",
                                    props={"label": "Buy now", "variant": "outline"},
                                    actions={
                                        "onClick": {
                                            "actionId": "BUY_NOW",
                                            "payloadBindings": {"variantId": "selectedVariant.id"},
                                        }
                                    },
                                ),
                            ],
                        ),
                    ],
                ),
            ],
        ),
        _node(
            "pdp_similar",
            "SimilarProducts",
            children=[
                _node(
                    "pdp_similar_repeater",
                    "Repeater",
                    props={"dataPath": "similarProducts", "limit": 4},
                    children=[_node("pdp_similar_card", "PrefabInstance", props={"prefabKey": "ProductCard"})],
                )
            ],
        ),
    ],
)

PRODUCT_CARD_PREFAB = _node(
    "ProductCard_default",
    "Container",
    styles={
        "base": {
            "layout": {"maxWidth": 300, "overflow": "hidden"},
            "border": {"width": 1, "style": "solid", "color": "var(--border)", "radius": {"tl": 8, "tr": 8, "br": 8, "bl": 8}},
            "transition": {"preset": "fast"},
        },
        "states": {
            "hover": {
                "effects": {"shadow": {"x": 0, "y": 4, "blur": 12, "color": "#0000001a"}},
                "position": {"transform": {"translateY": -2}},
            }
        },
    },
    actions={"onClick": {"actionId": "NAVIGATE", "payload": {"to": "/products"}, "payloadBindings": {"to": "item.url"}}},
    children=[
        _node(
            "product_card_image",
            "Image",
            props={"alt": "Product"},
            bindings={"src": "item.defaultVariant.images[0].url", "alt": "item.name"},
            styles={"base": {"layout": {"aspectRatio": 1}}},
        ),
        _node(
            "product_card_content",
            "Container",
            styles={"base": _pad(16)},
            children=[
                _node(
                    "product_card_name",
                    "Heading",
                    props={"level": 3},
                    bindings={"text": "item.name"},
                    styles={"base": {"typography": {"fontSize": 16, "fontWeight": 600}}},
                ),
                _node(
                    "product_card_price",
                    "PriceDisplay",
                    bindings={"amount": "item.defaultVariant.price", "currency": "store.currency"},
                ),
                _node(
                    "product_card_add",
                    "AddToCartButton",
                    props={"label": "Add to cart"},
                    actions={
                        "onClick": {
                            "actionId": "ADD_TO_CART",
                            "payload": {"quantity": 1},
                            "payloadBindings": {"variantId": "item.defaultVariant.id"},
                        }
                    },
                ),
            ],
        ),
    ],
)

NAVBAR_PREFAB = _node(
    "Navbar_default",
    "Navbar",
    bindings={"storeName": "store.name", "logoUrl": "store.logoUrl"},
    children=[
        _node("navbar_home", "NavItem", props={"label": "Home", "href": "/"}),
        _node("navbar_shop", "NavItem", props={"label": "Shop", "href": "/collection"}),
        _node(
            "navbar_cart",
            "Button",
            props={"label": "Cart", "variant": "ghost"},
            actions={"onClick": {"actionId": "OPEN_CART_SIDEBAR", "payload": {"open": True}}},
        ),
    ],
)

CART_SIDEBAR_PREFAB = _node(
    "CartSidebar_default",
    "CartSidebar",
    bindings={"isOpen": "uiState.cartOpen", "items": "cart.items", "total": "cart.total"},
    children=[
        _node(
            "cart_items",
            "Repeater",
            props={"dataPath": "cart.items", "emptyText": "Your cart is empty"},
            children=[_node("cart_item", "CartItem", bindings={"title": "item.title", "quantity": "item.quantity"})],
        ),
        _node(
            "cart_checkout",
            "Button",
            props={"label": "Checkout"},
            actions={"onClick": {"actionId": "NAVIGATE", "payload": {"to": "/checkout"}}},
        ),
    ],
)

ORDER_CARD_PREFAB = _node(
    "OrderCard_default",
    "OrderCard",
    bindings={"orderNumber": "item.number", "status": "item.status", "total": "item.total"},
    styles={"base": {**_pad(16), "border": {"width": 1, "style": "solid", "color": "var(--border)"}}},
    children=[
        _node("order_card_timeline", "OrderTimeline", bindings={"events": "item.events"}),
    ],
)

DEFAULT_DOCUMENTS: tuple[tuple[DocumentKind, str, dict[str, Any]], ...] = (
    (DocumentKind.LAYOUT, GLOBAL_LAYOUT_KEY, GLOBAL_LAYOUT),
    (DocumentKind.PAGE, "HOME", HOME_PAGE),
    (DocumentKind.PAGE, "COLLECTION", COLLECTION_PAGE),
    (DocumentKind.PAGE, "CHECKOUT", CHECKOUT_PAGE),
    (DocumentKind.PAGE, "ORDERS", ORDERS_PAGE),
    (DocumentKind.PAGE, "PROFILE", PROFILE_PAGE),
    (DocumentKind.PAGE, "LOGIN", LOGIN_PAGE),
    (DocumentKind.TEMPLATE, DEFAULT_TEMPLATE_KEY, PDP_TEMPLATE),
    (DocumentKind.PREFAB, "ProductCard", PRODUCT_CARD_PREFAB),
    (DocumentKind.PREFAB, "Navbar", NAVBAR_PREFAB),
    (DocumentKind.PREFAB, "CartSidebar", CART_SIDEBAR_PREFAB),
    (DocumentKind.PREFAB, "OrderCard", ORDER_CARD_PREFAB),
)


def default_tree(kind: DocumentKind, key: str) -> dict[str, Any]:
    """
    Tree the editor starts from when no draft exists.

    Known keys get their seeded default; anything else gets an empty
    container (a layout also gets its Slot).
    """
    for default_kind, default_key, tree in DEFAULT_DOCUMENTS:
        if default_kind == kind and default_key == key:
            return copy.deepcopy(tree)
    if kind == DocumentKind.LAYOUT:
        return _node("layout_root", "Container", children=[_node("layout_slot", "Slot")])
    if kind == DocumentKind.TEMPLATE:
        return copy.deepcopy(PDP_TEMPLATE)
    return _node("root", "Container", children=[])
