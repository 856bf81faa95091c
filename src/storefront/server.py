"""
Storefront Server
Builder-facing document API and storefront render/action surface
"""

from typing import Any, Callable

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from injector import Injector
from prometheus_client import CONTENT_TYPE_LATEST
from pydantic import BaseModel, ConfigDict, Field

from .actions import ActionDispatcher, ActionRegistry, StoreContext
from .bindings import build_runtime_context
from .components import ComponentRegistry
from .core import (
    LogContext,
    Settings,
    configure_logging,
    create_container,
    get_logger,
    get_settings,
    new_request_id,
)
from .core.errors import StorefrontError
from .documents import DocumentKind, DocumentService, DocumentStatus, ThemeService
from .documents.defaults import GLOBAL_LAYOUT_KEY
from .monitoring import MetricsCollector
from .runtime import Renderer

logger = get_logger(__name__)

Authorizer = Callable[[Request, str], bool]


def allow_all(request: Request, store_id: str) -> bool:
    return True


class ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class SaveDraftRequest(ApiModel):
    kind: DocumentKind
    key: str
    tree: Any
    meta: dict[str, Any] | None = None


class PublishRequest(ApiModel):
    kind: DocumentKind
    key: str


class ThemeRequest(ApiModel):
    vars: dict[str, Any]


class ContextData(ApiModel):
    """Collaborator data exposed to bindings for one request."""

    store: dict[str, Any] | None = None
    settings: dict[str, Any] | None = None
    user: dict[str, Any] | None = None
    cart: dict[str, Any] | None = None
    route: dict[str, Any] | None = None
    ui_state: dict[str, Any] | None = Field(default=None, alias="uiState")
    collection: Any = None
    facets: Any = None
    product: dict[str, Any] | None = None
    selected_variant: dict[str, Any] | None = Field(default=None, alias="selectedVariant")
    similar_products: Any = None
    orders: Any = None


class RenderRequest(ApiModel):
    kind: DocumentKind = DocumentKind.PAGE
    key: str | None = None
    schema_id: str | None = Field(default=None, alias="schemaId")
    preview: bool = False
    layout_key: str | None = Field(default=GLOBAL_LAYOUT_KEY, alias="layoutKey")
    context: ContextData = Field(default_factory=ContextData)


class ActionRequest(ApiModel):
    action_id: str = Field(..., alias="actionId")
    payload: dict[str, Any] | None = None
    payload_bindings: dict[str, str] | None = Field(default=None, alias="payloadBindings")
    context: ContextData = Field(default_factory=ContextData)
    user_id: str | None = Field(default=None, alias="userId")
    session_id: str | None = Field(default=None, alias="sessionId")


def _runtime_context(store_id: str, data: ContextData, request_id: str):
    return build_runtime_context(
        store_id,
        store=data.store,
        settings=data.settings,
        user=data.user,
        cart=data.cart,
        route=data.route,
        ui_state=data.ui_state,
        collection=data.collection,
        facets=data.facets,
        product=data.product,
        selected_variant=data.selected_variant,
        similar_products=data.similar_products,
        orders=data.orders,
        request_id=request_id,
    )


def create_app(
    container: Injector | None = None,
    authorizer: Authorizer | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """
    Build the HTTP application.

    Args:
        container: Injector from ``create_container``; built from settings if absent
        authorizer: ``(request, store_id) -> bool`` gate for store-scoped routes
        settings: Used only when no container is given

    Returns:
        FastAPI app
    """
    container = container or create_container(settings)
    settings = container.get(Settings)
    configure_logging(settings.log_level, settings.json_logs)
    authorize = authorizer or allow_all

    documents = container.get(DocumentService)
    themes = container.get(ThemeService)
    renderer = container.get(Renderer)
    dispatcher = container.get(ActionDispatcher)
    actions = container.get(ActionRegistry)
    components = container.get(ComponentRegistry)
    metrics = container.get(MetricsCollector)

    app = FastAPI(title="Storefront Runtime", version="0.1.0")
    app.state.container = container

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or new_request_id()
        request.state.request_id = request_id
        parts = request.url.path.strip("/").split("/")
        store_id = parts[1] if len(parts) > 1 and parts[0] == "stores" else None
        with LogContext(request_id=request_id, store_id=store_id):
            response = await call_next(request)
        response.headers["x-request-id"] = request_id
        return response

    @app.exception_handler(StorefrontError)
    async def storefront_error(request: Request, exc: StorefrontError) -> JSONResponse:
        logger.info("request_failed", path=request.url.path, error=exc.code, status=exc.status_code)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    def store_scope(request: Request, store_id: str) -> str:
        if not authorize(request, store_id):
            logger.warning("store_access_denied", store_id=store_id)
            raise HTTPException(status_code=403, detail="forbidden")
        return store_id

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {"status": "healthy", "service": "storefront"}

    @app.get("/metrics")
    def prometheus_metrics() -> Response:
        return Response(content=metrics.get_metrics(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/components")
    def component_palette() -> dict[str, Any]:
        return {"palette": components.by_category()}

    @app.get("/actions")
    def action_catalogue() -> dict[str, Any]:
        return {"actions": actions.catalogue()}

    # Documents

    @app.get("/stores/{store_id}/documents")
    def list_documents(
        kind: DocumentKind | None = None,
        status: DocumentStatus | None = None,
        store_id: str = Depends(store_scope),
    ) -> dict[str, Any]:
        docs = documents.list_documents(store_id, kind, status)
        return {"documents": [doc.to_api() for doc in docs]}

    @app.post("/stores/{store_id}/documents", status_code=201)
    def save_draft(body: SaveDraftRequest, store_id: str = Depends(store_scope)) -> dict[str, Any]:
        return documents.save_draft(store_id, body.kind, body.key, body.tree, body.meta).to_api()

    @app.post("/stores/{store_id}/documents/publish")
    def publish(body: PublishRequest, store_id: str = Depends(store_scope)) -> dict[str, Any]:
        return documents.publish(store_id, body.kind, body.key).to_api()

    @app.post("/stores/{store_id}/documents/defaults", status_code=201)
    def create_defaults(store_id: str = Depends(store_scope)) -> dict[str, Any]:
        created = documents.create_default_documents(store_id)
        return {"created": len(created)}

    @app.get("/stores/{store_id}/editor/{kind}/{key:path}")
    def editor_document(kind: DocumentKind, key: str, store_id: str = Depends(store_scope)) -> dict[str, Any]:
        return documents.get_for_editor(store_id, kind, key).to_api()

    @app.get("/stores/{store_id}/documents/{doc_id}")
    def get_document(doc_id: str, store_id: str = Depends(store_scope)) -> dict[str, Any]:
        return documents.get_document(store_id, doc_id).to_api()

    @app.delete("/stores/{store_id}/documents/{doc_id}", status_code=204)
    def delete_document(doc_id: str, store_id: str = Depends(store_scope)) -> Response:
        documents.delete_document(store_id, doc_id)
        return Response(status_code=204)

    # Theme

    @app.get("/stores/{store_id}/theme")
    def get_theme(
        status: DocumentStatus = DocumentStatus.PUBLISHED, store_id: str = Depends(store_scope)
    ) -> dict[str, Any]:
        record = themes.get_theme(store_id, status)
        if record is not None:
            return record.to_api()
        return {"store_id": store_id, "status": status.value, "vars": themes.get_theme_vars(store_id, status)}

    @app.put("/stores/{store_id}/theme")
    def save_theme(body: ThemeRequest, store_id: str = Depends(store_scope)) -> dict[str, Any]:
        return themes.save_theme_draft(store_id, body.vars).to_api()

    @app.post("/stores/{store_id}/theme/publish")
    def publish_theme(store_id: str = Depends(store_scope)) -> dict[str, Any]:
        return themes.publish_theme(store_id).to_api()

    # Storefront

    @app.post("/stores/{store_id}/render")
    def render(body: RenderRequest, request: Request, store_id: str = Depends(store_scope)) -> dict[str, Any]:
        context = _runtime_context(store_id, body.context, request.state.request_id)
        if body.kind == DocumentKind.TEMPLATE and body.key is None:
            result = renderer.render_product(
                store_id, body.schema_id, context, preview=body.preview, layout_key=body.layout_key
            )
        else:
            if not body.key:
                raise HTTPException(status_code=400, detail="key is required")
            result = renderer.render_page(
                store_id, body.kind, body.key, context, preview=body.preview, layout_key=body.layout_key
            )
        return result.to_api()

    @app.post("/stores/{store_id}/actions")
    def dispatch_action(
        body: ActionRequest, request: Request, store_id: str = Depends(store_scope)
    ) -> dict[str, Any]:
        context = _runtime_context(store_id, body.context, request.state.request_id)
        store_context = StoreContext(
            store_id=store_id,
            user_id=body.user_id,
            session_id=body.session_id,
            metadata={"request_id": request.state.request_id},
        )
        descriptor = {"actionId": body.action_id}
        if body.payload is not None:
            descriptor["payload"] = body.payload
        if body.payload_bindings is not None:
            descriptor["payloadBindings"] = body.payload_bindings
        result = dispatcher.dispatch_descriptor(descriptor, context, store_context)
        return result.model_dump(mode="json")

    logger.info("app_created", routes=len(app.routes))
    return app


def serve() -> None:
    """Entry point - run the HTTP server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        create_app(settings=settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    serve()
