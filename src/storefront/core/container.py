"""Dependency Injection Container."""

from injector import Injector, Module, provider, singleton

from ..actions import ActionDispatcher, ActionRegistry, create_action_registry
from ..clients import CommerceClient
from ..components import ComponentRegistry, create_component_registry
from ..documents import DocumentService, DocumentStore, ThemeService, create_store
from ..monitoring import MetricsCollector
from ..runtime import Renderer
from ..styles import StyleCompiler
from .config import Settings, get_settings


class CoreModule(Module):
    """Core dependencies."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    @singleton
    @provider
    def provide_settings(self) -> Settings:
        return self.settings

    @singleton
    @provider
    def provide_metrics(self) -> MetricsCollector:
        """Provide a metrics collector with its own registry."""
        return MetricsCollector()

    @singleton
    @provider
    def provide_store(self, settings: Settings) -> DocumentStore:
        """Provide the document store selected by ``database_path``."""
        return create_store(settings.database_path)

    @singleton
    @provider
    def provide_component_registry(self) -> ComponentRegistry:
        return create_component_registry()

    @singleton
    @provider
    def provide_style_compiler(self, settings: Settings, metrics: MetricsCollector) -> StyleCompiler:
        return StyleCompiler(cache_size=settings.style_cache_size, metrics=metrics)

    @singleton
    @provider
    def provide_commerce_client(self, settings: Settings) -> CommerceClient:
        """Provide commerce client with circuit breaker settings."""
        return CommerceClient(
            settings.commerce_url,
            timeout=settings.commerce_timeout,
            fail_max=settings.breaker_fail_max,
            reset_timeout=settings.breaker_reset_timeout,
        )

    @singleton
    @provider
    def provide_action_registry(self, commerce: CommerceClient) -> ActionRegistry:
        """Provide the built-in action catalogue backed by the commerce client."""
        return create_action_registry(cart=commerce, discounts=commerce, forms=commerce)

    @singleton
    @provider
    def provide_dispatcher(self, registry: ActionRegistry, metrics: MetricsCollector) -> ActionDispatcher:
        return ActionDispatcher(registry, metrics=metrics)

    @singleton
    @provider
    def provide_theme_service(self, store: DocumentStore) -> ThemeService:
        return ThemeService(store)

    @singleton
    @provider
    def provide_document_service(
        self,
        store: DocumentStore,
        components: ComponentRegistry,
        registry: ActionRegistry,
        themes: ThemeService,
        settings: Settings,
        metrics: MetricsCollector,
    ) -> DocumentService:
        """Provide document service validating against the live registries."""
        return DocumentService(
            store,
            components=components,
            action_ids=frozenset(definition.action_id for definition in registry.list_all()),
            themes=themes,
            max_tree_size=settings.max_tree_size,
            max_tree_depth=settings.max_tree_depth,
            metrics=metrics,
        )

    @singleton
    @provider
    def provide_renderer(
        self,
        documents: DocumentService,
        themes: ThemeService,
        components: ComponentRegistry,
        style_compiler: StyleCompiler,
        registry: ActionRegistry,
        metrics: MetricsCollector,
    ) -> Renderer:
        return Renderer(
            documents,
            themes=themes,
            components=components,
            style_compiler=style_compiler,
            action_ids=frozenset(definition.action_id for definition in registry.list_all()),
            metrics=metrics,
        )


def create_container(settings: Settings | None = None) -> Injector:
    """Create configured injector."""
    return Injector([CoreModule(settings)])
