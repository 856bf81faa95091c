"""Core utilities and infrastructure."""

from .config import Settings, get_settings
from .errors import (
    Issue,
    StorefrontError,
    ValidationError,
    NotFoundError,
    UnknownActionError,
    CrossTenantError,
)
from .logging_config import configure_logging, get_logger, LogContext
from .json import (
    JSONParseError,
    dumps_canonical,
    loads,
    validate_json_size,
    validate_json_depth,
)
from .hash import Algorithm, hash_string, hash_bytes, content_checksum
from .cache import LRUCache, Stats
from .id import new_document_id, new_request_id, new_node_id


def create_container(settings: Settings | None = None):
    """Create dependency injection container (lazy import to avoid circular deps)."""
    from .container import create_container as _create_container

    return _create_container(settings)


__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Errors
    "Issue",
    "StorefrontError",
    "ValidationError",
    "NotFoundError",
    "UnknownActionError",
    "CrossTenantError",
    # Logging
    "configure_logging",
    "get_logger",
    "LogContext",
    # JSON
    "JSONParseError",
    "dumps_canonical",
    "loads",
    "validate_json_size",
    "validate_json_depth",
    # Hashing
    "Algorithm",
    "hash_string",
    "hash_bytes",
    "content_checksum",
    # Caching
    "LRUCache",
    "Stats",
    # IDs
    "new_document_id",
    "new_request_id",
    "new_node_id",
    # DI
    "create_container",
]
