"""
Document Model
Documents, tree validation, stores and the draft/publish lifecycle
"""

from .models import (
    DEFAULT_TEMPLATE_KEY,
    Document,
    DocumentKind,
    DocumentStatus,
    Node,
    ThemeRecord,
    compute_checksum,
    template_key,
)
from .store import DocumentStore, InMemoryDocumentStore, SQLiteDocumentStore, create_store
from .validation import check_tree, collect_issues, validate_tree
from .tree import (
    collect_ids,
    create_node,
    find_by_type,
    find_node,
    find_parent,
    insert_node,
    move_node,
    remove_node,
    update_node,
)
from .defaults import DEFAULT_DOCUMENTS, GLOBAL_LAYOUT_KEY, default_tree
from .themes import ThemeService
from .service import DocumentService

__all__ = [
    "DEFAULT_TEMPLATE_KEY",
    "Document",
    "DocumentKind",
    "DocumentStatus",
    "Node",
    "ThemeRecord",
    "compute_checksum",
    "template_key",
    "DocumentStore",
    "InMemoryDocumentStore",
    "SQLiteDocumentStore",
    "create_store",
    "check_tree",
    "collect_issues",
    "validate_tree",
    "collect_ids",
    "create_node",
    "find_by_type",
    "find_node",
    "find_parent",
    "insert_node",
    "move_node",
    "remove_node",
    "update_node",
    "DEFAULT_DOCUMENTS",
    "GLOBAL_LAYOUT_KEY",
    "default_tree",
    "ThemeService",
    "DocumentService",
]
