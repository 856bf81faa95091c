"""
Document Service
Draft save, atomic publish and store-scoped reads for composable documents
"""

import copy
import re
from typing import Any, Collection

from ..components import ComponentRegistry
from ..core.errors import CrossTenantError, Issue, NotFoundError, ValidationError
from ..core.json import JSONParseError, validate_json_size
from ..core.logging_config import get_logger
from .defaults import DEFAULT_DOCUMENTS, default_tree
from .models import (
    DEFAULT_TEMPLATE_KEY,
    KEY_PATTERN,
    Document,
    DocumentKind,
    DocumentStatus,
    compute_checksum,
    template_key,
)
from .store import DocumentStore
from .themes import ThemeService
from .validation import DEFAULT_MAX_TREE_DEPTH, DEFAULT_MAX_TREE_SIZE, validate_tree

logger = get_logger(__name__)

_KEY_RE = re.compile(KEY_PATTERN)


def _kind(kind: Any) -> DocumentKind:
    try:
        return DocumentKind(kind)
    except ValueError:
        raise ValidationError("Invalid document kind", [Issue("kind", f"unknown kind {kind!r}")]) from None


def _status(status: Any) -> DocumentStatus:
    try:
        return DocumentStatus(status)
    except ValueError:
        raise ValidationError("Invalid status", [Issue("status", f"unknown status {status!r}")]) from None


def _check_key(key: Any) -> str:
    if not isinstance(key, str) or not _KEY_RE.match(key):
        raise ValidationError("Invalid document key", [Issue("key", "must match [A-Za-z0-9_:./-]{1,128}")])
    return key


class DocumentService:
    """
    Draft/publish lifecycle over a DocumentStore.

    Every operation is scoped to one store id. Reads of another store's row
    raise CrossTenantError.
    """

    def __init__(
        self,
        store: DocumentStore,
        components: ComponentRegistry | None = None,
        action_ids: Collection[str] | None = None,
        themes: ThemeService | None = None,
        max_tree_size: int = DEFAULT_MAX_TREE_SIZE,
        max_tree_depth: int = DEFAULT_MAX_TREE_DEPTH,
        metrics: Any = None,
    ) -> None:
        self.store = store
        self.components = components
        self.action_ids = action_ids
        self.themes = themes or ThemeService(store)
        self.max_tree_size = max_tree_size
        self.max_tree_depth = max_tree_depth
        self.metrics = metrics

    def _validate(self, tree: Any, kind: DocumentKind, key: str) -> None:
        validate_tree(
            tree,
            kind,
            key,
            components=self.components,
            action_ids=self.action_ids,
            max_size=self.max_tree_size,
            max_depth=self.max_tree_depth,
        )

    def _validate_meta(self, meta: Any) -> None:
        if meta is None:
            return
        if not isinstance(meta, dict):
            raise ValidationError("Invalid meta", [Issue("meta", "must be an object")])
        try:
            validate_json_size(meta, self.max_tree_size, "meta")
        except JSONParseError as e:
            raise ValidationError("Invalid meta", [Issue("meta", str(e))]) from e

    def save_draft(
        self,
        store_id: str,
        kind: DocumentKind | str,
        key: str,
        tree: Any,
        meta: dict[str, Any] | None = None,
    ) -> Document:
        """
        Validate and create-or-overwrite the DRAFT row.

        Raises:
            ValidationError: Tree breaks an invariant; nothing is written
        """
        kind = _kind(kind)
        key = _check_key(key)
        try:
            self._validate_meta(meta)
            self._validate(tree, kind, key)
        except ValidationError as e:
            logger.warning(
                "draft_rejected", store_id=store_id, kind=kind.value, key=key, issues=len(e.issues)
            )
            if self.metrics is not None:
                self.metrics.record_save(kind.value, "invalid")
            raise

        tree = copy.deepcopy(tree)
        meta = copy.deepcopy(meta)
        stored = self.store.upsert(
            Document(
                store_id=store_id,
                kind=kind,
                key=key,
                status=DocumentStatus.DRAFT,
                tree=tree,
                meta=meta,
                checksum=compute_checksum(tree, meta),
            )
        )
        logger.info("draft_saved", store_id=store_id, kind=kind.value, key=key, checksum=stored.checksum)
        if self.metrics is not None:
            self.metrics.record_save(kind.value, "success")
        return stored

    def publish(self, store_id: str, kind: DocumentKind | str, key: str) -> Document:
        """
        Copy the current DRAFT's tree and meta onto PUBLISHED in one transaction.

        Raises:
            NotFoundError: No DRAFT exists
        """
        kind = _kind(kind)
        try:
            with self.store.transaction():
                draft = self.store.get(store_id, kind, key, DocumentStatus.DRAFT)
                if draft is None:
                    raise NotFoundError("draft", f"{kind.value}:{key}")
                published = self.store.upsert(
                    Document(
                        store_id=store_id,
                        kind=kind,
                        key=key,
                        status=DocumentStatus.PUBLISHED,
                        tree=draft.tree,
                        meta=draft.meta,
                        checksum=draft.checksum,
                    )
                )
        except NotFoundError:
            if self.metrics is not None:
                self.metrics.record_publish(kind.value, "not_found")
            raise

        logger.info(
            "document_published", store_id=store_id, kind=kind.value, key=key, checksum=published.checksum
        )
        if self.metrics is not None:
            self.metrics.record_publish(kind.value, "success")
        return published

    def get_document(self, store_id: str, doc_id: str) -> Document:
        """
        Raises:
            NotFoundError: No such row
            CrossTenantError: Row belongs to another store
        """
        doc = self.store.get_by_id(doc_id)
        if doc is None:
            raise NotFoundError("document", doc_id)
        if doc.store_id != store_id:
            logger.warning("cross_tenant_access", store_id=store_id, doc_id=doc_id)
            raise CrossTenantError(store_id, doc.store_id)
        return doc

    def delete_document(self, store_id: str, doc_id: str) -> None:
        """Remove exactly one row. Deleting a DRAFT never touches PUBLISHED."""
        with self.store.transaction():
            doc = self.get_document(store_id, doc_id)
            self.store.delete(doc_id)
        logger.info(
            "document_deleted",
            store_id=store_id,
            doc_id=doc_id,
            kind=doc.kind.value,
            key=doc.key,
            status=doc.status.value,
        )

    def list_documents(
        self,
        store_id: str,
        kind: DocumentKind | str | None = None,
        status: DocumentStatus | str | None = None,
    ) -> list[Document]:
        """Documents of one store, ordered by kind, key, status."""
        return self.store.list(
            store_id,
            _kind(kind) if kind is not None else None,
            _status(status) if status is not None else None,
        )

    def get_for_editor(self, store_id: str, kind: DocumentKind | str, key: str) -> Document:
        """DRAFT row, or an unsaved default document when none exists."""
        kind = _kind(kind)
        draft = self.store.get(store_id, kind, key, DocumentStatus.DRAFT)
        if draft is not None:
            return draft
        tree = default_tree(kind, key)
        return Document(
            store_id=store_id,
            kind=kind,
            key=key,
            status=DocumentStatus.DRAFT,
            tree=tree,
            checksum=compute_checksum(tree, None),
        )

    def get_published(self, store_id: str, kind: DocumentKind | str, key: str) -> Document | None:
        return self.store.get(store_id, _kind(kind), key, DocumentStatus.PUBLISHED)

    def get_version(
        self, store_id: str, kind: DocumentKind | str, key: str, status: DocumentStatus | str
    ) -> Document | None:
        return self.store.get(store_id, _kind(kind), key, _status(status))

    def resolve_template(
        self,
        store_id: str,
        schema_id: str | None,
        status: DocumentStatus | str = DocumentStatus.PUBLISHED,
    ) -> Document | None:
        """Product template for a schema, falling back to ``PDP:default``."""
        status = _status(status)
        if schema_id:
            doc = self.store.get(store_id, DocumentKind.TEMPLATE, template_key(schema_id), status)
            if doc is not None:
                return doc
        return self.store.get(store_id, DocumentKind.TEMPLATE, DEFAULT_TEMPLATE_KEY, status)

    def create_default_documents(self, store_id: str) -> list[Document]:
        """
        Seed the default layout, pages, template, prefabs and theme.

        DRAFT and PUBLISHED rows are created together in one transaction;
        rows that already exist are left alone.
        """
        created = []
        with self.store.transaction():
            for kind, key, tree in DEFAULT_DOCUMENTS:
                self._validate(tree, kind, key)
                for status in (DocumentStatus.DRAFT, DocumentStatus.PUBLISHED):
                    if self.store.get(store_id, kind, key, status) is not None:
                        continue
                    created.append(
                        self.store.upsert(
                            Document(
                                store_id=store_id,
                                kind=kind,
                                key=key,
                                status=status,
                                tree=copy.deepcopy(tree),
                                checksum=compute_checksum(tree, None),
                            )
                        )
                    )
            self.themes.seed_default_theme(store_id)
        logger.info("default_documents_created", store_id=store_id, created=len(created))
        return created
