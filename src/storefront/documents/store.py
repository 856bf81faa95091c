"""
Document Stores
Keyed persistence for documents and themes, with an atomic transaction scope
"""

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from threading import RLock
from typing import Any, Iterator, Protocol

from ..core.json import dumps_canonical, loads
from ..core.logging_config import get_logger
from .models import Document, DocumentKind, DocumentStatus, ThemeRecord, utcnow

logger = get_logger(__name__)


class DocumentStore(Protocol):
    """Persistence collaborator for documents and themes."""

    def get(
        self, store_id: str, kind: DocumentKind, key: str, status: DocumentStatus
    ) -> Document | None:
        ...

    def get_by_id(self, doc_id: str) -> Document | None:
        ...

    def list(
        self,
        store_id: str,
        kind: DocumentKind | None = None,
        status: DocumentStatus | None = None,
    ) -> list[Document]:
        ...

    def upsert(self, doc: Document) -> Document:
        ...

    def delete(self, doc_id: str) -> bool:
        ...

    def get_theme(self, store_id: str, status: DocumentStatus) -> ThemeRecord | None:
        ...

    def upsert_theme(self, record: ThemeRecord) -> ThemeRecord:
        ...

    def transaction(self) -> Any:
        """Context manager: everything inside commits together or not at all."""
        ...


def _sort_key(doc: Document) -> tuple[str, str, str]:
    return (doc.kind.value, doc.key, doc.status.value)


class InMemoryDocumentStore:
    """
    Reference in-memory store.

    A single RLock serialises every operation. ``transaction()`` holds it for
    the whole block and restores the pre-transaction rows on failure.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._rows: dict[str, Document] = {}
        self._index: dict[tuple, str] = {}
        self._themes: dict[tuple[str, DocumentStatus], ThemeRecord] = {}
        self._depth = 0

    @contextmanager
    def transaction(self) -> Iterator["InMemoryDocumentStore"]:
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                return

            snapshot = (dict(self._rows), dict(self._index), dict(self._themes))
            self._depth = 1
            try:
                yield self
            except BaseException:
                self._rows, self._index, self._themes = snapshot
                logger.warning("transaction_rolled_back", store="memory")
                raise
            finally:
                self._depth = 0

    def get(
        self, store_id: str, kind: DocumentKind, key: str, status: DocumentStatus
    ) -> Document | None:
        with self._lock:
            doc_id = self._index.get((store_id, DocumentKind(kind), key, DocumentStatus(status)))
            return self._rows[doc_id].model_copy(deep=True) if doc_id else None

    def get_by_id(self, doc_id: str) -> Document | None:
        with self._lock:
            doc = self._rows.get(doc_id)
            return doc.model_copy(deep=True) if doc else None

    def list(
        self,
        store_id: str,
        kind: DocumentKind | None = None,
        status: DocumentStatus | None = None,
    ) -> list[Document]:
        with self._lock:
            docs = [
                doc.model_copy(deep=True)
                for doc in self._rows.values()
                if doc.store_id == store_id
                and (kind is None or doc.kind == kind)
                and (status is None or doc.status == status)
            ]
        return sorted(docs, key=_sort_key)

    def upsert(self, doc: Document) -> Document:
        with self._lock:
            existing_id = self._index.get(doc.identity)
            update: dict[str, Any] = {"updated_at": utcnow()}
            if existing_id is not None:
                existing = self._rows[existing_id]
                update.update(id=existing.id, created_at=existing.created_at)
            stored = doc.model_copy(update=update, deep=True)
            self._rows[stored.id] = stored
            self._index[stored.identity] = stored.id
            return stored.model_copy(deep=True)

    def delete(self, doc_id: str) -> bool:
        with self._lock:
            doc = self._rows.pop(doc_id, None)
            if doc is None:
                return False
            self._index.pop(doc.identity, None)
            return True

    def get_theme(self, store_id: str, status: DocumentStatus) -> ThemeRecord | None:
        with self._lock:
            record = self._themes.get((store_id, DocumentStatus(status)))
            return record.model_copy(deep=True) if record else None

    def upsert_theme(self, record: ThemeRecord) -> ThemeRecord:
        with self._lock:
            key = (record.store_id, record.status)
            update: dict[str, Any] = {"updated_at": utcnow()}
            existing = self._themes.get(key)
            if existing is not None:
                update.update(id=existing.id, created_at=existing.created_at)
            stored = record.model_copy(update=update, deep=True)
            self._themes[key] = stored
            return stored.model_copy(deep=True)


def _dump(value: Any) -> str | None:
    return None if value is None else dumps_canonical(value).decode()


class SQLiteDocumentStore:
    """
    Reference SQLite store.

    One connection guarded by an RLock; ``transaction()`` runs the block
    under ``BEGIN IMMEDIATE`` and commits or rolls back as a unit.
    """

    def __init__(self, path: str | Path = ":memory:") -> None:
        self._path = str(path)
        if self._path != ":memory:":
            Path(self._path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = RLock()
        self._conn = sqlite3.connect(self._path, timeout=30.0, isolation_level=None, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._depth = 0
        self._create_schema()

    def _create_schema(self) -> None:
        self._conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS documents (
                id TEXT PRIMARY KEY,
                store_id TEXT NOT NULL,
                kind TEXT NOT NULL,
                key TEXT NOT NULL,
                status TEXT NOT NULL,
                tree_json TEXT NOT NULL,
                meta_json TEXT,
                checksum TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                UNIQUE (store_id, kind, key, status)
            );

            CREATE TABLE IF NOT EXISTS themes (
                id TEXT PRIMARY KEY,
                store_id TEXT NOT NULL,
                status TEXT NOT NULL,
                vars_json TEXT NOT NULL,
                checksum TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                UNIQUE (store_id, status)
            );
            """
        )

    @contextmanager
    def transaction(self) -> Iterator["SQLiteDocumentStore"]:
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                return

            self._conn.execute("BEGIN IMMEDIATE")
            self._depth = 1
            try:
                yield self
            except BaseException:
                self._conn.execute("ROLLBACK")
                logger.warning("transaction_rolled_back", store="sqlite")
                raise
            else:
                self._conn.execute("COMMIT")
            finally:
                self._depth = 0

    @staticmethod
    def _row_to_document(row: sqlite3.Row) -> Document:
        return Document(
            id=row["id"],
            store_id=row["store_id"],
            kind=DocumentKind(row["kind"]),
            key=row["key"],
            status=DocumentStatus(row["status"]),
            tree=loads(row["tree_json"]),
            meta=loads(row["meta_json"]) if row["meta_json"] is not None else None,
            checksum=row["checksum"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    @staticmethod
    def _row_to_theme(row: sqlite3.Row) -> ThemeRecord:
        return ThemeRecord(
            id=row["id"],
            store_id=row["store_id"],
            status=DocumentStatus(row["status"]),
            vars=loads(row["vars_json"]),
            checksum=row["checksum"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def get(
        self, store_id: str, kind: DocumentKind, key: str, status: DocumentStatus
    ) -> Document | None:
        with self._lock:
            row = self._conn.execute(
                """
                SELECT * FROM documents
                WHERE store_id = ? AND kind = ? AND key = ? AND status = ?
                """,
                (store_id, DocumentKind(kind).value, key, DocumentStatus(status).value),
            ).fetchone()
        return self._row_to_document(row) if row else None

    def get_by_id(self, doc_id: str) -> Document | None:
        with self._lock:
            row = self._conn.execute("SELECT * FROM documents WHERE id = ?", (doc_id,)).fetchone()
        return self._row_to_document(row) if row else None

    def list(
        self,
        store_id: str,
        kind: DocumentKind | None = None,
        status: DocumentStatus | None = None,
    ) -> list[Document]:
        query = "SELECT * FROM documents WHERE store_id = ?"
        params: list[Any] = [store_id]
        if kind is not None:
            query += " AND kind = ?"
            params.append(DocumentKind(kind).value)
        if status is not None:
            query += " AND status = ?"
            params.append(DocumentStatus(status).value)
        query += " ORDER BY kind, key, status"
        with self._lock:
            rows = self._conn.execute(query, params).fetchall()
        return [self._row_to_document(row) for row in rows]

    def upsert(self, doc: Document) -> Document:
        now = utcnow().isoformat()
        with self.transaction():
            self._conn.execute(
                """
                INSERT INTO documents
                    (id, store_id, kind, key, status, tree_json, meta_json, checksum, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (store_id, kind, key, status) DO UPDATE SET
                    tree_json = excluded.tree_json,
                    meta_json = excluded.meta_json,
                    checksum = excluded.checksum,
                    updated_at = excluded.updated_at
                """,
                (
                    doc.id,
                    doc.store_id,
                    doc.kind.value,
                    doc.key,
                    doc.status.value,
                    _dump(doc.tree),
                    _dump(doc.meta),
                    doc.checksum,
                    doc.created_at.isoformat(),
                    now,
                ),
            )
            stored = self.get(doc.store_id, doc.kind, doc.key, doc.status)
        assert stored is not None
        return stored

    def delete(self, doc_id: str) -> bool:
        with self.transaction():
            cursor = self._conn.execute("DELETE FROM documents WHERE id = ?", (doc_id,))
        return cursor.rowcount > 0

    def get_theme(self, store_id: str, status: DocumentStatus) -> ThemeRecord | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT * FROM themes WHERE store_id = ? AND status = ?",
                (store_id, DocumentStatus(status).value),
            ).fetchone()
        return self._row_to_theme(row) if row else None

    def upsert_theme(self, record: ThemeRecord) -> ThemeRecord:
        now = utcnow().isoformat()
        with self.transaction():
            self._conn.execute(
                """
                INSERT INTO themes (id, store_id, status, vars_json, checksum, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (store_id, status) DO UPDATE SET
                    vars_json = excluded.vars_json,
                    checksum = excluded.checksum,
                    updated_at = excluded.updated_at
                """,
                (
                    record.id,
                    record.store_id,
                    record.status.value,
                    _dump(record.vars),
                    record.checksum,
                    record.created_at.isoformat(),
                    now,
                ),
            )
            stored = self.get_theme(record.store_id, record.status)
        assert stored is not None
        return stored

    def close(self) -> None:
        with self._lock:
            self._conn.close()


def create_store(database_path: str = "") -> DocumentStore:
    """SQLite store when a path is configured, in-memory otherwise."""
    if database_path:
        logger.info("store_init", backend="sqlite", path=database_path)
        return SQLiteDocumentStore(database_path)
    logger.info("store_init", backend="memory")
    return InMemoryDocumentStore()
