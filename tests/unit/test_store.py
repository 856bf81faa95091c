"""Tests for the in-memory and SQLite document stores."""

import pytest

from storefront.documents import (
    Document,
    DocumentKind,
    DocumentStatus,
    InMemoryDocumentStore,
    SQLiteDocumentStore,
    ThemeRecord,
    compute_checksum,
    create_store,
)


def make_doc(store_id="store_1", kind=DocumentKind.PAGE, key="HOME", status=DocumentStatus.DRAFT, tree=None, meta=None):
    tree = tree if tree is not None else {"id": "root", "type": "Container"}
    return Document(
        store_id=store_id,
        kind=kind,
        key=key,
        status=status,
        tree=tree,
        meta=meta,
        checksum=compute_checksum(tree, meta),
    )


@pytest.mark.unit
class TestDocumentStore:
    def test_upsert_and_get(self, store):
        stored = store.upsert(make_doc())
        fetched = store.get("store_1", DocumentKind.PAGE, "HOME", DocumentStatus.DRAFT)

        assert fetched.id == stored.id
        assert fetched.tree == {"id": "root", "type": "Container"}
        assert fetched.checksum == stored.checksum
        assert store.get_by_id(stored.id).key == "HOME"

    def test_missing(self, store):
        assert store.get("store_1", DocumentKind.PAGE, "HOME", DocumentStatus.DRAFT) is None
        assert store.get_by_id("doc_missing") is None

    def test_upsert_overwrites_same_identity(self, store):
        first = store.upsert(make_doc())
        second = store.upsert(make_doc(tree={"id": "root", "type": "Section"}))

        assert second.id == first.id
        assert second.created_at == first.created_at
        assert second.updated_at >= first.updated_at
        assert second.tree["type"] == "Section"
        assert len(store.list("store_1")) == 1

    def test_status_rows_are_independent(self, store):
        store.upsert(make_doc(status=DocumentStatus.DRAFT))
        store.upsert(make_doc(status=DocumentStatus.PUBLISHED, tree={"id": "root", "type": "Section"}))

        draft = store.get("store_1", DocumentKind.PAGE, "HOME", DocumentStatus.DRAFT)
        published = store.get("store_1", DocumentKind.PAGE, "HOME", DocumentStatus.PUBLISHED)
        assert draft.id != published.id
        assert draft.tree["type"] == "Container"

    def test_tree_round_trip_keeps_absent_fields_absent(self, store):
        tree = {
            "id": "root",
            "type": "Container",
            "props": {"ratio": 1.5, "count": 3, "flag": False, "none": None},
            "children": [{"id": "t", "type": "Text"}],
        }
        store.upsert(make_doc(tree=tree, meta={"title": "Home"}))

        fetched = store.get("store_1", DocumentKind.PAGE, "HOME", DocumentStatus.DRAFT)
        assert fetched.tree == tree
        assert "styles" not in fetched.tree["children"][0]
        assert fetched.meta == {"title": "Home"}

    def test_returned_documents_are_copies(self, store):
        stored = store.upsert(make_doc())
        stored.tree["type"] = "Mutated"

        fetched = store.get("store_1", DocumentKind.PAGE, "HOME", DocumentStatus.DRAFT)
        fetched.tree["type"] = "Mutated again"

        assert store.get_by_id(stored.id).tree["type"] == "Container"

    def test_list_filters_and_order(self, store):
        store.upsert(make_doc(key="HOME", status=DocumentStatus.PUBLISHED))
        store.upsert(make_doc(key="HOME"))
        store.upsert(make_doc(kind=DocumentKind.LAYOUT, key="GLOBAL_LAYOUT"))
        store.upsert(make_doc(key="CART"))
        store.upsert(make_doc(store_id="store_2"))

        identities = [(d.kind.value, d.key, d.status.value) for d in store.list("store_1")]
        assert identities == [
            ("LAYOUT", "GLOBAL_LAYOUT", "DRAFT"),
            ("PAGE", "CART", "DRAFT"),
            ("PAGE", "HOME", "DRAFT"),
            ("PAGE", "HOME", "PUBLISHED"),
        ]
        assert len(store.list("store_1", kind=DocumentKind.PAGE)) == 3
        assert len(store.list("store_1", status=DocumentStatus.PUBLISHED)) == 1
        assert len(store.list("store_2")) == 1

    def test_delete(self, store):
        draft = store.upsert(make_doc())
        store.upsert(make_doc(status=DocumentStatus.PUBLISHED))

        assert store.delete(draft.id) is True
        assert store.delete(draft.id) is False
        assert store.get("store_1", DocumentKind.PAGE, "HOME", DocumentStatus.DRAFT) is None
        assert store.get("store_1", DocumentKind.PAGE, "HOME", DocumentStatus.PUBLISHED) is not None

    def test_transaction_rolls_back(self, store):
        store.upsert(make_doc(key="KEEP"))

        with pytest.raises(RuntimeError):
            with store.transaction():
                store.upsert(make_doc(key="LOST"))
                store.upsert(make_doc(key="KEEP", tree={"id": "root", "type": "Section"}))
                raise RuntimeError("boom")

        assert store.get("store_1", DocumentKind.PAGE, "LOST", DocumentStatus.DRAFT) is None
        kept = store.get("store_1", DocumentKind.PAGE, "KEEP", DocumentStatus.DRAFT)
        assert kept.tree["type"] == "Container"

    def test_nested_transactions_commit_together(self, store):
        with store.transaction():
            store.upsert(make_doc(key="A"))
            with store.transaction():
                store.upsert(make_doc(key="B"))

        assert len(store.list("store_1")) == 2

    def test_themes(self, store):
        assert store.get_theme("store_1", DocumentStatus.DRAFT) is None

        first = store.upsert_theme(ThemeRecord(store_id="store_1", status=DocumentStatus.DRAFT, vars={"primary": "#000000"}))
        second = store.upsert_theme(ThemeRecord(store_id="store_1", status=DocumentStatus.DRAFT, vars={"primary": "#111111"}))

        assert second.id == first.id
        assert store.get_theme("store_1", DocumentStatus.DRAFT).vars == {"primary": "#111111"}
        assert store.get_theme("store_1", DocumentStatus.PUBLISHED) is None

    def test_theme_rolls_back_with_documents(self, store):
        with pytest.raises(RuntimeError):
            with store.transaction():
                store.upsert(make_doc())
                store.upsert_theme(ThemeRecord(store_id="store_1", status=DocumentStatus.DRAFT))
                raise RuntimeError("boom")

        assert store.list("store_1") == []
        assert store.get_theme("store_1", DocumentStatus.DRAFT) is None


@pytest.mark.unit
def test_sqlite_persists_across_connections(tmp_path):
    path = tmp_path / "nested" / "documents.db"
    first = SQLiteDocumentStore(path)
    stored = first.upsert(make_doc())
    first.close()

    second = SQLiteDocumentStore(path)
    try:
        assert second.get_by_id(stored.id).tree == stored.tree
    finally:
        second.close()


@pytest.mark.unit
def test_create_store(tmp_path):
    assert isinstance(create_store(""), InMemoryDocumentStore)

    sqlite = create_store(str(tmp_path / "documents.db"))
    try:
        assert isinstance(sqlite, SQLiteDocumentStore)
    finally:
        sqlite.close()
