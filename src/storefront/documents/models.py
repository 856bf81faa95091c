"""Document Data Models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..actions.types import ActionDescriptor
from ..core.hash import content_checksum
from ..core.id import new_document_id

KEY_PATTERN = r"^[A-Za-z0-9_:./-]{1,128}$"
NODE_ID_PATTERN = r"^[A-Za-z0-9_:.-]{1,128}$"
TEMPLATE_PREFIX = "PDP:"
DEFAULT_TEMPLATE_KEY = "PDP:default"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DocumentKind(str, Enum):
    """Kinds of composable documents"""

    LAYOUT = "LAYOUT"
    PAGE = "PAGE"
    TEMPLATE = "TEMPLATE"
    PREFAB = "PREFAB"


class DocumentStatus(str, Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"


class Node(BaseModel):
    """One tree element. Used to check structure; stored trees stay raw JSON."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., pattern=NODE_ID_PATTERN)
    type: str = Field(..., min_length=1, max_length=64)
    props: dict[str, Any] | None = None
    styles: dict[str, Any] | None = None
    bindings: dict[str, str] | None = None
    actions: dict[str, ActionDescriptor] | None = None
    children: list["Node"] | None = None


Node.model_rebuild()


class Document(BaseModel):
    """
    One row per (store_id, kind, key, status).

    ``tree`` holds the root node exactly as saved so that absent optional
    fields stay absent through save and load.
    """

    id: str = Field(default_factory=new_document_id)
    store_id: str = Field(..., min_length=1)
    kind: DocumentKind
    key: str = Field(..., pattern=KEY_PATTERN)
    status: DocumentStatus
    tree: dict[str, Any]
    meta: dict[str, Any] | None = None
    checksum: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def identity(self) -> tuple[str, DocumentKind, str, DocumentStatus]:
        return (self.store_id, self.kind, self.key, self.status)

    def to_api(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class ThemeRecord(BaseModel):
    """Theme variables for one store, one row per status."""

    id: str = Field(default_factory=new_document_id)
    store_id: str = Field(..., min_length=1)
    status: DocumentStatus
    vars: dict[str, str] = Field(default_factory=dict)
    checksum: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def to_api(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


def compute_checksum(tree: Any, meta: Any = None) -> str:
    """Content checksum over the canonical JSON of tree and meta."""
    return content_checksum({"tree": tree, "meta": meta})


def template_key(schema_id: str) -> str:
    return f"{TEMPLATE_PREFIX}{schema_id}"
