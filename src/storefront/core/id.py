"""ID Generation.

ULID-based identifiers with type prefixes (doc_*, req_*) so that ids are
sortable by creation time and readable in logs.
"""

from typing import NewType
from ulid import ULID

DocumentID = NewType("DocumentID", str)
RequestID = NewType("RequestID", str)
NodeID = NewType("NodeID", str)


class Prefix:
    """ID prefix constants."""

    DOCUMENT = "doc"
    REQUEST = "req"
    NODE = "node"


def _generate(prefix: str) -> str:
    return f"{prefix}_{ULID()}"


def new_document_id() -> DocumentID:
    """Generate new document row ID."""
    return DocumentID(_generate(Prefix.DOCUMENT))


def new_request_id() -> RequestID:
    """Generate new request ID."""
    return RequestID(_generate(Prefix.REQUEST))


def new_node_id() -> NodeID:
    """Generate new tree node ID."""
    return NodeID(_generate(Prefix.NODE))


__all__ = [
    "DocumentID",
    "RequestID",
    "NodeID",
    "Prefix",
    "new_document_id",
    "new_request_id",
    "new_node_id",
]
