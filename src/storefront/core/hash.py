"""Content hashing for document checksums and compile-cache keys.

xxhash for speed on the hot path, SHA256 when a digest leaves the process.
"""

from typing import Any, Protocol
from enum import Enum
import hashlib

import xxhash

from .json import dumps_canonical


class Algorithm(str, Enum):
    """Supported hash algorithms."""

    XXHASH64 = "xxhash64"  # Fast, non-cryptographic (cache keys, checksums)
    SHA256 = "sha256"      # Stable external identifiers (ETags)


class Hasher(Protocol):
    """Protocol for hash implementations."""

    def digest(self, data: bytes) -> str:
        """Compute hex digest of data."""
        ...


class XXHasher:
    """Non-cryptographic hasher."""

    def digest(self, data: bytes) -> str:
        return xxhash.xxh64(data).hexdigest()


class SHA256Hasher:
    """Cryptographic hasher."""

    def digest(self, data: bytes) -> str:
        return hashlib.sha256(data).hexdigest()


_HASHERS: dict[Algorithm, Hasher] = {
    Algorithm.XXHASH64: XXHasher(),
    Algorithm.SHA256: SHA256Hasher(),
}


def create_hasher(algorithm: Algorithm = Algorithm.XXHASH64) -> Hasher:
    """
    Get hasher instance.

    Raises:
        ValueError: If the algorithm is unknown
    """
    try:
        return _HASHERS[Algorithm(algorithm)]
    except ValueError as e:
        raise ValueError(f"Unknown algorithm: {algorithm}") from e


def hash_bytes(
    data: bytes,
    algorithm: Algorithm = Algorithm.XXHASH64,
    truncate: int | None = None
) -> str:
    """
    Hash bytes to hex digest.

    Args:
        data: Bytes to hash
        algorithm: Hash algorithm
        truncate: Optional length to truncate digest

    Returns:
        Hex digest string
    """
    digest = create_hasher(algorithm).digest(data)
    return digest[:truncate] if truncate else digest


def hash_string(
    text: str,
    algorithm: Algorithm = Algorithm.XXHASH64,
    truncate: int | None = None
) -> str:
    """Hash string to hex digest."""
    return hash_bytes(text.encode("utf-8"), algorithm, truncate)


def content_checksum(obj: Any, algorithm: Algorithm = Algorithm.XXHASH64) -> str:
    """Checksum of the canonical JSON encoding of obj (key order independent)."""
    return hash_bytes(dumps_canonical(obj), algorithm)


__all__ = [
    "Algorithm",
    "Hasher",
    "create_hasher",
    "hash_string",
    "hash_bytes",
    "content_checksum",
]
