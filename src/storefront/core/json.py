"""Fast, deterministic JSON encoding for document storage and checksums."""

from typing import Any

import msgspec
import orjson


class JSONParseError(Exception):
    """JSON parsing or limit check failed."""

    def __init__(self, message: str, original: Exception | None = None) -> None:
        super().__init__(message)
        self.original = original


_decoder = msgspec.json.Decoder()


def dumps_canonical(obj: Any) -> bytes:
    """
    Encode with sorted keys and no whitespace.

    Two structurally equal objects always encode to the same bytes, which is
    what document checksums and publish idempotence rely on.

    Raises:
        JSONParseError: If the object is not JSON-serialisable
    """
    try:
        return orjson.dumps(obj, option=orjson.OPT_SORT_KEYS)
    except TypeError as e:
        raise JSONParseError(f"Value is not JSON-serialisable: {e}", e) from e


def loads(data: str | bytes) -> Any:
    """
    Decode JSON text.

    Raises:
        JSONParseError: If the payload is not valid JSON
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    try:
        return _decoder.decode(data)
    except msgspec.DecodeError as e:
        raise JSONParseError(f"Invalid JSON: {e}", e) from e


def validate_json_size(obj: Any, max_size: int, name: str = "JSON") -> int:
    """
    Validate encoded size to keep stored documents bounded.

    Returns:
        Encoded size in bytes

    Raises:
        JSONParseError: If size exceeds limit
    """
    size = len(dumps_canonical(obj))
    if size > max_size:
        raise JSONParseError(f"{name} size {size} bytes exceeds maximum {max_size} bytes")
    return size


def validate_json_depth(obj: Any, max_depth: int = 64, current_depth: int = 0) -> None:
    """
    Validate nesting depth to prevent unbounded recursion during rendering.

    Raises:
        JSONParseError: If depth exceeds limit
    """
    if current_depth > max_depth:
        raise JSONParseError(f"JSON nesting depth {current_depth} exceeds maximum {max_depth}")

    if isinstance(obj, dict):
        for value in obj.values():
            validate_json_depth(value, max_depth, current_depth + 1)
    elif isinstance(obj, list):
        for item in obj:
            validate_json_depth(item, max_depth, current_depth + 1)


__all__ = [
    "JSONParseError",
    "dumps_canonical",
    "loads",
    "validate_json_size",
    "validate_json_depth",
]
