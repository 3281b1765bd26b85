"""Utility functions for collection store operations."""

import re
import time
import uuid
from typing import Any

from .constants import COLLECTION_NAME_PATTERN, COLLECTION_SUFFIX, RESERVED_FIELDS
from .exceptions import InvalidRequestError

_MISSING = object()


def now_seconds() -> int:
    """Current Unix time in whole seconds."""
    return int(time.time())


def new_document_id() -> str:
    """Generate a document id."""
    return str(uuid.uuid4())


def strict_equals(left: Any, right: Any) -> bool:
    """Equality on decoded JSON values where booleans never equal numbers."""
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    return left == right


def matches_where(doc: dict, where: dict | None) -> bool:
    """Check if every key in the where-clause equals the document's field.

    A field missing from the document never matches, not even ``None``.
    An empty or absent clause matches every document.
    """
    if not where:
        return True
    for key, value in where.items():
        field = doc.get(key, _MISSING)
        if field is _MISSING or not strict_equals(field, value):
            return False
    return True


def strip_reserved(patch: dict) -> dict:
    """Drop store-managed fields from an update patch."""
    return {k: v for k, v in patch.items() if k not in RESERVED_FIELDS}


def collection_file_name(collection: str) -> str:
    """Generate file name for a collection."""
    return f"{collection}{COLLECTION_SUFFIX}"


def validate_collection(collection: Any) -> str:
    """Validate collection name. Raises InvalidRequestError if invalid."""
    if not isinstance(collection, str) or not re.match(COLLECTION_NAME_PATTERN, collection):
        raise InvalidRequestError(
            f"Invalid collection name {collection!r}, must be alphanumeric, hyphens, or underscores"
        )
    return collection
