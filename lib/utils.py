# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common helpers for turning request values into MongoDB queries and
# MongoDB documents/results into JSON-ready dicts.
# =============================================================================

import re
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.results import DeleteResult, InsertOneResult, UpdateResult

from app.exceptions import InvalidObjectIdError


# =============================================================================
# ObjectId Utilities
# =============================================================================

def to_object_id(value: str | ObjectId) -> ObjectId:
    """
    Normalize an id to ObjectId.

    Args:
        value: 24-hex string or ObjectId

    Returns:
        ObjectId

    Raises:
        InvalidObjectIdError: If the string is not a valid ObjectId

    Example:
        loan_id = to_object_id("6563b5f4e1a2c3d4e5f60718")
    """
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise InvalidObjectIdError(str(value))


def serialize_document(document: dict[str, Any] | None) -> dict[str, Any] | None:
    """
    Make a stored document JSON-friendly.

    ObjectIds (including nested ones) become strings; datetimes are left
    for FastAPI's encoder.
    """
    if document is None:
        return None
    return {key: _serialize_value(value) for key, value in document.items()}


def serialize_documents(documents: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Serialize a list of stored documents."""
    return [serialize_document(doc) for doc in documents]


def _serialize_value(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {key: _serialize_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_serialize_value(item) for item in value]
    return value


# =============================================================================
# Query Helpers
# =============================================================================

def text_search_filter(term: str | None, fields: list[str]) -> dict[str, Any]:
    """
    Build a case-insensitive substring match over several text fields.

    The term is escaped, so user input never acts as a regex.
    Returns an empty filter for a blank term.

    Example:
        text_search_filter("home", ["title", "category"])
        # {"$or": [{"title": {"$regex": "home", "$options": "i"}}, ...]}
    """
    if not term or not term.strip():
        return {}
    pattern = re.escape(term.strip())
    return {
        "$or": [
            {field: {"$regex": pattern, "$options": "i"}}
            for field in fields
        ]
    }


# =============================================================================
# Write Result Shapes
# =============================================================================
# Clients consume the driver acknowledgement shape directly.

def insert_result(result: InsertOneResult) -> dict[str, Any]:
    return {
        "acknowledged": result.acknowledged,
        "insertedId": str(result.inserted_id),
    }


def update_result(result: UpdateResult) -> dict[str, Any]:
    return {
        "acknowledged": result.acknowledged,
        "matchedCount": result.matched_count,
        "modifiedCount": result.modified_count,
    }


def delete_result(result: DeleteResult) -> dict[str, Any]:
    return {
        "acknowledged": result.acknowledged,
        "deletedCount": result.deleted_count,
    }
