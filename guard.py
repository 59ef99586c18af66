"""Ownership guard shared by every store.

Protected operations always run in this order: the caller is already
resolved, the target is fetched (404 when absent), the stored ``userId`` is
compared with the caller (403 on mismatch), and only then is the document
handed back for reading or mutation.
"""

import logging
from typing import Any, Dict

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.collection import Collection

from errors import ForbiddenError, InvalidIdentifierError, NotFoundError

logger = logging.getLogger(__name__)


def parse_object_id(value: Any, label: str = "resource") -> ObjectId:
    # ObjectId() also accepts 12-byte strings; only the 24-hex form is canonical
    if not isinstance(value, str) or not ObjectId.is_valid(value) or len(value) != 24:
        raise InvalidIdentifierError(f"Invalid {label} ID")
    try:
        return ObjectId(value)
    except (InvalidId, TypeError) as exc:
        raise InvalidIdentifierError(f"Invalid {label} ID") from exc


def ensure_owner(document: Dict[str, Any], user_id: str, label: str = "resource") -> Dict[str, Any]:
    if document.get("userId") != user_id:
        logger.warning("Refused %s %s to user %s", label, document.get("_id"), user_id)
        raise ForbiddenError("Unauthorized")
    return document


def load_owned(collection: Collection, resource_id: str, user_id: str, label: str = "resource") -> Dict[str, Any]:
    oid = parse_object_id(resource_id, label)
    document = collection.find_one({"_id": oid})
    if not document:
        raise NotFoundError(f"{label.capitalize()} not found")
    return ensure_owner(document, user_id, label)
