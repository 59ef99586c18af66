"""
Database Helpers

MongoDB connection and small helpers shared by the stores.
The client is created once at import and pooled by pymongo.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

from errors import UpstreamError
from settings import settings

logger = logging.getLogger(__name__)

VEHICLES = "vehicles"
REPAIRS = "repairs"
SIGNATURES = "signatures"

_client: Optional[MongoClient] = None
db: Optional[Database] = None

if settings.database_url:
    _client = MongoClient(settings.database_url)
    db = _client[settings.database_name]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_db() -> Database:
    """FastAPI dependency yielding the configured database."""
    if db is None:
        raise UpstreamError("Database not configured")
    return db


def ensure_indexes(database: Database) -> None:
    database[VEHICLES].create_index([("userId", ASCENDING)])
    database[REPAIRS].create_index([("vehicleId", ASCENDING)])
    database[REPAIRS].create_index([("userId", ASCENDING)])
    database[SIGNATURES].create_index([("userId", ASCENDING)], unique=True)
    logger.info("Indexes ensured on %s", database.name)


def create_document(database: Database, collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    """Insert a document stamped with createdAt/updatedAt; returns the new id."""
    if isinstance(data, BaseModel):
        doc = data.model_dump(by_alias=True, mode="json")
    else:
        doc = dict(data)
    now = utcnow()
    doc["createdAt"] = now
    doc["updatedAt"] = now
    result = database[collection_name].insert_one(doc)
    return str(result.inserted_id)


def get_documents(
    database: Database,
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
) -> List[Dict[str, Any]]:
    return list(database[collection_name].find(filter_dict or {}).sort("createdAt", -1))


def serialize(doc: Optional[Dict[str, Any]]):
    if not doc:
        return doc
    doc = dict(doc)
    doc["_id"] = str(doc.get("_id"))
    return doc
