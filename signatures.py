import logging
from typing import Any, Dict, Optional

from pymongo.database import Database

from database import SIGNATURES, serialize, utcnow
from guard import load_owned
from schemas import Signature, SignatureSave
from uploads import ImageHost

logger = logging.getLogger(__name__)


def save_signature(db: Database, user_id: str, payload: SignatureSave) -> str:
    """Create the caller's signature, or update it in place if one exists."""
    signature = Signature(userId=user_id, **payload.model_dump()).model_dump()
    now = utcnow()
    result = db[SIGNATURES].update_one(
        {"userId": user_id},
        {"$set": {**signature, "updatedAt": now}, "$setOnInsert": {"createdAt": now}},
        upsert=True,
    )
    if result.upserted_id is not None:
        logger.info("Signature %s created for %s", result.upserted_id, user_id)
        return str(result.upserted_id)
    return str(db[SIGNATURES].find_one({"userId": user_id}, {"_id": 1})["_id"])


def get_signature(db: Database, user_id: str) -> Optional[Dict[str, Any]]:
    return serialize(db[SIGNATURES].find_one({"userId": user_id}))


def update_signature(db: Database, user_id: str, signature_id: str, payload: SignatureSave) -> Dict[str, Any]:
    signature = load_owned(db[SIGNATURES], signature_id, user_id, "signature")
    db[SIGNATURES].update_one(
        {"_id": signature["_id"]},
        {"$set": {**payload.model_dump(), "updatedAt": utcnow()}},
    )
    return serialize(db[SIGNATURES].find_one({"_id": signature["_id"]}))


def delete_signature(db: Database, user_id: str, signature_id: str, images: ImageHost) -> None:
    signature = load_owned(db[SIGNATURES], signature_id, user_id, "signature")
    if signature.get("signatureUrl"):
        images.destroy(signature["signatureUrl"])
    db[SIGNATURES].delete_one({"_id": signature["_id"]})
    logger.info("Signature %s deleted by %s", signature_id, user_id)
