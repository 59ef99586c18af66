import logging
from typing import Any, Dict, Optional

from bson import ObjectId
from pymongo.database import Database

from database import VEHICLES, utcnow
from errors import NotFoundError
from guard import load_owned, parse_object_id
from schemas import Tyre, TyreCreate, TyreUpdate, changes

logger = logging.getLogger(__name__)


def _find_tyre(vehicle: Dict[str, Any], tyre_id: str) -> Optional[Dict[str, Any]]:
    for tyre in vehicle.get("tyres") or []:
        if tyre.get("_id") == tyre_id:
            return tyre
    return None


def add_tyre(db: Database, user_id: str, vehicle_id: str, payload: TyreCreate) -> Dict[str, Any]:
    vehicle = load_owned(db[VEHICLES], vehicle_id, user_id, "vehicle")
    tyre = Tyre(_id=str(ObjectId()), **payload.model_dump()).model_dump(by_alias=True, mode="json")
    db[VEHICLES].update_one(
        {"_id": vehicle["_id"]},
        {"$push": {"tyres": tyre}, "$set": {"updatedAt": utcnow()}},
    )
    logger.info("Tyre %s fitted to vehicle %s", tyre["tyreNumber"], vehicle_id)
    return tyre


def update_tyre(
    db: Database,
    user_id: str,
    vehicle_id: str,
    tyre_id: str,
    payload: TyreUpdate,
) -> Dict[str, Any]:
    parse_object_id(tyre_id, "tyre")
    vehicle = load_owned(db[VEHICLES], vehicle_id, user_id, "vehicle")
    if _find_tyre(vehicle, tyre_id) is None:
        raise NotFoundError("Tyre not found")
    fields = {f"tyres.$.{key}": value for key, value in changes(payload).items()}
    fields["updatedAt"] = utcnow()
    result = db[VEHICLES].update_one({"_id": vehicle["_id"], "tyres._id": tyre_id}, {"$set": fields})
    if result.matched_count == 0:
        raise NotFoundError("Tyre not found")
    updated = _find_tyre(db[VEHICLES].find_one({"_id": vehicle["_id"]}), tyre_id)
    if updated is None:
        raise NotFoundError("Tyre not found")
    return updated


def remove_tyre(db: Database, user_id: str, vehicle_id: str, tyre_id: str) -> None:
    parse_object_id(tyre_id, "tyre")
    vehicle = load_owned(db[VEHICLES], vehicle_id, user_id, "vehicle")
    if _find_tyre(vehicle, tyre_id) is None:
        raise NotFoundError("Tyre not found")
    db[VEHICLES].update_one(
        {"_id": vehicle["_id"]},
        {"$pull": {"tyres": {"_id": tyre_id}}, "$set": {"updatedAt": utcnow()}},
    )
