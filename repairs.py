import logging
from typing import Any, Dict, List, Optional

from pymongo.database import Database

from database import REPAIRS, VEHICLES, create_document, get_documents, serialize, utcnow
from guard import load_owned
from schemas import Repair, RepairCreate, RepairUpdate, changes

logger = logging.getLogger(__name__)


def create_repair(db: Database, user_id: str, payload: RepairCreate) -> str:
    """Record a repair against a vehicle the caller owns."""
    vehicle = load_owned(db[VEHICLES], payload.vehicleId, user_id, "vehicle")
    data = payload.model_dump()
    data["vehicleId"] = str(vehicle["_id"])
    repair = Repair(userId=user_id, **data)
    repair_id = create_document(db, REPAIRS, repair)
    logger.info("Repair %s recorded on vehicle %s", repair_id, repair.vehicleId)
    return repair_id


def list_repairs(db: Database, user_id: str, vehicle_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """The caller's repairs, optionally narrowed to one of their vehicles."""
    if vehicle_id is not None:
        vehicle = load_owned(db[VEHICLES], vehicle_id, user_id, "vehicle")
        query = {"vehicleId": str(vehicle["_id"]), "userId": user_id}
    else:
        query = {"userId": user_id}
    return [serialize(doc) for doc in get_documents(db, REPAIRS, query)]


def get_repair(db: Database, user_id: str, repair_id: str) -> Dict[str, Any]:
    return serialize(load_owned(db[REPAIRS], repair_id, user_id, "repair"))


def update_repair(db: Database, user_id: str, repair_id: str, payload: RepairUpdate) -> Dict[str, Any]:
    repair = load_owned(db[REPAIRS], repair_id, user_id, "repair")
    fields = changes(payload)
    if "vehicleId" in fields and fields["vehicleId"] != repair.get("vehicleId"):
        target = load_owned(db[VEHICLES], fields["vehicleId"], user_id, "vehicle")
        fields["vehicleId"] = str(target["_id"])
    fields["updatedAt"] = utcnow()
    db[REPAIRS].update_one({"_id": repair["_id"]}, {"$set": fields})
    return serialize(db[REPAIRS].find_one({"_id": repair["_id"]}))


def delete_repair(db: Database, user_id: str, repair_id: str) -> None:
    repair = load_owned(db[REPAIRS], repair_id, user_id, "repair")
    db[REPAIRS].delete_one({"_id": repair["_id"]})
    logger.info("Repair %s deleted by %s", repair_id, user_id)
