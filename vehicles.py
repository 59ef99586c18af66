import logging
from typing import Any, Dict, List

from pymongo.database import Database

from database import REPAIRS, VEHICLES, create_document, get_documents, serialize, utcnow
from guard import load_owned
from schemas import Vehicle, VehicleCreate, VehicleUpdate, changes

logger = logging.getLogger(__name__)


def create_vehicle(db: Database, user_id: str, payload: VehicleCreate) -> str:
    vehicle = Vehicle(userId=user_id, **payload.model_dump())
    # no driver key until one is assigned
    doc = vehicle.model_dump(by_alias=True, mode="json", exclude={"driver"})
    vehicle_id = create_document(db, VEHICLES, doc)
    logger.info("Vehicle %s created by %s", vehicle_id, user_id)
    return vehicle_id


def list_vehicles(db: Database, user_id: str) -> List[Dict[str, Any]]:
    return [serialize(doc) for doc in get_documents(db, VEHICLES, {"userId": user_id})]


def get_vehicle(db: Database, user_id: str, vehicle_id: str) -> Dict[str, Any]:
    return serialize(load_owned(db[VEHICLES], vehicle_id, user_id, "vehicle"))


def update_vehicle(db: Database, user_id: str, vehicle_id: str, payload: VehicleUpdate) -> Dict[str, Any]:
    vehicle = load_owned(db[VEHICLES], vehicle_id, user_id, "vehicle")
    fields = changes(payload)
    fields["updatedAt"] = utcnow()
    db[VEHICLES].update_one({"_id": vehicle["_id"]}, {"$set": fields})
    return serialize(db[VEHICLES].find_one({"_id": vehicle["_id"]}))


def delete_vehicle(db: Database, user_id: str, vehicle_id: str) -> int:
    """Delete a vehicle and every repair recorded against it.

    Returns the number of repairs removed.
    """
    vehicle = load_owned(db[VEHICLES], vehicle_id, user_id, "vehicle")
    db[VEHICLES].delete_one({"_id": vehicle["_id"]})
    removed = db[REPAIRS].delete_many({"vehicleId": str(vehicle["_id"])}).deleted_count
    logger.info("Vehicle %s deleted by %s with %d repairs", vehicle_id, user_id, removed)
    return removed
