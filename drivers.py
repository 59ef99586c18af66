"""Driver and issued-item operations.

The driver lives inside its vehicle document and items live in
``driver.itemsGiven``. Single items are addressed by ``(vehicleId, itemId)``
and changed with the positional operator so other items in the same list
are never rewritten.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo.database import Database

from database import VEHICLES, serialize, utcnow
from errors import NoDriverAssignedError, NotFoundError
from guard import load_owned, parse_object_id
from schemas import (
    DEFAULT_DRIVER_ITEMS,
    Driver,
    DriverAssign,
    DriverItem,
    DriverItemCreate,
    DriverItemUpdate,
    DriverProfile,
    changes,
)

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "name",
    "phoneNumber",
    "aadharNumber",
    "panNumber",
    "licenseNumber",
    "aadharImage",
    "panCardImage",
    "licenseImage",
)


def new_item(data: DriverItemCreate) -> Dict[str, Any]:
    item = DriverItem(_id=str(ObjectId()), **data.model_dump())
    return item.model_dump(by_alias=True, mode="json")


def default_items(given_date: date) -> List[Dict[str, Any]]:
    return [
        new_item(DriverItemCreate(itemName=name, quantity=0, givenDate=given_date))
        for name in DEFAULT_DRIVER_ITEMS
    ]


def _build_driver(profile: DriverProfile, items: List[Dict[str, Any]]) -> Dict[str, Any]:
    data = {field: getattr(profile, field) for field in PROFILE_FIELDS}
    driver = Driver(**data).model_dump(by_alias=True, mode="json")
    # stored items are carried over as-is
    driver["itemsGiven"] = items
    return driver


def _load_driver(db: Database, user_id: str, vehicle_id: str) -> Dict[str, Any]:
    vehicle = load_owned(db[VEHICLES], vehicle_id, user_id, "vehicle")
    if not vehicle.get("driver"):
        raise NoDriverAssignedError("No driver assigned to this vehicle")
    return vehicle


def _find_item(vehicle: Dict[str, Any], item_id: str) -> Optional[Dict[str, Any]]:
    for item in vehicle["driver"].get("itemsGiven") or []:
        if item.get("_id") == item_id:
            return item
    return None


def assign_driver(db: Database, user_id: str, vehicle_id: str, payload: DriverAssign) -> Dict[str, Any]:
    """Set the vehicle's driver, replacing any previous one."""
    vehicle = load_owned(db[VEHICLES], vehicle_id, user_id, "vehicle")
    if payload.itemsGiven is not None:
        items = [new_item(item) for item in payload.itemsGiven]
    elif payload.withDefaultItems:
        items = default_items(utcnow().date())
    else:
        items = []
    driver = _build_driver(payload, items)
    db[VEHICLES].update_one(
        {"_id": vehicle["_id"]},
        {"$set": {"driver": driver, "updatedAt": utcnow()}},
    )
    logger.info("Driver assigned to vehicle %s", vehicle_id)
    return driver


def update_driver(db: Database, user_id: str, vehicle_id: str, payload: DriverProfile) -> Dict[str, Any]:
    """Replace driver profile fields; the item list is kept unless supplied."""
    vehicle = _load_driver(db, user_id, vehicle_id)
    if payload.itemsGiven is not None:
        items = [new_item(item) for item in payload.itemsGiven]
    else:
        items = vehicle["driver"].get("itemsGiven") or []
    driver = _build_driver(payload, items)
    db[VEHICLES].update_one(
        {"_id": vehicle["_id"]},
        {"$set": {"driver": driver, "updatedAt": utcnow()}},
    )
    return driver


def remove_driver(db: Database, user_id: str, vehicle_id: str) -> None:
    vehicle = load_owned(db[VEHICLES], vehicle_id, user_id, "vehicle")
    db[VEHICLES].update_one(
        {"_id": vehicle["_id"]},
        {"$unset": {"driver": ""}, "$set": {"updatedAt": utcnow()}},
    )
    logger.info("Driver removed from vehicle %s", vehicle_id)


def add_driver_item(db: Database, user_id: str, vehicle_id: str, payload: DriverItemCreate) -> Dict[str, Any]:
    vehicle = _load_driver(db, user_id, vehicle_id)
    item = new_item(payload)
    db[VEHICLES].update_one(
        {"_id": vehicle["_id"]},
        {"$push": {"driver.itemsGiven": item}, "$set": {"updatedAt": utcnow()}},
    )
    return item


def update_driver_item(
    db: Database,
    user_id: str,
    vehicle_id: str,
    item_id: str,
    payload: DriverItemUpdate,
) -> Dict[str, Any]:
    parse_object_id(item_id, "item")
    vehicle = _load_driver(db, user_id, vehicle_id)
    if _find_item(vehicle, item_id) is None:
        raise NotFoundError("Item not found")
    fields = {f"driver.itemsGiven.$.{key}": value for key, value in changes(payload).items()}
    fields["updatedAt"] = utcnow()
    result = db[VEHICLES].update_one(
        {"_id": vehicle["_id"], "driver.itemsGiven._id": item_id},
        {"$set": fields},
    )
    if result.matched_count == 0:
        raise NotFoundError("Item not found")
    updated = _find_item(db[VEHICLES].find_one({"_id": vehicle["_id"]}), item_id)
    if updated is None:
        raise NotFoundError("Item not found")
    return updated


def remove_driver_item(db: Database, user_id: str, vehicle_id: str, item_id: str) -> None:
    parse_object_id(item_id, "item")
    vehicle = _load_driver(db, user_id, vehicle_id)
    if _find_item(vehicle, item_id) is None:
        raise NotFoundError("Item not found")
    db[VEHICLES].update_one(
        {"_id": vehicle["_id"]},
        {"$pull": {"driver.itemsGiven": {"_id": item_id}}, "$set": {"updatedAt": utcnow()}},
    )


def get_driver(db: Database, user_id: str, vehicle_id: str) -> Optional[Dict[str, Any]]:
    vehicle = serialize(load_owned(db[VEHICLES], vehicle_id, user_id, "vehicle"))
    return vehicle.get("driver")
