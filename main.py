import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, File, Query, Request, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.database import Database

import database
import drivers
import repairs
import signatures
import tyres
import vehicles
from auth import Caller, current_caller
from database import get_db
from errors import ConfigError, FleetError, MissingParameterError, NotFoundError
from schemas import (
    DEFAULT_DRIVER_ITEMS,
    DriverAssign,
    DriverItemCreate,
    DriverItemUpdate,
    DriverProfile,
    RepairCreate,
    RepairUpdate,
    SignatureSave,
    TyreCreate,
    TyreUpdate,
    VehicleCreate,
    VehicleUpdate,
)
from settings import Settings, get_settings, settings
from uploads import ImageHost

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.session_secret:
        raise ConfigError("SESSION_SECRET is not set")
    if database.db is not None:
        database.ensure_indexes(database.db)
    yield


app = FastAPI(title="Fleet Track API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_images(config: Settings = Depends(get_settings)) -> ImageHost:
    return ImageHost(config)


# Error translation

@app.exception_handler(FleetError)
async def fleet_error_handler(request: Request, exc: FleetError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


@app.get("/")
def read_root():
    return {"message": "Fleet Track API running"}


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if settings.database_url else "❌ Not Set",
        "database_name": settings.database_name,
        "connection_status": "Not Connected",
        "collections": [],
    }
    if database.db is None:
        return response
    response["database"] = "✅ Available"
    response["connection_status"] = "Connected"
    try:
        response["collections"] = database.db.list_collection_names()[:10]
        response["database"] = "✅ Connected & Working"
    except Exception as e:
        logger.warning("Database check failed: %s", e)
        response["database"] = f"⚠️  Connected but Error: {str(e)[:50]}"
    return response


# Session

@app.get("/auth/check")
def auth_check(caller: Caller = Depends(current_caller)):
    return {"authenticated": True, "userId": caller.user_id}


@app.post("/uploads", status_code=201)
def upload_image(
    file: UploadFile = File(...),
    caller: Caller = Depends(current_caller),
    images: ImageHost = Depends(get_images),
):
    content = file.file.read(images.settings.max_upload_bytes + 1)
    url = images.upload(file.filename or "upload", content, file.content_type)
    return {"url": url}


# Vehicles

@app.get("/vehicles")
def list_vehicles(
    id: Optional[str] = Query(None),
    caller: Caller = Depends(current_caller),
    db: Database = Depends(get_db),
):
    if id is not None:
        return vehicles.get_vehicle(db, caller.user_id, id)
    return vehicles.list_vehicles(db, caller.user_id)


@app.post("/vehicles", status_code=201)
def create_vehicle(
    payload: VehicleCreate,
    caller: Caller = Depends(current_caller),
    db: Database = Depends(get_db),
):
    return {"id": vehicles.create_vehicle(db, caller.user_id, payload)}


@app.get("/vehicles/{vehicle_id}")
def get_vehicle(vehicle_id: str, caller: Caller = Depends(current_caller), db: Database = Depends(get_db)):
    return vehicles.get_vehicle(db, caller.user_id, vehicle_id)


@app.put("/vehicles/{vehicle_id}")
def update_vehicle(
    vehicle_id: str,
    payload: VehicleUpdate,
    caller: Caller = Depends(current_caller),
    db: Database = Depends(get_db),
):
    return vehicles.update_vehicle(db, caller.user_id, vehicle_id, payload)


@app.delete("/vehicles/{vehicle_id}")
def delete_vehicle(vehicle_id: str, caller: Caller = Depends(current_caller), db: Database = Depends(get_db)):
    removed = vehicles.delete_vehicle(db, caller.user_id, vehicle_id)
    return {"success": True, "repairsDeleted": removed}


@app.get("/vehicles/{vehicle_id}/repairs")
def list_vehicle_repairs(vehicle_id: str, caller: Caller = Depends(current_caller), db: Database = Depends(get_db)):
    return repairs.list_repairs(db, caller.user_id, vehicle_id)


# Driver

@app.get("/vehicles/{vehicle_id}/driver")
def get_driver(vehicle_id: str, caller: Caller = Depends(current_caller), db: Database = Depends(get_db)):
    driver = drivers.get_driver(db, caller.user_id, vehicle_id)
    if driver is None:
        raise NotFoundError("No driver assigned to this vehicle")
    return driver


@app.put("/vehicles/{vehicle_id}/driver")
def assign_driver(
    vehicle_id: str,
    payload: DriverAssign,
    caller: Caller = Depends(current_caller),
    db: Database = Depends(get_db),
):
    return drivers.assign_driver(db, caller.user_id, vehicle_id, payload)


@app.patch("/vehicles/{vehicle_id}/driver")
def update_driver(
    vehicle_id: str,
    payload: DriverProfile,
    caller: Caller = Depends(current_caller),
    db: Database = Depends(get_db),
):
    return drivers.update_driver(db, caller.user_id, vehicle_id, payload)


@app.delete("/vehicles/{vehicle_id}/driver")
def remove_driver(vehicle_id: str, caller: Caller = Depends(current_caller), db: Database = Depends(get_db)):
    drivers.remove_driver(db, caller.user_id, vehicle_id)
    return {"success": True}


@app.get("/driver-items/defaults")
def default_driver_items():
    return {"items": list(DEFAULT_DRIVER_ITEMS)}


@app.post("/vehicles/{vehicle_id}/driver/items", status_code=201)
def add_driver_item(
    vehicle_id: str,
    payload: DriverItemCreate,
    caller: Caller = Depends(current_caller),
    db: Database = Depends(get_db),
):
    return drivers.add_driver_item(db, caller.user_id, vehicle_id, payload)


@app.put("/vehicles/{vehicle_id}/driver/items/{item_id}")
def update_driver_item(
    vehicle_id: str,
    item_id: str,
    payload: DriverItemUpdate,
    caller: Caller = Depends(current_caller),
    db: Database = Depends(get_db),
):
    return drivers.update_driver_item(db, caller.user_id, vehicle_id, item_id, payload)


@app.delete("/vehicles/{vehicle_id}/driver/items/{item_id}")
def remove_driver_item(
    vehicle_id: str,
    item_id: str,
    caller: Caller = Depends(current_caller),
    db: Database = Depends(get_db),
):
    drivers.remove_driver_item(db, caller.user_id, vehicle_id, item_id)
    return {"success": True}


# Tyres

@app.post("/vehicles/{vehicle_id}/tyres", status_code=201)
def add_tyre(
    vehicle_id: str,
    payload: TyreCreate,
    caller: Caller = Depends(current_caller),
    db: Database = Depends(get_db),
):
    return tyres.add_tyre(db, caller.user_id, vehicle_id, payload)


@app.put("/vehicles/{vehicle_id}/tyres/{tyre_id}")
def update_tyre(
    vehicle_id: str,
    tyre_id: str,
    payload: TyreUpdate,
    caller: Caller = Depends(current_caller),
    db: Database = Depends(get_db),
):
    return tyres.update_tyre(db, caller.user_id, vehicle_id, tyre_id, payload)


@app.delete("/vehicles/{vehicle_id}/tyres/{tyre_id}")
def remove_tyre(
    vehicle_id: str,
    tyre_id: str,
    caller: Caller = Depends(current_caller),
    db: Database = Depends(get_db),
):
    tyres.remove_tyre(db, caller.user_id, vehicle_id, tyre_id)
    return {"success": True}


# Repairs

@app.get("/repairs")
def list_repairs(
    vehicle_id: Optional[str] = Query(None, alias="vehicleId"),
    id: Optional[str] = Query(None),
    caller: Caller = Depends(current_caller),
    db: Database = Depends(get_db),
):
    if vehicle_id is not None:
        return repairs.list_repairs(db, caller.user_id, vehicle_id)
    if id is not None:
        return repairs.get_repair(db, caller.user_id, id)
    return repairs.list_repairs(db, caller.user_id)


@app.post("/repairs", status_code=201)
def create_repair(
    payload: RepairCreate,
    caller: Caller = Depends(current_caller),
    db: Database = Depends(get_db),
):
    return {"id": repairs.create_repair(db, caller.user_id, payload)}


@app.put("/repairs")
def update_repair(
    payload: RepairUpdate,
    id: Optional[str] = Query(None),
    caller: Caller = Depends(current_caller),
    db: Database = Depends(get_db),
):
    if not id:
        raise MissingParameterError("Repair ID is required")
    return repairs.update_repair(db, caller.user_id, id, payload)


@app.delete("/repairs")
def delete_repair(
    id: Optional[str] = Query(None),
    caller: Caller = Depends(current_caller),
    db: Database = Depends(get_db),
):
    if not id:
        raise MissingParameterError("Repair ID is required")
    repairs.delete_repair(db, caller.user_id, id)
    return {"success": True}


@app.get("/repairs/{repair_id}")
def get_repair(repair_id: str, caller: Caller = Depends(current_caller), db: Database = Depends(get_db)):
    return repairs.get_repair(db, caller.user_id, repair_id)


# Signature

@app.get("/signature")
def get_signature(caller: Caller = Depends(current_caller), db: Database = Depends(get_db)):
    return signatures.get_signature(db, caller.user_id)


@app.post("/signature")
def save_signature(
    payload: SignatureSave,
    caller: Caller = Depends(current_caller),
    db: Database = Depends(get_db),
):
    return {"id": signatures.save_signature(db, caller.user_id, payload)}


@app.put("/signature/{signature_id}")
def update_signature(
    signature_id: str,
    payload: SignatureSave,
    caller: Caller = Depends(current_caller),
    db: Database = Depends(get_db),
):
    return signatures.update_signature(db, caller.user_id, signature_id, payload)


@app.delete("/signature/{signature_id}")
def delete_signature(
    signature_id: str,
    caller: Caller = Depends(current_caller),
    db: Database = Depends(get_db),
    images: ImageHost = Depends(get_images),
):
    signatures.delete_signature(db, caller.user_id, signature_id, images)
    return {"success": True}


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", settings.port))
    uvicorn.run(app, host="0.0.0.0", port=port)
