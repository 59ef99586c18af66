"""
Database Schemas

MongoDB collection schemas and request bodies, as Pydantic models.
Collection models describe what is stored; the *Create / *Update models
are the only shapes the stores accept. Unknown fields are rejected.
Dates arrive as ISO strings, are validated as dates and stored back as
ISO strings.
"""

from datetime import date
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# Either a count or the two-state OK / Not OK toggle
ItemQuantity = Union[Literal["OK", "Not OK"], Annotated[int, Field(strict=True, ge=0)]]

DEFAULT_DRIVER_ITEMS = (
    "TRIPAL BIG",
    "TRIPAL SMALL",
    "SCRAP TRIPAL",
    "CHAIN",
    "BATLA",
    "D",
    "BELT",
    "FASTAG",
    "DIESEL CARD",
    "GPS",
    "JACK",
    "BIG TOMMY",
    "WHEEL SPANNER",
    "ROPE",
    "RADIUM",
    "NUMBER PLATE",
    "JACKET",
    "SHOES",
    "HELMET",
    "BATTERY BOX",
    "BUMPER STAND",
    "WOODEN BIG RAFTER",
    "WOODEN SMALL RAFTER",
    "WOODEN COIL RAFTER",
    "RIB RUBBER",
    "SADDLE",
    "SCOTCH BLOCK",
)


class StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


# Embedded documents

class DriverItem(StrictModel):
    """Embedded in vehicle.driver.itemsGiven"""
    id: str = Field(..., alias="_id")
    itemName: str = Field(..., min_length=2)
    quantity: ItemQuantity = 0
    givenDate: date
    itemImage: Optional[str] = None

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class Driver(StrictModel):
    """Embedded in vehicle.driver"""
    name: str = Field(..., min_length=2)
    phoneNumber: str = Field(..., pattern=r"^\d{10}$", description="10 digit phone number")
    aadharNumber: Optional[str] = None
    panNumber: Optional[str] = None
    licenseNumber: Optional[str] = None
    aadharImage: Optional[str] = None
    panCardImage: Optional[str] = None
    licenseImage: Optional[str] = None
    itemsGiven: List[DriverItem] = []


class Tyre(StrictModel):
    """Embedded in vehicle.tyres"""
    id: str = Field(..., alias="_id")
    tyreNumber: str = Field(..., min_length=2)
    description: str = Field(..., min_length=1)
    installedDate: date

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


# Collections

class Vehicle(StrictModel):
    """Collection: vehicles"""
    userId: str = Field(..., description="Owning user id")
    name: str = Field(..., min_length=2, description="Display name")
    ownerName: str = Field(..., min_length=2)
    vehicleNumber: str = Field(..., min_length=2, description="Registration number")
    imageUrl: str = Field("", description="Vehicle photo URL")
    pollutionCertificateImage: Optional[str] = None
    registrationCertificateImage: Optional[str] = None
    tyres: List[Tyre] = []
    driver: Optional[Driver] = None


class Repair(StrictModel):
    """Collection: repairs"""
    userId: str = Field(..., description="Owning user id")
    vehicleId: str = Field(..., description="Reference to vehicle _id as string")
    repairDate: date
    amount: float = Field(..., gt=0)
    toolName: str = Field(..., min_length=2)
    toolImageUrl: str = ""


class Signature(StrictModel):
    """Collection: signatures (one per user)"""
    userId: str = Field(...)
    name: str = Field(..., min_length=1)
    signatureUrl: str = Field(..., min_length=1)


# Request bodies

class VehicleCreate(StrictModel):
    name: str = Field(..., min_length=2)
    ownerName: str = Field(..., min_length=2)
    vehicleNumber: str = Field(..., min_length=2)
    imageUrl: str = ""
    pollutionCertificateImage: Optional[str] = None
    registrationCertificateImage: Optional[str] = None


class VehicleUpdate(StrictModel):
    name: Optional[str] = Field(None, min_length=2)
    ownerName: Optional[str] = Field(None, min_length=2)
    vehicleNumber: Optional[str] = Field(None, min_length=2)
    imageUrl: Optional[str] = None
    pollutionCertificateImage: Optional[str] = None
    registrationCertificateImage: Optional[str] = None


class DriverItemCreate(StrictModel):
    itemName: str = Field(..., min_length=2)
    quantity: ItemQuantity = 0
    givenDate: date
    itemImage: Optional[str] = None


class DriverItemUpdate(StrictModel):
    itemName: Optional[str] = Field(None, min_length=2)
    quantity: Optional[ItemQuantity] = None
    givenDate: Optional[date] = None
    itemImage: Optional[str] = None


class DriverProfile(StrictModel):
    name: str = Field(..., min_length=2)
    phoneNumber: str = Field(..., pattern=r"^\d{10}$")
    aadharNumber: Optional[str] = None
    panNumber: Optional[str] = None
    licenseNumber: Optional[str] = None
    aadharImage: Optional[str] = None
    panCardImage: Optional[str] = None
    licenseImage: Optional[str] = None
    itemsGiven: Optional[List[DriverItemCreate]] = None


class DriverAssign(DriverProfile):
    withDefaultItems: bool = False


class TyreCreate(StrictModel):
    tyreNumber: str = Field(..., min_length=2)
    description: str = Field(..., min_length=1)
    installedDate: date


class TyreUpdate(StrictModel):
    tyreNumber: Optional[str] = Field(None, min_length=2)
    description: Optional[str] = Field(None, min_length=1)
    installedDate: Optional[date] = None


class RepairCreate(StrictModel):
    vehicleId: str
    repairDate: date
    amount: float = Field(..., gt=0)
    toolName: str = Field(..., min_length=2)
    toolImageUrl: str = ""


class RepairUpdate(StrictModel):
    vehicleId: Optional[str] = None
    repairDate: Optional[date] = None
    amount: Optional[float] = Field(None, gt=0)
    toolName: Optional[str] = Field(None, min_length=2)
    toolImageUrl: Optional[str] = None


class SignatureSave(StrictModel):
    name: str = Field(..., min_length=1)
    signatureUrl: str = Field(..., min_length=1)


def changes(payload: BaseModel) -> dict:
    """Fields the caller actually supplied, for partial-merge updates."""
    data = payload.model_dump(mode="json", exclude_unset=True)
    return {key: value for key, value in data.items() if value is not None}
