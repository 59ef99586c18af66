"""Runtime configuration read from the environment."""

from __future__ import annotations

import dataclasses
import os
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_list(name: str, default: List[str]) -> List[str]:
    value = os.getenv(name)
    if value is None:
        return default
    return [part.strip() for part in value.split(",") if part.strip()]


@dataclasses.dataclass(frozen=True)
class Settings:
    """Service configuration.

    Parameters
    ----------
    database_url : str or None
        MongoDB connection string. When unset the service starts without
        a database and every data endpoint answers 502.
    database_name : str
        Database holding the ``vehicles``, ``repairs`` and ``signatures``
        collections.
    session_secret : str or None
        Key used to verify caller session tokens. Required: the app refuses
        to start without it and no token verifies against an empty key.
    session_algorithm : str
        JWT signing algorithm for session tokens.
    session_issuer : str or None
        Expected ``iss`` claim. Not checked when unset.
    image_upload_url : str
        Multipart upload endpoint of the image host.
    image_destroy_url : str
        Endpoint asked to remove a stored image.
    image_upload_preset : str
        Named preset sent with every upload.
    image_folder : str
        Folder prefix the preset stores images under.
    upload_timeout : float
        Seconds to wait on the image host.
    max_upload_bytes : int
        Largest accepted image.
    """

    database_url: Optional[str] = None
    database_name: str = "fleet"
    session_secret: Optional[str] = None
    session_algorithm: str = "HS256"
    session_issuer: Optional[str] = None
    image_upload_url: str = "https://api.cloudinary.com/v1_1/fleet/image/upload"
    image_destroy_url: str = "https://api.cloudinary.com/v1_1/fleet/image/destroy"
    image_upload_preset: str = "feetTrack"
    image_folder: str = "feetTrack"
    upload_timeout: float = 30.0
    max_upload_bytes: int = 3 * 1024 * 1024
    cors_origins: List[str] = dataclasses.field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    port: int = 8000


def load_settings() -> Settings:
    return Settings(
        database_url=os.getenv("DATABASE_URL") or None,
        database_name=os.getenv("DATABASE_NAME", "fleet"),
        session_secret=os.getenv("SESSION_SECRET") or None,
        session_algorithm=os.getenv("SESSION_ALGORITHM", "HS256"),
        session_issuer=os.getenv("SESSION_ISSUER") or None,
        image_upload_url=os.getenv("IMAGE_UPLOAD_URL", Settings.image_upload_url),
        image_destroy_url=os.getenv("IMAGE_DESTROY_URL", Settings.image_destroy_url),
        image_upload_preset=os.getenv("IMAGE_UPLOAD_PRESET", Settings.image_upload_preset),
        image_folder=os.getenv("IMAGE_FOLDER", Settings.image_folder),
        upload_timeout=_env_float("UPLOAD_TIMEOUT", Settings.upload_timeout),
        max_upload_bytes=_env_int("MAX_UPLOAD_BYTES", Settings.max_upload_bytes),
        cors_origins=_env_list("CORS_ORIGINS", ["*"]),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        port=_env_int("PORT", 8000),
    )


settings = load_settings()


def get_settings() -> Settings:
    return settings
