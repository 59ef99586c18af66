"""Image host client.

Uploads go to an unsigned-preset multipart endpoint and come back as a
durable ``secure_url``. Any storage provider with the same contract works.
"""

import logging
import posixpath
from typing import Optional
from urllib.parse import urlparse

import requests

from errors import FleetValidationError, UpstreamError
from settings import Settings

logger = logging.getLogger(__name__)


class ImageHost:
    def __init__(self, settings: Settings, session: Optional[requests.Session] = None) -> None:
        self.settings = settings
        self.session = session or requests.Session()

    def upload(self, filename: str, content: bytes, content_type: Optional[str]) -> str:
        if not content:
            raise FleetValidationError("Empty file")
        if len(content) > self.settings.max_upload_bytes:
            limit_mb = self.settings.max_upload_bytes / (1024 * 1024)
            raise FleetValidationError(f"File size should not exceed {limit_mb:g}MB")
        if content_type and not content_type.startswith("image/"):
            raise FleetValidationError("Only image uploads are accepted")
        try:
            response = self.session.post(
                self.settings.image_upload_url,
                data={"upload_preset": self.settings.image_upload_preset},
                files={"file": (filename, content, content_type or "application/octet-stream")},
                timeout=self.settings.upload_timeout,
            )
            response.raise_for_status()
            url = response.json().get("secure_url")
        except (requests.RequestException, ValueError) as exc:
            logger.error("Image upload failed: %s", exc)
            raise UpstreamError("Image upload failed") from exc
        if not url:
            raise UpstreamError("Image host returned no URL")
        logger.info("Uploaded %s", url)
        return url

    def public_id(self, url: str) -> str:
        filename = posixpath.basename(urlparse(url).path)
        stem = filename.split(".")[0]
        return f"{self.settings.image_folder}/{stem}"

    def destroy(self, url: str) -> bool:
        """Ask the host to remove an image. Failures are logged, not raised."""
        try:
            response = self.session.post(
                self.settings.image_destroy_url,
                json={"public_id": self.public_id(url)},
                timeout=self.settings.upload_timeout,
            )
            response.raise_for_status()
            return response.json().get("result") == "ok"
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Could not delete image %s: %s", url, exc)
            return False
