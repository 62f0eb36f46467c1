"""
Durable storage for generated article images
"""

import base64
import logging
import re
import time
from pathlib import Path
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

FILENAME_MAX_LENGTH = 50


def generate_image_filename(title: str) -> str:
    """Title -> safe file stem"""
    name = re.sub(r"[^a-z0-9\s-]", "", (title or "").lower())
    name = re.sub(r"\s+", "-", name)
    return name[:FILENAME_MAX_LENGTH] or "image"


def _extension_for(url: str) -> str:
    lowered = url.lower()
    return ".jpg" if ".jpg" in lowered or ".jpeg" in lowered else ".png"


class ImageStore:
    """Writes images under ``media_dir`` and returns their public URL"""

    def __init__(
        self,
        media_dir: Path,
        public_prefix: str = "/media",
        timeout: float = 30.0,
        http_client: Optional[httpx.Client] = None
    ):
        self.media_dir = Path(media_dir)
        self.public_prefix = public_prefix.rstrip("/")
        self.timeout = timeout
        self._http = http_client

    def save_bytes(self, data: bytes, filename: str, extension: str = ".png") -> str:
        """Store raw bytes under a timestamped name"""
        self.media_dir.mkdir(parents=True, exist_ok=True)
        unique_name = f"{filename}-{int(time.time() * 1000)}{extension}"
        (self.media_dir / unique_name).write_bytes(data)
        url = f"{self.public_prefix}/{unique_name}"
        logger.info("Image stored: %s", url)
        return url

    def save_base64(self, b64_data: str, filename: str) -> str:
        return self.save_bytes(base64.b64decode(b64_data), filename, ".png")

    def save_from_url(self, image_url: str, filename: str, timeout: Optional[float] = None) -> str:
        """Download a remote image and store it; ``timeout`` caps the store default"""
        timeout = min(timeout, self.timeout) if timeout is not None else self.timeout
        if self._http is not None:
            response = self._http.get(image_url, timeout=timeout)
        else:
            with httpx.Client(timeout=timeout, follow_redirects=True) as client:
                response = client.get(image_url)
        response.raise_for_status()
        return self.save_bytes(response.content, filename, _extension_for(image_url))
