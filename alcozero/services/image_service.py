"""
Cloudinary unsigned uploads for driver photos and captured images.
"""
from typing import Optional, Dict, Any
import httpx

from alcozero.config import settings
from alcozero.core.logging_config import get_logger

logger = get_logger(__name__)

CLOUDINARY_UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload"


class ImageUploadError(Exception):
    """Upload rejected by the image host or not configured"""


class ImageService:
    def __init__(self):
        self.cloud_name = settings.CLOUDINARY_CLOUD_NAME
        self.upload_preset = settings.CLOUDINARY_UPLOAD_PRESET
        self.folder = settings.CLOUDINARY_FOLDER
        self.timeout = settings.CLOUDINARY_TIMEOUT

    @property
    def upload_url(self) -> str:
        return CLOUDINARY_UPLOAD_URL.format(cloud_name=self.cloud_name)

    async def upload_image(self, filename: str, content: bytes, content_type: str) -> Dict[str, Any]:
        """
        Upload one image and return ``{"url": secure_url, "public_id": ...}``.

        Raises:
            ImageUploadError: configuration missing, transport failure or a
                non-2xx answer; the message is the host's error message.
        """
        if not self.cloud_name:
            raise ImageUploadError("Cloudinary cloud name not configured. Please set CLOUDINARY_CLOUD_NAME")
        if not self.upload_preset:
            raise ImageUploadError("Cloudinary upload preset not configured. Please set CLOUDINARY_UPLOAD_PRESET")

        data = {"upload_preset": self.upload_preset, "folder": self.folder}
        files = {"file": (filename, content, content_type)}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.upload_url, data=data, files=files)
        except httpx.HTTPError as e:
            logger.error(f"[ImageUpload] Transport error uploading {filename}: {e}")
            raise ImageUploadError(str(e) or "Failed to upload image") from e

        if response.status_code >= 400:
            try:
                message = response.json().get("error", {}).get("message")
            except ValueError:
                message = None
            message = message or f"Upload failed with status {response.status_code}"
            logger.error(f"[ImageUpload] Cloudinary rejected {filename}: {message}")
            raise ImageUploadError(message)

        payload = response.json()
        logger.info(f"[ImageUpload] Uploaded {filename} as {payload.get('public_id')}")
        return {"url": payload.get("secure_url"), "public_id": payload.get("public_id")}


def get_optimized_image_url(
    url: Optional[str],
    width: int = 300,
    height: int = 300,
    crop: str = "fill",
    quality: str = "auto",
) -> Optional[str]:
    """Insert a resize transformation into a Cloudinary delivery URL; other URLs pass through."""
    if not url or "cloudinary.com" not in url:
        return url

    parts = url.split("/upload/")
    if len(parts) == 2:
        return f"{parts[0]}/upload/w_{width},h_{height},c_{crop},q_{quality}/{parts[1]}"
    return url


image_service = ImageService()
