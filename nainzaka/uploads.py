# uploads.py
"""
Product image uploads.

Handles:
- Pre-validation of the selected files (count, MIME type, size) before any
  network call is made.
- One-image-per-call uploads to the configured image host (ImgBB REST API or
  Cloudinary), strictly one file after another.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from io import BytesIO
from typing import List, Sequence

import cloudinary
import cloudinary.uploader
import cloudinary.utils
import httpx
from fastapi import UploadFile

from nainzaka.settings import settings

log = logging.getLogger(__name__)

# ===================================================================
# CONFIGURATION
# ===================================================================

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}
MAX_IMAGES = settings.MAX_IMAGES
MAX_IMAGE_SIZE_BYTES = settings.MAX_IMAGE_SIZE_MB * 1024 * 1024


class ImageValidationError(ValueError):
    """The selected files were rejected before upload."""


class ImageUploadError(Exception):
    """The image host refused or failed an upload."""


@dataclass
class ImageFile:
    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


async def read_upload(file: UploadFile) -> ImageFile:
    try:
        content = await file.read()
    finally:
        await file.close()
    return ImageFile(
        filename=file.filename or "image",
        content_type=(file.content_type or "").lower(),
        content=content,
    )


def validate_images(
    images: Sequence[ImageFile],
    max_images: int = MAX_IMAGES,
    max_size_bytes: int = MAX_IMAGE_SIZE_BYTES,
) -> None:
    """Raise ImageValidationError unless every file may be sent to the image host."""
    if not images:
        raise ImageValidationError("Please select at least one product image")
    if len(images) > max_images:
        raise ImageValidationError(f"You can only upload up to {max_images} images")

    if any(img.content_type not in ALLOWED_IMAGE_TYPES for img in images):
        raise ImageValidationError("Please select only image files (JPEG, PNG, WebP)")

    if any(img.size > max_size_bytes for img in images):
        limit_mb = max_size_bytes // (1024 * 1024)
        raise ImageValidationError(f"Each image must be less than {limit_mb}MB")


# ===================================================================
# IMAGE HOSTS
# ===================================================================

class ImageHost:
    name = "base"

    async def upload(self, image: ImageFile) -> str:
        """Upload one image and return its public URL."""
        raise NotImplementedError


class ImgBBHost(ImageHost):
    """ImgBB REST API: multipart `image` field, key in the query string."""

    name = "imgbb"

    def __init__(self, api_key: str, upload_url: str = settings.IMGBB_UPLOAD_URL,
                 timeout: float = settings.UPLOAD_TIMEOUT):
        self.api_key = api_key
        self.upload_url = upload_url
        self.timeout = timeout

    async def upload(self, image: ImageFile) -> str:
        if not self.api_key:
            raise ImageUploadError("ImgBB API key is not configured. Check your .env file.")

        files = {"image": (image.filename, image.content, image.content_type)}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.upload_url, params={"key": self.api_key}, files=files)
            result = response.json()
        except httpx.RequestError as e:
            log.error(f"Network error uploading {image.filename} to ImgBB: {e}")
            raise ImageUploadError(f"Image upload failed: {e}")
        except ValueError:
            log.error(f"ImgBB returned a non-JSON response ({response.status_code}): {response.text[:200]}")
            raise ImageUploadError("Image upload failed: invalid response from image host")

        if not result.get("success"):
            message = (result.get("error") or {}).get("message") or "Failed to upload image to ImgBB"
            log.error(f"ImgBB upload rejected for {image.filename}: {message}")
            raise ImageUploadError(f"Image upload failed: {message}")

        url = (result.get("data") or {}).get("url")
        if not url:
            log.error(f"ImgBB response missing data.url: {result}")
            raise ImageUploadError("Image upload failed: no URL returned")
        return url


class CloudinaryHost(ImageHost):
    name = "cloudinary"

    def __init__(self, cloud_name: str, api_key: str, api_secret: str,
                 folder: str = settings.CLOUDINARY_FOLDER):
        self.folder = folder
        self.configured = bool(cloud_name and api_key and api_secret)
        cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True,  # Always use HTTPS URLs
        )

    async def upload(self, image: ImageFile) -> str:
        if not self.configured:
            raise ImageUploadError("Cloudinary is not configured. Check CLOUDINARY_... env vars.")

        public_id = f"product_{uuid.uuid4().hex}"

        def sync_upload(data: BytesIO):
            return cloudinary.uploader.upload(
                data,
                folder=self.folder,
                public_id=public_id,
                resource_type="image",
                overwrite=True,
                unique_filename=False,  # uuid already makes it unique
            )

        try:
            # The SDK is synchronous
            upload_result = await asyncio.to_thread(sync_upload, BytesIO(image.content))
        except Exception as e:
            log.error(f"Error uploading {image.filename} to Cloudinary: {e}", exc_info=True)
            raise ImageUploadError(f"Image upload failed: {e}")

        secure_url = upload_result.get("secure_url")
        if not secure_url:
            log.warning(f"Cloudinary response missing 'secure_url'. Attempting to construct URL. Result: {upload_result}")
            returned_id = upload_result.get("public_id")
            if not returned_id:
                raise ImageUploadError("Image upload failed: no URL or public_id returned")
            secure_url = cloudinary.utils.cloudinary_url(
                returned_id,
                resource_type=upload_result.get("resource_type", "image"),
                version=upload_result.get("version"),
                secure=True,
            )[0]

        log.info(f"File uploaded to Cloudinary: {secure_url}")
        return secure_url


def get_image_host() -> ImageHost:
    """FastAPI dependency: the host selected by IMAGE_HOST."""
    if settings.IMAGE_HOST.lower() == "cloudinary":
        return CloudinaryHost(
            settings.CLOUDINARY_CLOUD_NAME,
            settings.CLOUDINARY_API_KEY,
            settings.CLOUDINARY_API_SECRET,
        )
    return ImgBBHost(settings.IMGBB_API_KEY)


async def upload_images(host: ImageHost, images: Sequence[ImageFile]) -> List[str]:
    """Upload one image at a time, in order; the first failure aborts the rest."""
    urls: List[str] = []
    for i, image in enumerate(images, start=1):
        log.info(f"Uploading image {i}/{len(images)} to {host.name}")
        urls.append(await host.upload(image))
    return urls
