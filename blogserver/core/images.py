# blogserver/core/images.py

import asyncio
import io
import random
import time
from dataclasses import dataclass
import cloudinary.uploader
from loguru import logger
from blogserver.config import Settings
from blogserver.core.errors import ValidationError


MAX_UPLOAD_BYTES = 1 * 1024 * 1024
UPLOAD_FOLDER = "blog_images"
UPLOAD_TRANSFORMATION = [
    {"width": 1000, "height": 600, "crop": "limit"},
    {"quality": "auto"},
    {"fetch_format": "auto"},
]


@dataclass
class UploadResult:
    ok: bool
    url: str | None = None
    error: str | None = None


def validate_image(content_type: str | None, size: int):
    if not content_type or not content_type.startswith("image/"):
        raise ValidationError("Only image files are allowed!")
    if size > MAX_UPLOAD_BYTES:
        raise ValidationError("Image must be 1 MB or smaller.")


async def read_image(upload) -> bytes:
    """
    Reads an uploaded image without pulling more than MAX_UPLOAD_BYTES + 1
    bytes into memory, and rejects wrong types or oversized files.
    """
    validate_image(upload.content_type, upload.size or 0)
    data = await upload.read(MAX_UPLOAD_BYTES + 1)
    validate_image(upload.content_type, len(data))
    return data


def make_image_name() -> str:
    return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"


class ImageUploader:
    """
    Sends post images to Cloudinary.

    `upload` never raises for remote problems: failures, timeouts and
    missing credentials all come back as UploadResult(ok=False).
    """

    def __init__(
        self,
        cloud_name: str | None,
        api_key: str | None,
        api_secret: str | None,
        timeout: float = 20.0,
        folder: str = UPLOAD_FOLDER,
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.timeout = timeout
        self.folder = folder

    @classmethod
    def from_settings(cls, settings: Settings) -> "ImageUploader":
        return cls(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            timeout=settings.image_upload_timeout_sec,
        )

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def _upload_sync(self, data: bytes, name: str) -> dict:
        return cloudinary.uploader.upload(
            io.BytesIO(data),
            resource_type="image",
            folder=self.folder,
            public_id=name,
            transformation=UPLOAD_TRANSFORMATION,
            cloud_name=self.cloud_name,
            api_key=self.api_key,
            api_secret=self.api_secret,
            secure=True,
            timeout=self.timeout,
        )

    async def upload(self, data: bytes, name: str) -> UploadResult:
        if not self.configured:
            logger.warning("Image host credentials missing, skipping upload")
            return UploadResult(ok=False, error="image host not configured")

        try:
            result = await asyncio.wait_for(
                asyncio.to_thread(self._upload_sync, data, name),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Image upload timed out after {self.timeout}s: {name}")
            return UploadResult(ok=False, error="timeout")
        except Exception as e:
            logger.warning(f"Cloudinary upload error: {e}")
            return UploadResult(ok=False, error=str(e))

        url = result.get("secure_url") if isinstance(result, dict) else None
        if not url:
            logger.warning(f"Cloudinary response without secure_url: {result!r}")
            return UploadResult(ok=False, error="missing secure_url")
        return UploadResult(ok=True, url=url)


async def resolve_image_url(
    uploader: ImageUploader,
    data: bytes | None,
    default_url: str,
) -> str:
    """
    Uploads `data` if given and returns the hosted URL, or `default_url`
    when there is nothing to upload or the upload failed.
    """
    if not data:
        return default_url

    result = await uploader.upload(data, make_image_name())
    return result.url if result.ok else default_url
