"""Cloudinary media storage: upload, delete, and URL-derived variants."""

import io
import logging
import re

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError

from scrapbook.config import settings
from scrapbook.errors import BadRequest, PayloadTooLarge, ServerError
from scrapbook.models.media import MediaType

logger = logging.getLogger(__name__)

_EXTENSION_RE = re.compile(r"\.[^/.]+$")


def configure() -> None:
    """Push credentials from settings into the Cloudinary SDK."""
    cloudinary.config(
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_api_key,
        api_secret=settings.cloudinary_api_secret,
        secure=True,
    )


def validate_upload(data: bytes, content_type: str) -> MediaType:
    """Check payload size and MIME family; returns the media type to store."""
    if not data:
        raise BadRequest("No media file provided")
    if content_type.startswith("video/"):
        media_type = MediaType.VIDEO
    elif content_type.startswith("image/"):
        media_type = MediaType.IMAGE
    else:
        raise BadRequest("Only image and video files are allowed")
    if len(data) > settings.max_upload_bytes:
        limit_mb = settings.max_upload_bytes // (1024 * 1024)
        raise PayloadTooLarge(f"File too large (max {limit_mb}MB)")
    return media_type


def upload_file(data: bytes, folder: str, resource_type: str = "image") -> dict:
    """Upload raw bytes. Returns the provider's result dict.

    No retries: a provider failure is raised as ServerError and nothing is recorded.
    """
    try:
        result = cloudinary.uploader.upload(
            io.BytesIO(data),
            folder=folder,
            resource_type=resource_type,
        )
    except CloudinaryError as e:
        logger.error("Cloudinary upload to %s failed: %s", folder, e)
        raise ServerError("Media storage upload failed", detail=str(e))
    return result


def delete_file(public_id: str, resource_type: str = "image") -> dict:
    try:
        return cloudinary.uploader.destroy(public_id, resource_type=resource_type)
    except CloudinaryError as e:
        logger.error("Cloudinary delete of %s failed: %s", public_id, e)
        raise ServerError("Media storage delete failed", detail=str(e))


def get_media_versions(url: str, media_type: str) -> dict[str, str]:
    """Derive thumbnail/medium/original URLs from the canonical delivery URL."""
    if media_type == "video":
        thumbnail = _EXTENSION_RE.sub(".jpg", url.replace("/upload/", "/upload/w_200,h_200,c_fill/"))
        return {
            "thumbnail": thumbnail,
            "medium": url.replace("/upload/", "/upload/w_800,q_auto/"),
            "original": url,
        }
    return {
        "thumbnail": url.replace("/upload/", "/upload/w_200,h_200,c_fill/"),
        "medium": url.replace("/upload/", "/upload/w_800,h_800,c_fill/"),
        "original": url,
    }
