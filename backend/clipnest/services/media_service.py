"""
Media delegate backed by Cloudinary.

Incoming multipart parts are spooled to a local temp directory, pushed to
Cloudinary, and the temp file is removed whether the upload worked or not.
The provider's public id is returned with the URL so callers can store it and
destroy the asset later without parsing URLs.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import logging
import os
import shutil
import uuid

import cloudinary
import cloudinary.uploader
from fastapi import UploadFile, status

from clipnest.config import settings
from clipnest.services.logging_service import app_metrics
from clipnest.utils.api_error import ApiError

logger = logging.getLogger(__name__)

cloudinary.config(
    cloud_name=settings.CLOUDINARY_CLOUD_NAME,
    api_key=settings.CLOUDINARY_API_KEY,
    api_secret=settings.CLOUDINARY_API_SECRET,
    secure=True
)


class MediaServiceError(Exception):
    """Raised when the provider refuses or fails a delete."""


@dataclass
class MediaAsset:
    """A file stored on the media host."""
    url: str
    public_id: str
    resource_type: str = "image"
    duration: Optional[float] = None


class MediaService:
    """Upload and delete binary assets on Cloudinary."""

    def __init__(self, temp_dir: Optional[str] = None):
        self.temp_dir = Path(temp_dir or settings.UPLOAD_TEMP_DIR)

    def save_upload(self, upload: Optional[UploadFile]) -> Optional[str]:
        """
        Spool a multipart part to the temp directory.

        Args:
            upload: File part from the request (may be None or empty)

        Returns:
            Local path, or None when no file was sent
        """
        if upload is None or not upload.filename:
            return None

        self.temp_dir.mkdir(parents=True, exist_ok=True)
        suffix = Path(upload.filename).suffix.lower()
        local_path = self.temp_dir / f"{uuid.uuid4().hex}{suffix}"

        with open(local_path, "wb") as out:
            shutil.copyfileobj(upload.file, out)

        return str(local_path)

    def upload(self, local_path: Optional[str]) -> Optional[MediaAsset]:
        """
        Upload a local file and remove it afterwards.

        Args:
            local_path: File written by save_upload

        Returns:
            MediaAsset, or None if there was nothing to upload or the provider failed
        """
        if not local_path:
            return None

        try:
            response = cloudinary.uploader.upload(local_path, resource_type="auto")
        except Exception as e:
            logger.error("Cloudinary upload failed for %s: %s", local_path, e)
            app_metrics.increment_media("upload", success=False)
            return None
        finally:
            self._remove_local(local_path)

        app_metrics.increment_media("upload")
        return MediaAsset(
            url=response.get("secure_url") or response.get("url"),
            public_id=response.get("public_id"),
            resource_type=response.get("resource_type", "image"),
            duration=response.get("duration")
        )

    def delete(self, public_id: Optional[str], resource_type: str = "image") -> Optional[dict]:
        """
        Destroy a stored asset.

        Args:
            public_id: Provider id stored at upload time
            resource_type: "image" or "video"

        Returns:
            Provider acknowledgement, or None when there was no id

        Raises:
            MediaServiceError: if the provider call fails
        """
        if not public_id:
            return None

        try:
            result = cloudinary.uploader.destroy(public_id, resource_type=resource_type)
        except Exception as e:
            app_metrics.increment_media("delete", success=False)
            raise MediaServiceError(f"Failed to delete {resource_type} {public_id}: {e}") from e

        app_metrics.increment_media("delete")
        logger.info("Deleted %s %s from Cloudinary: %s", resource_type, public_id, result)
        return result

    def store(self, upload: Optional[UploadFile], label: str, required: bool = True) -> Optional[MediaAsset]:
        """
        Spool and upload one multipart part.

        Args:
            upload: File part from the request
            label: Part name used in error messages ("avatar", "video file", ...)
            required: Whether a missing part is a 400

        Raises:
            ApiError: 400 when a required part is missing, 500 when the upload fails
        """
        local_path = self.save_upload(upload)
        if not local_path:
            if required:
                raise ApiError(status.HTTP_400_BAD_REQUEST, f"{label.capitalize()} is required")
            return None

        asset = self.upload(local_path)
        if asset is None:
            raise ApiError(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Error while uploading {label}")
        return asset

    def discard(self, *assets: Optional[MediaAsset]):
        """
        Remove assets uploaded for a request that then failed.

        Failures are logged and not raised, so the original error reaches the caller.
        """
        for asset in assets:
            if asset is None:
                continue
            try:
                self.delete(asset.public_id, asset.resource_type)
            except MediaServiceError as e:
                logger.warning("Orphaned %s %s left on media host: %s", asset.resource_type, asset.public_id, e)

    def _remove_local(self, local_path: str):
        """Best-effort temp file cleanup."""
        try:
            os.remove(local_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove temp file %s: %s", local_path, e)


media_service = MediaService()


def get_media_service() -> MediaService:
    """Dependency returning the shared media delegate (overridden in tests)."""
    return media_service
