"""
Object storage for category covers and gallery media.
Talks to any S3-compatible bucket (R2, S3, MinIO) through boto3.
"""

import logging
import mimetypes
import uuid
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError
from fastapi import HTTPException

from .. import config

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = [
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/webp",
    "image/gif",
    "image/avif",
    "image/heic",
    "image/heif",
]
ALLOWED_VIDEO_TYPES = [
    "video/mp4",
    "video/quicktime",
    "video/webm",
]


def get_storage_client():
    """Create and return an S3-compatible client"""
    return boto3.client(
        "s3",
        endpoint_url=config.STORAGE_ENDPOINT_URL,
        aws_access_key_id=config.STORAGE_ACCESS_KEY_ID,
        aws_secret_access_key=config.STORAGE_SECRET_ACCESS_KEY,
        config=Config(signature_version="s3v4"),
        region_name=config.STORAGE_REGION,
    )


def generate_object_key(folder: str, content_type: Optional[str]) -> str:
    """Flat key such as "media-3f2a...c1.jpg" so it fits in a single URL path segment"""
    extension = mimetypes.guess_extension(content_type or "") or ""
    if extension == ".jpe":
        extension = ".jpg"
    return f"{folder}-{uuid.uuid4().hex}{extension}"


def public_url_for(drive_id: str) -> str:
    if config.STORAGE_PUBLIC_URL:
        return f"{config.STORAGE_PUBLIC_URL.rstrip('/')}/{drive_id}"
    return f"{config.BASE_PATH}/media/drive/{drive_id}"


class StorageService:
    """Upload, fetch and delete stored files"""

    def __init__(self, client=None, bucket: Optional[str] = None):
        self._client = client
        self.bucket = bucket or config.STORAGE_BUCKET_NAME

    @property
    def client(self):
        if self._client is None:
            self._client = get_storage_client()
        return self._client

    def upload_file(self, data: bytes, content_type: Optional[str], folder: str = "media") -> dict:
        if len(data) > config.MAX_UPLOAD_SIZE:
            raise HTTPException(
                status_code=400,
                detail=f"File too large. Maximum size is {config.MAX_UPLOAD_SIZE // (1024 * 1024)}MB",
            )
        content_type = content_type or "application/octet-stream"
        drive_id = generate_object_key(folder, content_type)

        try:
            self.client.put_object(Bucket=self.bucket, Key=drive_id, Body=data, ContentType=content_type)
        except ClientError as e:
            logger.error(f"❌ Failed to upload {drive_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to upload file") from e

        logger.info(f"✅ Uploaded {drive_id} ({len(data)} bytes)")
        return {"driveId": drive_id, "publicUrl": public_url_for(drive_id)}

    def delete_file(self, drive_id: str) -> None:
        if not drive_id:
            return
        try:
            self.client.delete_object(Bucket=self.bucket, Key=drive_id)
            logger.info(f"🗑️ Deleted {drive_id}")
        except ClientError as e:
            logger.error(f"❌ Failed to delete {drive_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete file") from e

    def get_file(self, drive_id: str) -> tuple[bytes, str]:
        try:
            obj = self.client.get_object(Bucket=self.bucket, Key=drive_id)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code")
            if error_code in ("NoSuchKey", "404"):
                raise HTTPException(status_code=404, detail="File not found") from e
            logger.error(f"❌ Failed to fetch {drive_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch file") from e
        return obj["Body"].read(), obj.get("ContentType") or "application/octet-stream"


_storage: Optional[StorageService] = None


def get_storage() -> StorageService:
    """FastAPI dependency returning the shared storage service"""
    global _storage
    if _storage is None:
        _storage = StorageService()
    return _storage
