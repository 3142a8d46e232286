"""
Object storage for uploaded images.

Uploads go to Google Cloud Storage. Each logical bucket has its own size
ceiling, enforced before any upload call is made.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

from google.api_core import exceptions as gcp_exceptions
from google.cloud import storage

from ..api.errors import ImageTooLargeError, InvalidRequestError, StorageError

logger = logging.getLogger(__name__)

PUBLIC_BASE_URL = "https://storage.googleapis.com"


@dataclass
class ImageUpload:
    """An uploaded file held in memory."""

    filename: str
    content_type: Optional[str]
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        if "." not in self.filename:
            return ""
        return self.filename.rsplit(".", 1)[-1].lower()


def check_image_size(size: int, max_bytes: int) -> None:
    """Reject files larger than the ceiling."""
    if size > max_bytes:
        raise ImageTooLargeError(size=size, max_bytes=max_bytes)


def build_object_key(upload: ImageUpload, prefix: Optional[str] = None,
                     timestamp_ms: Optional[int] = None) -> str:
    """
    Object key: "<prefix>/<epoch millis>.<ext>" (prefix optional).
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    name = f"{timestamp_ms}.{upload.extension}" if upload.extension else str(timestamp_ms)
    return f"{prefix}/{name}" if prefix else name


class ObjectStorage:
    """
    Thin wrapper around a GCS client.

    The client is created on first upload so that constructing the
    wrapper never touches credentials.
    """

    def __init__(self, client: Optional[storage.Client] = None,
                 public_base_url: str = PUBLIC_BASE_URL):
        self._client = client
        self.public_base_url = public_base_url.rstrip("/")

    @property
    def client(self) -> storage.Client:
        if self._client is None:
            self._client = storage.Client()
        return self._client

    def public_url(self, bucket_name: str, key: str) -> str:
        return f"{self.public_base_url}/{bucket_name}/{key}"

    def upload(self, bucket_name: str, key: str, data: bytes,
               content_type: Optional[str] = None) -> str:
        """
        Upload bytes under a key.

        Returns:
            Public retrieval URL

        Raises:
            StorageError: If the upload is rejected
        """
        try:
            blob = self.client.bucket(bucket_name).blob(key)
            blob.upload_from_string(data, content_type=content_type)
        except gcp_exceptions.NotFound:
            logger.error(f"Bucket not found: {bucket_name}")
            raise StorageError(f"Upload failed: bucket {bucket_name} not found")
        except gcp_exceptions.Forbidden:
            logger.error(f"Access denied to gs://{bucket_name}/{key}")
            raise StorageError("Upload failed: access denied")
        except gcp_exceptions.GoogleAPICallError as e:
            logger.error(f"Failed to upload gs://{bucket_name}/{key}: {e}")
            raise StorageError(f"Upload failed: {e.message}")

        logger.info(f"Uploaded gs://{bucket_name}/{key} ({len(data) / 1024:.1f} KB)")
        return self.public_url(bucket_name, key)


class ImageStore:
    """One logical image bucket with its own size ceiling."""

    def __init__(self, storage_backend: ObjectStorage, bucket_name: str, max_bytes: int):
        self.storage = storage_backend
        self.bucket_name = bucket_name
        self.max_bytes = max_bytes

    def validate(self, upload: ImageUpload) -> None:
        if upload.size == 0:
            raise InvalidRequestError("Uploaded image is empty")
        check_image_size(upload.size, self.max_bytes)

    def store(self, upload: ImageUpload, prefix: Optional[str] = None) -> str:
        """
        Validate then upload an image.

        Returns:
            Public URL of the stored image
        """
        self.validate(upload)
        key = build_object_key(upload, prefix=prefix)
        return self.storage.upload(self.bucket_name, key, upload.data, upload.content_type)
