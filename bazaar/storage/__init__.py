"""
Storage
Object storage for product and carousel images.
"""

from .object_storage import (
    ImageStore,
    ImageUpload,
    ObjectStorage,
    build_object_key,
    check_image_size,
)

__all__ = [
    "ImageStore",
    "ImageUpload",
    "ObjectStorage",
    "build_object_key",
    "check_image_size",
]
