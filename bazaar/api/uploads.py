"""
Multipart upload handling.
"""

from typing import Optional

from fastapi import UploadFile

from ..storage.object_storage import ImageUpload, check_image_size


async def read_image_upload(file: Optional[UploadFile], max_bytes: int) -> Optional[ImageUpload]:
    """
    Read an uploaded file into memory, holding at most max_bytes + 1 bytes.

    Returns None when no file was chosen (browsers submit an empty part
    without a filename). Raises ImageTooLargeError when the file is over
    the ceiling, using the declared size when the client sent one.
    """
    if file is None or not file.filename:
        return None
    if file.size is not None:
        check_image_size(file.size, max_bytes)

    data = await file.read(max_bytes + 1)
    check_image_size(max(file.size or 0, len(data)), max_bytes)
    return ImageUpload(filename=file.filename, content_type=file.content_type, data=data)
