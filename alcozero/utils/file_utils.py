from typing import Optional
from fastapi import UploadFile, status

from alcozero.config import settings
from alcozero.utils.response_utils import error_exception


async def image_file_validator(
    file: Optional[UploadFile],
    max_size_mb: Optional[int] = None,
) -> UploadFile:
    """
    Validate an uploaded image: any ``image/*`` content type, at most
    ``max_size_mb`` (MAX_IMAGE_SIZE_MB by default).

    Returns:
        UploadFile: the validated file, rewound to the start
    """
    max_size_mb = max_size_mb or settings.MAX_IMAGE_SIZE_MB

    if not file or not file.filename:
        raise error_exception(status.HTTP_400_BAD_REQUEST, "Image file is required", "INVALID_FILE")

    if not (file.content_type or "").startswith("image/"):
        raise error_exception(
            status.HTTP_400_BAD_REQUEST,
            "Please select an image file",
            "INVALID_FILE",
            {"content_type": file.content_type},
        )

    file.file.seek(0, 2)
    file_size = file.file.tell()
    file.file.seek(0)

    if file_size > max_size_mb * 1024 * 1024:
        raise error_exception(
            status.HTTP_400_BAD_REQUEST,
            f"Image size must be less than {max_size_mb}MB",
            "INVALID_FILE",
            {"size": file_size},
        )

    return file
