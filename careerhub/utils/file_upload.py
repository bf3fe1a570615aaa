"""
File Upload Utility - validate uploaded documents and build storage paths.

Supported formats:
- PDF, Word (.doc/.docx), plain text
- JPEG, PNG, WebP images

Max file size: 5MB (MAX_UPLOAD_SIZE_MB)
"""

import time
from typing import Tuple

from fastapi import UploadFile

from careerhub.core.config import get_settings
from careerhub.core.exceptions import ValidationError
from careerhub.schemas.schemas import DocumentType

settings = get_settings()

# content type -> stored file extension
ALLOWED_CONTENT_TYPES = {
    "application/pdf": "pdf",
    "application/msword": "doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "text/plain": "txt",
}

# Filename extensions that may stand in for a stored extension
CONTENT_TYPE_ALIASES = {
    "jpg": ("jpg", "jpeg"),
}


def max_file_size_bytes() -> int:
    return settings.max_upload_size_mb * 1024 * 1024


def get_file_extension(filename: str, content_type: str) -> str:
    """
    Extension for the stored object. The filename's own extension is kept
    only when it agrees with the validated content type.
    """
    expected = ALLOWED_CONTENT_TYPES[content_type]
    if filename and '.' in filename:
        ext = filename.rsplit('.', 1)[1].lower()
        if ext in CONTENT_TYPE_ALIASES.get(expected, (expected,)):
            return ext
    return expected


def build_storage_path(user_id: int, doc_type: DocumentType, ext: str) -> str:
    """<user_id>/<type>-<millis>.<ext>"""
    millis = int(time.time() * 1000)
    return f"{user_id}/{doc_type.value}-{millis}.{ext}"


async def read_upload(file: UploadFile) -> Tuple[bytes, str]:
    """
    Read and validate an uploaded document.

    Returns:
        Tuple of (content, content_type)

    Raises:
        ValidationError on a missing file, unsupported type or oversize file
    """
    if not file or not file.filename:
        raise ValidationError("No file provided")

    content_type = (file.content_type or "").split(";")[0].strip().lower()
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise ValidationError(
            "Invalid file type. Allowed: PDF, DOC, DOCX, JPEG, PNG, WEBP, TXT"
        )

    content = await file.read()
    if not content:
        raise ValidationError("File is empty")
    if len(content) > max_file_size_bytes():
        raise ValidationError(f"File too large. Maximum size: {settings.max_upload_size_mb}MB")

    return content, content_type
