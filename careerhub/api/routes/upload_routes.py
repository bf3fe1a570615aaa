"""
Upload Routes

POST /upload - Upload a document (multipart: file, type) and get its public URL
"""

import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile

from careerhub.core.auth import get_current_user
from careerhub.schemas.schemas import DocumentType, UploadResponse
from careerhub.services.providers import DocumentStorage
from careerhub.services.storage_client import get_document_storage
from careerhub.utils.file_upload import build_storage_path, get_file_extension, read_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["Upload"])


@router.post("", response_model=UploadResponse)
async def upload_document(
    file: UploadFile = File(..., description="PDF, DOC, DOCX, JPEG, PNG, WEBP or TXT (max 5MB)"),
    type: DocumentType = Form(DocumentType.other),
    user: dict = Depends(get_current_user),
    storage: DocumentStorage = Depends(get_document_storage)
):
    """
    Store a document for the caller. Re-uploading the same path overwrites it.
    The returned URL is what applications and profiles reference.
    """
    content, content_type = await read_upload(file)
    path = build_storage_path(user["user_id"], type, get_file_extension(file.filename, content_type))

    url = storage.upload(path, content, content_type)
    logger.info("Uploaded %s (%d bytes) for user %s", path, len(content), user["user_id"])

    return UploadResponse(url=url)
