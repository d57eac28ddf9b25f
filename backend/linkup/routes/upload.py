"""
LinkUp Backend: Upload Route Handlers
=======================================

What:  POST /upload stores one image; GET /public/uploads/{filename} serves it.
Why:   Profile images are uploaded first, then the returned URL is sent as
       `profileImage` on registration.

Request Flow (POST /upload):
    1. Client sends multipart/form-data with a 'file' field
    2. No field, a plain text field, or a file with no filename → 400 "No file uploaded"
    3. FileService validates and writes the bytes
    4. Response URL is built from this request's scheme and host

Failures are raised as UploadError and rendered by the global handler as
400 {"success": false, "message": ..., "error": ...}.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse
from starlette.datastructures import UploadFile

from linkup.dependencies import get_file_service
from linkup.exceptions import UploadError
from linkup.schemas.common import ErrorResponse, UploadErrorResponse, UploadResponse
from linkup.services.file_service import FileService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Upload"])

# Mounted under settings.static_url_path by create_app()
files_router = APIRouter(tags=["Upload"])


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={
        400: {"description": "No file, rejected file or storage failure", "model": UploadErrorResponse},
    },
    summary="Upload a profile image",
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "multipart/form-data": {
                    "schema": {
                        "type": "object",
                        "properties": {"file": {"type": "string", "format": "binary"}},
                        "required": ["file"],
                    }
                }
            },
        }
    },
)
async def upload_user_image(
    request: Request,
    files: FileService = Depends(get_file_service),
) -> UploadResponse:
    """
    Store the uploaded image and return its absolute URL.

    The form is parsed here rather than through an `UploadFile` parameter:
    a missing `file` field, a plain text `file` field and a non-multipart
    body all answer "No file uploaded" in the upload error shape.
    The whole file is read into memory; FileService bounds its size.
    """
    form = await request.form()
    try:
        file = form.get("file")
        if not isinstance(file, UploadFile) or not file.filename:
            raise UploadError(message="No file uploaded")

        content = await file.read()
        logger.info("Received upload: filename=%s, size=%d bytes", file.filename, len(content))
        filename = await files.validate_and_store(file.filename, content)
    finally:
        await form.close()

    return UploadResponse(success=True, url=files.public_url(str(request.base_url), filename))


@files_router.get(
    "/{filename:path}",
    summary="Serve an uploaded file",
    responses={
        200: {"description": "The stored file"},
        400: {"description": "Invalid file path", "model": ErrorResponse},
        404: {"description": "File not found", "model": ErrorResponse},
    },
)
async def serve_uploaded_file(
    filename: str,
    files: FileService = Depends(get_file_service),
) -> FileResponse:
    """
    Serve a stored upload verbatim.

    Media type is guessed from the extension; paths resolving outside the
    upload directory are refused.
    """
    path = files.resolve_stored_file(filename)
    return FileResponse(path=str(path), headers={"Cache-Control": "public, max-age=86400"})
