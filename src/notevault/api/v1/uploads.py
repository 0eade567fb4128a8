"""
Uploads API Router

Multipart file upload. Markdown uploads also appear in the note list.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile, status

from notevault.api.v1.deps import get_upload_repository
from notevault.core.errors import InvalidInput
from notevault.repositories.uploads import UploadRepository
from notevault.schemas.uploads import UploadResponse
from notevault.services.auth import require_auth

router = APIRouter()


@router.post(
    "/",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a file",
    dependencies=[Depends(require_auth)],
)
async def upload_file(
    file: UploadFile | None = File(default=None),
    repo: UploadRepository = Depends(get_upload_repository),
) -> UploadResponse:
    """
    Store an uploaded file under ``uploads/{timestamp}_{name}``.

    Rejections:
        400: no file or unusable filename.
        413: larger than MAX_UPLOAD_SIZE.
        415: extension not on the allowlist.
    """
    if file is None or not file.filename:
        raise InvalidInput("No file uploaded")

    try:
        return await repo.store(file.file, file.filename, file.size)
    finally:
        await file.close()
