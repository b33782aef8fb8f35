"""
app/api/documents.py

Purpose: Document routes

- Upload and batch upload (admin only, multipart)
- Listing scoped by session role
- Inline preview and attachment download, streamed from storage
- Delete (admin only)
"""

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import StreamingResponse
from typing import List, Optional

from app.api.deps import (
    get_session_identity,
    get_settings,
    get_storage,
    require_admin_session,
)
from app.core.config import Settings
from app.core.exceptions import UploadError, ValidationError
from app.core.logging import get_logger
from app.models.session import SessionIdentity
from app.schemas.documents import (
    BatchUploadResponse,
    DocumentListResponse,
    DocumentResponse,
    UploadErrorItem,
)
from app.schemas.response import SuccessResponse
from app.services import document_service
from app.services.access_policy import ensure_can_read_document, resolve_listing_scope
from app.storage.base import Storage
from utils.constants import (
    INVALID_PHONE_MESSAGE,
    MISSING_PHONE_MESSAGE,
    NO_FILE_MESSAGE,
    NO_FILES_MESSAGE,
    PDF_CONTENT_TYPE,
    TOO_MANY_FILES_MESSAGE,
)
from utils.file_utils import content_disposition
from utils.validation_utils import normalize_phone_number, validate_phone_number

logger = get_logger(__name__)

router = APIRouter(prefix="/documents")


def _client_phone_or_400(raw: Optional[str]) -> str:
    phone = normalize_phone_number(raw)
    if not phone:
        raise ValidationError(MISSING_PHONE_MESSAGE)
    if not validate_phone_number(phone):
        raise ValidationError(INVALID_PHONE_MESSAGE)
    return phone


# =============================================================================
# UPLOAD
# =============================================================================

@router.post("/upload", response_model=DocumentResponse)
async def upload_document(
    file: Optional[UploadFile] = File(None),
    client_phone_number: Optional[str] = Form(None, alias="clientPhoneNumber"),
    identity: SessionIdentity = Depends(require_admin_session),
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_settings)
):
    phone = _client_phone_or_400(client_phone_number)
    if file is None:
        raise UploadError(NO_FILE_MESSAGE)

    document = await document_service.store_upload(
        storage,
        file,
        client_phone_number=phone,
        uploaded_by=identity.user_id,
        settings=settings,
    )
    return DocumentResponse(document=document)


@router.post("/batch-upload", response_model=BatchUploadResponse, response_model_exclude_none=True)
async def batch_upload_documents(
    files: Optional[List[UploadFile]] = File(None),
    client_phone_number: Optional[str] = Form(None, alias="clientPhoneNumber"),
    identity: SessionIdentity = Depends(require_admin_session),
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_settings)
):
    phone = _client_phone_or_400(client_phone_number)
    if not files:
        raise UploadError(NO_FILES_MESSAGE)
    if len(files) > settings.MAX_BATCH_FILES:
        raise UploadError(TOO_MANY_FILES_MESSAGE.format(limit=settings.MAX_BATCH_FILES))

    result = await document_service.store_batch(
        storage,
        files,
        client_phone_number=phone,
        uploaded_by=identity.user_id,
        settings=settings,
    )

    return BatchUploadResponse(
        documents=result.documents,
        errors=[
            UploadErrorItem(file_name=failure.file_name, error=failure.error)
            for failure in result.errors
        ] or None,
        total_files=result.total_files,
        success_count=result.success_count,
        error_count=result.error_count,
    )


# =============================================================================
# READ
# =============================================================================

@router.get("", response_model=DocumentListResponse)
async def list_documents(
    client_phone_number: Optional[str] = Query(None, alias="clientPhoneNumber"),
    identity: SessionIdentity = Depends(get_session_identity),
    storage: Storage = Depends(get_storage)
):
    requested = normalize_phone_number(client_phone_number) or None
    scope = resolve_listing_scope(identity, requested)

    if scope is None:
        documents = await storage.get_all_documents()
    else:
        documents = await storage.get_documents_by_client(scope)

    return DocumentListResponse(documents=documents)


async def _stream_document(
    document_id: str,
    disposition: str,
    identity: SessionIdentity,
    storage: Storage
) -> StreamingResponse:
    document = await document_service.get_document_or_404(storage, document_id)
    ensure_can_read_document(identity, document)

    stream = await document_service.open_document_content(storage, document)

    logger.debug(
        f"Streaming document ({disposition})",
        extra={"document_id": document.id, "user_id": identity.user_id}
    )
    return StreamingResponse(
        stream,
        media_type=document.content_type or PDF_CONTENT_TYPE,
        headers={
            "Content-Disposition": content_disposition(disposition, document.file_name),
            "Content-Length": str(document.file_size),
        },
    )


@router.get("/{document_id}/preview")
async def preview_document(
    document_id: str,
    identity: SessionIdentity = Depends(get_session_identity),
    storage: Storage = Depends(get_storage)
):
    return await _stream_document(document_id, "inline", identity, storage)


@router.get("/{document_id}/download")
async def download_document(
    document_id: str,
    identity: SessionIdentity = Depends(get_session_identity),
    storage: Storage = Depends(get_storage)
):
    return await _stream_document(document_id, "attachment", identity, storage)


# =============================================================================
# DELETE
# =============================================================================

@router.delete("/{document_id}", response_model=SuccessResponse)
async def delete_document(
    document_id: str,
    _: SessionIdentity = Depends(require_admin_session),
    storage: Storage = Depends(get_storage)
):
    await document_service.remove_document(storage, document_id)
    return SuccessResponse()
