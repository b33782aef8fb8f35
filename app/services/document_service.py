"""
app/services/document_service.py

Purpose: Document upload lifecycle and retrieval

- Upload: received (temp file) -> validated -> persisted, or rejected and purged
- Batch upload: files handled one by one, each success or failure recorded
  on its own; a failing file never stops the rest
- Every temp file is removed whatever happens to its upload
- Content streaming and deletion for the document routes
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import AsyncIterator, List, Optional, Sequence

from fastapi import UploadFile

from app.core.config import Settings
from app.core.exceptions import (
    DocPortalError,
    ResourceNotFoundError,
    StorageError,
    UploadError,
)
from app.core.logging import get_logger
from app.models.document import Document
from app.storage.base import Storage
from utils.constants import (
    DOCUMENT_CONTENT_MISSING_MESSAGE,
    DOCUMENT_NOT_FOUND_MESSAGE,
    EMPTY_FILE_MESSAGE,
    FILE_TOO_LARGE_MESSAGE,
    NO_FILE_MESSAGE,
    ONLY_PDF_MESSAGE,
    PDF_CONTENT_TYPE,
    UPLOAD_FAILED_MESSAGE,
)
from utils.file_utils import FileTooLargeError, remove_temp_file, spool_to_temp_file
from utils.validation_utils import (
    has_pdf_extension,
    has_pdf_signature,
    is_pdf_content_type,
    sanitize_file_name,
)

logger = get_logger(__name__)


@dataclass
class UploadFailure:
    file_name: str
    error: str


@dataclass
class BatchUploadResult:
    total_files: int
    documents: List[Document] = field(default_factory=list)
    errors: List[UploadFailure] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.documents)

    @property
    def error_count(self) -> int:
        return len(self.errors)


def check_declared_type(upload: UploadFile) -> str:
    """
    Rejects uploads that do not claim to be PDFs, before anything is spooled.

    Returns:
        Sanitized file name

    Raises:
        UploadError: If the name is missing, or the MIME type or extension is not PDF
    """
    if upload is None or not upload.filename:
        raise UploadError(NO_FILE_MESSAGE)

    file_name = sanitize_file_name(upload.filename)

    if not is_pdf_content_type(upload.content_type) or not has_pdf_extension(file_name):
        raise UploadError(ONLY_PDF_MESSAGE)

    return file_name


async def store_upload(
    storage: Storage,
    upload: UploadFile,
    client_phone_number: str,
    uploaded_by: str,
    settings: Settings
) -> Document:
    """
    Runs one file through the upload lifecycle.

    Args:
        storage: Storage backend
        upload: Multipart file from the request
        client_phone_number: Normalized owner phone number
        uploaded_by: Id of the admin performing the upload
        settings: Upload limits and temp directory

    Returns:
        The stored document

    Raises:
        UploadError: Non-PDF, empty or oversized file (nothing is stored)
        StorageError: The backend failed to persist the file
    """
    file_name = check_declared_type(upload)
    temp_path: Optional[Path] = None

    try:
        try:
            temp_path, size, header = await spool_to_temp_file(
                upload.file,
                settings.UPLOAD_TMP_DIR,
                settings.max_upload_bytes,
            )
        except FileTooLargeError:
            raise UploadError(
                FILE_TOO_LARGE_MESSAGE.format(limit_mb=settings.MAX_UPLOAD_SIZE_MB),
                status_code=413,
            )
        except OSError as e:
            raise StorageError(f"Failed to spool upload to temp file: {e}") from e

        if size == 0:
            raise UploadError(EMPTY_FILE_MESSAGE)
        if not has_pdf_signature(header):
            raise UploadError(ONLY_PDF_MESSAGE)

        try:
            with temp_path.open("rb") as content:
                document = await storage.create_document(
                    file_name=file_name,
                    client_phone_number=client_phone_number,
                    file_size=size,
                    uploaded_by=uploaded_by,
                    content=content,
                    content_type=PDF_CONTENT_TYPE,
                )
        except OSError as e:
            raise StorageError(f"Failed to read temp file: {e}") from e

        logger.info(
            "Document uploaded",
            extra={"document_id": document.id, "user_id": uploaded_by, "file_name": file_name}
        )
        return document

    finally:
        if temp_path is not None:
            remove_temp_file(temp_path)


async def store_batch(
    storage: Storage,
    uploads: Sequence[UploadFile],
    client_phone_number: str,
    uploaded_by: str,
    settings: Settings
) -> BatchUploadResult:
    """
    Uploads files one after another, recording each outcome separately.

    Returns:
        Stored documents plus one failure entry per rejected file
    """
    result = BatchUploadResult(total_files=len(uploads))

    for index, upload in enumerate(uploads, start=1):
        display_name = (upload.filename if upload is not None else None) or f"file #{index}"

        try:
            document = await store_upload(storage, upload, client_phone_number, uploaded_by, settings)
            result.documents.append(document)

        except StorageError as e:
            logger.error(f"Batch upload storage failure for {display_name}: {e.message}", exc_info=e)
            result.errors.append(UploadFailure(file_name=display_name, error=UPLOAD_FAILED_MESSAGE))

        except DocPortalError as e:
            result.errors.append(UploadFailure(file_name=display_name, error=e.message))

        except Exception as e:
            logger.error(f"Unexpected batch upload failure for {display_name}: {e}", exc_info=True)
            result.errors.append(UploadFailure(file_name=display_name, error=UPLOAD_FAILED_MESSAGE))

    logger.info(
        f"Batch upload finished: {result.success_count}/{result.total_files} stored",
        extra={"user_id": uploaded_by}
    )
    return result


async def get_document_or_404(storage: Storage, document_id: str) -> Document:
    document = await storage.get_document(document_id)
    if document is None:
        raise ResourceNotFoundError(DOCUMENT_NOT_FOUND_MESSAGE)
    return document


async def open_document_content(storage: Storage, document: Document) -> AsyncIterator[bytes]:
    """
    Opens a document's bytes for streaming.

    Raises:
        StorageError: If the metadata exists but the content does not
    """
    stream = await storage.open_document_stream(document.content_ref)
    if stream is None:
        raise StorageError(
            DOCUMENT_CONTENT_MISSING_MESSAGE,
            details={"document_id": document.id, "content_ref": document.content_ref},
        )
    return stream


async def remove_document(storage: Storage, document_id: str) -> None:
    """
    Deletes a document's metadata and content.

    Raises:
        ResourceNotFoundError: If the document does not exist or is already gone
    """
    await get_document_or_404(storage, document_id)

    # A concurrent delete may have won between the lookup and here
    if not await storage.delete_document(document_id):
        raise ResourceNotFoundError(DOCUMENT_NOT_FOUND_MESSAGE)

    logger.info("Document deleted", extra={"document_id": document_id})
