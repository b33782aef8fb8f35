"""
utils/file_utils.py

Purpose: Temporary upload files

- Spools incoming uploads to the temp directory under a unique name
- Enforces the size limit while copying
- Removes temp files without ever raising
- Content-Disposition values for downloads
"""

import asyncio
import logging
from pathlib import Path
from typing import BinaryIO, Tuple
from urllib.parse import quote
from uuid import uuid4

from utils.constants import CHUNK_SIZE

logger = logging.getLogger("docportal.utils.file_utils")


class FileTooLargeError(Exception):
    """Raised while spooling when a file grows past the size limit."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"File exceeds {limit} bytes")


def _copy_with_limit(source: BinaryIO, target_path: Path, max_bytes: int) -> Tuple[int, bytes]:
    written = 0
    header = b""

    with target_path.open("wb") as buffer:
        while True:
            chunk = source.read(CHUNK_SIZE)
            if not chunk:
                break
            written += len(chunk)
            if written > max_bytes:
                raise FileTooLargeError(max_bytes)
            if len(header) < 8:
                header += chunk[:8 - len(header)]
            buffer.write(chunk)

    return written, header


async def spool_to_temp_file(source: BinaryIO, directory: Path, max_bytes: int) -> Tuple[Path, int, bytes]:
    """
    Copies an upload stream into a uniquely named temp file.

    The temp path is created before copying starts; if copying fails the
    partial file is removed before the error propagates.

    Args:
        source: Readable binary stream (e.g. UploadFile.file)
        directory: Temp directory, created if missing
        max_bytes: Size limit; FileTooLargeError beyond it

    Returns:
        (temp path, bytes written, first bytes of the file)
    """
    directory.mkdir(parents=True, exist_ok=True)
    temp_path = directory / f"{uuid4().hex}.part"

    try:
        size, header = await asyncio.to_thread(_copy_with_limit, source, temp_path, max_bytes)
    except BaseException:
        remove_temp_file(temp_path)
        raise

    return temp_path, size, header


def remove_temp_file(file_path: Path) -> bool:
    """
    Safely deletes a temp file if it exists.

    Returns:
        True if the file is gone afterwards
    """
    try:
        file_path.unlink(missing_ok=True)
        return True
    except OSError as e:
        logger.error(f"Error deleting temp file {file_path}: {e}")
        return False


def content_disposition(disposition: str, file_name: str) -> str:
    """
    Builds a Content-Disposition header value for a stored file name.

    The quoted filename is an ASCII-only fallback; filename* carries the
    original name percent-encoded (RFC 5987).
    """
    fallback = file_name.encode("ascii", "ignore").decode("ascii")
    fallback = fallback.replace("\\", "").replace('"', "").strip() or "document.pdf"
    encoded = quote(file_name, safe="")
    return f"{disposition}; filename=\"{fallback}\"; filename*=utf-8''{encoded}"
