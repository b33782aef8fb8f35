"""
utils/validation_utils.py

Purpose: Input validation

- Phone number normalization and E.164 validation
- Password strength rules
- PDF detection (content type, extension, magic bytes)
- File name sanitization
"""

import re
from pathlib import PurePosixPath, PureWindowsPath
from typing import Optional, List

from utils.constants import PDF_CONTENT_TYPES, PDF_EXTENSION, PDF_MAGIC_BYTES


E164_PATTERN = re.compile(r"^\+[1-9]\d{6,14}$")
PHONE_SEPARATORS = re.compile(r"[\s\-\.\(\)]")

REGISTRATION_PASSWORD_MIN_LENGTH = 6
PROFILE_PASSWORD_MIN_LENGTH = 8

MAX_FILE_NAME_LENGTH = 255


def normalize_phone_number(phone: Optional[str]) -> str:
    """
    Strips whitespace and common separators from a phone number.

    Args:
        phone: Raw phone number as typed by a user

    Returns:
        Phone number with spaces, dashes, dots and parentheses removed
    """
    if not phone:
        return ""

    return PHONE_SEPARATORS.sub("", phone.strip())


def validate_phone_number(phone: Optional[str]) -> bool:
    """
    Validates a phone number in E.164 format.

    Format: "+" followed by 7-15 digits, the first digit 1-9
    Example: +15551234567

    Args:
        phone: Phone number string (normalized or not)

    Returns:
        True if valid, False otherwise
    """
    if not phone:
        return False

    return bool(E164_PATTERN.match(normalize_phone_number(phone)))


def password_strength_errors(password: str) -> List[str]:
    """
    Lists the rules a profile password breaks.

    Rules: at least 8 characters, one uppercase letter, one lowercase
    letter and one digit.

    Returns:
        Human-readable problems, empty when the password is acceptable
    """
    problems = []

    if len(password) < PROFILE_PASSWORD_MIN_LENGTH:
        problems.append(f"at least {PROFILE_PASSWORD_MIN_LENGTH} characters")
    if not re.search(r"[A-Z]", password):
        problems.append("an uppercase letter")
    if not re.search(r"[a-z]", password):
        problems.append("a lowercase letter")
    if not re.search(r"\d", password):
        problems.append("a digit")

    return problems


def is_pdf_content_type(content_type: Optional[str]) -> bool:
    """Checks the declared MIME type, ignoring parameters like charset."""
    if not content_type:
        return False

    return content_type.split(";")[0].strip().lower() in PDF_CONTENT_TYPES


def has_pdf_extension(file_name: Optional[str]) -> bool:
    if not file_name:
        return False

    return file_name.lower().endswith(PDF_EXTENSION)


def has_pdf_signature(header: bytes) -> bool:
    """
    Checks the leading bytes of a file for the PDF signature.

    Args:
        header: First bytes of the file (at least 5)

    Returns:
        True if the bytes start with "%PDF-"
    """
    return header.startswith(PDF_MAGIC_BYTES)


def sanitize_file_name(file_name: Optional[str], default: str = "document.pdf") -> str:
    """
    Reduces an untrusted upload name to a safe base name.

    Drops any directory part (POSIX or Windows), control characters and
    quotes, and trims the result to 255 characters keeping the extension.

    Args:
        file_name: Name sent by the client
        default: Name used when nothing usable remains

    Returns:
        Sanitized file name
    """
    if not file_name:
        return default

    name = PureWindowsPath(PurePosixPath(file_name).name).name
    name = re.sub(r"[\x00-\x1f\x7f\"]", "", name).strip()

    if name in ("", ".", ".."):
        return default

    if len(name) > MAX_FILE_NAME_LENGTH:
        stem, dot, suffix = name.rpartition(".")
        if dot and len(suffix) < 16:
            name = stem[:MAX_FILE_NAME_LENGTH - len(suffix) - 1] + "." + suffix
        else:
            name = name[:MAX_FILE_NAME_LENGTH]

    return name
