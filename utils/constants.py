"""
utils/constants.py

Purpose: Centralized static content

- User-facing error messages
- File type constants
- Collection names

(Prevents hardcoding across the codebase)
"""

# ============================================================
# FILE TYPES
# ============================================================

PDF_CONTENT_TYPE = "application/pdf"
PDF_CONTENT_TYPES = {"application/pdf", "application/x-pdf"}
PDF_EXTENSION = ".pdf"
PDF_MAGIC_BYTES = b"%PDF-"

# Read/write chunk size for spooling and streaming content
CHUNK_SIZE = 256 * 1024

# ============================================================
# COLLECTIONS
# ============================================================

ADMIN_COLLECTION = "admin"
CLIENTS_COLLECTION = "clients"
DOCUMENTS_COLLECTION = "documents"
LEGACY_USERS_COLLECTION = "users"

# ============================================================
# AUTH MESSAGES
# ============================================================

INVALID_CREDENTIALS_MESSAGE = "Invalid phone number or password"
NOT_AUTHENTICATED_MESSAGE = "Not authenticated"
SESSION_USER_MISSING_MESSAGE = "Session is no longer valid"
ADMIN_ONLY_MESSAGE = "Admin access required"
PHONE_TAKEN_MESSAGE = "User with this phone number already exists"

INVALID_PHONE_MESSAGE = "Please enter a valid phone number with country code (e.g., +1234567890)"
MISSING_PHONE_MESSAGE = "Client phone number is required"
REGISTRATION_PASSWORD_MESSAGE = "Password must be at least 6 characters"
NO_PROFILE_CHANGES_MESSAGE = "Provide at least one of name, phoneNumber or password"
EMPTY_NAME_MESSAGE = "Name cannot be empty"

# ============================================================
# DOCUMENT MESSAGES
# ============================================================

DOCUMENT_NOT_FOUND_MESSAGE = "Document not found"
DOCUMENT_ACCESS_DENIED_MESSAGE = "You do not have access to this document"
FOREIGN_DOCUMENTS_MESSAGE = "You can only view your own documents"
DOCUMENT_CONTENT_MISSING_MESSAGE = "Document content is missing from storage"

NO_FILE_MESSAGE = "No file uploaded"
NO_FILES_MESSAGE = "No files uploaded"
ONLY_PDF_MESSAGE = "Only PDF files are allowed"
EMPTY_FILE_MESSAGE = "Uploaded file is empty"
FILE_TOO_LARGE_MESSAGE = "File exceeds the {limit_mb}MB size limit"
TOO_MANY_FILES_MESSAGE = "A batch upload accepts at most {limit} files"
UPLOAD_FAILED_MESSAGE = "Failed to upload document"
