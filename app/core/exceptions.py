from typing import Optional, Any

class DocPortalError(Exception):
    """
    Base exception for the document portal.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)

class ValidationError(DocPortalError):
    """
    Raised when input validation fails.
    """
    def __init__(self, message: str = "Validation error", details: Optional[Any] = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=400, details=details)

class AuthenticationError(DocPortalError):
    """
    Raised when the request has no valid session or credentials are wrong.
    """
    def __init__(self, message: str = "Authentication required", details: Optional[Any] = None):
        super().__init__(message, code="AUTHENTICATION_FAILED", status_code=401, details=details)

class AuthorizationError(DocPortalError):
    """
    Raised when an authenticated session is not allowed to perform an action.
    """
    def __init__(self, message: str = "Access denied", details: Optional[Any] = None):
        super().__init__(message, code="FORBIDDEN", status_code=403, details=details)

class ResourceNotFoundError(DocPortalError):
    """
    Raised when a requested resource is not found.
    """
    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(message, code="NOT_FOUND", status_code=404, details=details)

class ConflictError(DocPortalError):
    """
    Raised when a phone number is already registered.
    """
    def __init__(self, message: str = "User with this phone number already exists", details: Optional[Any] = None):
        super().__init__(message, code="CONFLICT", status_code=400, details=details)

class StorageError(DocPortalError):
    """
    Raised when the backing store is unavailable or an I/O operation fails.
    The message is logged but never sent to the client.
    """
    def __init__(self, message: str = "Storage error", details: Optional[Any] = None):
        super().__init__(message, code="STORAGE_ERROR", status_code=500, details=details)

class UploadError(DocPortalError):
    """
    Raised when an uploaded file is rejected (wrong type, empty, too large).
    """
    def __init__(self, message: str = "Upload rejected", status_code: int = 400, details: Optional[Any] = None):
        super().__init__(message, code="UPLOAD_ERROR", status_code=status_code, details=details)
