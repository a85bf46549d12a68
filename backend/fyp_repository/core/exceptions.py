"""
Custom Exceptions for the Final-Year Project Repository
=======================================================

Services raise these; the handlers registered in main.py turn every one of
them into the standard response envelope:

    {"success": false, "message": ..., "error": <code>, "statusCode": ...}

Usage:
    from fyp_repository.core.exceptions import ProjectNotFoundError

    if not project:
        raise ProjectNotFoundError(project_id)
"""

from typing import Optional, Any, Dict


class RepositoryError(Exception):
    """Base exception for all repository errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


# ============================================
# Validation Errors (400)
# ============================================

class ValidationFailedError(RepositoryError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_FAILED", details=details)


class InvalidFileTypeError(ValidationFailedError):
    """Uploaded file is not a PDF"""

    def __init__(self, filename: str, content_type: Optional[str]):
        super().__init__("Only PDF files are allowed", field="file")
        self.code = "INVALID_FILE_TYPE"
        self.details.update({"filename": filename, "content_type": content_type})


class FileTooLargeError(ValidationFailedError):
    """Uploaded file exceeds MAX_FILE_SIZE"""

    def __init__(self, max_size: int):
        super().__init__(
            f"File exceeds maximum size of {max_size // 1024 // 1024}MB",
            field="file"
        )
        self.code = "FILE_TOO_LARGE"
        self.details["max_size"] = max_size


# ============================================
# Authentication Errors (401)
# ============================================

class UnauthorizedError(RepositoryError):
    """Bearer token missing, malformed, expired or badly signed"""

    status_code = 401

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message, code="UNAUTHORIZED")


class InvalidCredentialsError(RepositoryError):
    """Login failed. Same message for unknown email and wrong password."""

    status_code = 401

    def __init__(self):
        super().__init__("Invalid email or password", code="INVALID_CREDENTIALS")


# ============================================
# Resource Errors (404)
# ============================================

class ResourceNotFoundError(RepositoryError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str, message: Optional[str] = None):
        super().__init__(
            message or f"{resource_type} not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class ProjectNotFoundError(ResourceNotFoundError):
    """Project id does not resolve, or resolves to a project in the wrong status"""

    def __init__(self, project_id: str):
        super().__init__("Project", project_id)


class ProjectFileMissingError(ResourceNotFoundError):
    """Project record exists but its PDF is gone from the upload directory"""

    def __init__(self, project_id: str):
        super().__init__("File", project_id, message="File not found on server")
