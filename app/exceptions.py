# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized error taxonomy for the todo client.
# Every error carries a machine-readable code and, where possible, a
# suggestion telling the user how to recover.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class TodoAppException(Exception):
    """
    Base exception for the todo client.

    All custom exceptions inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: str = "TODO_APP_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Auth Exceptions
# =============================================================================

class AuthError(TodoAppException):
    """Raised when sign-up or sign-in is rejected by the backend."""

    def __init__(self, message: str, action: str = "sign_in"):
        super().__init__(
            message=message,
            code="AUTH_ERROR",
            status_code=400,
            details={"action": action}
        )


class AuthPendingError(TodoAppException):
    """Raised when an auth request arrives while another one is in flight."""

    def __init__(self):
        super().__init__(
            message="An authentication request is already in progress",
            code="AUTH_PENDING",
            status_code=409,
            suggestion="Wait for the current request to finish"
        )


class NotAuthenticatedError(TodoAppException):
    """Raised when an endpoint needs a signed-in user and there is none."""

    def __init__(self):
        super().__init__(
            message="Not signed in",
            code="NOT_AUTHENTICATED",
            status_code=401,
            suggestion="Sign in with POST /api/v1/auth/signin"
        )


class SessionMissingError(TodoAppException):
    """Raised when the session vanished between render and submit."""

    def __init__(self):
        super().__init__(
            message="You must be logged in!",
            code="SESSION_MISSING",
            status_code=401,
            suggestion="Sign in again and resubmit the todo"
        )


# =============================================================================
# Todo Exceptions
# =============================================================================

class FetchError(TodoAppException):
    """Raised when the todo list cannot be loaded."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Fetch error: {error}",
            code="FETCH_ERROR",
            status_code=502,
            details={"error": error}
        )


class InsertError(TodoAppException):
    """Raised when a todo row cannot be inserted."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Error: {error}",
            code="INSERT_ERROR",
            status_code=502,
            suggestion="Try adding the todo again",
            details={"error": error}
        )


class UpdateError(TodoAppException):
    """Raised when a todo's completion flag cannot be updated."""

    def __init__(self, todo_id: int, error: str):
        super().__init__(
            message=f"Update error: {error}",
            code="UPDATE_ERROR",
            status_code=502,
            details={"todo_id": todo_id, "error": error}
        )


class AddInProgressError(TodoAppException):
    """Raised when a second add is submitted before the first one settles."""

    def __init__(self):
        super().__init__(
            message="A todo is already being added",
            code="ADD_IN_PROGRESS",
            status_code=409,
            suggestion="Wait for the current add to finish"
        )


class EmptyTaskError(TodoAppException):
    """Raised by the HTTP layer when a submitted task is blank."""

    def __init__(self):
        super().__init__(
            message="Task text is empty",
            code="EMPTY_TASK",
            status_code=400,
            suggestion="Type what needs to be done"
        )


class TodoNotFoundError(TodoAppException):
    """Raised when a todo id is not in the local list."""

    def __init__(self, todo_id: int):
        super().__init__(
            message=f"Todo not found: {todo_id}",
            code="TODO_NOT_FOUND",
            status_code=404,
            suggestion="Reload the list and pick an existing todo",
            details={"todo_id": todo_id}
        )


# =============================================================================
# Image Exceptions
# =============================================================================

class UploadError(TodoAppException):
    """Raised when an image cannot be written to storage."""

    def __init__(self, error: str, path: str | None = None):
        details = {"error": error}
        if path:
            details["path"] = path
        super().__init__(
            message=f"Image upload failed: {error}",
            code="UPLOAD_ERROR",
            status_code=502,
            suggestion="The todo was not saved. Try again or add it without an image",
            details=details
        )


class InvalidImageTypeError(TodoAppException):
    """Raised when the selected file is not an allowed image type."""

    def __init__(self, filename: str, content_type: str, allowed: list[str]):
        super().__init__(
            message=f"Invalid image type: {filename} ({content_type})",
            code="INVALID_IMAGE_TYPE",
            status_code=400,
            suggestion=f"Only these types are supported: {', '.join(allowed)}",
            details={"filename": filename, "content_type": content_type, "allowed_types": allowed}
        )


class ImageTooLargeError(TodoAppException):
    """Raised when the selected image exceeds the size limit."""

    def __init__(self, size_mb: float, max_mb: int):
        super().__init__(
            message=f"Image too large: {size_mb:.1f}MB (max: {max_mb}MB)",
            code="IMAGE_TOO_LARGE",
            status_code=413,
            suggestion=f"Pick an image smaller than {max_mb}MB",
            details={"size_mb": size_mb, "max_mb": max_mb}
        )


class NoPreviewError(TodoAppException):
    """Raised when a preview is requested but no image is selected."""

    def __init__(self):
        super().__init__(
            message="No image selected",
            code="NO_PREVIEW",
            status_code=404,
            suggestion="Select an image with POST /api/v1/draft/image"
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def todo_app_exception_handler(
    request: Request,
    exc: TodoAppException
) -> JSONResponse:
    """
    Convert TodoAppException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle Pydantic validation errors."""
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": str(exc)
        }
    )
