"""
Structured exceptions and error payloads for Taskboard.

Provides consistent error handling across the client with:
- Custom exception classes, one per failed remote operation
- The structured error body returned by the remote store
- Mapping of HTTP failures onto those exceptions
"""

from typing import Any, Dict, Optional, List

import httpx
from pydantic import BaseModel, ValidationError as PydanticValidationError


# =============================================================================
# Error Response Schema
# =============================================================================

class ErrorDetail(BaseModel):
    """Detail of a single error."""
    loc: Optional[List[str]] = None
    msg: str
    type: str


class ErrorResponse(BaseModel):
    """Structured error body sent by the remote store."""
    error: str  # Error code (e.g., "not_found")
    message: str  # Human-readable message
    details: Optional[List[ErrorDetail]] = None


# =============================================================================
# Custom Exceptions
# =============================================================================

class TaskboardException(Exception):
    """Base exception for all Taskboard errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "internal_error",
        status_code: Optional[int] = None,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class FetchFailed(TaskboardException):
    """Listing projects or tasks failed."""

    def __init__(self, message: str = "Failed to fetch data", **kwargs):
        super().__init__(message, error_code="fetch_failed", **kwargs)


class CreateFailed(TaskboardException):
    """Creating a project or task failed."""

    def __init__(self, message: str = "Failed to create", **kwargs):
        super().__init__(message, error_code="create_failed", **kwargs)


class UpdateFailed(TaskboardException):
    """Editing a task failed."""

    def __init__(self, message: str = "Failed to update task", **kwargs):
        super().__init__(message, error_code="update_failed", **kwargs)


class DeleteFailed(TaskboardException):
    """Deleting a project or task failed."""

    def __init__(self, message: str = "Failed to delete", **kwargs):
        super().__init__(message, error_code="delete_failed", **kwargs)


class ReorderFailed(TaskboardException):
    """The server rejected a same-project reorder."""

    def __init__(self, message: str = "Failed to reorder tasks", **kwargs):
        super().__init__(message, error_code="reorder_failed", **kwargs)


class MoveFailed(TaskboardException):
    """The server rejected a cross-project move."""

    def __init__(self, message: str = "Failed to move task", **kwargs):
        super().__init__(message, error_code="move_failed", **kwargs)


class AuthRejected(TaskboardException):
    """Missing or rejected session token (HTTP 401)."""

    def __init__(self, message: str = "Authentication required", **kwargs):
        kwargs.setdefault("status_code", httpx.codes.UNAUTHORIZED)
        super().__init__(message, error_code="auth_rejected", **kwargs)


class InvalidTarget(TaskboardException):
    """A task was dropped on the project it already belongs to."""

    def __init__(self, task_id: str, project_id: str):
        super().__init__(
            message=f"Task {task_id} already belongs to project {project_id}",
            error_code="invalid_target",
        )
        self.task_id = task_id
        self.project_id = project_id


class NotFoundError(TaskboardException):
    """Entity is not held in the local cache."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            message=f"{resource} with ID {resource_id} not found",
            error_code="not_found",
        )
        self.resource = resource
        self.resource_id = resource_id


# =============================================================================
# HTTP error mapping
# =============================================================================

def error_message(response: httpx.Response, default: str) -> str:
    """Extract the human-readable message from an error response body."""
    try:
        payload = response.json()
    except ValueError:
        return default

    if isinstance(payload, dict):
        try:
            return ErrorResponse.model_validate(payload).message
        except PydanticValidationError:
            pass
        # Bare {"msg": ...} / {"message": ...} / {"detail": "..."} bodies
        for key in ("message", "msg", "detail"):
            if isinstance(payload.get(key), str):
                return payload[key]
    return default


def from_http_error(
    exc: httpx.HTTPError,
    error_cls: type[TaskboardException],
    default: str,
) -> TaskboardException:
    """
    Convert an httpx failure into the Taskboard exception for the operation.

    A 401 always becomes AuthRejected regardless of the operation.
    Transport errors (no response at all) keep the default message.
    """
    if isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        message = error_message(response, default)
        details = None
        try:
            details = ErrorResponse.model_validate(response.json()).model_dump()["details"]
        except (ValueError, PydanticValidationError):
            pass
        if response.status_code == httpx.codes.UNAUTHORIZED:
            return AuthRejected(message)
        return error_cls(message, status_code=response.status_code, details=details)

    return error_cls(f"{default}: {exc}")
