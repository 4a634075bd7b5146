"""Custom exception hierarchy for DocTree."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Identity
    UNAUTHENTICATED = "UNAUTHENTICATED"
    UNAUTHORIZED = "UNAUTHORIZED"

    # Lookup errors
    NODE_NOT_FOUND = "NODE_NOT_FOUND"
    TAG_NOT_FOUND = "TAG_NOT_FOUND"
    VERSION_NOT_FOUND = "VERSION_NOT_FOUND"

    # Operation errors
    INVALID_STATE = "INVALID_STATE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFLICT = "CONFLICT"

    # Generic errors
    DATABASE_ERROR = "DATABASE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class DocTreeException(Exception):
    """
    Base exception for all DocTree errors.

    Carries a human-readable message, a machine-readable error code,
    the HTTP status code to answer with, and optional details.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class AuthenticationError(DocTreeException):
    """No acting identity could be resolved."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(
            message,
            ErrorCode.UNAUTHENTICATED,
            status_code=401,
        )


class ForbiddenError(DocTreeException):
    """Identity resolved but it may not touch the node."""

    def __init__(self, message: str = "Not authorized"):
        super().__init__(
            message,
            ErrorCode.UNAUTHORIZED,
            status_code=403,
        )


class NodeNotFoundError(DocTreeException):
    """Node missing or already soft-deleted."""

    def __init__(self, node_id: str, message: Optional[str] = None):
        super().__init__(
            message or f"Node not found: {node_id}",
            ErrorCode.NODE_NOT_FOUND,
            status_code=404,
            details={"node_id": node_id}
        )


class TagNotFoundError(DocTreeException):
    """Tag not found in database."""

    def __init__(self, tag_id: str):
        super().__init__(
            f"Tag not found: {tag_id}",
            ErrorCode.TAG_NOT_FOUND,
            status_code=404,
            details={"tag_id": tag_id}
        )


class VersionNotFoundError(DocTreeException):
    """Version not found in database."""

    def __init__(self, version_id: str):
        super().__init__(
            f"Version not found: {version_id}",
            ErrorCode.VERSION_NOT_FOUND,
            status_code=404,
            details={"version_id": version_id}
        )


class InvalidStateError(DocTreeException):
    """Operation not allowed for the node in its current state."""

    def __init__(self, message: str, node_id: Optional[str] = None):
        details = {"node_id": node_id} if node_id else {}
        super().__init__(
            message,
            ErrorCode.INVALID_STATE,
            status_code=400,
            details=details
        )


class ValidationError(DocTreeException):
    """Validation failed for user input."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class ConflictError(DocTreeException):
    """Update lost a race against a concurrent modification."""

    def __init__(self, node_id: str, message: str = "Document was modified concurrently, retry the save"):
        super().__init__(
            message,
            ErrorCode.CONFLICT,
            status_code=409,
            details={"node_id": node_id}
        )
