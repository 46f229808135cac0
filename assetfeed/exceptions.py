"""Custom exception hierarchy for AssetFeed."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Asset tree errors
    NODE_NOT_FOUND = "NODE_NOT_FOUND"
    FOLDER_NOT_FOUND = "FOLDER_NOT_FOUND"
    PAYLOAD_NOT_FOUND = "PAYLOAD_NOT_FOUND"

    # Feed errors
    FEED_NOT_FOUND = "FEED_NOT_FOUND"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Database errors
    DATABASE_ERROR = "DATABASE_ERROR"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class AssetFeedException(Exception):
    """
    Base exception for all AssetFeed errors.

    Provides structured error responses with:
    - Human-readable message
    - Machine-readable error code
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            status_code: HTTP status code to return
            details: Optional additional context/details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for JSON response.

        Returns:
            Dictionary with error, message, and details fields
        """
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class NodeNotFoundError(AssetFeedException):
    """File or folder not found in database."""

    def __init__(self, node_id: str):
        super().__init__(
            f"Asset not found: {node_id}",
            ErrorCode.NODE_NOT_FOUND,
            status_code=404,
            details={"node_id": node_id}
        )


class FolderNotFoundError(AssetFeedException):
    """Folder not found, or the id belongs to a file."""

    def __init__(self, folder_id: str):
        super().__init__(
            f"Folder not found: {folder_id}",
            ErrorCode.FOLDER_NOT_FOUND,
            status_code=404,
            details={"folder_id": folder_id}
        )


class PayloadNotFoundError(AssetFeedException):
    """The node exists but its stored bytes are gone."""

    def __init__(self, node_id: str):
        super().__init__(
            f"File not found on disk: {node_id}",
            ErrorCode.PAYLOAD_NOT_FOUND,
            status_code=404,
            details={"node_id": node_id}
        )


class FeedNotFoundError(AssetFeedException):
    """Public feed unknown or inactive."""

    def __init__(self, key: str):
        super().__init__(
            f"Feed not found: {key}",
            ErrorCode.FEED_NOT_FOUND,
            status_code=404,
            details={"feed": key}
        )


class ValidationError(AssetFeedException):
    """Validation failed for user input."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class DatabaseError(AssetFeedException):
    """Database operation failed."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            message,
            ErrorCode.DATABASE_ERROR,
            status_code=500,
            details=details
        )
