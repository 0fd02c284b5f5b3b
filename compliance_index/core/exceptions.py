"""
Exception hierarchy for the compliance indexing service.

Provides layered exception structure for domain-specific errors.
Each exception carries the HTTP status it maps to and the message that is
safe to return to callers; `details` stays server-side for logging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class IndexingException(Exception):
    """Base exception for all indexing service errors."""

    status_code: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    @property
    def public_message(self) -> str:
        """Message returned in the HTTP response body."""
        return self.message

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class AuthorizationError(IndexingException):
    """Raised when the request carries no acceptable credential."""

    status_code = 401

    def __init__(self, reason: str = "Unauthorized", details: dict[str, Any] | None = None) -> None:
        super().__init__(reason, details)

    @property
    def public_message(self) -> str:
        # The concrete reason is logged, never echoed back.
        return "Unauthorized"


class RequestValidationError(IndexingException):
    """Raised when the request body is missing required fields."""

    status_code = 400


class DocumentNotFoundError(IndexingException):
    """Raised when a source document cannot be found."""

    status_code = 404

    def __init__(self, queue_id: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize document not found error.

        Args:
            queue_id: Reference id of the missing source document
            details: Additional context
        """
        details = details or {}
        details["queue_id"] = queue_id
        super().__init__(f"Queue entry not found: {queue_id}", details)


class StateConflictError(IndexingException):
    """Raised when a source document is not in an indexable status."""

    status_code = 409

    def __init__(self, status: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["status"] = status
        super().__init__(
            f"Cannot generate embeddings for entry with status '{status}'. "
            "Expected 'parsed' or 'embedded'.",
            details,
        )


class TenantResolutionError(IndexingException):
    """Raised when no owning organization can be resolved for a document."""

    status_code = 400

    def __init__(self, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            "Cannot resolve organization_id for this document. Check uploaded_by user profile.",
            details,
        )


class NoIndexableContentError(IndexingException):
    """Raised when neither extraction nor serialization produced content."""

    status_code = 400

    def __init__(self, details: dict[str, Any] | None = None) -> None:
        super().__init__("No text extractable from document", details)


class ExtractionFailure(IndexingException):
    """Raised when PDF text extraction fails or times out (recovered by fallback)."""


class StorageError(IndexingException):
    """Raised when a signed read URL cannot be issued."""


class EmbeddingError(IndexingException):
    """Raised when embedding generation fails for the whole document."""


class PersistenceError(IndexingException):
    """Raised when the chunk index write fails; document status is unchanged."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize persistence error.

        Args:
            message: Error message
            operation: Operation that failed (lock, delete, insert, status, audit, commit)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)
