"""Custom exceptions for the intake pipeline.

All exceptions inherit from IntakeError so callers can catch the whole
family at the run or batch boundary and turn it into a result entry.

Exception classes include context dictionaries for structured logging
and debugging. Use the `context` property to access additional details.
"""

from typing import Any


class IntakeError(Exception):
    """Base exception for all intake errors.

    Attributes:
        context: Dictionary with additional error context

    Example:
        >>> try:
        ...     raise IntakeError("Something went wrong", context={"source": "github"})
        ... except IntakeError as e:
        ...     print(f"Error: {e}, Context: {e.context}")
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Initialize IntakeError.

        Args:
            message: Error message
            context: Optional dictionary with additional context
        """
        self.context = context or {}
        super().__init__(message)

    def with_context(self, **kwargs: Any) -> "IntakeError":
        """Add additional context to the exception.

        Args:
            **kwargs: Key-value pairs to add to context

        Returns:
            Self for method chaining
        """
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization.

        Returns:
            Dictionary with error type, message, and context
        """
        return {
            "error_type": self.__class__.__name__,
            "message": str(self),
            "context": self.context,
        }


class ConfigError(IntakeError):
    """Raised when configuration files are missing or malformed."""


# ============================================
# Source Errors
# ============================================


class SourceFetchError(IntakeError):
    """Raised when a source connector fails to fetch or parse its data.

    Attributes:
        source: Name of the failing source
        attempts: Number of attempts made before giving up
    """

    def __init__(
        self,
        source: str,
        message: str,
        attempts: int = 1,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize SourceFetchError.

        Args:
            source: Source name
            message: Error message
            attempts: Attempts made
            context: Additional context
        """
        ctx = context or {}
        ctx.update({"source": source, "attempts": attempts})
        super().__init__(f"{source}: {message}", context=ctx)
        self.source = source
        self.attempts = attempts


class ValidationError(IntakeError):
    """Raised when an item is missing a required field or has a malformed value.

    Attributes:
        field: Offending field name
    """

    def __init__(
        self,
        field: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ValidationError.

        Args:
            field: Offending field name
            message: Error message
            context: Additional context
        """
        ctx = context or {}
        ctx["field"] = field
        super().__init__(message, context=ctx)
        self.field = field


class OracleError(IntakeError):
    """Raised when the scoring oracle returns an unusable response."""


# ============================================
# Storage Errors
# ============================================


class StorageError(IntakeError):
    """Base exception for persistence failures."""

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        operation: str | None = None,
    ) -> None:
        """Initialize StorageError.

        Args:
            message: Error message
            context: Additional context
            operation: Store operation that failed (e.g., "insert", "update")
        """
        ctx = context or {}
        if operation:
            ctx["operation"] = operation
        super().__init__(message, context=ctx)


class StorageConflictError(StorageError):
    """Raised when a write violates a unique constraint.

    Attributes:
        model: Table or model that rejected the write
        field: Field (or field group) that caused the conflict
        value: Conflicting value
    """

    def __init__(
        self,
        model: str,
        field: str,
        value: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize StorageConflictError.

        Args:
            model: Name of the table or model
            field: Field that caused the conflict
            value: Value that already exists
        """
        ctx = context or {}
        ctx.update({"model": model, "field": field, "value": value})
        super().__init__(
            f"{model} with {field}={value} already exists", context=ctx, operation="insert"
        )
        self.model = model
        self.field = field
        self.value = value


class NotFoundError(StorageError):
    """Raised when a record is not found.

    Attributes:
        model: The model that was queried
        record_id: The ID that was not found
    """

    def __init__(
        self,
        model: str,
        record_id: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize NotFoundError.

        Args:
            model: Name of the model class
            record_id: ID that was not found
            context: Additional context
        """
        ctx = context or {}
        ctx.update({"model": model, "record_id": record_id})
        super().__init__(f"{model} with id={record_id} not found", context=ctx, operation="select")
        self.model = model
        self.record_id = record_id


__all__ = [
    "ConfigError",
    "IntakeError",
    "NotFoundError",
    "OracleError",
    "SourceFetchError",
    "StorageConflictError",
    "StorageError",
    "ValidationError",
]
