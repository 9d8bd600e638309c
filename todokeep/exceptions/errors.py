"""
Standard Exception Hierarchy for todokeep

All persistence errors inherit from ServiceError so callers at the command line
boundary can catch one type, print the message and exit non-zero. The core never
terminates the process itself.
"""
from typing import Any


# ============================================================================
# Base Exception Class
# ============================================================================

class ServiceError(Exception):
    """Base exception for all todokeep errors.

    Attributes:
        message: Human-readable error message
        context: Dictionary of additional context
        original_error: Optional original exception that caused this error
    """

    def __init__(
        self,
        message: str,
        *,
        context: dict[str, Any] | None = None,
        original_error: Exception | None = None
    ):
        """Initialize service error.

        Args:
            message: Human-readable error message
            context: Optional dictionary of additional context
            original_error: Optional original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.original_error = original_error

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for serialization.

        Returns:
            Dictionary representation of the exception
        """
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
        }
        if self.context:
            result["context"] = self.context
        if self.original_error:
            result["original_error"] = {
                "type": type(self.original_error).__name__,
                "message": str(self.original_error)
            }
        return result


# ============================================================================
# Common Exception Types
# ============================================================================

class NotFoundError(ServiceError):
    """Raised when a requested resource is not found.

    Attributes:
        resource_type: Type of resource (e.g., "Task")
        resource_id: ID of the resource that was not found
    """

    def __init__(
        self,
        resource_type: str,
        resource_id: str | int,
        *,
        message: str | None = None,
        context: dict[str, Any] | None = None
    ):
        if message is None:
            message = f"No {resource_type.lower()} with id {resource_id} found"

        super().__init__(message, context=context)
        self.resource_type = resource_type
        self.resource_id = str(resource_id)
        self.context.setdefault("resource_type", resource_type)
        self.context.setdefault("resource_id", str(resource_id))


class ConfigurationError(ServiceError):
    """Raised when the storage configuration is unsupported or malformed.

    Attributes:
        setting: Optional name of the offending setting
        value: Optional offending value
    """

    def __init__(
        self,
        message: str,
        *,
        setting: str | None = None,
        value: Any = None,
        context: dict[str, Any] | None = None,
        original_error: Exception | None = None
    ):
        super().__init__(message, context=context, original_error=original_error)
        self.setting = setting
        self.value = value
        if setting is not None:
            self.context.setdefault("setting", setting)
        if value is not None:
            self.context.setdefault("value", str(value))


class BackendUnavailableError(ServiceError):
    """Raised when a storage backend cannot be constructed.

    Covers a missing optional driver as well as a connection string that
    the driver refuses to parse.

    Attributes:
        backend: Name of the backend (e.g., "postgresql", "sqlite")
    """

    def __init__(
        self,
        backend: str,
        message: str,
        *,
        context: dict[str, Any] | None = None,
        original_error: Exception | None = None
    ):
        super().__init__(message, context=context, original_error=original_error)
        self.backend = backend
        self.context.setdefault("backend", backend)


class StorageIOError(ServiceError):
    """Raised when opening, reading or writing a storage file fails.

    Attributes:
        path: Path of the file involved
    """

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        context: dict[str, Any] | None = None,
        original_error: Exception | None = None
    ):
        super().__init__(message, context=context, original_error=original_error)
        self.path = path
        if path is not None:
            self.context.setdefault("path", path)


class SerializationError(ServiceError):
    """Raised when persisted content cannot be encoded or decoded."""


class DatabaseError(ServiceError):
    """Raised when a database operation fails.

    Attributes:
        operation: Optional database operation that failed (e.g., "INSERT", "SELECT")
    """

    def __init__(
        self,
        message: str,
        *,
        original_error: Exception | None = None,
        operation: str | None = None,
        context: dict[str, Any] | None = None
    ):
        super().__init__(message, context=context, original_error=original_error)
        self.operation = operation
        if operation is not None:
            self.context.setdefault("operation", operation)


# ============================================================================
# Service-Specific Exceptions
# ============================================================================

class TaskNotFoundError(NotFoundError):
    """Raised when a task is not found."""

    def __init__(self, task_id: str | int, **kwargs):
        super().__init__("Task", task_id, **kwargs)
        self.task_id = task_id  # Convenience attribute


class TaskIdExhaustedError(ServiceError):
    """Raised when the next task id would not fit in a signed 32-bit integer."""

    def __init__(self, last_id: int, **kwargs):
        super().__init__(f"No task id left after {last_id}", **kwargs)
        self.last_id = last_id
        self.context.setdefault("last_id", last_id)


# ============================================================================
# Exports
# ============================================================================

__all__ = [
    "ServiceError",
    "NotFoundError",
    "ConfigurationError",
    "BackendUnavailableError",
    "StorageIOError",
    "SerializationError",
    "DatabaseError",
    "TaskNotFoundError",
    "TaskIdExhaustedError",
]
