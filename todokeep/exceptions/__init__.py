"""
Standard exceptions for the persistence layer.
"""
from todokeep.exceptions.errors import (
    ServiceError,
    NotFoundError,
    ConfigurationError,
    BackendUnavailableError,
    StorageIOError,
    SerializationError,
    DatabaseError,
    TaskNotFoundError,
    TaskIdExhaustedError,
)

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
