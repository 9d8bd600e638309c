"""
Backend selection: map a storage configuration to a repository.
"""
import logging

from todokeep.config import StorageConfig, StorageFormat
from todokeep.storage.file_repository import FileRepository
from todokeep.storage.interface import Repository
from todokeep.storage.sql_repository import PostgresRepository, SqliteRepository

logger = logging.getLogger(__name__)


def get_postgres_repository(config: StorageConfig) -> Repository:
    return PostgresRepository(config.storage)


def get_sqlite_repository(config: StorageConfig) -> Repository:
    return SqliteRepository(config.storage)


def get_file_repository(config: StorageConfig) -> Repository:
    return FileRepository(config.file_path())


_BACKENDS = {
    StorageFormat.FILE: get_file_repository,
    StorageFormat.POSTGRES: get_postgres_repository,
    StorageFormat.SQLITE: get_sqlite_repository,
}


def get_repository(config: StorageConfig) -> Repository:
    """
    Create the repository selected by the configuration's URL scheme.

    There is no retry: any failure is raised to the caller, which decides
    whether to terminate.

    Args:
        config: Storage configuration

    Returns:
        Repository for the configured backend

    Raises:
        ConfigurationError: If the scheme is unsupported or the URL has no usable path
        BackendUnavailableError: If the backend's driver is missing or rejects the URL
        StorageIOError: If the tasks file cannot be opened
    """
    storage_format = config.storage_format()
    logger.debug(f"Creating {storage_format.value} repository")
    return _BACKENDS[storage_format](config)
