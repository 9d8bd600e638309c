"""
Storage abstraction layer.
Provides one repository interface with interchangeable backends.
"""
from .interface import Repository
from .file_repository import FileRepository
from .sql_repository import SqlRepository, PostgresRepository, SqliteRepository
from .factory import get_repository

__all__ = [
    'Repository',
    'FileRepository',
    'SqlRepository',
    'PostgresRepository',
    'SqliteRepository',
    'get_repository',
]
