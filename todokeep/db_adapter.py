"""
Database adapter abstraction layer for supporting multiple database backends.

Each adapter owns the driver import, a lazily-filled connection pool and the
small dialect differences (placeholders, primary key type) between backends.
Creating an adapter never opens a connection; the first query does.
"""
import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import unquote

from todokeep.exceptions import BackendUnavailableError, ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONNECTIONS = 10


class DatabaseType(Enum):
    """Database type enumeration."""
    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"


class BaseDatabaseAdapter(ABC):
    """Abstract base class for database adapters."""

    db_type: DatabaseType
    # Exception types raised by the driver, wrapped into DatabaseError by repositories
    driver_errors: Tuple[type, ...] = ()

    def __init__(self, connection_string: str, max_connections: int = DEFAULT_MAX_CONNECTIONS):
        """
        Initialize database adapter.

        Args:
            connection_string: Database connection URL
            max_connections: Upper bound on connections handed out at once
        """
        self.connection_string = connection_string
        self.max_connections = max_connections
        # Callers beyond max_connections wait here instead of failing
        self._slots = threading.BoundedSemaphore(max_connections)

    @abstractmethod
    def _acquire(self):
        """Take a connection from the pool, opening one if needed."""
        pass

    @abstractmethod
    def _release(self, conn):
        """Hand a connection back to the pool."""
        pass

    @abstractmethod
    def close_all(self):
        """Close every pooled connection."""
        pass

    @abstractmethod
    def cursor(self, conn):
        """Open a cursor whose rows convert to dicts."""
        pass

    @abstractmethod
    def normalize_query(self, query: str) -> str:
        """Normalize SQL query for this database backend."""
        pass

    @abstractmethod
    def get_pk_type(self) -> str:
        """Get primary key type definition."""
        pass

    def connect(self):
        """Get a database connection, waiting for a free slot if the pool is busy."""
        self._slots.acquire()
        try:
            return self._acquire()
        except BaseException:
            self._slots.release()
            raise

    def close(self, conn):
        """Return a database connection obtained from ``connect``."""
        try:
            self._release(conn)
        finally:
            self._slots.release()

    @contextmanager
    def connection(self):
        """Context manager around ``connect``/``close``."""
        conn = self.connect()
        try:
            yield conn
        finally:
            self.close(conn)

    def execute(self, cursor, query: str, params: Tuple = None):
        """Execute a query with parameters."""
        normalized_query = self.normalize_query(query)
        logger.debug(f"Executing SQL: {normalized_query} params={params}")
        if params:
            return cursor.execute(normalized_query, params)
        else:
            return cursor.execute(normalized_query)

    @staticmethod
    def row_to_dict(row) -> Dict[str, Any]:
        return dict(row)


def sqlite_path_from_url(url: str) -> str:
    """
    Derive the SQLite database path from a ``sqlite:`` URL.

    Accepted forms: ``sqlite:///abs/path.db``, ``sqlite://relative.db``,
    ``sqlite:relative.db`` and ``sqlite::memory:``. Query parameters are ignored.

    Raises:
        ConfigurationError: If the URL carries no path
    """
    scheme, sep, rest = url.partition(":")
    if not sep or scheme.lower() != DatabaseType.SQLITE.value:
        raise ConfigurationError(f"'{url}' is not a sqlite URL", setting="storage", value=url)
    if rest.startswith("//"):
        rest = rest[2:]
    path = unquote(rest.split("?", 1)[0])
    if not path:
        raise ConfigurationError(f"SQLite URL '{url}' has no database path", setting="storage", value=url)
    return path


class SQLiteAdapter(BaseDatabaseAdapter):
    """SQLite database adapter."""

    db_type = DatabaseType.SQLITE

    def __init__(self, connection_string: str, max_connections: int = DEFAULT_MAX_CONNECTIONS):
        try:
            import sqlite3
        except ImportError as e:
            raise BackendUnavailableError(
                DatabaseType.SQLITE.value,
                "Python was built without sqlite3, unable to use SQLite storage.",
                original_error=e,
            ) from e

        self._sqlite3 = sqlite3
        self.driver_errors = (sqlite3.Error,)
        self.database_path = sqlite_path_from_url(connection_string)
        # Every connection to :memory: is its own database, so keep exactly one
        if self.database_path == ":memory:":
            max_connections = 1
        super().__init__(connection_string, max_connections)
        self._idle: List[Any] = []
        self._idle_lock = threading.Lock()

    def _acquire(self):
        with self._idle_lock:
            if self._idle:
                return self._idle.pop()
        logger.debug(f"Opening SQLite connection to {self.database_path}")
        conn = self._sqlite3.connect(
            self.database_path,
            check_same_thread=False,
            isolation_level=None,  # autocommit, one statement per operation
        )
        conn.row_factory = self._sqlite3.Row
        return conn

    def _release(self, conn):
        with self._idle_lock:
            if len(self._idle) < self.max_connections:
                self._idle.append(conn)
                return
        conn.close()

    def close_all(self):
        with self._idle_lock:
            idle, self._idle = self._idle, []
        for conn in idle:
            conn.close()

    def cursor(self, conn):
        return conn.cursor()

    def normalize_query(self, query: str) -> str:
        # SQLite uses ? placeholders and AUTOINCREMENT, which is already the default
        return query

    def get_pk_type(self) -> str:
        return "INTEGER PRIMARY KEY AUTOINCREMENT"


class PostgreSQLAdapter(BaseDatabaseAdapter):
    """PostgreSQL database adapter."""

    db_type = DatabaseType.POSTGRESQL

    def __init__(self, connection_string: str, max_connections: int = DEFAULT_MAX_CONNECTIONS):
        try:
            import psycopg2
            import psycopg2.extensions
            import psycopg2.extras
            import psycopg2.pool
        except ImportError as e:
            raise BackendUnavailableError(
                DatabaseType.POSTGRESQL.value,
                "psycopg2 is not installed, unable to connect to PostgreSQL. "
                "Install it with: pip install 'todokeep[postgres]'",
                original_error=e,
            ) from e

        # Fail fast on a malformed connection string, before any connection attempt
        try:
            psycopg2.extensions.parse_dsn(connection_string)
        except psycopg2.ProgrammingError as e:
            raise BackendUnavailableError(
                DatabaseType.POSTGRESQL.value,
                f"Invalid PostgreSQL connection string: {e}",
                original_error=e,
            ) from e

        super().__init__(connection_string, max_connections)
        self._extras = psycopg2.extras
        self.driver_errors = (psycopg2.Error,)
        # minconn=0: nothing is opened until the first query
        self._pool = psycopg2.pool.ThreadedConnectionPool(0, max_connections, connection_string)

    def _acquire(self):
        conn = self._pool.getconn()
        conn.autocommit = True
        return conn

    def _release(self, conn):
        self._pool.putconn(conn, close=bool(conn.closed))

    def close_all(self):
        if not self._pool.closed:
            self._pool.closeall()

    def cursor(self, conn):
        return conn.cursor(cursor_factory=self._extras.RealDictCursor)

    def normalize_query(self, query: str) -> str:
        # Replace ? with %s for PostgreSQL
        # Replace INTEGER PRIMARY KEY AUTOINCREMENT with SERIAL PRIMARY KEY
        normalized = query.replace("?", "%s")
        normalized = normalized.replace("INTEGER PRIMARY KEY AUTOINCREMENT", "SERIAL PRIMARY KEY")
        return normalized

    def get_pk_type(self) -> str:
        return "SERIAL PRIMARY KEY"


def get_database_adapter(connection_string: str, max_connections: Optional[int] = None) -> BaseDatabaseAdapter:
    """
    Factory function to get the appropriate database adapter.

    Args:
        connection_string: Database connection URL; its scheme picks the adapter
        max_connections: Optional pool size

    Returns:
        Database adapter instance

    Raises:
        ConfigurationError: If the scheme is not a supported database
        BackendUnavailableError: If the driver is missing or rejects the URL
    """
    scheme = connection_string.partition(":")[0].lower()
    kwargs = {}
    if max_connections is not None:
        kwargs["max_connections"] = max_connections

    if scheme == DatabaseType.POSTGRESQL.value:
        return PostgreSQLAdapter(connection_string, **kwargs)
    if scheme == DatabaseType.SQLITE.value:
        return SQLiteAdapter(connection_string, **kwargs)
    raise ConfigurationError(
        f"Unsupported database scheme '{scheme}'", setting="storage", value=connection_string
    )
