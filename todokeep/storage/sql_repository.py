"""
Relational repositories (PostgreSQL and SQLite).

Each repository operation maps to one parameterized statement against the
``tasks`` table. There is no client-side cache: every call goes to the
database. Blocking driver calls run in a worker thread.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from todokeep.db_adapter import BaseDatabaseAdapter, PostgreSQLAdapter, SQLiteAdapter
from todokeep.exceptions import DatabaseError, SerializationError, TaskNotFoundError
from todokeep.models import NewTask, Task, TASK_ID_MAX, TASK_ID_MIN
from todokeep.storage.interface import Repository
from todokeep.storage.schema import SchemaManager

logger = logging.getLogger(__name__)


def _valid_id(task_id: int) -> bool:
    """Whether ``task_id`` can name a stored row (ids are signed 32-bit)."""
    return TASK_ID_MIN <= task_id <= TASK_ID_MAX


class SqlRepository(Repository):
    """Repository backed by any database adapter."""

    def __init__(self, adapter: BaseDatabaseAdapter):
        """
        Initialize SqlRepository.

        Args:
            adapter: Database adapter (owns the connection pool)
        """
        self.adapter = adapter

    def _execute_with_logging(
        self,
        operation: str,
        query: str,
        params: tuple = (),
        fetch: Optional[str] = None,
    ) -> Any:
        """
        Run one statement on a pooled connection.

        Args:
            operation: Statement kind for error reporting (e.g. "SELECT")
            query: SQL with ``?`` placeholders
            params: Query parameters
            fetch: "all", "one" or None for the affected row count

        Raises:
            DatabaseError: If the driver reports an error
        """
        try:
            with self.adapter.connection() as conn:
                cursor = self.adapter.cursor(conn)
                try:
                    self.adapter.execute(cursor, query, params)
                    if fetch == "all":
                        return [self.adapter.row_to_dict(row) for row in cursor.fetchall()]
                    if fetch == "one":
                        row = cursor.fetchone()
                        return self.adapter.row_to_dict(row) if row else None
                    return cursor.rowcount
                finally:
                    cursor.close()
        except (*self.adapter.driver_errors, OverflowError) as e:
            logger.error(f"{operation} on tasks failed: {e}")
            raise DatabaseError(
                f"{operation} on tasks failed: {e}", operation=operation, original_error=e
            ) from e

    async def _run(self, operation: str, query: str, params: tuple = (), fetch: Optional[str] = None) -> Any:
        return await asyncio.to_thread(self._execute_with_logging, operation, query, params, fetch)

    @staticmethod
    def _to_task(row: Dict[str, Any]) -> Task:
        try:
            return Task.model_validate(row)
        except ValidationError as e:
            raise SerializationError(f"Invalid task row {row.get('id')}: {e}", original_error=e) from e

    async def get_all(self) -> List[Task]:
        logger.debug("Getting all tasks")
        rows = await self._run("SELECT", "SELECT * FROM tasks ORDER BY id", fetch="all")
        return [self._to_task(row) for row in rows]

    async def get_by_id(self, task_id: int) -> Task:
        logger.debug(f"Getting task with id {task_id}")
        if not _valid_id(task_id):
            raise TaskNotFoundError(task_id)
        row = await self._run("SELECT", "SELECT * FROM tasks WHERE id = ?", (task_id,), fetch="one")
        if row is None:
            raise TaskNotFoundError(task_id)
        return self._to_task(row)

    async def add(self, task: NewTask) -> None:
        logger.debug("Adding a new task")
        await self._run(
            "INSERT",
            "INSERT INTO tasks (name, description) VALUES (?, ?)",
            (task.name, task.description),
        )
        logger.info(f"Added task: {task.name}")

    async def remove(self, task_id: int) -> None:
        logger.debug(f"Removing task with id {task_id}")
        if not _valid_id(task_id):
            return
        await self._run("DELETE", "DELETE FROM tasks WHERE id = ?", (task_id,))

    async def update(self, task: Task) -> None:
        logger.debug(f"Updating task with id {task.id}")
        affected = await self._run(
            "UPDATE",
            "UPDATE tasks SET name = ?, description = ?, completed = ? WHERE id = ?",
            (task.name, task.description, task.completed, task.id),
        )
        if affected == 0:
            raise TaskNotFoundError(task.id)

    async def initialize_schema(self) -> None:
        """Create the tasks table if it does not exist."""
        manager = SchemaManager(self.adapter)
        try:
            await asyncio.to_thread(manager.initialize_schema)
        except self.adapter.driver_errors as e:
            raise DatabaseError(
                f"Failed to create tasks table: {e}", operation="CREATE", original_error=e
            ) from e

    async def close(self) -> None:
        await asyncio.to_thread(self.adapter.close_all)


class PostgresRepository(SqlRepository):
    """Repository storing tasks in PostgreSQL."""

    def __init__(self, connection_url: str, max_connections: Optional[int] = None):
        logger.debug("Creating PostgresRepository")
        kwargs = {} if max_connections is None else {"max_connections": max_connections}
        super().__init__(PostgreSQLAdapter(connection_url, **kwargs))


class SqliteRepository(SqlRepository):
    """Repository storing tasks in SQLite."""

    def __init__(self, connection_url: str, max_connections: Optional[int] = None):
        logger.debug(f"Creating SqliteRepository with URL: {connection_url}")
        kwargs = {} if max_connections is None else {"max_connections": max_connections}
        super().__init__(SQLiteAdapter(connection_url, **kwargs))
