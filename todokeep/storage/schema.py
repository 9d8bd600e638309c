"""
Schema management for relational backends.

Only creates the ``tasks`` table when it is missing; existing tables are left
untouched.
"""
import logging

from todokeep.db_adapter import BaseDatabaseAdapter

logger = logging.getLogger(__name__)


class SchemaManager:
    """Manages creation of the tasks table."""

    def __init__(self, adapter: BaseDatabaseAdapter):
        """
        Initialize SchemaManager.

        Args:
            adapter: Database adapter instance
        """
        self.adapter = adapter

    def initialize_schema(self):
        """Create the tasks table if it does not exist."""
        with self.adapter.connection() as conn:
            cursor = self.adapter.cursor(conn)
            try:
                self._create_tasks_schema(cursor)
            finally:
                cursor.close()
        logger.info(f"Initialized {self.adapter.db_type.value} schema")

    def _create_tasks_schema(self, cursor):
        """Create tasks table."""
        self.adapter.execute(cursor, f"""
            CREATE TABLE IF NOT EXISTS tasks (
                id {self.adapter.get_pk_type()},
                name TEXT NOT NULL,
                description TEXT,
                completed BOOLEAN NOT NULL DEFAULT FALSE
            )
        """)
