"""
File-backed repository.

All tasks are loaded into an in-memory cache when the repository is created.
Reads are served from the cache; every mutation updates the cache and then
rewrites the whole backing file (truncate + rewrite, never append).
"""
import asyncio
import logging
from pathlib import Path
from typing import List

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from todokeep.exceptions import SerializationError, StorageIOError, TaskIdExhaustedError, TaskNotFoundError
from todokeep.models import NewTask, Task, TASK_ID_MAX
from todokeep.storage.interface import Repository
from todokeep.storage.rwlock import ReadWriteLock

logger = logging.getLogger(__name__)

_TASK_LIST = TypeAdapter(List[Task])


def serialize_tasks(tasks: List[Task]) -> bytes:
    """Encode tasks in the on-disk format (a JSON array).

    Raises:
        SerializationError: If the tasks cannot be encoded
    """
    try:
        return _TASK_LIST.dump_json(tasks, indent=2)
    except PydanticSerializationError as e:
        raise SerializationError(f"Failed to serialize tasks: {e}", original_error=e) from e


def deserialize_tasks(content: str | bytes) -> List[Task]:
    """Decode tasks from the on-disk format.

    Empty content decodes to an empty list.

    Raises:
        SerializationError: If the content is not UTF-8 or not a valid task list
    """
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SerializationError(f"Tasks file is not UTF-8: {e}", original_error=e) from e
    if not content.strip():
        return []
    try:
        return _TASK_LIST.validate_json(content)
    except ValidationError as e:
        raise SerializationError(f"Failed to parse tasks: {e}", original_error=e) from e


class FileRepository(Repository):
    """Repository storing every task in one local file."""

    def __init__(self, storage_path: str | Path):
        """
        Open (or create) the backing file and load it into the cache.

        A file that cannot be parsed is treated as holding no tasks, so the
        tool stays usable after a manual edit went wrong.

        Args:
            storage_path: Path of the backing file

        Raises:
            StorageIOError: If the file cannot be created or read
        """
        self.storage_path = Path(storage_path)
        logger.debug(f"Creating FileRepository with storage path: {self.storage_path}")

        self._create_file()
        content = self._read_file()

        try:
            tasks = deserialize_tasks(content)
        except SerializationError as e:
            logger.warning(f"Ignoring unreadable tasks file {self.storage_path}: {e.message}")
            tasks = []

        logger.debug(f"Found {len(tasks)} task(s) in file")
        self._tasks: List[Task] = tasks
        self._lock = ReadWriteLock()

    def _create_file(self) -> None:
        try:
            if not self.storage_path.exists():
                logger.debug(f"Creating file {self.storage_path}")
                self.storage_path.parent.mkdir(parents=True, exist_ok=True)
                self.storage_path.touch()
        except OSError as e:
            raise StorageIOError(
                f"Failed to create tasks file {self.storage_path}: {e}",
                path=str(self.storage_path),
                original_error=e,
            ) from e

    def _read_file(self) -> bytes:
        try:
            return self.storage_path.read_bytes()
        except OSError as e:
            raise StorageIOError(
                f"Failed to read tasks file {self.storage_path}: {e}",
                path=str(self.storage_path),
                original_error=e,
            ) from e

    def _write_file(self, data: bytes) -> None:
        try:
            with open(self.storage_path, "wb") as f:
                f.write(data)
        except OSError as e:
            raise StorageIOError(
                f"Failed to write tasks file {self.storage_path}: {e}",
                path=str(self.storage_path),
                original_error=e,
            ) from e
        logger.debug(f"Wrote {len(data)} bytes to {self.storage_path}")

    async def _save(self) -> None:
        """Rewrite the backing file from the cache. Caller holds the write lock."""
        data = serialize_tasks(self._tasks)
        await asyncio.to_thread(self._write_file, data)

    def _index_of(self, task_id: int) -> int:
        for index, task in enumerate(self._tasks):
            if task.id == task_id:
                return index
        raise TaskNotFoundError(task_id)

    def _next_id(self) -> int:
        last_id = max((task.id for task in self._tasks), default=0)
        if last_id >= TASK_ID_MAX:
            raise TaskIdExhaustedError(last_id)
        return last_id + 1

    async def get_all(self) -> List[Task]:
        logger.debug("Getting all tasks")
        async with self._lock.read():
            return [task.model_copy() for task in sorted(self._tasks, key=lambda t: t.id)]

    async def get_by_id(self, task_id: int) -> Task:
        logger.debug(f"Getting task with id {task_id}")
        async with self._lock.read():
            return self._tasks[self._index_of(task_id)].model_copy()

    async def add(self, task: NewTask) -> None:
        logger.debug("Adding new task")
        async with self._lock.write():
            new_task = Task.from_new(self._next_id(), task)
            self._tasks.append(new_task)
            await self._save()
        logger.info(f"Added task {new_task.id}: {new_task.name}")

    async def remove(self, task_id: int) -> None:
        logger.debug(f"Removing task with id {task_id}")
        async with self._lock.write():
            self._tasks = [task for task in self._tasks if task.id != task_id]
            await self._save()

    async def update(self, task: Task) -> None:
        logger.debug(f"Updating task with id {task.id}")
        async with self._lock.write():
            index = self._index_of(task.id)
            self._tasks[index] = task.model_copy()
            await self._save()

    async def complete(self, task_id: int) -> Task:
        """Mark a task as completed under a single write lock."""
        logger.debug(f"Completing task with id {task_id}")
        async with self._lock.write():
            task = self._tasks[self._index_of(task_id)]
            task.set_completed()
            await self._save()
            return task.model_copy()
