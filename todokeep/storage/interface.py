"""
Repository interface - defines the contract for all storage backends.
"""
from abc import ABC, abstractmethod
from typing import List

from todokeep.models import NewTask, Task


class Repository(ABC):
    """Abstract interface for task storage.

    Every operation is a coroutine and may suspend while waiting on I/O.
    Mutating operations only return once the durable store (file or
    database) reflects the new state.
    """

    @abstractmethod
    async def get_all(self) -> List[Task]:
        """Get every task, ordered by id."""
        pass

    @abstractmethod
    async def get_by_id(self, task_id: int) -> Task:
        """Get a task by id.

        Raises:
            TaskNotFoundError: If no task has that id
        """
        pass

    @abstractmethod
    async def add(self, task: NewTask) -> None:
        """Store a new task under the next unused id."""
        pass

    @abstractmethod
    async def remove(self, task_id: int) -> None:
        """Delete a task. Removing an id that does not exist is a no-op."""
        pass

    @abstractmethod
    async def update(self, task: Task) -> None:
        """Replace the stored task that has ``task.id``.

        Raises:
            TaskNotFoundError: If no task has that id
        """
        pass

    async def complete(self, task_id: int) -> Task:
        """Mark a task as completed and return it.

        This is a read followed by an update; backends that can do both
        under one lock override it.
        """
        task = await self.get_by_id(task_id)
        task.set_completed()
        await self.update(task)
        return task

    async def close(self) -> None:
        """Release backend resources."""
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False
