"""
Pydantic models for persisted tasks and tasks awaiting an identifier.
"""
from typing import Optional
from pydantic import BaseModel, Field, field_validator

# Identifiers are stored as signed 32-bit integers by every backend
TASK_ID_MIN = -(2 ** 31)
TASK_ID_MAX = 2 ** 31 - 1


def _validate_name(v: str) -> str:
    if not v or not v.strip():
        raise ValueError("Task name cannot be empty or contain only whitespace")
    return v


class NewTask(BaseModel):
    """A task that has not been stored yet and therefore has no identifier."""
    name: str = Field(..., description="Task name", min_length=1)
    description: Optional[str] = Field(None, description="Optional longer description")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate that the name is not empty or only whitespace."""
        return _validate_name(v)


class Task(BaseModel):
    """A stored task.

    The identifier is assigned by the backend on ``add``. A task only moves
    towards completion: ``set_completed`` has no inverse, and any other change
    goes through a whole-record ``update``.
    """
    id: int = Field(..., description="Backend-assigned identifier", ge=TASK_ID_MIN, le=TASK_ID_MAX)
    name: str = Field(..., description="Task name", min_length=1)
    description: Optional[str] = Field(None, description="Optional longer description")
    completed: bool = Field(False, description="Whether the task has been completed")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate that the name is not empty or only whitespace."""
        return _validate_name(v)

    @classmethod
    def from_new(cls, task_id: int, new_task: NewTask) -> "Task":
        """Build a stored task from a NewTask and the identifier chosen for it."""
        return cls(
            id=task_id,
            name=new_task.name,
            description=new_task.description,
            completed=False,
        )

    def set_completed(self) -> None:
        """Mark the task as completed."""
        self.completed = True

    def __str__(self) -> str:
        mark = "☑" if self.completed else "☐"
        if self.description is not None:
            return f"{mark}  - {self.name}: {self.description}"
        return f"{mark}  - {self.name}"
