"""
Data models for todokeep.
"""
from todokeep.models.task_models import NewTask, Task, TASK_ID_MAX, TASK_ID_MIN

__all__ = [
    "NewTask",
    "Task",
    "TASK_ID_MAX",
    "TASK_ID_MIN",
]
