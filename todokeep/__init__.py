"""
todokeep - a personal task tracker with pluggable storage backends.
"""
from todokeep.models import NewTask, Task
from todokeep.storage import Repository, get_repository

__version__ = "0.1.0"

__all__ = [
    "NewTask",
    "Task",
    "Repository",
    "get_repository",
]
