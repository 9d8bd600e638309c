"""
Tests for task models.
"""
import pytest
from pydantic import ValidationError

from todokeep.models import NewTask, Task, TASK_ID_MAX, TASK_ID_MIN


def test_task_defaults_to_not_completed():
    """Test default field values."""
    task = Task(id=1, name="buy milk")
    assert task.description is None
    assert task.completed is False


def test_set_completed():
    """Test that set_completed marks the task done."""
    task = Task(id=1, name="buy milk")
    task.set_completed()
    assert task.completed is True
    task.set_completed()
    assert task.completed is True


def test_display():
    """Test rendering with and without description."""
    task = Task(id=1, name="test", description="details")
    assert str(task) == "☐  - test: details"

    task.set_completed()
    assert str(task) == "☑  - test: details"

    assert str(Task(id=2, name="plain")) == "☐  - plain"


def test_from_new():
    """Test building a stored task from a NewTask."""
    task = Task.from_new(3, NewTask(name="write report", description="quarterly"))
    assert task == Task(id=3, name="write report", description="quarterly", completed=False)


@pytest.mark.parametrize("name", ["", "   ", "\n"])
def test_empty_name_rejected(name):
    """Test that blank names are rejected for both models."""
    with pytest.raises(ValidationError):
        NewTask(name=name)
    with pytest.raises(ValidationError):
        Task(id=1, name=name)


@pytest.mark.parametrize("task_id", [TASK_ID_MIN - 1, TASK_ID_MAX + 1])
def test_id_must_fit_in_32_bits(task_id):
    """Test that identifiers outside the signed 32-bit range are rejected."""
    with pytest.raises(ValidationError):
        Task(id=task_id, name="overflow")


def test_completed_accepts_database_integers():
    """Test that 0/1 from SQLite rows validate as booleans."""
    assert Task.model_validate({"id": 1, "name": "a", "description": None, "completed": 1}).completed is True
    assert Task.model_validate({"id": 1, "name": "a", "description": None, "completed": 0}).completed is False
