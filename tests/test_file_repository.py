"""
Tests for the file-backed repository.
"""
import asyncio
import json

import pytest

from todokeep.exceptions import SerializationError, StorageIOError, TaskIdExhaustedError
from todokeep.models import NewTask, Task, TASK_ID_MAX
from todokeep.storage.file_repository import FileRepository, deserialize_tasks, serialize_tasks


def test_creates_missing_file(tasks_file):
    """Test that the backing file and its directory are created."""
    assert not tasks_file.exists()
    FileRepository(tasks_file)
    assert tasks_file.exists()
    assert tasks_file.read_text() == ""


def test_mutation_rewrites_file(file_repo, tasks_file, buy_milk):
    """Test that the file holds the full task list after a mutation."""
    asyncio.run(file_repo.add(buy_milk))

    data = json.loads(tasks_file.read_text())
    assert data == [{"id": 1, "name": "buy milk", "description": None, "completed": False}]


def test_file_is_truncated_on_rewrite(file_repo, tasks_file):
    """Test that removing tasks shrinks the file instead of appending."""
    async def scenario():
        for i in range(3):
            await file_repo.add(NewTask(name=f"task {i}", description="x" * 50))
        size_before = tasks_file.stat().st_size
        await file_repo.remove(1)
        await file_repo.remove(2)
        return size_before

    size_before = asyncio.run(scenario())
    assert tasks_file.stat().st_size < size_before
    assert [task["id"] for task in json.loads(tasks_file.read_text())] == [3]


def test_tasks_survive_reopen(file_repo, tasks_file):
    """Test that a new repository on the same file sees earlier changes."""
    async def scenario():
        await file_repo.add(NewTask(name="one"))
        await file_repo.add(NewTask(name="two", description="second"))
        await file_repo.complete(2)

    asyncio.run(scenario())

    reopened = FileRepository(tasks_file)
    tasks = asyncio.run(reopened.get_all())
    assert tasks == [
        Task(id=1, name="one"),
        Task(id=2, name="two", description="second", completed=True),
    ]


def test_next_id_follows_max_existing_id(tasks_file):
    """Test that a new id is one above the highest stored id."""
    tasks_file.parent.mkdir(parents=True)
    tasks_file.write_text(json.dumps([
        {"id": 4, "name": "four", "description": None, "completed": False},
        {"id": 9, "name": "nine", "description": None, "completed": True},
    ]))
    repo = FileRepository(tasks_file)

    async def scenario():
        await repo.add(NewTask(name="ten"))
        return await repo.get_all()

    assert [task.id for task in asyncio.run(scenario())] == [4, 9, 10]


def test_get_all_orders_by_id(tasks_file):
    """Test that tasks stored out of order are listed by id."""
    tasks_file.parent.mkdir(parents=True)
    tasks_file.write_text(json.dumps([
        {"id": 3, "name": "c", "description": None, "completed": False},
        {"id": 1, "name": "a", "description": None, "completed": False},
    ]))
    repo = FileRepository(tasks_file)
    assert [task.id for task in asyncio.run(repo.get_all())] == [1, 3]


@pytest.mark.parametrize("content", [
    "not json at all {",
    '{"id": 1}',
    '[{"id": "one", "name": "x"}]',
    '[{"id": 1, "name": ""}]',
])
def test_corrupt_file_loads_as_empty(tasks_file, content):
    """Test that unreadable content is treated as no prior data."""
    tasks_file.parent.mkdir(parents=True)
    tasks_file.write_text(content)

    repo = FileRepository(tasks_file)
    assert asyncio.run(repo.get_all()) == []


def test_corrupt_file_is_replaced_on_first_write(tasks_file, buy_milk):
    """Test that the first mutation after a corrupt load writes a valid file."""
    tasks_file.parent.mkdir(parents=True)
    tasks_file.write_text("garbage")

    repo = FileRepository(tasks_file)
    asyncio.run(repo.add(buy_milk))
    assert deserialize_tasks(tasks_file.read_text()) == [Task(id=1, name="buy milk")]


def test_unreadable_path_raises_io_error(tmp_path):
    """Test that a path that cannot be read as a file raises StorageIOError."""
    directory = tmp_path / "a_directory"
    directory.mkdir()

    with pytest.raises(StorageIOError) as exc_info:
        FileRepository(directory)
    assert exc_info.value.path == str(directory)


def test_failed_rewrite_raises_io_error(file_repo, tmp_path, buy_milk):
    """Test that a failed file rewrite is reported to the caller."""
    blocker = tmp_path / "blocker"
    blocker.mkdir()
    file_repo.storage_path = blocker

    with pytest.raises(StorageIOError):
        asyncio.run(file_repo.add(buy_milk))


def test_serialization_round_trip():
    """Test that serializing then deserializing reproduces the tasks."""
    tasks = [
        Task(id=1, name="buy milk"),
        Task(id=2, name="write report", description="quarterly, with charts", completed=True),
        Task(id=5, name="ünïcödé ☑", description=""),
    ]
    assert deserialize_tasks(serialize_tasks(tasks)) == tasks
    assert deserialize_tasks(serialize_tasks([])) == []


def test_deserialize_empty_content():
    """Test that blank content is an empty task list."""
    assert deserialize_tasks("") == []
    assert deserialize_tasks("  \n") == []


def test_deserialize_invalid_content_raises():
    """Test that invalid content raises SerializationError."""
    with pytest.raises(SerializationError):
        deserialize_tasks("[1, 2, 3]")


def test_concurrent_completes_are_not_lost(file_repo):
    """Test that concurrent completions of different tasks all persist."""
    async def scenario():
        for i in range(5):
            await file_repo.add(NewTask(name=f"task {i}"))
        await asyncio.gather(*(file_repo.complete(task_id) for task_id in range(1, 6)))
        return await file_repo.get_all()

    assert all(task.completed for task in asyncio.run(scenario()))


def test_readers_run_alongside_each_other(file_repo, buy_milk):
    """Test that many concurrent reads all return the same snapshot."""
    async def scenario():
        await file_repo.add(buy_milk)
        return await asyncio.gather(*(file_repo.get_all() for _ in range(20)))

    results = asyncio.run(scenario())
    assert all(result == results[0] for result in results)
    assert len(results[0]) == 1


def test_repository_is_reusable_across_event_loops(file_repo):
    """Test concurrent adds on one repository under two successive asyncio.run calls."""
    async def burst():
        await asyncio.gather(*(file_repo.add(NewTask(name=f"task {i}")) for i in range(3)))

    asyncio.run(burst())
    asyncio.run(burst())

    assert [task.id for task in asyncio.run(file_repo.get_all())] == [1, 2, 3, 4, 5, 6]


def test_add_after_highest_id_raises_service_error(tasks_file, buy_milk):
    """Test that no id is left to assign after the largest 32-bit id."""
    tasks_file.parent.mkdir(parents=True)
    tasks_file.write_text(json.dumps([{"id": TASK_ID_MAX, "name": "last"}]))
    repo = FileRepository(tasks_file)

    with pytest.raises(TaskIdExhaustedError):
        asyncio.run(repo.add(buy_milk))
    assert [task.id for task in asyncio.run(repo.get_all())] == [TASK_ID_MAX]


def test_invalid_utf8_file_loads_as_empty(tasks_file):
    """Test that bytes that are not UTF-8 count as corrupt content."""
    tasks_file.parent.mkdir(parents=True)
    tasks_file.write_bytes(b"\xff\xfe[not utf-8]")

    repo = FileRepository(tasks_file)
    assert asyncio.run(repo.get_all()) == []
