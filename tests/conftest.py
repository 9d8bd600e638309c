"""
Pytest configuration and shared fixtures.
Every test runs with an isolated home directory and no DATABASE_URL, so the
developer's real configuration and tasks are never touched.
"""
import pytest

from todokeep.config import get_settings
from todokeep.models import NewTask
from todokeep.storage import FileRepository, SqliteRepository
from todokeep.storage.schema import SchemaManager


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Point HOME at a temporary directory and clear cached settings."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    for name in ("DATABASE_URL", "TODO_DATABASE_URL", "TODO_CONFIG_PATH", "TODO_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield home
    get_settings.cache_clear()


@pytest.fixture
def tasks_file(tmp_path):
    """Path of a tasks file that does not exist yet."""
    return tmp_path / "data" / "tasks.json"


@pytest.fixture
def file_repo(tasks_file):
    """Fresh file repository on an empty file."""
    return FileRepository(tasks_file)


@pytest.fixture
def sqlite_url(tmp_path):
    """URL of a SQLite database file under the test directory."""
    return f"sqlite://{tmp_path / 'todos.db'}"


@pytest.fixture
def sqlite_repo(sqlite_url):
    """SQLite repository with the tasks table created."""
    repo = SqliteRepository(sqlite_url)
    SchemaManager(repo.adapter).initialize_schema()
    yield repo
    repo.adapter.close_all()


@pytest.fixture(params=["file", "sqlite"])
def repository(request):
    """Each backend in turn, for tests of the shared repository contract."""
    return request.getfixturevalue(f"{request.param}_repo")


@pytest.fixture
def buy_milk():
    return NewTask(name="buy milk", description=None)
