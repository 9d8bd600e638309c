"""
Configuration for todokeep.

Two layers are involved:

1. ``Settings``: process-level settings read from environment variables or a
   ``.env`` file through Pydantic Settings (config file location, log level and
   an optional ``DATABASE_URL`` override).
2. ``StorageConfig``: the storage configuration file, a small JSON document
   holding a single ``storage`` URL. The URL scheme selects the backend:

   - ``file:///path/to/tasks.json``       local file with an in-memory cache
   - ``sqlite:///path/to/tasks.db``       SQLite database
   - ``postgresql://user@host/dbname``    PostgreSQL database

When no configuration file exists, a default one pointing at
``~/.config/todo/default.todo.json`` is created.
"""
import logging
import os
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlsplit

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from todokeep.exceptions import ConfigurationError, StorageIOError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.json"
DEFAULT_TASKS_FILE_NAME = "default.todo.json"


def config_dir() -> Path:
    """Get the configuration directory (``~/.config/todo``)."""
    try:
        home = Path.home()
    except RuntimeError as e:
        raise ConfigurationError("Unable to find home directory", original_error=e) from e

    path = home / ".config" / "todo"
    logger.debug(f"Config dir path: {path}")
    return path


def default_config_path() -> Path:
    """Get the default configuration file path."""
    return config_dir() / CONFIG_FILE_NAME


def default_tasks_path() -> Path:
    """Get the default tasks file path used by the default configuration."""
    return config_dir() / DEFAULT_TASKS_FILE_NAME


class Settings(BaseSettings):
    """Process settings for todokeep.

    All values can be set via environment variables or a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_prefix="TODO_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Location of the storage configuration file (resolved by validator)
    config_path: str = Field("", validate_default=True)

    # Overrides the storage URL from the configuration file when set
    database_url: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("DATABASE_URL", "TODO_DATABASE_URL", "database_url"),
    )

    log_level: str = "WARNING"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @field_validator("config_path", mode="before")
    @classmethod
    def resolve_config_path(cls, v: Optional[str]) -> str:
        """Expand the configured path, falling back to ``~/.config/todo/config.json``."""
        if v:
            return os.path.abspath(os.path.expanduser(v))
        return str(default_config_path())

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that the log level is one the logging module knows."""
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level '{v}'")
        return level


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance (singleton pattern)."""
    return Settings()


class StorageFormat(Enum):
    """Storage backends, keyed by URL scheme."""
    FILE = "file"
    POSTGRES = "postgresql"
    SQLITE = "sqlite"


class StorageConfig(BaseModel):
    """The storage configuration file: a single connection URL."""

    storage: str = Field(..., description="Connection URL whose scheme selects the backend")

    @field_validator("storage")
    @classmethod
    def validate_storage(cls, v: str) -> str:
        """Validate that the storage value is a URL with a scheme."""
        v = v.strip()
        if not urlsplit(v).scheme:
            raise ValueError(f"Storage '{v}' is not a URL (missing scheme)")
        return v

    @classmethod
    def new(cls, storage: str) -> "StorageConfig":
        """Build a configuration from a URL string.

        Raises:
            ConfigurationError: If the value is not a URL
        """
        try:
            return cls(storage=storage)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid storage URL '{storage}'",
                setting="storage",
                value=storage,
                original_error=e,
            ) from e

    @classmethod
    def default(cls) -> "StorageConfig":
        """Configuration pointing at the default local tasks file."""
        return cls(storage=default_tasks_path().as_uri())

    @classmethod
    def from_path(cls, path: str | os.PathLike) -> "StorageConfig":
        """Read a configuration file.

        Raises:
            StorageIOError: If the file cannot be read
            ConfigurationError: If the content is not a valid configuration
        """
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8").strip()
        except OSError as e:
            raise StorageIOError(
                f"Failed to read config file {path}: {e}", path=str(path), original_error=e
            ) from e

        logger.debug(f"Read config file contents: {content}")
        try:
            return cls.model_validate_json(content)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid config file {path}", setting="storage", original_error=e
            ) from e

    def write_to_file(self, path: str | os.PathLike) -> None:
        """Write this configuration to ``path``, replacing any existing file."""
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self.model_dump_json(indent=2) + "\n", encoding="utf-8")
        except OSError as e:
            raise StorageIOError(
                f"Failed to write config file {path}: {e}", path=str(path), original_error=e
            ) from e
        logger.debug(f"Wrote config file {path}")

    @property
    def scheme(self) -> str:
        return urlsplit(self.storage).scheme.lower()

    def storage_format(self) -> StorageFormat:
        """Map the URL scheme to a backend.

        Raises:
            ConfigurationError: If the scheme is not recognised
        """
        try:
            return StorageFormat(self.scheme)
        except ValueError:
            raise ConfigurationError(
                f"Unsupported storage scheme '{self.scheme}'",
                setting="storage",
                value=self.storage,
            ) from None

    def file_path(self) -> Path:
        """Resolve a ``file://`` URL to a local path.

        Raises:
            ConfigurationError: If no local path can be derived from the URL
        """
        parts = urlsplit(self.storage)
        if parts.scheme.lower() != StorageFormat.FILE.value:
            raise ConfigurationError(
                f"Storage URL '{self.storage}' is not a file URL", setting="storage", value=self.storage
            )
        if parts.netloc not in ("", "localhost"):
            raise ConfigurationError(
                f"File URL '{self.storage}' points at remote host '{parts.netloc}'",
                setting="storage",
                value=self.storage,
            )
        path = unquote(parts.path)
        if not path:
            raise ConfigurationError(
                f"File URL '{self.storage}' has no path", setting="storage", value=self.storage
            )
        return Path(path).expanduser()


def load_storage_config(settings: Optional[Settings] = None) -> StorageConfig:
    """
    Load the storage configuration for this process.

    Resolution order:
    1. ``DATABASE_URL`` from the environment or ``.env``
    2. The configuration file at ``settings.config_path``
    3. The default configuration, which is written to ``settings.config_path``

    Returns:
        The storage configuration to select a backend with
    """
    settings = settings or get_settings()

    if settings.database_url:
        logger.debug("Using storage URL from DATABASE_URL")
        return StorageConfig.new(settings.database_url)

    path = Path(settings.config_path)
    if path.exists():
        logger.debug(f"Loading config from {path}")
        return StorageConfig.from_path(path)

    logger.info(f"No config file found at {path}, creating default config")
    config = StorageConfig.default()
    config.write_to_file(path)
    return config
