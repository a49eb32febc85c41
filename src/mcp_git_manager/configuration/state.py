"""Server-wide working directory configuration."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from ..error_handling import DirectoryCreationError

logger = logging.getLogger(__name__)

LOG_FILE_NAME = "mcp-git-manager.log"


@dataclass(frozen=True)
class ServerConfig:
    """Immutable snapshot of the active working directory and its audit log."""

    working_directory: Path
    log_file_path: Path

    @classmethod
    def for_directory(cls, directory: Path) -> "ServerConfig":
        return cls(working_directory=directory, log_file_path=directory / LOG_FILE_NAME)


class ConfigState:
    """Owner of the single mutable ServerConfig.

    Relative paths are resolved against the directory the state was created
    in, not against whatever the process cwd happens to be later.

    Args:
        working_directory: Initial working directory. Defaults to the base directory.
        base_directory: Directory relative paths resolve against. Defaults to the cwd.
    """

    def __init__(
        self,
        working_directory: str | Path | None = None,
        base_directory: str | Path | None = None,
    ):
        self._base_directory = Path(os.path.abspath(base_directory or os.getcwd()))
        initial = (
            self.resolve(working_directory)
            if working_directory is not None
            else self._base_directory
        )
        self._config = ServerConfig.for_directory(initial)

    def resolve(self, path: str | Path) -> Path:
        """Resolve ``path`` to an absolute path without following symlinks."""
        return Path(os.path.abspath(os.path.join(self._base_directory, os.fspath(path))))

    def get_config(self) -> ServerConfig:
        return self._config

    def set_working_directory(self, path: str | Path) -> ServerConfig:
        """Point the server at a new working directory, creating it if needed.

        The previous configuration stays in force if the directory cannot be
        created.

        Raises:
            DirectoryCreationError: If the directory (or a parent) cannot be created.
        """
        directory = self.resolve(path)
        created = not directory.is_dir()
        if created:
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except (OSError, ValueError) as e:
                # ValueError: the path itself is unusable, e.g. an embedded NUL
                logger.error(f"Error creating working directory {directory}: {e}")
                raise DirectoryCreationError(
                    directory, getattr(e, "strerror", None) or str(e)
                ) from e

        self._config = ServerConfig.for_directory(directory)

        if created:
            logger.info(f"Created working directory: {directory}")
        logger.info(
            f"Configuration loaded: WORKING_DIR={self._config.working_directory}, "
            f"LOG_FILE={self._config.log_file_path}"
        )
        return self._config
