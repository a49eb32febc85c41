"""Execution of single git commands for MCP Git Manager"""

import logging
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from git import Git
from git.exc import GitCommandNotFound

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandOutcome:
    """Result of one git invocation."""

    command: tuple[str, ...]
    exited_cleanly: bool
    stdout: str = ""
    stderr: str = ""
    status: Optional[int] = None
    failure_message: Optional[str] = None

    @property
    def output(self) -> str:
        """stdout and stderr combined, for marker matching."""
        return "\n".join(part for part in (self.stdout, self.stderr) if part)


class GitCommandRunner:
    """Runs ``git`` with a discrete argument vector, never through a shell.

    Output is captured in full. A non-zero exit is reported in the returned
    CommandOutcome rather than raised.
    """

    def __init__(self, git_executable: str = "git"):
        self.git_executable = git_executable

    def run(self, args: Sequence[str], working_directory: Path) -> CommandOutcome:
        command = (self.git_executable, *args)
        display = shlex.join(command)
        logger.debug(f"Running {display} in {working_directory}")

        # GitPython silently falls back to the process cwd for an unusable directory
        if not Path(working_directory).is_dir():
            return CommandOutcome(
                command=command,
                exited_cleanly=False,
                failure_message=(
                    f"Command '{display}' could not be started: "
                    f"working directory {working_directory} does not exist"
                ),
            )

        try:
            status, stdout, stderr = Git(working_directory).execute(
                list(command),
                with_extended_output=True,
                with_exceptions=False,
            )
        except GitCommandNotFound as e:
            # git executable not found
            return CommandOutcome(
                command=command,
                exited_cleanly=False,
                failure_message=f"Command '{display}' could not be started: {e}",
            )

        if status == 0:
            return CommandOutcome(
                command=command,
                exited_cleanly=True,
                stdout=stdout,
                stderr=stderr,
                status=status,
            )

        failure_message = f"Command '{display}' exited with status {status}"
        if stderr:
            failure_message += f"\nstderr: {stderr}"
        return CommandOutcome(
            command=command,
            exited_cleanly=False,
            stdout=stdout,
            stderr=stderr,
            status=status,
            failure_message=failure_message,
        )
