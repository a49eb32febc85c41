"""Error taxonomy for MCP Git Manager.

Every failure a tool call can produce is one of the ``GitManagerError``
subclasses below, each tagged with an ``ErrorKind``. The dispatcher is the only
place that turns these into user-facing text (see ``format_failure``).
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Tuple

if TYPE_CHECKING:
    from .git.runner import CommandOutcome


class ErrorKind(str, Enum):
    """Classification of tool call failures."""

    VALIDATION = "validation"  # Arguments missing or malformed
    UNKNOWN_TOOL = "unknown_tool"  # Tool name not in the registry
    STATE = "state"  # Required configuration or directory unavailable
    SUBPROCESS = "subprocess"  # External git command exited non-zero
    INTERNAL = "internal"  # Anything else


class GitManagerError(Exception):
    """Base class for all domain errors."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ArgumentValidationError(GitManagerError):
    """Tool arguments failed schema validation.

    Carries every violation, not just the first one.
    """

    kind = ErrorKind.VALIDATION

    def __init__(self, tool_name: str, violations: List[Tuple[str, str]]):
        self.tool_name = tool_name
        self.violations = violations
        lines = "\n".join(f"{location}: {reason}" for location, reason in violations)
        super().__init__(f"Input validation failed for tool '{tool_name}':\n{lines}")


class UnknownToolError(GitManagerError):
    kind = ErrorKind.UNKNOWN_TOOL

    def __init__(self, tool_name: str):
        self.tool_name = tool_name
        super().__init__(f"Unknown tool: {tool_name}")


class StateError(GitManagerError):
    """Operation needs configuration or filesystem state that is unavailable."""

    kind = ErrorKind.STATE


class DirectoryCreationError(StateError):
    def __init__(self, directory: Path, reason: str):
        self.directory = directory
        self.reason = reason
        super().__init__(f"Failed to create working directory {directory}: {reason}")


class CommandFailedError(GitManagerError):
    """A git step exited non-zero; the remaining steps were not run."""

    kind = ErrorKind.SUBPROCESS

    def __init__(self, action: str, outcome: "CommandOutcome"):
        self.action = action
        self.outcome = outcome
        super().__init__(f"Failed to {action}: {outcome.failure_message}")


@dataclass
class ErrorContext:
    """Context information about a failed tool call."""

    error: BaseException
    kind: ErrorKind
    tool_name: str = ""
    request_id: Optional[str] = None


def classify_error(
    error: BaseException, tool_name: str = "", request_id: Optional[str] = None
) -> ErrorContext:
    """Tag an exception with its ErrorKind."""
    if isinstance(error, GitManagerError):
        kind = error.kind
    else:
        kind = ErrorKind.INTERNAL
    return ErrorContext(
        error=error, kind=kind, tool_name=tool_name, request_id=request_id
    )


def format_failure(context: ErrorContext) -> str:
    """Render a classified error as the single human-readable failure text."""
    error = context.error
    match context.kind:
        case (
            ErrorKind.VALIDATION
            | ErrorKind.UNKNOWN_TOOL
            | ErrorKind.STATE
            | ErrorKind.SUBPROCESS
        ):
            return error.message
        case ErrorKind.INTERNAL:
            return f"Unexpected error in '{context.tool_name}': {error}"
