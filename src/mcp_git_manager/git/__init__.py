"""Git operations for MCP Git Manager"""

from .operations import (
    NO_CHANGES_MESSAGE,
    detect_current_branch,
    get_config,
    git_init,
    git_pull,
    git_push,
    load_config,
)
from .runner import CommandOutcome, GitCommandRunner

__all__ = [
    "NO_CHANGES_MESSAGE",
    "CommandOutcome",
    "GitCommandRunner",
    "detect_current_branch",
    "get_config",
    "git_init",
    "git_pull",
    "git_push",
    "load_config",
]
