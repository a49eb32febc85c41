"""Configuration for MCP Git Manager.

The only mutable server-wide state is the working directory that git commands
run in, plus the audit log path derived from it. ``ConfigState`` owns it and is
handed to the dispatcher by reference; ``ServerConfig`` is the immutable
snapshot a single tool call works against.
"""

from .state import LOG_FILE_NAME, ConfigState, ServerConfig

__all__ = [
    "LOG_FILE_NAME",
    "ConfigState",
    "ServerConfig",
]
