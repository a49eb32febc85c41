"""MCP Git Manager core components"""

from .handlers import CallToolHandler
from .tools import Failure, GitManagerTools, Success, ToolRegistry, ToolResult

__all__ = [
    "CallToolHandler",
    "Failure",
    "GitManagerTools",
    "Success",
    "ToolRegistry",
    "ToolResult",
]
