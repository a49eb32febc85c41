"""Tool registry and result types for MCP Git Manager"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Type, Union

from mcp.types import Tool
from pydantic import BaseModel

from ..configuration import ServerConfig

logger = logging.getLogger(__name__)


class GitManagerTools(str, Enum):
    """Enumeration of all available tools"""

    LOAD_CONFIG = "load_config"
    GET_CONFIG = "get_config"
    INIT = "get_init"
    PULL = "get_pull"
    PUSH = "get_push"


@dataclass(frozen=True)
class Success:
    text: str


@dataclass(frozen=True)
class Failure:
    message: str


ToolResult = Union[Success, Failure]

# (validated arguments, config snapshot) -> result text
ToolHandlerFunc = Callable[[BaseModel, ServerConfig], str]


@dataclass
class ToolDefinition:
    """Complete tool definition with metadata"""

    name: str
    description: str
    schema: Type[BaseModel]
    handler: ToolHandlerFunc


class ToolRegistry:
    """Central registry for all MCP Git Manager tools"""

    def __init__(self):
        self.tools: Dict[str, ToolDefinition] = {}

    def register(self, tool_def: ToolDefinition):
        """Register a tool in the registry"""
        self.tools[tool_def.name] = tool_def
        logger.debug(f"Registered tool: {tool_def.name}")

    def get_tool(self, name: str) -> Optional[ToolDefinition]:
        """Get tool definition by name"""
        return self.tools.get(name)

    def list_tools(self) -> List[Tool]:
        """Get all tools as MCP Tool objects"""
        return [
            Tool(
                name=tool_def.name,
                description=tool_def.description,
                inputSchema=tool_def.schema.model_json_schema(),
            )
            for tool_def in self.tools.values()
        ]
