"""Tool call dispatch for MCP Git Manager"""

import asyncio
import logging
import os
import threading
import time
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ValidationError

from ..configuration import ConfigState, ServerConfig
from ..error_handling import (
    ArgumentValidationError,
    ErrorKind,
    UnknownToolError,
    classify_error,
    format_failure,
)
from ..git import models, operations
from ..git.runner import GitCommandRunner
from .tools import (
    Failure,
    GitManagerTools,
    Success,
    ToolDefinition,
    ToolRegistry,
    ToolResult,
)

logger = logging.getLogger(__name__)


def _format_violations(error: ValidationError) -> List[Tuple[str, str]]:
    return [
        (".".join(str(part) for part in detail["loc"]) or "(root)", detail["msg"])
        for detail in error.errors()
    ]


class CallToolHandler:
    """Validates tool calls, routes them to their operation and normalizes the result.

    Every call, successful or not, comes back as a ``Success`` or ``Failure``;
    nothing raised by an operation escapes ``dispatch``.

    Calls are serialized by a lock taken inside ``dispatch``, on the worker
    thread. A caller that is cancelled while waiting does not release it, so a
    git sequence that was already started finishes before the next one begins
    and the working directory cannot change underneath it.
    """

    def __init__(
        self,
        config_state: Optional[ConfigState] = None,
        runner: Optional[GitCommandRunner] = None,
    ):
        self.config_state = config_state or ConfigState()
        self.runner = runner or GitCommandRunner()
        self.registry = ToolRegistry()
        self._lock = threading.Lock()
        self._setup_handlers()

    def _setup_handlers(self):
        """Register all tools with their handlers"""
        state = self.config_state
        runner = self.runner

        tools = [
            ToolDefinition(
                name=GitManagerTools.LOAD_CONFIG.value,
                description="Sets the working directory for Git operations.",
                schema=models.LoadConfig,
                handler=lambda args, config: operations.load_config(
                    state, args.working_dir
                ),
            ),
            ToolDefinition(
                name=GitManagerTools.GET_CONFIG.value,
                description="Retrieves the current working directory used for Git operations.",
                schema=models.GetConfig,
                handler=lambda args, config: operations.get_config(config),
            ),
            ToolDefinition(
                name=GitManagerTools.INIT.value,
                description=(
                    "Initializes a new Git repository, adds a remote origin, "
                    "and optionally sets a default branch."
                ),
                schema=models.GetInit,
                handler=lambda args, config: operations.git_init(
                    config, runner, args.remoteUrl, args.defaultBranch
                ),
            ),
            ToolDefinition(
                name=GitManagerTools.PULL.value,
                description=(
                    "Pulls changes from a remote repository for the specified "
                    "or current branch."
                ),
                schema=models.GetPull,
                handler=lambda args, config: operations.git_pull(
                    config, runner, args.branch, args.remote
                ),
            ),
            ToolDefinition(
                name=GitManagerTools.PUSH.value,
                description=(
                    "Adds all changes, commits, and pushes to a remote repository "
                    "for the specified or current branch."
                ),
                schema=models.GetPush,
                handler=lambda args, config: operations.git_push(
                    config, runner, args.commitMessage, args.branch, args.remote
                ),
            ),
        ]

        for tool in tools:
            self.registry.register(tool)
        logger.debug(f"Initialized tool registry with {len(self.registry.tools)} tools")

    def _validate(self, tool_def: ToolDefinition, arguments: Any) -> BaseModel:
        try:
            return tool_def.schema.model_validate(
                arguments if arguments is not None else {}
            )
        except ValidationError as e:
            raise ArgumentValidationError(tool_def.name, _format_violations(e)) from e

    def dispatch(
        self,
        name: str,
        arguments: Optional[Dict[str, Any]] = None,
        request_id: Optional[str] = None,
    ) -> ToolResult:
        """Run one tool call to completion and return its uniform result."""
        with self._lock:
            return self._dispatch(name, arguments, request_id)

    def _dispatch(
        self,
        name: str,
        arguments: Optional[Dict[str, Any]],
        request_id: Optional[str],
    ) -> ToolResult:
        try:
            tool_def = self.registry.get_tool(name)
            if tool_def is None:
                raise UnknownToolError(name)

            params = self._validate(tool_def, arguments)
            config: ServerConfig = self.config_state.get_config()
            return Success(tool_def.handler(params, config))

        except Exception as e:
            context = classify_error(e, tool_name=name, request_id=request_id)
            if context.kind is ErrorKind.INTERNAL:
                logger.error(
                    f"[{context.request_id}] Error processing tool request '{name}': {e}",
                    exc_info=True,
                )
            else:
                logger.error(f"[{context.request_id}] Error processing tool request '{name}': {e}")
            return Failure(format_failure(context))

    async def call_tool(
        self, name: str, arguments: Optional[Dict[str, Any]] = None
    ) -> ToolResult:
        """Main tool call entry point; serializes calls and keeps the event loop free"""
        request_id = os.urandom(4).hex()
        logger.info(f"[{request_id}] Tool call: {name}")
        logger.debug(f"[{request_id}] Arguments: {arguments}")

        start_time = time.time()
        result = await asyncio.to_thread(self.dispatch, name, arguments, request_id)
        duration = time.time() - start_time

        outcome = "completed" if isinstance(result, Success) else "failed"
        logger.debug(
            f"[{request_id}] Tool '{name}' {outcome} in {duration:.2f}s",
            extra={"tool": name, "request_id": request_id, "duration_ms": duration * 1000},
        )
        return result
