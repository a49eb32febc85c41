import asyncio
import contextlib
import logging
import signal
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from .configuration import ConfigState
from .core.handlers import CallToolHandler
from .core.tools import Failure

logger = logging.getLogger(__name__)

SERVER_NAME = "mcp-git-manager"


class ToolCallFailed(Exception):
    """Raised to the MCP SDK so the failure is reported as an ``isError`` result."""


def load_environment_variables(directory: Optional[Path] = None) -> Optional[Path]:
    """Load a ``.env`` file from ``directory`` (default: cwd).

    Existing environment variables are never overridden.

    Returns:
        The loaded file, or None if there was none.
    """
    env_file = (directory or Path.cwd()) / ".env"
    if not env_file.exists():
        logger.debug("No .env file found, using system environment variables only")
        return None
    try:
        load_dotenv(env_file, override=False)
    except Exception as e:
        logger.warning(f"Failed to load .env file {env_file}: {e}")
        return None
    logger.info(f"Loaded environment variables from {env_file}")
    return env_file


def create_server(handler: CallToolHandler) -> Server:
    """Build the MCP server around a dispatcher."""
    server = Server(SERVER_NAME)

    @server.list_tools()
    async def list_tools() -> List[Tool]:
        return handler.registry.list_tools()

    # The dispatcher validates arguments itself and reports every violation
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: Dict[str, Any]) -> List[TextContent]:
        result = await handler.call_tool(name, arguments)
        if isinstance(result, Failure):
            raise ToolCallFailed(result.message)
        return [TextContent(type="text", text=result.text)]

    return server


def _request_shutdown(signum: int, task: asyncio.Task) -> None:
    logger.info(f"Received {signal.Signals(signum).name}. Shutting down server...")
    task.cancel()


def _install_signal_handlers(task: asyncio.Task) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _request_shutdown, sig, task)
        except (NotImplementedError, RuntimeError):
            # Not supported on this platform or not in the main thread
            pass


async def serve(
    working_dir: Optional[Path] = None,
    config_state: Optional[ConfigState] = None,
) -> None:
    """Run the server on stdio until the client disconnects or a signal arrives."""
    config_state = config_state or ConfigState()
    if working_dir is not None:
        config_state.set_working_directory(working_dir)

    config = config_state.get_config()
    logger.info(
        f"Starting {SERVER_NAME}... WORKING_DIR: {config.working_directory}"
    )

    handler = CallToolHandler(config_state)
    server = create_server(handler)
    options = server.create_initialization_options()

    current = asyncio.current_task()
    if current is not None:
        _install_signal_handlers(current)

    try:
        async with stdio_server() as (read_stream, write_stream):
            # stdio_server holds the real stdout; stray prints go to stderr
            with contextlib.redirect_stdout(sys.stderr):
                logger.info(f"{SERVER_NAME} running on stdio. WORKING_DIR: {config.working_directory}")
                await server.run(read_stream, write_stream, options, raise_exceptions=False)
    except asyncio.CancelledError:
        # Cancelled by _request_shutdown
        pass
    finally:
        logger.info("Server shutting down.")

