import asyncio
import logging
import os
from pathlib import Path

import click

from .configuration import ConfigState
from .error_handling import StateError
from .logging_config import configure_logging
from .server import load_environment_variables, serve


@click.command()
@click.option(
    "--working-dir",
    "-w",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="MCP_GIT_MANAGER_WORKING_DIR",
    help="Initial working directory for git commands (default: current directory)",
)
@click.option("-v", "--verbose", count=True, help="Increase verbosity")
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    help="Format of the diagnostic log on stderr",
)
@click.option(
    "--no-audit-log",
    is_flag=True,
    help="Do not write the audit log file into the working directory",
)
def main(
    working_dir: Path | None, verbose: int, log_format: str, no_audit_log: bool
) -> None:
    """MCP Git Manager - configure a working directory, then init, pull and push it"""
    load_environment_variables()

    # Resolved after .env so MCP_GIT_MANAGER_WORKING_DIR from the file applies
    if working_dir is None and os.environ.get("MCP_GIT_MANAGER_WORKING_DIR"):
        working_dir = Path(os.environ["MCP_GIT_MANAGER_WORKING_DIR"])

    log_level = os.environ.get("LOG_LEVEL", "INFO")
    if verbose == 1:
        log_level = "INFO"
    elif verbose >= 2:
        log_level = "DEBUG"

    config_state = ConfigState()
    configure_logging(
        log_level,
        log_format=log_format,
        config_state=None if no_audit_log else config_state,
    )

    try:
        asyncio.run(serve(working_dir, config_state=config_state))
    except StateError as e:
        raise click.ClickException(e.message) from e
    except KeyboardInterrupt:
        logging.getLogger(__name__).info("Server interrupted by user")


if __name__ == "__main__":
    main()
