"""Git operations for MCP Git Manager"""

import logging
from typing import Optional

from ..configuration import LOG_FILE_NAME, ConfigState, ServerConfig
from ..error_handling import CommandFailedError
from .runner import CommandOutcome, GitCommandRunner

logger = logging.getLogger(__name__)

NO_CHANGES_MESSAGE = "No changes to commit."

# Matched against git's C-locale output (GitPython runs git with LC_ALL=C).
NOTHING_TO_COMMIT_MARKERS = ("nothing to commit", "nothing added to commit")
PULL_INFO_MARKERS = ("Updating", "Fast-forward")
PUSH_INFO_PREFIX = "To "

SYMBOLIC_HEAD = "HEAD"


def _require_success(outcome: CommandOutcome, action: str) -> CommandOutcome:
    if not outcome.exited_cleanly:
        raise CommandFailedError(action, outcome)
    return outcome


def load_config(state: ConfigState, working_dir: str) -> str:
    """Set the working directory for subsequent git operations"""
    config = state.set_working_directory(working_dir)
    return (
        f"Configuration updated: Working Directory set to '{config.working_directory}'. "
        f"Log file is now at '{config.log_file_path}'."
    )


def get_config(config: ServerConfig) -> str:
    """Describe the current configuration"""
    return (
        "Current Configuration:\n"
        f"- Working Directory: {config.working_directory}\n"
        f"- Log File: {config.log_file_path}"
    )


def git_init(
    config: ServerConfig,
    runner: GitCommandRunner,
    remote_url: str,
    default_branch: Optional[str] = None,
) -> str:
    """Initialize a repository, add the 'origin' remote and optionally rename the branch.

    The first failing step aborts the sequence.

    Raises:
        CommandFailedError: If any git step exits non-zero.
    """
    action = "initialize Git repository"
    cwd = config.working_directory

    logger.info(f"Initializing Git repository in {cwd}...")
    _require_success(runner.run(["init"], cwd), action)

    logger.info(f"Adding remote 'origin' with URL: {remote_url}")
    _require_success(runner.run(["remote", "add", "origin", remote_url], cwd), action)

    branch_message = ""
    if default_branch:
        logger.info(f"Setting default branch to '{default_branch}'")
        _require_success(runner.run(["branch", "-M", default_branch], cwd), action)
        branch_message = f" Default branch set to '{default_branch}'."

    return f"Git repository initialized in {cwd}, remote 'origin' added.{branch_message}"


def git_pull(
    config: ServerConfig,
    runner: GitCommandRunner,
    branch: Optional[str] = None,
    remote: str = "origin",
) -> str:
    """Pull from a remote. Without a branch, git picks the current branch's upstream.

    Raises:
        CommandFailedError: If ``git pull`` exits non-zero.
    """
    args = ["pull", remote]
    if branch:
        args.append(branch)

    target = f" branch '{branch}'" if branch else " (current branch)"
    logger.info(
        f"Pulling changes from remote '{remote}'{target} into {config.working_directory}..."
    )
    outcome = _require_success(
        runner.run(args, config.working_directory), "pull from Git repository"
    )

    # git reports progress on stderr; only the exit status decides failure
    if outcome.stderr:
        if any(marker in outcome.stderr for marker in PULL_INFO_MARKERS):
            logger.debug(f"Git pull stderr: {outcome.stderr}")
        else:
            logger.info(f"Git pull stderr: {outcome.stderr}")

    branch_suffix = f" branch '{branch}'" if branch else ""
    message = (
        f"Successfully pulled changes from remote '{remote}'{branch_suffix}. "
        f"Output:\n{outcome.stdout or 'No output'}"
    )
    logger.info(message)
    return message


def detect_current_branch(config: ServerConfig, runner: GitCommandRunner) -> Optional[str]:
    """Return the checked-out branch name, or None if it cannot be determined."""
    outcome = runner.run(["rev-parse", "--abbrev-ref", "HEAD"], config.working_directory)
    if not outcome.exited_cleanly:
        logger.info(
            f"Could not detect current branch: {outcome.failure_message}. "
            f"Pushing to remote {SYMBOLIC_HEAD}."
        )
        return None

    branch = outcome.stdout.strip()
    if not branch:
        return None
    logger.info(f"Detected current branch: {branch}")
    return branch


def git_push(
    config: ServerConfig,
    runner: GitCommandRunner,
    commit_message: str,
    branch: Optional[str] = None,
    remote: str = "origin",
) -> str:
    """Stage everything, commit and push.

    An empty commit is not an error: the result is ``NO_CHANGES_MESSAGE`` and
    nothing is pushed.

    Raises:
        CommandFailedError: If staging, committing (other than "nothing to
            commit") or pushing exits non-zero.
    """
    action = "push to Git repository"
    cwd = config.working_directory

    logger.info(f"Adding all changes in {cwd}...")
    _require_success(
        runner.run(["add", "--", ".", f":(exclude){LOG_FILE_NAME}"], cwd), action
    )

    logger.info(f'Committing changes with message: "{commit_message}"')
    commit = runner.run(["commit", "-m", commit_message], cwd)
    if not commit.exited_cleanly:
        if any(marker in commit.output for marker in NOTHING_TO_COMMIT_MARKERS):
            logger.info(NO_CHANGES_MESSAGE)
            return NO_CHANGES_MESSAGE
        raise CommandFailedError(action, commit)

    current_branch = branch or detect_current_branch(config, runner)

    branch_suffix = f" branch '{current_branch}'" if current_branch else ""
    logger.info(f"Pushing changes to remote '{remote}'{branch_suffix}...")
    outcome = _require_success(
        runner.run(["push", remote, current_branch or SYMBOLIC_HEAD], cwd), action
    )

    if outcome.stderr:
        informational = all(
            line.startswith(PUSH_INFO_PREFIX) or line.startswith(" ")
            for line in outcome.stderr.splitlines()
            if line
        )
        if informational:
            logger.debug(f"Git push stderr: {outcome.stderr}")
        else:
            logger.info(f"Git push stderr: {outcome.stderr}")

    message = (
        f"Successfully pushed changes to remote '{remote}'{branch_suffix} "
        f'with message: "{commit_message}". Output:\n{outcome.stdout or "No output"}'
    )
    logger.info(message)
    return message
