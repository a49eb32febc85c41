"""
Global pytest configuration and fixtures for the MCP Git Manager test suite.

Repositories are real git repositories created under ``tmp_path``; the
"remote" is a bare repository on the local filesystem, so no network access
is needed.
"""

import subprocess
import threading
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

import pytest

from mcp_git_manager.configuration import ConfigState
from mcp_git_manager.core.handlers import CallToolHandler
from mcp_git_manager.git.runner import CommandOutcome, GitCommandRunner


def git(*args: str, cwd: Path) -> str:
    """Run a git command for test setup and return its stdout."""
    result = subprocess.run(
        ["git", *args], cwd=cwd, check=True, capture_output=True, text=True
    )
    return result.stdout.strip()


class GitRepositoryFactory:
    """Factory for creating test git repositories."""

    @staticmethod
    def create_empty_repo(path: Path, branch: str = "main") -> Path:
        path.mkdir(parents=True, exist_ok=True)
        git("init", cwd=path)
        git("symbolic-ref", "HEAD", f"refs/heads/{branch}", cwd=path)
        return path

    @staticmethod
    def create_clean_repo(path: Path, branch: str = "main") -> Path:
        """Create a clean git repository with initial commit."""
        GitRepositoryFactory.create_empty_repo(path, branch)
        (path / "README.md").write_text("# Test Repository")
        git("add", "README.md", cwd=path)
        git("commit", "-m", "Initial commit", cwd=path)
        return path

    @staticmethod
    def create_bare_remote(path: Path) -> Path:
        path.mkdir(parents=True, exist_ok=True)
        git("init", "--bare", cwd=path)
        return path

    @staticmethod
    def create_tracking_repo(path: Path, remote: Path, branch: str = "main") -> Path:
        """Create a clean repository whose 'origin' is ``remote``, with ``branch`` pushed."""
        GitRepositoryFactory.create_clean_repo(path, branch)
        git("remote", "add", "origin", str(remote), cwd=path)
        git("push", "-u", "origin", branch, cwd=path)
        return path


class RecordingRunner(GitCommandRunner):
    """Real runner that remembers every argument vector it was asked to run."""

    def __init__(self):
        super().__init__()
        self.calls: List[List[str]] = []

    def run(self, args: Sequence[str], working_directory: Path) -> CommandOutcome:
        self.calls.append(list(args))
        return super().run(args, working_directory)


class ScriptedRunner(GitCommandRunner):
    """Fake runner answering by git subcommand; unknown subcommands succeed silently."""

    def __init__(self, responses: Optional[Dict[str, CommandOutcome]] = None, delay: float = 0.0):
        super().__init__()
        self.responses = responses or {}
        self.delay = delay
        self.calls: List[List[str]] = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def run(self, args: Sequence[str], working_directory: Path) -> CommandOutcome:
        with self._lock:
            self.calls.append(list(args))
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                time.sleep(self.delay)
            command = ("git", *args)
            response = self.responses.get(args[0])
            if response is None:
                return CommandOutcome(command=command, exited_cleanly=True, status=0)
            return response
        finally:
            with self._lock:
                self.active -= 1


def failed_outcome(args: Sequence[str], stderr: str = "", stdout: str = "", status: int = 1) -> CommandOutcome:
    command = ("git", *args)
    message = f"Command '{' '.join(command)}' exited with status {status}"
    if stderr:
        message += f"\nstderr: {stderr}"
    return CommandOutcome(
        command=command,
        exited_cleanly=False,
        stdout=stdout,
        stderr=stderr,
        status=status,
        failure_message=message,
    )


@pytest.fixture(autouse=True)
def git_environment(monkeypatch, tmp_path):
    """Isolate git from the developer's configuration and give it an identity."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test User")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test User")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_TERMINAL_PROMPT", "0")


@pytest.fixture
def git_repo_factory():
    """Provide access to GitRepositoryFactory."""
    return GitRepositoryFactory


@pytest.fixture
def remote_repo(tmp_path: Path) -> Path:
    return GitRepositoryFactory.create_bare_remote(tmp_path / "remote.git")


@pytest.fixture
def work_repo(tmp_path: Path, remote_repo: Path) -> Path:
    return GitRepositoryFactory.create_tracking_repo(tmp_path / "work", remote_repo)


@pytest.fixture
def config_state(tmp_path: Path) -> ConfigState:
    return ConfigState(base_directory=tmp_path)


@pytest.fixture
def recording_runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def handler(config_state: ConfigState, recording_runner: RecordingRunner) -> CallToolHandler:
    return CallToolHandler(config_state, recording_runner)


@pytest.fixture
def make_scripted_runner() -> Callable[..., ScriptedRunner]:
    return ScriptedRunner


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Tests that drive the MCP server end to end")
    config.addinivalue_line("markers", "requires_git: Tests that require git repository setup")


def pytest_collection_modifyitems(config, items):
    """Mark tests that build real repositories."""
    for item in items:
        if {"work_repo", "remote_repo", "git_repo_factory"} & set(item.fixturenames):
            item.add_marker(pytest.mark.requires_git)
