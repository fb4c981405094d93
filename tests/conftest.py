"""Test configuration and fixtures."""

from pathlib import Path
from typing import Generator

import pytest
from git import Actor, Repo
from typer.testing import CliRunner


@pytest.fixture
def test_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[tuple[Path, Path], None, None]:
    """Create a test environment with local and remote repositories.

    Branches:
        master: tracked, active
        bug/login-fix: local and remote, tracked
        bug/timeout: local only
        feature/payments: local and remote, tracked
        feature/remote: remote only

    Returns:
        Tuple of (local_repo_path, remote_repo_path)
    """
    # Merges run by the commands must never wait for an editor
    monkeypatch.setenv("GIT_MERGE_AUTOEDIT", "no")
    monkeypatch.setenv("GIT_TERMINAL_PROMPT", "0")

    remote_path = tmp_path / "remote"
    local_path = tmp_path / "local"
    remote_path.mkdir()
    local_path.mkdir()

    Repo.init(remote_path, bare=True)
    local_repo = Repo.init(local_path)

    author = Actor("Test User", "test@example.com")
    local_repo.config_writer().set_value("user", "name", author.name).release()
    local_repo.config_writer().set_value("user", "email", author.email).release()

    readme = local_path / "README.md"
    readme.write_text("# Test Repository")
    local_repo.index.add(["README.md"])
    local_repo.index.commit("Initial commit", author=author)

    # Ensure we're on master whatever the default branch name is
    if "master" not in local_repo.heads:
        local_repo.create_head("master")
    master = local_repo.heads.master
    master.checkout()

    origin = local_repo.create_remote("origin", url=str(remote_path))
    origin.push("master")
    master.set_tracking_branch(origin.refs.master)

    def create_branch(name: str, content: str, push: bool = True) -> None:
        """Create a branch off master with one commit."""
        master.checkout()
        branch = local_repo.create_head(name)
        branch.checkout()

        file_name = name.replace("/", "_") + ".txt"
        (local_path / file_name).write_text(content)
        local_repo.index.add([file_name])
        local_repo.index.commit(f"Add {name}", author=author)

        if push:
            origin.push(name)
            branch.set_tracking_branch(origin.refs[name])

    create_branch("bug/login-fix", "Login fix")
    create_branch("bug/timeout", "Timeout fix", push=False)
    create_branch("feature/payments", "Payments")

    create_branch("feature/remote", "Remote only")
    master.checkout()
    local_repo.delete_head("feature/remote", force=True)

    yield local_path, remote_path


@pytest.fixture
def local_repo(test_env: tuple[Path, Path]) -> Repo:
    local_path, _ = test_env
    return Repo(local_path)


@pytest.fixture
def remote_repo(test_env: tuple[Path, Path]) -> Repo:
    _, remote_path = test_env
    return Repo(remote_path)


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()
