"""Tests for branch search and selection."""

from io import StringIO
from pathlib import Path
from typing import Optional

import pytest
from git import Repo
from rich.console import Console

from git_helpers.git import BranchRef, BranchScope, GitError, GitRepo
from git_helpers.search import search_branches, select_branch


class FakeRepo:
    """Stands in for GitRepo with a fixed branch listing."""

    def __init__(self, branches: list[BranchRef], current: str = "master", after_fetch: Optional[list[BranchRef]] = None):
        self.branches = branches
        self.current = current
        self.after_fetch = after_fetch
        self.fetches = 0
        self.fail_fetch = False

    def get_current_branch_name(self) -> str:
        return self.current

    def list_branches(self) -> list[BranchRef]:
        return self.branches

    def fetch_all(self) -> None:
        self.fetches += 1
        if self.fail_fetch:
            raise GitError("network down")
        if self.after_fetch is not None:
            self.branches = self.after_fetch


def local(name: str) -> BranchRef:
    return BranchRef(name, BranchScope.LOCAL)


def remote(name: str) -> BranchRef:
    return BranchRef(name, BranchScope.REMOTE, "origin")


def test_search_example_listing() -> None:
    """Test the local and remote copy of a branch show up once, in order."""
    repo = FakeRepo([local("bug/timeout"), remote("bug/login-fix"), local("bug/login-fix"), local("master")])
    assert search_branches(repo, "bug/") == ["bug/login-fix", "bug/timeout"]
    assert repo.fetches == 0


def test_search_is_case_insensitive() -> None:
    repo = FakeRepo([local("Feature/Login"), local("master")])
    assert search_branches(repo, "feature/login") == ["Feature/Login"]


def test_search_deduplicates_local_and_remote() -> None:
    repo = FakeRepo([local("release"), remote("release")], current="master")
    assert search_branches(repo, "release") == ["release"]


def test_search_skips_current_local_branch() -> None:
    """Test that the checked out branch isn't offered, its remote copy still is."""
    repo = FakeRepo([local("bug/a"), local("bug/b")], current="bug/a")
    assert search_branches(repo, "bug") == ["bug/b"]

    repo = FakeRepo([local("bug/a"), remote("bug/a")], current="bug/a")
    assert search_branches(repo, "bug") == ["bug/a"]


def test_search_without_matches_refreshes_once() -> None:
    """Test that no match leads to exactly one refresh and an empty result."""
    repo = FakeRepo([local("master")])
    assert search_branches(repo, "nothing") == []
    assert repo.fetches == 1


def test_search_finds_branch_after_refresh() -> None:
    repo = FakeRepo([local("master")], after_fetch=[local("master"), remote("hotfix/new")])
    assert search_branches(repo, "hotfix") == ["hotfix/new"]
    assert repo.fetches == 1


def test_shallow_search_never_refreshes() -> None:
    repo = FakeRepo([local("master")])
    assert search_branches(repo, "nothing", shallow=True) == []
    assert repo.fetches == 0


def test_failed_refresh_gives_empty_result() -> None:
    repo = FakeRepo([local("master")])
    repo.fail_fetch = True
    assert search_branches(repo, "nothing") == []
    assert repo.fetches == 1


def test_search_real_repository(test_env: tuple[Path, Path]) -> None:
    """Test searching local, remote and remote-only branches."""
    local_path, _ = test_env
    repo = GitRepo(local_path)
    assert search_branches(repo, "bug/") == ["bug/login-fix", "bug/timeout"]
    assert search_branches(repo, "REMOTE") == ["feature/remote"]
    assert search_branches(repo, "feature") == ["feature/payments", "feature/remote"]


def test_search_fetches_new_remote_branch(test_env: tuple[Path, Path]) -> None:
    """Test that a branch only known to the remote is found after the refresh."""
    local_path, remote_path = test_env
    Repo(remote_path).git.branch("hotfix/urgent", "master")

    repo = GitRepo(local_path)
    assert search_branches(repo, "urgent", shallow=True) == []
    assert search_branches(repo, "urgent") == ["hotfix/urgent"]


def test_select_single_candidate_does_not_prompt() -> None:
    def ask(count: int) -> int:
        raise AssertionError("should not prompt")

    assert select_branch(["bug/login-fix"], ask=ask) == "bug/login-fix"


def test_select_without_candidates() -> None:
    assert select_branch([]) is None
    assert select_branch("") is None
    assert select_branch(["", "  "]) is None


def test_select_splits_combined_string() -> None:
    assert select_branch("  bug/login-fix\n") == "bug/login-fix"
    assert select_branch("bug/a\nbug/b\n", ask=lambda count: 2) == "bug/b"


@pytest.mark.parametrize("choice", [1, 2, 3])
def test_select_returns_chosen_candidate(choice: int) -> None:
    candidates = ["bug/a", "bug/b", "bug/c"]
    asked = []

    def ask(count: int) -> int:
        asked.append(count)
        return choice

    assert select_branch(candidates, ask=ask) == candidates[choice - 1]
    assert asked == [3]


def test_select_strips_whitespace() -> None:
    assert select_branch([" bug/a ", "bug/ b"], ask=lambda count: 2) == "bug/b"
    assert select_branch([" bug/a\t"]) == "bug/a"


def test_select_lists_numbered_candidates(capsys: pytest.CaptureFixture[str]) -> None:
    select_branch(["bug/a", "bug/b"], ask=lambda count: 1)
    output = capsys.readouterr().out
    assert "1) bug/a" in output
    assert "2) bug/b" in output


def test_select_lists_candidates_on_given_console(capsys: pytest.CaptureFixture[str]) -> None:
    output = StringIO()
    assert select_branch(["bug/a", "bug/b"], ask=lambda count: 2, console=Console(file=output, width=200)) == "bug/b"
    assert "1) bug/a" in output.getvalue()
    assert "2) bug/b" in output.getvalue()
    assert capsys.readouterr().out == ""
