"""Git repository operations."""

import logging
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

logger = logging.getLogger(__name__)

LOCAL_PREFIX = "refs/heads/"
REMOTE_PREFIX = "refs/remotes/"


class BranchScope(Enum):
    """Where a branch reference lives."""

    LOCAL = "local"
    REMOTE = "remote"


@dataclass(frozen=True)
class BranchRef:
    """A branch known to the repository, with the remote prefix stripped."""

    name: str
    scope: BranchScope
    remote: str = ""

    @classmethod
    def from_refname(cls, refname: str) -> Optional["BranchRef"]:
        """Build a reference from a full refname, None for refs that aren't branches."""
        if refname.startswith(LOCAL_PREFIX):
            return cls(refname[len(LOCAL_PREFIX) :], BranchScope.LOCAL)
        if refname.startswith(REMOTE_PREFIX):
            remote, _, name = refname[len(REMOTE_PREFIX) :].partition("/")
            # Symbolic refs such as origin/HEAD point at another branch
            if not name or name == "HEAD":
                return None
            return cls(name, BranchScope.REMOTE, remote)
        return None


class GitError(Exception):
    """Git operation error."""


def run_git(args: Sequence[str], cwd: Path) -> int:
    """Run git with inherited stdio and return its exit status.

    Raises:
        GitError: If git can't be started, e.g. for a missing working directory
    """
    logger.debug("git %s (cwd=%s)", " ".join(args), cwd)
    try:
        return subprocess.run(["git", *args], cwd=cwd).returncode
    except OSError as err:
        raise GitError(f"Failed to run git in {cwd}: {err}") from err


def sanitize_branch_name(name: str) -> str:
    """Turn free text into something usable as a branch name."""
    return "_".join(name.replace("&", " and ").split())


class GitRepo:
    """Git repository operations."""

    def __init__(self, path: Path, remote: str = "origin") -> None:
        """Initialize repository."""
        try:
            self.repo: Repo = Repo(path, search_parent_directories=True)
            if self.repo.bare:
                raise GitError("Cannot operate on bare repository")
        except (GitCommandError, ValueError, InvalidGitRepositoryError, NoSuchPathError) as err:
            raise GitError(f"Failed to open repository: {err}") from err
        self.remote = remote

    def get_current_branch_name(self) -> str:
        """Get current branch name."""
        try:
            try:
                return self.repo.active_branch.name
            except TypeError:
                # Detached HEAD has no branch to return to
                return ""
        except (GitCommandError, ValueError) as err:
            raise GitError(f"Failed to get current branch: {err}") from err

    def branch_exists(self, branch: str) -> bool:
        """Check whether git can resolve the given name."""
        if not branch:
            return False
        try:
            self.repo.git.rev_parse("--verify", "--quiet", branch)
            return True
        except GitCommandError:
            return False

    def list_branches(self) -> list[BranchRef]:
        """List local and remote-tracking branches."""
        try:
            output = self.repo.git.for_each_ref("--format=%(refname)", "refs/heads", "refs/remotes")
        except GitCommandError as err:
            raise GitError(f"Failed to list branches: {err}") from err

        branches = []
        for refname in output.splitlines():
            ref = BranchRef.from_refname(refname.strip())
            if ref is not None:
                branches.append(ref)
        return branches

    def fetch_branch(self, branch: str) -> None:
        """Fetch a single branch from the remote, ignoring failures."""
        try:
            self.repo.git.fetch(self.remote, branch)
        except GitCommandError as err:
            logger.debug("Fetching %s from %s failed: %s", branch, self.remote, err)

    def fetch_all(self) -> None:
        """Refresh remote branch metadata from every remote."""
        try:
            self.repo.git.fetch("--all")
        except GitCommandError as err:
            raise GitError(f"Failed to fetch from remotes: {err}") from err

    def pull(self) -> None:
        """Update the active branch from its upstream."""
        try:
            self.repo.git.pull()
        except GitCommandError as err:
            raise GitError(f"Failed to pull: {err}") from err

    def checkout(self, branch: str) -> None:
        """Switch to an existing branch, creating it from the remote one if needed."""
        try:
            self.repo.git.checkout(branch)
        except GitCommandError as err:
            raise GitError(f"Failed to checkout '{branch}': {err}") from err

    def create_branch(self, branch: str) -> None:
        """Create a branch from HEAD and switch to it."""
        try:
            self.repo.git.checkout("-b", branch)
        except GitCommandError as err:
            raise GitError(f"Failed to create branch '{branch}': {err}") from err

    def rename_branch(self, *names: str) -> None:
        """Rename the current branch (one name) or a given branch (old and new name)."""
        try:
            self.repo.git.branch("-m", *names)
        except GitCommandError as err:
            raise GitError(f"Failed to rename branch: {err}") from err

    def delete_branch(self, branch: str) -> None:
        """Delete a local branch, merged or not."""
        try:
            self.repo.git.branch("-D", branch)
        except GitCommandError as err:
            raise GitError(f"Failed to delete branch '{branch}': {err}") from err

    def delete_remote_branch(self, branch: str) -> None:
        """Delete a branch from the remote."""
        try:
            self.repo.git.push(self.remote, "--delete", branch)
        except GitCommandError as err:
            raise GitError(f"Failed to delete '{branch}' from {self.remote}: {err}") from err

    def rename_remote_branch(self, old: str, new: str) -> None:
        """Replace the remote branch `old` with the local branch `new`."""
        try:
            self.repo.git.push(self.remote, f":{old}", new)
        except GitCommandError as err:
            raise GitError(f"Failed to rename '{old}' on {self.remote}: {err}") from err

    def push_branch(self, branch: str) -> None:
        """Push a branch and set its upstream."""
        try:
            self.repo.git.push("-u", self.remote, branch)
        except GitCommandError as err:
            raise GitError(f"Failed to push '{branch}' to {self.remote}: {err}") from err

    def get_push_url(self) -> str:
        """Get the push url of the remote."""
        try:
            return self.repo.git.remote("get-url", "--push", self.remote).strip()
        except GitCommandError as err:
            raise GitError(f"Failed to get push url for {self.remote}: {err}") from err

    def commit_all(self, message: str) -> str:
        """Stage everything and commit it."""
        try:
            self.repo.git.add(".")
            return self.repo.git.commit("-m", message)
        except GitCommandError as err:
            raise GitError(f"Failed to commit: {err}") from err

    def discard(self) -> None:
        """Throw away all staged and unstaged changes."""
        try:
            self.repo.git.checkout(".")
            self.repo.git.reset("--hard")
        except GitCommandError as err:
            raise GitError(f"Failed to discard changes: {err}") from err

    def history(self, max_count: int) -> str:
        """Get the last commits as git log prints them."""
        try:
            return self.repo.git.log("--decorate=short", f"--max-count={max_count}")
        except GitCommandError as err:
            raise GitError(f"Failed to read history: {err}") from err

    def stash(self) -> bool:
        """Stash all changes including untracked files.

        Returns:
            bool: True if a stash entry was created, False if there was nothing to save
        """
        try:
            before = len(self.repo.git.stash("list").splitlines())
            self.repo.git.stash("push", "--include-untracked")
            return len(self.repo.git.stash("list").splitlines()) > before
        except GitCommandError as err:
            raise GitError(f"Failed to stash changes: {err}") from err

    def stash_pop(self) -> None:
        """Apply and drop the newest stash entry."""
        try:
            self.repo.git.stash("pop")
        except GitCommandError as err:
            raise GitError(f"Failed to restore stashed changes: {err}") from err
