"""Handlers behind the vcs subcommands.

Every handler receives the session and the arguments that followed the
command token, and returns an exit status. Handlers call each other by name
through ``session.run`` so aliases and git passthrough behave the same as on
the command line.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

from rich.markup import escape

from git_helpers.git import GitError, sanitize_branch_name
from git_helpers.pullrequest import open_url, pull_request_url
from git_helpers.search import search_branches, select_branch

if TYPE_CHECKING:
    from git_helpers.dispatch import Session

logger = logging.getLogger(__name__)

FORCE_FLAGS = ("-f", "--force")
SHALLOW_FLAGS = ("-s", "--shallow")
PUSH_FLAG = "--push"


@dataclass(frozen=True)
class Command:
    """A subcommand, its optional shorthand and the function implementing it."""

    name: str
    handler: Callable[["Session", list[str]], int]
    alias: Optional[str] = None


def _missing(session: "Session", usage: str) -> int:
    session.console.print(f"[yellow]Usage:[/yellow] vcs {escape(usage)}")
    return 0


def _switched(session: "Session", branch: str) -> None:
    session.console.print(f"Switched to [cyan]{escape(branch)}[/cyan]")


def current_branch(session: "Session", args: list[str]) -> int:
    """Print the active branch, HEAD when it is detached."""
    session.echo(session.repo.get_current_branch_name() or "HEAD")
    return 0


def checkout(session: "Session", args: list[str]) -> int:
    """Check out an existing branch, falling back to a search when the name is unknown."""
    if not args:
        return _missing(session, "checkout BRANCH")

    repo = session.repo
    branch = args[0]
    repo.fetch_branch(branch)

    if repo.branch_exists(branch):
        repo.checkout(branch)
        _switched(session, branch)
        return 0

    phrase = branch
    branch = select_branch(search_branches(repo, phrase), console=session.console)
    if not branch:
        session.console.print(f"No branch found for phrase '{escape(phrase)}'")
        return 0

    repo.checkout(branch)
    _switched(session, branch)
    return 0


def checkout_new(session: "Session", args: list[str]) -> int:
    """Create a branch from the current branch or from a given base."""
    if not args:
        return _missing(session, "checkout-new BRANCH [BASE]")

    repo = session.repo
    base = repo.get_current_branch_name()
    if len(args) > 1 and args[1] != base:
        if session.run("checkout", args[1]) == 0:
            try:
                repo.pull()
            except GitError as err:
                logger.debug("Updating %s failed: %s", args[1], err)

    branch = sanitize_branch_name(args[0])
    repo.create_branch(branch)
    _switched(session, branch)
    return 0


def commit_all(session: "Session", args: list[str]) -> int:
    """Stage and commit every change with the given message."""
    if not args or not args[0].strip():
        session.console.print("[yellow]A commit message is required[/yellow]")
        return 1
    session.echo(session.repo.commit_all(args[0]))
    return 0


def commit_all_push(session: "Session", args: list[str]) -> int:
    """Commit everything, then push the active branch."""
    status = session.run("commit-all", *args[:1])
    if status != 0:
        return status
    return session.run("push")


def commit_all_pull_request(session: "Session", args: list[str]) -> int:
    """Commit everything, push, then open a pull request."""
    status = session.run("commit-all-push", *args[:1])
    if status != 0:
        return status
    return session.run("pull-request")


def commit_history(session: "Session", args: list[str]) -> int:
    """Show the most recent commits."""
    max_count = session.settings.history_count
    if args:
        try:
            max_count = int(args[0])
        except ValueError:
            session.console.print(f"[red]Error:[/red] '{escape(args[0])}' is not a number")
            return 1
    session.echo(session.repo.history(max_count))
    return 0


def branch_delete(session: "Session", args: list[str]) -> int:
    """Delete a branch locally, and remotely when forced."""
    if not args:
        return _missing(session, "branch-delete BRANCH [-f | --force]")

    repo = session.repo
    branch = args[0]
    if branch == repo.get_current_branch_name():
        session.console.print("You can't delete a branch you're currently checked out at!")
        return 0

    status = 0
    try:
        repo.delete_branch(branch)
        session.console.print(f"Deleted [cyan]{escape(branch)}[/cyan]")
    except GitError as err:
        # A remote-only branch can still be removed from the remote below
        session.console.print(f"[red]Error:[/red] {escape(str(err))}", soft_wrap=True)
        status = 1

    if len(args) > 1 and args[1] in FORCE_FLAGS:
        repo.delete_remote_branch(branch)
        session.console.print(f"Deleted [cyan]{escape(branch)}[/cyan] from {escape(repo.remote)}")
        status = 0
    return status


def branch_exists(session: "Session", args: list[str]) -> int:
    """Print true or false."""
    exists = bool(args) and session.repo.branch_exists(args[0])
    session.echo("true" if exists else "false")
    return 0


def branch_rename(session: "Session", args: list[str]) -> int:
    """Rename the current branch or a given one.

    Supports:
        vcs branch-rename NEW [-f | --force]
        vcs branch-rename OLD NEW [-f | --force]

    Without the force flag only the local branch is renamed.
    """
    force = any(arg in FORCE_FLAGS for arg in args)
    names = [sanitize_branch_name(arg) for arg in args if arg not in FORCE_FLAGS][:2]
    if not names:
        return _missing(session, "branch-rename [OLD] NEW [-f | --force]")

    repo = session.repo
    if len(names) == 1:
        old, new = repo.get_current_branch_name(), names[0]
        repo.rename_branch(new)
    else:
        old, new = names
        repo.rename_branch(old, new)
    session.console.print(f"Renamed [cyan]{escape(old)}[/cyan] to [cyan]{escape(new)}[/cyan]")

    if force:
        repo.rename_remote_branch(old, new)
        session.console.print(f"Replaced {escape(repo.remote)}/{escape(old)} with {escape(new)}")
    return 0


def discard(session: "Session", args: list[str]) -> int:
    """Throw away all local changes."""
    session.repo.discard()
    session.console.print("Discarded all local changes")
    return 0


def master(session: "Session", args: list[str]) -> int:
    """Check out the main branch and update it."""
    status = session.run("checkout", session.settings.main_branch)
    if status != 0:
        return status
    return session.run("pull")


def merge(session: "Session", args: list[str]) -> int:
    """Merge one branch into another and return to where the operator started.

    Uncommitted work is stashed first and restored at the end. The steps
    checkout FROM, pull, checkout INTO, pull, merge FROM run in order and the
    first failing step stops the rest. With ``--push`` the target is pushed,
    but only when it is the active branch after the merge.
    """
    push = PUSH_FLAG in args
    names = [arg for arg in args if arg != PUSH_FLAG]
    if not names:
        return _missing(session, "merge FROM [INTO] [--push]")
    if len(names) == 1:
        return session.git("merge", names[0])

    source, target = names[:2]
    if source == target:
        session.console.print("The 'from' and 'to' branch may not be equal!")
        return 0

    repo = session.repo
    for branch in (source, target):
        if not repo.branch_exists(branch):
            session.console.print(f"Branch '{escape(branch)}' doesn't exist")
            return 0

    original = repo.get_current_branch_name()
    stashed = repo.stash()

    status = 0
    try:
        for step in (("checkout", source), ("pull",), ("checkout", target), ("pull",), ("merge", source)):
            status = session.run(*step)
            if status != 0:
                logger.debug("Merge stopped at '%s' with status %d", " ".join(step), status)
                break

        if push and repo.get_current_branch_name() == target:
            session.run("push")
    finally:
        if original and original != target:
            session.run("checkout", original)
        if stashed:
            repo.stash_pop()

    return status


def pull_request(session: "Session", args: list[str]) -> int:
    """Push the active branch and open the page that creates its pull request."""
    repo = session.repo
    branch = repo.get_current_branch_name()
    push_url = repo.get_push_url()

    # The remote branch has to exist before a pull request can point at it
    session.run("push")

    url = pull_request_url(push_url, branch)
    if url is None:
        session.console.print(f"Couldn't determine the repository host for push url '{escape(push_url)}'", soft_wrap=True)
        return 0

    if not open_url(url):
        session.console.print(f"Open [link={url}]{escape(url)}[/link] to create the pull request", soft_wrap=True)
    return 0


def push(session: "Session", args: list[str]) -> int:
    """Push the active branch and set its upstream."""
    repo = session.repo
    branch = repo.get_current_branch_name()
    repo.push_branch(branch)
    session.console.print(f"Pushed [cyan]{escape(branch)}[/cyan] to {escape(repo.remote)}")
    return 0


def sanitize(session: "Session", args: list[str]) -> int:
    """Print the argument turned into a branch name."""
    session.echo(sanitize_branch_name(args[0]) if args else "")
    return 0


def search(session: "Session", args: list[str]) -> int:
    """Print the branches matching a phrase, one per line."""
    shallow = any(arg in SHALLOW_FLAGS for arg in args)
    phrases = [arg for arg in args if arg not in SHALLOW_FLAGS]
    if not phrases:
        return _missing(session, "search PHRASE [-s | --shallow]")

    for name in search_branches(session.repo, phrases[0], shallow=shallow):
        session.echo(name)
    return 0


COMMANDS = (
    Command("branch-delete", branch_delete, "bd"),
    Command("branch-exists", branch_exists),
    Command("branch-rename", branch_rename, "br"),
    Command("checkout", checkout, "c"),
    Command("checkout-new", checkout_new, "cn"),
    Command("commit-all", commit_all, "ca"),
    Command("commit-all-push", commit_all_push, "cap"),
    Command("commit-all-pull-request", commit_all_pull_request, "capr"),
    Command("commit-history", commit_history, "ch"),
    Command("current-branch", current_branch, "cb"),
    Command("discard", discard, "d"),
    Command("master", master, "ma"),
    Command("merge", merge, "me"),
    Command("pull-request", pull_request, "pr"),
    Command("push", push, "p"),
    Command("sanitize-branch-name", sanitize),
    Command("search", search, "s"),
)
