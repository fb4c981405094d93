"""Resolve a command token to its handler, or hand it over to git."""

import logging
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from rich.console import Console
from rich.markup import escape

from git_helpers.commands import COMMANDS, Command
from git_helpers.config import Settings
from git_helpers.git import GitError, GitRepo, run_git

logger = logging.getLogger(__name__)

HELP_FLAGS = ("-h", "--help")

USAGE = """
Usage:
    vcs
    vcs [-h | --help]
    vcs [OPTIONS] COMMAND [ARGUMENTS]

Example:
    vcs search sprint_70

Commands not listed below are passed on to git unchanged.

General:
    discard (d)                                 Discard all staged and unstaged changes
    commit-all (ca) MESSAGE                     Commit all changes
    commit-all-push (cap) MESSAGE               Commit all changes and push them
    commit-all-pull-request (capr) MESSAGE      Commit all changes, push them and open a pull request
    commit-history (ch) [MAXCOUNT]              Show recent commits (default 5)
    push (p)                                    Push the active branch to the remote

Branches:
    current-branch (cb)                         Print the active branch
    checkout (c) BRANCH                         Checkout a local or remote branch, searching when it doesn't exist
    checkout-new (cn) BRANCH [BASE]             Create a new branch from the active branch or from BASE
    search (s) PHRASE [-s | --shallow]          Search branches, --shallow skips fetching remote branches
    branch-rename (br) [OLD] NEW [-f | --force] Rename a branch, --force renames it on the remote as well
    branch-delete (bd) BRANCH [-f | --force]    Delete a branch, --force deletes it from the remote as well
    branch-exists BRANCH                        Print true or false
    merge (me) FROM [INTO] [--push]             Merge FROM into INTO, plain git merge when INTO is omitted

Workflow:
    master (ma)                                 Checkout and update the main branch
    pull-request (pr)                           Open a pull request for the active branch

Options (before COMMAND):
    --path PATH             Repository to work in [env: VCS_PATH]
    --remote NAME           Remote to fetch from and push to [env: VCS_REMOTE]
    --main-branch NAME      Branch used by 'master' [env: VCS_MAIN_BRANCH]
    --history-count N       Default for 'commit-history' [env: VCS_HISTORY_COUNT]
    --debug                 Log every git call [env: VCS_DEBUG]
"""


def build_command_table(commands: Iterable[Command]) -> tuple[Mapping[str, Command], Mapping[str, str]]:
    """Index commands by name and shorthand.

    Raises:
        ValueError: If a name or shorthand is registered twice
    """
    by_name: dict[str, Command] = {}
    aliases: dict[str, str] = {}
    for command in commands:
        if command.name in by_name or command.name in aliases:
            raise ValueError(f"Duplicate command name: {command.name}")
        by_name[command.name] = command
        if command.alias is None:
            continue
        if command.alias in aliases or command.alias in by_name:
            raise ValueError(f"Duplicate command alias: {command.alias}")
        aliases[command.alias] = command.name

    return MappingProxyType(by_name), MappingProxyType(aliases)


COMMAND_TABLE, ALIASES = build_command_table(COMMANDS)


def resolve(token: str) -> Optional[Command]:
    """Find the command for a name or shorthand. Aliases are resolved one level only."""
    command = COMMAND_TABLE.get(token)
    if command is None and token in ALIASES:
        command = COMMAND_TABLE.get(ALIASES[token])
    return command


class Session:
    """State shared by the commands of one invocation."""

    def __init__(self, settings: Settings, console: Optional[Console] = None) -> None:
        self.settings = settings
        self.console = console or Console()
        self._repo: Optional[GitRepo] = None

    @property
    def repo(self) -> GitRepo:
        """Repository, opened on first use so passthrough works outside a repository."""
        if self._repo is None:
            self._repo = GitRepo(self.settings.path, remote=self.settings.remote)
        return self._repo

    def run(self, token: str, *args: str) -> int:
        """Run another command of this session, by name, shorthand or as git."""
        return dispatch(self, token, *args)

    def git(self, *args: str) -> int:
        """Run git in the repository directory, output goes straight to the terminal."""
        return run_git(args, self.settings.path)

    def echo(self, text: str) -> None:
        """Print backend output as is."""
        if text:
            self.console.print(text, markup=False, highlight=False, soft_wrap=True)


def dispatch(session: Session, token: Optional[str], *args: str) -> int:
    """Run a vcs command, or git itself when the token isn't one.

    Returns:
        int: Exit status of the handler or of git
    """
    if not token or token in HELP_FLAGS:
        session.console.print(USAGE, markup=False, highlight=False, soft_wrap=True)
        return 0

    command = resolve(token)
    try:
        if command is None:
            logger.debug("'%s' is not a vcs command, passing it to git", token)
            return session.git(token, *args)

        logger.debug("Running %s with %s", command.name, list(args))
        return command.handler(session, list(args))
    except GitError as err:
        session.console.print(f"[red]Error:[/red] {escape(str(err))}", soft_wrap=True)
        return 1
