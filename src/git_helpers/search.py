"""Fuzzy branch search and interactive disambiguation."""

import logging
from typing import Callable, Optional, Sequence, Union

from rich.console import Console
from rich.markup import escape
from rich.prompt import IntPrompt

from git_helpers.git import BranchScope, GitError, GitRepo

logger = logging.getLogger(__name__)


def search_branches(repo: GitRepo, phrase: str, shallow: bool = False) -> list[str]:
    """Find branches whose name contains the phrase, ignoring case.

    When nothing matches, remote branch metadata is refreshed once and the
    search is repeated without another refresh.

    Args:
        repo: Repository to search
        phrase: Substring to look for
        shallow: Only search what is already known locally

    Returns:
        Sorted branch names without remote prefixes, each listed once
    """
    needle = phrase.lower()
    current = repo.get_current_branch_name()
    matches = [
        ref
        for ref in repo.list_branches()
        if needle in ref.name.lower() and not (ref.scope == BranchScope.LOCAL and ref.name == current)
    ]

    if not matches:
        if shallow:
            return []
        logger.debug("No branch matches '%s', refreshing remotes", phrase)
        try:
            repo.fetch_all()
        except GitError as err:
            logger.debug("Refresh failed: %s", err)
            return []
        return search_branches(repo, phrase, shallow=True)

    return sorted({ref.name for ref in matches})


def _ask_choice(count: int, console: Console) -> int:
    return IntPrompt.ask(
        f"Pick a number [1-{count}]",
        console=console,
        choices=[str(number) for number in range(1, count + 1)],
        show_choices=False,
    )


def select_branch(
    candidates: Union[str, Sequence[str]],
    ask: Optional[Callable[[int], int]] = None,
    console: Optional[Console] = None,
) -> Optional[str]:
    """Pick one branch out of the search results.

    A single candidate is returned as is, several candidates are listed and
    the operator chooses one by number. Invalid numbers are re-prompted by
    the prompt itself. The list and the prompt go to the given console.
    """
    if isinstance(candidates, str):
        candidates = candidates.split()
    options = [candidate for candidate in candidates if candidate.strip()]

    if not options:
        return None
    if len(options) == 1:
        return "".join(options[0].split())

    console = console or Console()
    for number, option in enumerate(options, start=1):
        console.print(f"{number}) [cyan]{escape(option)}[/cyan]", highlight=False)
    choice = ask(len(options)) if ask else _ask_choice(len(options), console)
    return "".join(options[choice - 1].split())
