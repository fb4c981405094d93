"""Command line interface for git-helpers."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from git_helpers.config import ENV_DEBUG, ENV_HISTORY_COUNT, ENV_MAIN_BRANCH, ENV_PATH, ENV_REMOTE, Settings
from git_helpers.dispatch import Session, dispatch

app = typer.Typer(help="Short mnemonic commands on top of git", add_completion=False)
console = Console()

# Options are only read before the command token, everything after it belongs
# to the command (or to git) untouched, dashes included.
CONTEXT_SETTINGS = {
    "allow_interspersed_args": False,
    "ignore_unknown_options": True,
    "help_option_names": [],
}


def configure_logging(debug: bool) -> None:
    """Send debug logging to stderr through rich."""
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(name)s - %(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )


@app.command(context_settings=CONTEXT_SETTINGS)
def main(
    command: Annotated[Optional[str], typer.Argument(help="vcs command, shorthand or git command")] = None,
    args: Annotated[Optional[list[str]], typer.Argument(help="Arguments for the command")] = None,
    path: Annotated[Path, typer.Option(help="Path to git repository", envvar=ENV_PATH)] = Path("."),
    remote: Annotated[str, typer.Option(help="Remote to fetch from and push to", envvar=ENV_REMOTE)] = "origin",
    main_branch: Annotated[str, typer.Option(help="Branch used by 'master'", envvar=ENV_MAIN_BRANCH)] = "master",
    history_count: Annotated[
        int, typer.Option(help="Default number of commits for 'commit-history'", envvar=ENV_HISTORY_COUNT)
    ] = 5,
    debug: Annotated[bool, typer.Option("--debug", help="Enable debug logging", envvar=ENV_DEBUG)] = False,
) -> None:
    """Run a vcs command. Anything vcs doesn't know is passed on to git."""
    configure_logging(debug)
    settings = Settings(
        path=path,
        remote=remote,
        main_branch=main_branch,
        history_count=history_count,
        debug=debug,
    )
    status = dispatch(Session(settings, console=console), command, *(args or []))
    if status != 0:
        raise typer.Exit(code=status)


if __name__ == "__main__":
    app()
