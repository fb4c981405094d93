"""Pull request endpoints for the supported hosting services."""

import logging
import re
from typing import Optional

import typer

logger = logging.getLogger(__name__)

GITHUB_PATTERN = re.compile(r"github\.com[:/](?P<repository>.+?)(?:\.git)?/?$")
BITBUCKET_PATTERN = re.compile(r"bitbucket\.org[:/](?P<repository>.+?)(?:\.git)?/?$")


def pull_request_url(push_url: str, branch: str) -> Optional[str]:
    """Build the "new pull request" page for a branch.

    Args:
        push_url: Push url of the remote, ssh or https
        branch: Branch the pull request is opened from

    Returns:
        The url to open, or None when the host isn't recognised
    """
    if "github.com" in push_url:
        match = GITHUB_PATTERN.search(push_url)
        if match:
            repository = match.group("repository")
            return f"https://github.com/{repository}/compare/{branch}?expand=1"
    elif "bitbucket.org" in push_url:
        match = BITBUCKET_PATTERN.search(push_url)
        if match:
            repository = match.group("repository")
            return f"https://bitbucket.org/{repository}/pull-requests/new?source={repository}:{branch}"
    return None


def open_url(url: str) -> bool:
    """Open the url in the default browser. Returns False if that failed."""
    logger.debug("Opening %s", url)
    return typer.launch(url) == 0
