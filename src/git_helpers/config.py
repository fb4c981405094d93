"""Runtime settings, filled from command line options or environment variables."""

from dataclasses import dataclass
from pathlib import Path

ENV_PATH = "VCS_PATH"
ENV_REMOTE = "VCS_REMOTE"
ENV_MAIN_BRANCH = "VCS_MAIN_BRANCH"
ENV_HISTORY_COUNT = "VCS_HISTORY_COUNT"
ENV_DEBUG = "VCS_DEBUG"


@dataclass(frozen=True)
class Settings:
    """Settings shared by every command of one invocation."""

    path: Path = Path(".")
    remote: str = "origin"
    main_branch: str = "master"
    history_count: int = 5
    debug: bool = False
