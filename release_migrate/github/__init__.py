from __future__ import annotations

from .api_host import GitHubApiReleaseHost
from .cli_host import GhCliReleaseHost

__all__ = ["GhCliReleaseHost", "GitHubApiReleaseHost"]
