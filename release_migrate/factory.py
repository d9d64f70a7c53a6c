from __future__ import annotations

import os

from .config import MigrationConfig
from .contracts import ReleaseHost
from .errors import ValidationError
from .github.api_host import GitHubApiReleaseHost
from .github.cli_host import GhCliReleaseHost


def _token_from_env() -> str:
    return str(os.environ.get("GITHUB_TOKEN", "") or os.environ.get("GH_TOKEN", "") or "").strip()


def build_release_host(config: MigrationConfig) -> ReleaseHost:
    if config.backend == "gh_cli":
        return GhCliReleaseHost(repo=config.repository)
    if config.backend == "github_api":
        token = _token_from_env()
        if not token:
            raise ValidationError("Missing GitHub token in GITHUB_TOKEN (or GH_TOKEN); required for backend github_api.")
        return GitHubApiReleaseHost(repo=config.repository, token=token)
    raise ValidationError(f"unknown backend {config.backend!r}")
