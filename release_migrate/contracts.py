from __future__ import annotations

from pathlib import Path
from typing import Any, List, Protocol

from .models import Release


class ReleaseHost(Protocol):
    """Release operations against a single hosted repository.

    Implementations are bound to one `owner/name` repository at construction.
    """

    repo: str

    def list_releases(self, *, page: int, per_page: int) -> List[Any]:
        """Return one page of raw release objects (dicts with tag_name, draft, assets)."""
        raise NotImplementedError

    def view_release(self, *, tag: str) -> Release:
        """Return the release for `tag`; raise NotFoundError when it does not exist."""
        raise NotImplementedError

    def create_release(self, *, tag: str, title: str, notes: str) -> None:
        raise NotImplementedError

    def download_asset(self, *, tag: str, asset_name: str, dest_dir: Path) -> Path:
        raise NotImplementedError

    def upload_asset(self, *, tag: str, file_path: Path, clobber: bool = True) -> None:
        raise NotImplementedError

    def delete_release(self, *, tag: str, cleanup_tag: bool = True) -> None:
        raise NotImplementedError
