from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import Any, List

from ..errors import NotFoundError, ReleaseHostError, ValidationError
from ..models import Release


def _run(cmd: List[str]) -> subprocess.CompletedProcess:
    return subprocess.run(cmd, check=False, text=True, capture_output=True)


def _stderr(cp: subprocess.CompletedProcess) -> str:
    return (cp.stderr or "").strip()[:2000]


class GhCliReleaseHost:
    """ReleaseHost backed by the `gh` command line client.

    Authentication is whatever `gh` is already configured with (GH_TOKEN,
    GITHUB_TOKEN, or a prior `gh auth login`).
    """

    def __init__(self, repo: str, gh_bin: str = "gh"):
        self.repo = repo
        self.gh_bin = gh_bin

    def _gh(self, args: List[str]) -> subprocess.CompletedProcess:
        return _run([self.gh_bin, *args])

    def _check(self, cp: subprocess.CompletedProcess, what: str) -> None:
        if cp.returncode != 0:
            raise ReleaseHostError(f"Failed to {what} (exit {cp.returncode}): {_stderr(cp)}")

    def list_releases(self, *, page: int, per_page: int) -> List[Any]:
        cp = self._gh(["api", f"repos/{self.repo}/releases?per_page={per_page}&page={page}"])
        self._check(cp, f"list releases for {self.repo} page {page}")
        out = (cp.stdout or "").strip()
        if not out:
            return []
        try:
            data = json.loads(out)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Malformed JSON listing releases for {self.repo} page {page}: {e}") from e
        return data

    def view_release(self, *, tag: str) -> Release:
        cp = self._gh(["release", "view", tag, "--repo", self.repo, "--json", "tagName,isDraft,assets"])
        if cp.returncode != 0:
            if "release not found" in _stderr(cp).lower():
                raise NotFoundError(f"Release not found: {self.repo}@{tag}")
            raise ReleaseHostError(f"Failed to view release {tag} (exit {cp.returncode}): {_stderr(cp)}")
        try:
            data = json.loads(cp.stdout or "{}")
        except json.JSONDecodeError as e:
            raise ValidationError(f"Malformed JSON viewing release {tag}: {e}") from e
        if not isinstance(data, dict):
            raise ValidationError(f"Unexpected payload viewing release {tag}: {type(data).__name__}")
        assets = data.get("assets")
        return Release.from_api(
            {
                "tag_name": data.get("tagName") or tag,
                "draft": data.get("isDraft"),
                "assets": assets if isinstance(assets, list) else [],
            }
        )

    def create_release(self, *, tag: str, title: str, notes: str) -> None:
        cp = self._gh(["release", "create", tag, "--repo", self.repo, "--title", title, "--notes", notes])
        self._check(cp, f"create release {tag}")

    def download_asset(self, *, tag: str, asset_name: str, dest_dir: Path) -> Path:
        dest_dir.mkdir(parents=True, exist_ok=True)
        cp = self._gh(
            ["release", "download", tag, "--repo", self.repo, "--dir", str(dest_dir), "--pattern", asset_name]
        )
        self._check(cp, f"download {asset_name} from release {tag}")
        return dest_dir / asset_name

    def upload_asset(self, *, tag: str, file_path: Path, clobber: bool = True) -> None:
        cmd = ["release", "upload", tag, str(file_path), "--repo", self.repo]
        if clobber:
            cmd.append("--clobber")
        cp = self._gh(cmd)
        self._check(cp, f"upload {Path(file_path).name} to release {tag}")

    def delete_release(self, *, tag: str, cleanup_tag: bool = True) -> None:
        cmd = ["release", "delete", tag, "--repo", self.repo, "--yes"]
        if cleanup_tag:
            cmd.append("--cleanup-tag")
        cp = self._gh(cmd)
        self._check(cp, f"delete release {tag}")
