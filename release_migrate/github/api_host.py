"""GitHub REST API release host.

Environment expectations:
- GITHUB_TOKEN (or GH_TOKEN): token with contents write scope on the target repository.
"""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..errors import NotFoundError, ReleaseHostError, ValidationError
from ..models import Release

DEFAULT_API_BASE = "https://api.github.com"


def _requests():
    # Lazy import so the gh CLI backend works without requests installed.
    import requests  # type: ignore

    return requests


def _github_api_headers(token: str) -> Dict[str, str]:
    return {
        "Authorization": f"token {token}",
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
        "User-Agent": "release-migrate",
    }


def _fail(what: str, r: Any) -> ReleaseHostError:
    return ReleaseHostError(f"GitHub API error {what}: {r.status_code}: {str(r.text)[:2000]}")


class GitHubApiReleaseHost:
    """ReleaseHost backed by the GitHub REST API via requests."""

    def __init__(
        self,
        repo: str,
        token: str,
        *,
        session: Optional[Any] = None,
        api_base: str = DEFAULT_API_BASE,
        timeout: int = 30,
        upload_timeout: int = 300,
    ):
        if not str(token or "").strip():
            raise ValidationError("GitHub API release host requires a token")
        self.repo = repo
        self.token = token
        self.session = session if session is not None else _requests().Session()
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.upload_timeout = upload_timeout

    @property
    def _base(self) -> str:
        return f"{self.api_base}/repos/{self.repo}"

    def _headers(self, **extra: str) -> Dict[str, str]:
        h = _github_api_headers(self.token)
        h.update(extra)
        return h

    def list_releases(self, *, page: int, per_page: int) -> List[Any]:
        r = self.session.get(
            f"{self._base}/releases",
            headers=self._headers(),
            params={"per_page": per_page, "page": page},
            timeout=self.timeout,
        )
        if r.status_code != 200:
            raise _fail(f"listing releases page {page}", r)
        try:
            return r.json()
        except ValueError as e:
            raise ValidationError(f"Malformed JSON listing releases for {self.repo} page {page}: {e}") from e

    def _release_payload(self, tag: str) -> Dict[str, Any]:
        r = self.session.get(f"{self._base}/releases/tags/{tag}", headers=self._headers(), timeout=self.timeout)
        if r.status_code == 404:
            raise NotFoundError(f"Release not found: {self.repo}@{tag}")
        if r.status_code != 200:
            raise _fail(f"fetching release by tag {tag}", r)
        try:
            data = r.json()
        except ValueError as e:
            raise ValidationError(f"Malformed JSON viewing release {tag}: {e}") from e
        if not isinstance(data, dict):
            raise ValidationError(f"Unexpected payload viewing release {tag}: {type(data).__name__}")
        return data

    def view_release(self, *, tag: str) -> Release:
        return Release.from_api(self._release_payload(tag))

    def create_release(self, *, tag: str, title: str, notes: str) -> None:
        payload = {
            "tag_name": tag,
            "name": title,
            "body": notes,
            "draft": False,
            "prerelease": False,
            "generate_release_notes": False,
        }
        r = self.session.post(f"{self._base}/releases", headers=self._headers(), json=payload, timeout=self.timeout)
        if r.status_code != 201:
            raise _fail(f"creating release {tag}", r)

    def download_asset(self, *, tag: str, asset_name: str, dest_dir: Path) -> Path:
        release = self.view_release(tag=tag)
        asset = release.find_asset(asset_name)
        if asset is None or asset.asset_id is None:
            raise NotFoundError(f"Asset {asset_name} not found on release {tag}")

        dest_dir.mkdir(parents=True, exist_ok=True)
        dest = dest_dir / asset_name
        r = self.session.get(
            f"{self._base}/releases/assets/{asset.asset_id}",
            headers=self._headers(Accept="application/octet-stream"),
            stream=True,
            timeout=self.upload_timeout,
        )
        if r.status_code != 200:
            raise _fail(f"downloading asset {asset_name} from {tag}", r)
        with open(dest, "wb") as f:
            for chunk in r.iter_content(chunk_size=1024 * 64):
                if chunk:
                    f.write(chunk)
        return dest

    def _delete_asset_if_exists(self, release: Release, asset_name: str) -> None:
        asset = release.find_asset(asset_name)
        if asset is None or asset.asset_id is None:
            return
        r = self.session.delete(
            f"{self._base}/releases/assets/{asset.asset_id}",
            headers=self._headers(),
            timeout=self.timeout,
        )
        if r.status_code not in (204, 404):
            raise _fail(f"deleting existing asset {asset_name}", r)

    def upload_asset(self, *, tag: str, file_path: Path, clobber: bool = True) -> None:
        path = Path(file_path)
        release = self.view_release(tag=tag)
        if clobber:
            self._delete_asset_if_exists(release, path.name)

        # Example: https://uploads.github.com/repos/{owner}/{repo}/releases/{id}/assets{?name,label}
        upload_url = release.upload_url.split("{")[0]
        if not upload_url:
            raise ValidationError(f"GitHub release payload for {tag} missing upload_url")

        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        with open(path, "rb") as f:
            r = self.session.post(
                upload_url,
                headers=self._headers(**{"Content-Type": content_type}),
                params={"name": path.name},
                data=f,
                timeout=self.upload_timeout,
            )
        if r.status_code != 201:
            raise _fail(f"uploading asset {path.name} to {tag}", r)

    def delete_release(self, *, tag: str, cleanup_tag: bool = True) -> None:
        release = self.view_release(tag=tag)
        if release.release_id is None:
            raise ValidationError(f"GitHub release payload for {tag} missing id")
        r = self.session.delete(
            f"{self._base}/releases/{release.release_id}",
            headers=self._headers(),
            timeout=self.timeout,
        )
        if r.status_code != 204:
            raise _fail(f"deleting release {tag}", r)
        if not cleanup_tag:
            return
        r2 = self.session.delete(f"{self._base}/git/refs/tags/{tag}", headers=self._headers(), timeout=self.timeout)
        # 422: the ref is already gone.
        if r2.status_code not in (204, 404, 422):
            raise _fail(f"deleting tag ref {tag}", r2)
