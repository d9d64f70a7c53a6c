from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from _testutil import ensure_repo_on_path

BASE = "https://api.github.com/repos/owner/repo"
UPLOAD = "https://uploads.github.com/repos/owner/repo/releases/7/assets"


class FakeResponse:
    def __init__(self, status_code: int, payload=None, text: str = "", content: bytes = b""):
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self.content = content

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload

    def iter_content(self, chunk_size: int = 1):
        for i in range(0, len(self.content), chunk_size):
            yield self.content[i : i + chunk_size]


class FakeSession:
    def __init__(self):
        self.routes = {}
        self.calls = []

    def route(self, method: str, url: str, response: FakeResponse) -> None:
        self.routes[(method, url)] = response

    def _handle(self, method: str, url: str, **kwargs):
        body = kwargs.get("data")
        if hasattr(body, "read"):
            kwargs["data"] = body.read()
        self.calls.append((method, url, kwargs))
        return self.routes.get((method, url), FakeResponse(404, text="Not Found"))

    def get(self, url, **kwargs):
        return self._handle("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._handle("POST", url, **kwargs)

    def delete(self, url, **kwargs):
        return self._handle("DELETE", url, **kwargs)


def _release_payload(tag: str, assets=()):
    return {
        "id": 7,
        "tag_name": tag,
        "draft": False,
        "upload_url": UPLOAD + "{?name,label}",
        "assets": [{"id": i + 100, "name": n} for i, n in enumerate(assets)],
    }


class TestGitHubApiReleaseHost(unittest.TestCase):
    def setUp(self) -> None:
        ensure_repo_on_path()

        from release_migrate.github.api_host import GitHubApiReleaseHost

        self.session = FakeSession()
        self.host = GitHubApiReleaseHost(repo="owner/repo", token="dummy", session=self.session)

    def test_requires_token(self) -> None:
        from release_migrate.errors import ValidationError
        from release_migrate.github.api_host import GitHubApiReleaseHost

        with self.assertRaises(ValidationError):
            GitHubApiReleaseHost(repo="owner/repo", token=" ", session=self.session)

    def test_list_releases(self) -> None:
        from release_migrate.errors import ReleaseHostError, ValidationError

        self.session.route("GET", f"{BASE}/releases", FakeResponse(200, [_release_payload("v1.20.1-1.2.0-fabric")]))
        out = self.host.list_releases(page=2, per_page=100)
        self.assertEqual(out[0]["tag_name"], "v1.20.1-1.2.0-fabric")
        method, url, kwargs = self.session.calls[-1]
        self.assertEqual(kwargs["params"], {"per_page": 100, "page": 2})
        self.assertEqual(kwargs["headers"]["Authorization"], "token dummy")

        self.session.route("GET", f"{BASE}/releases", FakeResponse(200, None, text="<html>"))
        with self.assertRaises(ValidationError):
            self.host.list_releases(page=1, per_page=100)

        self.session.route("GET", f"{BASE}/releases", FakeResponse(500, text="boom"))
        with self.assertRaises(ReleaseHostError) as ctx:
            self.host.list_releases(page=1, per_page=100)
        self.assertIn("500", str(ctx.exception))

    def test_view_release_not_found_vs_failure(self) -> None:
        from release_migrate.errors import NotFoundError, ReleaseHostError

        with self.assertRaises(NotFoundError):
            self.host.view_release(tag="v1.2.0-fabric")

        self.session.route("GET", f"{BASE}/releases/tags/v1.2.0-fabric", FakeResponse(403, text="Forbidden"))
        with self.assertRaises(ReleaseHostError):
            self.host.view_release(tag="v1.2.0-fabric")

        self.session.route("GET", f"{BASE}/releases/tags/v1.2.0-fabric", FakeResponse(200, _release_payload("v1.2.0-fabric", ["a.jar"])))
        rel = self.host.view_release(tag="v1.2.0-fabric")
        self.assertEqual(rel.release_id, 7)
        self.assertEqual(rel.assets[0].asset_id, 100)

    def test_create_release(self) -> None:
        from release_migrate.errors import ReleaseHostError

        self.session.route("POST", f"{BASE}/releases", FakeResponse(201, {}))
        self.host.create_release(tag="v1.2.0-fabric", title="v1.2.0-fabric", notes="Consolidated")
        _, _, kwargs = self.session.calls[-1]
        self.assertEqual(kwargs["json"]["tag_name"], "v1.2.0-fabric")
        self.assertEqual(kwargs["json"]["body"], "Consolidated")

        self.session.route("POST", f"{BASE}/releases", FakeResponse(422, text="already_exists"))
        with self.assertRaises(ReleaseHostError):
            self.host.create_release(tag="v1.2.0-fabric", title="v1.2.0-fabric", notes="")

    def test_download_asset_streams_to_dest(self) -> None:
        from release_migrate.errors import NotFoundError

        tag = "v1.20.1-1.2.0-fabric"
        self.session.route("GET", f"{BASE}/releases/tags/{tag}", FakeResponse(200, _release_payload(tag, ["a.jar"])))
        self.session.route("GET", f"{BASE}/releases/assets/100", FakeResponse(200, content=b"PK\x03\x04jar"))

        with tempfile.TemporaryDirectory() as td:
            p = self.host.download_asset(tag=tag, asset_name="a.jar", dest_dir=Path(td))
            self.assertEqual(p.read_bytes(), b"PK\x03\x04jar")
            _, _, kwargs = self.session.calls[-1]
            self.assertEqual(kwargs["headers"]["Accept"], "application/octet-stream")

            with self.assertRaises(NotFoundError):
                self.host.download_asset(tag=tag, asset_name="missing.jar", dest_dir=Path(td))

    def test_upload_clobbers_existing_asset(self) -> None:
        tag = "v1.2.0-fabric"
        self.session.route("GET", f"{BASE}/releases/tags/{tag}", FakeResponse(200, _release_payload(tag, ["a.jar"])))
        self.session.route("DELETE", f"{BASE}/releases/assets/100", FakeResponse(204))
        self.session.route("POST", UPLOAD, FakeResponse(201, {}))

        with tempfile.TemporaryDirectory() as td:
            f = Path(td) / "a.jar"
            f.write_bytes(b"new")
            self.host.upload_asset(tag=tag, file_path=f)

        methods = [(m, u) for m, u, _ in self.session.calls]
        self.assertEqual(
            methods,
            [("GET", f"{BASE}/releases/tags/{tag}"), ("DELETE", f"{BASE}/releases/assets/100"), ("POST", UPLOAD)],
        )
        _, _, kwargs = self.session.calls[-1]
        self.assertEqual(kwargs["params"], {"name": "a.jar"})
        self.assertEqual(kwargs["data"], b"new")

    def test_upload_without_clobber_keeps_existing(self) -> None:
        tag = "v1.2.0-fabric"
        self.session.route("GET", f"{BASE}/releases/tags/{tag}", FakeResponse(200, _release_payload(tag, ["a.jar"])))
        self.session.route("POST", UPLOAD, FakeResponse(201, {}))

        with tempfile.TemporaryDirectory() as td:
            f = Path(td) / "b.jar"
            f.write_bytes(b"b")
            self.host.upload_asset(tag=tag, file_path=f, clobber=False)

        self.assertNotIn("DELETE", [m for m, _, _ in self.session.calls])

    def test_delete_release_and_tag_ref(self) -> None:
        from release_migrate.errors import ReleaseHostError

        tag = "v1.20.1-1.2.0-fabric"
        self.session.route("GET", f"{BASE}/releases/tags/{tag}", FakeResponse(200, _release_payload(tag)))
        self.session.route("DELETE", f"{BASE}/releases/7", FakeResponse(204))
        self.session.route("DELETE", f"{BASE}/git/refs/tags/{tag}", FakeResponse(422, text="Reference does not exist"))

        self.host.delete_release(tag=tag)
        self.assertEqual(
            [(m, u) for m, u, _ in self.session.calls][-2:],
            [("DELETE", f"{BASE}/releases/7"), ("DELETE", f"{BASE}/git/refs/tags/{tag}")],
        )

        self.session.route("DELETE", f"{BASE}/git/refs/tags/{tag}", FakeResponse(500, text="boom"))
        with self.assertRaises(ReleaseHostError):
            self.host.delete_release(tag=tag)


if __name__ == "__main__":
    unittest.main()
