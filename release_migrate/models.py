from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple

# Forward-only lifecycle of a single migration group.
GroupStage = Literal[
    "pending",
    "target_ensured",
    "assets_fetched",
    "assets_published",
    "old_releases_deleted",
    "skipped",
    "temp_cleaned",
]
GROUP_STAGE_VALUES: Tuple[str, ...] = (
    "pending",
    "target_ensured",
    "assets_fetched",
    "assets_published",
    "old_releases_deleted",
    "skipped",
    "temp_cleaned",
)


def _numeric_id(value: Any) -> Optional[int]:
    # gh --json emits node ids ("RA_kw...") where the REST API emits integers.
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


@dataclass(frozen=True)
class Asset:
    """Binary file attached to a release."""

    name: str
    asset_id: Optional[int] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Asset":
        return cls(
            name=str(data.get("name") or ""),
            asset_id=_numeric_id(data.get("id")),
        )


@dataclass(frozen=True)
class Release:
    """Remote release as returned by the hosting API."""

    tag_name: str
    draft: bool = False
    assets: Tuple[Asset, ...] = ()

    # Only populated by hosts that address releases by numeric id.
    release_id: Optional[int] = None
    upload_url: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Release":
        raw_assets = data.get("assets")
        assets = raw_assets if isinstance(raw_assets, list) else []
        return cls(
            tag_name=str(data.get("tag_name") or "").strip(),
            draft=bool(data.get("draft")),
            assets=tuple(Asset.from_api(a) for a in assets if isinstance(a, dict)),
            release_id=_numeric_id(data.get("id")),
            upload_url=str(data.get("upload_url") or ""),
        )

    def find_asset(self, name: str) -> Optional[Asset]:
        for a in self.assets:
            if a.name == name:
                return a
        return None


@dataclass(frozen=True)
class LegacyTag:
    """Parsed form of a `v<mc>-<mod>-<loader>` tag."""

    mc: str
    mod_version: str
    loader: str

    @property
    def tag(self) -> str:
        return f"v{self.mc}-{self.mod_version}-{self.loader}"

    @property
    def consolidated_tag(self) -> str:
        return f"v{self.mod_version}-{self.loader}"

    @property
    def group_key(self) -> str:
        return f"{self.mod_version}|{self.loader}"


@dataclass(frozen=True)
class AssetEntry:
    tag: str
    name: str


@dataclass
class MigrationGroup:
    """All legacy releases sharing one (mod version, loader) pair.

    `old_tags` is deduplicated and keeps first-seen order. `assets` keeps every
    matching (tag, name) pair in release processing order, duplicates included;
    deduplication by name happens at download time.
    """

    mod_version: str
    loader: str
    old_tags: List[str] = field(default_factory=list)
    assets: List[AssetEntry] = field(default_factory=list)

    @property
    def key(self) -> str:
        return f"{self.mod_version}|{self.loader}"

    @property
    def new_tag(self) -> str:
        return f"v{self.mod_version}-{self.loader}"

    def add_old_tag(self, tag: str) -> None:
        if tag not in self.old_tags:
            self.old_tags.append(tag)

    def add_asset(self, tag: str, name: str) -> None:
        self.assets.append(AssetEntry(tag=tag, name=name))

    def unique_assets(self) -> List[AssetEntry]:
        seen = set()
        out: List[AssetEntry] = []
        for entry in self.assets:
            if entry.name in seen:
                continue
            seen.add(entry.name)
            out.append(entry)
        return out


@dataclass
class GroupResult:
    """Outcome of migrating one group."""

    key: str
    new_tag: str
    created: bool = False
    downloaded: List[str] = field(default_factory=list)
    uploaded: List[str] = field(default_factory=list)
    deleted_tags: List[str] = field(default_factory=list)
    stages: List[str] = field(default_factory=lambda: ["pending"])
    error: str = ""

    @property
    def stage(self) -> str:
        return self.stages[-1]

    def advance(self, stage: GroupStage) -> None:
        if GROUP_STAGE_VALUES.index(stage) <= GROUP_STAGE_VALUES.index(self.stage):
            raise ValueError(f"group stage cannot move from {self.stage!r} to {stage!r}")
        self.stages.append(stage)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "new_tag": self.new_tag,
            "created": self.created,
            "downloaded": list(self.downloaded),
            "uploaded": list(self.uploaded),
            "deleted_tags": list(self.deleted_tags),
            "stages": list(self.stages),
            "error": self.error,
        }


@dataclass
class MigrationSummary:
    repository: str
    dry_run: bool = False
    nothing_to_migrate: bool = False
    groups: List[GroupResult] = field(default_factory=list)

    @property
    def failed(self) -> List[GroupResult]:
        return [g for g in self.groups if g.error]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "repository": self.repository,
            "dry_run": self.dry_run,
            "nothing_to_migrate": self.nothing_to_migrate,
            "groups": [g.to_dict() for g in self.groups],
        }
