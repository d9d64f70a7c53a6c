from __future__ import annotations

from typing import Dict, Iterable

from .models import MigrationGroup, Release
from .tags import DEFAULT_ASSET_EXTENSION, DEFAULT_JAR_PREFIX, DEFAULT_LOADERS, asset_matches, parse_legacy_tag


def group_releases(
    releases: Iterable[Release],
    *,
    loaders: Iterable[str] = DEFAULT_LOADERS,
    jar_prefix: str = DEFAULT_JAR_PREFIX,
    asset_extension: str = DEFAULT_ASSET_EXTENSION,
) -> Dict[str, MigrationGroup]:
    """Bucket legacy releases by `<mod version>|<loader>`.

    Releases whose tag is not a legacy tag are skipped. Each asset is checked
    against the Minecraft version and loader parsed from the tag of the release
    it was found under.
    """
    loaders = tuple(loaders)
    groups: Dict[str, MigrationGroup] = {}

    for rel in releases:
        legacy = parse_legacy_tag(rel.tag_name, loaders)
        if legacy is None:
            continue

        group = groups.get(legacy.group_key)
        if group is None:
            group = MigrationGroup(mod_version=legacy.mod_version, loader=legacy.loader)
            groups[legacy.group_key] = group

        group.add_old_tag(rel.tag_name)
        for asset in rel.assets:
            if asset_matches(asset.name, legacy, jar_prefix, asset_extension):
                group.add_asset(rel.tag_name, asset.name)

    return groups
