"""Consolidate legacy releases into one release per (mod version, loader).

Each group runs through: ensure the target release, download its unique
assets into a scratch directory, upload them to the target with clobber
semantics, optionally delete the old releases, then remove the scratch
directory. Groups run one after another; by default the first error aborts
the run.
"""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path
from typing import List, Optional

from .config import MigrationConfig
from .contracts import ReleaseHost
from .errors import MigrationError, NotFoundError
from .grouping import group_releases
from .lister import list_releases
from .models import GroupResult, MigrationGroup, MigrationSummary
from .tags import is_legacy_tag


def ensure_release(
    host: ReleaseHost,
    *,
    tag: str,
    title: str,
    notes: str,
    dry_run: bool = False,
    strict: bool = True,
) -> bool:
    """Create the release for `tag` unless it already exists.

    Only NotFoundError means "missing" when `strict` is set; otherwise any host
    error from the existence check is read as missing too. Returns True when a
    release was created.
    """
    try:
        host.view_release(tag=tag)
    except NotFoundError:
        pass
    except MigrationError as e:
        if strict:
            raise
        print(f"[migrate][WARN] existence check for {tag} failed, treating as missing: {e}")
    else:
        print(f"[migrate] release {tag} already exists")
        return False

    if dry_run:
        print(f"[dry-run] would create release {tag}")
        return False
    host.create_release(tag=tag, title=title, notes=notes)
    print(f"[migrate] created release {tag}")
    return True


def _publishable_files(temp_dir: Path, extension: str) -> List[Path]:
    return sorted(p for p in temp_dir.iterdir() if p.is_file() and p.name.endswith(extension))


def _remove_temp_dir(path: Path) -> None:
    try:
        shutil.rmtree(path)
    except OSError as e:
        print(f"[migrate][WARN] failed to remove temp dir {path}: {e}")


def migrate_group(
    group: MigrationGroup,
    *,
    host: ReleaseHost,
    config: MigrationConfig,
    result: Optional[GroupResult] = None,
) -> GroupResult:
    if result is None:
        result = GroupResult(key=group.key, new_tag=group.new_tag)
    new_tag = group.new_tag
    dry_run = config.dry_run

    print(f"\n[migrate] {new_tag} <- {', '.join(group.old_tags)} ({len(group.assets)} assets)")
    result.created = ensure_release(
        host,
        tag=new_tag,
        title=new_tag,
        notes=config.notes_for(loader=group.loader, mod_version=group.mod_version),
        dry_run=dry_run,
        strict=config.strict_existence_check,
    )
    result.advance("target_ensured")

    temp_dir = Path(tempfile.mkdtemp(prefix=f"{config.temp_prefix}{group.mod_version}-{group.loader}-"))
    try:
        unique = group.unique_assets()
        for entry in unique:
            if dry_run:
                print(f"[dry-run] would download {entry.name} from {entry.tag}")
                continue
            host.download_asset(tag=entry.tag, asset_name=entry.name, dest_dir=temp_dir)
            result.downloaded.append(entry.name)
        result.advance("assets_fetched")

        if dry_run:
            for entry in unique:
                print(f"[dry-run] would upload {entry.name} to {new_tag}")
        else:
            for path in _publishable_files(temp_dir, config.asset_extension):
                host.upload_asset(tag=new_tag, file_path=path, clobber=True)
                result.uploaded.append(path.name)
                print(f"[migrate] uploaded {path.name} -> {new_tag}")
        result.advance("assets_published")

        if config.delete_old:
            for old_tag in group.old_tags:
                if not is_legacy_tag(old_tag, config.loaders):
                    continue
                if dry_run:
                    print(f"[dry-run] would delete old release {old_tag}")
                    continue
                host.delete_release(tag=old_tag, cleanup_tag=True)
                result.deleted_tags.append(old_tag)
                print(f"[migrate] deleted old release {old_tag}")
            result.advance("old_releases_deleted")
        else:
            result.advance("skipped")
    finally:
        _remove_temp_dir(temp_dir)
    result.advance("temp_cleaned")
    return result


def run_migration(config: MigrationConfig, host: ReleaseHost) -> MigrationSummary:
    """List, classify, group and migrate every legacy release of the repository."""
    summary = MigrationSummary(repository=config.repository, dry_run=config.dry_run)

    releases = list_releases(host, page_size=config.page_size)
    groups = group_releases(
        releases,
        loaders=config.loaders,
        jar_prefix=config.jar_prefix,
        asset_extension=config.asset_extension,
    )
    if not groups:
        print("[migrate] No legacy releases found to migrate.")
        summary.nothing_to_migrate = True
        return summary

    for group in groups.values():
        result = GroupResult(key=group.key, new_tag=group.new_tag)
        summary.groups.append(result)
        try:
            migrate_group(group, host=host, config=config, result=result)
        except (MigrationError, OSError) as e:
            if not config.continue_on_error:
                raise
            result.error = f"{type(e).__name__}: {e}"
            print(f"[migrate][FAILED] {group.new_tag} stage={result.stage} error={result.error}")

    print("\n[migrate] Release migration complete.")
    return summary
