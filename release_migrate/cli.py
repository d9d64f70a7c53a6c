from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import List, Optional

from .config import ALLOWED_BACKENDS, load_config
from .factory import build_release_host
from .migrator import run_migration
from .models import MigrationSummary


def _print_summary(summary: MigrationSummary) -> None:
    if summary.nothing_to_migrate:
        return
    mode = " (dry-run)" if summary.dry_run else ""
    print(f"\nRELEASE MIGRATION SUMMARY{mode}")
    print(f"repository: {summary.repository}")
    for g in summary.groups:
        status = f"FAILED at {g.stage}" if g.error else "ok"
        print(
            f" - {g.new_tag}: {status} created={g.created} uploaded={len(g.uploaded)} deleted={len(g.deleted_tags)}"
        )


def _write_report(path: Path, summary: MigrationSummary) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(summary.to_dict(), indent=2, sort_keys=True), encoding="utf-8")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="release-migrate",
        description="Merge legacy v<mc>-<mod>-<loader> releases into v<mod>-<loader> releases.",
    )
    p.add_argument("--delete-old", action="store_true", help="Delete the legacy releases and their tags after upload")
    p.add_argument("--dry-run", action="store_true", help="Print the migration plan without changing anything")
    p.add_argument("--repo", default=None, help="owner/name (default: $CAPE_BRIDGE_REPO or the config file)")
    p.add_argument("--config", default=None, help="YAML config file (default: $RELEASE_MIGRATE_CONFIG)")
    p.add_argument("--backend", choices=list(ALLOWED_BACKENDS), default=None)
    p.add_argument("--continue-on-error", action="store_true", help="Keep migrating other groups after a failure")
    p.add_argument("--report-json", default=None, help="Write a JSON run report to this path")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(
        cli_path=args.config,
        repository=args.repo,
        # store_true flags only override the file when given.
        delete_old=True if args.delete_old else None,
        dry_run=True if args.dry_run else None,
        backend=args.backend,
        continue_on_error=True if args.continue_on_error else None,
    )
    host = build_release_host(config)
    summary = run_migration(config, host)
    _print_summary(summary)
    if args.report_json:
        _write_report(Path(args.report_json).resolve(), summary)
    return 1 if summary.failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
