"""Release layout migration.

Merges legacy `v<mc>-<mod>-<loader>` releases into one `v<mod>-<loader>`
release per loader and mod version.

Safe invocations:
  - python -m release_migrate ...
  - python scripts/migrate_release_layout.py ...   (standalone)

When invoked as a standalone script, we bootstrap sys.path so imports succeed.
"""

from __future__ import annotations

import sys
from pathlib import Path

if __package__ is None or __package__ == "":
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root))

from release_migrate.cli import main  # noqa: E402

if __name__ == "__main__":
    raise SystemExit(main())
