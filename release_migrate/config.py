from __future__ import annotations

import os
import re
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import jsonschema

from .errors import ValidationError
from .tags import DEFAULT_ASSET_EXTENSION, DEFAULT_JAR_PREFIX, DEFAULT_LOADERS
from .utils.yamlio import read_yaml

DEFAULT_REPOSITORY = "fishbatteryapp/fishbattery-cape-bridge"
REPOSITORY_ENV_VAR = "CAPE_BRIDGE_REPO"
CONFIG_ENV_VAR = "RELEASE_MIGRATE_CONFIG"

DEFAULT_NOTES_TEMPLATE = (
    "Consolidated {loader} release for version {mod_version}. Includes all supported Minecraft targets."
)
DEFAULT_TEMP_PREFIX = "fb-cape-migrate-"

ALLOWED_BACKENDS: Tuple[str, ...] = ("gh_cli", "github_api")

_REPO_RE = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


@dataclass(frozen=True)
class MigrationConfig:
    repository: str = DEFAULT_REPOSITORY
    delete_old: bool = False
    dry_run: bool = False

    backend: str = "gh_cli"
    jar_prefix: str = DEFAULT_JAR_PREFIX
    asset_extension: str = DEFAULT_ASSET_EXTENSION
    loaders: Tuple[str, ...] = DEFAULT_LOADERS
    page_size: int = 100
    temp_prefix: str = DEFAULT_TEMP_PREFIX
    notes_template: str = DEFAULT_NOTES_TEMPLATE

    # When False, any failure of the existence check is read as "release missing".
    strict_existence_check: bool = True
    continue_on_error: bool = False

    def notes_for(self, *, loader: str, mod_version: str) -> str:
        return self.notes_template.format(loader=loader, mod_version=mod_version)


def _config_schema() -> Dict[str, Any]:
    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "type": "object",
        "properties": {
            "repository": {"type": "string", "minLength": 3},
            "delete_old": {"type": "boolean"},
            "dry_run": {"type": "boolean"},
            "backend": {"type": "string", "enum": list(ALLOWED_BACKENDS)},
            "jar_prefix": {"type": "string", "minLength": 1},
            "asset_extension": {"type": "string", "pattern": r"^\.[A-Za-z0-9]+$"},
            "loaders": {
                "type": "array",
                "items": {"type": "string", "pattern": r"^[a-z][a-z0-9_]*$"},
                "minItems": 1,
                "uniqueItems": True,
            },
            "page_size": {"type": "integer", "minimum": 1, "maximum": 100},
            "temp_prefix": {"type": "string", "minLength": 1},
            "notes_template": {"type": "string"},
            "strict_existence_check": {"type": "boolean"},
            "continue_on_error": {"type": "boolean"},
        },
        "additionalProperties": False,
    }


def validate_repository(repo: str) -> str:
    r = str(repo or "").strip()
    if not _REPO_RE.match(r):
        raise ValidationError(f"repository must look like 'owner/name': {repo!r}")
    return r


def resolve_config_path(cli_path: Optional[str] = None) -> Optional[Path]:
    """Resolve the optional YAML config path.

    Precedence:
      1) CLI flag --config
      2) RELEASE_MIGRATE_CONFIG
    """
    if cli_path and str(cli_path).strip():
        return Path(str(cli_path).strip()).expanduser().resolve()

    env_path = str(os.environ.get(CONFIG_ENV_VAR, "") or "").strip()
    if env_path:
        return Path(env_path).expanduser().resolve()
    return None


def _from_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ValidationError(f"migration config not found: {path}")
    data = read_yaml(path)
    try:
        jsonschema.validate(instance=data, schema=_config_schema())
    except jsonschema.ValidationError as e:
        raise ValidationError(f"migration config schema validation failed ({path}): {e.message}") from e
    if "loaders" in data:
        data["loaders"] = tuple(data["loaders"])
    return data


def load_config(
    *,
    cli_path: Optional[str] = None,
    repository: Optional[str] = None,
    delete_old: Optional[bool] = None,
    dry_run: Optional[bool] = None,
    backend: Optional[str] = None,
    continue_on_error: Optional[bool] = None,
) -> MigrationConfig:
    """Build the effective configuration.

    Precedence, highest first: explicit arguments (CLI flags), the YAML config
    file, CAPE_BRIDGE_REPO for the repository, built-in defaults.
    """
    values: Dict[str, Any] = {}

    env_repo = str(os.environ.get(REPOSITORY_ENV_VAR, "") or "").strip()
    if env_repo:
        values["repository"] = env_repo

    path = resolve_config_path(cli_path)
    if path is not None:
        values.update(_from_file(path))

    overrides = {
        "repository": repository,
        "delete_old": delete_old,
        "dry_run": dry_run,
        "backend": backend,
        "continue_on_error": continue_on_error,
    }
    for k, v in overrides.items():
        if v is not None:
            values[k] = v

    cfg = MigrationConfig(**values)
    if cfg.backend not in ALLOWED_BACKENDS:
        raise ValidationError(f"unknown backend {cfg.backend!r}; allowed={list(ALLOWED_BACKENDS)}")
    try:
        cfg.notes_for(loader="fabric", mod_version="0.0.0")
    except (KeyError, IndexError, ValueError, AttributeError) as e:
        raise ValidationError(
            f"notes_template may only use {{loader}} and {{mod_version}}: {cfg.notes_template!r} ({type(e).__name__}: {e})"
        ) from e
    return replace(cfg, repository=validate_repository(cfg.repository))
