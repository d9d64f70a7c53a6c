from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml


def read_yaml(path: Path) -> Any:
    """Parse a YAML file; an empty document reads as an empty mapping."""
    with Path(path).open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return {} if data is None else data
