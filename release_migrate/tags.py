from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, Optional, Tuple

from .models import LegacyTag

DEFAULT_LOADERS: Tuple[str, ...] = ("fabric", "quilt")
DEFAULT_JAR_PREFIX = "fishbattery-cape-bridge-"
DEFAULT_ASSET_EXTENSION = ".jar"

_MC_RE = r"\d+\.\d+(?:\.\d+)?"
_MOD_RE = r"[0-9A-Za-z][0-9A-Za-z.+-]*"


@lru_cache(maxsize=None)
def _compile(loaders: Tuple[str, ...]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(x) for x in loaders)
    return re.compile(rf"^v(?P<mc>{_MC_RE})-(?P<mod>{_MOD_RE})-(?P<loader>{alternatives})$")


def legacy_tag_pattern(loaders: Iterable[str] = DEFAULT_LOADERS) -> re.Pattern[str]:
    """Compiled `v<mc>-<mod>-<loader>` pattern for a closed loader set."""
    normalized = tuple(str(x).strip() for x in loaders if str(x).strip())
    if not normalized:
        raise ValueError("at least one loader is required")
    return _compile(normalized)


def parse_legacy_tag(tag: str, loaders: Iterable[str] = DEFAULT_LOADERS) -> Optional[LegacyTag]:
    """Return the parsed tag, or None when it is not a legacy tag."""
    m = legacy_tag_pattern(loaders).match(str(tag or "").strip())
    if not m:
        return None
    return LegacyTag(mc=m.group("mc"), mod_version=m.group("mod"), loader=m.group("loader"))


def is_legacy_tag(tag: str, loaders: Iterable[str] = DEFAULT_LOADERS) -> bool:
    return parse_legacy_tag(tag, loaders) is not None


def consolidated_tag(mod_version: str, loader: str) -> str:
    return f"v{mod_version}-{loader}"


def asset_matches(
    name: str,
    legacy: LegacyTag,
    prefix: str = DEFAULT_JAR_PREFIX,
    extension: str = DEFAULT_ASSET_EXTENSION,
) -> bool:
    """True when an asset belongs to the release's own Minecraft version and loader.

    The prefix and extension checks are case-sensitive; the platform suffix
    `-<mc>-<loader><ext>` is compared case-insensitively.
    """
    if not name.startswith(prefix) or not name.endswith(extension):
        return False
    suffix = f"-{legacy.mc}-{legacy.loader}{extension}".lower()
    return name.lower().endswith(suffix)
