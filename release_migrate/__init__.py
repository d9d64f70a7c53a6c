"""Consolidate legacy per-Minecraft-version release tags into per-loader releases."""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.1.0"
