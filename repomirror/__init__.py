"""repomirror: keep a local mirror of many remote repositories in sync."""

from __future__ import annotations

__version__ = "0.1.0"
