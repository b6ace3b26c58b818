"""Bounded concurrency executor with aggregate error reporting."""

from __future__ import annotations

from .errors import GroupCancelledError, MultiError, SemGroupError
from .group import SemGroup

__all__ = ["GroupCancelledError", "MultiError", "SemGroup", "SemGroupError"]
