"""Errors raised by the metadata store."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .models import RepositoryBy


class StoreError(Exception):
    """Base class for metadata store errors, including fatal I/O failures."""


class StoreDecodeError(StoreError):
    """Raised when the store document is not valid JSON for the schema."""

    def __init__(self, path: Path, reason: str) -> None:
        """Initialise with the store path and decoder message."""
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot decode metadata store {path}: {reason}")


class QueryMismatchError(StoreError):
    """Raised when a store is opened with a query other than its own."""

    def __init__(self, path: Path, stored: str, requested: str) -> None:
        """Initialise with both query strings."""
        self.path = path
        self.stored = stored
        self.requested = requested
        super().__init__(
            f"Metadata store {path} was created for query {stored!r}, "
            f"refusing to open it for {requested!r}"
        )


class RepositoryNotFoundError(StoreError):
    """Raised when no record matches an id or selector."""

    def __init__(self, selector: RepositoryBy | int) -> None:
        """Initialise with the selector that matched nothing."""
        self.selector = selector
        super().__init__(f"Repository not found: {selector}")


class DuplicateRepositoryError(StoreError):
    """Raised when creating a record whose nwo is already stored."""

    def __init__(self, nwo: str) -> None:
        """Initialise with the conflicting nwo."""
        self.nwo = nwo
        super().__init__(f"Repository already exists: {nwo}")
