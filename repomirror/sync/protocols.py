"""Ports for the collaborators the sync engine drives.

The engine never talks to a hosting API or a version-control binary
directly. It depends on two small protocols instead, so adapters and test
doubles can be substituted freely.
"""

from __future__ import annotations

import dataclasses
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from repomirror.store.models import Repository


@dataclasses.dataclass(frozen=True, slots=True)
class RemoteRepository:
    """A repository as returned by a catalogue search."""

    owner: str
    name: str
    default_branch: str


@dataclasses.dataclass(frozen=True, slots=True)
class BranchHead:
    """Commit currently at the head of a branch."""

    sha: str
    updated_at: dt.datetime


@typ.runtime_checkable
class RemoteCatalogue(typ.Protocol):
    """Source of truth for which repositories exist and where their heads are."""

    def search(self, query: str) -> cabc.AsyncIterator[RemoteRepository]:
        """Yield every repository matching ``query``.

        Pagination and rate limiting are the implementation's concern. Any
        exception aborts the sync.
        """
        ...

    async def branch_head(self, owner: str, name: str, branch: str) -> BranchHead:
        """Return the head commit of ``branch``.

        Raises
        ------
        BranchNotFoundError
            If the branch does not exist (yet).

        """
        ...


@typ.runtime_checkable
class FilesystemMutator(typ.Protocol):
    """Applies repository changes to the local mirror directory."""

    async def create(self, repo: Repository) -> None:
        """Clone ``repo``; a no-op when its directory already exists."""
        ...

    async def update(self, repo: Repository) -> None:
        """Bring the clone of ``repo`` to ``repo.sha`` on ``repo.branch``.

        Raises
        ------
        FileNotFoundError
            If the clone's directory no longer exists.

        """
        ...

    async def delete(self, repo: Repository) -> None:
        """Remove the clone of ``repo``; a no-op when it is already gone."""
        ...
