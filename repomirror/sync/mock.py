"""In-memory collaborators for tests and offline runs.

:class:`FakeRemoteCatalogue` serves a fixed repository set and branch heads;
:class:`FakeFilesystemMutator` tracks which clones "exist" without touching
the disk. Both record every call so tests can assert on them.
"""

from __future__ import annotations

import asyncio
import dataclasses
import typing as typ

from repomirror.common.nwo import make_nwo

from .errors import BranchNotFoundError
from .protocols import BranchHead, RemoteRepository

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from repomirror.store.models import Repository


class FakeRemoteCatalogue:
    """Deterministic :class:`~repomirror.sync.protocols.RemoteCatalogue`.

    Examples
    --------
    >>> catalogue = FakeRemoteCatalogue()
    >>> catalogue.add("fatih", "vim-go", sha="abc", updated_at=now)
    >>> isinstance(catalogue, RemoteCatalogue)
    True

    """

    def __init__(self) -> None:
        """Start with an empty catalogue."""
        self.repositories: dict[str, RemoteRepository] = {}
        self.heads: dict[str, BranchHead] = {}
        self.failures: dict[str, Exception] = {}
        self.search_error: Exception | None = None
        self.searches: list[str] = []
        self.lookups: list[str] = []
        self.delay: float = 0.0

    def add(
        self,
        owner: str,
        name: str,
        *,
        sha: str | None = None,
        updated_at: dt.datetime | None = None,
        branch: str = "main",
    ) -> None:
        """Publish a repository; without a head its branch is "not found"."""
        nwo = make_nwo(owner, name)
        self.repositories[nwo] = RemoteRepository(
            owner=owner, name=name, default_branch=branch
        )
        if sha is not None and updated_at is not None:
            self.heads[nwo] = BranchHead(sha=sha, updated_at=updated_at)

    def remove(self, owner: str, name: str) -> None:
        """Withdraw a repository from search results."""
        nwo = make_nwo(owner, name)
        self.repositories.pop(nwo, None)
        self.heads.pop(nwo, None)

    def fail_lookup(self, owner: str, name: str, error: Exception) -> None:
        """Make ``branch_head`` raise ``error`` for one repository."""
        self.failures[make_nwo(owner, name)] = error

    async def search(self, query: str) -> cabc.AsyncIterator[RemoteRepository]:
        """Yield every published repository."""
        self.searches.append(query)
        if self.search_error is not None:
            raise self.search_error
        for repo in list(self.repositories.values()):
            yield repo

    async def branch_head(self, owner: str, name: str, branch: str) -> BranchHead:
        """Return the configured head or raise the configured failure."""
        nwo = make_nwo(owner, name)
        self.lookups.append(nwo)
        if self.delay:
            await asyncio.sleep(self.delay)
        if nwo in self.failures:
            raise self.failures[nwo]
        head = self.heads.get(nwo)
        if head is None:
            raise BranchNotFoundError(owner, name, branch)
        return head


@dataclasses.dataclass(slots=True)
class MutatorCall:
    """One recorded filesystem operation."""

    action: str
    name: str


class FakeFilesystemMutator:
    """Deterministic :class:`~repomirror.sync.protocols.FilesystemMutator`.

    ``present`` holds the directory names that currently exist. ``failures``
    maps a repository name to the error its next operations raise.
    """

    def __init__(self, present: cabc.Iterable[str] = ()) -> None:
        """Start with the given directories present."""
        self.present: set[str] = set(present)
        self.failures: dict[str, Exception] = {}
        self.calls: list[MutatorCall] = []
        self.delay: float = 0.0
        self.active = 0
        self.peak_active = 0

    def actions(self, action: str) -> list[str]:
        """Return the repository names passed to ``action`` in call order."""
        return [call.name for call in self.calls if call.action == action]

    async def _enter(self, action: str, repo: Repository) -> None:
        self.calls.append(MutatorCall(action=action, name=repo.name))
        self.active += 1
        self.peak_active = max(self.peak_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        finally:
            self.active -= 1
        if repo.name in self.failures:
            raise self.failures[repo.name]

    async def create(self, repo: Repository) -> None:
        """Mark the directory present; existing directories are left alone."""
        await self._enter("create", repo)
        self.present.add(repo.name)

    async def update(self, repo: Repository) -> None:
        """Succeed only when the directory is present."""
        await self._enter("update", repo)
        if repo.name not in self.present:
            msg = f"repository directory for {repo.nwo} does not exist"
            raise FileNotFoundError(msg)

    async def delete(self, repo: Repository) -> None:
        """Forget the directory; missing directories are fine."""
        await self._enter("delete", repo)
        self.present.discard(repo.name)
