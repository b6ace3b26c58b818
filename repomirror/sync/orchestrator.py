"""Apply a sync plan to the local mirror and record the results.

Each phase fans out over a :class:`~repomirror.semgroup.SemGroup` so that at
most ``concurrency`` clones, updates or deletions run at once. A failure for
one repository never stops its siblings; the phase raises a
:class:`~repomirror.sync.errors.PhaseError` once every repository was tried.
"""

from __future__ import annotations

import functools
import typing as typ

from repomirror.common.time import utcnow
from repomirror.semgroup import MultiError, SemGroup
from repomirror.store.models import RepositoryBy, RepositoryUpdate

from .errors import PhaseError
from .models import PhaseOutcome
from .observability import SyncEventLogger

if typ.TYPE_CHECKING:
    import asyncio
    import collections.abc as cabc

    from repomirror.store.jsonstore import MetadataStore
    from repomirror.store.models import Repository

    from .protocols import FilesystemMutator

    type RepoAction = cabc.Callable[[Repository, PhaseOutcome], cabc.Awaitable[None]]

DEFAULT_SYNC_CONCURRENCY = 10


class SyncOrchestrator:
    """Drive the filesystem mutator and keep the store in step with it.

    Parameters
    ----------
    store
        Metadata store whose ``synced_at`` fields and records are maintained.
    mutator
        Performs the clone, update and delete on disk.
    concurrency
        Maximum simultaneous filesystem operations per phase.

    """

    def __init__(
        self,
        store: MetadataStore,
        mutator: FilesystemMutator,
        *,
        concurrency: int = DEFAULT_SYNC_CONCURRENCY,
        event_logger: SyncEventLogger | None = None,
    ) -> None:
        """Store collaborators and the per-phase ceiling."""
        self._store = store
        self._mutator = mutator
        self._concurrency = concurrency
        self._events = event_logger or SyncEventLogger()

    async def delete_repos(
        self,
        repos: cabc.Sequence[Repository],
        *,
        cancel: asyncio.Event | None = None,
    ) -> PhaseOutcome:
        """Remove each repository's clone, then its store record."""
        return await self._run_phase("delete", repos, self._delete_one, cancel)

    async def clone_repos(
        self,
        repos: cabc.Sequence[Repository],
        *,
        cancel: asyncio.Event | None = None,
    ) -> PhaseOutcome:
        """Clone each repository and stamp its ``synced_at``.

        Cloning is idempotent: an existing directory is left alone and the
        record is stamped again.
        """
        return await self._run_phase("clone", repos, self._clone_one, cancel)

    async def update_repos(
        self,
        repos: cabc.Sequence[Repository],
        *,
        cancel: asyncio.Event | None = None,
    ) -> PhaseOutcome:
        """Update each clone to its recorded SHA and stamp ``synced_at``.

        A clone whose directory vanished is not an error: its record is
        deleted so the next pass clones it afresh, and the repository is
        listed in :attr:`PhaseOutcome.self_healed`.
        """
        return await self._run_phase("update", repos, self._update_one, cancel)

    async def _run_phase(
        self,
        phase: str,
        repos: cabc.Sequence[Repository],
        action: RepoAction,
        cancel: asyncio.Event | None,
    ) -> PhaseOutcome:
        outcome = PhaseOutcome(phase=phase)
        if not repos:
            return outcome

        started = utcnow()
        group = SemGroup(self._concurrency, cancel=cancel)
        for repo in repos:
            group.go(functools.partial(action, repo, outcome))

        try:
            await group.wait()
        except MultiError as exc:
            error = PhaseError(outcome, exc.errors)
            self._events.log_phase_failed(outcome, error, utcnow() - started)
            raise error from exc

        self._events.log_phase_completed(outcome, utcnow() - started)
        return outcome

    async def _delete_one(self, repo: Repository, outcome: PhaseOutcome) -> None:
        await self._mutator.delete(repo)
        await self._store.delete_repo(RepositoryBy(repo_id=repo.id))
        outcome.processed.append(repo.nwo)

    async def _clone_one(self, repo: Repository, outcome: PhaseOutcome) -> None:
        await self._mutator.create(repo)
        await self._store.update_repo(
            RepositoryBy(name=repo.name), RepositoryUpdate(synced_at=utcnow())
        )
        outcome.processed.append(repo.nwo)

    async def _update_one(self, repo: Repository, outcome: PhaseOutcome) -> None:
        try:
            await self._mutator.update(repo)
        except FileNotFoundError:
            await self._store.delete_repo(RepositoryBy(repo_id=repo.id))
            self._events.log_repo_self_healed(repo.nwo, repo.id)
            outcome.self_healed.append(repo.nwo)
            return

        await self._store.update_repo(
            RepositoryBy(name=repo.name), RepositoryUpdate(synced_at=utcnow())
        )
        outcome.processed.append(repo.nwo)
