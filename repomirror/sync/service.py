"""Sync service tying the catalogue, the store and the mirror together.

Usage
-----
>>> store = await open_metadata_store(config.repos_dir, config.query)
>>> service = SyncService(catalogue, store, mutator, config)
>>> report = await service.sync()
>>> report.processed("clone"), report.processed("update")
(2, 5)

"""

from __future__ import annotations

import typing as typ

from repomirror.common.time import is_zero, utcnow
from repomirror.logging import get_logger, log_info
from repomirror.store.models import Repository, RepositoryBy

from .errors import PhaseError
from .models import SyncReport
from .observability import SyncEventLogger
from .orchestrator import SyncOrchestrator
from .reconciler import Reconciler

if typ.TYPE_CHECKING:
    import asyncio
    import collections.abc as cabc
    import datetime as dt

    from repomirror.config import SyncConfig
    from repomirror.store.jsonstore import MetadataStore

    from .models import SyncPlan
    from .protocols import FilesystemMutator, RemoteCatalogue

logger = get_logger(__name__)


def last_synced(repos: cabc.Iterable[Repository]) -> dt.datetime | None:
    """Return the most recent ``synced_at`` of ``repos``, or None if none synced."""
    synced = [repo.synced_at for repo in repos if not is_zero(repo.synced_at)]
    return max(synced, default=None)


class SyncService:
    """Keep a local mirror of the repositories matched by a query up to date.

    Parameters
    ----------
    catalogue
        Remote catalogue providing the repository set and branch heads.
    store
        Metadata store for the mirror's repos directory.
    mutator
        Filesystem mutator applying clones, updates and deletions.
    config
        Query and concurrency settings.

    """

    def __init__(
        self,
        catalogue: RemoteCatalogue,
        store: MetadataStore,
        mutator: FilesystemMutator,
        config: SyncConfig,
        *,
        event_logger: SyncEventLogger | None = None,
    ) -> None:
        """Compose the reconciler and orchestrator from shared collaborators."""
        self._catalogue = catalogue
        self._store = store
        self._mutator = mutator
        self._config = config
        self._events = event_logger or SyncEventLogger()
        self._reconciler = Reconciler(
            catalogue,
            store,
            concurrency=config.lookup_concurrency,
            event_logger=self._events,
        )
        self._orchestrator = SyncOrchestrator(
            store,
            mutator,
            concurrency=config.sync_concurrency,
            event_logger=self._events,
        )

    @property
    def orchestrator(self) -> SyncOrchestrator:
        """Return the orchestrator used for filesystem phases."""
        return self._orchestrator

    async def list_repos(self) -> list[Repository]:
        """Return every repository tracked in the store."""
        return await self._store.find_repos()

    async def fetch_remote(self) -> list[Repository]:
        """Return the catalogue's current repository set for the query.

        Catalogue failures propagate: without the full remote set no
        repository can safely be classified for deletion.
        """
        return [
            Repository(
                owner=remote.owner,
                name=remote.name,
                branch=remote.default_branch,
            )
            async for remote in self._catalogue.search(self._config.query)
        ]

    async def plan(self, *, cancel: asyncio.Event | None = None) -> SyncPlan:
        """Refresh store metadata from the catalogue and classify the set.

        Raises
        ------
        MultiError
            If any branch-head lookup failed; the pass is aborted.

        """
        started = utcnow()
        remote = await self.fetch_remote()
        local = await self._store.find_repos()
        self._events.log_plan_started(
            query=self._config.query, local=len(local), remote=len(remote)
        )
        plan = await self._reconciler.reconcile(local, remote, cancel=cancel)
        self._events.log_plan_completed(plan, utcnow() - started)
        return plan

    async def sync(
        self, *, dry_run: bool = False, cancel: asyncio.Event | None = None
    ) -> SyncReport:
        """Run a full pass: plan, then delete, clone and update.

        A failing phase is recorded in :attr:`SyncReport.failures` and the
        following phases still run. With ``dry_run`` only metadata is
        refreshed and the filesystem is left untouched.
        """
        started = utcnow()
        previous = last_synced(await self._store.find_repos())
        log_info(
            logger,
            "syncing query=%r last_synced=%s",
            self._config.query,
            previous.isoformat() if previous is not None else "never",
        )

        plan = await self.plan(cancel=cancel)
        report = SyncReport(plan=plan, dry_run=dry_run)
        if dry_run or plan.is_up_to_date:
            report.elapsed = utcnow() - started
            return report

        # Deletions run first so stale directories never collide with clones.
        phases = (
            (self._orchestrator.delete_repos, plan.to_delete),
            (self._orchestrator.clone_repos, plan.to_clone),
            (self._orchestrator.update_repos, plan.to_update),
        )
        for run_phase, repos in phases:
            try:
                outcome = await run_phase(repos, cancel=cancel)
            except PhaseError as exc:
                outcome = exc.outcome
                report.failures[exc.phase] = str(exc)
            report.outcomes[outcome.phase] = outcome

        report.elapsed = utcnow() - started
        return report

    async def delete_repo(self, repo_id: int) -> Repository:
        """Remove one tracked repository's clone and record.

        Raises
        ------
        RepositoryNotFoundError
            If no record has ``repo_id``.

        """
        repo = await self._store.find_repo(repo_id)
        await self._mutator.delete(repo)
        removed = await self._store.delete_repo(RepositoryBy(repo_id=repo.id))
        log_info(logger, "removed repository id=%d nwo=%s", removed.id, removed.nwo)
        return removed
