"""Diff the tracked repository set against a freshly fetched remote set."""

from __future__ import annotations

import functools
import typing as typ

import msgspec

from repomirror.common.time import ensure_utc, is_zero
from repomirror.semgroup import SemGroup
from repomirror.store.models import RepositoryBy, RepositoryUpdate

from .errors import BranchNotFoundError
from .models import SyncPlan
from .observability import SyncEventLogger

if typ.TYPE_CHECKING:
    import asyncio
    import collections.abc as cabc

    from repomirror.store.jsonstore import MetadataStore
    from repomirror.store.models import Repository

    from .protocols import RemoteCatalogue

DEFAULT_LOOKUP_CONCURRENCY = 5


def needs_clone(repo: Repository) -> bool:
    """Return True when ``repo`` has never been materialised locally."""
    return repo.never_synced


def needs_update(repo: Repository) -> bool:
    """Return True when the remote branch moved after the last local sync."""
    if is_zero(repo.synced_at):
        return False
    return ensure_utc(repo.synced_at) < ensure_utc(repo.branch_updated_at)


def classify(
    repos: cabc.Iterable[Repository], deleted: cabc.Collection[str] = ()
) -> tuple[list[Repository], list[Repository]]:
    """Split ``repos`` into ``(to_clone, to_update)``.

    Repositories whose nwo is in ``deleted`` are ignored; repositories that
    are already current appear in neither list.
    """
    to_clone: list[Repository] = []
    to_update: list[Repository] = []
    for repo in repos:
        if repo.nwo in deleted:
            continue
        if needs_clone(repo):
            to_clone.append(repo)
        elif needs_update(repo):
            to_update.append(repo)
    return to_clone, to_update


class Reconciler:
    """Refresh store metadata from the remote catalogue and classify the set.

    Parameters
    ----------
    catalogue
        Remote catalogue queried for branch heads.
    store
        Metadata store receiving created and refreshed records.
    concurrency
        Maximum simultaneous branch-head lookups.

    """

    def __init__(
        self,
        catalogue: RemoteCatalogue,
        store: MetadataStore,
        *,
        concurrency: int = DEFAULT_LOOKUP_CONCURRENCY,
        event_logger: SyncEventLogger | None = None,
    ) -> None:
        """Store collaborators and the lookup ceiling."""
        self._catalogue = catalogue
        self._store = store
        self._concurrency = concurrency
        self._events = event_logger or SyncEventLogger()

    async def reconcile(
        self,
        local: cabc.Sequence[Repository],
        remote: cabc.Sequence[Repository],
        *,
        cancel: asyncio.Event | None = None,
    ) -> SyncPlan:
        """Reconcile ``local`` against ``remote`` and return the sync plan.

        Parameters
        ----------
        local
            Snapshot of the metadata store taken before the pass.
        remote
            Repositories returned by the catalogue search, keyed by nwo.
        cancel
            Cancellation event shared with the rest of the sync.

        Returns
        -------
        SyncPlan
            Repositories to clone, update and delete.

        Raises
        ------
        MultiError
            If any branch-head lookup or store write failed. Records written
            before the failure are kept.

        """
        local_by_nwo = {repo.nwo: repo for repo in local}
        remote_by_nwo = {repo.nwo: repo for repo in remote}

        plan = SyncPlan()
        for nwo in list(local_by_nwo):
            if nwo not in remote_by_nwo:
                plan.to_delete.append(local_by_nwo.pop(nwo))

        group = SemGroup(self._concurrency, cancel=cancel)
        for remote_repo in remote_by_nwo.values():
            group.go(
                functools.partial(
                    self._refresh,
                    remote_repo,
                    local_by_nwo.get(remote_repo.nwo),
                    plan,
                )
            )
        await group.wait()

        deleted = {repo.nwo for repo in plan.to_delete}
        current = await self._store.find_repos()
        plan.to_clone, plan.to_update = classify(current, deleted)
        return plan

    async def _refresh(
        self,
        remote_repo: Repository,
        local_repo: Repository | None,
        plan: SyncPlan,
    ) -> None:
        """Fetch one branch head and create or refresh its store record."""
        try:
            head = await self._catalogue.branch_head(
                remote_repo.owner, remote_repo.name, remote_repo.branch
            )
        except BranchNotFoundError:
            self._events.log_repo_skipped(remote_repo.nwo, remote_repo.branch)
            plan.skipped.append(remote_repo.nwo)
            return

        observed_at = ensure_utc(head.updated_at)
        if local_repo is None:
            await self._store.create_repo(
                msgspec.structs.replace(
                    remote_repo, sha=head.sha, branch_updated_at=observed_at
                )
            )
            return

        if ensure_utc(local_repo.branch_updated_at) != observed_at:
            await self._store.update_repo(
                RepositoryBy(repo_id=local_repo.id),
                RepositoryUpdate(sha=head.sha, branch_updated_at=observed_at),
            )
