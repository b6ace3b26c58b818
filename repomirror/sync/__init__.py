"""Reconcile a remote repository set with a local mirror.

The sync engine has three parts:

- :class:`Reconciler` refreshes the metadata store from the remote catalogue
  and classifies every tracked repository as clone, update or delete;
- :class:`SyncOrchestrator` applies that plan through a filesystem mutator
  and records each success in the store;
- :class:`SyncService` composes both for a configured query.

Usage
-----
Run a full pass::

    from repomirror.store import open_metadata_store
    from repomirror.sync import SyncService

    store = await open_metadata_store(config.repos_dir, config.query)
    service = SyncService(catalogue, store, mutator, config)
    report = await service.sync()
    print(report.processed("clone"), report.failures)

Preview without touching the filesystem::

    report = await service.sync(dry_run=True)
    print(len(report.plan.to_clone), len(report.plan.to_update))

"""

from repomirror.sync.errors import (
    BranchNotFoundError,
    PhaseError,
    SyncConfigError,
    SyncError,
)
from repomirror.sync.models import PhaseOutcome, SyncPlan, SyncReport
from repomirror.sync.observability import SyncEventLogger, SyncEventType
from repomirror.sync.orchestrator import SyncOrchestrator
from repomirror.sync.protocols import (
    BranchHead,
    FilesystemMutator,
    RemoteCatalogue,
    RemoteRepository,
)
from repomirror.sync.reconciler import Reconciler, classify, needs_clone, needs_update
from repomirror.sync.service import SyncService, last_synced

__all__ = [
    "BranchHead",
    "BranchNotFoundError",
    "FilesystemMutator",
    "PhaseError",
    "PhaseOutcome",
    "Reconciler",
    "RemoteCatalogue",
    "RemoteRepository",
    "SyncConfigError",
    "SyncError",
    "SyncEventLogger",
    "SyncEventType",
    "SyncOrchestrator",
    "SyncPlan",
    "SyncReport",
    "SyncService",
    "classify",
    "last_synced",
    "needs_clone",
    "needs_update",
]
