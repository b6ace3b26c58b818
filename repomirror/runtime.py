"""repomirror runtime entrypoint.

Wires configuration, logging, the metadata store and the sync service into a
single call for embedding applications. The remote catalogue and filesystem
mutator are supplied by the caller.

Configuration is driven by environment variables (see
:meth:`repomirror.config.SyncConfig.from_env`) or a JSON file passed to
:func:`repomirror.config.load_config`:

- ``REPOMIRROR_QUERY``: search query selecting the mirrored set (required)
- ``REPOMIRROR_REPOS_DIR``: absolute repos directory (required)
- ``REPOMIRROR_LOOKUP_CONCURRENCY``: branch-head lookups at once (default 5)
- ``REPOMIRROR_SYNC_CONCURRENCY``: filesystem operations at once (default 10)
- ``REPOMIRROR_LOG_LEVEL``: log level (default ``INFO``)

Example:
>>> config = SyncConfig.from_env()
>>> report = await run_sync(config, catalogue, mutator)

"""

from __future__ import annotations

import typing as typ

from repomirror.logging import (
    configure_logging,
    get_logger,
    log_exception,
    log_info,
    log_warning,
)
from repomirror.store import open_metadata_store
from repomirror.sync import SyncService

if typ.TYPE_CHECKING:
    import asyncio

    from repomirror.config import SyncConfig
    from repomirror.sync import FilesystemMutator, RemoteCatalogue, SyncReport

__all__ = ["run_sync", "setup_logging"]

logger = get_logger(__name__)


def setup_logging(config: SyncConfig, *, force: bool = False) -> str:
    """Configure femtologging from ``config`` and return the applied level."""
    normalized_level, invalid_level = configure_logging(config.log_level, force=force)
    if invalid_level:
        log_warning(
            logger,
            "Invalid REPOMIRROR_LOG_LEVEL %r, falling back to %s",
            config.log_level,
            normalized_level,
        )
    return normalized_level


async def run_sync(
    config: SyncConfig,
    catalogue: RemoteCatalogue,
    mutator: FilesystemMutator,
    *,
    dry_run: bool = False,
    cancel: asyncio.Event | None = None,
) -> SyncReport:
    """Open the store for ``config`` and run one sync pass.

    Parameters
    ----------
    config
        Query, repos directory and concurrency limits.
    catalogue
        Remote catalogue implementation.
    mutator
        Filesystem mutator implementation.
    dry_run
        Refresh metadata and plan without touching the filesystem.
    cancel
        Event that stops work which has not started yet.

    Returns
    -------
    SyncReport
        Outcome of the pass; phase failures are listed in ``failures``.

    Raises
    ------
    StoreError
        If the metadata store cannot be opened, read or written.
    MultiError
        If reconciliation failed.

    """
    store = await open_metadata_store(config.repos_dir, config.query)
    service = SyncService(catalogue, store, mutator, config)
    try:
        report = await service.sync(dry_run=dry_run, cancel=cancel)
    except Exception as exc:
        log_exception(logger, f"Sync of {config.query!r} failed", exc)
        raise

    log_info(
        logger,
        "Sync of %r finished: cloned=%d updated=%d deleted=%d failures=%d",
        config.query,
        report.processed("clone"),
        report.processed("update"),
        report.processed("delete"),
        len(report.failures),
    )
    return report
