"""Structured log events for sync passes.

Every event is one femtologging line of the form
``[sync.phase.completed] phase=clone processed=3 duration_seconds=1.204``
so runs can be followed and parsed by log aggregators.
"""

from __future__ import annotations

import enum
import typing as typ

from repomirror.logging import get_logger, log_event

if typ.TYPE_CHECKING:
    import datetime as dt

    from .models import PhaseOutcome, SyncPlan

logger = get_logger(__name__)


class SyncEventType(enum.StrEnum):
    """Structured log event types for sync runs."""

    PLAN_STARTED = "sync.plan.started"
    PLAN_COMPLETED = "sync.plan.completed"
    PHASE_COMPLETED = "sync.phase.completed"
    PHASE_FAILED = "sync.phase.failed"
    REPO_SKIPPED = "sync.repo.skipped"
    REPO_SELF_HEALED = "sync.repo.self_healed"


class SyncEventLogger:
    """Emit sync lifecycle events via femtologging."""

    def log_plan_started(self, *, query: str, local: int, remote: int) -> None:
        """Log the start of a reconciliation pass."""
        log_event(
            logger,
            "INFO",
            SyncEventType.PLAN_STARTED,
            query=query,
            local_repositories=local,
            remote_repositories=remote,
        )

    def log_plan_completed(self, plan: SyncPlan, duration: dt.timedelta) -> None:
        """Log the classification produced by a reconciliation pass."""
        log_event(
            logger,
            "INFO",
            SyncEventType.PLAN_COMPLETED,
            to_clone=len(plan.to_clone),
            to_update=len(plan.to_update),
            to_delete=len(plan.to_delete),
            skipped=len(plan.skipped),
            duration_seconds=duration.total_seconds(),
        )

    def log_phase_completed(
        self, outcome: PhaseOutcome, duration: dt.timedelta
    ) -> None:
        """Log a phase that finished without failures."""
        log_event(
            logger,
            "INFO",
            SyncEventType.PHASE_COMPLETED,
            phase=outcome.phase,
            processed=len(outcome.processed),
            self_healed=len(outcome.self_healed),
            duration_seconds=duration.total_seconds(),
        )

    def log_phase_failed(
        self, outcome: PhaseOutcome, error: BaseException, duration: dt.timedelta
    ) -> None:
        """Log a phase that collected one or more per-repository failures."""
        log_event(
            logger,
            "ERROR",
            SyncEventType.PHASE_FAILED,
            phase=outcome.phase,
            processed=len(outcome.processed),
            duration_seconds=duration.total_seconds(),
            error_message=str(error),
        )

    def log_repo_skipped(self, nwo: str, branch: str) -> None:
        """Log a repository whose branch head was not found."""
        log_event(
            logger,
            "WARNING",
            SyncEventType.REPO_SKIPPED,
            nwo=nwo,
            branch=branch,
            reason="branch_not_found",
        )

    def log_repo_self_healed(self, nwo: str, repo_id: int) -> None:
        """Log a record dropped because its clone disappeared from disk."""
        log_event(
            logger,
            "WARNING",
            SyncEventType.REPO_SELF_HEALED,
            nwo=nwo,
            id=repo_id,
            reason="path_missing",
        )
