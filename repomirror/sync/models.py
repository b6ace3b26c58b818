"""Data transfer objects produced by a sync pass."""

from __future__ import annotations

import dataclasses
import typing as typ

if typ.TYPE_CHECKING:
    import datetime as dt

    from repomirror.store.models import Repository


@dataclasses.dataclass(slots=True)
class SyncPlan:
    """Classification of the tracked set after one reconciliation pass.

    ``to_clone`` and ``to_update`` are disjoint, and neither contains a
    repository listed in ``to_delete``. Ordering carries no meaning.
    ``skipped`` names the repositories whose branch head could not be found
    during the pass.
    """

    to_clone: list[Repository] = dataclasses.field(default_factory=list)
    to_update: list[Repository] = dataclasses.field(default_factory=list)
    to_delete: list[Repository] = dataclasses.field(default_factory=list)
    skipped: list[str] = dataclasses.field(default_factory=list)

    @property
    def total_changes(self) -> int:
        """Return the number of repositories that need a filesystem change."""
        return len(self.to_clone) + len(self.to_update) + len(self.to_delete)

    @property
    def is_up_to_date(self) -> bool:
        """Return True when nothing needs to be cloned, updated or deleted."""
        return self.total_changes == 0


@dataclasses.dataclass(slots=True)
class PhaseOutcome:
    """Repositories handled by one orchestrator phase."""

    phase: str
    processed: list[str] = dataclasses.field(default_factory=list)
    self_healed: list[str] = dataclasses.field(default_factory=list)


@dataclasses.dataclass(slots=True)
class SyncReport:
    """Outcome of :meth:`SyncService.sync`.

    Phase failures do not abort the pass; they are recorded in ``failures``
    keyed by phase name with the aggregate error message as value.
    """

    plan: SyncPlan
    dry_run: bool = False
    outcomes: dict[str, PhaseOutcome] = dataclasses.field(default_factory=dict)
    failures: dict[str, str] = dataclasses.field(default_factory=dict)
    elapsed: dt.timedelta | None = None

    def processed(self, phase: str) -> int:
        """Return how many repositories ``phase`` handled successfully."""
        outcome = self.outcomes.get(phase)
        return len(outcome.processed) if outcome is not None else 0

    @property
    def self_healed(self) -> list[str]:
        """Return repositories dropped because their clone vanished."""
        outcome = self.outcomes.get("update")
        return list(outcome.self_healed) if outcome is not None else []

    @property
    def succeeded(self) -> bool:
        """Return True when no phase reported a failure."""
        return not self.failures
