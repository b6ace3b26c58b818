"""Errors specific to repository synchronisation."""

from __future__ import annotations

import typing as typ

from repomirror.semgroup import MultiError

if typ.TYPE_CHECKING:
    from .models import PhaseOutcome


class SyncError(Exception):
    """Base class for sync errors."""


class BranchNotFoundError(SyncError):
    """Raised by a remote catalogue when a repository's branch does not exist.

    The reconciler treats this as transient and skips the repository for the
    current pass.
    """

    def __init__(self, owner: str, name: str, branch: str) -> None:
        """Initialise with the repository identity and branch."""
        self.owner = owner
        self.name = name
        self.branch = branch
        super().__init__(f"Branch {branch!r} not found for {owner}/{name}")


class SyncConfigError(SyncError):
    """Raised when sync configuration is missing or invalid."""

    @classmethod
    def missing(cls, field: str) -> SyncConfigError:
        """Return an error for a required setting that was not provided."""
        return cls(f"{field} is required")

    @classmethod
    def invalid(cls, field: str, reason: str) -> SyncConfigError:
        """Return an error for a setting with an unusable value."""
        return cls(f"{field} {reason}")


class PhaseError(MultiError, SyncError):
    """Aggregate failure of one orchestrator phase.

    The message is the :class:`MultiError` enumeration; ``outcome`` still
    lists the repositories the phase handled successfully.
    """

    def __init__(
        self, outcome: PhaseOutcome, errors: typ.Sequence[BaseException]
    ) -> None:
        """Initialise with the partial outcome and the collected errors."""
        self.phase = outcome.phase
        self.outcome = outcome
        super().__init__(list(errors))
