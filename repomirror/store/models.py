"""Typed records persisted in the metadata store document."""

from __future__ import annotations

import dataclasses
import datetime as dt  # noqa: TC003 - msgspec resolves field types at runtime

import msgspec

from repomirror.common.nwo import make_nwo
from repomirror.common.time import ZERO_TIME, is_zero


class Repository(msgspec.Struct, kw_only=True, rename="pascal"):
    """A tracked repository and its sync bookkeeping.

    Attributes
    ----------
    id : int
        Identifier assigned by the store on creation; ``0`` until then.
    nwo : str
        ``owner/name`` identity, unique across the store.
    owner : str
        Repository owner (user or organisation).
    name : str
        Repository name; also the directory name of the local clone.
    branch : str
        Default branch as last observed remotely.
    sha : str
        Head commit of ``branch`` as last observed remotely.
    branch_updated_at : datetime
        Timestamp of that commit. Only the reconciler advances it.
    synced_at : datetime
        Last successful local clone or update; :data:`ZERO_TIME` means the
        repository was never materialised locally.
    created_at, updated_at : datetime
        Store bookkeeping timestamps.

    """

    id: int = msgspec.field(default=0, name="ID")
    nwo: str = ""
    owner: str
    name: str
    branch: str = ""
    sha: str = msgspec.field(default="", name="SHA")
    branch_updated_at: dt.datetime = ZERO_TIME
    synced_at: dt.datetime = ZERO_TIME
    created_at: dt.datetime = ZERO_TIME
    updated_at: dt.datetime = ZERO_TIME

    def __post_init__(self) -> None:
        """Derive ``nwo`` from owner and name when it was not supplied."""
        if not self.nwo:
            self.nwo = make_nwo(self.owner, self.name)

    @property
    def never_synced(self) -> bool:
        """Return True when the repository has no local clone yet."""
        return is_zero(self.synced_at)


class StoreDocument(msgspec.Struct, kw_only=True):
    """The whole persisted document: one per repos directory."""

    query: str = ""
    repositories: list[Repository] = msgspec.field(default_factory=list)
    created_at: dt.datetime = ZERO_TIME
    updated_at: dt.datetime = ZERO_TIME


@dataclasses.dataclass(frozen=True, slots=True)
class RepositoryFilter:
    """Filter accepted by ``find_repos``; every record currently matches."""


@dataclasses.dataclass(frozen=True, slots=True)
class FindOptions:
    """Paging and sorting hints for ``find_repos``."""

    offset: int = 0
    limit: int = 25
    sort_by: str = "id"
    descending: bool = False

    def sort_by_direction(self) -> str:
        """Return the sort directive, e.g. ``"id asc"``."""
        direction = "desc" if self.descending else "asc"
        return f"{self.sort_by} {direction}"


DEFAULT_FIND_OPTIONS = FindOptions()


@dataclasses.dataclass(frozen=True, slots=True)
class RepositoryBy:
    """Selects a record by id or by name; the first set field is used."""

    repo_id: int | None = None
    name: str | None = None

    def __post_init__(self) -> None:
        """Require exactly one selector field."""
        if (self.repo_id is None) == (self.name is None):
            msg = "RepositoryBy requires exactly one of repo_id or name"
            raise ValueError(msg)

    def matches(self, repo: Repository) -> bool:
        """Return True when ``repo`` is selected."""
        if self.repo_id is not None:
            return repo.id == self.repo_id
        return repo.name == self.name

    def __str__(self) -> str:
        """Render as ``id=N`` or ``name=...`` for error messages."""
        if self.repo_id is not None:
            return f"id={self.repo_id}"
        return f"name={self.name}"


@dataclasses.dataclass(frozen=True, slots=True)
class RepositoryUpdate:
    """Partial update; only fields that are not ``None`` are written."""

    nwo: str | None = None
    owner: str | None = None
    sha: str | None = None
    branch_updated_at: dt.datetime | None = None
    synced_at: dt.datetime | None = None

    def apply(self, repo: Repository, *, now: dt.datetime) -> None:
        """Overwrite the set fields on ``repo`` and refresh ``updated_at``."""
        for field in dataclasses.fields(self):
            value = getattr(self, field.name)
            if value is not None:
                setattr(repo, field.name, value)
        repo.updated_at = now
