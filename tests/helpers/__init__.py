"""Shared test utilities."""

from __future__ import annotations

import asyncio
import datetime as dt
import typing as typ

from repomirror.store import Repository

QUERY = "org:fatih language:go"

T0 = dt.datetime(2024, 1, 1, 12, 0, tzinfo=dt.UTC)
T1 = dt.datetime(2024, 2, 1, 12, 0, tzinfo=dt.UTC)
T2 = dt.datetime(2024, 3, 1, 12, 0, tzinfo=dt.UTC)


def run_async[T](coro_func: typ.Callable[[], typ.Coroutine[typ.Any, typ.Any, T]]) -> T:
    """Execute an async callable within the test context."""
    return asyncio.run(coro_func())


def make_repo(
    owner: str,
    name: str,
    *,
    sha: str = "",
    branch_updated_at: dt.datetime | None = None,
    synced_at: dt.datetime | None = None,
) -> Repository:
    """Build an unsaved repository record with optional timestamps."""
    repo = Repository(owner=owner, name=name, branch="main", sha=sha)
    if branch_updated_at is not None:
        repo.branch_updated_at = branch_updated_at
    if synced_at is not None:
        repo.synced_at = synced_at
    return repo
