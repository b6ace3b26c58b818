"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import typing as typ

import pytest
import pytest_asyncio

from repomirror.config import SyncConfig
from repomirror.store import MetadataStore, open_metadata_store
from repomirror.sync.mock import FakeFilesystemMutator, FakeRemoteCatalogue
from tests.helpers import QUERY

if typ.TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def repos_dir(tmp_path: Path) -> Path:
    """Return an empty repos directory."""
    path = tmp_path / "repos"
    path.mkdir()
    return path


@pytest_asyncio.fixture
async def store(repos_dir: Path) -> MetadataStore:
    """Return a metadata store opened for the default test query."""
    return await open_metadata_store(repos_dir, QUERY)


@pytest.fixture
def catalogue() -> FakeRemoteCatalogue:
    """Return an empty in-memory remote catalogue."""
    return FakeRemoteCatalogue()


@pytest.fixture
def mutator() -> FakeFilesystemMutator:
    """Return an in-memory filesystem mutator with no clones present."""
    return FakeFilesystemMutator()


@pytest.fixture
def sync_config(repos_dir: Path) -> SyncConfig:
    """Return a configuration pointing at ``repos_dir``."""
    return SyncConfig(query=QUERY, repos_dir=repos_dir)
