"""Unit tests for the sync orchestrator phases."""

from __future__ import annotations

import asyncio
import typing as typ

import pytest

from repomirror.common.time import ZERO_TIME
from repomirror.store import RepositoryNotFoundError
from repomirror.sync import PhaseError, SyncOrchestrator
from tests.helpers import T0, T1, T2, make_repo

if typ.TYPE_CHECKING:
    from repomirror.store import MetadataStore, Repository
    from repomirror.sync.mock import FakeFilesystemMutator


async def _seed(store: MetadataStore, *repos: Repository) -> list[Repository]:
    for repo in repos:
        await store.create_repo(repo)
    return await store.find_repos()


@pytest.mark.asyncio
@pytest.mark.parametrize("phase", ["delete_repos", "clone_repos", "update_repos"])
async def test_empty_phase_does_nothing(
    store: MetadataStore, mutator: FakeFilesystemMutator, phase: str
) -> None:
    """A phase with no repositories returns an empty outcome."""
    orchestrator = SyncOrchestrator(store, mutator)

    outcome = await getattr(orchestrator, phase)([])

    assert outcome.processed == []
    assert outcome.self_healed == []
    assert mutator.calls == []


class TestCloneRepos:
    """Tests for the clone phase."""

    @pytest.mark.asyncio
    async def test_clones_and_stamps_synced_at(
        self, store: MetadataStore, mutator: FakeFilesystemMutator
    ) -> None:
        """Each clone is created on disk and stamped in the store."""
        repos = await _seed(
            store, make_repo("fatih", "vim-go"), make_repo("fatih", "gomodifytags")
        )

        outcome = await SyncOrchestrator(store, mutator).clone_repos(repos)

        assert sorted(outcome.processed) == ["fatih/gomodifytags", "fatih/vim-go"]
        assert mutator.present == {"vim-go", "gomodifytags"}
        assert all(repo.synced_at > ZERO_TIME for repo in await store.find_repos())

    @pytest.mark.asyncio
    async def test_cloning_twice_is_idempotent(
        self, store: MetadataStore, mutator: FakeFilesystemMutator
    ) -> None:
        """Re-cloning an existing directory restamps without duplicating."""
        repos = await _seed(store, make_repo("fatih", "vim-go"))
        orchestrator = SyncOrchestrator(store, mutator)

        await orchestrator.clone_repos(repos)
        first = (await store.find_repo(1)).synced_at
        await orchestrator.clone_repos(repos)

        stored = await store.find_repos()
        assert len(stored) == 1
        assert stored[0].synced_at >= first
        assert mutator.actions("create") == ["vim-go", "vim-go"]

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_siblings(
        self, store: MetadataStore, mutator: FakeFilesystemMutator
    ) -> None:
        """One failing clone raises PhaseError after the others complete."""
        repos = await _seed(
            store,
            make_repo("fatih", "vim-go"),
            make_repo("fatih", "broken"),
            make_repo("fatih", "color"),
        )
        mutator.failures["broken"] = RuntimeError("disk full")

        with pytest.raises(PhaseError) as excinfo:
            await SyncOrchestrator(store, mutator).clone_repos(repos)

        error = excinfo.value
        assert error.phase == "clone"
        assert str(error) == "1 error(s) occured:\n* disk full"
        assert sorted(error.outcome.processed) == ["fatih/color", "fatih/vim-go"]
        stored = {repo.name: repo for repo in await store.find_repos()}
        assert stored["broken"].synced_at == ZERO_TIME
        assert stored["color"].synced_at > ZERO_TIME

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(
        self, store: MetadataStore, mutator: FakeFilesystemMutator
    ) -> None:
        """No more than ``concurrency`` clones run at once."""
        repos = await _seed(
            store, *(make_repo("fatih", f"repo-{index}") for index in range(9))
        )
        mutator.delay = 0.005

        await SyncOrchestrator(store, mutator, concurrency=2).clone_repos(repos)

        assert mutator.peak_active == 2
        assert len(mutator.present) == 9


class TestUpdateRepos:
    """Tests for the update phase."""

    @pytest.mark.asyncio
    async def test_updates_existing_clones(
        self, store: MetadataStore, mutator: FakeFilesystemMutator
    ) -> None:
        """A present clone is updated and restamped."""
        repos = await _seed(
            store, make_repo("fatih", "vim-go", branch_updated_at=T2, synced_at=T1)
        )
        mutator.present.add("vim-go")

        outcome = await SyncOrchestrator(store, mutator).update_repos(repos)

        assert outcome.processed == ["fatih/vim-go"]
        assert (await store.find_repo(1)).synced_at > T2

    @pytest.mark.asyncio
    async def test_missing_clone_self_heals(
        self, store: MetadataStore, mutator: FakeFilesystemMutator
    ) -> None:
        """A vanished clone drops its record instead of failing the phase."""
        repos = await _seed(
            store,
            make_repo("fatih", "vim-go", branch_updated_at=T2, synced_at=T1),
            make_repo("fatih", "color", branch_updated_at=T2, synced_at=T0),
        )
        mutator.present.add("color")

        outcome = await SyncOrchestrator(store, mutator).update_repos(repos)

        assert outcome.self_healed == ["fatih/vim-go"]
        assert outcome.processed == ["fatih/color"]
        assert [repo.nwo for repo in await store.find_repos()] == ["fatih/color"]


class TestDeleteRepos:
    """Tests for the delete phase."""

    @pytest.mark.asyncio
    async def test_removes_directories_and_records(
        self, store: MetadataStore, mutator: FakeFilesystemMutator
    ) -> None:
        """Deleted repositories disappear from disk and from the store."""
        repos = await _seed(
            store, make_repo("fatih", "vim-go"), make_repo("fatih", "color")
        )
        mutator.present.update({"vim-go", "color"})

        outcome = await SyncOrchestrator(store, mutator).delete_repos(repos[:1])

        assert outcome.processed == ["fatih/vim-go"]
        assert mutator.present == {"color"}
        with pytest.raises(RepositoryNotFoundError):
            await store.find_repo(1)

    @pytest.mark.asyncio
    async def test_filesystem_failure_keeps_the_record(
        self, store: MetadataStore, mutator: FakeFilesystemMutator
    ) -> None:
        """A failed removal leaves the record for the next pass."""
        repos = await _seed(store, make_repo("fatih", "vim-go"))
        mutator.failures["vim-go"] = PermissionError("read-only filesystem")

        with pytest.raises(PhaseError, match="read-only filesystem"):
            await SyncOrchestrator(store, mutator).delete_repos(repos)

        assert (await store.find_repo(1)).nwo == "fatih/vim-go"


@pytest.mark.asyncio
async def test_cancel_stops_pending_work(
    store: MetadataStore, mutator: FakeFilesystemMutator
) -> None:
    """Setting the cancel event stops repositories that have not started."""
    repos = await _seed(
        store, *(make_repo("fatih", f"repo-{index}") for index in range(4))
    )
    cancel = asyncio.Event()
    cancel.set()

    with pytest.raises(PhaseError) as excinfo:
        await SyncOrchestrator(store, mutator, concurrency=1).clone_repos(
            repos, cancel=cancel
        )

    assert len(excinfo.value.errors) == 4
    assert mutator.calls == []
