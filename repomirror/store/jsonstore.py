"""Single-document JSON metadata store.

All repository metadata for one repos directory lives in
``{directory}/repomirror.json``. Each operation takes the store's lock and
performs a complete "read document, mutate in memory, write document" cycle,
so concurrent callers are totally ordered by lock acquisition and the last
writer wins.

Usage
-----
>>> store = await open_metadata_store(Path("/srv/mirror"), "org:fatih")
>>> repo_id = await store.create_repo(Repository(owner="fatih", name="vim-go"))
>>> await store.update_repo(
...     RepositoryBy(repo_id=repo_id), RepositoryUpdate(sha="abc123")
... )

"""

from __future__ import annotations

import asyncio
import typing as typ
from pathlib import Path

import msgspec

from repomirror.common.time import utcnow
from repomirror.logging import get_logger, log_debug, log_info

from .errors import (
    DuplicateRepositoryError,
    QueryMismatchError,
    RepositoryNotFoundError,
    StoreDecodeError,
    StoreError,
)
from .models import (
    DEFAULT_FIND_OPTIONS,
    FindOptions,
    Repository,
    RepositoryBy,
    RepositoryFilter,
    RepositoryUpdate,
    StoreDocument,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

logger = get_logger(__name__)

STORE_FILENAME = "repomirror.json"

_decoder = msgspec.json.Decoder(StoreDocument)


def _read_document(path: Path) -> StoreDocument:
    try:
        raw = path.read_bytes()
    except OSError as exc:
        msg = f"Cannot read metadata store {path}: {exc}"
        raise StoreError(msg) from exc
    try:
        return _decoder.decode(raw)
    except msgspec.DecodeError as exc:
        raise StoreDecodeError(path, str(exc)) from exc


def _write_document(path: Path, document: StoreDocument) -> None:
    payload = msgspec.json.format(msgspec.json.encode(document), indent=2)
    try:
        path.write_bytes(payload)
    except OSError as exc:
        msg = f"Cannot write metadata store {path}: {exc}"
        raise StoreError(msg) from exc


def _next_id(repositories: cabc.Sequence[Repository]) -> int:
    return max((repo.id for repo in repositories), default=0) + 1


def _first_match(
    repositories: cabc.Sequence[Repository], by: RepositoryBy
) -> int | None:
    for index, repo in enumerate(repositories):
        if by.matches(repo):
            return index
    return None


def _initialise(path: Path, query: str, now: dt.datetime) -> None:
    """Create the document, or validate the query recorded in it."""
    if not path.parent.is_dir():
        msg = f"Repos directory {path.parent} does not exist"
        raise StoreError(msg)

    if not path.exists():
        document = StoreDocument(query=query, created_at=now, updated_at=now)
        _write_document(path, document)
        log_info(logger, "created metadata store %s for query %r", path, query)
        return

    document = _read_document(path)
    if not document.query:
        # Documents written before the query was recorded adopt the caller's.
        document.query = query
        document.updated_at = now
        _write_document(path, document)
    elif document.query != query:
        raise QueryMismatchError(path, document.query, query)


async def open_metadata_store(directory: Path | str, query: str) -> MetadataStore:
    """Open, creating if needed, the metadata store for ``directory``.

    Parameters
    ----------
    directory
        Existing repos directory that holds the store document.
    query
        Search query the mirrored repository set is selected by.

    Returns
    -------
    MetadataStore
        Store bound to ``{directory}/repomirror.json``.

    Raises
    ------
    StoreError
        If the directory is missing or the document cannot be read/written.
    StoreDecodeError
        If an existing document is malformed.
    QueryMismatchError
        If an existing document was created for a different query.

    """
    path = Path(directory) / STORE_FILENAME
    await asyncio.to_thread(_initialise, path, query, utcnow())
    return MetadataStore(path, query)


class MetadataStore:
    """Repository metadata persisted as one JSON document.

    Instances are created with :func:`open_metadata_store` and shared by
    reference between the reconciler, the orchestrator and the service. The
    lock is owned by the instance; two instances bound to the same file do
    not coordinate.
    """

    def __init__(self, path: Path, query: str) -> None:
        """Bind the store to an already-initialised document."""
        self._path = path
        self._query = query
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        """Return the location of the backing document."""
        return self._path

    @property
    def query(self) -> str:
        """Return the search query this store tracks."""
        return self._query

    async def _load(self) -> StoreDocument:
        return await asyncio.to_thread(_read_document, self._path)

    async def _save(self, document: StoreDocument, now: dt.datetime) -> None:
        document.updated_at = now
        await asyncio.to_thread(_write_document, self._path, document)

    async def find_repos(
        self,
        repo_filter: RepositoryFilter | None = None,
        options: FindOptions = DEFAULT_FIND_OPTIONS,
    ) -> list[Repository]:
        """Return every stored repository in stored order.

        ``repo_filter`` and ``options`` are accepted for interface stability;
        the whole set is always returned.
        """
        async with self._lock:
            document = await self._load()
        return document.repositories

    async def find_repo(self, repo_id: int) -> Repository:
        """Return the repository with ``repo_id``.

        Raises
        ------
        RepositoryNotFoundError
            If no record has that id.

        """
        async with self._lock:
            document = await self._load()
        for repo in document.repositories:
            if repo.id == repo_id:
                return repo
        raise RepositoryNotFoundError(repo_id)

    async def create_repo(self, repo: Repository) -> int:
        """Append ``repo`` with a fresh id and return that id.

        The id is one past the largest stored id, or 1 for an empty store.
        ``repo`` itself is updated with the id and bookkeeping timestamps.

        Raises
        ------
        DuplicateRepositoryError
            If a record with the same nwo already exists.

        """
        async with self._lock:
            document = await self._load()
            if any(existing.nwo == repo.nwo for existing in document.repositories):
                raise DuplicateRepositoryError(repo.nwo)

            now = utcnow()
            repo.id = _next_id(document.repositories)
            repo.created_at = now
            repo.updated_at = now
            document.repositories.append(repo)
            await self._save(document, now)

        log_debug(logger, "stored repository id=%d nwo=%s", repo.id, repo.nwo)
        return repo.id

    async def update_repo(
        self, by: RepositoryBy, update: RepositoryUpdate
    ) -> Repository:
        """Apply ``update`` to the first record selected by ``by``.

        Returns
        -------
        Repository
            The record as persisted.

        Raises
        ------
        RepositoryNotFoundError
            If nothing matches ``by``.
        DuplicateRepositoryError
            If ``update.nwo`` belongs to a different record.

        """
        async with self._lock:
            document = await self._load()
            index = _first_match(document.repositories, by)
            if index is None:
                raise RepositoryNotFoundError(by)
            if update.nwo is not None and any(
                other.nwo == update.nwo
                for position, other in enumerate(document.repositories)
                if position != index
            ):
                raise DuplicateRepositoryError(update.nwo)

            now = utcnow()
            repo = document.repositories[index]
            update.apply(repo, now=now)
            await self._save(document, now)
        return repo

    async def delete_repo(self, by: RepositoryBy) -> Repository:
        """Remove the first record selected by ``by`` and return it.

        Raises
        ------
        RepositoryNotFoundError
            If nothing matches ``by``; the document is left untouched.

        """
        async with self._lock:
            document = await self._load()
            index = _first_match(document.repositories, by)
            if index is None:
                raise RepositoryNotFoundError(by)

            removed = document.repositories.pop(index)
            await self._save(document, utcnow())

        log_debug(logger, "removed repository id=%d nwo=%s", removed.id, removed.nwo)
        return removed
