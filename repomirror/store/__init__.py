"""Metadata store for mirrored repositories.

The store keeps one JSON document per repos directory recording, for every
tracked repository, the remote branch head last observed and the time of the
last successful local sync.

Usage
-----
Open the store and list what is tracked::

    from repomirror.store import open_metadata_store

    store = await open_metadata_store("/srv/mirror", "org:fatih language:go")
    for repo in await store.find_repos():
        print(repo.id, repo.nwo)

"""

from repomirror.store.errors import (
    DuplicateRepositoryError,
    QueryMismatchError,
    RepositoryNotFoundError,
    StoreDecodeError,
    StoreError,
)
from repomirror.store.jsonstore import STORE_FILENAME, MetadataStore, open_metadata_store
from repomirror.store.models import (
    DEFAULT_FIND_OPTIONS,
    FindOptions,
    Repository,
    RepositoryBy,
    RepositoryFilter,
    RepositoryUpdate,
    StoreDocument,
)

__all__ = [
    "DEFAULT_FIND_OPTIONS",
    "STORE_FILENAME",
    "DuplicateRepositoryError",
    "FindOptions",
    "MetadataStore",
    "QueryMismatchError",
    "Repository",
    "RepositoryBy",
    "RepositoryFilter",
    "RepositoryNotFoundError",
    "RepositoryUpdate",
    "StoreDecodeError",
    "StoreDocument",
    "StoreError",
    "open_metadata_store",
]
