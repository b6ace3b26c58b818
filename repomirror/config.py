"""Configuration for a mirrored repository set.

Usage
-----
Load from environment variables:

>>> import os
>>> os.environ["REPOMIRROR_QUERY"] = "org:fatih language:go"
>>> os.environ["REPOMIRROR_REPOS_DIR"] = "/srv/mirror"
>>> SyncConfig.from_env().lookup_concurrency
5

Or from a JSON file:

>>> load_config(Path("~/.config/repomirror/config.json").expanduser())

"""

from __future__ import annotations

import dataclasses as dc
import os
from pathlib import Path

import msgspec

from repomirror.sync.errors import SyncConfigError
from repomirror.sync.orchestrator import DEFAULT_SYNC_CONCURRENCY
from repomirror.sync.reconciler import DEFAULT_LOOKUP_CONCURRENCY


class _ConfigFile(msgspec.Struct, kw_only=True, forbid_unknown_fields=True):
    """On-disk shape of the JSON configuration file."""

    query: str = ""
    repos_dir: str = ""
    lookup_concurrency: int = DEFAULT_LOOKUP_CONCURRENCY
    sync_concurrency: int = DEFAULT_SYNC_CONCURRENCY
    log_level: str = "INFO"


@dc.dataclass(frozen=True, slots=True)
class SyncConfig:
    """Settings for one mirrored repository set.

    Attributes
    ----------
    query
        Search query selecting the remote repositories to mirror.
    repos_dir
        Absolute directory holding the clones and the metadata store.
    lookup_concurrency
        Maximum simultaneous branch-head lookups during reconciliation.
    sync_concurrency
        Maximum simultaneous clone, update or delete operations.
    log_level
        femtologging level name.

    """

    query: str
    repos_dir: Path
    lookup_concurrency: int = DEFAULT_LOOKUP_CONCURRENCY
    sync_concurrency: int = DEFAULT_SYNC_CONCURRENCY
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        """Validate required fields and limits."""
        if not self.query.strip():
            raise SyncConfigError.missing("query")
        if not self.repos_dir.is_absolute():
            raise SyncConfigError.invalid(
                "repos_dir", f"must be an absolute path, got {str(self.repos_dir)!r}"
            )
        for field in ("lookup_concurrency", "sync_concurrency"):
            value = getattr(self, field)
            if value < 1:
                raise SyncConfigError.invalid(field, f"must be positive, got {value}")

    @staticmethod
    def _parse_positive_int(env_var: str, default: int) -> int:
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            return default
        try:
            value = int(raw)
        except ValueError as exc:
            raise SyncConfigError.invalid(
                env_var, f"must be an integer, got: {raw!r}"
            ) from exc
        if value < 1:
            raise SyncConfigError.invalid(env_var, f"must be positive, got: {value}")
        return value

    @classmethod
    def from_env(cls) -> SyncConfig:
        """Create configuration from environment variables.

        Reads ``REPOMIRROR_QUERY`` and ``REPOMIRROR_REPOS_DIR`` (required),
        ``REPOMIRROR_LOOKUP_CONCURRENCY``, ``REPOMIRROR_SYNC_CONCURRENCY`` and
        ``REPOMIRROR_LOG_LEVEL``.

        Raises
        ------
        SyncConfigError
            If a required variable is missing or a value is invalid.

        """
        query = os.environ.get("REPOMIRROR_QUERY", "").strip()
        if not query:
            raise SyncConfigError.missing("REPOMIRROR_QUERY")
        repos_dir = os.environ.get("REPOMIRROR_REPOS_DIR", "").strip()
        if not repos_dir:
            raise SyncConfigError.missing("REPOMIRROR_REPOS_DIR")

        return cls(
            query=query,
            repos_dir=Path(repos_dir),
            lookup_concurrency=cls._parse_positive_int(
                "REPOMIRROR_LOOKUP_CONCURRENCY", DEFAULT_LOOKUP_CONCURRENCY
            ),
            sync_concurrency=cls._parse_positive_int(
                "REPOMIRROR_SYNC_CONCURRENCY", DEFAULT_SYNC_CONCURRENCY
            ),
            log_level=os.environ.get("REPOMIRROR_LOG_LEVEL", "INFO"),
        )


def load_config(path: Path | str) -> SyncConfig:
    """Load a :class:`SyncConfig` from a JSON file.

    Raises
    ------
    SyncConfigError
        If the file is missing, malformed or holds invalid values.

    """
    path_obj = Path(path)
    try:
        raw = path_obj.read_bytes()
    except FileNotFoundError as exc:
        msg = f"config file {path_obj} doesn't exist"
        raise SyncConfigError(msg) from exc
    except OSError as exc:
        msg = f"cannot read config file {path_obj}: {exc}"
        raise SyncConfigError(msg) from exc

    try:
        data = msgspec.json.decode(raw, type=_ConfigFile)
    except msgspec.DecodeError as exc:
        msg = f"invalid config file {path_obj}: {exc}"
        raise SyncConfigError(msg) from exc

    return SyncConfig(
        query=data.query,
        repos_dir=Path(data.repos_dir).expanduser(),
        lookup_concurrency=data.lookup_concurrency,
        sync_concurrency=data.sync_concurrency,
        log_level=data.log_level,
    )
