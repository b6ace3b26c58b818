"""femtologging helpers shared by every repomirror module.

Modules obtain a logger with :func:`get_logger` and write through the
``log_*`` helpers, which interpolate percent-style arguments once before the
record is handed to femtologging's worker thread. Sync lifecycle telemetry
uses :func:`log_event`, which renders ``[event.type] key=value`` lines.

Example:
>>> from repomirror.logging import get_logger, log_event, log_info
>>> logger = get_logger(__name__)
>>> log_info(logger, "cloned %d repositories", 3)
>>> log_event(logger, "INFO", "sync.phase.completed", phase="clone", processed=3)

"""

from __future__ import annotations

import typing as typ

from femtologging import basicConfig, get_logger

DEFAULT_LOG_LEVEL = "INFO"

# femtologging accepts both spellings of warning.
LOG_LEVELS = frozenset(
    {"TRACE", "DEBUG", "INFO", "WARN", "WARNING", "ERROR", "CRITICAL"}
)


def normalize_log_level(level: str | None) -> tuple[str, bool]:
    """Upper-case ``level`` and report whether it had to be replaced.

    Parameters
    ----------
    level : str | None
        Raw level name, typically ``SyncConfig.log_level``.

    Returns
    -------
    tuple[str, bool]
        The level to apply and True when the input was empty or unknown, in
        which case :data:`DEFAULT_LOG_LEVEL` is returned.

    """
    normalized = (level or "").strip().upper()
    if normalized in LOG_LEVELS:
        return (normalized, False)
    return (DEFAULT_LOG_LEVEL, True)


def configure_logging(level: str | None, *, force: bool = False) -> tuple[str, bool]:
    """Install femtologging's default handler at the normalized ``level``.

    Returns the same pair as :func:`normalize_log_level` so callers can warn
    about a rejected level once logging is live.
    """
    normalized, invalid = normalize_log_level(level)
    basicConfig(level=normalized, force=force)
    return (normalized, invalid)


class _SupportsLog(typ.Protocol):
    """Protocol for femtologging-compatible loggers."""

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str | None: ...


def _emit(
    logger: _SupportsLog,
    level: str,
    template: str,
    args: tuple[object, ...],
    exc_info: object | None,
) -> None:
    # Literal templates pass through untouched so a stray "%" is harmless.
    message = template % args if args else template
    logger.log(level, message, exc_info=exc_info, stack_info=False)


def log_debug(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log at DEBUG with percent-style formatting."""
    _emit(logger, "DEBUG", template, args, exc_info)


def log_info(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log at INFO with percent-style formatting.

    Parameters
    ----------
    logger : _SupportsLog
        Destination logger.
    template : str
        Message template with ``%`` placeholders.
    *args : object
        Values interpolated into ``template``.
    exc_info : object | None, optional
        Exception attached to the record.

    """
    _emit(logger, "INFO", template, args, exc_info)


def log_warning(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log at WARNING with percent-style formatting."""
    _emit(logger, "WARNING", template, args, exc_info)


def log_error(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log at ERROR with percent-style formatting."""
    _emit(logger, "ERROR", template, args, exc_info)


def log_exception(logger: _SupportsLog, message: str, exc: BaseException) -> None:
    """Log ``message`` at ERROR with ``exc`` attached as exc_info."""
    logger.log("ERROR", message, exc_info=exc, stack_info=False)


def format_event(event: str, **fields: object) -> str:
    """Render a structured event line.

    Fields keep their keyword order. Floats are shown with three decimals
    and strings containing whitespace are quoted.

    Examples
    --------
    >>> format_event("sync.repo.skipped", nwo="fatih/vim-go", branch="main")
    '[sync.repo.skipped] nwo=fatih/vim-go branch=main'

    """
    parts = [f"[{event}]"]
    for key, value in fields.items():
        if isinstance(value, float):
            rendered = f"{value:.3f}"
        elif isinstance(value, str) and (not value or any(c.isspace() for c in value)):
            rendered = repr(value)
        else:
            rendered = str(value)
        parts.append(f"{key}={rendered}")
    return " ".join(parts)


def log_event(
    logger: _SupportsLog,
    level: str,
    event: str,
    **fields: object,
) -> None:
    """Log a structured event produced by :func:`format_event`."""
    logger.log(level, format_event(event, **fields), exc_info=None, stack_info=False)


__all__ = [
    "DEFAULT_LOG_LEVEL",
    "LOG_LEVELS",
    "configure_logging",
    "format_event",
    "get_logger",
    "log_debug",
    "log_error",
    "log_event",
    "log_exception",
    "log_info",
    "log_warning",
    "normalize_log_level",
]
