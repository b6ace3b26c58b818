"""Errors raised by the bounded concurrency executor."""

from __future__ import annotations


class SemGroupError(Exception):
    """Base class for executor errors."""


class GroupCancelledError(SemGroupError):
    """Raised for a unit that never acquired a worker slot before cancellation."""

    def __init__(self) -> None:
        """Initialise with a fixed message."""
        super().__init__("couldn't acquire a worker slot: group cancelled")


class MultiError(SemGroupError):
    """Aggregate of every failure collected by a :class:`SemGroup`.

    The message enumerates each failure on its own line behind a leading
    count, in the order the failures were collected::

        2 error(s) occured:
        * foo
        * bar

    Attributes
    ----------
    errors
        Immutable tuple of the collected exceptions.

    """

    errors: tuple[BaseException, ...]

    def __init__(self, errors: list[BaseException]) -> None:
        """Initialise with the collected failures."""
        self.errors = tuple(errors)
        lines = [f"{len(self.errors)} error(s) occured:"]
        lines.extend(f"* {error}" for error in self.errors)
        super().__init__("\n".join(lines))
