"""Run independent fallible units of work under a fixed worker ceiling.

Usage
-----
Bound a batch of coroutines to three simultaneous workers:

>>> group = SemGroup(3)
>>> for repo in repos:
...     group.go(functools.partial(clone, repo))
>>> await group.wait()  # raises MultiError when any unit failed

"""

from __future__ import annotations

import asyncio
import typing as typ

from .errors import GroupCancelledError, MultiError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    type Unit = cabc.Callable[[], cabc.Awaitable[object]]


class SemGroup:
    """Bounded task group that collects every failure instead of failing fast.

    Each submitted unit runs as its own :class:`asyncio.Task`; a semaphore
    keeps at most ``limit`` of them inside their unit at once. When ``cancel``
    is set, units that are still waiting for a slot give up and record a
    :class:`GroupCancelledError`; units already running finish normally.

    Parameters
    ----------
    limit
        Maximum number of units running simultaneously. Must be positive.
    cancel
        Optional event shared across phases; setting it stops new units from
        acquiring a slot.

    """

    def __init__(self, limit: int, *, cancel: asyncio.Event | None = None) -> None:
        """Create the semaphore and error collector."""
        if limit < 1:
            msg = f"SemGroup limit must be positive, got {limit}"
            raise ValueError(msg)
        self._limit = limit
        self._sem = asyncio.Semaphore(limit)
        self._cancel = cancel
        self._tasks: list[asyncio.Task[None]] = []
        self._errors: list[BaseException] = []

    @property
    def limit(self) -> int:
        """Return the worker ceiling."""
        return self._limit

    def go(self, unit: Unit) -> None:
        """Schedule ``unit``; must be called from a running event loop."""
        task = asyncio.get_running_loop().create_task(self._run(unit))
        self._tasks.append(task)

    async def wait(self) -> None:
        """Wait for every submitted unit, including ones added while draining.

        Raises
        ------
        MultiError
            If one or more units failed or were cancelled before starting.

        """
        while self._tasks:
            batch, self._tasks = self._tasks, []
            await asyncio.gather(*batch)

        if self._errors:
            errors, self._errors = self._errors, []
            raise MultiError(errors)

    async def _run(self, unit: Unit) -> None:
        try:
            await self._acquire()
        except GroupCancelledError as exc:
            self._errors.append(exc)
            return

        try:
            await unit()
        except Exception as exc:  # noqa: BLE001 - collected into MultiError
            self._errors.append(exc)
        finally:
            self._sem.release()

    async def _acquire(self) -> None:
        """Take a slot, giving up if the cancel event fires first."""
        if self._cancel is None:
            await self._sem.acquire()
            return

        if self._cancel.is_set():
            raise GroupCancelledError

        acquire = asyncio.ensure_future(self._sem.acquire())
        cancelled = asyncio.ensure_future(self._cancel.wait())
        try:
            await asyncio.wait(
                {acquire, cancelled}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            self._abandon(acquire)
            raise
        finally:
            cancelled.cancel()

        if not self._cancel.is_set():
            await acquire
            return

        # The slot may have been granted in the same tick the event fired.
        self._abandon(acquire)
        raise GroupCancelledError

    def _abandon(self, acquire: asyncio.Future[object]) -> None:
        """Stop a pending slot request, handing back a slot it already won."""
        if acquire.done() and not acquire.cancelled():
            self._sem.release()
        else:
            acquire.cancel()
