"""State machine for one distributed job.

A job is split into parts which are processed independently, e.g. by
background workers. The producer pushes the parts and hands each of them to
some executor; the executor reports completion per part. Any process that
knows the token can ask how many parts are outstanding, whether the job is
finished or whether it was stopped.

Producer:

    job = client.build(secrets.token_hex(16))

    async def enqueue(day, part):
        await queue.push(ExportJob(day=day, token=job.token, part=part))

    await job.push_each(days, enqueue)

Worker:

    job = client.build(message.token)
    if await job.is_stopped():
        return
    try:
        ...
    except Exception:
        await job.stop()
        raise
    if await job.done(message.part):
        ...  # last part of the whole job
"""

import inspect
from collections.abc import AsyncIterable, AsyncIterator, Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from loguru import logger

from distributed_jobs.contracts import STATE_CLOSED, STATE_STOPPED, job_key, parts_key, state_key
from distributed_jobs.exceptions import AlreadyClosed
from distributed_jobs.store import PUSH_CLOSED

if TYPE_CHECKING:
    from distributed_jobs.client import Client
    from distributed_jobs.store import JobStore

T = TypeVar("T")


@dataclass(frozen=True)
class JobStatus:
    """Best-effort view of a job, not a consistent snapshot."""

    token: str
    total: int
    count: int
    closed: bool
    stopped: bool

    @property
    def finished(self) -> bool:
        return self.closed and self.count == 0


def _part(part: Any) -> str:
    """Canonical string form of a part id; bytes read back from Redis are decoded."""
    if isinstance(part, bytes):
        return part.decode()
    return str(part)


async def _aiter(items: Iterable[T] | AsyncIterable[T]) -> AsyncIterator[T]:
    if isinstance(items, AsyncIterable):
        async for item in items:
            yield item
    else:
        for item in items:
            yield item


class Job:
    """Handle for the distributed job identified by `token`.

    Holds no state besides its identity; all state lives in Redis. Building
    several handles for the same token, in any number of processes, is fine.
    """

    def __init__(self, client: "Client", token: str, ttl: int):
        self.client = client
        self.token = token
        self.ttl = ttl
        self.key = job_key(token, client.namespace)
        self._parts_key = parts_key(self.key)
        self._state_key = state_key(self.key)

    def __repr__(self) -> str:
        return f"Job(token={self.token!r}, ttl={self.ttl})"

    @property
    def _store(self) -> "JobStore":
        return self.client.store

    async def push(self, part: Any) -> bool:
        """Add a part. Returns True when it was new, False for a duplicate.

        Raises AlreadyClosed when the job no longer accepts parts.
        """
        result = await self._store.add_part(self._parts_key, self._state_key, _part(part), self.ttl)
        if result == PUSH_CLOSED:
            raise AlreadyClosed(self.token)

        logger.debug(f"Job {self.token}: pushed part {part} (new={bool(result)})")
        return bool(result)

    async def iter_each(self, items: Iterable[T] | AsyncIterable[T]) -> AsyncIterator[tuple[T, str]]:
        """Push one part per item and yield (item, part) pairs.

        Part ids are the item positions as strings. Each part is pushed
        before its item is handed out, and the job is closed before the last
        item is handed out. Otherwise the last part could be processed, and
        its `done` could see zero open parts, while the job is still open,
        and nobody would ever learn that the job finished.
        """
        if await self.is_closed():
            raise AlreadyClosed(self.token)

        previous: tuple[T, str] | None = None

        index = 0
        async for item in _aiter(items):
            part = str(index)
            await self.push(part)

            if previous is not None:
                yield previous

            previous = (item, part)
            index += 1

        await self.close()

        if previous is not None:
            yield previous

    async def push_each(
        self,
        items: Iterable[T] | AsyncIterable[T],
        on_item: Callable[[T, str], Any],
    ) -> None:
        """Push all items and call `on_item(item, part)` for each of them.

        `on_item` may be a coroutine function. See `iter_each` for the
        ordering guarantees.
        """
        async for item, part in self.iter_each(items):
            result = on_item(item, part)
            if inspect.isawaitable(result):
                await result

    async def push_all(self, parts: Iterable[Any] | AsyncIterable[Any]) -> None:
        """Push every element as a part id, then close the job.

        Duplicates are only counted once.
        """
        if await self.is_closed():
            raise AlreadyClosed(self.token)

        async for part in _aiter(parts):
            await self.push(part)

        await self.close()

    async def done(self, part: Any) -> bool:
        """Mark a part as finished.

        Returns True only for the call that removes the last open part of a
        closed job. Unknown or already finished parts are ignored.
        """
        removed, remaining, closed = await self._store.remove_part(
            self._parts_key, self._state_key, _part(part), self.ttl
        )
        if not removed:
            logger.debug(f"Job {self.token}: part {part} is not open")
            return False

        finished = remaining == 0 and closed
        if finished:
            logger.info(f"Job {self.token}: finished with part {part}")
        else:
            logger.debug(f"Job {self.token}: part {part} done, {remaining} remaining")

        return finished

    async def open_parts(self) -> AsyncIterator[str]:
        """Iterate the parts which are not finished yet.

        The iteration is not isolated from concurrent `push`/`done` calls and
        may miss or repeat parts while the job changes.
        """
        async for part in self._store.iter_parts(self._parts_key):
            yield part

    async def is_open_part(self, part: Any) -> bool:
        return await self._store.has_part(self._parts_key, _part(part))

    async def total(self) -> int:
        """Number of distinct parts ever pushed, finished or not."""
        return await self._store.get_total(self._state_key)

    async def count(self) -> int:
        """Number of parts not finished yet."""
        return await self._store.count_parts(self._parts_key)

    async def is_finished(self) -> bool:
        return await self.is_closed() and await self.count() == 0

    async def close(self) -> bool:
        """Stop accepting parts. Called by `push_each` and `push_all`."""
        await self._store.set_flag(self._parts_key, self._state_key, STATE_CLOSED, self.ttl)
        logger.info(f"Job {self.token}: closed")
        return True

    async def is_closed(self) -> bool:
        return await self._store.get_flag(self._state_key, STATE_CLOSED)

    async def stop(self) -> bool:
        """Flag the job as stopped.

        Only advisory: nothing is blocked, workers have to check
        `is_stopped()` themselves and skip their work.
        """
        await self._store.set_flag(self._parts_key, self._state_key, STATE_STOPPED, self.ttl)
        logger.info(f"Job {self.token}: stopped")
        return True

    async def is_stopped(self) -> bool:
        return await self._store.get_flag(self._state_key, STATE_STOPPED)

    async def status(self) -> JobStatus:
        total, count, closed, stopped = await self._store.read_state(self._parts_key, self._state_key)
        return JobStatus(token=self.token, total=total, count=count, closed=closed, stopped=stopped)
