"""Redis access layer for distributed job state.

All mutations of a job go through this module. The compound operations that
must not interleave with other callers (add-if-absent + count, remove + read
remaining) run as Lua scripts on the server. Flag writes are batched with the
TTL refresh of both keys in a MULTI/EXEC transaction.

Every mutating call refreshes the expiry of both keys, so an active job never
expires and an abandoned one disappears after `ttl` seconds of inactivity.
"""

from collections.abc import AsyncIterator

from redis.asyncio import Redis

from distributed_jobs.contracts import STATE_CLOSED, STATE_STOPPED, STATE_TOTAL

PUSH_CLOSED = -1

# KEYS: parts, state. ARGV: part, ttl.
# Returns 1 when the part was added, 0 when already present, -1 when closed.
PUSH_SCRIPT = """
local parts, state = KEYS[1], KEYS[2]
local part, ttl = ARGV[1], tonumber(ARGV[2])

if redis.call('hget', state, 'closed') == '1' then return -1 end

local added = redis.call('sadd', parts, part)

if added == 1 then
  redis.call('hincrby', state, 'total', 1)
end

redis.call('expire', parts, ttl)
redis.call('expire', state, ttl)

return added
"""

# KEYS: parts, state. ARGV: part, ttl.
# Returns {-1, 0} when the part was not present, otherwise
# {remaining parts, closed flag}. Nothing is touched for unknown parts.
DONE_SCRIPT = """
local parts, state = KEYS[1], KEYS[2]
local part, ttl = ARGV[1], tonumber(ARGV[2])

if redis.call('srem', parts, part) == 0 then return {-1, 0} end

redis.call('expire', parts, ttl)
redis.call('expire', state, ttl)

local closed = 0
if redis.call('hget', state, 'closed') == '1' then closed = 1 end

return {redis.call('scard', parts), closed}
"""


def _decode(value: bytes | str | None) -> str | None:
    if isinstance(value, bytes):
        return value.decode()
    return value


class JobStore:
    """Atomic operations on the `parts` set and `state` hash of a job.

    One instance per Redis client; it holds the registered scripts and no
    per-job state, so it is safe to share between any number of jobs.
    """

    def __init__(self, redis: Redis):
        self.redis = redis
        self._push_script = redis.register_script(PUSH_SCRIPT)
        self._done_script = redis.register_script(DONE_SCRIPT)

    async def add_part(self, parts_key: str, state_key: str, part: str, ttl: int) -> int:
        """Add a part, counting it in `total` only when new.

        Returns 1 (added), 0 (already present) or PUSH_CLOSED.
        """
        return int(await self._push_script(keys=[parts_key, state_key], args=[part, ttl]))

    async def remove_part(self, parts_key: str, state_key: str, part: str, ttl: int) -> tuple[bool, int, bool]:
        """Remove a part.

        Returns (removed, remaining, closed). `remaining` and `closed` are
        read in the same atomic step as the removal and are only meaningful
        when `removed` is True.
        """
        remaining, closed = await self._done_script(keys=[parts_key, state_key], args=[part, ttl])
        remaining = int(remaining)
        if remaining < 0:
            return False, 0, False
        return True, remaining, bool(int(closed))

    async def set_flag(self, parts_key: str, state_key: str, field: str, ttl: int) -> None:
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.hset(state_key, field, 1)
            pipe.expire(state_key, ttl)
            pipe.expire(parts_key, ttl)
            await pipe.execute()

    async def get_flag(self, state_key: str, field: str) -> bool:
        return _decode(await self.redis.hget(state_key, field)) == "1"

    async def get_total(self, state_key: str) -> int:
        raw = await self.redis.hget(state_key, STATE_TOTAL)
        return int(raw) if raw is not None else 0

    async def count_parts(self, parts_key: str) -> int:
        return int(await self.redis.scard(parts_key))

    async def has_part(self, parts_key: str, part: str) -> bool:
        return bool(await self.redis.sismember(parts_key, part))

    async def iter_parts(self, parts_key: str) -> AsyncIterator[str]:
        """SSCAN over the open parts. Not a snapshot under concurrent writers."""
        async for member in self.redis.sscan_iter(parts_key):
            yield _decode(member)

    async def read_state(self, parts_key: str, state_key: str) -> tuple[int, int, bool, bool]:
        """Read (total, count, closed, stopped) in one round-trip, without isolation."""
        async with self.redis.pipeline(transaction=False) as pipe:
            pipe.hmget(state_key, [STATE_TOTAL, STATE_CLOSED, STATE_STOPPED])
            pipe.scard(parts_key)
            (total, closed, stopped), count = await pipe.execute()

        return (
            int(total) if total is not None else 0,
            int(count),
            _decode(closed) == "1",
            _decode(stopped) == "1",
        )
