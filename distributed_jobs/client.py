import redis.asyncio as redis
from redis.asyncio import Redis

from distributed_jobs.config import Settings
from distributed_jobs.contracts import DEFAULT_TTL_SECONDS
from distributed_jobs.job import Job
from distributed_jobs.store import JobStore


class Client:
    """Shared settings for a group of distributed jobs.

    Holds the Redis connection, an optional namespace used to prefix all keys
    and the default ttl (seconds) of the jobs it builds. The ttl is refreshed
    on every modification of a job, so only inactive jobs expire.

        client = Client(redis=Redis.from_url("redis://localhost:6379/0"))
        job = client.build(secrets.token_hex(16))
    """

    def __init__(self, redis: Redis, namespace: str | None = None, default_ttl: int = DEFAULT_TTL_SECONDS):
        self.redis = redis
        self.namespace = namespace
        self.default_ttl = default_ttl
        self.store = JobStore(redis)

    @classmethod
    async def from_settings(cls, settings: Settings) -> "Client":
        connection = await redis.from_url(settings.redis_url, decode_responses=False)
        return cls(redis=connection, namespace=settings.namespace, default_ttl=settings.default_ttl)

    def build(self, token: str, ttl: int | None = None) -> Job:
        """Build a handle for the job identified by `token`. No Redis access."""
        return Job(client=self, token=token, ttl=self.default_ttl if ttl is None else ttl)

    async def aclose(self) -> None:
        await self.redis.aclose()
