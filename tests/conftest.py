import secrets

import pytest
import pytest_asyncio
import redis.asyncio as redis
from testcontainers.redis import RedisContainer

from distributed_jobs import Client


@pytest.fixture(scope="session")
def redis_container():
    with RedisContainer("redis:7-alpine") as container:
        yield container


@pytest.fixture(scope="session")
def redis_url(redis_container) -> str:
    return f"redis://{redis_container.get_container_host_ip()}:{redis_container.get_exposed_port(6379)}/0"


@pytest_asyncio.fixture
async def redis_client(redis_url):
    client = await redis.from_url(redis_url, decode_responses=False)
    await client.flushdb()
    yield client
    await client.aclose()


@pytest.fixture
def client(redis_client) -> Client:
    return Client(redis=redis_client)


@pytest.fixture
def job(client):
    return client.build(secrets.token_hex(16), ttl=100)
