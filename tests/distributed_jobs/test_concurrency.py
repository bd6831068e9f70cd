"""Concurrent producers and workers sharing one job through Redis only."""

import asyncio
import random

import pytest

from distributed_jobs import Client


@pytest.mark.asyncio
async def test_concurrent_duplicate_pushes_count_once(job):
    await asyncio.gather(*(job.push(str(i % 10)) for i in range(200)))

    assert await job.count() == 10
    assert await job.total() == 10


@pytest.mark.asyncio
async def test_concurrent_dones_report_finished_exactly_once(client):
    job = client.build("concurrent", ttl=100)
    await job.push_all(range(50))

    # Every part is reported three times by independent handles
    handles = [client.build("concurrent", ttl=100) for _ in range(3)]
    calls = [handle.done(part) for handle in handles for part in range(50)]
    random.shuffle(calls)

    results = await asyncio.gather(*calls)

    assert results.count(True) == 1
    assert await job.count() == 0
    assert await job.total() == 50
    assert await job.is_finished()


@pytest.mark.asyncio
async def test_workers_racing_the_producer(redis_client):
    client = Client(redis=redis_client, namespace="race")
    job = client.build("token", ttl=100)
    finished = []
    tasks = []

    async def worker(part: str):
        await asyncio.sleep(random.random() / 100)
        if await client.build("token").done(part):
            finished.append(part)

    def dispatch(item, part):
        tasks.append(asyncio.create_task(worker(part)))

    await job.push_each(range(30), dispatch)
    await asyncio.gather(*tasks)

    assert len(finished) == 1
    assert await job.is_finished()
    assert await job.total() == 30
