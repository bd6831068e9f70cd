"""Inspect or stop distributed jobs from the command line.

    python -m distributed_jobs status <token> [--json]
    python -m distributed_jobs parts <token>
    python -m distributed_jobs stop <token> [--ttl SECONDS]

Connection settings come from DISTRIBUTED_JOBS_* environment variables (or
.env) and can be overridden with --redis-url / --namespace.
"""

import argparse
import asyncio
import dataclasses
import json
import sys

from loguru import logger
from redis.exceptions import RedisError

from distributed_jobs.client import Client
from distributed_jobs.config import Settings
from distributed_jobs.logging_config import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="distributed-jobs", description=__doc__.splitlines()[0])
    parser.add_argument("--redis-url", help="Redis URL (default: DISTRIBUTED_JOBS_REDIS_URL)")
    parser.add_argument("--namespace", help="Key namespace (default: DISTRIBUTED_JOBS_NAMESPACE)")
    parser.add_argument("--log-level", help="Log level (default: DISTRIBUTED_JOBS_LOG_LEVEL)")

    commands = parser.add_subparsers(dest="command", required=True)

    status = commands.add_parser("status", help="Show counters and flags of a job")
    status.add_argument("token")
    status.add_argument("--json", action="store_true", help="Print the status as JSON")

    parts = commands.add_parser("parts", help="List the parts which are not finished yet")
    parts.add_argument("token")

    stop = commands.add_parser("stop", help="Flag a job as stopped")
    stop.add_argument("token")
    stop.add_argument("--ttl", type=int, help="Expiry in seconds (default: DISTRIBUTED_JOBS_DEFAULT_TTL)")

    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    overrides = {
        "redis_url": args.redis_url,
        "namespace": args.namespace,
        "log_level": args.log_level,
    }
    return Settings(**{name: value for name, value in overrides.items() if value is not None})


async def run(args: argparse.Namespace, settings: Settings) -> None:
    client = await Client.from_settings(settings)
    try:
        if args.command == "status":
            status = await client.build(args.token).status()
            if args.json:
                print(json.dumps({**dataclasses.asdict(status), "finished": status.finished}))
            else:
                print(f"token:    {status.token}")
                print(f"total:    {status.total}")
                print(f"open:     {status.count}")
                print(f"closed:   {status.closed}")
                print(f"stopped:  {status.stopped}")
                print(f"finished: {status.finished}")

        elif args.command == "parts":
            async for part in client.build(args.token).open_parts():
                print(part)

        elif args.command == "stop":
            await client.build(args.token, ttl=args.ttl).stop()
            print(f"Stopped {args.token}")
    finally:
        await client.aclose()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings(args)
    configure_logging(settings.log_level)

    try:
        asyncio.run(run(args, settings))
    except RedisError as e:
        logger.error(f"Redis error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
