"""Contracts for Redis keys and state fields of distributed jobs.

The key layout is shared with existing deployments and must not change:

    {namespace:}distributed_jobs:{token}:parts   set of open part ids
    {namespace:}distributed_jobs:{token}:state   hash {total, closed, stopped}
"""

from typing import Final

DEFAULT_TTL_SECONDS: Final[int] = 24 * 60 * 60  # one day

JOB_KEY: Final[str] = "distributed_jobs:{token}"
PARTS_KEY: Final[str] = "{job_key}:parts"
STATE_KEY: Final[str] = "{job_key}:state"

STATE_TOTAL: Final[str] = "total"
STATE_CLOSED: Final[str] = "closed"
STATE_STOPPED: Final[str] = "stopped"


def job_key(token: str, namespace: str | None = None) -> str:
    """Base key of a job; the namespace prefix is omitted only when it is None."""
    key = JOB_KEY.format(token=token)
    return key if namespace is None else f"{namespace}:{key}"


def parts_key(base_key: str) -> str:
    return PARTS_KEY.format(job_key=base_key)


def state_key(base_key: str) -> str:
    return STATE_KEY.format(job_key=base_key)
