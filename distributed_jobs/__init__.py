"""Keep track of jobs split into parts that run in parallel on many workers, using Redis."""

from distributed_jobs.client import Client
from distributed_jobs.config import Settings
from distributed_jobs.contracts import DEFAULT_TTL_SECONDS
from distributed_jobs.exceptions import AlreadyClosed, DistributedJobError
from distributed_jobs.job import Job, JobStatus

__all__ = [
    "DEFAULT_TTL_SECONDS",
    "AlreadyClosed",
    "Client",
    "DistributedJobError",
    "Job",
    "JobStatus",
    "Settings",
]
