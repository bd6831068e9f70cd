class DistributedJobError(Exception):
    """Base exception for all distributed job errors."""


class AlreadyClosed(DistributedJobError):
    """Raised when parts are pushed into a job that no longer accepts them."""

    def __init__(self, token: str, *, message: str | None = None):
        super().__init__(message or "The distributed job is already closed")
        self.token = token
