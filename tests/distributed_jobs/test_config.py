import pytest
from pydantic import ValidationError

from distributed_jobs import Settings


def test_defaults(monkeypatch):
    for name in ("REDIS_URL", "NAMESPACE", "DEFAULT_TTL", "LOG_LEVEL"):
        monkeypatch.delenv(f"DISTRIBUTED_JOBS_{name}", raising=False)

    settings = Settings(_env_file=None)

    assert settings.redis_url == "redis://localhost:6379/0"
    assert settings.namespace is None
    assert settings.default_ttl == 86_400
    assert settings.log_level == "INFO"


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("DISTRIBUTED_JOBS_REDIS_URL", "redis://cache:6379/2")
    monkeypatch.setenv("DISTRIBUTED_JOBS_NAMESPACE", "exports")
    monkeypatch.setenv("DISTRIBUTED_JOBS_DEFAULT_TTL", "3600")

    settings = Settings(_env_file=None)

    assert settings.redis_url == "redis://cache:6379/2"
    assert settings.namespace == "exports"
    assert settings.default_ttl == 3600


@pytest.mark.parametrize("ttl", [0, -1])
def test_rejects_non_positive_ttl(ttl):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, default_ttl=ttl)
