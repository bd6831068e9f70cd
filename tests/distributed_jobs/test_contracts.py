from distributed_jobs.contracts import job_key, parts_key, state_key


def test_keys_without_namespace():
    key = job_key("abc")

    assert key == "distributed_jobs:abc"
    assert parts_key(key) == "distributed_jobs:abc:parts"
    assert state_key(key) == "distributed_jobs:abc:state"


def test_keys_with_namespace():
    key = job_key("abc", "app")

    assert parts_key(key) == "app:distributed_jobs:abc:parts"
    assert state_key(key) == "app:distributed_jobs:abc:state"


def test_empty_namespace_is_kept():
    assert job_key("abc", "") == ":distributed_jobs:abc"
    assert job_key("abc", None) == "distributed_jobs:abc"
