import pytest

from insight.counter_store import CounterStore
from insight.kv import KVStore
from insight.mirror import MetricsMirror


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "insight.db")


@pytest.fixture
def kv(db_path):
    store = KVStore.open(db_path)
    yield store
    store.close()


@pytest.fixture
def mirror():
    return MetricsMirror()


@pytest.fixture
def store(kv, mirror):
    return CounterStore(kv, mirror)


def seed(kv, app, ctype, raw):
    """Write a raw stored value, bypassing the counter codec."""
    with kv.update() as tx:
        tx.create_bucket_if_not_exists(app).put(ctype, raw)
