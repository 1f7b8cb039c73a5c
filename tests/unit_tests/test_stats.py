from fastapi import FastAPI
from fastapi.testclient import TestClient
import pytest

from app import stats as stats_module
from app.config import reset_config, set_config
from app.stats import MemoryClient, NoopStats, Statsd, StatsdMiddleware, setup_stats, get_stats
from tests.test_config import get_test_config


@pytest.fixture
def memory_client() -> MemoryClient:
    return MemoryClient()


@pytest.fixture(autouse=True)
def restore_stats(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(stats_module, "_STATS", NoopStats())


def test_memory_client_gauge(memory_client: MemoryClient) -> None:
    memory_client.gauge("test.metric", 100)
    memory = memory_client.get_memory()
    assert "test.metric" in memory
    assert len(memory["test.metric"]) == 1
    assert memory["test.metric"][0]["value"] == 100


def test_memory_client_timing(memory_client: MemoryClient) -> None:
    memory_client.timing("test.timing", 500)
    memory = memory_client.get_memory()
    assert "test.timing" in memory
    assert len(memory["test.timing"]) == 1
    assert memory["test.timing"][0] == 500


def test_memory_client_incr(memory_client: MemoryClient) -> None:
    memory_client.incr("test.counter")
    memory_client.incr("test.counter", 2)
    memory = memory_client.get_memory()
    assert memory == {"test.counter": 3}


def test_memory_client_timer(memory_client: MemoryClient) -> None:
    with memory_client.timer("test.timer"):
        pass
    memory = memory_client.get_memory()
    assert len(memory["test.timer"]) == 1


def test_setup_stats_disabled_should_keep_noop() -> None:
    test_conf = get_test_config()
    test_conf.stats.enabled = False
    set_config(test_conf)

    setup_stats()

    assert isinstance(get_stats(), NoopStats)
    reset_config()


def test_statsd_middleware() -> None:
    test_conf = get_test_config()
    test_conf.stats.enabled = True
    test_conf.stats.host = None
    test_conf.stats.port = None
    test_conf.stats.module_name = "test_module"
    set_config(test_conf)

    app = FastAPI()

    @app.get("/tenant/{tenant_id}/{resource_type}")
    async def test_endpoint(tenant_id: str, resource_type: str) -> dict[str, str]:
        return {"message": "ok"}

    app.add_middleware(StatsdMiddleware, module_name="test_module")
    setup_stats()
    client = TestClient(app)

    response = client.get("/tenant/tenantA/Patient")
    assert response.status_code == 200

    stats = get_stats()
    assert isinstance(stats, Statsd)
    assert isinstance(stats.client, MemoryClient)
    memory = stats.client.get_memory()
    assert memory["test_module.http.request.get./tenant/{tenant_id}/{resource_type}"] == 1
    assert memory["test_module.http.status.200"] == 1
    assert "test_module.http.response_time" in memory
    reset_config()
