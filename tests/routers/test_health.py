from fastapi.testclient import TestClient

from app.container import get_database


def test_health_should_report_database(api_client: TestClient) -> None:
    response = api_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "components": {"database": "ok"}}


def test_health_should_fail_without_database(api_client: TestClient, monkeypatch) -> None:
    monkeypatch.setattr(get_database(), "is_healthy", lambda: False)

    response = api_client.get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "error"


def test_index(api_client: TestClient) -> None:
    response = api_client.get("/")

    assert response.status_code == 200
    assert response.json()["fhir_version"] == "4.0.1"
