import copy
from typing import Any, Dict
from unittest.mock import AsyncMock

from collections.abc import Generator
from fastapi import FastAPI
from fastapi.testclient import TestClient
import inject
import pytest

from app.application import create_fastapi_app
from app.config import reset_config, set_config
from app.container import get_database
from app.db.db import Database
from app.services.handlers.resource_handler import ResourceHandler
from app.services.interfaces.authorization import Authorization
from app.services.interfaces.history import History
from app.services.interfaces.persistence import Persistence
from app.services.interfaces.search import Search
from app.services.store.data_service import DatabaseDataService
from app.services.store.history_service import DatabaseHistoryService
from app.services.store.search_service import DatabaseSearchService
from tests.mock_data import SERVER_URL, patient
from tests.test_config import get_test_config


@pytest.fixture
def database() -> Generator[Database, Any, None]:
    try:
        db = Database("sqlite:///:memory:")
        db.generate_tables()
        yield db
    except Exception as e:
        raise e


@pytest.fixture
def fastapi_app() -> Generator[FastAPI, None, None]:
    set_config(get_test_config())
    app = create_fastapi_app()
    db = get_database()
    db.generate_tables()
    yield app
    inject.clear()
    reset_config()


@pytest.fixture
def api_client(fastapi_app: FastAPI) -> TestClient:
    return TestClient(fastapi_app)


@pytest.fixture()
def mock_patient() -> Dict[str, Any]:
    return copy.deepcopy(patient)


@pytest.fixture()
def data_service_mock() -> AsyncMock:
    return AsyncMock(spec=Persistence)


@pytest.fixture()
def search_service_mock() -> AsyncMock:
    return AsyncMock(spec=Search)


@pytest.fixture()
def history_service_mock() -> AsyncMock:
    return AsyncMock(spec=History)


@pytest.fixture()
def auth_service_mock() -> AsyncMock:
    mock = AsyncMock(spec=Authorization)
    mock.get_search_filter_based_on_identity.return_value = []
    return mock


@pytest.fixture()
def resource_handler(
    data_service_mock: AsyncMock,
    search_service_mock: AsyncMock,
    history_service_mock: AsyncMock,
    auth_service_mock: AsyncMock,
) -> ResourceHandler:
    return ResourceHandler(
        data_service=data_service_mock,
        search_service=search_service_mock,
        history_service=history_service_mock,
        auth_service=auth_service_mock,
        fhir_version="4.0.1",
        server_url=SERVER_URL,
    )


@pytest.fixture()
def data_service(database: Database) -> DatabaseDataService:
    return DatabaseDataService(database)


@pytest.fixture()
def search_service(database: Database) -> DatabaseSearchService:
    return DatabaseSearchService(database, default_count=20, max_count=100)


@pytest.fixture()
def history_service(database: Database) -> DatabaseHistoryService:
    return DatabaseHistoryService(database, default_count=20, max_count=100)
