from collections.abc import Generator
import pathlib
from unittest.mock import MagicMock

import inject
import pytest
from sqlalchemy import create_engine, inspect

from app import create_db
from app import main
from app.config import reset_config, set_config
from tests.test_config import get_test_config


@pytest.fixture(autouse=True)
def clean_container() -> Generator[None, None, None]:
    inject.clear()
    yield
    inject.clear()
    reset_config()


def test_app_main_should_run_app_factory_with_configured_port(monkeypatch) -> None:
    set_config(get_test_config())
    mock_run = MagicMock()
    monkeypatch.setattr(main.application.uvicorn, "run", mock_run)

    main.main()

    mock_run.assert_called_once()
    args, kwargs = mock_run.call_args
    assert args == ("app.application:create_fastapi_app",)
    assert kwargs["factory"] is True
    assert kwargs["port"] == 8510
    assert "ssl_keyfile" not in kwargs


def test_create_db_should_create_tables_in_configured_database(tmp_path: pathlib.Path) -> None:
    dsn = f"sqlite:///{tmp_path / 'fhir.db'}"
    config = get_test_config()
    config.database.dsn = dsn
    config.database.create_tables = False
    set_config(config)

    create_db.main()

    assert inspect(create_engine(dsn)).has_table("resource_versions")
