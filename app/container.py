import inject

from app.config import get_config
from app.db.db import Database
from app.services.authorization.factory import AuthorizationFactory
from app.services.fhir.validator import Validator
from app.services.handlers.resource_handler import ResourceHandler
from app.services.interfaces.authorization import Authorization
from app.services.interfaces.history import History
from app.services.interfaces.persistence import Persistence
from app.services.interfaces.search import Search
from app.services.store.data_service import DatabaseDataService
from app.services.store.history_service import DatabaseHistoryService
from app.services.store.search_service import DatabaseSearchService
from app.stats import get_stats


def container_config(binder: inject.Binder) -> None:
    config = get_config()

    db = Database(
        dsn=config.database.dsn,
        pool_size=config.database.pool_size,
        max_overflow=config.database.max_overflow,
        pool_pre_ping=config.database.pool_pre_ping,
        pool_recycle=config.database.pool_recycle,
    )
    binder.bind(Database, db)

    data_service = DatabaseDataService(db)
    binder.bind(Persistence, data_service)

    search_service = DatabaseSearchService(
        db,
        default_count=config.fhir.default_count,
        max_count=config.fhir.max_count,
    )
    binder.bind(Search, search_service)

    history_service = DatabaseHistoryService(
        db,
        default_count=config.fhir.default_count,
        max_count=config.fhir.max_count,
    )
    binder.bind(History, history_service)

    auth_service = AuthorizationFactory(config=config).create_authorization()
    binder.bind(Authorization, auth_service)

    binder.bind(Validator, Validator(config.fhir.fhir_version))

    resource_handler = ResourceHandler(
        data_service=data_service,
        search_service=search_service,
        history_service=history_service,
        auth_service=auth_service,
        fhir_version=config.fhir.fhir_version,
        server_url=config.fhir.server_url,
        stats=get_stats(),
    )
    binder.bind(ResourceHandler, resource_handler)


def get_database() -> Database:
    return inject.instance(Database)


def get_resource_handler() -> ResourceHandler:
    return inject.instance(ResourceHandler)


def get_validator() -> Validator:
    return inject.instance(Validator)


def setup_container() -> None:
    inject.configure(container_config, once=True)
