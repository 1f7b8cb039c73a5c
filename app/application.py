import logging

from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import uvicorn

from app.container import get_database, setup_container
from app.exceptions import FhirError
from app.routers.default import router as default_router
from app.routers.health import router as health_router
from app.routers.resource_router import FHIR_JSON, router as resource_router
from app.config import get_config
from app.services.fhir.operations_generator import OperationsGenerator
from app.stats import StatsdMiddleware, setup_stats

logger = logging.getLogger(__name__)


def get_uvicorn_params() -> dict[str, Any]:
    config = get_config()
    kwargs = {
        "host": config.uvicorn.host,
        "port": config.uvicorn.port,
        "reload": config.uvicorn.reload,
        "reload_delay": config.uvicorn.reload_delay,
        "reload_dirs": config.uvicorn.reload_dirs,
    }
    if (
        config.uvicorn.use_ssl
        and config.uvicorn.ssl_base_dir is not None
        and config.uvicorn.ssl_cert_file is not None
        and config.uvicorn.ssl_key_file is not None
    ):
        kwargs["ssl_keyfile"] = (
            config.uvicorn.ssl_base_dir + "/" + config.uvicorn.ssl_key_file
        )
        kwargs["ssl_certfile"] = (
            config.uvicorn.ssl_base_dir + "/" + config.uvicorn.ssl_cert_file
        )

    return kwargs


def run() -> None:
    uvicorn.run("app.application:create_fastapi_app", factory=True, **get_uvicorn_params())


def create_fastapi_app() -> FastAPI:
    if get_config().stats.enabled:
        setup_stats()

    application_init()
    return setup_fastapi()


def application_init() -> None:
    config = get_config()
    setup_logging()
    setup_container()
    if config.database.create_tables:
        get_database().generate_tables()


def setup_logging() -> None:
    loglevel = logging.getLevelName(get_config().app.loglevel.upper())

    if isinstance(loglevel, str):
        raise ValueError(f"Invalid loglevel {loglevel.upper()}")
    logging.basicConfig(
        level=loglevel,
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )


def operation_outcome_response(status_code: int, code: str, diagnostics: str) -> JSONResponse:
    outcome = OperationsGenerator.generate_error(code, diagnostics)
    return JSONResponse(
        content=jsonable_encoder(outcome.model_dump()),
        status_code=status_code,
        media_type=FHIR_JSON,
    )


async def fhir_error_handler(request: Request, exc: Exception) -> JSONResponse:
    if not isinstance(exc, FhirError):
        raise exc

    logger.warning(f"{request.method} {request.url.path} failed: {exc.message}")
    return operation_outcome_response(exc.status_code, exc.issue_code, exc.message)


async def request_validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.warning(f"{request.method} {request.url.path} has an invalid request: {exc}")
    return operation_outcome_response(400, "invalid", "Request is invalid, the body must be a JSON object")


def setup_fastapi() -> FastAPI:
    config = get_config()

    fastapi = (
        FastAPI(docs_url=config.uvicorn.docs_url, redoc_url=config.uvicorn.redoc_url)
        if config.uvicorn.swagger_enabled
        else FastAPI(docs_url=None, redoc_url=None)
    )

    routers = [
        default_router,
        health_router,
        resource_router,
    ]
    for router in routers:
        fastapi.include_router(router)

    fastapi.add_exception_handler(FhirError, fhir_error_handler)
    fastapi.add_exception_handler(RequestValidationError, request_validation_error_handler)

    if config.stats.enabled:
        fastapi.add_middleware(StatsdMiddleware, module_name=config.stats.module_name or "default")

    return fastapi
