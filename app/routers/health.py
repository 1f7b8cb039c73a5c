import logging
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.container import get_database
from app.db.db import Database

logger = logging.getLogger(__name__)
router = APIRouter()


def ok_or_error(value: bool) -> str:
    return "ok" if value else "error"


@router.get("/health")
def health(database: Database = Depends(get_database)) -> JSONResponse:
    logger.info("Checking database health")
    healthy = database.is_healthy()
    content: dict[str, Any] = {
        "status": ok_or_error(healthy),
        "components": {"database": ok_or_error(healthy)},
    }
    return JSONResponse(content=content, status_code=200 if healthy else 503)
