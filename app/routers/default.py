from fastapi import APIRouter

from app.config import get_config

router = APIRouter()


@router.get("/")
def index() -> dict[str, str]:
    config = get_config()
    return {
        "message": "FHIR resource handler is running",
        "server_url": config.fhir.server_url,
        "fhir_version": config.fhir.fhir_version,
    }
