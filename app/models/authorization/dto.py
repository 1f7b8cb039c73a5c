from typing import Any, Dict

from pydantic import BaseModel, Field

from app.models.fhir.types import SearchOperation


class GetSearchFilterBasedOnIdentityRequest(BaseModel):
    user_identity: Dict[str, Any]
    operation: SearchOperation
    resource_type: str
    id: str | None = Field(default=None)
