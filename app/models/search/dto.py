from typing import Any, Dict, List

from pydantic import BaseModel, Field

from app.models.fhir.bundle import Entry
from app.models.fhir.types import SearchFilter


class TypeSearchRequest(BaseModel):
    resource_type: str
    query_params: Dict[str, Any]
    base_url: str
    allowed_resource_types: List[str]
    search_filters: List[SearchFilter] = Field(default=[])
    tenant_id: str


class TypeHistoryRequest(BaseModel):
    resource_type: str
    query_params: Dict[str, Any]
    base_url: str
    search_filters: List[SearchFilter] = Field(default=[])
    tenant_id: str


class InstanceHistoryRequest(BaseModel):
    id: str
    resource_type: str
    query_params: Dict[str, Any]
    base_url: str
    tenant_id: str
    search_filters: List[SearchFilter] = Field(default=[])


class SearchResult(BaseModel):
    number_of_results: int
    entries: List[Entry] = Field(default=[])
    message: str = Field(default="")
    first_result_url: str | None = Field(default=None)
    previous_result_url: str | None = Field(default=None)
    next_result_url: str | None = Field(default=None)
    last_result_url: str | None = Field(default=None)


class SearchResponse(BaseModel):
    result: SearchResult
