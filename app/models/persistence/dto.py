from typing import Any, Dict

from pydantic import BaseModel, Field


class ResourceRequestBase(BaseModel):
    resource_type: str
    id: str
    tenant_id: str


class CreateResourceRequest(BaseModel):
    resource_type: str
    resource: Dict[str, Any]
    tenant_id: str


class UpdateResourceRequest(ResourceRequestBase):
    resource: Dict[str, Any]


class PatchResourceRequest(ResourceRequestBase):
    resource: Dict[str, Any]


class ReadResourceRequest(ResourceRequestBase):
    pass


class VReadResourceRequest(ResourceRequestBase):
    vid: str


class DeleteResourceRequest(ResourceRequestBase):
    pass


class GenericResponse(BaseModel):
    message: str = Field(default="")
    resource: Dict[str, Any] | None = Field(default=None)
