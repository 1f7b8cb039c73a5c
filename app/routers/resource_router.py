import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, Header, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.config import get_config
from app.container import get_resource_handler, get_validator
from app.exceptions import InvalidResourceError, UnsupportedResourceTypeError
from app.services.fhir.utils import get_tenant_base_url, make_url
from app.services.fhir.validator import Validator
from app.services.handlers.resource_handler import ResourceHandler

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/tenant/{tenant_id}", tags=["FHIR Resources"])

FHIR_JSON = "application/fhir+json"


def fhir_response(
    content: Any, status_code: int = 200, headers: Dict[str, str] | None = None
) -> JSONResponse:
    return JSONResponse(
        content=jsonable_encoder(content),
        status_code=status_code,
        headers=headers,
        media_type=FHIR_JSON,
    )


def served_resource_type(
    resource_type: str, validator: Validator = Depends(get_validator)
) -> str:
    """
    Returns the resource type from the path when this server serves it
    """
    served = get_config().fhir.resource_types
    if served and resource_type not in served:
        raise UnsupportedResourceTypeError(resource_type)

    if not validator.is_resource_type(resource_type):
        raise UnsupportedResourceTypeError(resource_type)

    return resource_type


def get_user_identity(
    x_user_id: str | None = Header(default=None),
    x_user_roles: str | None = Header(default=None),
) -> Dict[str, Any]:
    identity: Dict[str, Any] = {}
    if x_user_id:
        identity["sub"] = x_user_id
    if x_user_roles:
        identity["roles"] = [r.strip() for r in x_user_roles.split(",") if r.strip()]

    return identity


def get_query_params(request: Request) -> Dict[str, Any]:
    """
    Returns the query parameters, repeated parameters become a list
    """
    params: Dict[str, Any] = {}
    for key, value in request.query_params.multi_items():
        if key not in params:
            params[key] = value
        elif isinstance(params[key], list):
            params[key].append(value)
        else:
            params[key] = [params[key], value]

    return params


def get_allowed_resource_types() -> List[str]:
    return list(get_config().fhir.resource_types)


@router.post("/{resource_type}", summary="Create a resource")
async def create(
    tenant_id: str,
    resource_type: str = Depends(served_resource_type),
    resource: Dict[str, Any] = Body(...),
    handler: ResourceHandler = Depends(get_resource_handler),
) -> JSONResponse:
    created = await handler.create(resource_type, resource, tenant_id)

    location = make_url(
        get_tenant_base_url(get_config().fhir.server_url, tenant_id),
        resource_type,
        created["id"],
        "_history",
        created.get("meta", {}).get("versionId", "1"),
    )
    return fhir_response(created, status_code=201, headers={"Location": location})


@router.get("/{resource_type}", summary="Search resources of a type")
async def type_search(
    tenant_id: str,
    resource_type: str = Depends(served_resource_type),
    query_params: Dict[str, Any] = Depends(get_query_params),
    user_identity: Dict[str, Any] = Depends(get_user_identity),
    allowed_resource_types: List[str] = Depends(get_allowed_resource_types),
    handler: ResourceHandler = Depends(get_resource_handler),
) -> JSONResponse:
    bundle = await handler.type_search(
        resource_type, query_params, allowed_resource_types, user_identity, tenant_id
    )
    return fhir_response(bundle.to_fhir())


@router.get("/{resource_type}/_history", summary="History of a resource type")
async def type_history(
    tenant_id: str,
    resource_type: str = Depends(served_resource_type),
    query_params: Dict[str, Any] = Depends(get_query_params),
    user_identity: Dict[str, Any] = Depends(get_user_identity),
    handler: ResourceHandler = Depends(get_resource_handler),
) -> JSONResponse:
    bundle = await handler.type_history(resource_type, query_params, user_identity, tenant_id)
    return fhir_response(bundle.to_fhir())


@router.get("/{resource_type}/{id}", summary="Read a resource")
async def read(
    tenant_id: str,
    id: str,
    resource_type: str = Depends(served_resource_type),
    handler: ResourceHandler = Depends(get_resource_handler),
) -> JSONResponse:
    return fhir_response(await handler.read(resource_type, id, tenant_id))


@router.put("/{resource_type}/{id}", summary="Update a resource")
async def update(
    tenant_id: str,
    id: str,
    resource_type: str = Depends(served_resource_type),
    resource: Dict[str, Any] = Body(...),
    handler: ResourceHandler = Depends(get_resource_handler),
) -> JSONResponse:
    if resource.get("id") is not None and resource["id"] != id:
        raise InvalidResourceError(
            f"Resource id '{resource['id']}' does not match id '{id}' in the url"
        )

    return fhir_response(await handler.update(resource_type, id, resource, tenant_id))


@router.patch("/{resource_type}/{id}", summary="Patch a resource")
async def patch(
    tenant_id: str,
    id: str,
    resource_type: str = Depends(served_resource_type),
    resource: Dict[str, Any] = Body(...),
    handler: ResourceHandler = Depends(get_resource_handler),
) -> JSONResponse:
    return fhir_response(await handler.patch(resource_type, id, resource, tenant_id))


@router.delete("/{resource_type}/{id}", summary="Delete a resource")
async def delete(
    tenant_id: str,
    id: str,
    resource_type: str = Depends(served_resource_type),
    handler: ResourceHandler = Depends(get_resource_handler),
) -> JSONResponse:
    outcome = await handler.delete(resource_type, id, tenant_id)
    return fhir_response(outcome.model_dump())


@router.get("/{resource_type}/{id}/_history", summary="History of a resource")
async def instance_history(
    tenant_id: str,
    id: str,
    resource_type: str = Depends(served_resource_type),
    query_params: Dict[str, Any] = Depends(get_query_params),
    user_identity: Dict[str, Any] = Depends(get_user_identity),
    handler: ResourceHandler = Depends(get_resource_handler),
) -> JSONResponse:
    bundle = await handler.instance_history(
        resource_type, id, query_params, user_identity, tenant_id
    )
    return fhir_response(bundle.to_fhir())


@router.get("/{resource_type}/{id}/_history/{vid}", summary="Read a version of a resource")
async def v_read(
    tenant_id: str,
    id: str,
    vid: str,
    resource_type: str = Depends(served_resource_type),
    handler: ResourceHandler = Depends(get_resource_handler),
) -> JSONResponse:
    return fhir_response(await handler.v_read(resource_type, id, vid, tenant_id))
