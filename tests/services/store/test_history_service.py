import copy
from datetime import datetime, timezone
from typing import Any, Dict, List

import pytest

from app.exceptions import InvalidSearchParameterError
from app.models.fhir.types import SearchFilter
from app.models.persistence.dto import (
    CreateResourceRequest,
    DeleteResourceRequest,
    UpdateResourceRequest,
)
from app.models.search.dto import InstanceHistoryRequest, TypeHistoryRequest
from app.services.store.data_service import DatabaseDataService
from app.services.store.history_service import DatabaseHistoryService, parse_since
from tests.mock_data import SERVER_URL, generate_patient

TENANT = "tenantA"
BASE = f"{SERVER_URL}/tenant/{TENANT}"


async def create_update_delete(data_service: DatabaseDataService) -> Dict[str, Any]:
    created = await data_service.create_resource(
        CreateResourceRequest(
            resource_type="Patient", resource=generate_patient(gender="female"), tenant_id=TENANT
        )
    )
    assert created.resource is not None
    changed = copy.deepcopy(created.resource)
    changed["active"] = False
    await data_service.update_resource(
        UpdateResourceRequest(
            resource_type="Patient", id=changed["id"], resource=changed, tenant_id=TENANT
        )
    )
    await data_service.delete_resource(
        DeleteResourceRequest(resource_type="Patient", id=changed["id"], tenant_id=TENANT)
    )
    return created.resource


def type_request(
    query_params: Dict[str, Any] | None = None, search_filters: List[SearchFilter] | None = None
) -> TypeHistoryRequest:
    return TypeHistoryRequest(
        resource_type="Patient",
        query_params=query_params or {},
        base_url=SERVER_URL,
        search_filters=search_filters or [],
        tenant_id=TENANT,
    )


@pytest.mark.asyncio
async def test_instance_history_should_list_versions_newest_first(
    data_service: DatabaseDataService, history_service: DatabaseHistoryService
) -> None:
    created = await create_update_delete(data_service)

    response = await history_service.instance_history(
        InstanceHistoryRequest(
            id=created["id"],
            resource_type="Patient",
            query_params={},
            base_url=SERVER_URL,
            tenant_id=TENANT,
        )
    )

    entries = response.result.entries
    assert response.result.number_of_results == 3
    assert [e.request.method for e in entries] == ["DELETE", "PUT", "POST"]
    assert [e.response.status for e in entries] == ["204 No Content", "200 OK", "201 Created"]
    assert [e.response.etag for e in entries] == ['W/"3"', 'W/"2"', 'W/"1"']
    assert entries[0].resource is None
    assert entries[0].request.url == f"Patient/{created['id']}"
    assert entries[2].request.url == "Patient"
    assert entries[2].resource == created
    assert all(e.fullUrl == f"{BASE}/Patient/{created['id']}" for e in entries)


@pytest.mark.asyncio
async def test_type_history_should_include_all_resources(
    data_service: DatabaseDataService, history_service: DatabaseHistoryService
) -> None:
    await create_update_delete(data_service)
    await data_service.create_resource(
        CreateResourceRequest(resource_type="Patient", resource=generate_patient(), tenant_id=TENANT)
    )
    await data_service.create_resource(
        CreateResourceRequest(resource_type="Patient", resource=generate_patient(), tenant_id="tenantB")
    )

    response = await history_service.type_history(type_request())

    assert response.result.number_of_results == 4


@pytest.mark.asyncio
async def test_history_with_filters_should_skip_deletions(
    data_service: DatabaseDataService, history_service: DatabaseHistoryService
) -> None:
    await create_update_delete(data_service)

    response = await history_service.type_history(
        type_request(search_filters=[SearchFilter(key="active", value=["true"])])
    )

    assert response.result.number_of_results == 1
    assert response.result.entries[0].request.method == "POST"


@pytest.mark.asyncio
async def test_history_should_page_results(
    data_service: DatabaseDataService, history_service: DatabaseHistoryService
) -> None:
    await create_update_delete(data_service)

    response = await history_service.type_history(type_request({"_count": "2"}))

    assert len(response.result.entries) == 2
    assert response.result.next_result_url == f"{BASE}/Patient/_history?_count=2&_getpagesoffset=2"


@pytest.mark.asyncio
async def test_history_since_in_the_future_should_be_empty(
    data_service: DatabaseDataService, history_service: DatabaseHistoryService
) -> None:
    await create_update_delete(data_service)

    response = await history_service.type_history(type_request({"_since": "2999-01-01T00:00:00Z"}))

    assert response.result.number_of_results == 0
    assert response.result.entries == []


@pytest.mark.asyncio
@pytest.mark.parametrize("query_params", [{"_since": "yesterday"}, {"gender": "female"}])
async def test_history_with_invalid_params_should_fail(
    history_service: DatabaseHistoryService, query_params: Dict[str, Any]
) -> None:
    with pytest.raises(InvalidSearchParameterError):
        await history_service.type_history(type_request(query_params))


def test_parse_since() -> None:
    assert parse_since({}) is None
    assert parse_since({"_since": "2024-05-01T10:00:00Z"}) == datetime(
        2024, 5, 1, 10, 0, tzinfo=timezone.utc
    )
    assert parse_since({"_since": "2024-05-01T12:00:00+02:00"}) == datetime(
        2024, 5, 1, 10, 0, tzinfo=timezone.utc
    )
