from collections.abc import Sequence
from datetime import datetime, timezone
import logging
from typing import Any, List, Mapping

from yarl import URL

from app.db.db import Database
from app.db.entities.resource_version import ResourceVersion
from app.db.repositories.resource_version_repository import ResourceVersionRepository
from app.exceptions import InvalidSearchParameterError
from app.models.fhir.bundle import Entry, EntryRequest, EntryResponse
from app.models.fhir.types import SearchFilter
from app.models.search.dto import (
    InstanceHistoryRequest,
    SearchResponse,
    SearchResult,
    TypeHistoryRequest,
)
from app.services.fhir.utils import get_tenant_base_url, make_url
from app.services.interfaces.history import History
from app.services.store.filters import matches_search_filters
from app.services.store.paging import COUNT_PARAM, OFFSET_PARAM, Page, get_single_value

logger = logging.getLogger(__name__)

HISTORY_PARAMS = {COUNT_PARAM, OFFSET_PARAM, "_since", "_format", "_pretty"}

RESPONSE_STATUS = {
    "POST": "201 Created",
    "PUT": "200 OK",
    "PATCH": "200 OK",
    "DELETE": "204 No Content",
}


def as_utc(value: datetime) -> datetime:
    # sqlite hands back naive timestamps, they are stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_since(query_params: Mapping[str, Any]) -> datetime | None:
    value = get_single_value(query_params, "_since")
    if value is None:
        return None

    try:
        return as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError:
        raise InvalidSearchParameterError(f"_since must be an instant, got '{value}'")


class DatabaseHistoryService(History):
    def __init__(self, database: Database, default_count: int = 20, max_count: int = 100) -> None:
        self.__database = database
        self.__default_count = default_count
        self.__max_count = max_count

    async def type_history(self, request: TypeHistoryRequest) -> SearchResponse:
        with self.__database.get_db_session() as session:
            repository = session.get_repository(ResourceVersionRepository)
            versions = repository.find_history(request.tenant_id, request.resource_type)

        return self.__make_response(
            versions,
            request.query_params,
            request.search_filters,
            request.base_url,
            request.tenant_id,
            request.resource_type,
        )

    async def instance_history(self, request: InstanceHistoryRequest) -> SearchResponse:
        with self.__database.get_db_session() as session:
            repository = session.get_repository(ResourceVersionRepository)
            versions = repository.find_history(
                request.tenant_id, request.resource_type, request.id
            )

        return self.__make_response(
            versions,
            request.query_params,
            request.search_filters,
            request.base_url,
            request.tenant_id,
            request.resource_type,
            request.id,
        )

    def __make_response(
        self,
        versions: Sequence[ResourceVersion],
        query_params: Mapping[str, Any],
        search_filters: List[SearchFilter],
        server_url: str,
        tenant_id: str,
        resource_type: str,
        id: str | None = None,
    ) -> SearchResponse:
        unsupported = [k for k in query_params if k not in HISTORY_PARAMS]
        if unsupported:
            raise InvalidSearchParameterError(
                f"Unsupported history parameters: {', '.join(unsupported)}"
            )

        since = parse_since(query_params)
        page = Page(query_params, self.__default_count, self.__max_count)

        visible = [v for v in versions if self.__is_visible(v, since, search_filters)]

        base_url = get_tenant_base_url(server_url, tenant_id)
        entries = [self.__make_entry(v, base_url) for v in visible[page.slice()]]

        segments = [resource_type] if id is None else [resource_type, id]
        segments.append("_history")
        return SearchResponse(
            result=SearchResult(
                number_of_results=len(visible),
                entries=entries,
                message="",
                previous_result_url=page.previous_url(base_url, *segments),
                next_result_url=page.next_url(base_url, len(visible), *segments),
            )
        )

    @staticmethod
    def __is_visible(
        version: ResourceVersion, since: datetime | None, search_filters: List[SearchFilter]
    ) -> bool:
        if since is not None and as_utc(version.last_updated) < since:
            return False

        if not search_filters:
            return True

        # Deletions carry no resource to evaluate the filters against
        if version.resource is None:
            return False

        return matches_search_filters(version.resource, search_filters)

    @staticmethod
    def __make_entry(version: ResourceVersion, base_url: URL) -> Entry:
        resource_url = make_url(base_url, version.resource_type, version.resource_id)
        request_url = (
            version.resource_type
            if version.method == "POST"
            else f"{version.resource_type}/{version.resource_id}"
        )

        return Entry(
            fullUrl=resource_url,
            resource=version.resource,
            request=EntryRequest(method=version.method, url=request_url),
            response=EntryResponse(
                status=RESPONSE_STATUS[version.method],
                etag=f'W/"{version.version_id}"',
                lastModified=as_utc(version.last_updated).isoformat(),
            ),
        )
