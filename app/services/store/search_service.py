import logging
from typing import Any, Dict, List, Mapping

from app.db.db import Database
from app.db.repositories.resource_version_repository import ResourceVersionRepository
from app.exceptions import InvalidSearchParameterError
from app.models.fhir.bundle import Entry, EntrySearch
from app.models.search.dto import SearchResponse, SearchResult, TypeSearchRequest
from app.services.fhir.utils import get_tenant_base_url, make_url
from app.services.interfaces.search import Search
from app.services.store.filters import get_values, matches_search_filters, to_search_string
from app.services.store.paging import COUNT_PARAM, OFFSET_PARAM, Page

logger = logging.getLogger(__name__)

RESULT_PARAMS = {COUNT_PARAM, OFFSET_PARAM, "_format", "_pretty"}


def parse_search_params(query_params: Mapping[str, Any]) -> List[tuple[str, List[str]]]:
    """
    Returns (element, accepted values) pairs. Repeated parameters must all match, comma
    separated values within one parameter match any.
    """
    criteria: List[tuple[str, List[str]]] = []
    for key, value in query_params.items():
        if key in RESULT_PARAMS:
            continue

        if ":" in key:
            raise InvalidSearchParameterError(f"Search modifiers are not supported: {key}")

        if key.startswith("_") and key != "_id":
            raise InvalidSearchParameterError(f"Unsupported search parameter: {key}")

        element = "id" if key == "_id" else key
        for v in value if isinstance(value, (list, tuple)) else [value]:
            accepted = [part for part in str(v).split(",") if part]
            # Empty parameters are ignored
            if accepted:
                criteria.append((element, accepted))

    return criteria


def matches_criteria(resource: Dict[str, Any], criteria: List[tuple[str, List[str]]]) -> bool:
    for element, accepted in criteria:
        values = {to_search_string(v).lower() for v in get_values(resource, element)}
        if not any(a.lower() in values for a in accepted):
            return False

    return True


class DatabaseSearchService(Search):
    def __init__(self, database: Database, default_count: int = 20, max_count: int = 100) -> None:
        self.__database = database
        self.__default_count = default_count
        self.__max_count = max_count

    async def type_search(self, request: TypeSearchRequest) -> SearchResponse:
        if request.allowed_resource_types and request.resource_type not in request.allowed_resource_types:
            raise InvalidSearchParameterError(
                f"Searching {request.resource_type} is not allowed"
            )

        criteria = parse_search_params(request.query_params)
        page = Page(request.query_params, self.__default_count, self.__max_count)

        with self.__database.get_db_session() as session:
            repository = session.get_repository(ResourceVersionRepository)
            versions = repository.find_latest(request.tenant_id, request.resource_type)

        matches = [
            v.resource
            for v in versions
            if v.resource is not None
            and matches_criteria(v.resource, criteria)
            and matches_search_filters(v.resource, request.search_filters)
        ]
        logger.debug(
            f"Search on {request.resource_type} in tenant {request.tenant_id} matched {len(matches)} resources"
        )

        base_url = get_tenant_base_url(request.base_url, request.tenant_id)
        entries = [
            Entry(
                fullUrl=make_url(base_url, request.resource_type, resource["id"]),
                resource=resource,
                search=EntrySearch(mode="match"),
            )
            for resource in matches[page.slice()]
        ]

        return SearchResponse(
            result=SearchResult(
                number_of_results=len(matches),
                entries=entries,
                message="",
                previous_result_url=page.previous_url(base_url, request.resource_type),
                next_result_url=page.next_url(base_url, len(matches), request.resource_type),
            )
        )
