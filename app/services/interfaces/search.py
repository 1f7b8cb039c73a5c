from abc import ABC, abstractmethod

from app.models.search.dto import SearchResponse, TypeSearchRequest


class Search(ABC):
    """
    Abstract base class for type-scoped resource searches.
    """

    @abstractmethod
    async def type_search(self, request: TypeSearchRequest) -> SearchResponse:
        """
        Searches resources of one type in one tenant. The search filters in the
        request must be applied on top of the query parameters.
        """
        ...
