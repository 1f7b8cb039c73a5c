from abc import ABC, abstractmethod
from typing import List

from app.models.authorization.dto import GetSearchFilterBasedOnIdentityRequest
from app.models.fhir.types import SearchFilter


class Authorization(ABC):
    """
    Abstract base class for authorization strategies.

    An authorization strategy turns a caller identity into search filters that
    narrow search and history results down to what the caller may see.
    """

    @abstractmethod
    async def get_search_filter_based_on_identity(
        self, request: GetSearchFilterBasedOnIdentityRequest
    ) -> List[SearchFilter]:
        """
        Returns the search filters for the identity and operation in the request.

        Raises:
            UnauthorizedError: the identity may not perform the operation at all.
        """
        ...
