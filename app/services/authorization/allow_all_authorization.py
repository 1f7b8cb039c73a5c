from typing import List

from app.models.authorization.dto import GetSearchFilterBasedOnIdentityRequest
from app.models.fhir.types import SearchFilter
from app.services.interfaces.authorization import Authorization


class AllowAllAuthorization(Authorization):
    async def get_search_filter_based_on_identity(
        self, request: GetSearchFilterBasedOnIdentityRequest
    ) -> List[SearchFilter]:
        """Every identity may see every resource, so no filters are returned"""
        return []
