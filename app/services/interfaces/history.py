from abc import ABC, abstractmethod

from app.models.search.dto import (
    InstanceHistoryRequest,
    SearchResponse,
    TypeHistoryRequest,
)


class History(ABC):
    @abstractmethod
    async def type_history(self, request: TypeHistoryRequest) -> SearchResponse: ...

    @abstractmethod
    async def instance_history(self, request: InstanceHistoryRequest) -> SearchResponse: ...
