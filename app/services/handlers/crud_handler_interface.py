from abc import ABC, abstractmethod
from typing import Any, Dict, List

from fhir.resources.R4B.operationoutcome import OperationOutcome

from app.models.fhir.bundle import Bundle


class CrudHandlerInterface(ABC):
    @abstractmethod
    async def create(
        self, resource_type: str, resource: Dict[str, Any], tenant_id: str
    ) -> Dict[str, Any]: ...

    @abstractmethod
    async def update(
        self, resource_type: str, id: str, resource: Dict[str, Any], tenant_id: str
    ) -> Dict[str, Any]: ...

    @abstractmethod
    async def patch(
        self, resource_type: str, id: str, resource: Dict[str, Any], tenant_id: str
    ) -> Dict[str, Any]: ...

    @abstractmethod
    async def read(self, resource_type: str, id: str, tenant_id: str) -> Dict[str, Any]: ...

    @abstractmethod
    async def v_read(
        self, resource_type: str, id: str, vid: str, tenant_id: str
    ) -> Dict[str, Any]: ...

    @abstractmethod
    async def delete(self, resource_type: str, id: str, tenant_id: str) -> OperationOutcome: ...

    @abstractmethod
    async def type_search(
        self,
        resource_type: str,
        query_params: Dict[str, Any],
        allowed_resource_types: List[str],
        user_identity: Dict[str, Any],
        tenant_id: str,
    ) -> Bundle: ...

    @abstractmethod
    async def type_history(
        self,
        resource_type: str,
        query_params: Dict[str, Any],
        user_identity: Dict[str, Any],
        tenant_id: str,
    ) -> Bundle: ...

    @abstractmethod
    async def instance_history(
        self,
        resource_type: str,
        id: str,
        query_params: Dict[str, Any],
        user_identity: Dict[str, Any],
        tenant_id: str,
    ) -> Bundle: ...
