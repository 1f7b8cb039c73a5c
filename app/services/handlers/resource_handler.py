import logging
from typing import Any, Dict, List

from fhir.resources.R4B.operationoutcome import OperationOutcome

from app.models.authorization.dto import GetSearchFilterBasedOnIdentityRequest
from app.models.fhir.bundle import Bundle
from app.models.fhir.types import FhirVersion
from app.models.persistence.dto import (
    CreateResourceRequest,
    DeleteResourceRequest,
    PatchResourceRequest,
    ReadResourceRequest,
    UpdateResourceRequest,
    VReadResourceRequest,
)
from app.models.search.dto import (
    InstanceHistoryRequest,
    TypeHistoryRequest,
    TypeSearchRequest,
)
from app.services.fhir.bundle.bundle_generator import BundleGenerator
from app.services.fhir.operations_generator import OperationsGenerator
from app.services.fhir.validator import Validator
from app.services.handlers.crud_handler_interface import CrudHandlerInterface
from app.services.interfaces.authorization import Authorization
from app.services.interfaces.history import History
from app.services.interfaces.persistence import Persistence
from app.services.interfaces.search import Search
from app.stats import NoopStats, Stats

logger = logging.getLogger(__name__)


class ResourceHandler(CrudHandlerInterface):
    """
    Maps the FHIR interactions on a resource type to the persistence, search, history
    and authorization services. Errors raised by those services are not caught here.
    """

    def __init__(
        self,
        data_service: Persistence,
        search_service: Search,
        history_service: History,
        auth_service: Authorization,
        fhir_version: FhirVersion | str,
        server_url: str,
        stats: Stats | None = None,
    ) -> None:
        self.__validator = Validator(fhir_version)
        self.__data_service = data_service
        self.__search_service = search_service
        self.__history_service = history_service
        self.__auth_service = auth_service
        self.__server_url = server_url
        self.__stats = stats or NoopStats()

    async def create(
        self, resource_type: str, resource: Dict[str, Any], tenant_id: str
    ) -> Dict[str, Any]:
        self.__track("create", resource_type, tenant_id)
        self.__validator.validate(resource_type, resource)

        create_response = await self.__data_service.create_resource(
            CreateResourceRequest(
                resource_type=resource_type, resource=resource, tenant_id=tenant_id
            )
        )
        return create_response.resource  # type: ignore[return-value]

    async def update(
        self, resource_type: str, id: str, resource: Dict[str, Any], tenant_id: str
    ) -> Dict[str, Any]:
        self.__track("update", resource_type, tenant_id)
        self.__validator.validate(resource_type, resource)

        update_response = await self.__data_service.update_resource(
            UpdateResourceRequest(
                resource_type=resource_type, id=id, resource=resource, tenant_id=tenant_id
            )
        )
        return update_response.resource  # type: ignore[return-value]

    async def patch(
        self, resource_type: str, id: str, resource: Dict[str, Any], tenant_id: str
    ) -> Dict[str, Any]:
        self.__track("patch", resource_type, tenant_id)
        # TODO: validate the patched result once persistence can return it before storing
        patch_response = await self.__data_service.patch_resource(
            PatchResourceRequest(
                resource_type=resource_type, id=id, resource=resource, tenant_id=tenant_id
            )
        )
        return patch_response.resource  # type: ignore[return-value]

    async def read(self, resource_type: str, id: str, tenant_id: str) -> Dict[str, Any]:
        self.__track("read", resource_type, tenant_id)
        get_response = await self.__data_service.read_resource(
            ReadResourceRequest(resource_type=resource_type, id=id, tenant_id=tenant_id)
        )
        return get_response.resource  # type: ignore[return-value]

    async def v_read(
        self, resource_type: str, id: str, vid: str, tenant_id: str
    ) -> Dict[str, Any]:
        self.__track("vread", resource_type, tenant_id)
        get_response = await self.__data_service.v_read_resource(
            VReadResourceRequest(
                resource_type=resource_type, id=id, vid=vid, tenant_id=tenant_id
            )
        )
        return get_response.resource  # type: ignore[return-value]

    async def delete(self, resource_type: str, id: str, tenant_id: str) -> OperationOutcome:
        self.__track("delete", resource_type, tenant_id)
        await self.__data_service.delete_resource(
            DeleteResourceRequest(resource_type=resource_type, id=id, tenant_id=tenant_id)
        )
        return OperationsGenerator.generate_successful_delete_operation()

    async def type_search(
        self,
        resource_type: str,
        query_params: Dict[str, Any],
        allowed_resource_types: List[str],
        user_identity: Dict[str, Any],
        tenant_id: str,
    ) -> Bundle:
        self.__track("search_type", resource_type, tenant_id)
        search_filters = await self.__auth_service.get_search_filter_based_on_identity(
            GetSearchFilterBasedOnIdentityRequest(
                user_identity=user_identity,
                operation="search-type",
                resource_type=resource_type,
            )
        )

        search_response = await self.__search_service.type_search(
            TypeSearchRequest(
                resource_type=resource_type,
                query_params=query_params,
                base_url=self.__server_url,
                allowed_resource_types=allowed_resource_types,
                search_filters=search_filters,
                tenant_id=tenant_id,
            )
        )
        return BundleGenerator.generate_bundle(
            self.__server_url,
            tenant_id,
            query_params,
            search_response.result,
            "searchset",
            resource_type,
        )

    async def type_history(
        self,
        resource_type: str,
        query_params: Dict[str, Any],
        user_identity: Dict[str, Any],
        tenant_id: str,
    ) -> Bundle:
        self.__track("history_type", resource_type, tenant_id)
        search_filters = await self.__auth_service.get_search_filter_based_on_identity(
            GetSearchFilterBasedOnIdentityRequest(
                user_identity=user_identity,
                operation="history-type",
                resource_type=resource_type,
            )
        )

        history_response = await self.__history_service.type_history(
            TypeHistoryRequest(
                resource_type=resource_type,
                query_params=query_params,
                base_url=self.__server_url,
                search_filters=search_filters,
                tenant_id=tenant_id,
            )
        )
        return BundleGenerator.generate_bundle(
            self.__server_url,
            tenant_id,
            query_params,
            history_response.result,
            "history",
            resource_type,
        )

    async def instance_history(
        self,
        resource_type: str,
        id: str,
        query_params: Dict[str, Any],
        user_identity: Dict[str, Any],
        tenant_id: str,
    ) -> Bundle:
        self.__track("history_instance", resource_type, tenant_id)
        search_filters = await self.__auth_service.get_search_filter_based_on_identity(
            GetSearchFilterBasedOnIdentityRequest(
                user_identity=user_identity,
                operation="history-instance",
                resource_type=resource_type,
                id=id,
            )
        )

        history_response = await self.__history_service.instance_history(
            InstanceHistoryRequest(
                id=id,
                resource_type=resource_type,
                query_params=query_params,
                base_url=self.__server_url,
                tenant_id=tenant_id,
                search_filters=search_filters,
            )
        )
        return BundleGenerator.generate_bundle(
            self.__server_url,
            tenant_id,
            query_params,
            history_response.result,
            "history",
            resource_type,
            id,
        )

    def __track(self, operation: str, resource_type: str, tenant_id: str) -> None:
        logger.debug(f"{operation} {resource_type} for tenant {tenant_id}")
        self.__stats.inc(f"resource_handler.{operation}")
