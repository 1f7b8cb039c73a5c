from abc import ABC, abstractmethod

from app.models.persistence.dto import (
    CreateResourceRequest,
    DeleteResourceRequest,
    GenericResponse,
    PatchResourceRequest,
    ReadResourceRequest,
    UpdateResourceRequest,
    VReadResourceRequest,
)


class Persistence(ABC):
    """
    Abstract base class for durable resource storage.

    Every request is scoped to a tenant. Implementations own the lifecycle of a
    resource: assigning ids, versioning and deletion. They must never return
    resources that belong to another tenant than the one in the request.
    """

    @abstractmethod
    async def create_resource(self, request: CreateResourceRequest) -> GenericResponse:
        """
        Stores a new resource and returns it as stored, including the assigned id and meta.
        """
        ...

    @abstractmethod
    async def update_resource(self, request: UpdateResourceRequest) -> GenericResponse:
        """
        Stores a new version of an existing resource.

        Raises:
            ResourceNotFoundError: the resource does not exist in the tenant.
            ResourceVersionConflictError: the resource was changed concurrently.
        """
        ...

    @abstractmethod
    async def patch_resource(self, request: PatchResourceRequest) -> GenericResponse: ...

    @abstractmethod
    async def read_resource(self, request: ReadResourceRequest) -> GenericResponse:
        """
        Returns the latest version of a resource or raises ResourceNotFoundError.
        """
        ...

    @abstractmethod
    async def v_read_resource(self, request: VReadResourceRequest) -> GenericResponse:
        """
        Returns a specific version of a resource.

        Raises:
            ResourceNotFoundError: the resource does not exist in the tenant.
            ResourceVersionNotFoundError: the version does not exist.
        """
        ...

    @abstractmethod
    async def delete_resource(self, request: DeleteResourceRequest) -> GenericResponse: ...
