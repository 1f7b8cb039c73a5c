import copy
from datetime import datetime, timezone
import logging
from typing import Any, Dict
from uuid import uuid4

from sqlalchemy.exc import IntegrityError

from app.db.db import Database
from app.db.entities.resource_version import ResourceVersion
from app.db.repositories.resource_version_repository import ResourceVersionRepository
from app.exceptions import (
    ResourceNotFoundError,
    ResourceVersionConflictError,
    ResourceVersionNotFoundError,
)
from app.models.persistence.dto import (
    CreateResourceRequest,
    DeleteResourceRequest,
    GenericResponse,
    PatchResourceRequest,
    ReadResourceRequest,
    UpdateResourceRequest,
    VReadResourceRequest,
)
from app.services.interfaces.persistence import Persistence

logger = logging.getLogger(__name__)


def stamp_resource(
    resource: Dict[str, Any], id: str, version_id: int, last_updated: datetime
) -> Dict[str, Any]:
    """
    Returns a copy of the resource with id, meta.versionId and meta.lastUpdated set
    """
    stamped = copy.deepcopy(resource)
    stamped["id"] = id
    meta = stamped.get("meta") if isinstance(stamped.get("meta"), dict) else {}
    stamped["meta"] = {
        **meta,
        "versionId": str(version_id),
        "lastUpdated": last_updated.isoformat(),
    }
    return stamped


class DatabaseDataService(Persistence):
    """
    Persistence backed by the resource_versions table. Every write adds a version,
    deletes add a version without a resource.
    """

    def __init__(self, database: Database) -> None:
        self.__database = database

    async def create_resource(self, request: CreateResourceRequest) -> GenericResponse:
        resource_id = str(uuid4())
        now = datetime.now(timezone.utc)
        stored = stamp_resource(request.resource, resource_id, 1, now)

        self.__add_version(
            ResourceVersion(
                tenant_id=request.tenant_id,
                resource_type=request.resource_type,
                resource_id=resource_id,
                version_id=1,
                method="POST",
                is_latest=True,
                deleted=False,
                resource=stored,
                last_updated=now,
            )
        )
        logger.info(f"Created {request.resource_type}/{resource_id} in tenant {request.tenant_id}")
        return GenericResponse(message="Resource created", resource=stored)

    async def update_resource(self, request: UpdateResourceRequest) -> GenericResponse:
        current = self.__get_current(request.tenant_id, request.resource_type, request.id)
        self.__check_version(current, request.resource)

        stored = self.__add_next_version(current, "PUT", request.resource)
        return GenericResponse(message="Resource updated", resource=stored)

    async def patch_resource(self, request: PatchResourceRequest) -> GenericResponse:
        current = self.__get_current(request.tenant_id, request.resource_type, request.id)
        self.__check_version(current, request.resource)

        # Shallow merge, elements in the patch document replace elements in the resource
        merged = copy.deepcopy(current.resource or {})
        merged.update(copy.deepcopy(request.resource))
        merged["resourceType"] = request.resource_type

        stored = self.__add_next_version(current, "PATCH", merged)
        return GenericResponse(message="Resource patched", resource=stored)

    async def read_resource(self, request: ReadResourceRequest) -> GenericResponse:
        current = self.__get_current(request.tenant_id, request.resource_type, request.id)
        return GenericResponse(message="Resource found", resource=current.resource)

    async def v_read_resource(self, request: VReadResourceRequest) -> GenericResponse:
        with self.__database.get_db_session() as session:
            repository = session.get_repository(ResourceVersionRepository)
            if repository.get_latest(request.tenant_id, request.resource_type, request.id) is None:
                raise ResourceNotFoundError(request.resource_type, request.id)

            version = None
            if request.vid.isdigit():
                version = repository.get_version(
                    request.tenant_id, request.resource_type, request.id, int(request.vid)
                )

        if version is None or version.deleted:
            raise ResourceVersionNotFoundError(request.resource_type, request.id, request.vid)

        return GenericResponse(message="Resource found", resource=version.resource)

    async def delete_resource(self, request: DeleteResourceRequest) -> GenericResponse:
        current = self.__get_current(request.tenant_id, request.resource_type, request.id)
        self.__add_next_version(current, "DELETE", None)
        logger.info(
            f"Deleted {request.resource_type}/{request.id} in tenant {request.tenant_id}"
        )
        return GenericResponse(message="Resource deleted")

    def __get_current(self, tenant_id: str, resource_type: str, id: str) -> ResourceVersion:
        with self.__database.get_db_session() as session:
            repository = session.get_repository(ResourceVersionRepository)
            current = repository.get_latest(tenant_id, resource_type, id)

        if current is None or current.deleted:
            raise ResourceNotFoundError(resource_type, id)

        return current

    @staticmethod
    def __check_version(current: ResourceVersion, resource: Dict[str, Any]) -> None:
        meta = resource.get("meta")
        if not isinstance(meta, dict) or meta.get("versionId") is None:
            return

        if str(meta["versionId"]) != str(current.version_id):
            raise ResourceVersionConflictError(
                f"Resource {current.resource_type}/{current.resource_id} is at version "
                f"{current.version_id}, not {meta['versionId']}"
            )

    def __add_next_version(
        self, current: ResourceVersion, method: str, resource: Dict[str, Any] | None
    ) -> Dict[str, Any] | None:
        now = datetime.now(timezone.utc)
        version_id = current.version_id + 1
        stored = (
            stamp_resource(resource, current.resource_id, version_id, now)
            if resource is not None
            else None
        )

        self.__add_version(
            ResourceVersion(
                tenant_id=current.tenant_id,
                resource_type=current.resource_type,
                resource_id=current.resource_id,
                version_id=version_id,
                method=method,
                is_latest=True,
                deleted=resource is None,
                resource=stored,
                last_updated=now,
            ),
            previous=current,
        )
        return stored

    def __add_version(
        self, version: ResourceVersion, previous: ResourceVersion | None = None
    ) -> None:
        with self.__database.get_db_session() as session:
            repository = session.get_repository(ResourceVersionRepository)
            try:
                repository.add_version(version, previous)
            except IntegrityError:
                raise ResourceVersionConflictError(
                    f"Version {version.version_id} of {version.resource_type}/"
                    f"{version.resource_id} was written concurrently"
                )
