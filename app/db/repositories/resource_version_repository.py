from collections.abc import Sequence
import logging

from sqlalchemy import select, update
from sqlalchemy.exc import DatabaseError

from app.db.decorator import repository
from app.db.entities.resource_version import ResourceVersion
from app.db.repositories.repository_base import RepositoryBase

logger = logging.getLogger(__name__)


@repository(ResourceVersion)
class ResourceVersionRepository(RepositoryBase):
    def get_latest(
        self, tenant_id: str, resource_type: str, resource_id: str
    ) -> ResourceVersion | None:
        stmt = select(ResourceVersion).filter_by(
            tenant_id=tenant_id,
            resource_type=resource_type,
            resource_id=resource_id,
            is_latest=True,
        )
        return self.db_session.session.execute(stmt).scalars().first()

    def get_version(
        self, tenant_id: str, resource_type: str, resource_id: str, version_id: int
    ) -> ResourceVersion | None:
        stmt = select(ResourceVersion).filter_by(
            tenant_id=tenant_id,
            resource_type=resource_type,
            resource_id=resource_id,
            version_id=version_id,
        )
        return self.db_session.session.execute(stmt).scalars().first()

    def find_latest(self, tenant_id: str, resource_type: str) -> Sequence[ResourceVersion]:
        """
        Returns the current version of every resource of a type that is not deleted
        """
        stmt = (
            select(ResourceVersion)
            .where(
                ResourceVersion.tenant_id == tenant_id,
                ResourceVersion.resource_type == resource_type,
                ResourceVersion.is_latest.is_(True),
                ResourceVersion.deleted.is_(False),
            )
            .order_by(ResourceVersion.last_updated.desc(), ResourceVersion.resource_id)
        )
        return self.db_session.session.execute(stmt).scalars().all()

    def find_history(
        self, tenant_id: str, resource_type: str, resource_id: str | None = None
    ) -> Sequence[ResourceVersion]:
        """
        Returns all versions of a type, or of one resource, newest first
        """
        conditions = [
            ResourceVersion.tenant_id == tenant_id,
            ResourceVersion.resource_type == resource_type,
        ]
        if resource_id is not None:
            conditions.append(ResourceVersion.resource_id == resource_id)

        stmt = (
            select(ResourceVersion)
            .where(*conditions)
            .order_by(
                ResourceVersion.last_updated.desc(),
                ResourceVersion.resource_id,
                ResourceVersion.version_id.desc(),
            )
        )
        return self.db_session.session.execute(stmt).scalars().all()

    def add_version(
        self, data: ResourceVersion, previous: ResourceVersion | None = None
    ) -> ResourceVersion:
        """
        Stores a new version and clears the latest flag of the previous version in one transaction
        """
        try:
            if previous is not None:
                self.db_session.session.execute(
                    update(ResourceVersion)
                    .where(ResourceVersion.id == previous.id)
                    .values(is_latest=False)
                )
            self.db_session.add(data)
            self.db_session.commit()
            return data
        except DatabaseError as e:
            self.db_session.rollback()
            logger.error(
                f"Failed to add version {data.version_id} of {data.resource_type}/{data.resource_id}: {e}"
            )
            raise
