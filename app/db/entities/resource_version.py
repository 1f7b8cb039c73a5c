from datetime import datetime
from typing import Any, Dict
from uuid import UUID, uuid4

from sqlalchemy import (
    JSON,
    TIMESTAMP,
    Boolean,
    Index,
    Integer,
    PrimaryKeyConstraint,
    String,
    UniqueConstraint,
    types,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.db.entities.base import Base


class ResourceVersion(Base):
    """
    One version of a resource in a tenant. Deletions are stored as a version without a resource.
    """

    __tablename__ = "resource_versions"
    __table_args__ = (
        PrimaryKeyConstraint("id"),
        UniqueConstraint("tenant_id", "resource_type", "resource_id", "version_id"),
        Index("ix_resource_versions_latest", "tenant_id", "resource_type", "is_latest"),
    )

    id: Mapped[UUID] = mapped_column(
        "id",
        types.Uuid,
        nullable=False,
        default=uuid4,
    )
    tenant_id: Mapped[str] = mapped_column("tenant_id", String, nullable=False)
    resource_type: Mapped[str] = mapped_column("resource_type", String, nullable=False)
    resource_id: Mapped[str] = mapped_column("resource_id", String, nullable=False)
    version_id: Mapped[int] = mapped_column("version_id", Integer, nullable=False)
    method: Mapped[str] = mapped_column("method", String, nullable=False)
    is_latest: Mapped[bool] = mapped_column("is_latest", Boolean, nullable=False, default=True)
    deleted: Mapped[bool] = mapped_column("deleted", Boolean, nullable=False, default=False)
    resource: Mapped[Dict[str, Any] | None] = mapped_column("resource", JSON, nullable=True)
    last_updated: Mapped[datetime] = mapped_column(
        "last_updated", TIMESTAMP(timezone=True), nullable=False
    )
