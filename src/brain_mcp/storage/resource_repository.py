"""Repository for resource storage and retrieval."""
import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from brain_mcp.exceptions import ResourceNotFoundError
from brain_mcp.models.db_models import DBLink, DBResource
from brain_mcp.models.schema import (
    Link,
    NoteContent,
    Resource,
    ResourceSummary,
    ResourceType,
    ensure_timezone_aware,
    utc_now,
)
from brain_mcp.storage.database import Database

logger = logging.getLogger(__name__)


_SUMMARY_COLUMNS = (
    DBResource.id.label("id"),
    DBResource.path.label("path"),
    DBResource.title.label("title"),
    DBResource.resource_type.label("resource_type"),
    DBResource.extra_metadata.label("extra_metadata"),
)


def _db_resource_to_model(db_resource: DBResource) -> Resource:
    return Resource(
        id=db_resource.id,
        type=ResourceType(db_resource.resource_type),
        path=db_resource.path,
        title=db_resource.title or "",
        content=db_resource.content,
        created_at=ensure_timezone_aware(db_resource.created_at),
        updated_at=ensure_timezone_aware(db_resource.updated_at),
        extra_metadata=db_resource.extra_metadata,
    )


def _row_to_summary(row) -> ResourceSummary:
    return ResourceSummary(
        id=row.id,
        path=row.path,
        title=row.title or "",
        type=ResourceType(row.resource_type),
        extra_metadata=row.extra_metadata,
    )


def _db_link_to_model(db_link: DBLink) -> Link:
    return Link(
        source_id=db_link.source_id,
        target_id=db_link.target_id,
        type=db_link.link_type or "",
    )


class ResourceRepository:
    """Repository for the unified resources table.

    Every method runs as one locked session against the shared Database.
    Writes are single statements; there is no transaction spanning a
    lookup and the write that depends on it unless the caller holds
    ``Database.locked()`` around both.
    """

    def __init__(self, database: Database):
        """Initialize the resource repository.

        Args:
            database: Open storage handle shared with the other repositories.
        """
        self.db = database

    def upsert(self, resource: Resource) -> None:
        """Insert a resource, or refresh content of the row with the same ID.

        On conflict only ``content`` and ``updated_at`` change; type, path,
        title, created_at and extra_metadata keep their stored values.

        Args:
            resource: The resource to write.

        Raises:
            StorageError: If the write fails.
        """
        # Keyed by table column names ("type", not the mapped attribute)
        stmt = sqlite_insert(DBResource.__table__).values(
            {
                "id": resource.id,
                "type": resource.type.value,
                "path": resource.path,
                "title": resource.title,
                "content": resource.content,
                "created_at": resource.created_at,
                "updated_at": resource.updated_at,
                "extra_metadata": resource.extra_metadata,
            }
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["id"],
            set_={
                "content": stmt.excluded.content,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        with self.db.session() as session:
            session.execute(stmt)
            session.commit()

    def create(self, resource: Resource) -> Resource:
        """Insert a new resource row.

        Raises:
            StorageError: If the ID already exists or the write fails.
        """
        db_resource = DBResource(
            id=resource.id,
            resource_type=resource.type.value,
            path=resource.path,
            title=resource.title,
            content=resource.content,
            created_at=resource.created_at,
            updated_at=resource.updated_at,
            extra_metadata=resource.extra_metadata,
        )
        with self.db.session() as session:
            session.add(db_resource)
            session.commit()
        logger.debug(f"Created {resource.type.value} resource {resource.id}")
        return resource

    def get(self, resource_id: str) -> Optional[Resource]:
        """Get a full resource by ID, or None if absent."""
        with self.db.session() as session:
            db_resource = session.get(DBResource, resource_id)
            if db_resource is None:
                return None
            return _db_resource_to_model(db_resource)

    def find_id_by_path(self, path: str) -> Optional[str]:
        """Return the ID of the resource stored at exactly this path."""
        with self.db.session() as session:
            return session.scalar(
                select(DBResource.id).where(DBResource.path == path).limit(1)
            )

    def list_summaries(self) -> List[ResourceSummary]:
        """List every resource, most recently updated first.

        Content is left out of the list view.
        """
        with self.db.session() as session:
            rows = session.execute(
                select(*_SUMMARY_COLUMNS)
                .order_by(DBResource.updated_at.desc(), DBResource.id)
            ).all()
            return [_row_to_summary(row) for row in rows]

    def get_content(self, resource_id: str) -> NoteContent:
        """Get the title and body of a resource.

        Raises:
            ResourceNotFoundError: If no row has this ID.
        """
        with self.db.session() as session:
            row = session.execute(
                select(DBResource.title, DBResource.content).where(
                    DBResource.id == resource_id
                )
            ).first()
            if row is None:
                raise ResourceNotFoundError(resource_id)
            return NoteContent(
                id=resource_id, title=row.title or "", content=row.content or ""
            )

    def get_path(self, resource_id: str) -> Optional[str]:
        """Get the stored filesystem path of a resource.

        Returns:
            The path, or None for resources that are not file-backed.

        Raises:
            ResourceNotFoundError: If no row has this ID.
        """
        with self.db.session() as session:
            row = session.execute(
                select(DBResource.path).where(DBResource.id == resource_id)
            ).first()
            if row is None:
                raise ResourceNotFoundError(resource_id)
            return row.path or None

    def update_note(self, resource_id: str, title: str, content: str) -> None:
        """Set title and content and refresh updated_at.

        Raises:
            ResourceNotFoundError: If no row has this ID.
        """
        with self.db.session() as session:
            result = session.execute(
                update(DBResource)
                .where(DBResource.id == resource_id)
                .values(title=title, content=content, updated_at=utc_now())
            )
            session.commit()
            if result.rowcount == 0:
                raise ResourceNotFoundError(resource_id)

    def delete(self, resource_id: str) -> bool:
        """Delete a resource; links and tag rows go with it via cascade.

        Returns:
            True if a row was deleted, False if the ID did not exist.
        """
        with self.db.session() as session:
            result = session.execute(
                delete(DBResource).where(DBResource.id == resource_id)
            )
            session.commit()
            deleted = result.rowcount > 0
        if deleted:
            logger.debug(f"Deleted resource {resource_id}")
        return deleted

    def count(self) -> int:
        """Count all resources."""
        with self.db.session() as session:
            return session.scalar(select(func.count()).select_from(DBResource)) or 0

    def count_by_type(self) -> Dict[str, int]:
        """Count resources per type."""
        with self.db.session() as session:
            rows = session.execute(
                select(DBResource.resource_type, func.count())
                .group_by(DBResource.resource_type)
            ).all()
            return {resource_type: count for resource_type, count in rows}

    def list_all_resources_and_links(self) -> Tuple[List[ResourceSummary], List[Link]]:
        """Read both tables in full, under one lock, with no filtering."""
        with self.db.session() as session:
            rows = session.execute(select(*_SUMMARY_COLUMNS)).all()
            db_links = session.scalars(select(DBLink)).all()
            return (
                [_row_to_summary(row) for row in rows],
                [_db_link_to_model(link) for link in db_links],
            )
