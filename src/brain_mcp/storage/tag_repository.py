"""Repository for tag storage and retrieval."""
import logging
from typing import List

from sqlalchemy import delete, select, text

from brain_mcp.exceptions import ResourceNotFoundError, TagError
from brain_mcp.models.db_models import DBResource, DBTag, resource_tags
from brain_mcp.models.schema import Tag
from brain_mcp.storage.database import Database

logger = logging.getLogger(__name__)


def _normalize(tag_name: str) -> str:
    name = (tag_name or "").strip()
    if not name:
        raise TagError("Tag name cannot be empty", tag_name=tag_name)
    return name


class TagRepository:
    """Repository for tags and the resource_tags join table."""

    def __init__(self, database: Database):
        """Initialize the tag repository.

        Args:
            database: Open storage handle shared with the other repositories.
        """
        self.db = database

    def get_all(self) -> List[Tag]:
        """Get all tags, sorted by name."""
        with self.db.session() as session:
            names = session.scalars(select(DBTag.name).order_by(DBTag.name)).all()
            return [Tag(name=name) for name in names]

    def add_to_resource(self, resource_id: str, tag_name: str) -> Tag:
        """Attach a tag to a resource, creating the tag if needed.

        Raises:
            ResourceNotFoundError: If the resource does not exist.
        """
        name = _normalize(tag_name)
        with self.db.session() as session:
            if session.get(DBResource, resource_id) is None:
                raise ResourceNotFoundError(resource_id)
            session.execute(
                text("INSERT OR IGNORE INTO tags (name) VALUES (:name)"),
                {"name": name},
            )
            tag_id = session.scalar(select(DBTag.id).where(DBTag.name == name))
            session.execute(
                text(
                    "INSERT OR IGNORE INTO resource_tags (resource_id, tag_id) "
                    "VALUES (:resource_id, :tag_id)"
                ),
                {"resource_id": resource_id, "tag_id": tag_id},
            )
            session.commit()
        return Tag(name=name)

    def remove_from_resource(self, resource_id: str, tag_name: str) -> bool:
        """Detach a tag from a resource.

        Returns:
            True if the tag was attached and is now removed.
        """
        name = _normalize(tag_name)
        with self.db.session() as session:
            tag_id = session.scalar(select(DBTag.id).where(DBTag.name == name))
            if tag_id is None:
                return False
            result = session.execute(
                delete(resource_tags).where(
                    (resource_tags.c.resource_id == resource_id)
                    & (resource_tags.c.tag_id == tag_id)
                )
            )
            session.commit()
            return result.rowcount > 0

    def get_for_resource(self, resource_id: str) -> List[Tag]:
        """Get the tags attached to a resource, sorted by name."""
        with self.db.session() as session:
            names = session.scalars(
                select(DBTag.name)
                .join(resource_tags, DBTag.id == resource_tags.c.tag_id)
                .where(resource_tags.c.resource_id == resource_id)
                .order_by(DBTag.name)
            ).all()
            return [Tag(name=name) for name in names]

    def find_resource_ids_by_tag(self, tag_name: str) -> List[str]:
        """Find all resource IDs that carry a tag."""
        with self.db.session() as session:
            result = session.execute(
                select(resource_tags.c.resource_id)
                .select_from(resource_tags)
                .join(DBTag, resource_tags.c.tag_id == DBTag.id)
                .where(DBTag.name == tag_name.strip())
            ).all()
            return [row[0] for row in result]

    def delete_unused(self) -> int:
        """Delete tags not attached to any resource.

        Returns:
            Number of tags deleted.
        """
        with self.db.session() as session:
            result = session.execute(
                delete(DBTag)
                .where(~DBTag.id.in_(select(resource_tags.c.tag_id).distinct()))
                .execution_options(synchronize_session=False)
            )
            session.commit()
            count = result.rowcount
        if count:
            logger.info(f"Deleted {count} unused tags")
        return count
