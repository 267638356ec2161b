"""Repository for link storage and retrieval."""
import logging
from typing import List, Optional

from sqlalchemy import delete, func, select

from brain_mcp.exceptions import ErrorCode, LinkError, ResourceNotFoundError
from brain_mcp.models.db_models import DBLink, DBResource
from brain_mcp.models.schema import Link
from brain_mcp.storage.database import Database

logger = logging.getLogger(__name__)


def _to_model(db_link: DBLink) -> Link:
    return Link(
        source_id=db_link.source_id,
        target_id=db_link.target_id,
        type=db_link.link_type or "",
    )


class LinkRepository:
    """Repository for managing directed links between resources.

    One edge per ordered (source, target) pair; the edge kind is an
    attribute of that edge, not part of its identity.
    """

    def __init__(self, database: Database):
        """Initialize the link repository.

        Args:
            database: Open storage handle shared with the other repositories.
        """
        self.db = database

    def create(self, link: Link) -> Link:
        """Create a new link in the database.

        Args:
            link: The Link object to create.

        Returns:
            The created Link object.

        Raises:
            ResourceNotFoundError: If either endpoint does not exist.
            LinkError: If a link from source to target already exists.
        """
        with self.db.session() as session:
            for endpoint in (link.source_id, link.target_id):
                if session.get(DBResource, endpoint) is None:
                    raise ResourceNotFoundError(endpoint)

            existing = session.get(DBLink, (link.source_id, link.target_id))
            if existing is not None:
                raise LinkError(
                    f"Link already exists: {link.source_id} -> {link.target_id} "
                    f"({existing.link_type})",
                    source_id=link.source_id,
                    target_id=link.target_id,
                    code=ErrorCode.LINK_ALREADY_EXISTS,
                )

            session.add(
                DBLink(
                    source_id=link.source_id,
                    target_id=link.target_id,
                    link_type=link.type,
                )
            )
            session.commit()

        logger.debug(f"Linked {link.source_id} -> {link.target_id} ({link.type})")
        return link

    def get(self, source_id: str, target_id: str) -> Optional[Link]:
        """Get the link from source to target, or None."""
        with self.db.session() as session:
            db_link = session.get(DBLink, (source_id, target_id))
            if db_link is None:
                return None
            return _to_model(db_link)

    def get_outgoing(self, resource_id: str) -> List[Link]:
        """Get all links whose source is this resource."""
        with self.db.session() as session:
            db_links = session.scalars(
                select(DBLink).where(DBLink.source_id == resource_id)
            ).all()
            return [_to_model(link) for link in db_links]

    def get_incoming(self, resource_id: str) -> List[Link]:
        """Get all links whose target is this resource."""
        with self.db.session() as session:
            db_links = session.scalars(
                select(DBLink).where(DBLink.target_id == resource_id)
            ).all()
            return [_to_model(link) for link in db_links]

    def get_all_for_resource(self, resource_id: str) -> List[Link]:
        """Get outgoing then incoming links; a self-link is listed once."""
        seen = set()
        result = []
        for link in self.get_outgoing(resource_id) + self.get_incoming(resource_id):
            key = (link.source_id, link.target_id)
            if key not in seen:
                seen.add(key)
                result.append(link)
        return result

    def get_all(self) -> List[Link]:
        """Get every stored link."""
        with self.db.session() as session:
            return [_to_model(link) for link in session.scalars(select(DBLink)).all()]

    def delete(self, source_id: str, target_id: str) -> bool:
        """Delete the link from source to target.

        Returns:
            True if a link was deleted, False otherwise.
        """
        with self.db.session() as session:
            result = session.execute(
                delete(DBLink).where(
                    (DBLink.source_id == source_id) & (DBLink.target_id == target_id)
                )
            )
            session.commit()
            return result.rowcount > 0

    def count(self) -> int:
        """Count all links."""
        with self.db.session() as session:
            return session.scalar(select(func.count()).select_from(DBLink)) or 0
