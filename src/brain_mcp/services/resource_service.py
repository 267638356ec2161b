"""Service layer for metadata-only resources, links and tags."""

import logging
from typing import Any, Dict, List, Optional

from brain_mcp.exceptions import ValidationError
from brain_mcp.models.schema import (
    DEFAULT_LINK_TYPE,
    Link,
    Resource,
    ResourceSummary,
    ResourceType,
    Tag,
)
from brain_mcp.storage.database import Database
from brain_mcp.storage.link_repository import LinkRepository
from brain_mcp.storage.resource_repository import ResourceRepository
from brain_mcp.storage.tag_repository import TagRepository

logger = logging.getLogger(__name__)

TASK_STATUS_TODO = "todo"


def _require_title(title: str) -> str:
    if not title or not title.strip():
        raise ValidationError("Title cannot be empty", field="title", value=title)
    return title


class ResourceService:
    """Operations on resources that have no file behind them, plus the
    link and tag tables that connect any kind of resource."""

    def __init__(self, database: Database):
        """Initialize the service.

        Args:
            database: Open storage handle shared by the repositories.
        """
        self.resources = ResourceRepository(database)
        self.links = LinkRepository(database)
        self.tags = TagRepository(database)

    def _create_metadata_resource(
        self, resource_type: ResourceType, title: str, extra_metadata: Dict[str, Any]
    ) -> Resource:
        resource = Resource(
            type=resource_type,
            title=_require_title(title),
            extra_metadata=extra_metadata,
        )
        self.resources.create(resource)
        logger.info(f"Created {resource_type.value} resource {resource.id}")
        return resource

    def create_link_resource(self, title: str, url: str) -> Resource:
        """Store a bookmark; the url lives in extra_metadata."""
        return self._create_metadata_resource(
            ResourceType.LINK, title, {"url": url}
        )

    def create_task_resource(self, title: str) -> Resource:
        """Store a to-do item with status "todo"."""
        return self._create_metadata_resource(
            ResourceType.TASK, title, {"status": TASK_STATUS_TODO}
        )

    def list_resources(self) -> List[ResourceSummary]:
        """List all resources, most recently updated first."""
        return self.resources.list_summaries()

    def get_resource(self, resource_id: str) -> Optional[Resource]:
        return self.resources.get(resource_id)

    def delete_resource(self, resource_id: str) -> bool:
        """Delete any resource row without touching files on disk."""
        return self.resources.delete(resource_id)

    # =========================================================================
    # Links
    # =========================================================================

    def link_resources(
        self, source_id: str, target_id: str, link_type: str = DEFAULT_LINK_TYPE
    ) -> Link:
        """Create a directed link; both resources must exist.

        Raises:
            ResourceNotFoundError: If either endpoint is missing.
            LinkError: If the pair is already linked.
        """
        return self.links.create(
            Link(source_id=source_id, target_id=target_id, type=link_type)
        )

    def unlink_resources(self, source_id: str, target_id: str) -> bool:
        return self.links.delete(source_id, target_id)

    def get_links(self, resource_id: str) -> List[Link]:
        """Links touching a resource, outgoing first."""
        return self.links.get_all_for_resource(resource_id)

    # =========================================================================
    # Tags
    # =========================================================================

    def tag_resource(self, resource_id: str, tag: str) -> Tag:
        return self.tags.add_to_resource(resource_id, tag)

    def untag_resource(self, resource_id: str, tag: str) -> bool:
        return self.tags.remove_from_resource(resource_id, tag)

    def get_tags(self, resource_id: str) -> List[Tag]:
        return self.tags.get_for_resource(resource_id)

    def find_by_tag(self, tag: str) -> List[str]:
        return self.tags.find_resource_ids_by_tag(tag)

    def cleanup_tags(self) -> int:
        """Delete tags no resource carries any more."""
        return self.tags.delete_unused()

    # =========================================================================
    # Status
    # =========================================================================

    def get_stats(self) -> Dict[str, Any]:
        """Row counts for the status view."""
        return {
            "resources": self.resources.count(),
            "by_type": self.resources.count_by_type(),
            "links": self.links.count(),
            "tags": len(self.tags.get_all()),
        }
