"""Data models for the Brain MCP server."""

import datetime
import uuid
from datetime import timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


def utc_now() -> datetime.datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Current time with UTC timezone info attached.
    """
    return datetime.datetime.now(timezone.utc)


def ensure_timezone_aware(dt_value: Optional[datetime.datetime]) -> datetime.datetime:
    """Ensure a datetime is timezone-aware, treating naive datetimes as UTC.

    SQLite hands back naive datetimes; everything stored is written in UTC.

    Args:
        dt_value: A datetime that may or may not have timezone info.

    Returns:
        The same datetime with UTC timezone if it was naive, otherwise unchanged.
    """
    if dt_value is None:
        return utc_now()
    if dt_value.tzinfo is None:
        return dt_value.replace(tzinfo=timezone.utc)
    return dt_value


def generate_id() -> str:
    """Mint a new opaque resource identifier (random UUID4 string)."""
    return str(uuid.uuid4())


class ResourceType(str, Enum):
    """Kinds of resources tracked in the unified resources table."""

    NOTE = "note"  # Markdown note, mirrored to disk
    FILE = "file"  # Any other file found in a scanned directory
    LINK = "link"  # Bookmark, url kept in extra_metadata
    TASK = "task"  # To-do item, status kept in extra_metadata


DEFAULT_LINK_TYPE = "reference"


class Resource(BaseModel):
    """A trackable entity: file, note, link or task."""

    id: str = Field(default_factory=generate_id, description="Stable resource ID")
    type: ResourceType = Field(..., description="Kind of resource")
    path: Optional[str] = Field(
        default=None, description="Filesystem path for file-backed resources"
    )
    title: str = Field(default="", description="Display name")
    content: Optional[str] = Field(default=None, description="Text body")
    created_at: datetime.datetime = Field(
        default_factory=utc_now, description="When the resource was created (UTC)"
    )
    updated_at: datetime.datetime = Field(
        default_factory=utc_now, description="When the resource was last written (UTC)"
    )
    extra_metadata: Optional[Dict[str, Any]] = Field(
        default=None, description="Type-specific payload, e.g. url or status"
    )

    model_config = {"validate_assignment": True, "extra": "forbid"}

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        """Validate that the ID is not blank."""
        if not v or not v.strip():
            raise ValueError("Resource ID cannot be empty")
        return v


class ResourceSummary(BaseModel):
    """List view of a resource; content is left out."""

    id: str
    path: Optional[str] = None
    title: str = ""
    type: ResourceType
    extra_metadata: Optional[Dict[str, Any]] = None


class NoteContent(BaseModel):
    """Title and body of a single resource."""

    id: str
    title: str = ""
    content: str = ""


class Link(BaseModel):
    """A directed edge between two resources."""

    source_id: str = Field(..., description="ID of the source resource")
    target_id: str = Field(..., description="ID of the target resource")
    type: str = Field(
        default=DEFAULT_LINK_TYPE,
        description="Edge kind, e.g. wikilink, reference, parent",
    )

    model_config = {
        "validate_assignment": True,
        "extra": "forbid",
        "frozen": True,  # Links are immutable
    }

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        """Strip the edge kind, falling back to the default. Case is kept."""
        v = v.strip()
        return v or DEFAULT_LINK_TYPE


class Tag(BaseModel):
    """A tag for categorizing resources."""

    name: str = Field(..., description="Tag name")

    model_config = {"validate_assignment": True, "frozen": True}

    def __str__(self) -> str:
        """Return string representation of tag."""
        return self.name


class GraphNode(BaseModel):
    """A resource as seen by the graph view."""

    id: str
    label: str = Field(default="", description="Resource title")
    type: ResourceType


class GraphEdge(BaseModel):
    """A stored link as seen by the graph view."""

    source: str
    target: str


class GraphData(BaseModel):
    """Complete node/edge view of the store."""

    nodes: List[GraphNode] = Field(default_factory=list)
    edges: List[GraphEdge] = Field(default_factory=list)
