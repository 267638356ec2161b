"""Storage layer for the Brain MCP server."""

from brain_mcp.storage.database import Database
from brain_mcp.storage.link_repository import LinkRepository
from brain_mcp.storage.resource_repository import ResourceRepository
from brain_mcp.storage.tag_repository import TagRepository

__all__ = [
    "Database",
    "ResourceRepository",
    "LinkRepository",
    "TagRepository",
]
