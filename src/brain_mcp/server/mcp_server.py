"""MCP server implementation for the knowledge base."""

import json
import logging
import uuid
from pathlib import Path
from typing import Any, Optional

from mcp.server.fastmcp import FastMCP

from brain_mcp.config import config
from brain_mcp.exceptions import BrainError, ResourceNotFoundError
from brain_mcp.models.schema import DEFAULT_LINK_TYPE
from brain_mcp.observability import metrics, timed_operation
from brain_mcp.services.graph_service import GraphService
from brain_mcp.services.ingest_service import IngestionService
from brain_mcp.services.note_service import NoteService
from brain_mcp.services.resource_service import ResourceService
from brain_mcp.storage.database import Database

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 500
MAX_CONTENT_LENGTH = 1_000_000  # 1 MB


def _validate_input_lengths(
    title: Optional[str] = None, content: Optional[str] = None
) -> None:
    """Validate input string lengths at the MCP boundary."""
    if title and len(title) > MAX_TITLE_LENGTH:
        raise ValueError(
            f"Title exceeds maximum length of {MAX_TITLE_LENGTH} characters"
        )
    if content and len(content) > MAX_CONTENT_LENGTH:
        raise ValueError(
            f"Content exceeds maximum length of {MAX_CONTENT_LENGTH} characters"
        )


def _json(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False)


class BrainMcpServer:
    """MCP server exposing the knowledge base as request/response tools.

    Every tool returns a JSON document. Failures come back as
    ``{"error": {...}}`` instead of raising, so a client always gets a
    well-formed reply.
    """

    def __init__(self, database: Optional[Database] = None, vault_dir: Optional[Path] = None):
        """Initialize the MCP server.

        Args:
            database: Open storage handle. When None, one is opened from
                config and closed again by close().
            vault_dir: Directory for new notes. Defaults to config.vault_dir.
        """
        self.mcp = FastMCP(config.server_name)
        self._owns_database = database is None
        self.database = database if database is not None else Database().open()

        # Services share the single database handle
        self.ingest_service = IngestionService(self.database)
        self.note_service = NoteService(self.database, vault_dir=vault_dir)
        self.resource_service = ResourceService(self.database)
        self.graph_service = GraphService(self.database)

        self._register_tools()
        logger.info("Brain MCP server initialized")

    def close(self) -> None:
        """Release the database if this server opened it."""
        if self._owns_database:
            self.database.close()

    def format_error_response(self, error: Exception) -> str:
        """Format an error as a JSON error document.

        Args:
            error: The exception that occurred

        Returns:
            JSON text with an ``error`` object
        """
        # Unique error ID for traceability in logs
        error_id = str(uuid.uuid4())[:8]

        if isinstance(error, BrainError):
            logger.error(
                f"[{error.code.name}] [{error_id}]: {error.message}",
                extra={"error_details": error.details},
            )
            return _json({"error": error.to_dict()})
        elif isinstance(error, ValueError):
            logger.error(f"Validation error [{error_id}]: {str(error)}")
            return _json({"error": {"error": "ValueError", "message": str(error), "ref": error_id}})
        elif isinstance(error, (IOError, OSError)):
            # Don't expose paths or OS details to the client
            logger.error(f"File system error [{error_id}]: {str(error)}", exc_info=True)
            return _json({"error": {"error": "OSError", "message": "A file system error occurred", "ref": error_id}})
        else:
            logger.error(f"Unexpected error [{error_id}]: {str(error)}", exc_info=True)
            return _json({"error": {"error": "InternalError", "message": "An unexpected error occurred", "ref": error_id}})

    def _register_tools(self) -> None:
        """Register MCP tools."""

        @self.mcp.tool(name="brain_scan_vault")
        def brain_scan_vault(root_path: str) -> str:
            """Index every file below a directory.

            Notes (.md) are stored with their text, other files as opaque
            entries. Rescanning keeps existing IDs and refreshes content.
            Args:
                root_path: Directory to scan
            """
            with timed_operation("brain_scan_vault", root=root_path) as op:
                try:
                    report = self.ingest_service.scan_vault(root_path)
                    metrics.record_scan(Path(root_path).resolve(), report)
                    op["scanned"] = report.total
                    return _json(report.to_dict())
                except Exception as e:
                    op["error"] = e
                    return self.format_error_response(e)

        @self.mcp.tool(name="brain_list_resources")
        def brain_list_resources() -> str:
            """List all resources, most recently updated first (no content)."""
            with timed_operation("brain_list_resources") as op:
                try:
                    resources = self.resource_service.list_resources()
                    op["result_count"] = len(resources)
                    return _json([r.model_dump(mode="json") for r in resources])
                except Exception as e:
                    op["error"] = e
                    return self.format_error_response(e)

        @self.mcp.tool(name="brain_create_link_resource")
        def brain_create_link_resource(title: str, url: str) -> str:
            """Store a bookmark.
            Args:
                title: Display title
                url: Target URL
            """
            with timed_operation("brain_create_link_resource", title=title[:30]) as op:
                try:
                    _validate_input_lengths(title=title)
                    resource = self.resource_service.create_link_resource(title, url)
                    op["resource_id"] = resource.id
                    return _json({"id": resource.id})
                except Exception as e:
                    op["error"] = e
                    return self.format_error_response(e)

        @self.mcp.tool(name="brain_create_task_resource")
        def brain_create_task_resource(title: str) -> str:
            """Store a to-do item (status "todo").
            Args:
                title: Task description
            """
            with timed_operation("brain_create_task_resource", title=title[:30]) as op:
                try:
                    _validate_input_lengths(title=title)
                    resource = self.resource_service.create_task_resource(title)
                    op["resource_id"] = resource.id
                    return _json({"id": resource.id})
                except Exception as e:
                    op["error"] = e
                    return self.format_error_response(e)

        @self.mcp.tool(name="brain_get_graph")
        def brain_get_graph() -> str:
            """Get every resource as a node and every link as an edge."""
            with timed_operation("brain_get_graph") as op:
                try:
                    graph = self.graph_service.get_graph()
                    op["nodes"] = len(graph.nodes)
                    op["edges"] = len(graph.edges)
                    return graph.model_dump_json()
                except Exception as e:
                    op["error"] = e
                    return self.format_error_response(e)

        @self.mcp.tool(name="brain_create_note")
        def brain_create_note(title: str, content: str) -> str:
            """Create a markdown note in the vault directory.
            Args:
                title: Note title; the file name is derived from it
                content: Markdown body
            """
            with timed_operation("brain_create_note", title=title[:30]) as op:
                try:
                    _validate_input_lengths(title=title, content=content)
                    note = self.note_service.create_note(title, content)
                    op["note_id"] = note.id
                    return _json({"id": note.id})
                except Exception as e:
                    op["error"] = e
                    return self.format_error_response(e)

        @self.mcp.tool(name="brain_update_note")
        def brain_update_note(note_id: str, title: str, content: str) -> str:
            """Replace a note's title and content (file and database).
            Args:
                note_id: ID of the note
                title: New title
                content: New markdown body
            """
            with timed_operation("brain_update_note", note_id=note_id) as op:
                try:
                    _validate_input_lengths(title=title, content=content)
                    self.note_service.update_note(note_id, title, content)
                    return _json({"ok": True})
                except Exception as e:
                    op["error"] = e
                    return self.format_error_response(e)

        @self.mcp.tool(name="brain_delete_note")
        def brain_delete_note(note_id: str) -> str:
            """Delete a note's file and row. Unknown IDs are not an error.
            Args:
                note_id: ID of the note
            """
            with timed_operation("brain_delete_note", note_id=note_id) as op:
                try:
                    self.note_service.delete_note(note_id)
                    return _json({"ok": True})
                except Exception as e:
                    op["error"] = e
                    return self.format_error_response(e)

        @self.mcp.tool(name="brain_get_note_content")
        def brain_get_note_content(note_id: str) -> str:
            """Get a note's title and content.
            Args:
                note_id: ID of the note
            """
            with timed_operation("brain_get_note_content", note_id=note_id) as op:
                try:
                    note = self.note_service.get_note_content(note_id)
                    return note.model_dump_json()
                except Exception as e:
                    op["error"] = e
                    return self.format_error_response(e)

        @self.mcp.tool(name="brain_get_resource")
        def brain_get_resource(resource_id: str) -> str:
            """Get one resource's metadata and content.
            Args:
                resource_id: ID of the resource
            """
            with timed_operation("brain_get_resource", resource_id=resource_id) as op:
                try:
                    resource = self.resource_service.get_resource(resource_id)
                    if resource is None:
                        raise ResourceNotFoundError(resource_id)
                    return _json(resource.model_dump(mode="json"))
                except Exception as e:
                    op["error"] = e
                    return self.format_error_response(e)

        @self.mcp.tool(name="brain_delete_resource")
        def brain_delete_resource(resource_id: str) -> str:
            """Delete any resource row; its links and tags go with it.
            Files on disk are left alone (use brain_delete_note for notes).
            Args:
                resource_id: ID of the resource
            """
            with timed_operation("brain_delete_resource", resource_id=resource_id) as op:
                try:
                    deleted = self.resource_service.delete_resource(resource_id)
                    return _json({"ok": True, "deleted": deleted})
                except Exception as e:
                    op["error"] = e
                    return self.format_error_response(e)

        @self.mcp.tool(name="brain_link_resources")
        def brain_link_resources(
            source_id: str, target_id: str, link_type: str = DEFAULT_LINK_TYPE
        ) -> str:
            """Create a directed link between two resources.
            Args:
                source_id: ID of the source resource
                target_id: ID of the target resource
                link_type: Edge kind, e.g. wikilink, reference, parent
            """
            with timed_operation("brain_link_resources", source=source_id, target=target_id) as op:
                try:
                    link = self.resource_service.link_resources(source_id, target_id, link_type)
                    return _json(link.model_dump(mode="json"))
                except Exception as e:
                    op["error"] = e
                    return self.format_error_response(e)

        @self.mcp.tool(name="brain_unlink_resources")
        def brain_unlink_resources(source_id: str, target_id: str) -> str:
            """Remove the link from source to target.
            Args:
                source_id: ID of the source resource
                target_id: ID of the target resource
            """
            with timed_operation("brain_unlink_resources", source=source_id, target=target_id) as op:
                try:
                    removed = self.resource_service.unlink_resources(source_id, target_id)
                    return _json({"ok": True, "removed": removed})
                except Exception as e:
                    op["error"] = e
                    return self.format_error_response(e)

        @self.mcp.tool(name="brain_get_links")
        def brain_get_links(resource_id: str) -> str:
            """List links touching a resource (outgoing first).
            Args:
                resource_id: ID of the resource
            """
            with timed_operation("brain_get_links", resource_id=resource_id) as op:
                try:
                    links = self.resource_service.get_links(resource_id)
                    op["result_count"] = len(links)
                    return _json([link.model_dump(mode="json") for link in links])
                except Exception as e:
                    op["error"] = e
                    return self.format_error_response(e)

        @self.mcp.tool(name="brain_tag_resource")
        def brain_tag_resource(resource_id: str, tag: str) -> str:
            """Attach a tag to a resource.
            Args:
                resource_id: ID of the resource
                tag: Tag name
            """
            with timed_operation("brain_tag_resource", resource_id=resource_id) as op:
                try:
                    self.resource_service.tag_resource(resource_id, tag)
                    tags = self.resource_service.get_tags(resource_id)
                    return _json({"ok": True, "tags": [t.name for t in tags]})
                except Exception as e:
                    op["error"] = e
                    return self.format_error_response(e)

        @self.mcp.tool(name="brain_untag_resource")
        def brain_untag_resource(resource_id: str, tag: str) -> str:
            """Detach a tag from a resource.
            Args:
                resource_id: ID of the resource
                tag: Tag name
            """
            with timed_operation("brain_untag_resource", resource_id=resource_id) as op:
                try:
                    removed = self.resource_service.untag_resource(resource_id, tag)
                    return _json({"ok": True, "removed": removed})
                except Exception as e:
                    op["error"] = e
                    return self.format_error_response(e)

        @self.mcp.tool(name="brain_find_by_tag")
        def brain_find_by_tag(tag: str) -> str:
            """List the IDs of resources carrying a tag.
            Args:
                tag: Tag name
            """
            with timed_operation("brain_find_by_tag", tag=tag[:30]) as op:
                try:
                    ids = self.resource_service.find_by_tag(tag)
                    op["result_count"] = len(ids)
                    return _json(ids)
                except Exception as e:
                    op["error"] = e
                    return self.format_error_response(e)

        @self.mcp.tool(name="brain_cleanup_tags")
        def brain_cleanup_tags() -> str:
            """Delete tags that no resource carries any more."""
            with timed_operation("brain_cleanup_tags") as op:
                try:
                    removed = self.resource_service.cleanup_tags()
                    op["removed"] = removed
                    return _json({"ok": True, "removed": removed})
                except Exception as e:
                    op["error"] = e
                    return self.format_error_response(e)

        @self.mcp.tool(name="brain_status")
        def brain_status() -> str:
            """Row counts, per-tool call metrics and vault scan totals."""
            with timed_operation("brain_status") as op:
                try:
                    return _json(
                        {
                            "server": config.server_name,
                            "version": config.server_version,
                            "storage": self.resource_service.get_stats(),
                            "metrics": metrics.snapshot(),
                        }
                    )
                except Exception as e:
                    op["error"] = e
                    return self.format_error_response(e)

    def run(self) -> None:
        """Run the MCP server."""
        self.mcp.run()
