"""Node/edge projection of stored resources and links."""

import logging

from brain_mcp.models.schema import GraphData, GraphEdge, GraphNode
from brain_mcp.storage.database import Database
from brain_mcp.storage.resource_repository import ResourceRepository

logger = logging.getLogger(__name__)


class GraphService:
    """Builds the graph view consumed by visualization clients.

    Every resource becomes a node and every link an edge, exactly as
    stored: no filtering, paging, deduplication or cycle handling. Layout
    is the caller's job.
    """

    def __init__(self, database: Database):
        self.resources = ResourceRepository(database)

    def get_graph(self) -> GraphData:
        resources, links = self.resources.list_all_resources_and_links()
        graph = GraphData(
            nodes=[
                GraphNode(id=r.id, label=r.title, type=r.type) for r in resources
            ],
            edges=[
                GraphEdge(source=link.source_id, target=link.target_id)
                for link in links
            ],
        )
        logger.debug(f"Graph projected: {len(graph.nodes)} nodes, {len(graph.edges)} edges")
        return graph
