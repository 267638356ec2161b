"""Service layer for the Brain MCP server."""
