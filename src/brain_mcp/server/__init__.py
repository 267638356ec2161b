"""MCP boundary for the Brain MCP server."""
