"""Data models for the Brain MCP server."""
