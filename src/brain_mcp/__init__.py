"""
Brain MCP - a local-first personal knowledge base exposed as an MCP server.
This package indexes a directory of files and notes into SQLite, tracks
directed links between resources, and serves a graph view plus CRUD
operations for notes, links and tasks.

This version uses synchronous operations.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("brain-mcp")
except PackageNotFoundError:
    __version__ = "0.3.0"
