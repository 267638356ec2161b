"""Common test fixtures for the Brain MCP server."""

import tempfile
from pathlib import Path

import pytest

from brain_mcp.config import config
from brain_mcp.observability import metrics
from brain_mcp.services.graph_service import GraphService
from brain_mcp.services.ingest_service import IngestionService
from brain_mcp.services.note_service import NoteService
from brain_mcp.services.resource_service import ResourceService
from brain_mcp.storage.database import Database
from brain_mcp.storage.link_repository import LinkRepository
from brain_mcp.storage.resource_repository import ResourceRepository
from brain_mcp.storage.tag_repository import TagRepository


@pytest.fixture
def temp_dirs():
    """Create temporary directories for the vault and database."""
    with tempfile.TemporaryDirectory() as vault_dir:
        with tempfile.TemporaryDirectory() as db_dir:
            yield Path(vault_dir).resolve(), Path(db_dir).resolve()


@pytest.fixture
def test_config(temp_dirs, monkeypatch):
    """Configure with test paths (auto-restored even on crash)."""
    vault_dir, db_dir = temp_dirs
    monkeypatch.setattr(config, "vault_dir", vault_dir)
    monkeypatch.setattr(config, "database_path", db_dir / "test_brain.db")
    monkeypatch.setattr(config, "lock_timeout", 5.0)
    monkeypatch.setattr(config, "log_level", config.log_level)
    monkeypatch.setattr(config, "log_dir", config.log_dir)
    yield config


@pytest.fixture
def database(test_config):
    """Open an in-memory database for one test."""
    db = Database.in_memory()
    yield db
    db.close()


@pytest.fixture
def resource_repository(database):
    return ResourceRepository(database)


@pytest.fixture
def link_repository(database):
    return LinkRepository(database)


@pytest.fixture
def tag_repository(database):
    return TagRepository(database)


@pytest.fixture
def ingest_service(database):
    return IngestionService(database)


@pytest.fixture
def note_service(database, test_config):
    return NoteService(database, vault_dir=test_config.vault_dir)


@pytest.fixture
def resource_service(database):
    return ResourceService(database)


@pytest.fixture
def graph_service(database):
    return GraphService(database)


@pytest.fixture
def scan_root():
    """A separate directory tree to ingest."""
    with tempfile.TemporaryDirectory() as root:
        yield Path(root).resolve()


@pytest.fixture(autouse=True)
def _reset_metrics():
    """Keep the global metrics collector isolated between tests."""
    metrics.reset()
    yield
    metrics.reset()
