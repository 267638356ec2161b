#!/usr/bin/env python
"""Main entry point for the Brain MCP server."""
import argparse
import atexit
import logging
import os
import sys
from pathlib import Path

import pydantic

from brain_mcp.config import config
from brain_mcp.exceptions import BrainError, ConfigurationError
from brain_mcp.observability import configure_logging
from brain_mcp.server.mcp_server import BrainMcpServer
from brain_mcp.storage.database import Database


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Brain MCP Server")
    parser.add_argument(
        "--vault-dir",
        help="Directory that new notes are written into",
        type=str,
        default=os.environ.get("BRAIN_VAULT_DIR")
    )
    parser.add_argument(
        "--database-path",
        help="SQLite database file path",
        type=str,
        default=os.environ.get("BRAIN_DATABASE_PATH")
    )
    parser.add_argument(
        "--log-level",
        help="Logging level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=os.environ.get("BRAIN_LOG_LEVEL", "INFO").upper()
    )
    return parser.parse_args(argv)


def update_config(args):
    """Update the global config with command line arguments.

    Raises:
        ConfigurationError: If a value is rejected by the config model.
    """
    try:
        if args.vault_dir:
            config.vault_dir = Path(args.vault_dir)
        if args.database_path:
            config.database_path = Path(args.database_path)
        if args.log_level:
            config.log_level = args.log_level
    except pydantic.ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def main(argv=None):
    """Run the Brain MCP server."""
    args = parse_args(argv)
    try:
        update_config(args)
    except ConfigurationError as e:
        logging.basicConfig(level=logging.INFO)
        logging.getLogger(__name__).error(str(e))
        sys.exit(1)

    # Console + persistent file logging with rotation
    log_level = getattr(logging, config.log_level, logging.INFO)
    try:
        log_dir = configure_logging(level=log_level, console=True)
    except Exception as e:
        # Fall back to basic console logging if file logging fails
        logging.basicConfig(level=log_level)
        logging.getLogger(__name__).warning(f"Failed to configure file logging: {e}")
        log_dir = None

    logger = logging.getLogger(__name__)
    if log_dir:
        logger.info(f"Persistent logging enabled: {log_dir}")

    # Single database handle shared by all services
    try:
        database = Database().open()
    except BrainError as e:
        logger.error(f"Failed to initialize database: {e}")
        sys.exit(1)
    atexit.register(database.close)

    try:
        logger.info(f"Starting Brain MCP server (vault: {config.get_vault_dir()})")
        server = BrainMcpServer(database=database)
        server.run()
    except Exception as e:
        logger.error(f"Error running server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
