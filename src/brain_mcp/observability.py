"""Logging setup and in-process metrics for the Brain MCP server.

Tool calls are timed through ``timed_operation``; vault scans add their
file counts through ``metrics.record_scan``. Everything is kept in memory
and reported by the ``brain_status`` tool.
"""
import logging
import time
import uuid
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Iterator, Optional, Union

logger = logging.getLogger(__name__)

ROOT_LOGGER_NAME = "brain_mcp"
LOG_FILE_NAME = "brain.log"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3


def configure_logging(
    log_dir: Optional[Union[str, Path]] = None,
    level: Optional[int] = None,
    console: bool = True,
) -> Path:
    """Send the ``brain_mcp`` logger tree to a rotating ``brain.log``.

    Handlers from an earlier call are replaced, so calling this twice does
    not duplicate output. The console handler writes to stderr, which keeps
    stdout free for the MCP stdio transport.

    Args:
        log_dir: Directory for the log file. Defaults to config.log_dir.
        level: Logging level. Defaults to config.log_level.
        console: Also log to stderr.

    Returns:
        The log directory.
    """
    from brain_mcp.config import config

    log_path = Path(log_dir if log_dir is not None else config.log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    if level is None:
        level = getattr(logging, config.log_level, logging.INFO)

    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    handlers = [
        RotatingFileHandler(
            log_path / LOG_FILE_NAME,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
    ]
    if console:
        handlers.append(logging.StreamHandler())
    for handler in handlers:
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    package_logger.info(f"Logging to {log_path / LOG_FILE_NAME}")
    return log_path


@dataclass
class ToolStats:
    """Call counts and timings for one MCP tool."""
    calls: int = 0
    failures: int = 0
    total_ms: float = 0.0
    slowest_ms: float = 0.0
    last_error: Optional[str] = None


@dataclass
class ScanTotals:
    """Running totals over every vault scan since startup."""
    scans: int = 0
    scanned: int = 0
    created: int = 0
    unreadable: int = 0
    last_root: Optional[str] = None
    last_scan_at: Optional[str] = None


class MetricsCollector:
    """Thread-safe tool and scan counters for the status view."""

    def __init__(self) -> None:
        self._lock = Lock()
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self._tools: Dict[str, ToolStats] = {}
            self._scans = ScanTotals()
            self._started = time.monotonic()

    def record_tool(self, tool: str, duration_ms: float, error: Optional[str] = None) -> None:
        """Count one call of ``tool``; a non-empty ``error`` marks it failed."""
        with self._lock:
            stats = self._tools.setdefault(tool, ToolStats())
            stats.calls += 1
            stats.total_ms += duration_ms
            stats.slowest_ms = max(stats.slowest_ms, duration_ms)
            if error:
                stats.failures += 1
                stats.last_error = error[:200]

    def record_scan(self, root: Union[str, Path], report) -> None:
        """Fold one ScanReport into the scan totals."""
        with self._lock:
            self._scans.scans += 1
            self._scans.scanned += report.total
            self._scans.created += report.created
            self._scans.unreadable += len(report.unreadable)
            self._scans.last_root = str(root)
            self._scans.last_scan_at = datetime.now(timezone.utc).isoformat()

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            tools = {
                name: {
                    "calls": s.calls,
                    "failures": s.failures,
                    "avg_ms": round(s.total_ms / s.calls, 2) if s.calls else 0.0,
                    "slowest_ms": round(s.slowest_ms, 2),
                    "last_error": s.last_error,
                }
                for name, s in sorted(self._tools.items())
            }
            return {
                "uptime_seconds": round(time.monotonic() - self._started, 1),
                "tools": tools,
                "scans": asdict(self._scans),
            }


metrics = MetricsCollector()


@contextmanager
def timed_operation(tool: str, **context) -> Iterator[Dict[str, Any]]:
    """Time one tool call and record it in ``metrics``.

    Yields a dict for result details that end up in the debug log. Tools
    catch their own exceptions and return an error document, so they mark
    the failure by setting ``op["error"]``; an exception escaping the block
    is recorded the same way and re-raised.

    Example:
        with timed_operation("brain_get_graph") as op:
            graph = graph_service.get_graph()
            op["nodes"] = len(graph.nodes)
    """
    call_id = uuid.uuid4().hex[:8]
    op: Dict[str, Any] = {}
    logger.debug(f"[{call_id}] {tool} start {context}")
    start = time.perf_counter()
    try:
        yield op
    except Exception as e:
        op["error"] = e
        raise
    finally:
        duration_ms = (time.perf_counter() - start) * 1000
        error = op.get("error")
        metrics.record_tool(tool, duration_ms, str(error) if error else None)
        outcome = f"failed: {error}" if error else "ok"
        logger.debug(f"[{call_id}] {tool} {outcome} in {duration_ms:.1f}ms {op}")
