"""Directory-to-database reconciliation."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Sequence, Union

from brain_mcp.models.schema import Resource, ResourceType, generate_id, utc_now
from brain_mcp.scanner import ScanEntry, scan_directory
from brain_mcp.storage.database import Database
from brain_mcp.storage.resource_repository import ResourceRepository
from brain_mcp.utils import is_note_name

logger = logging.getLogger(__name__)

Scanner = Callable[[Union[str, Path]], Sequence[ScanEntry]]


@dataclass
class ScanReport:
    """Outcome of one scan.

    Attributes:
        total: Non-directory entries written to storage.
        notes: How many of them were notes.
        files: How many were opaque files.
        created: How many got a freshly minted ID.
        unreadable: Note paths whose content could not be read.
    """

    total: int = 0
    notes: int = 0
    files: int = 0
    created: int = 0
    unreadable: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scanned": self.total,
            "notes": self.notes,
            "files": self.files,
            "created": self.created,
            "unreadable": list(self.unreadable),
        }


def read_note_content(path: str) -> str:
    """Read a note as UTF-8 text.

    Raises:
        OSError: If the file cannot be read.
        UnicodeDecodeError: If the file is not valid UTF-8.
    """
    return Path(path).read_text(encoding="utf-8")


class IngestionService:
    """Reconciles a directory tree into the resources table.

    Rescanning is idempotent: a path already in storage keeps its ID and
    only has its content and updated_at refreshed, so links pointing at it
    survive.
    """

    def __init__(self, database: Database, scanner: Scanner = scan_directory):
        """Initialize the service.

        Args:
            database: Open storage handle.
            scanner: Callable listing entries below a root directory.
        """
        self.db = database
        self.resources = ResourceRepository(database)
        self._scan = scanner

    def scan_vault(self, root: Union[str, Path]) -> ScanReport:
        """Ingest every file below ``root``.

        The storage lock is held for the whole scan. A note that cannot be
        read is stored with empty content instead of aborting the scan.

        Args:
            root: Directory to ingest.

        Returns:
            Counts of what was written.

        Raises:
            StorageError: If the lock cannot be acquired or a write fails.
        """
        entries = self._scan(root)
        report = ScanReport()

        with self.db.locked():
            for entry in entries:
                if entry.is_dir:
                    continue
                self._ingest_entry(entry, report)

        logger.info(
            f"Scanned {report.total} files under {root} "
            f"({report.notes} notes, {report.files} files, {report.created} new, "
            f"{len(report.unreadable)} unreadable)"
        )
        return report

    def _ingest_entry(self, entry: ScanEntry, report: ScanReport) -> None:
        resource_type = ResourceType.NOTE if is_note_name(entry.name) else ResourceType.FILE

        resource_id = self.resources.find_id_by_path(entry.path)
        if resource_id is None:
            resource_id = generate_id()
            report.created += 1

        content = ""
        if resource_type is ResourceType.NOTE:
            try:
                content = read_note_content(entry.path)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Could not read note {entry.path}, storing it empty: {e}")
                report.unreadable.append(entry.path)

        now = utc_now()
        self.resources.upsert(
            Resource(
                id=resource_id,
                type=resource_type,
                path=entry.path,
                title=entry.name,
                content=content,
                created_at=now,
                updated_at=now,
            )
        )

        report.total += 1
        if resource_type is ResourceType.NOTE:
            report.notes += 1
        else:
            report.files += 1
