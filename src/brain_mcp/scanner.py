"""Directory walker feeding the ingestion service."""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanEntry:
    """One filesystem entry found under a scanned root."""

    path: str
    name: str
    is_dir: bool


def is_hidden(name: str) -> bool:
    return name.startswith(".")


def scan_directory(root: Union[str, Path]) -> List[ScanEntry]:
    """List every non-hidden entry below ``root``.

    Entries whose name starts with a dot are skipped at every depth, and
    hidden directories are not descended into. Unreadable directories are
    skipped silently. The root itself is not reported. Within a directory,
    entries come out sorted by name, files and subdirectories interleaved.

    The root is resolved first, so reported paths are canonical absolute
    paths however the caller spelled the root.

    Args:
        root: Directory to walk.

    Returns:
        Flat list of entries, parents before their children.
    """
    root_path = Path(root).resolve()
    if not root_path.is_dir():
        logger.warning(f"Scan root is not a directory: {root_path}")
        return []

    entries: List[ScanEntry] = []
    _walk(root_path, entries)
    return entries


def _walk(directory: Path, entries: List[ScanEntry]) -> None:
    try:
        with os.scandir(directory) as it:
            children = sorted(it, key=lambda e: e.name)
    except OSError as e:
        logger.debug(f"Skipping unreadable directory {directory}: {e}")
        return

    for child in children:
        if is_hidden(child.name):
            continue
        try:
            # Symlinks are reported as-is and never followed into
            is_dir = child.is_dir(follow_symlinks=False)
        except OSError:
            continue
        entries.append(ScanEntry(path=child.path, name=child.name, is_dir=is_dir))
        if is_dir:
            _walk(Path(child.path), entries)
