"""Note lifecycle: keeps note files on disk in step with their rows."""

import logging
import os
from pathlib import Path
from typing import Optional

from brain_mcp.config import config
from brain_mcp.exceptions import (
    ErrorCode,
    FileOperationError,
    ResourceNotFoundError,
    ValidationError,
)
from brain_mcp.models.schema import NoteContent, Resource, ResourceType
from brain_mcp.storage.database import Database
from brain_mcp.storage.resource_repository import ResourceRepository
from brain_mcp.utils import note_filename

logger = logging.getLogger(__name__)


def _write_file(path: str, content: str, operation: str) -> None:
    try:
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
    except OSError as e:
        raise FileOperationError(
            "Failed to write note file",
            path=path,
            operation=operation,
            code=ErrorCode.FILE_WRITE_FAILED,
            original_error=e,
        ) from e


class NoteService:
    """Create, update and delete notes on disk and in storage together.

    The database is the authoritative copy of note content; the file under
    the vault directory mirrors it. File and row writes are not one
    transaction: a file is always written before its row is inserted, so a
    failed write never leaves a row pointing at a missing file.
    """

    def __init__(self, database: Database, vault_dir: Optional[Path] = None):
        """Initialize the service.

        Args:
            database: Open storage handle.
            vault_dir: Directory new notes are written into. If None, uses
                config.get_vault_dir(). Relative paths resolve against
                config.base_dir. Created if missing.
        """
        self.db = database
        self.resources = ResourceRepository(database)
        if vault_dir is None:
            self.vault_dir = config.get_vault_dir()
        else:
            self.vault_dir = config.get_absolute_path(Path(vault_dir))
            self.vault_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"NoteService initialized: vault_dir={self.vault_dir}")

    def note_path_for(self, title: str) -> str:
        """Compute where a note with this title is stored.

        Raises:
            ValidationError: If nothing usable is left of the title.
        """
        filename = note_filename(title)
        if not filename:
            raise ValidationError(
                "Title must contain at least one letter or digit",
                field="title",
                value=title,
                code=ErrorCode.NOTE_TITLE_INVALID,
            )
        return str(self.vault_dir / filename)

    def create_note(self, title: str, content: str) -> Resource:
        """Write a new note file and insert its row.

        Args:
            title: Display title; also the source of the file name.
            content: Markdown body.

        Returns:
            The stored note resource.

        Raises:
            ValidationError: If the title is unusable or the target path is
                already taken.
            FileOperationError: If the file cannot be written (no row is
                inserted in that case).
        """
        path = self.note_path_for(title)

        with self.db.locked():
            if self.resources.find_id_by_path(path) is not None or os.path.exists(path):
                raise ValidationError(
                    f"A note already exists at '{Path(path).name}'",
                    field="title",
                    value=title,
                    code=ErrorCode.RESOURCE_PATH_CONFLICT,
                )

            _write_file(path, content, operation="create")

            note = Resource(
                type=ResourceType.NOTE,
                path=path,
                title=title,
                content=content,
            )
            self.resources.create(note)

        logger.info(f"Created note {note.id} at {path}")
        return note

    def update_note(self, note_id: str, title: str, content: str) -> None:
        """Overwrite a note's file (when it has one) and its row.

        The file keeps its original name even when the title changes.

        Raises:
            ResourceNotFoundError: If no resource has this ID.
            FileOperationError: If the backing file cannot be written.
        """
        with self.db.locked():
            path = self.resources.get_path(note_id)
            if path:
                _write_file(path, content, operation="update")
            self.resources.update_note(note_id, title, content)
        logger.debug(f"Updated note {note_id}")

    def delete_note(self, note_id: str) -> None:
        """Remove a note's file and row.

        An unknown ID or an already missing file is not an error.

        Raises:
            FileOperationError: If the file exists but cannot be removed.
        """
        with self.db.locked():
            try:
                path = self.resources.get_path(note_id)
            except ResourceNotFoundError:
                path = None
            if path:
                try:
                    os.remove(path)
                except FileNotFoundError:
                    logger.debug(f"Note file already gone: {path}")
                except OSError as e:
                    raise FileOperationError(
                        "Failed to delete note file",
                        path=path,
                        operation="delete",
                        code=ErrorCode.FILE_DELETE_FAILED,
                        original_error=e,
                    ) from e
            self.resources.delete(note_id)
        logger.info(f"Deleted note {note_id}")

    def get_note_content(self, note_id: str) -> NoteContent:
        """Get a note's title and content from storage.

        Raises:
            ResourceNotFoundError: If no resource has this ID.
        """
        return self.resources.get_content(note_id)
