"""Note persistence collaborators.

The patch engine treats storage as an opaque key-value service with two
coroutines, ``load_content`` and ``save_content``. A failed save raises.
"""

import os
import re
from pathlib import Path
from typing import Dict, Optional, Protocol

import structlog

from notepatch.services.exceptions import FileModifiedError
from notepatch.services.file_monitor import FileMonitor

logger = structlog.get_logger()

_DOCUMENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9 _.-]*$")


class NoteStore(Protocol):
    """Persistence interface consumed by the edit session and ledger."""

    async def load_content(self, document_id: str) -> str:
        ...

    async def save_content(self, document_id: str, content: str) -> None:
        ...


class InMemoryNoteStore:
    """Dict-backed note store."""

    def __init__(self, notes: Optional[Dict[str, str]] = None) -> None:
        self._notes: Dict[str, str] = dict(notes or {})

    async def load_content(self, document_id: str) -> str:
        try:
            return self._notes[document_id]
        except KeyError:
            raise KeyError(f"Note not found: {document_id}") from None

    async def save_content(self, document_id: str, content: str) -> None:
        self._notes[document_id] = content

    def snapshot(self) -> Dict[str, str]:
        """Copy of every stored note, keyed by document id."""
        return dict(self._notes)


def atomic_write(
    path: Path,
    content: str,
    file_monitor: Optional[FileMonitor] = None
) -> None:
    """
    Atomically write content to file with temp-file-rename pattern.

    This function implements safe file writing with:
    1. Early modification check (before write)
    2. Write to temporary file
    3. fsync to ensure data is on disk
    4. Late modification check (after write, before rename)
    5. Atomic rename to replace original file

    Files that do not exist yet skip the modification checks.

    Args:
        path: Target file path
        content: Content to write
        file_monitor: Optional FileMonitor for concurrent modification detection

    Raises:
        FileModifiedError: If file was modified during write operation
        OSError: On file I/O errors
    """
    if file_monitor and path.exists() and file_monitor.is_modified(path):
        raise FileModifiedError(
            str(path),
            "File was modified before write (early check)"
        )

    # Same directory so the rename stays on one filesystem
    temp_path = path.parent / f".{path.name}.tmp.{os.getpid()}"

    try:
        with open(temp_path, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

        if file_monitor and path.exists() and file_monitor.is_modified(path):
            raise FileModifiedError(
                str(path),
                "File was modified during write (late check)"
            )

        temp_path.replace(path)

        if file_monitor:
            file_monitor.refresh(path)

        logger.debug(
            "atomic_write_success",
            path=str(path),
            size=len(content)
        )

    except FileModifiedError:
        if temp_path.exists():
            temp_path.unlink()
        raise

    except Exception as e:
        if temp_path.exists():
            temp_path.unlink()
        logger.error(
            "atomic_write_failed",
            path=str(path),
            error=str(e)
        )
        raise


class FileNoteStore:
    """
    Store each note as ``<directory>/<document_id>.md``.

    Writes are atomic and refuse to overwrite a note that was changed on
    disk since this store last loaded or wrote it.

    Example:
        >>> store = FileNoteStore(Path("~/notes").expanduser())
        >>> content = await store.load_content("groceries")
        >>> await store.save_content("groceries", content + "\\n- milk")
    """

    def __init__(self, directory: Path, file_monitor: Optional[FileMonitor] = None) -> None:
        self.directory = Path(directory)
        self.file_monitor = file_monitor or FileMonitor()

    def path_for(self, document_id: str) -> Path:
        """
        Resolve a document id to its file path.

        Raises:
            ValueError: If the id is empty or could escape the directory
        """
        if not _DOCUMENT_ID_PATTERN.match(document_id) or ".." in document_id:
            raise ValueError(f"Invalid note id: {document_id!r}")
        return self.directory / f"{document_id}.md"

    async def load_content(self, document_id: str) -> str:
        """
        Read a note and start tracking it for external modifications.

        Raises:
            FileNotFoundError: If the note does not exist
        """
        path = self.path_for(document_id)
        if not path.exists():
            raise FileNotFoundError(f"Note not found: {path}")

        content = path.read_text(encoding="utf-8")
        self.file_monitor.record(path)
        logger.debug("note_loaded", document_id=document_id, size=len(content))
        return content

    async def save_content(self, document_id: str, content: str) -> None:
        """
        Write a note atomically.

        Raises:
            FileModifiedError: If the note changed on disk since it was loaded
            OSError: On file I/O errors
        """
        path = self.path_for(document_id)
        self.directory.mkdir(parents=True, exist_ok=True)
        atomic_write(path, content, self.file_monitor)
        logger.info("note_saved", document_id=document_id, size=len(content))
