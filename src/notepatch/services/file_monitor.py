"""Detect notes changed on disk behind the store's back."""

from pathlib import Path
from typing import Dict


class FileMonitor:
    """
    Remember each note file's mtime from when the store last read or wrote it.

    ``atomic_write`` consults the monitor before replacing a note, so an
    edit made in another program since the note was loaded is never lost.
    """

    def __init__(self) -> None:
        self._mtimes: Dict[Path, int] = {}

    def record(self, path: Path) -> None:
        """
        Take the note's current mtime as the baseline.

        Raises:
            FileNotFoundError: If the note doesn't exist
        """
        self._mtimes[path] = path.stat().st_mtime_ns

    def is_modified(self, path: Path) -> bool:
        """True if the note changed since its baseline, or has none yet."""
        baseline = self._mtimes.get(path)
        return baseline is None or path.stat().st_mtime_ns != baseline

    def refresh(self, path: Path) -> None:
        self._mtimes[path] = path.stat().st_mtime_ns
