"""Shared test fixtures for all test modules."""

import pytest

from notepatch.services.edit_session import PatchService
from notepatch.services.note_store import InMemoryNoteStore


class FailingNoteStore(InMemoryNoteStore):
    """In-memory store whose writes can be made to fail on demand."""

    def __init__(self, notes=None):
        super().__init__(notes)
        self.fail_writes = False
        self.save_calls = []

    async def save_content(self, document_id: str, content: str) -> None:
        self.save_calls.append((document_id, content))
        if self.fail_writes:
            raise OSError("disk full")
        await super().save_content(document_id, content)


@pytest.fixture
def memory_store():
    """Store seeded with a few notes."""
    return InMemoryNoteStore({
        "essay": "Intro.\nBody text.\nConclusion.",
        "empty": "",
    })


@pytest.fixture
def failing_store():
    """Store that records every save and can be told to fail."""
    return FailingNoteStore({"essay": "Intro.\nBody text.\nConclusion."})


@pytest.fixture
def service(memory_store):
    """PatchService over the seeded in-memory store."""
    return PatchService(memory_store)
