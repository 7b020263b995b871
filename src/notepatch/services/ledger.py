"""Update ledger: single-level undo for applied proposals.

Each successfully persisted proposal leaves an UpdateRecord holding the
content snapshot from just before the change. Only the most recent record
of a document is revertible, and only once.
"""

from typing import Dict, List, Optional

import structlog

from notepatch.models.update_record import UpdateRecord
from notepatch.services.exceptions import ApplyError, RevertError
from notepatch.services.note_store import NoteStore

logger = structlog.get_logger()


class UpdateLedger:
    """
    In-memory ledger of applied updates for one editing session.

    Records are never deleted while the session lives and are not persisted.

    Example:
        >>> ledger = UpdateLedger(store)
        >>> record = ledger.record_apply("groceries", "eggs", "eggs\\nmilk")
        >>> await ledger.revert(record)
        'eggs'
    """

    def __init__(self, store: NoteStore) -> None:
        self._store = store
        self._history: Dict[str, List[UpdateRecord]] = {}

    def record_apply(self, document_id: str, previous_content: str, new_content: str) -> UpdateRecord:
        """
        Record a persisted change, superseding the document's previous record.

        Call only after the patch succeeded and the store confirmed the write.

        Args:
            document_id: Note that changed
            previous_content: Content before the change
            new_content: Content that was persisted

        Returns:
            New revertible UpdateRecord
        """
        history = self._history.setdefault(document_id, [])
        for previous in history:
            if previous.can_revert:
                previous.can_revert = False
                logger.debug(
                    "update_superseded",
                    document_id=document_id,
                    record_id=previous.record_id,
                )

        record = UpdateRecord(
            document_id=document_id,
            previous_content=previous_content,
            new_content=new_content,
        )
        history.append(record)
        logger.info("update_recorded", document_id=document_id, record_id=record.record_id)
        return record

    async def revert(self, record: UpdateRecord) -> str:
        """
        Restore the content a record replaced.

        Args:
            record: Record to revert

        Returns:
            The restored content (``record.previous_content``)

        Raises:
            RevertError: If the record was already reverted or superseded
            ApplyError: If the store write fails (the record stays revertible)
        """
        if not record.can_revert:
            logger.warning(
                "revert_rejected",
                document_id=record.document_id,
                record_id=record.record_id,
            )
            raise RevertError(record.record_id)

        try:
            await self._store.save_content(record.document_id, record.previous_content)
        except Exception as e:
            logger.error(
                "revert_write_failed",
                document_id=record.document_id,
                record_id=record.record_id,
                error=str(e),
            )
            raise ApplyError(record.document_id, f"Failed to save reverted note ({e})") from e

        record.can_revert = False
        logger.info("update_reverted", document_id=record.document_id, record_id=record.record_id)
        return record.previous_content

    def latest(self, document_id: str) -> Optional[UpdateRecord]:
        """Most recent record for a document, revertible or not."""
        history = self._history.get(document_id)
        return history[-1] if history else None

    def history(self, document_id: str) -> List[UpdateRecord]:
        """All records for a document, oldest first."""
        return list(self._history.get(document_id, []))
