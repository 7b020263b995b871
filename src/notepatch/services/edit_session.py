"""Per-document edit sessions.

A DocumentSession is the explicit state machine that enforces at most one
in-flight apply or revert per note. Patch computation is synchronous; the
only suspension point is the store write, and a request that arrives while
a write is outstanding is rejected rather than run against a stale base.

PatchService is the interface exposed to the UI layer.
"""

from enum import Enum
from typing import Any, Dict

import structlog
from pydantic import BaseModel, Field

from notepatch.engine.plan import apply_proposal
from notepatch.engine.validator import validate
from notepatch.models.edit import EditProposal
from notepatch.models.update_record import UpdateRecord
from notepatch.services.exceptions import ApplyError, OperationInProgressError, RevertError
from notepatch.services.ledger import UpdateLedger
from notepatch.services.note_store import NoteStore

logger = structlog.get_logger()


class SessionState(str, Enum):
    """Enum for document session states."""

    IDLE = "idle"
    APPLYING = "applying"
    REVERTING = "reverting"


class ApplyResult(BaseModel):
    """Outcome of an accepted proposal."""

    new_content: str = Field(..., description="Content now persisted for the note")

    record: UpdateRecord = Field(..., description="Ledger record allowing one revert")


class DocumentSession:
    """
    Edit state of one open note.

    Transitions: IDLE -> APPLYING -> IDLE and IDLE -> REVERTING -> IDLE.
    Any request made outside IDLE raises OperationInProgressError.
    """

    def __init__(self, document_id: str, store: NoteStore, ledger: UpdateLedger) -> None:
        self.document_id = document_id
        self.state = SessionState.IDLE
        self._store = store
        self._ledger = ledger

    @property
    def is_busy(self) -> bool:
        return self.state is not SessionState.IDLE

    def _ensure_idle(self) -> None:
        if self.is_busy:
            logger.warning(
                "operation_rejected_busy",
                document_id=self.document_id,
                state=self.state.value,
            )
            raise OperationInProgressError(self.document_id, self.state.value)

    async def accept_proposal(self, current_content: str, proposal: EditProposal) -> ApplyResult:
        """
        Apply a validated proposal, persist it and record it in the ledger.

        Args:
            current_content: Note content the user is looking at
            proposal: Validated proposal

        Returns:
            ApplyResult with the persisted content and its UpdateRecord

        Raises:
            OperationInProgressError: If another apply or revert is pending
            ContextNotFoundError: If a targeted edit's anchor is missing
            SequentialStepFailure: If any step of a sequential plan fails
            ApplyError: If the store write fails (nothing is recorded)
        """
        self._ensure_idle()

        new_content = apply_proposal(current_content, proposal)

        self.state = SessionState.APPLYING
        try:
            await self._store.save_content(self.document_id, new_content)
        except Exception as e:
            logger.error(
                "proposal_write_failed",
                document_id=self.document_id,
                action=proposal.action,
                error=str(e),
            )
            raise ApplyError(self.document_id, f"Failed to save note ({e})") from e
        finally:
            self.state = SessionState.IDLE

        record = self._ledger.record_apply(self.document_id, current_content, new_content)
        logger.info(
            "proposal_applied",
            document_id=self.document_id,
            action=proposal.action,
            record_id=record.record_id,
        )
        return ApplyResult(new_content=new_content, record=record)

    async def revert(self, record: UpdateRecord) -> str:
        """
        Revert the note to the content before ``record``'s change.

        Raises:
            ValueError: If the record belongs to another note
            OperationInProgressError: If another apply or revert is pending
            RevertError: If the record is stale or already reverted
            ApplyError: If the store write fails
        """
        if record.document_id != self.document_id:
            raise ValueError(
                f"Record {record.record_id} belongs to {record.document_id}, not {self.document_id}"
            )
        self._ensure_idle()
        if not record.can_revert:
            raise RevertError(record.record_id)

        self.state = SessionState.REVERTING
        try:
            return await self._ledger.revert(record)
        finally:
            self.state = SessionState.IDLE


class PatchService:
    """
    Entry point used by the UI: validate, accept and revert proposals.

    Example:
        >>> service = PatchService(InMemoryNoteStore({"todo": "eggs"}))
        >>> proposal = service.propose_and_preview(payload)
        >>> result = await service.accept_proposal("todo", "eggs", proposal)
        >>> await service.revert(result.record)
        'eggs'
    """

    def __init__(self, store: NoteStore) -> None:
        self.store = store
        self.ledger = UpdateLedger(store)
        self._sessions: Dict[str, DocumentSession] = {}

    def session(self, document_id: str) -> DocumentSession:
        """Get (or open) the session of a note."""
        if document_id not in self._sessions:
            self._sessions[document_id] = DocumentSession(document_id, self.store, self.ledger)
        return self._sessions[document_id]

    def propose_and_preview(self, raw: Any) -> EditProposal:
        """Validate an assistant payload without mutating anything.

        Raises:
            ProposalValidationError: If the payload is invalid
        """
        return validate(raw)

    async def accept_proposal(
        self, document_id: str, current_content: str, proposal: EditProposal
    ) -> ApplyResult:
        return await self.session(document_id).accept_proposal(current_content, proposal)

    async def revert(self, record: UpdateRecord) -> str:
        return await self.session(record.document_id).revert(record)
