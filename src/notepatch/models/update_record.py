"""UpdateRecord model for the confirm/revert ledger."""

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field


class UpdateRecord(BaseModel):
    """Snapshot of one applied proposal, used for single-level undo."""

    record_id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        description="Unique identifier of this record"
    )

    document_id: str = Field(
        ...,
        description="Note the proposal was applied to"
    )

    previous_content: str = Field(
        ...,
        description="Note content immediately before the change"
    )

    new_content: str = Field(
        ...,
        description="Note content persisted by the change"
    )

    can_revert: bool = Field(
        default=True,
        description="False once reverted or superseded by a newer record"
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the change was persisted"
    )

    model_config = {"frozen": False}  # can_revert flips once, owned by UpdateLedger
