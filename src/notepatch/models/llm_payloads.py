"""Pydantic models for edit proposals as emitted by the assistant.

These mirror the JSON the assistant is instructed to produce. They are
converted into the domain models of ``notepatch.models.edit`` by the
proposal validator.
"""

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field

from notepatch.models.edit import EditStepKind


class EditStepPayload(BaseModel):
    """One entry of ``edits`` (or the flat fields of a targeted edit)."""

    edit_type: EditStepKind = Field(
        ...,
        description="Edit primitive name"
    )

    target_context: Optional[str] = Field(
        ...,
        description="Anchor snippet, null for insert_at_start/append_at_end"
    )

    content_fragment: str = Field(
        ...,
        description="Text to insert or substitute"
    )

    model_config = {"extra": "forbid"}


class TargetedEditPayload(EditStepPayload):
    """``propose_targeted_edit`` payload."""

    action: Literal["propose_targeted_edit"]

    explanation: str = Field(..., description="Summary shown to the user")


class SequentialEditsPayload(BaseModel):
    """``propose_sequential_edits`` payload."""

    action: Literal["propose_sequential_edits"]

    explanation: str = Field(..., description="Summary shown to the user")

    edits: List[Any] = Field(
        ...,
        description="Ordered edit steps (validated one by one)"
    )

    model_config = {"extra": "forbid"}


class FullReplacementPayload(BaseModel):
    """``propose_full_content_replacement`` payload."""

    action: Literal["propose_full_content_replacement"]

    explanation: str = Field(..., description="Summary shown to the user")

    new_full_content: str = Field(
        ...,
        description="Entire new note content (may be empty)"
    )

    model_config = {"extra": "forbid"}


PAYLOAD_MODELS = {
    "propose_targeted_edit": TargetedEditPayload,
    "propose_sequential_edits": SequentialEditsPayload,
    "propose_full_content_replacement": FullReplacementPayload,
}
