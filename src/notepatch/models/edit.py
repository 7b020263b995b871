"""Edit proposal models.

An assistant cannot address a note by line or offset, so every edit it
proposes is described by a short literal anchor snippet (``target_context``)
and the text to splice in (``content_fragment``).
"""

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator


class EditStepKind(str, Enum):
    """Closed set of edit primitives."""

    INSERT_AFTER_CONTEXT = "insert_after_context"
    REPLACE_CONTEXT = "replace_context"
    DELETE_CONTEXT = "delete_context"
    INSERT_AT_START = "insert_at_start"
    APPEND_AT_END = "append_at_end"

    @property
    def requires_context(self) -> bool:
        """Whether this kind is anchored on a ``target_context`` snippet."""
        return self not in (EditStepKind.INSERT_AT_START, EditStepKind.APPEND_AT_END)


class EditStep(BaseModel):
    """One edit primitive applied to a note's content."""

    kind: EditStepKind = Field(
        ...,
        alias="edit_type",
        description="Edit primitive to apply"
    )

    target_context: Optional[str] = Field(
        default=None,
        description="Anchor snippet (None for insert_at_start/append_at_end)"
    )

    content_fragment: str = Field(
        default="",
        description="Text to insert or substitute (ignored by delete_context)"
    )

    model_config = {"frozen": True, "populate_by_name": True}

    @model_validator(mode="after")
    def check_anchor(self) -> "EditStep":
        """Anchored kinds need a non-empty target_context."""
        if self.kind.requires_context and not self.target_context:
            raise ValueError(f"{self.kind.value} requires a non-empty target_context")
        return self

    @classmethod
    def insert_after(cls, target_context: str, content_fragment: str) -> "EditStep":
        return cls(kind=EditStepKind.INSERT_AFTER_CONTEXT, target_context=target_context,
                   content_fragment=content_fragment)

    @classmethod
    def replace(cls, target_context: str, content_fragment: str) -> "EditStep":
        return cls(kind=EditStepKind.REPLACE_CONTEXT, target_context=target_context,
                   content_fragment=content_fragment)

    @classmethod
    def delete(cls, target_context: str) -> "EditStep":
        return cls(kind=EditStepKind.DELETE_CONTEXT, target_context=target_context)

    @classmethod
    def insert_at_start(cls, content_fragment: str) -> "EditStep":
        return cls(kind=EditStepKind.INSERT_AT_START, content_fragment=content_fragment)

    @classmethod
    def append_at_end(cls, content_fragment: str) -> "EditStep":
        return cls(kind=EditStepKind.APPEND_AT_END, content_fragment=content_fragment)


class TargetedEdit(BaseModel):
    """Proposal carrying exactly one edit step."""

    action: Literal["propose_targeted_edit"] = "propose_targeted_edit"

    step: EditStep = Field(..., description="The single edit to apply")

    explanation: str = Field(..., description="Assistant's summary of the change")

    model_config = {"frozen": True}


class SequentialEditPlan(BaseModel):
    """Ordered multi-step proposal.

    Each step is matched against the content as left by the previous step.
    """

    action: Literal["propose_sequential_edits"] = "propose_sequential_edits"

    steps: List[EditStep] = Field(
        ...,
        min_length=1,
        description="Edit steps, applied in order"
    )

    explanation: str = Field(..., description="Assistant's summary of the change")

    model_config = {"frozen": True}


class FullReplacement(BaseModel):
    """Proposal replacing the whole note (an empty string clears it)."""

    action: Literal["propose_full_content_replacement"] = "propose_full_content_replacement"

    new_content: str = Field(..., description="Complete new note content")

    explanation: str = Field(..., description="Assistant's summary of the change")

    model_config = {"frozen": True}


EditProposal = Annotated[
    Union[TargetedEdit, SequentialEditPlan, FullReplacement],
    Field(discriminator="action"),
]
