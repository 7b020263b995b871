"""Chat context models used when assembling assistant prompts."""

from pydantic import BaseModel, Field
from typing import List, Literal


class NoteContext(BaseModel):
    """The note the user is chatting about."""

    document_id: str = Field(..., description="Note identifier")

    title: str = Field(..., description="Note title shown to the assistant")

    content: str = Field(default="", description="Current note content")

    key_points: List[str] = Field(
        default_factory=list,
        description="Key points extracted for the note (reference only)"
    )

    model_config = {"frozen": True}


class ChatTurn(BaseModel):
    """One message of the note chat transcript."""

    role: Literal["user", "assistant"] = Field(..., description="Who sent the message")

    content: str = Field(..., description="Message text as displayed")

    model_config = {"frozen": True}
