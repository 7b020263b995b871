"""Configuration models for notepatch."""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class NotesConfig(BaseModel):
    """Configuration for the file-backed note store."""

    directory: str = Field(
        ...,
        description="Directory holding one <note-id>.md file per note"
    )

    @field_validator("directory")
    @classmethod
    def validate_directory(cls, v: str) -> str:
        """Expand ~ and reject paths that exist but are not directories."""
        path = Path(v).expanduser()
        if path.exists() and not path.is_dir():
            raise ValueError(
                f"Notes path is not a directory: {path}\n"
                f"Please provide a valid directory path"
            )
        return str(path)

    model_config = {"frozen": True}


class PromptConfig(BaseModel):
    """Configuration for assistant prompt assembly."""

    max_note_chars: int = Field(
        default=6000,
        ge=100,
        description="Maximum note characters included in a prompt"
    )

    history_messages: int = Field(
        default=8,
        ge=0,
        le=100,
        description="Number of recent chat turns included in a prompt"
    )

    assistant_name: str = Field(
        default="TaskMaster",
        min_length=1,
        description="Persona name used in prompts"
    )

    model_config = {"frozen": True}


class Config(BaseModel):
    """Root configuration for notepatch."""

    notes: NotesConfig = Field(..., description="Note storage settings")
    prompt: PromptConfig = Field(default_factory=PromptConfig, description="Prompt settings")

    model_config = {"frozen": True}
