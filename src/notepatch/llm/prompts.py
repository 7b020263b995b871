"""Prompt templates for the note chat assistant.

The assistant can answer questions about a note or propose an edit using
one of three JSON actions. These builders are the single place where the
wire format of those actions is described to the model, so they must stay
in sync with ``notepatch.models.llm_payloads``.
"""

from textwrap import dedent
from typing import List, Optional, Sequence

from notepatch.llm.reply_parser import strip_proposal_blocks
from notepatch.models.chat import ChatTurn, NoteContext

DEFAULT_MAX_NOTE_CHARS = 6000
DEFAULT_HISTORY_MESSAGES = 8
TRUNCATION_MARKER = "...(Note content truncated for context)"


EDIT_ACTIONS_INSTRUCTIONS = dedent("""
    When the user explicitly asks to change the note ("add...", "remove...",
    "rewrite...", "change...", "update..."), reply with a short explanation and
    exactly ONE fenced ```json block containing one of these actions:

    1. A single targeted edit:
    ```json
    {
      "action": "propose_targeted_edit",
      "explanation": "<what you changed>",
      "edit_type": "insert_after_context | replace_context | delete_context | insert_at_start | append_at_end",
      "target_context": "<short exact text copied from the note, or null>",
      "content_fragment": "<text to insert or substitute>"
    }
    ```

    2. Several edits applied in order:
    ```json
    {
      "action": "propose_sequential_edits",
      "explanation": "<what you changed>",
      "edits": [
        {"edit_type": "...", "target_context": "...", "content_fragment": "..."}
      ]
    }
    ```

    3. A complete rewrite (use only when most of the note changes, or to clear it):
    ```json
    {
      "action": "propose_full_content_replacement",
      "explanation": "<what you changed>",
      "new_full_content": "<the ENTIRE new note in Markdown>"
    }
    ```

    RULES for target_context:
    - Copy it EXACTLY from the current note (case and whitespace matter)
    - Keep it short but unique; the FIRST occurrence in the note is used
    - Use null for insert_at_start and append_at_end, and only for those
    - In sequential edits each anchor is searched in the note AS CHANGED by
      the previous edits, so never anchor on text an earlier edit removed

    RULES for content_fragment:
    - Must not be empty, except for delete_context (where it is ignored)
    - Write Markdown; escape it properly as a JSON string

    If the user is not asking for a change, answer normally without JSON.
""").strip()


def truncate_note_content(content: str, max_chars: int = DEFAULT_MAX_NOTE_CHARS) -> str:
    """Cut note content to ``max_chars``, appending a marker when cut."""
    if len(content) <= max_chars:
        return content
    return content[:max_chars] + "\n" + TRUNCATION_MARKER


def format_history(
    history: Sequence[ChatTurn],
    user_name: str,
    limit: int = DEFAULT_HISTORY_MESSAGES,
) -> str:
    """Render the most recent chat turns, collapsing earlier proposals.

    Args:
        history: Full chat transcript, oldest first
        user_name: Display name used for user turns
        limit: Number of most recent turns to keep

    Returns:
        One "Speaker: text" line per turn
    """
    recent = list(history)[-limit:] if limit > 0 else []
    lines = []
    for turn in recent:
        speaker = user_name if turn.role == "user" else "Assistant"
        lines.append(f"{speaker}: {strip_proposal_blocks(turn.content)}")
    return "\n".join(lines)


def build_note_chat_prompt(
    note: NoteContext,
    user_name: str,
    message: str,
    history: Optional[List[ChatTurn]] = None,
    max_note_chars: int = DEFAULT_MAX_NOTE_CHARS,
    history_messages: int = DEFAULT_HISTORY_MESSAGES,
    assistant_name: str = "TaskMaster",
) -> str:
    """Build the full prompt for one note chat turn.

    Args:
        note: Note being discussed
        user_name: Display name of the user
        message: The user's new message
        history: Previous chat turns, oldest first
        max_note_chars: Maximum note characters included in the prompt
        history_messages: Number of recent turns included
        assistant_name: Persona name of the assistant

    Returns:
        Prompt text ending with the assistant's turn marker
    """
    intro = (
        f'You are {assistant_name}, a helpful AI assistant integrated into Notes. '
        f'You are chatting with "{user_name}" about their note titled "{note.title}".\n\n'
        "Answer questions using the current note content and its key points first. "
        "If the answer is in neither, give a helpful general answer."
    )

    key_points = "\n".join(f"- {point}" for point in note.key_points) or "N/A"
    transcript = format_history(history or [], user_name, history_messages)

    sections = [
        intro,
        EDIT_ACTIONS_INSTRUCTIONS,
        f'**Current Note Content:**\n"""\n{truncate_note_content(note.content, max_note_chars)}\n"""',
        f"**Key Points (Reference Only):**\n{key_points}",
        f"---\n**Chat History (Recent):**\n{transcript}\n---",
        f"**{user_name}: {message}**\n**Assistant:**",
    ]
    return "\n\n".join(sections)
