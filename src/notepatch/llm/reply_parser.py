"""Extract edit proposals from free-text assistant replies.

The assistant answers in Markdown and, when it wants to change the note,
embeds the proposal as a fenced ```json block. Plain answers carry no block.
"""

import json
import re
from typing import Optional

import structlog

from notepatch.engine.validator import validate
from notepatch.models.edit import EditProposal
from notepatch.services.exceptions import ProposalValidationError

logger = structlog.get_logger()

JSON_BLOCK_PATTERN = re.compile(r"```json\s*([\s\S]*?)\s*```")

PROPOSAL_PLACEHOLDER = "[Edit Proposed]"


def extract_proposal_payload(reply_text: str) -> Optional[dict]:
    """
    Decode the first fenced JSON block of an assistant reply.

    Args:
        reply_text: Raw assistant reply

    Returns:
        The decoded JSON object, or None if the reply has no JSON block

    Raises:
        ProposalValidationError: If the block is not valid JSON or is not
            a JSON object

    Example:
        >>> extract_proposal_payload('Sure!\\n```json\\n{"action": "x"}\\n```')
        {'action': 'x'}
    """
    match = JSON_BLOCK_PATTERN.search(reply_text)
    if match is None:
        return None

    try:
        payload = json.loads(match.group(1))
    except json.JSONDecodeError as e:
        logger.warning("proposal_json_invalid", error=str(e), position=e.pos)
        raise ProposalValidationError(
            f"The assistant's edit proposal is not valid JSON ({e.msg})"
        ) from e

    if not isinstance(payload, dict):
        raise ProposalValidationError(
            f"Expected a JSON object in the edit proposal, got {type(payload).__name__}"
        )

    return payload


def parse_proposal(reply_text: str) -> Optional[EditProposal]:
    """
    Extract and validate the proposal embedded in an assistant reply.

    Returns:
        The validated proposal, or None for a plain chat reply

    Raises:
        ProposalValidationError: If a proposal block is present but invalid
    """
    payload = extract_proposal_payload(reply_text)
    if payload is None:
        return None
    return validate(payload)


def strip_proposal_blocks(text: str) -> str:
    """Replace fenced JSON blocks with a short placeholder (for chat history)."""
    return JSON_BLOCK_PATTERN.sub(PROPOSAL_PLACEHOLDER, text)
