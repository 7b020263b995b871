"""Patch primitives: apply one EditStep to a note's content.

This module handles:
- Locating anchor snippets (first occurrence, exact and case-sensitive)
- Inserting after, replacing and deleting an anchored span
- Inserting at the start and appending at the end of a note

Every primitive is a pure function from (content, step) to new content.
The only failure is a missing anchor; malformed steps are rejected by the
validator before they get here.
"""

from typing import Callable, Dict

import structlog

from notepatch.models.edit import EditStep, EditStepKind
from notepatch.services.exceptions import ContextNotFoundError

logger = structlog.get_logger()

SEPARATOR = "\n"


def apply_step(content: str, step: EditStep) -> str:
    """
    Apply a single edit step to content.

    Args:
        content: Current note content
        step: Edit step to apply

    Returns:
        New note content

    Raises:
        ContextNotFoundError: If the step's anchor is not present in content
    """
    handler = _HANDLERS[step.kind]
    result = handler(content, step)
    logger.debug(
        "edit_step_applied",
        kind=step.kind.value,
        before_length=len(content),
        after_length=len(result),
    )
    return result


def find_context(content: str, target_context: str) -> int:
    """
    Find the first occurrence of an anchor snippet.

    When the anchor occurs more than once the leftmost match wins; a
    warning is logged because the assistant may have meant another one.

    Args:
        content: Text to search
        target_context: Anchor snippet (exact, case-sensitive)

    Returns:
        Start offset of the first match

    Raises:
        ContextNotFoundError: If the anchor does not occur in content
    """
    index = content.find(target_context)
    if index == -1:
        logger.info("anchor_not_found", target_context=target_context[:80])
        raise ContextNotFoundError(target_context)

    occurrences = content.count(target_context)
    if occurrences > 1:
        logger.warning(
            "anchor_ambiguous",
            target_context=target_context[:80],
            occurrences=occurrences,
            offset=index,
        )
    return index


def _insert_at_start(content: str, step: EditStep) -> str:
    if not content:
        return step.content_fragment
    return step.content_fragment + SEPARATOR + content


def _append_at_end(content: str, step: EditStep) -> str:
    if not content:
        return step.content_fragment
    return content + SEPARATOR + step.content_fragment


def _insert_after_context(content: str, step: EditStep) -> str:
    start = find_context(content, step.target_context)
    end = start + len(step.target_context)

    # No separator when the anchor already ends a line
    if end == 0 or content[end - 1] == SEPARATOR:
        separator = ""
    else:
        separator = SEPARATOR

    return content[:end] + separator + step.content_fragment + content[end:]


def _replace_context(content: str, step: EditStep) -> str:
    start = find_context(content, step.target_context)
    end = start + len(step.target_context)
    return content[:start] + step.content_fragment + content[end:]


def _delete_context(content: str, step: EditStep) -> str:
    start = find_context(content, step.target_context)
    end = start + len(step.target_context)

    before = content[:start]
    after = content[end:]

    # Collapse the newline run created where the two sides now meet
    if before.endswith(SEPARATOR) and after.startswith(SEPARATOR):
        before = before.rstrip(SEPARATOR)
        after = after.lstrip(SEPARATOR)
        result = before + SEPARATOR + after
    else:
        result = before + after

    return result.strip()


_HANDLERS: Dict[EditStepKind, Callable[[str, EditStep], str]] = {
    EditStepKind.INSERT_AFTER_CONTEXT: _insert_after_context,
    EditStepKind.REPLACE_CONTEXT: _replace_context,
    EditStepKind.DELETE_CONTEXT: _delete_context,
    EditStepKind.INSERT_AT_START: _insert_at_start,
    EditStepKind.APPEND_AT_END: _append_at_end,
}
