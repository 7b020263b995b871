"""Sequential plan execution and proposal dispatch.

This module handles:
- Folding an ordered list of edit steps over a note (all-or-nothing)
- Wholesale content replacement
- Dispatching any EditProposal to the right executor
"""

from typing import Sequence

import structlog

from notepatch.engine.patcher import apply_step
from notepatch.models.edit import (
    EditProposal,
    EditStep,
    FullReplacement,
    SequentialEditPlan,
    TargetedEdit,
)
from notepatch.services.exceptions import ContextNotFoundError, SequentialStepFailure

logger = structlog.get_logger()


def apply_plan(content: str, steps: Sequence[EditStep]) -> str:
    """
    Apply edit steps in order, each to the output of the previous one.

    Anchors of later steps are matched against the content as transformed
    by earlier steps. Nothing is reordered or re-validated.

    Args:
        content: Note content before the plan
        steps: Edit steps in application order

    Returns:
        Content after every step has been applied

    Raises:
        SequentialStepFailure: If any step's anchor is missing. No partial
            result escapes; the exception carries the untouched input as
            ``original_content``.
    """
    current = content
    for index, step in enumerate(steps):
        try:
            current = apply_step(current, step)
        except ContextNotFoundError as e:
            logger.info(
                "sequential_plan_failed",
                step_index=index,
                step_count=len(steps),
                kind=step.kind.value,
            )
            raise SequentialStepFailure(index, e, original_content=content) from e

    logger.debug("sequential_plan_applied", step_count=len(steps))
    return current


def apply_full_replacement(new_content: str) -> str:
    """Replace the whole note. Always succeeds, including with ''."""
    return new_content


def apply_proposal(content: str, proposal: EditProposal) -> str:
    """
    Compute the note content that results from accepting a proposal.

    Args:
        content: Current note content
        proposal: Validated proposal

    Returns:
        New note content

    Raises:
        ContextNotFoundError: If a targeted edit's anchor is missing
        SequentialStepFailure: If a step of a sequential plan fails
    """
    if isinstance(proposal, TargetedEdit):
        return apply_step(content, proposal.step)
    if isinstance(proposal, SequentialEditPlan):
        return apply_plan(content, proposal.steps)
    if isinstance(proposal, FullReplacement):
        return apply_full_replacement(proposal.new_content)
    raise TypeError(f"Unsupported proposal type: {type(proposal).__name__}")
