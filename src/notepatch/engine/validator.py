"""Proposal validation.

Checks a raw proposal, as decoded from the assistant's reply, against the
edit model before anything is applied. Validation is pure: it never looks
at the note content and never mutates anything.
"""

from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from notepatch.models.edit import (
    EditProposal,
    EditStep,
    EditStepKind,
    FullReplacement,
    SequentialEditPlan,
    TargetedEdit,
)
from notepatch.models.llm_payloads import (
    PAYLOAD_MODELS,
    EditStepPayload,
    FullReplacementPayload,
    SequentialEditsPayload,
    TargetedEditPayload,
)
from notepatch.services.exceptions import ProposalValidationError

logger = structlog.get_logger()


def validate(raw: Any) -> EditProposal:
    """
    Validate a raw assistant proposal and convert it to an EditProposal.

    Args:
        raw: Decoded JSON payload (expected to be a mapping with an ``action``)

    Returns:
        TargetedEdit, SequentialEditPlan or FullReplacement

    Raises:
        ProposalValidationError: If the payload does not match one of the
            three proposal shapes exactly, or if any edit step breaks the
            step rules. For sequential plans the error carries the 1-based
            number of the first invalid step.
    """
    try:
        return _validate(raw)
    except ProposalValidationError as e:
        logger.warning(
            "proposal_rejected",
            action=raw.get("action") if isinstance(raw, Mapping) else None,
            step_number=e.step_number,
            reason=e.message,
        )
        raise


def propose_and_preview(raw: Any) -> EditProposal:
    """Validate a proposal for display without applying it."""
    return validate(raw)


def _validate(raw: Any) -> EditProposal:
    if not isinstance(raw, Mapping):
        raise ProposalValidationError(
            f"Proposal must be a JSON object, got {type(raw).__name__}"
        )

    action = raw.get("action")
    payload_model = PAYLOAD_MODELS.get(action) if isinstance(action, str) else None
    if payload_model is None:
        raise ProposalValidationError(f"Unrecognized proposal action: {action!r}")

    try:
        payload = payload_model.model_validate(dict(raw))
    except PydanticValidationError as e:
        raise ProposalValidationError(_describe_pydantic_error(e)) from e

    if isinstance(payload, TargetedEditPayload):
        step = _validate_step_payload(payload)
        return TargetedEdit(step=step, explanation=payload.explanation)

    if isinstance(payload, SequentialEditsPayload):
        if not payload.edits:
            raise ProposalValidationError("Sequential edit plan must contain at least one edit")

        steps = []
        for number, item in enumerate(payload.edits, start=1):
            try:
                step_payload = EditStepPayload.model_validate(item)
                steps.append(_validate_step_payload(step_payload))
            except PydanticValidationError as e:
                raise ProposalValidationError(_describe_pydantic_error(e), step_number=number) from e
            except ProposalValidationError as e:
                raise ProposalValidationError(e.message, step_number=number) from e

        return SequentialEditPlan(steps=steps, explanation=payload.explanation)

    if isinstance(payload, FullReplacementPayload):
        return FullReplacement(new_content=payload.new_full_content, explanation=payload.explanation)

    raise TypeError(f"Unsupported payload type: {type(payload).__name__}")


def _validate_step_payload(payload: EditStepPayload) -> EditStep:
    """Enforce the edit step rules and build the domain step.

    Raises:
        ProposalValidationError: If the anchor or fragment is inconsistent
            with the edit type
    """
    kind = payload.edit_type

    if kind.requires_context:
        if not payload.target_context:
            raise ProposalValidationError(
                f"{kind.value} requires a non-empty target_context"
            )
    elif payload.target_context is not None:
        raise ProposalValidationError(
            f"{kind.value} must have target_context set to null"
        )

    if payload.content_fragment == "" and kind is not EditStepKind.DELETE_CONTEXT:
        raise ProposalValidationError(
            f"{kind.value} requires a non-empty content_fragment"
        )

    return EditStep(
        kind=kind,
        target_context=payload.target_context,
        content_fragment=payload.content_fragment,
    )


def _describe_pydantic_error(error: PydanticValidationError) -> str:
    """Summarize the first pydantic error as 'field: message'."""
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    if location:
        return f"{location}: {first['msg']}"
    return first["msg"]
