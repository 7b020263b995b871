"""Proposal validation and patch application."""

from notepatch.engine.patcher import apply_step
from notepatch.engine.plan import apply_full_replacement, apply_plan, apply_proposal
from notepatch.engine.validator import propose_and_preview, validate

__all__ = [
    "apply_full_replacement",
    "apply_plan",
    "apply_proposal",
    "apply_step",
    "propose_and_preview",
    "validate",
]
