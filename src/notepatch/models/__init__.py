"""Pydantic data models for notepatch."""

from notepatch.models.edit import (
    EditProposal,
    EditStep,
    EditStepKind,
    FullReplacement,
    SequentialEditPlan,
    TargetedEdit,
)
from notepatch.models.update_record import UpdateRecord

__all__ = [
    "EditProposal",
    "EditStep",
    "EditStepKind",
    "FullReplacement",
    "SequentialEditPlan",
    "TargetedEdit",
    "UpdateRecord",
]
