"""Diff generation for previewing a proposed note change."""

import difflib

from notepatch.engine.plan import apply_proposal
from notepatch.models.edit import EditProposal


def generate_unified_diff(
    original: str,
    modified: str,
    fromfile: str = "original",
    tofile: str = "modified",
    context_lines: int = 3,
) -> str:
    """Generate unified diff between original and modified content.

    Lines that differ only by the presence/absence of a trailing newline
    are treated as identical to avoid showing spurious differences.

    Args:
        original: Original content
        modified: Modified content
        fromfile: Label for original note
        tofile: Label for modified note
        context_lines: Number of context lines to show

    Returns:
        Unified diff as string (empty if nothing changed)
    """
    original_lines = [
        line if line.endswith("\n") else line + "\n"
        for line in original.splitlines(keepends=True)
    ]
    modified_lines = [
        line if line.endswith("\n") else line + "\n"
        for line in modified.splitlines(keepends=True)
    ]

    diff_lines = difflib.unified_diff(
        original_lines,
        modified_lines,
        fromfile=fromfile,
        tofile=tofile,
        n=context_lines,
    )

    return "".join(line if line.endswith("\n") else line + "\n" for line in diff_lines)


def generate_proposal_diff(document_id: str, content: str, proposal: EditProposal) -> str:
    """Generate the diff a proposal would produce on a note, without applying it.

    Raises:
        ContextNotFoundError: If a targeted edit's anchor is missing
        SequentialStepFailure: If a step of a sequential plan fails
    """
    return generate_unified_diff(
        content,
        apply_proposal(content, proposal),
        fromfile=f"a/{document_id}",
        tofile=f"b/{document_id}",
    )
