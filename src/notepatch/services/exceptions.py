"""Custom exceptions for notepatch.

Every failure is local to one apply or revert call and is meant to be shown
to the user; none of them is fatal to the editing session.
"""

from typing import Optional


class NotePatchError(Exception):
    """Base class for all notepatch errors."""


class ProposalValidationError(NotePatchError):
    """Raised when an assistant proposal is structurally invalid.

    The proposal never reaches the patch engine and the note is untouched.

    Attributes:
        message: Human-readable reason
        step_number: 1-based index of the first invalid step of a
            sequential plan, or None
    """

    def __init__(self, message: str, step_number: Optional[int] = None):
        self.message = message
        self.step_number = step_number
        if step_number is not None:
            super().__init__(f"Step {step_number}: {message}")
        else:
            super().__init__(message)


class ContextNotFoundError(NotePatchError):
    """Raised when an anchor snippet is not present in the content.

    Attributes:
        target_context: The anchor that could not be found
    """

    def __init__(self, target_context: str):
        self.target_context = target_context
        preview = target_context if len(target_context) <= 60 else target_context[:57] + "..."
        super().__init__(f"Context not found in note: {preview!r}")


class SequentialStepFailure(NotePatchError):
    """Raised when one step of a sequential plan fails.

    The whole plan is discarded; ``original_content`` is the untouched input.

    Attributes:
        step_index: 0-based index of the failing step
        error: Underlying ContextNotFoundError
        original_content: Content the plan was applied to
    """

    def __init__(self, step_index: int, error: ContextNotFoundError, original_content: str):
        self.step_index = step_index
        self.error = error
        self.original_content = original_content
        super().__init__(f"Edit step {step_index + 1} failed: {error}")

    @property
    def step_number(self) -> int:
        """1-based index of the failing step (for display)."""
        return self.step_index + 1


class ApplyError(NotePatchError):
    """Raised when persisting patched content fails.

    The change is not committed to the ledger and must not be shown as final.

    Attributes:
        document_id: Note whose write failed
    """

    def __init__(self, document_id: str, message: str = "Failed to save note"):
        self.document_id = document_id
        self.message = message
        super().__init__(f"{message}: {document_id}")


class RevertError(NotePatchError):
    """Raised when reverting a record that is stale or already reverted."""

    def __init__(self, record_id: str, message: str = "Update can no longer be reverted"):
        self.record_id = record_id
        self.message = message
        super().__init__(f"{message} (record {record_id})")


class OperationInProgressError(NotePatchError):
    """Raised when an apply or revert arrives while another one is pending."""

    def __init__(self, document_id: str, state: str):
        self.document_id = document_id
        self.state = state
        super().__init__(f"Another operation is in progress for {document_id} ({state})")


class FileModifiedError(NotePatchError):
    """Raised when a note file is modified during an atomic write operation.

    This exception indicates that the file changed between the initial
    read and the final write, which could lead to data loss if the write
    were to proceed.

    Attributes:
        path: Path to the file that was modified
        message: Human-readable error message
    """

    def __init__(self, path: str, message: str = "File was modified during write operation"):
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")
