"""Unit tests for the patch primitives.

Covers each edit kind, separator handling, empty documents and
first-occurrence anchor matching.
"""

import pytest

from notepatch.engine.patcher import _HANDLERS, apply_step, find_context
from notepatch.models.edit import EditStep, EditStepKind
from notepatch.services.exceptions import ContextNotFoundError


class TestDispatch:
    """Test the edit kind dispatch table."""

    def test_every_kind_has_a_handler(self):
        assert set(_HANDLERS) == set(EditStepKind)


class TestInsertAtStart:
    """Test insert_at_start."""

    def test_prepends_with_separator(self):
        result = apply_step("Body", EditStep.insert_at_start("# Title"))

        assert result == "# Title\nBody"

    def test_empty_document_gets_fragment_only(self):
        assert apply_step("", EditStep.insert_at_start("First line")) == "First line"

    def test_ignores_target_context(self):
        step = EditStep(kind=EditStepKind.INSERT_AT_START, target_context="", content_fragment="X")

        assert apply_step("Y", step) == "X\nY"


class TestAppendAtEnd:
    """Test append_at_end."""

    def test_appends_with_separator(self):
        assert apply_step("B", EditStep.append_at_end("C")) == "B\nC"

    def test_empty_document_gets_fragment_only(self):
        assert apply_step("", EditStep.append_at_end("Only line")) == "Only line"

    def test_existing_trailing_newline_is_kept(self):
        assert apply_step("B\n", EditStep.append_at_end("C")) == "B\n\nC"


class TestInsertAfterContext:
    """Test insert_after_context."""

    def test_inserts_on_new_line_after_anchor(self):
        result = apply_step("Intro.\nConclusion.", EditStep.insert_after("Intro.", "Body."))

        assert result == "Intro.\nBody.\nConclusion."

    def test_no_extra_separator_when_anchor_ends_with_newline(self):
        result = apply_step("Intro.\nConclusion.", EditStep.insert_after("Intro.\n", "Body.\n"))

        assert result == "Intro.\nBody.\nConclusion."

    def test_anchor_mid_line(self):
        result = apply_step("Shopping list: eggs", EditStep.insert_after("Shopping list:", "- milk"))

        assert result == "Shopping list:\n- milk eggs"

    def test_anchor_at_end_of_document(self):
        assert apply_step("A\nB", EditStep.insert_after("B", "C")) == "A\nB\nC"

    def test_missing_anchor(self):
        with pytest.raises(ContextNotFoundError) as exc_info:
            apply_step("Intro.", EditStep.insert_after("Outro.", "x"))

        assert exc_info.value.target_context == "Outro."

    def test_anchor_is_case_sensitive(self):
        with pytest.raises(ContextNotFoundError):
            apply_step("Intro.", EditStep.insert_after("intro.", "x"))


class TestReplaceContext:
    """Test replace_context."""

    def test_replaces_matched_span(self):
        content = "Intro.\nBody text.\nConclusion."

        result = apply_step(content, EditStep.replace("Body text.", "Revised body."))

        assert result == "Intro.\nRevised body.\nConclusion."

    def test_empty_fragment_degenerates_to_delete(self):
        assert apply_step("keep drop keep", EditStep.replace("drop ", "")) == "keep keep"

    def test_whole_document_anchor(self):
        assert apply_step("old", EditStep.replace("old", "new")) == "new"

    def test_missing_anchor(self):
        with pytest.raises(ContextNotFoundError):
            apply_step("X", EditStep.replace("Y", "Z"))


class TestDeleteContext:
    """Test delete_context."""

    def test_removes_line_with_its_newline(self):
        assert apply_step("A\nB", EditStep.delete("A\n")) == "B"

    def test_collapses_newlines_meeting_at_the_cut(self):
        assert apply_step("One\nTwo\nThree", EditStep.delete("Two")) == "One\nThree"

    def test_collapses_blank_lines_around_removed_paragraph(self):
        content = "Para 1\n\nPara 2\n\nPara 3"

        assert apply_step(content, EditStep.delete("Para 2")) == "Para 1\nPara 3"

    def test_keeps_blank_lines_elsewhere(self):
        content = "Title\n\nKeep this.\nDrop this.\nEnd"

        assert apply_step(content, EditStep.delete("Drop this.")) == "Title\n\nKeep this.\nEnd"

    def test_trims_document_whitespace(self):
        assert apply_step("  Header\nBody  \n", EditStep.delete("Header")) == "Body"

    def test_deleting_everything_leaves_empty_note(self):
        assert apply_step("Only line", EditStep.delete("Only line")) == ""

    def test_ignores_content_fragment(self):
        step = EditStep(kind=EditStepKind.DELETE_CONTEXT, target_context="B", content_fragment="ignored")

        assert apply_step("A B C", step) == "A  C"

    def test_missing_anchor(self):
        with pytest.raises(ContextNotFoundError):
            apply_step("A\nB", EditStep.delete("C"))


class TestFirstOccurrence:
    """Test that repeated anchors always resolve to the leftmost match."""

    content = "- todo\nfirst\n- todo\nsecond"

    def test_find_context_returns_first_offset(self):
        assert find_context(self.content, "- todo") == 0

    def test_replace_targets_first(self):
        result = apply_step(self.content, EditStep.replace("- todo", "- done"))

        assert result == "- done\nfirst\n- todo\nsecond"

    def test_insert_after_targets_first(self):
        result = apply_step(self.content, EditStep.insert_after("- todo", "  - sub"))

        assert result == "- todo\n  - sub\nfirst\n- todo\nsecond"

    def test_delete_targets_first(self):
        result = apply_step(self.content, EditStep.delete("- todo\n"))

        assert result == "first\n- todo\nsecond"

    def test_repeated_calls_are_deterministic(self):
        step = EditStep.replace("- todo", "- done")

        results = {apply_step(self.content, step) for _ in range(5)}

        assert len(results) == 1

    def test_input_string_is_not_mutated(self):
        original = self.content

        apply_step(original, EditStep.replace("- todo", "- done"))

        assert original == "- todo\nfirst\n- todo\nsecond"
