"""Integration tests: assistant reply to saved note and back again."""

import json

import pytest

from notepatch.engine.plan import apply_plan
from notepatch.llm.reply_parser import parse_proposal
from notepatch.models.edit import EditStep, FullReplacement, SequentialEditPlan, TargetedEdit
from notepatch.services.edit_session import PatchService
from notepatch.services.exceptions import (
    ContextNotFoundError,
    RevertError,
    SequentialStepFailure,
)
from notepatch.services.note_store import FileNoteStore

MEETING = "# Standup\n- Alice: API review\n- Bob: tests\n- Bob: tests\n\nNext: Friday"


def reply_with(payload):
    return "Here you go.\n```json\n" + json.dumps(payload) + "\n```"


PROPOSALS = [
    TargetedEdit(step=EditStep.insert_after("- Alice: API review", "- Carol: docs"), explanation=""),
    TargetedEdit(step=EditStep.replace("Friday", "Monday"), explanation=""),
    TargetedEdit(step=EditStep.delete("- Bob: tests\n"), explanation=""),
    TargetedEdit(step=EditStep.insert_at_start("Owner: Alice"), explanation=""),
    TargetedEdit(step=EditStep.append_at_end("(notes end)"), explanation=""),
    SequentialEditPlan(
        steps=[
            EditStep.replace("# Standup", "# Daily standup"),
            EditStep.delete("- Bob: tests"),
            EditStep.append_at_end("Blockers: none"),
        ],
        explanation="",
    ),
    FullReplacement(new_content="", explanation="Cleared"),
    FullReplacement(new_content="Rewritten.", explanation=""),
]


@pytest.fixture
def notes_dir(tmp_path):
    directory = tmp_path / "notes"
    directory.mkdir()
    (directory / "standup.md").write_text(MEETING, encoding="utf-8")
    return directory


@pytest.fixture
def store(notes_dir):
    return FileNoteStore(notes_dir)


class TestReplyToDisk:
    """Test the path from assistant reply to saved note."""

    @pytest.mark.asyncio
    async def test_apply_reply_and_revert(self, store, notes_dir):
        service = PatchService(store)
        content = await store.load_content("standup")
        proposal = parse_proposal(reply_with({
            "action": "propose_targeted_edit",
            "explanation": "Moved the meeting",
            "edit_type": "replace_context",
            "target_context": "Friday",
            "content_fragment": "Monday",
        }))

        result = await service.accept_proposal("standup", content, proposal)

        path = notes_dir / "standup.md"
        assert path.read_text(encoding="utf-8") == MEETING.replace("Friday", "Monday")

        await service.revert(result.record)

        assert path.read_text(encoding="utf-8") == MEETING

    @pytest.mark.asyncio
    async def test_failed_sequential_reply_leaves_file_untouched(self, store, notes_dir):
        service = PatchService(store)
        content = await store.load_content("standup")
        proposal = parse_proposal(reply_with({
            "action": "propose_sequential_edits",
            "explanation": "Two changes",
            "edits": [
                {"edit_type": "append_at_end", "target_context": None, "content_fragment": "Done"},
                {"edit_type": "delete_context", "target_context": "- Dave", "content_fragment": ""},
            ],
        }))

        with pytest.raises(SequentialStepFailure) as exc_info:
            await service.accept_proposal("standup", content, proposal)

        assert exc_info.value.step_number == 2
        assert isinstance(exc_info.value.error, ContextNotFoundError)
        assert (notes_dir / "standup.md").read_text(encoding="utf-8") == MEETING
        assert service.ledger.latest("standup") is None


class TestRoundTrip:
    """Revert immediately after apply restores the note byte for byte."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("proposal", PROPOSALS)
    async def test_revert_restores_original(self, store, notes_dir, proposal):
        service = PatchService(store)
        content = await store.load_content("standup")

        result = await service.accept_proposal("standup", content, proposal)
        restored = await service.revert(result.record)

        assert restored == MEETING
        assert (notes_dir / "standup.md").read_text(encoding="utf-8") == MEETING

    @pytest.mark.asyncio
    async def test_single_revert(self, store):
        service = PatchService(store)
        content = await store.load_content("standup")
        result = await service.accept_proposal("standup", content, PROPOSALS[0])

        await service.revert(result.record)

        with pytest.raises(RevertError):
            await service.revert(result.record)


class TestScenarios:
    """Worked examples of the patch engine."""

    @pytest.mark.asyncio
    async def test_replace_in_middle(self, tmp_path):
        store = FileNoteStore(tmp_path)
        await store.save_content("essay", "Intro.\nBody text.\nConclusion.")
        service = PatchService(store)

        result = await service.accept_proposal(
            "essay",
            await store.load_content("essay"),
            TargetedEdit(step=EditStep.replace("Body text.", "Revised body."), explanation=""),
        )

        assert result.new_content == "Intro.\nRevised body.\nConclusion."

    def test_sequential_sees_previous_step(self):
        steps = [EditStep.delete("A\n"), EditStep(kind="append_at_end", target_context="", content_fragment="C")]

        assert apply_plan("A\nB", steps[:1]) == "B"
        assert apply_plan("A\nB", steps) == "B\nC"

    def test_failure_at_first_step(self):
        steps = [EditStep.replace("Y", "Z"), EditStep.append_at_end("W")]

        with pytest.raises(SequentialStepFailure) as exc_info:
            apply_plan("X", steps)

        assert exc_info.value.step_index == 0
        assert exc_info.value.original_content == "X"

    @pytest.mark.asyncio
    async def test_clear_and_restore(self, tmp_path):
        store = FileNoteStore(tmp_path)
        await store.save_content("hello", "Hello")
        service = PatchService(store)

        result = await service.accept_proposal(
            "hello", await store.load_content("hello"), FullReplacement(new_content="", explanation="")
        )
        assert (tmp_path / "hello.md").read_text(encoding="utf-8") == ""

        assert await service.revert(result.record) == "Hello"
        assert (tmp_path / "hello.md").read_text(encoding="utf-8") == "Hello"
