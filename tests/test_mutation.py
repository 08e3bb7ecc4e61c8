"""Tests for the mutation engine."""

from __future__ import annotations

import pytest

from resume_agents.errors import EditIndexError, ValidationError
from resume_agents.models.edits import EditAction, EditOperation, SectionName
from resume_agents.models.resume import ExperienceEntry
from resume_agents.pipeline.mutation import apply_edits, apply_to_document, coerce_payload


def _op(action="update", index=None, payload=None, section=SectionName.EXPERIENCE, changes=None):
    return EditOperation(
        target_collection=section,
        target_index=index,
        action=EditAction(action),
        payload=payload,
        changes=changes or [],
    )


class TestApplyEdits:
    def test_deletes_shift_updates_and_appends_follow(self):
        items = ["A", "B", "C", "D", "E"]
        ops = [
            _op("delete", 1),
            _op("delete", 3),
            _op("update", 4, "X"),
            _op("update", None, "Y"),
        ]
        result = apply_edits(items, ops)
        assert result.items == ["A", "C", "X", "Y"]

    def test_op_order_does_not_matter(self):
        items = ["A", "B", "C", "D", "E"]
        ops = [
            _op("update", None, "Y"),
            _op("update", 4, "X"),
            _op("delete", 3),
            _op("delete", 1),
        ]
        assert apply_edits(items, ops).items == ["A", "C", "X", "Y"]

    def test_input_is_not_mutated(self):
        items = ["A", "B", "C"]
        apply_edits(items, [_op("delete", 0), _op("update", 2, "Z")])
        assert items == ["A", "B", "C"]

    def test_out_of_range_aborts_whole_batch(self):
        items = ["A", "B", "C"]
        with pytest.raises(EditIndexError) as exc_info:
            apply_edits(items, [_op("delete", 0), _op("update", 3, "Z")])
        assert exc_info.value.index == 3
        assert exc_info.value.valid_range == (0, 2)
        assert items == ["A", "B", "C"]

    def test_negative_index_rejected(self):
        with pytest.raises(EditIndexError):
            apply_edits(["A"], [_op("delete", -1)])

    def test_empty_collection_reports_empty_range(self):
        with pytest.raises(EditIndexError, match="collection is empty"):
            apply_edits([], [_op("update", 0, "A")])

    def test_append_to_empty_collection(self):
        result = apply_edits([], [_op("update", None, "A")])
        assert result.items == ["A"]
        assert result.changes == ["Added experience entry"]

    def test_empty_batch_returns_copy(self):
        items = ["A", "B"]
        result = apply_edits(items, [])
        assert result.items == items
        assert result.items is not items
        assert result.changes == []

    def test_delete_wins_over_update_at_same_index(self):
        result = apply_edits(["A", "B", "C"], [_op("update", 1, "X"), _op("delete", 1)])
        assert result.items == ["A", "C"]
        assert result.changes == ["Removed experience entry #2"]

    def test_duplicate_deletes_count_once(self):
        result = apply_edits(["A", "B", "C"], [_op("delete", 1), _op("delete", 1)])
        assert result.items == ["A", "C"]
        assert result.changes == ["Removed experience entry #2"]

    def test_duplicate_updates_last_wins(self):
        result = apply_edits(["A", "B"], [_op("update", 0, "X"), _op("update", 0, "Y")])
        assert result.items == ["Y", "B"]

    def test_model_supplied_changes_are_kept(self):
        result = apply_edits(["A"], [_op("update", 0, "X", changes=["Tightened the first bullet"])])
        assert result.changes == ["Tightened the first bullet"]


class TestCoercePayload:
    def test_dict_payload_becomes_entry(self):
        op = coerce_payload(_op("update", 0, {"title": "Engineer", "company": "Acme"}))
        assert isinstance(op.payload, ExperienceEntry)
        assert op.payload.company == "Acme"

    def test_invalid_payload_is_validation_error(self):
        with pytest.raises(ValidationError, match="Invalid experience entry"):
            coerce_payload(_op("update", 0, {"highlights": "not a list"}))

    def test_delete_passes_through(self):
        op = _op("delete", 0)
        assert coerce_payload(op) is op


class TestEditOperation:
    def test_delete_requires_index(self):
        with pytest.raises(ValueError):
            EditOperation(target_collection="experience", action="delete")

    def test_update_requires_payload(self):
        with pytest.raises(ValueError):
            EditOperation(target_collection="projects", target_index=0)

    def test_camel_case_input(self):
        op = EditOperation.model_validate(
            {"targetCollection": "projects", "targetIndex": 1, "action": "delete"}
        )
        assert op.target_index == 1
        assert not op.is_append


class TestApplyToDocument:
    def test_multi_section_batch(self, sample_resume):
        ops = [
            _op("delete", 0),
            _op("update", 1, {"title": "P1 rewritten"}, section=SectionName.PROJECTS),
        ]
        updated, changes = apply_to_document(sample_resume, ops)
        assert [e.company for e in updated.experience] == ["Beta", "Gamma"]
        assert updated.projects[1].title == "P1 rewritten"
        assert changes == ["Removed experience entry #1", "Updated projects entry #2"]

    def test_original_document_untouched(self, sample_resume):
        apply_to_document(sample_resume, [_op("delete", 0)])
        assert len(sample_resume.experience) == 3

    def test_failure_in_one_section_aborts_all(self, sample_resume):
        ops = [
            _op("delete", 0),
            _op("delete", 5, section=SectionName.PROJECTS),
        ]
        with pytest.raises(EditIndexError):
            apply_to_document(sample_resume, ops)
        assert len(sample_resume.experience) == 3

    def test_empty_batch_returns_same_document(self, sample_resume):
        updated, changes = apply_to_document(sample_resume, [])
        assert updated is sample_resume
        assert changes == []
