"""Functional tests for the builder session: editor state, history and save."""

from __future__ import annotations

import pytest

from talentflow.logic.builder import BuilderSession, document_payload
from talentflow.logic.errors import SaveFailedError
from talentflow.logic.repository_assessments import load_assessment, save_assessment
from talentflow.logic.assessment_document import new_assessment


def test_new_items_expand_and_deletes_collapse():
    builder = BuilderSession(new_assessment("job_1"))
    section = builder.add_section(title="Skills")
    assert builder.expanded_section_id == section.id
    question = builder.add_question(section.id, title="Years?")
    assert builder.expanded_question_id == question.id

    assert builder.toggle_question(question.id) is None
    assert builder.toggle_question(question.id) == question.id

    builder.delete_section(section.id)
    assert builder.expanded_section_id is None
    assert builder.expanded_question_id is None


def test_toggle_section_collapses_when_already_expanded(sample_document):
    builder = BuilderSession(sample_document)
    assert builder.toggle_section("s_skills") == "s_skills"
    assert builder.toggle_section("s_background") == "s_background"
    assert builder.toggle_section("s_background") is None


def test_undo_redo_walks_document_history(sample_document):
    builder = BuilderSession(sample_document)
    assert not builder.is_dirty and not builder.can_undo
    builder.update_details({"title": "Renamed"})
    builder.delete_question("s_skills", "q_stack")
    assert builder.is_dirty

    assert builder.undo() is True
    assert builder.document.title == "Renamed"
    assert len(builder.document.sections[0].questions) == 2
    assert builder.undo() is True
    assert builder.document == sample_document
    assert not builder.is_dirty
    assert builder.undo() is False

    assert builder.redo() is True
    assert builder.document.title == "Renamed"
    builder.update_section("s_skills", {"title": "Skills"})
    # A new edit discards the redo branch
    assert builder.can_redo is False


def test_history_is_bounded():
    builder = BuilderSession(new_assessment("job_1"), history_limit=3)
    for i in range(5):
        builder.update_details({"title": f"t{i}"})
    undone = 0
    while builder.undo():
        undone += 1
    assert undone == 3
    assert builder.document.title == "t1"


def test_empty_assessment_is_savable():
    builder = BuilderSession(new_assessment("job_1", title="Empty"))
    saved = builder.save(save_assessment)
    assert saved.id
    assert saved.sections == ()
    assert load_assessment("job_1") is not None


def test_save_sets_clean_baseline(sample_document):
    builder = BuilderSession(sample_document)
    builder.update_details({"title": "Renamed"})
    saved = builder.save(save_assessment)
    assert saved.title == "Renamed"
    assert builder.document == saved
    assert builder.is_dirty is False
    assert builder.can_undo is True


def test_save_failure_leaves_session_untouched(sample_document):
    """Verifies a failed save re-raises and keeps the in-memory document."""
    builder = BuilderSession(sample_document)
    builder.add_section(title="Unsaved")
    before = builder.document
    calls = []

    def failing_save(job_id, payload):
        calls.append((job_id, payload))
        raise SaveFailedError("database unavailable")

    with pytest.raises(SaveFailedError):
        builder.save(failing_save)
    assert builder.document is before
    assert builder.is_dirty is True
    assert calls[0][0] == "job_1"
    assert calls[0][1] == document_payload(before)


def test_document_payload_uses_wire_names(sample_document):
    payload = document_payload(sample_document)
    assert set(payload) == {"title", "description", "sections"}
    reason = payload["sections"][1]["questions"][1]
    assert reason["conditionalLogic"] == {"dependsOn": "q_remote", "showWhen": "Yes"}
    assert reason["validation"] == {"minLength": 5, "maxLength": 50}
