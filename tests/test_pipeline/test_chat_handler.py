"""Tests for the chat handler."""

from __future__ import annotations

import pytest

from resume_agents.errors import EditIndexError, ParseError, ValidationError
from resume_agents.models.chat import ChatTurn, SectionEdit, SkillsEdit, SummaryEdit
from resume_agents.models.edits import SectionName
from resume_agents.models.intent import IntentResult
from resume_agents.pipeline.chat_handler import AUTONOMOUS_NOTE, ResumeChatHandler, parse_operations


def _handler(llm_factory, intent: dict, outputs: dict | None = None):
    llm = llm_factory({IntentResult: intent, **(outputs or {})})
    return ResumeChatHandler(llm), llm


class TestParseOperations:
    def test_section_is_pinned(self):
        ops = parse_operations(
            [{"targetCollection": "education", "targetIndex": 0, "action": "delete"}],
            SectionName.PROJECTS,
        )
        assert ops[0].target_collection is SectionName.PROJECTS

    def test_malformed_operation_is_parse_error(self):
        with pytest.raises(ParseError):
            parse_operations([{"action": "delete"}], SectionName.EXPERIENCE)

    def test_bad_payload_is_parse_error(self):
        with pytest.raises(ParseError):
            parse_operations(
                [{"action": "update", "targetIndex": 0, "payload": {"highlights": 3}}],
                SectionName.EXPERIENCE,
            )


class TestQuestions:
    @pytest.mark.asyncio
    async def test_general_answer(self, llm_factory, sample_profile):
        handler, llm = _handler(llm_factory, {"type": "question"})
        history = [ChatTurn(role="user", content="Hi"), ChatTurn(role="assistant", content="Hello")]
        response = await handler.handle("How long should a resume be?", sample_profile, None, history)

        assert response.type == "general_answer"
        assert response.message == "Keep it to one page."
        assert response.requires_action is False
        assert response.updated_resume is None
        request = llm.generate_text.call_args.args[0]
        assert request.response_format == "text"
        assert (request.temperature, request.max_tokens) == (0.7, 500)
        assert "ASSISTANT: Hello" in request.user_content

    @pytest.mark.asyncio
    async def test_new_resume_request(self, llm_factory, sample_profile):
        handler, llm = _handler(
            llm_factory,
            {"type": "newResumeRequest", "todoList": ["Analyze the posting", "Generate resume"]},
        )
        response = await handler.handle("Here is a new job description", sample_profile)
        assert response.type == "generate_new_resume"
        assert response.requires_action is True
        assert response.todo_list == ["Analyze the posting", "Generate resume"]
        assert "1. Analyze the posting" in response.message
        assert llm.generate_model.await_count == 1


class TestEdits:
    @pytest.mark.asyncio
    async def test_edit_without_resume_rejected(self, llm_factory, sample_profile):
        handler, _ = _handler(llm_factory, {"type": "editSummary"})
        with pytest.raises(ValidationError, match="without a current resume"):
            await handler.handle("Shorten my summary", sample_profile, None)

    @pytest.mark.asyncio
    async def test_edit_summary(self, llm_factory, sample_profile, sample_resume):
        handler, _ = _handler(
            llm_factory,
            {"type": "editSummary"},
            {SummaryEdit: {"newSummary": "Sharper summary.", "changes": ["Cut filler"]}},
        )
        response = await handler.handle("Shorten my summary", sample_profile, sample_resume)
        assert response.type == "edit_summary"
        assert response.updated_resume.summary == "Sharper summary."
        assert sample_resume.summary == "Backend engineer."
        assert "- Cut filler" in response.message
        assert response.requires_action is True

    @pytest.mark.asyncio
    async def test_edit_skills(self, llm_factory, sample_profile, sample_resume):
        handler, _ = _handler(
            llm_factory,
            {"type": "editSkills"},
            {SkillsEdit: {"skills": {"Languages": ["Python", "Go"]}}},
        )
        response = await handler.handle("Add Go", sample_profile, sample_resume)
        assert response.type == "edit_skills"
        assert response.updated_resume.skills == {"Languages": ["Python", "Go"]}

    @pytest.mark.asyncio
    async def test_edit_experience_applies_operations(self, llm_factory, sample_profile, sample_resume):
        handler, llm = _handler(
            llm_factory,
            {"type": "editExperience", "autonomousMode": True},
            {SectionEdit: {
                "operations": [
                    {"targetIndex": 1, "action": "delete"},
                    {"targetIndex": 2, "action": "update", "payload": {"title": "C2", "company": "Gamma"}},
                    {"action": "update", "payload": {"title": "D", "company": "Delta"}},
                ],
                "explanation": "Reworked your experience.",
            }},
        )
        response = await handler.handle("Drop Beta, add Delta", sample_profile, sample_resume)

        assert response.type == "edit_experience"
        assert [e.title for e in response.updated_resume.experience] == ["A", "C2", "D"]
        assert response.result["changes"] == [
            "Removed experience entry #2",
            "Updated experience entry #3",
            "Added experience entry",
        ]
        assert len(sample_resume.experience) == 3
        request = llm.generate_model.call_args.args[0]
        assert request.model_id == "gemini-2.0-flash"
        assert AUTONOMOUS_NOTE in request.system_instructions
        assert '"index": 2' in request.user_content

    @pytest.mark.asyncio
    async def test_delete_second_and_retitle_first(self, llm_factory, sample_profile, sample_resume):
        handler, _ = _handler(
            llm_factory,
            {"type": "editExperience"},
            {SectionEdit: {"operations": [
                {"targetIndex": 1, "action": "delete"},
                {"targetIndex": 0, "action": "update", "payload": {"title": "A retitled", "company": "Alpha"}},
            ]}},
        )
        response = await handler.handle(
            "Delete my second job and retitle the first", sample_profile, sample_resume
        )

        experience = response.updated_resume.experience
        assert len(experience) == 2
        assert experience[0].title == "A retitled"
        assert experience[1] == sample_resume.experience[2]
        assert [e.title for e in sample_resume.experience] == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_edit_project_bad_index(self, llm_factory, sample_profile, sample_resume):
        handler, _ = _handler(
            llm_factory,
            {"type": "editProject"},
            {SectionEdit: {"operations": [{"targetIndex": 7, "action": "delete"}]}},
        )
        with pytest.raises(EditIndexError):
            await handler.handle("Remove my eighth project", sample_profile, sample_resume)

    @pytest.mark.asyncio
    async def test_edit_education(self, llm_factory, sample_profile, sample_resume):
        handler, llm = _handler(
            llm_factory,
            {"type": "editEducation"},
            {SectionEdit: {"operations": [
                {"targetIndex": 0, "action": "update", "payload": {"degree": "MSc", "school": "State University"}}
            ]}},
        )
        response = await handler.handle("I have an MSc, not a BSc", sample_profile, sample_resume)
        assert response.type == "edit_education"
        assert response.updated_resume.education[0].degree == "MSc"
        assert llm.generate_model.call_args.args[0].model_id == "llama-3.3-70b-versatile"
