"""Resume chat handler - classifies a chat turn and dispatches it."""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError as PydanticValidationError

from resume_agents.clients.llm_client import GenerationRequest, LLMClient
from resume_agents.config import ModelsConfig
from resume_agents.errors import ParseError, ValidationError
from resume_agents.models.chat import ChatResponse, ChatTurn, SectionEdit, SkillsEdit, SummaryEdit
from resume_agents.models.edits import EditOperation, SectionName
from resume_agents.models.intent import Intent, IntentResult
from resume_agents.models.profile import UserProfile
from resume_agents.models.resume import ResumeDocument
from resume_agents.pipeline.intent_classifier import IntentClassifier, format_history
from resume_agents.pipeline.mutation import apply_to_document, coerce_payload
from resume_agents.pipeline.profile_matcher import format_profile
from resume_agents.pipeline.prompting import numbered

logger = logging.getLogger(__name__)

QUESTION_PROMPT = """\
You are a helpful resume assistant. Answer questions about resume best practices, ATS optimization, how to describe experience, what to include or leave out, formatting and career advice.

Be concise, helpful and encouraging."""

SUMMARY_PROMPT = """\
You are a Summary Rewriting Agent. Rewrite the professional summary according to the user's request. Keep it to 3-4 sentences, professional, ATS-friendly and grounded in the profile.

Return JSON only:
{"newSummary": "...", "changes": ["Change 1"], "explanation": "What you changed and why"}"""

SKILLS_PROMPT = """\
You are a Skills Editing Agent. Apply the user's request to the skills section. Keep skills grouped by domain and return the complete updated map, not just the changed part.

Return JSON only:
{"skills": {"Domain": ["skill"]}, "changes": ["Change 1"], "explanation": "What you changed and why"}"""

SECTION_PROMPT = """\
You are a {label} Editing Agent. Apply the user's request to the {section} section shown below with its entry indices.

Express every change as an operation. Indices refer to the section as shown, before any of your changes:
- update an entry: {{"targetIndex": 0, "action": "update", "payload": {{...full entry...}}, "changes": ["..."]}}
- delete an entry: {{"targetIndex": 1, "action": "delete", "changes": ["..."]}}
- add an entry: {{"targetIndex": null, "action": "update", "payload": {{...full entry...}}, "changes": ["..."]}}

Entry fields: {fields}

Return JSON only:
{{"operations": [], "changes": ["Change 1"], "explanation": "What you changed and why"}}"""

AUTONOMOUS_NOTE = (
    "\n\nAUTONOMOUS MODE: the user asked you to fill in missing details yourself. "
    "Invent plausible, realistic content instead of asking for it."
)

SECTION_INTENTS: dict[Intent, tuple[SectionName, str]] = {
    Intent.EDIT_EXPERIENCE: (SectionName.EXPERIENCE, "Experience"),
    Intent.EDIT_PROJECT: (SectionName.PROJECTS, "Project"),
    Intent.EDIT_EDUCATION: (SectionName.EDUCATION, "Education"),
}

SECTION_FIELDS: dict[SectionName, str] = {
    SectionName.EXPERIENCE: "title, company, location, startDate, endDate, highlights",
    SectionName.PROJECTS: "title, startDate, endDate, technologies, highlights",
    SectionName.EDUCATION: "degree, school, location, startDate, endDate, gpa",
}

RESPONSE_TYPES: dict[Intent, str] = {
    Intent.EDIT_SUMMARY: "edit_summary",
    Intent.EDIT_SKILLS: "edit_skills",
    Intent.EDIT_EXPERIENCE: "edit_experience",
    Intent.EDIT_PROJECT: "edit_project",
    Intent.EDIT_EDUCATION: "edit_education",
}


def _change_message(title: str, explanation: str, changes: list[str]) -> str:
    lines = [title]
    if explanation:
        lines += ["", explanation]
    if changes:
        lines += ["", "Changes made:", *(f"- {c}" for c in changes)]
    return "\n".join(lines)


def parse_operations(raw_ops: list[dict], section: SectionName) -> list[EditOperation]:
    """Build operations from model output, pinned to ``section``.

    Malformed operations are the model's fault and raise ParseError.
    """
    ops = []
    for raw in raw_ops:
        data = {k: v for k, v in raw.items() if k not in ("targetCollection", "target_collection")}
        data["targetCollection"] = section.value
        try:
            op = coerce_payload(EditOperation.model_validate(data))
        except (PydanticValidationError, ValidationError) as exc:
            raise ParseError(f"Invalid {section.value} edit operation: {exc}", json.dumps(raw)[:500]) from exc
        ops.append(op)
    return ops


class ResumeChatHandler:
    def __init__(
        self,
        llm: LLMClient,
        *,
        models: ModelsConfig | None = None,
        history_window: int = 5,
    ):
        self.llm = llm
        self.models = models or ModelsConfig()
        self.history_window = history_window
        self.classifier = IntentClassifier(
            llm, model=self.models.intent_analysis, history_window=history_window
        )

    async def handle(
        self,
        message: str,
        profile: UserProfile,
        current_resume: ResumeDocument | None = None,
        history: list[ChatTurn] | None = None,
    ) -> ChatResponse:
        history = history or []
        intent = await self.classifier.classify(message, current_resume, history)

        if intent.intent is Intent.QUESTION:
            return await self._answer(message, history)
        if intent.intent is Intent.NEW_RESUME_REQUEST:
            return ChatResponse(
                type="generate_new_resume",
                todo_list=intent.todo_list,
                message=(
                    "I'll generate a new tailored resume for you.\n\nTodo list:\n"
                    + numbered(intent.todo_list)
                ),
                requires_action=True,
            )

        if current_resume is None:
            raise ValidationError(
                f"Cannot handle {intent.intent.value} without a current resume; generate one first"
            )
        if intent.intent is Intent.EDIT_SUMMARY:
            return await self._edit_summary(message, profile, current_resume, intent)
        if intent.intent is Intent.EDIT_SKILLS:
            return await self._edit_skills(message, profile, current_resume, intent)
        return await self._edit_section(message, current_resume, intent)

    def _instructions(self, prompt: str, message: str, intent: IntentResult) -> str:
        text = f'{prompt}\n\nUSER REQUEST: "{message}"'
        if intent.todo_list:
            text += f"\n\nTODO LIST:\n{numbered(intent.todo_list)}"
        if intent.autonomous_mode:
            text += AUTONOMOUS_NOTE
        return text

    async def _answer(self, message: str, history: list[ChatTurn]) -> ChatResponse:
        context = format_history(history, self.history_window)
        content = f"RECENT CONVERSATION:\n{context}\n\nQUESTION: {message}" if context else message
        answer = await self.llm.generate_text(GenerationRequest(
            model_id=self.models.general_questions,
            system_instructions=QUESTION_PROMPT,
            user_content=content,
            temperature=0.7,
            max_tokens=500,
            response_format="text",
        ))
        return ChatResponse(type="general_answer", message=answer, requires_action=False)

    async def _edit_summary(
        self, message: str, profile: UserProfile, resume: ResumeDocument, intent: IntentResult
    ) -> ChatResponse:
        edit = await self.llm.generate_model(
            GenerationRequest(
                model_id=self.models.edit_summary,
                system_instructions=self._instructions(SUMMARY_PROMPT, message, intent),
                user_content=(
                    f"CURRENT SUMMARY:\n{resume.summary or 'No summary yet'}\n\n"
                    f"PROFILE:\n{json.dumps(format_profile(profile), indent=2)}"
                ),
                temperature=0.4,
                max_tokens=800,
            ),
            SummaryEdit,
        )
        updated = resume.model_copy(update={"summary": edit.new_summary}, deep=True)
        return ChatResponse(
            type=RESPONSE_TYPES[intent.intent],
            result=edit.to_wire(),
            updated_resume=updated,
            message=_change_message("Summary updated.", edit.explanation, edit.changes),
            requires_action=True,
            todo_list=intent.todo_list,
        )

    async def _edit_skills(
        self, message: str, profile: UserProfile, resume: ResumeDocument, intent: IntentResult
    ) -> ChatResponse:
        edit = await self.llm.generate_model(
            GenerationRequest(
                model_id=self.models.edit_skills,
                system_instructions=self._instructions(SKILLS_PROMPT, message, intent),
                user_content=(
                    f"CURRENT SKILLS:\n{json.dumps(resume.skills, indent=2)}\n\n"
                    f"PROFILE SKILLS:\n{json.dumps(profile.skill_names)}"
                ),
                temperature=0.4,
                max_tokens=1000,
            ),
            SkillsEdit,
        )
        updated = resume.model_copy(update={"skills": edit.skills}, deep=True)
        return ChatResponse(
            type=RESPONSE_TYPES[intent.intent],
            result=edit.to_wire(),
            updated_resume=updated,
            message=_change_message("Skills updated.", edit.explanation, edit.changes),
            requires_action=True,
            todo_list=intent.todo_list,
        )

    async def _edit_section(
        self, message: str, resume: ResumeDocument, intent: IntentResult
    ) -> ChatResponse:
        section, label = SECTION_INTENTS[intent.intent]
        entries = [
            {"index": i, **entry.to_wire()}
            for i, entry in enumerate(getattr(resume, section.value))
        ]
        model = {
            SectionName.EXPERIENCE: self.models.edit_experience,
            SectionName.PROJECTS: self.models.edit_project,
            SectionName.EDUCATION: self.models.edit_education,
        }[section]
        prompt = SECTION_PROMPT.format(label=label, section=section.value, fields=SECTION_FIELDS[section])

        edit = await self.llm.generate_model(
            GenerationRequest(
                model_id=model,
                system_instructions=self._instructions(prompt, message, intent),
                user_content=f"CURRENT {section.value.upper()}:\n{json.dumps(entries, indent=2)}",
                temperature=0.4,
                max_tokens=1500,
            ),
            SectionEdit,
        )
        ops = parse_operations(edit.operations, section)
        updated, applied = apply_to_document(resume, ops)
        changes = list(dict.fromkeys(applied + edit.changes))
        logger.info("Applied %d %s operation(s)", len(ops), section.value)
        return ChatResponse(
            type=RESPONSE_TYPES[intent.intent],
            result={**edit.to_wire(), "changes": changes},
            updated_resume=updated,
            message=_change_message(f"{label} updated.", edit.explanation, changes),
            requires_action=True,
            todo_list=intent.todo_list,
        )
