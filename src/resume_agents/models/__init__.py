"""Data models for the resume agents pipeline."""

from resume_agents.models.chat import ChatResponse, ChatTurn
from resume_agents.models.edits import EditAction, EditOperation, SectionName
from resume_agents.models.events import EventKind, ProgressEvent
from resume_agents.models.intent import Intent, IntentResult
from resume_agents.models.job import JobAnalysis, MatchAnalysis
from resume_agents.models.optimization import (
    ExperienceOptimization,
    ProjectOptimization,
    SkillsEnhancement,
    SummaryResult,
)
from resume_agents.models.profile import UserProfile
from resume_agents.models.resume import (
    CertificateEntry,
    EducationEntry,
    ExperienceEntry,
    Header,
    ProjectEntry,
    ResumeDocument,
)

__all__ = [
    "CertificateEntry",
    "ChatResponse",
    "ChatTurn",
    "EditAction",
    "EditOperation",
    "EducationEntry",
    "EventKind",
    "ExperienceEntry",
    "ExperienceOptimization",
    "Header",
    "Intent",
    "IntentResult",
    "JobAnalysis",
    "MatchAnalysis",
    "ProgressEvent",
    "ProjectEntry",
    "ProjectOptimization",
    "ResumeDocument",
    "SectionName",
    "SkillsEnhancement",
    "SummaryResult",
    "UserProfile",
]
