"""Main pipeline orchestrator - coordinates all agents and streams progress."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

from resume_agents.clients.llm_client import LLMClient
from resume_agents.config import ModelsConfig
from resume_agents.errors import StageError
from resume_agents.models.events import EventKind, ProgressEvent
from resume_agents.models.job import JobAnalysis, MatchAnalysis
from resume_agents.models.optimization import (
    ExperienceOptimization,
    ProjectOptimization,
    SkillsEnhancement,
    SummaryResult,
)
from resume_agents.models.profile import UserProfile
from resume_agents.models.resume import ResumeDocument
from resume_agents.pipeline.assembler import assemble_resume
from resume_agents.pipeline.channel import EventChannel
from resume_agents.pipeline.experience_optimizer import ExperienceOptimizer
from resume_agents.pipeline.jd_analyst import JDAnalyst
from resume_agents.pipeline.profile_matcher import ProfileMatcher
from resume_agents.pipeline.project_optimizer import ProjectOptimizer
from resume_agents.pipeline.skills_enhancer import SkillsEnhancer
from resume_agents.pipeline.summary_writer import SummaryWriter

logger = logging.getLogger(__name__)

T = TypeVar("T")
Emit = Callable[[ProgressEvent], None]


@dataclass(frozen=True)
class PipelineStage:
    name: str
    depends_on: tuple[str, ...] = ()
    parallel_group: str | None = None


PIPELINE_STAGES: tuple[PipelineStage, ...] = (
    PipelineStage("Analyze"),
    PipelineStage("Match", ("Analyze",)),
    PipelineStage("OptimizeProjects", ("Analyze", "Match"), "optimize"),
    PipelineStage("OptimizeExperience", ("Analyze", "Match"), "optimize"),
    PipelineStage("EnhanceSkills", ("Analyze", "Match"), "optimize"),
    PipelineStage("Summarize", ("OptimizeProjects", "OptimizeExperience", "EnhanceSkills")),
    PipelineStage(
        "Assemble",
        ("Analyze", "Match", "OptimizeProjects", "OptimizeExperience", "EnhanceSkills", "Summarize"),
    ),
)

# Analyze, Match, the optimize group and Summarize each count as one step.
TOTAL_STEPS = 5

# Runs started by stream() outlive a consumer that stops reading.
_background_tasks: set[asyncio.Task] = set()


@dataclass
class PipelineResult:
    """Complete result from the generation pipeline."""

    resume: ResumeDocument
    job: JobAnalysis
    match: MatchAnalysis
    experience: ExperienceOptimization
    projects: ProjectOptimization
    skills: SkillsEnhancement
    summary: SummaryResult
    elapsed_seconds: float = 0.0
    metadata: dict = field(default_factory=dict)

    @property
    def insights(self) -> dict:
        return {
            "jobAnalysis": self.job.to_wire(),
            "matchAnalysis": self.match.to_wire(),
            "matchScore": self.match.match_score,
            "optimizationNotes": {
                "experience": self.experience.optimization_notes,
                "projects": self.projects.optimization_notes,
                "skills": self.skills.optimization_notes,
            },
        }


def _progress(stage: str, status: str, step: int, message: str) -> ProgressEvent:
    return ProgressEvent(
        kind=EventKind.PROGRESS,
        message=message,
        step_index=step,
        total_steps=TOTAL_STEPS,
        payload={"stage": stage, "status": status},
    )


def _discard(event: ProgressEvent) -> None:
    pass


class PipelineOrchestrator:
    """Runs analyze -> match -> {optimize x3} -> summarize -> assemble."""

    def __init__(
        self,
        llm: LLMClient,
        *,
        models: ModelsConfig | None = None,
        emit_branch_events: bool = False,
    ):
        models = models or ModelsConfig()
        self.jd_analyst = JDAnalyst(llm, model=models.job_analyzer)
        self.profile_matcher = ProfileMatcher(llm, model=models.profile_matcher)
        self.experience_optimizer = ExperienceOptimizer(llm, model=models.experience_optimizer)
        self.project_optimizer = ProjectOptimizer(llm, model=models.project_optimizer)
        self.skills_enhancer = SkillsEnhancer(llm, model=models.skills_enhancer)
        self.summary_writer = SummaryWriter(llm, model=models.summary_generator)
        self.emit_branch_events = emit_branch_events

    async def _stage(self, name: str, work: Awaitable[T]) -> T:
        try:
            return await work
        except Exception as exc:
            logger.error("Stage %s failed", name, exc_info=True)
            raise StageError(name, exc) from exc

    async def _branch(self, name: str, work: Awaitable[T], emit: Emit) -> T:
        if self.emit_branch_events:
            emit(_progress(name, "start", 3, f"{name} started"))
        result = await self._stage(name, work)
        if self.emit_branch_events:
            emit(_progress(name, "done", 3, f"{name} complete"))
        return result

    async def _execute(
        self,
        profile: UserProfile,
        job_description: str,
        emit: Emit,
        user_request: str | None = None,
        job: JobAnalysis | None = None,
        match: MatchAnalysis | None = None,
    ) -> PipelineResult:
        start = time.monotonic()
        emit(ProgressEvent(
            kind=EventKind.START,
            message="Starting multi-agent resume generation",
            step_index=0,
            total_steps=TOTAL_STEPS,
        ))

        # --- Step 1: Analyze ---
        logger.info("Analyzing job description")
        emit(_progress("Analyze", "start", 1, "Analyzing job description"))
        if job is None:
            job = await self._stage("Analyze", self.jd_analyst.analyze(job_description))
        emit(_progress("Analyze", "done", 1, "Job analysis complete"))

        # --- Step 2: Match ---
        logger.info("Matching profile to requirements")
        emit(_progress("Match", "start", 2, "Matching profile to job requirements"))
        if match is None:
            match = await self._stage("Match", self.profile_matcher.match(profile, job))
        emit(_progress("Match", "done", 2, f"Profile matching complete (score {match.match_score})"))

        # --- Step 3: parallel optimize group ---
        logger.info("Optimizing experience, projects and skills")
        emit(_progress("Optimize", "start", 3, "Optimizing experience, projects and skills"))
        projects, experience, skills = await asyncio.gather(
            self._branch(
                "OptimizeProjects",
                self.project_optimizer.optimize(
                    profile, job.model_copy(deep=True), match.model_copy(deep=True), user_request
                ),
                emit,
            ),
            self._branch(
                "OptimizeExperience",
                self.experience_optimizer.optimize(
                    profile, job.model_copy(deep=True), match.model_copy(deep=True), user_request
                ),
                emit,
            ),
            self._branch(
                "EnhanceSkills",
                self.skills_enhancer.enhance(
                    profile, job.model_copy(deep=True), match.model_copy(deep=True), user_request
                ),
                emit,
            ),
        )
        emit(_progress("Optimize", "done", 3, "Section optimization complete"))

        # --- Step 4: Summarize ---
        logger.info("Writing professional summary")
        emit(_progress("Summarize", "start", 4, "Writing professional summary"))
        summary = await self._stage(
            "Summarize",
            self.summary_writer.write(profile, job, experience, projects, skills, user_request),
        )
        emit(_progress("Summarize", "done", 4, "Summary complete"))

        result, payload = await self._stage(
            "Assemble",
            _assemble(profile, job, match, experience, projects, skills, summary, start),
        )
        logger.info("Resume generated in %.1fs", result.elapsed_seconds)
        emit(ProgressEvent(
            kind=EventKind.COMPLETE,
            message="Resume generation complete",
            step_index=TOTAL_STEPS,
            total_steps=TOTAL_STEPS,
            payload=payload,
        ))
        return result

    async def generate(
        self,
        profile: UserProfile,
        job_description: str,
        *,
        user_request: str | None = None,
        job: JobAnalysis | None = None,
        match: MatchAnalysis | None = None,
        on_event: Emit | None = None,
    ) -> PipelineResult:
        """Run the pipeline without a channel.

        A supplied ``job`` or ``match`` analysis replaces the corresponding
        stage's generation call.

        Raises:
            StageError: naming the stage that failed.
        """
        return await self._execute(
            profile, job_description, on_event or _discard, user_request, job, match
        )

    async def run(
        self,
        profile: UserProfile,
        job_description: str,
        channel: EventChannel,
    ) -> PipelineResult | None:
        """Run the pipeline into ``channel``, closing it when the run ends.

        A failure becomes a single ``error`` event; nothing is raised.
        """
        try:
            return await self._execute(profile, job_description, channel.send)
        except StageError as exc:
            channel.send(ProgressEvent(
                kind=EventKind.ERROR,
                message=str(exc),
                step_index=_step_of(exc.stage),
                total_steps=TOTAL_STEPS,
                payload={"stage": exc.stage, "error": str(exc.cause)},
            ))
            return None
        finally:
            channel.close()

    async def stream(self, profile: UserProfile, job_description: str) -> AsyncIterator[ProgressEvent]:
        """Yield events as the run produces them.

        The run is a background task: if the consumer stops early the
        provider calls still finish and their events are dropped.
        """
        channel = EventChannel()
        task = asyncio.create_task(self.run(profile, job_description, channel))
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)
        async for event in channel:
            yield event


def _step_of(stage: str) -> int:
    steps = {"Analyze": 1, "Match": 2, "Summarize": 4, "Assemble": TOTAL_STEPS}
    return steps.get(stage, 3)


async def _assemble(
    profile: UserProfile,
    job: JobAnalysis,
    match: MatchAnalysis,
    experience: ExperienceOptimization,
    projects: ProjectOptimization,
    skills: SkillsEnhancement,
    summary: SummaryResult,
    start: float,
) -> tuple[PipelineResult, dict]:
    resume = assemble_resume(profile, job, experience, projects, skills, summary)
    result = PipelineResult(
        resume=resume,
        job=job,
        match=match,
        experience=experience,
        projects=projects,
        skills=skills,
        summary=summary,
        elapsed_seconds=time.monotonic() - start,
    )
    return result, {"resume": resume.to_wire(), "insights": result.insights}
