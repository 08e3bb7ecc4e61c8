"""HTTP surface: NDJSON pipeline stream plus the chat and section endpoints."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import Field

from resume_agents.clients.llm_client import LLMClient
from resume_agents.config import AppConfig, load_config
from resume_agents.errors import (
    ConfigurationError,
    EditIndexError,
    GenerationError,
    ParseError,
    ResumeAgentsError,
    StageError,
    ValidationError,
)
from resume_agents.logging import build_usage_log
from resume_agents.logging.usage_store import UsageStore
from resume_agents.models.base import CamelModel
from resume_agents.models.chat import ChatTurn
from resume_agents.models.events import EventKind
from resume_agents.models.job import JobAnalysis, MatchAnalysis
from resume_agents.models.profile import UserProfile
from resume_agents.models.resume import ResumeDocument
from resume_agents.pipeline.chat_handler import ResumeChatHandler
from resume_agents.pipeline.orchestrator import PipelineOrchestrator
from resume_agents.pipeline.section_coordinator import SectionCoordinator
from resume_agents.store.resume_store import ResumeRepository, SQLiteResumeStore

logger = logging.getLogger(__name__)

# Most specific first: ParseError and ValidationError are also ValueErrors.
ERROR_STATUS: tuple[tuple[type[Exception], int, str], ...] = (
    (ValidationError, 400, "Invalid request"),
    (EditIndexError, 422, "Edit index out of range"),
    (ConfigurationError, 500, "Server is not configured"),
    (GenerationError, 502, "Generation failed"),
    (ParseError, 502, "Model output could not be parsed"),
)


class CoordinatorRequest(CamelModel):
    profile: UserProfile
    job_description: str = Field(min_length=1)
    user_id: str | None = None


class ChatRequest(CamelModel):
    message: str = Field(min_length=1)
    profile: UserProfile
    current_resume: ResumeDocument | None = None
    conversation_history: list[ChatTurn] = Field(default_factory=list)
    user_id: str | None = None


class SectionRequest(CamelModel):
    section: str
    profile: UserProfile
    job_description: str | None = None
    job_analysis: JobAnalysis | None = None
    match_analysis: MatchAnalysis | None = None
    user_request: str | None = None
    current_resume: ResumeDocument | None = None
    user_id: str | None = None


def error_status(exc: Exception) -> tuple[int, str]:
    if isinstance(exc, StageError) and isinstance(exc.cause, Exception):
        status, label = error_status(exc.cause)
        return status, f"{exc.stage} failed: {label}"
    for exc_type, status, label in ERROR_STATUS:
        if isinstance(exc, exc_type):
            return status, label
    return 500, "Internal error"


def create_app(
    config: AppConfig | None = None,
    *,
    llm: LLMClient | None = None,
    store: ResumeRepository | None = None,
    usage_store: UsageStore | None = None,
) -> FastAPI:
    config = config or load_config()
    llm = llm or LLMClient(timeout=config.llm.timeout, max_retries=config.llm.max_retries)
    store = store or SQLiteResumeStore(config.store.resolved_db_path)
    usage_store = usage_store or UsageStore(config.store.resolved_usage_db_path)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await llm.aclose()

    app = FastAPI(title="Resume Agents API", version="0.1.0", lifespan=lifespan)

    async def record_usage(
        client: LLMClient,
        mode: str,
        started: float,
        *,
        user_id: str | None,
        detail: str | None = None,
        error: BaseException | str | None = None,
    ) -> None:
        log = build_usage_log(
            mode,
            client.get_token_summary(),
            user_id=user_id,
            detail=detail,
            elapsed_seconds=time.monotonic() - started,
            error=error,
        )
        await asyncio.to_thread(usage_store.save_log, log)

    def orchestrator_for(client: LLMClient) -> PipelineOrchestrator:
        return PipelineOrchestrator(
            client,
            models=config.models,
            emit_branch_events=config.pipeline.emit_branch_events,
        )

    @app.exception_handler(ResumeAgentsError)
    async def handle_domain_error(request: Request, exc: ResumeAgentsError) -> JSONResponse:
        status, label = error_status(exc)
        if status >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status, content={"error": label, "details": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def handle_bad_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        return JSONResponse(status_code=400, content={"error": "Invalid request", "details": details})

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.post("/api/resume-agents/coordinator")
    async def coordinator(body: CoordinatorRequest) -> StreamingResponse:
        client = llm.fork()
        orchestrator = orchestrator_for(client)

        async def lines() -> AsyncIterator[str]:
            started = time.monotonic()
            failure: str | None = None
            async for event in orchestrator.stream(body.profile, body.job_description):
                if event.kind is EventKind.COMPLETE and body.user_id:
                    resume = ResumeDocument.model_validate(event.payload["resume"])
                    await asyncio.to_thread(store.save_resume_document, body.user_id, resume)
                elif event.kind is EventKind.ERROR:
                    failure = event.message
                yield event.to_line()
            await record_usage(client, "pipeline", started, user_id=body.user_id, error=failure)

        return StreamingResponse(lines(), media_type="text/event-stream")

    @app.post("/api/resume-chat-handler")
    async def chat(body: ChatRequest) -> dict:
        client = llm.fork()
        handler = ResumeChatHandler(
            client, models=config.models, history_window=config.pipeline.history_window
        )
        current = body.current_resume
        if current is None and body.user_id:
            current = await asyncio.to_thread(store.load_resume_document, body.user_id)

        started = time.monotonic()
        try:
            response = await handler.handle(
                body.message, body.profile, current, body.conversation_history
            )
        except ResumeAgentsError as exc:
            await record_usage(client, "chat", started, user_id=body.user_id, error=exc)
            raise
        await record_usage(client, "chat", started, user_id=body.user_id, detail=response.type)

        if response.updated_resume is not None and body.user_id:
            await asyncio.to_thread(store.save_resume_document, body.user_id, response.updated_resume)
        return response.to_wire()

    @app.post("/api/resume-agents/section-coordinator")
    async def section(body: SectionRequest) -> dict:
        client = llm.fork()
        coordinator = SectionCoordinator(orchestrator_for(client))
        current = body.current_resume
        if current is None and body.user_id:
            current = await asyncio.to_thread(store.load_resume_document, body.user_id)

        started = time.monotonic()
        try:
            outcome = await coordinator.run(
                body.section,
                body.profile,
                job_description=body.job_description,
                job_analysis=body.job_analysis,
                match_analysis=body.match_analysis,
                user_request=body.user_request,
                current_resume=current,
            )
        except ResumeAgentsError as exc:
            await record_usage(
                client, "section", started, user_id=body.user_id, detail=body.section, error=exc
            )
            raise
        await record_usage(client, "section", started, user_id=body.user_id, detail=body.section)

        if outcome.updated_resume is not None and body.user_id:
            await asyncio.to_thread(store.save_resume_document, body.user_id, outcome.updated_resume)
        return {
            "type": "section",
            "result": {
                **outcome.result,
                "jobAnalysis": outcome.job_analysis.to_wire(),
                "matchAnalysis": outcome.match_analysis.to_wire(),
            },
            "updatedResume": outcome.updated_resume.to_wire() if outcome.updated_resume else None,
            "message": f"Regenerated the {outcome.section} section",
            "requiresAction": outcome.updated_resume is not None,
        }

    return app
