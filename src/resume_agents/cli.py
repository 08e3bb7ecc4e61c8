"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import json
import time
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from resume_agents.clients.llm_client import LLMClient
from resume_agents.clients.providers import MODEL_REGISTRY
from resume_agents.config import load_config
from resume_agents.errors import ResumeAgentsError
from resume_agents.logging import build_usage_log, configure_logging
from resume_agents.logging.usage_store import UsageStore
from resume_agents.models.events import ProgressEvent
from resume_agents.models.profile import UserProfile
from resume_agents.models.resume import ResumeDocument
from resume_agents.pipeline.chat_handler import ResumeChatHandler
from resume_agents.pipeline.orchestrator import PipelineOrchestrator
from resume_agents.store.resume_store import SQLiteResumeStore

app = typer.Typer(
    name="resume-agents",
    help="Multi-agent resume generation and editing",
    no_args_is_help=True,
)
console = Console()


def _read_json(path: Path, label: str) -> dict:
    if not path.exists():
        console.print(f"[red]{label} file not found: {path}[/red]")
        raise typer.Exit(1)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        console.print(f"[red]{label} file is not valid JSON: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def generate(
    profile_file: Path = typer.Argument(help="Profile JSON file"),
    jd: Path = typer.Option(..., "--jd", help="Job description text file"),
    output: Path = typer.Option(None, "--output", "-o", help="Output path for the resume JSON"),
    user_id: str = typer.Option(None, "--user-id", help="Also save the resume for this user"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Generate a tailored resume for a job description."""
    configure_logging("DEBUG" if verbose else "WARNING")
    profile = UserProfile.model_validate(_read_json(profile_file, "Profile"))
    if not jd.exists():
        console.print(f"[red]Job description file not found: {jd}[/red]")
        raise typer.Exit(1)
    jd_text = jd.read_text(encoding="utf-8")

    config = load_config()
    llm = LLMClient(timeout=config.llm.timeout, max_retries=config.llm.max_retries)
    orchestrator = PipelineOrchestrator(
        llm,
        models=config.models,
        emit_branch_events=config.pipeline.emit_branch_events,
    )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Generating resume...", total=None)

        def on_event(event: ProgressEvent) -> None:
            progress.update(task, description=f"[{event.step_index}/{event.total_steps}] {event.message}")

        async def _run():
            try:
                return await orchestrator.generate(profile, jd_text, on_event=on_event)
            finally:
                await llm.aclose()

        started = time.monotonic()
        try:
            result = asyncio.run(_run())
        except ResumeAgentsError as e:
            _save_usage(config, build_usage_log(
                "pipeline", llm.get_token_summary(), user_id=user_id,
                elapsed_seconds=time.monotonic() - started, error=e,
            ))
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)

    tokens = llm.get_token_summary()
    usage = build_usage_log(
        "pipeline", tokens, user_id=user_id, elapsed_seconds=result.elapsed_seconds
    )
    _save_usage(config, usage)

    if output is None:
        output = Path(f"./output/{profile.name or 'resume'}_resume.json".replace(" ", "_"))
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(result.resume.to_wire(), indent=2, ensure_ascii=False), encoding="utf-8")
    console.print(f"\n[green]Resume saved: {output}[/green]")

    if user_id:
        SQLiteResumeStore(config.store.resolved_db_path).save_resume_document(user_id, result.resume)
        console.print(f"[green]Stored for user {user_id}[/green]")

    console.print(
        Panel(
            f"Match score: [bold]{result.match.match_score}[/bold]"
            f"\nExperience: {len(result.resume.experience)} | Projects: {len(result.resume.projects)}"
            f" | Skill groups: {len(result.resume.skills)}"
            f"\nTokens: {usage.total_input_tokens} in / {usage.total_output_tokens} out"
            f" (${usage.estimated_cost_usd:.4f})"
            f"\nElapsed: {result.elapsed_seconds:.1f}s",
            title="Result",
        )
    )


@app.command()
def chat(
    message: str = typer.Argument(help="Chat message"),
    profile_file: Path = typer.Option(..., "--profile", help="Profile JSON file"),
    resume: Path = typer.Option(None, "--resume", help="Current resume JSON file"),
    output: Path = typer.Option(None, "--output", "-o", help="Where to write the updated resume"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Send one chat turn to the resume assistant."""
    configure_logging("DEBUG" if verbose else "WARNING")
    profile = UserProfile.model_validate(_read_json(profile_file, "Profile"))
    current = ResumeDocument.model_validate(_read_json(resume, "Resume")) if resume else None

    config = load_config()
    llm = LLMClient(timeout=config.llm.timeout, max_retries=config.llm.max_retries)
    handler = ResumeChatHandler(
        llm, models=config.models, history_window=config.pipeline.history_window
    )

    async def _run():
        try:
            return await handler.handle(message, profile, current)
        finally:
            await llm.aclose()

    started = time.monotonic()
    try:
        with console.status("Thinking..."):
            response = asyncio.run(_run())
    except ResumeAgentsError as e:
        _save_usage(config, build_usage_log(
            "chat", llm.get_token_summary(), elapsed_seconds=time.monotonic() - started, error=e
        ))
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    _save_usage(config, build_usage_log(
        "chat", llm.get_token_summary(), detail=response.type,
        elapsed_seconds=time.monotonic() - started,
    ))

    console.print(Panel(response.message, title=response.type, border_style="blue"))
    if response.updated_resume is not None:
        target = output or resume
        if target is None:
            target = Path("./output/updated_resume.json")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(
            json.dumps(response.updated_resume.to_wire(), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        console.print(f"[green]Updated resume saved: {target}[/green]")


@app.command()
def models() -> None:
    """List the registered models."""
    table = Table(title="Model registry")
    table.add_column("Model")
    table.add_column("Tier")
    table.add_column("Family")
    table.add_column("Credential")
    table.add_column("Fallback")
    for model in MODEL_REGISTRY.values():
        table.add_row(
            model.id,
            model.tier,
            model.family.value,
            model.credential_env_var,
            model.fallback_model_id or "-",
        )
    console.print(table)


@app.command()
def usage(
    user_id: str = typer.Option(None, "--user", help="Only this user's usage"),
) -> None:
    """Show this month's usage."""
    config = load_config()
    stats = UsageStore(config.store.resolved_usage_db_path).get_monthly_stats(user_id=user_id)
    by_mode = ", ".join(f"{k}: {v}" for k, v in sorted(stats["runs_by_mode"].items())) or "-"
    top = ", ".join(f"{detail} ({n})" for detail, n in stats["top_details"][:5]) or "-"
    console.print(Panel(
        f"Runs: {stats['total_runs']} ({by_mode})"
        f"\nTop actions: {top}"
        f"\nGeneration calls: {stats['total_calls']}"
        f"\nTokens: {stats['total_input_tokens']} in / {stats['total_output_tokens']} out"
        f"\nEstimated cost: ${stats['total_cost_usd']:.4f}"
        f"\nSuccess rate: {stats['success_rate']:.0f}%",
        title=f"Usage {stats['month']}" + (f" for {user_id}" if user_id else ""),
    ))


@app.command()
def serve(
    host: str = typer.Option(None, "--host", help="Bind address"),
    port: int = typer.Option(None, "--port", help="Port"),
    log_level: str = typer.Option("INFO", "--log-level", help="Log level"),
) -> None:
    """Run the HTTP API."""
    import uvicorn

    from resume_agents.api.app import create_app

    configure_logging(log_level.upper())
    config = load_config()
    uvicorn.run(
        create_app(config),
        host=host or config.server.host,
        port=port or config.server.port,
        log_config=None,
    )


def _save_usage(config, log) -> None:
    UsageStore(config.store.resolved_usage_db_path).save_log(log)


if __name__ == "__main__":
    app()
