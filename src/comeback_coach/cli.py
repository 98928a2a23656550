"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from comeback_coach.clients.llm_client import LLMClient, build_llm_client
from comeback_coach.clients.search_client import build_search_client
from comeback_coach.config import AppConfig, load_config
from comeback_coach.export import AVAILABLE_THEMES, render_html_preview, render_pdf
from comeback_coach.logging.usage_store import UsageStore
from comeback_coach.models.analysis import Roadmap, RoadmapWeek, SkillAnalysis
from comeback_coach.models.interview import score_band
from comeback_coach.models.payload import describe_input, parse_analysis_input, to_session_string
from comeback_coach.parsers.resource_parser import parse_resource
from comeback_coach.parsers.resume_parser import load_resume_input, text_input
from comeback_coach.pipeline.feedback_reviewer import FeedbackReviewer
from comeback_coach.pipeline.interviewer import (
    VOICE_OFFLINE_MESSAGE,
    InterviewSession,
    Interviewer,
    format_duration,
)
from comeback_coach.pipeline.orchestrator import CoachOrchestrator
from comeback_coach.pipeline.streaming import InvalidInputError
from comeback_coach.session.storage import SessionStorage
from comeback_coach.session.store import EXIT_WARNING, SessionStore
from comeback_coach.utils.rate_limiter import RateLimiter, RateLimitError

app = typer.Typer(
    name="coach",
    help="Career Comeback Coach - skill analysis, learning roadmap and interview practice",
    no_args_is_help=True,
)
session_app = typer.Typer(help="Inspect or clear the saved session.", no_args_is_help=True)
app.add_typer(session_app, name="session")
console = Console()

_BAND_COLORS = {"success": "green", "warning": "yellow", "error": "red"}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _open_store(config: AppConfig) -> SessionStore:
    storage = SessionStorage(config.session.resolved_db_path)
    return SessionStore(storage, key=config.session.slot_key)


def _usage_store(config: AppConfig) -> UsageStore | None:
    if not config.usage.enabled:
        return None
    return UsageStore(config.usage.resolved_db_path)


def _llm(config: AppConfig, demo: bool) -> LLMClient | None:
    if demo or config.pipeline.demo_mode:
        return None
    return build_llm_client(config.llm)


def _require_roadmap(store: SessionStore) -> Roadmap:
    roadmap = store.state.roadmap_data
    if roadmap is None:
        console.print("[red]No roadmap in the current session. Run `coach analyze` first.[/red]")
        raise typer.Exit(1)
    return roadmap


def _confirm_leave(store: SessionStore) -> None:
    """Ask before discarding an in-progress session on Ctrl-C."""
    if not store.should_warn_on_exit():
        return
    console.print(f"\n[yellow]{EXIT_WARNING}[/yellow]")
    if typer.confirm("Discard the session?", default=False):
        store.clear_session()
        console.print("[dim]Session cleared.[/dim]")
    else:
        console.print("[dim]Session kept. Run `coach session show` to see where you left off.[/dim]")


def _print_analysis(analysis: SkillAnalysis) -> None:
    table = Table(title="Skill Analysis", show_lines=True)
    table.add_column("Area", style="bold")
    table.add_column("Details")
    rows = (
        ("Current skills", analysis.current_skills),
        ("Needs refreshing", analysis.outdated_skills),
        ("Skill gaps", analysis.skill_gaps),
        ("Suggested roles", analysis.suggested_roles),
        ("Strengths", analysis.strength_areas),
        ("To improve", analysis.improvement_areas),
    )
    for label, items in rows:
        table.add_row(label, ", ".join(items) or "-")
    console.print(table)


def _print_week(week: RoadmapWeek) -> None:
    lines = []
    for heading, items in (("Goals", week.goals), ("Topics", week.topics), ("Projects", week.projects)):
        if items:
            lines.append(f"[bold]{heading}[/bold]")
            lines.extend(f"  - {item}" for item in items)
    if week.resources:
        lines.append("[bold]Resources[/bold]")
        for resource in week.resources:
            link = parse_resource(resource)
            hint = " [dim](search)[/dim]" if link.is_search else ""
            lines.append(f"  - [link={link.url}]{link.title}[/link]{hint}")
    console.print(Panel("\n".join(lines) or "-", title=f"Week {week.week}: {week.title}"))


def _print_roadmap_summary(roadmap: Roadmap) -> None:
    body = (
        f"[bold]{roadmap.overall_goal or 'Your learning roadmap'}[/bold]\n"
        f"{len(roadmap.weeks)} weeks | ~{roadmap.estimated_hours:g} hours"
    )
    if roadmap.restored_from:
        body += f"\n[dim]Restored from {roadmap.restored_from}[/dim]"
    console.print(Panel(body, title="Roadmap"))
    for week in roadmap.weeks:
        console.print(f"  Week {week.week}: {week.title}")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def analyze(
    resume: Path = typer.Argument(None, help="Resume file (PDF/DOCX/TXT/MD)"),
    text: str = typer.Option(None, "--text", help="Paste resume text instead of a file"),
    weeks: int = typer.Option(None, "--weeks", "-w", min=1, max=52, help="Roadmap length in weeks"),
    demo: bool = typer.Option(False, "--demo", help="Use sample data instead of the AI service"),
    stream: bool = typer.Option(True, "--stream/--no-stream", help="Show the live narration"),
) -> None:
    """Analyze a resume and build a learning roadmap."""
    config = load_config()
    if resume is None and not text:
        console.print("[red]Provide a resume file or --text.[/red]")
        raise typer.Exit(1)
    if resume is not None and not resume.exists():
        console.print(f"[red]Resume file not found: {resume}[/red]")
        raise typer.Exit(1)

    try:
        if resume is not None:
            item = load_resume_input(resume, inline_files=config.pipeline.inline_files)
        else:
            item = text_input(text)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    weeks = weeks or config.pipeline.default_weeks
    store = _open_store(config)
    store.set_resume(to_session_string(item), weeks)
    console.print(f"[dim]Resume: {describe_input(item)} | {weeks} weeks[/dim]")

    llm = _llm(config, demo)
    if llm is None:
        console.print("[yellow]Demo mode: showing sample results.[/yellow]")
    orchestrator = CoachOrchestrator.from_config(
        config,
        llm,
        RateLimiter(),
        search=build_search_client() if llm is not None else None,
        usage_store=_usage_store(config),
        demo_mode=llm is None,
    )

    def print_phase(phase: str, detail: str) -> None:
        if phase != "done":
            console.print(f"\n[bold cyan]{detail}[/bold cyan]")

    def print_chunk(chunk: str) -> None:
        console.print(chunk, end="", markup=False, highlight=False)

    try:
        if stream:
            result = asyncio.run(orchestrator.run(store, on_phase=print_phase, on_chunk=print_chunk))
            console.print()
        else:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
            ) as progress:
                task = progress.add_task("Starting analysis...", total=None)

                def on_phase(phase: str, detail: str) -> None:
                    progress.update(task, description=detail)

                result = asyncio.run(orchestrator.run(store, on_phase=on_phase))
    except (RateLimitError, InvalidInputError) as e:
        console.print(f"[red]{e}[/red]")
        if isinstance(e, InvalidInputError):
            console.print("[dim]Check your resume and try again.[/dim]")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        _confirm_leave(store)
        raise typer.Exit(130)

    if result.analysis.error:
        console.print(f"[yellow]Showing sample results: {result.analysis.error}[/yellow]")
    _print_analysis(result.analysis)
    _print_roadmap_summary(result.roadmap)
    console.print(f"\n[green]Done in {result.elapsed_seconds:.1f}s.[/green] Next: `coach roadmap` or `coach interview`.")


@app.command()
def roadmap(
    week: int = typer.Option(None, "--week", help="Show a single week"),
) -> None:
    """Show the roadmap from the current session."""
    store = _open_store(load_config())
    data = _require_roadmap(store)
    if store.is_demo_mode():
        console.print("[yellow]Demo roadmap (sample data).[/yellow]")

    if week is None:
        _print_roadmap_summary(data)
        for w in data.weeks:
            _print_week(w)
        return

    match = next((w for w in data.weeks if w.week == week), None)
    if match is None:
        console.print(f"[red]Week {week} is not in this roadmap ({len(data.weeks)} weeks).[/red]")
        raise typer.Exit(1)
    _print_week(match)


@app.command()
def export(
    output: Path = typer.Option(None, "--output", "-o", help="Output file path"),
    html: bool = typer.Option(False, "--html", help="Write themed HTML instead of PDF"),
    theme: str = typer.Option(None, "--theme", "-t", help=f"One of: {', '.join(AVAILABLE_THEMES)}"),
) -> None:
    """Export the roadmap as a printable PDF (or HTML)."""
    config = load_config()
    data = _require_roadmap(_open_store(config))
    if not data.weeks:
        console.print("[red]This roadmap has no weeks to export.[/red]")
        raise typer.Exit(1)

    theme = theme or config.export.theme
    if theme not in AVAILABLE_THEMES:
        console.print(f"[yellow]Unknown theme {theme!r}, using professional.[/yellow]")

    suffix = ".html" if html else ".pdf"
    if output is None:
        output = Path(f"./output/learning-roadmap{suffix}")
    output.parent.mkdir(parents=True, exist_ok=True)

    if html:
        output.write_text(render_html_preview(data, theme), encoding="utf-8")
    else:
        with console.status("Rendering PDF..."):
            output.write_bytes(render_pdf(data, theme))
    console.print(f"[green]Saved: {output}[/green]")


@app.command()
def interview(
    mode: str = typer.Option("text", "--mode", "-m", help="text or voice"),
    demo: bool = typer.Option(False, "--demo", help="Use scripted questions"),
    minutes: float = typer.Option(None, "--minutes", help="Interview length"),
) -> None:
    """Practice a timed mock interview. Type /end to finish early."""
    if mode not in ("text", "voice"):
        console.print("[red]--mode must be 'text' or 'voice'.[/red]")
        raise typer.Exit(1)
    config = load_config()
    store = _open_store(config)
    if mode == "voice":
        console.print(f"[yellow]{VOICE_OFFLINE_MESSAGE}[/yellow]")
    store.update_session(has_active_session=True, current_step="interview", interview_mode="text")

    llm = _llm(config, demo)
    interviewer = Interviewer(
        llm,
        RateLimiter(),
        model=config.llm.chat_model,
        max_requests=config.rate_limit.chat_max_requests,
        window_seconds=config.rate_limit.chat_window_seconds,
        demo_mode=llm is None,
        narration_delay=config.pipeline.narration_delay,
    )
    duration = int(minutes * 60) if minutes else config.pipeline.interview_seconds
    session = InterviewSession(interviewer, store.state.roadmap_data, duration_seconds=duration)

    console.print(Panel(session.messages[0].content, title="Interviewer", border_style="cyan"))
    try:
        asyncio.run(_interview_loop(session))
    except (KeyboardInterrupt, EOFError):
        console.print()

    session.end(store)
    answered = sum(1 for m in session.messages if m.role == "user")
    console.print(f"[green]Interview saved ({answered} answers).[/green] Run `coach feedback` for your review.")


async def _interview_loop(session: InterviewSession) -> None:
    # One event loop for the whole interview so the API client is reused.
    while not session.is_expired():
        prompt = f"[dim]{format_duration(session.time_remaining())}[/dim] [bold]You:[/bold] "
        answer = await asyncio.to_thread(console.input, prompt)
        if answer.strip() == "/end":
            return
        if not answer.strip():
            continue
        console.print("[bold cyan]Interviewer:[/bold cyan] ", end="")
        try:
            await _stream_reply(session, answer)
        except RateLimitError as e:
            console.print(f"\n[yellow]{e}[/yellow]")
    console.print("\n[yellow]Time's up![/yellow]")


async def _stream_reply(session: InterviewSession, answer: str) -> None:
    shown: list[str] = []
    async for event in session.send_stream(answer):
        if event.text:
            console.print(event.text, end="", markup=False, highlight=False)
            shown.append(event.text)
        elif event.done and event.result != "".join(shown).strip():
            # Partial or missing output: show the reply that was recorded.
            if shown:
                console.print()
            console.print(event.result, end="", markup=False, highlight=False)
    console.print()


@app.command()
def feedback(
    demo: bool = typer.Option(False, "--demo", help="Show sample feedback"),
) -> None:
    """Review the last interview with section scores."""
    config = load_config()
    store = _open_store(config)
    transcript = store.state.interview_transcript
    if not transcript:
        console.print("[red]No interview in the current session. Run `coach interview` first.[/red]")
        raise typer.Exit(1)

    reviewer = FeedbackReviewer(_llm(config, demo), config.llm.chat_model, demo_mode=demo)
    with console.status("Reviewing your interview..."):
        result = asyncio.run(reviewer.review(transcript))

    color = _BAND_COLORS[score_band(result.overall_score)]
    console.print(Panel(f"[bold {color}]{result.overall_score}/100[/bold {color}]", title="Overall score"))
    for section in result.sections:
        band = _BAND_COLORS[score_band(section.score)]
        lines = [section.feedback]
        if section.highlights:
            lines.append("[green]Highlights[/green]")
            lines.extend(f"  + {h}" for h in section.highlights)
        if section.improvements:
            lines.append("[yellow]To improve[/yellow]")
            lines.extend(f"  - {i}" for i in section.improvements)
        console.print(
            Panel(
                "\n".join(lines),
                title=f"{section.title} [{band}]{section.score}/{section.max_score}[/{band}]",
                border_style=band,
            )
        )


@app.command()
def restore(
    file: Path = typer.Argument(help="A previously exported roadmap PDF"),
) -> None:
    """Continue to interview practice from an exported roadmap."""
    if not file.exists():
        console.print(f"[red]File not found: {file}[/red]")
        raise typer.Exit(1)
    store = _open_store(load_config())
    try:
        store.restore_from_roadmap_file(file)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Restored session from {file.name}.[/green] Run `coach interview` to practice.")


@app.command()
def usage() -> None:
    """Show this month's usage and estimated cost."""
    config = load_config()
    store = _usage_store(config)
    if store is None:
        console.print("[yellow]Usage logging is disabled in config.yaml.[/yellow]")
        return
    stats = store.get_monthly_stats()
    console.print(
        Panel(
            f"Runs: {stats['total_runs']} (sample data: {stats['fallback_runs']})\n"
            f"Tokens: {stats['total_input_tokens']:,} in / {stats['total_output_tokens']:,} out\n"
            f"Estimated cost: ${stats['total_cost_usd']:.4f}\n"
            f"Success rate: {stats['success_rate']:.0f}%",
            title=f"Usage {stats['month']}",
        )
    )


@session_app.command("show")
def session_show(
    raw: bool = typer.Option(False, "--json", help="Print the stored JSON"),
) -> None:
    """Show the saved session."""
    store = _open_store(load_config())
    if raw:
        console.print_json(store.snapshot() or "{}")
        return
    state = store.state
    table = Table(show_header=False)
    table.add_row("Active", "yes" if state.has_active_session else "no")
    table.add_row("Step", state.current_step)
    if state.resume_data:
        table.add_row("Resume", describe_input(parse_analysis_input(state.resume_data)))
    if state.roadmap_weeks:
        table.add_row("Weeks", str(state.roadmap_weeks))
    if state.roadmap_data:
        table.add_row("Roadmap", state.roadmap_data.overall_goal or state.roadmap_data.restored_from or "-")
    if state.interview_transcript:
        table.add_row("Interview", f"{len(state.interview_transcript)} messages")
    if store.is_demo_mode():
        table.add_row("Mode", "demo")
    console.print(table)


@session_app.command("clear")
def session_clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Discard the saved session."""
    store = _open_store(load_config())
    if store.should_warn_on_exit() and not yes:
        console.print(f"[yellow]{EXIT_WARNING}[/yellow]")
        if not typer.confirm("Clear it anyway?", default=False):
            raise typer.Exit(0)
    store.clear_session()
    console.print("[green]Session cleared.[/green]")


if __name__ == "__main__":
    app()
