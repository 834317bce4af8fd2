"""CLI for the coaching context engine.

Builds a context snapshot for one user, either from JSON files (in-memory
repositories) or from the configured database (read-only).
"""

import asyncio
import json
from datetime import datetime
from pathlib import Path

import typer
from loguru import logger
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.json import JSON
from rich.panel import Panel
from rich.text import Text

from coach_context.coach.context_builder import build_coaching_context
from coach_context.coach.errors import ContextError
from coach_context.coach.formatting import format_compact_context
from coach_context.config.settings import settings
from coach_context.core.logger import setup_logger
from coach_context.models.profile import AthleteProfile
from coach_context.models.session import SessionRecord
from coach_context.repositories.memory import InMemoryActivityRepository, InMemoryProfileRepository
from coach_context.repositories.sql import SqlActivityRepository, SqlProfileRepository

console = Console()

app = typer.Typer(
    name="coach-context",
    help="Coaching context engine - training load, trends and patterns snapshot",
    add_completion=False,
)

_sessions_adapter = TypeAdapter(list[SessionRecord])


def _load_sessions(path: Path) -> list[SessionRecord]:
    return _sessions_adapter.validate_json(path.read_text(encoding="utf-8"))


def _load_profile(path: Path) -> AthleteProfile:
    return AthleteProfile.model_validate_json(path.read_text(encoding="utf-8"))


def _build_repositories(user_id: str, sessions_file: Path | None, profile_file: Path | None):
    if sessions_file is None:
        logger.info(f"Reading sessions from database: {settings.database_url}")
        return SqlActivityRepository(), SqlProfileRepository()

    activities = InMemoryActivityRepository({user_id: _load_sessions(sessions_file)})
    profiles = InMemoryProfileRepository(profiles={user_id: _load_profile(profile_file)} if profile_file else None)
    return activities, profiles


@app.command()
def snapshot(
    user_id: str = typer.Argument(..., help="User ID to build the snapshot for"),
    sessions_file: Path | None = typer.Option(None, "--sessions", "-s", exists=True, dir_okay=False, help="JSON list of session records"),
    profile_file: Path | None = typer.Option(None, "--profile", "-p", exists=True, dir_okay=False, help="JSON athlete profile"),
    weeks_back: int = typer.Option(settings.weeks_back, "--weeks-back", "-w", min=1, help="Number of weekly summaries"),
    recent: int = typer.Option(settings.include_recent_rides, "--recent", "-r", min=0, help="Number of recent rides"),
    now: datetime | None = typer.Option(None, "--now", help="Reference time (ISO 8601, default: current UTC time)"),
    compact: bool = typer.Option(False, "--compact", help="Print the prompt-ready text block"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    """Build and print a coaching context snapshot."""
    setup_logger(settings, level="DEBUG" if debug else None)

    try:
        activities, profiles = _build_repositories(user_id, sessions_file, profile_file)
        result = asyncio.run(
            build_coaching_context(
                user_id,
                activities,
                profiles,
                weeks_back=weeks_back,
                include_recent_rides=recent,
                now=now,
            )
        )
    except (ContextError, ValidationError) as e:
        console.print(Panel(Text(str(e), style="bold red"), title="Snapshot failed", border_style="red"))
        logger.exception("Snapshot build failed")
        raise typer.Exit(code=1) from e

    if compact:
        console.print(format_compact_context(result), markup=False, highlight=False)
    else:
        console.print(JSON(result.model_dump_json()))


@app.command()
def config() -> None:
    """Print the effective engine configuration."""
    console.print(
        Panel(
            JSON(json.dumps(settings.engine.model_dump())),
            title="Engine configuration",
            border_style="cyan",
        )
    )


if __name__ == "__main__":
    app()
