"""tala CLI: study sessions, queue inspection and lesson completion."""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated

import typer

from tala import VERSION
from tala.application.card_status import ease_text, interval_text, status_text
from tala.application.config import AppConfig, resolve_config
from tala.domain.errors import LessonLoadError
from tala.domain.models import Grade

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="tala: spaced-repetition flashcards for your completed lessons.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

lessons_app = typer.Typer(help="List lessons and mark them completed.", no_args_is_help=True)
app.add_typer(lessons_app, name="lessons")

config_app = typer.Typer(help="Manage tala configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

GRADE_KEYS = {
    "1": Grade.AGAIN,
    "a": Grade.AGAIN,
    "again": Grade.AGAIN,
    "2": Grade.GOOD,
    "g": Grade.GOOD,
    "good": Grade.GOOD,
    "3": Grade.EASY,
    "e": Grade.EASY,
    "easy": Grade.EASY,
}


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="Increase verbosity above the configured level (TALA_VERBOSE, default 1).",
        ),
    ] = 0,
    lessons_dir: Annotated[
        Path | None, typer.Option(help="Directory of lesson files. Defaults to ./lessons.")
    ] = None,
):
    """Global settings for tala."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = 1 + verbose if verbose else None
    ctx.obj["lessons_dir"] = lessons_dir
    config = resolve_config({"verbose": ctx.obj["verbose"]})
    logging.getLogger().setLevel(config.log_level)


def _resolve_with_overrides(ctx: typer.Context, **overrides) -> AppConfig:
    obj = ctx.obj or {}
    overrides.setdefault("lessons_dir", obj.get("lessons_dir"))
    overrides.setdefault("verbose", obj.get("verbose"))
    return resolve_config(overrides)


def _load_deck_or_exit(config: AppConfig):
    from tala.application.factory import load_eligible_deck

    try:
        return load_eligible_deck(config)
    except LessonLoadError as e:
        typer.secho(f"Error: {e}", fg="red", err=True)
        raise typer.Exit(1)


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command()
def study(
    ctx: typer.Context,
    new_limit: Annotated[
        int | None, typer.Option("--new-limit", help="Maximum new cards this session.")
    ] = None,
    review_limit: Annotated[
        int | None, typer.Option("--review-limit", help="Maximum due cards this session.")
    ] = None,
    review_ahead: Annotated[
        bool | None,
        typer.Option(
            "--review-ahead/--no-review-ahead",
            help="Offer a not-yet-due card when nothing is due.",
        ),
    ] = None,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Study without saving progress.")
    ] = False,
):
    """[bold green]Study[/bold green] due and new cards.

    Enter reveals the answer. Grade with 1/a (again), 2/g (good) or 3/e (easy).
    u undoes the last grade, q quits.
    """
    from tala.application.factory import get_session_engine, get_state_repository
    from tala.domain.models import SessionState

    config = _resolve_with_overrides(
        ctx,
        daily_new_limit=new_limit,
        daily_review_limit=review_limit,
        allow_review_ahead=review_ahead,
    )
    deck = _load_deck_or_exit(config)

    with get_state_repository(config, dry_run=dry_run) as repo:
        engine = get_session_engine(config, repository=repo, deck=deck)
        engine.start()

        if engine.state is SessionState.EMPTY:
            typer.secho("Nothing to study right now.", fg="yellow")
            return

        typer.echo(f"Due: {engine.due_count}  New: {engine.new_count}")

        while True:
            card = engine.current_card()
            if card is None:
                typer.secho("Session complete.", fg="green")
                break

            notice = "  (optional)" if card.shows_optional_notice else ""
            typer.echo("")
            typer.secho(f"[{engine.remaining} left] {card.front_text}{notice}", bold=True)
            if engine.revealed:
                typer.echo(f"  -> {card.back_text}")

            answer = typer.prompt(">", default="", show_default=False).strip().lower()

            if answer in ("q", "quit"):
                break
            if answer in ("u", "undo"):
                if not engine.undo():
                    typer.secho("Nothing to undo.", fg="yellow")
                continue
            if answer in GRADE_KEYS:
                state = engine.grade(GRADE_KEYS[answer])
                if state is not None:
                    typer.echo(f"  next review in {interval_text(state)}")
                continue
            engine.reveal()


@app.command("queue")
def queue(
    ctx: typer.Context,
    new_limit: Annotated[int | None, typer.Option("--new-limit")] = None,
    review_limit: Annotated[int | None, typer.Option("--review-limit")] = None,
    review_ahead: Annotated[
        bool | None, typer.Option("--review-ahead/--no-review-ahead")
    ] = None,
):
    """Show how many cards the next session would contain."""
    from tala.application.factory import get_state_repository
    from tala.application.queue_builder import build_queue

    config = _resolve_with_overrides(
        ctx,
        daily_new_limit=new_limit,
        daily_review_limit=review_limit,
        allow_review_ahead=review_ahead,
    )
    deck = _load_deck_or_exit(config)
    settings = config.study_settings()

    with get_state_repository(config) as repo:
        result = build_queue(
            deck,
            repo.snapshot(),
            datetime.now(timezone.utc),
            settings.daily_new_limit,
            settings.daily_review_limit,
            settings.allow_review_ahead,
        )

    typer.echo(f"Eligible cards: {len(deck)}")
    typer.echo(f"Due: {len(result.due)}")
    typer.echo(f"New: {len(result.new)}")


@app.command()
def cards(ctx: typer.Context):
    """List every eligible card with its review status."""
    from tala.application.factory import get_state_repository

    config = _resolve_with_overrides(ctx)
    deck = _load_deck_or_exit(config)
    now = datetime.now(timezone.utc)

    with get_state_repository(config) as repo:
        for card in deck:
            state = repo.get(card.id)
            line = f"{card.id}\t{status_text(state, now)}"
            if state is not None:
                line += f"\t{interval_text(state)}\tease {ease_text(state)}"
            typer.echo(f"{line}\t{card.front_text}")


@app.command()
def reset(
    ctx: typer.Context,
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Skip the confirmation prompt.")
    ] = False,
):
    """Forget all review progress."""
    from tala.application.factory import get_state_repository

    config = _resolve_with_overrides(ctx)
    if not force and not typer.confirm("Delete all review progress?"):
        raise typer.Exit(1)

    with get_state_repository(config) as repo:
        count = len(repo.snapshot())
        repo.remove_all()
    typer.secho(f"Removed progress for {count} cards.", fg="green")


# ---------------------------------------------------------------------------
# Lessons subgroup
# ---------------------------------------------------------------------------


@lessons_app.command("list")
def lessons_list(ctx: typer.Context):
    """List lessons in study order with their completion mark."""
    from tala.application.factory import get_completion_store
    from tala.infrastructure.lesson_loader import load_lessons

    config = _resolve_with_overrides(ctx)
    try:
        lessons = load_lessons(config.lessons_dir)
    except LessonLoadError as e:
        typer.secho(f"Error: {e}", fg="red", err=True)
        raise typer.Exit(1)

    store = get_completion_store(config)
    for lesson in lessons:
        mark = "x" if store.is_completed(lesson.id) else " "
        typer.echo(f"[{mark}] {lesson.id}\t{lesson.title}\t{len(lesson.flashcards)} cards")


def _set_completed(ctx: typer.Context, lesson_ids: list[str], completed: bool) -> None:
    from tala.application.factory import get_completion_store

    config = _resolve_with_overrides(ctx)
    store = get_completion_store(config)
    for lesson_id in lesson_ids:
        store.set_completed(lesson_id, completed)
        typer.echo(f"{lesson_id}: {'completed' if completed else 'not completed'}")


@lessons_app.command("complete")
def lessons_complete(
    ctx: typer.Context,
    lesson_ids: Annotated[list[str], typer.Argument(help="Lesson ids to mark completed.")],
):
    """Mark lessons as completed so their cards join the deck."""
    _set_completed(ctx, lesson_ids, True)


@lessons_app.command("uncomplete")
def lessons_uncomplete(
    ctx: typer.Context,
    lesson_ids: Annotated[list[str], typer.Argument(help="Lesson ids to unmark.")],
):
    """Remove lessons from the deck. Their review progress is kept."""
    _set_completed(ctx, lesson_ids, False)


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = _resolve_with_overrides(ctx)
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))


@app.command()
def version():
    """Print the tala version."""
    typer.echo(VERSION)
