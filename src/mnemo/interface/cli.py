"""mnemo CLI: root commands and the config subgroup."""

import json
import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

from mnemo.application.collection import find_integrity_problems
from mnemo.application.config import default_config_files
from mnemo.application.factory import get_state_repository, get_stats_service
from mnemo.application.scheduler import get_difficulty_tier, recommended_session_size
from mnemo.application.validation import parse_filters
from mnemo.consts import VERSION
from mnemo.domain.models import Difficulty, SessionType, SortKey
from mnemo.interface._common import (
    _resolve_with_overrides,
    announce_unlocked,
    describe_card,
    handle_errors,
    open_engine,
)

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="mnemo: spaced-repetition flashcards for the terminal.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage mnemo configuration.")
app.add_typer(config_app, name="config")

logger = logging.getLogger(__name__)


def _setup_logging(verbose: int) -> None:
    level = logging.WARNING
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s:%(name)s:%(message)s",
        stream=sys.stderr,
        force=True,
    )


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
    data_file: Annotated[
        Path | None, typer.Option("--data-file", help="Path to the collection JSON file.")
    ] = None,
):
    """Global settings for mnemo."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["data_file"] = data_file
    _setup_logging(verbose)
    if data_file is not None:
        logger.debug(f"Using data file override {data_file}")


@app.command()
def version():
    """Print the installed version."""
    typer.echo(f"mnemo {VERSION}")


# ---------------------------------------------------------------------------
# Card management
# ---------------------------------------------------------------------------


@app.command()
def add(
    ctx: typer.Context,
    front: Annotated[str, typer.Argument(help="Question side.")],
    back: Annotated[str, typer.Argument(help="Answer side.")],
    tag: Annotated[list[str] | None, typer.Option("--tag", "-t", help="Tag (repeatable).")] = None,
):
    """[bold green]Add[/bold green] a new card, due immediately."""
    with handle_errors():
        engine = open_engine(ctx)
        before = {a.id for a in engine.state.achievements if a.unlocked}
        card = engine.add_card(front, back, tag or [])
        typer.secho(f"Added {card.id}", fg="green")
        announce_unlocked(
            [a for a in engine.state.achievements if a.unlocked and a.id not in before]
        )


@app.command()
def delete(
    ctx: typer.Context,
    card_id: Annotated[str, typer.Argument(help="Card to delete.")],
    force: Annotated[bool, typer.Option("--force", "-f", help="Skip confirmation.")] = False,
):
    """Delete a card."""
    with handle_errors():
        engine = open_engine(ctx)
        card = engine.get_card(card_id)
        if not force and not typer.confirm(f"Delete '{card.front}'?"):
            raise typer.Abort()
        engine.delete_card(card_id)
        typer.echo(f"Deleted {card_id}")


@app.command()
def tag(
    ctx: typer.Context,
    card_id: Annotated[str, typer.Argument(help="Card to re-tag.")],
    tags: Annotated[list[str] | None, typer.Argument(help="New tags; none clears them.")] = None,
):
    """Replace a card's tags."""
    with handle_errors():
        engine = open_engine(ctx)
        card = engine.update_tags(card_id, tags or [])
        typer.echo(describe_card(card))


@app.command("list")
def list_cards(
    ctx: typer.Context,
    sort: Annotated[SortKey, typer.Option(help="Sort field.")] = SortKey.CREATED,
    desc: Annotated[bool, typer.Option("--desc", help="Descending order.")] = False,
    details: Annotated[bool, typer.Option("--details", "-d", help="Show scheduling.")] = False,
):
    """List every card."""
    with handle_errors():
        engine = open_engine(ctx)
        cards = engine.sorted_cards(sort, desc)
        if not cards:
            typer.secho("No cards yet. Add one with 'mnemo add'.", fg="yellow")
            return
        for card in cards:
            typer.echo(describe_card(card, details))


@app.command()
def search(
    ctx: typer.Context,
    query: Annotated[str | None, typer.Argument(help="Text to look for.")] = None,
    tag: Annotated[list[str] | None, typer.Option("--tag", "-t", help="Any of these tags.")] = None,
    difficulty: Annotated[Difficulty | None, typer.Option(help="Difficulty tier.")] = None,
    due: Annotated[bool, typer.Option("--due", help="Only due cards.")] = False,
    limit: Annotated[int | None, typer.Option(help="Maximum results.")] = None,
    shuffle: Annotated[bool, typer.Option("--shuffle", help="Random order.")] = False,
):
    """Search and filter the collection."""
    with handle_errors():
        filters = parse_filters(
            {
                "query": query,
                "tags": tag or [],
                "difficulty": difficulty,
                "due_only": due,
                "limit": limit,
                "random_order": shuffle,
            }
        )
        engine = open_engine(ctx)
        cards = engine.study_set(filters)
        typer.echo(f"{len(cards)} matching card(s)")
        for card in cards:
            typer.echo(describe_card(card))


@app.command()
def due(ctx: typer.Context):
    """Show cards due now, most urgent first."""
    with handle_errors():
        engine = open_engine(ctx)
        cards = engine.due_cards(prioritized=True)
        if not cards:
            typer.secho("Nothing due. Come back later!", fg="green")
            return
        typer.echo(
            f"{len(cards)} due (suggested session: {recommended_session_size(len(cards))})"
        )
        for card in cards:
            typer.echo(f"{describe_card(card)}  ({get_difficulty_tier(card).value})")


# ---------------------------------------------------------------------------
# Reviewing
# ---------------------------------------------------------------------------


@app.command()
def review(
    ctx: typer.Context,
    card_id: Annotated[str, typer.Argument(help="Card to rate.")],
    quality: Annotated[int, typer.Argument(help="Recall quality 0-5.")],
):
    """Rate a single card outside an interactive session."""
    with handle_errors():
        engine = open_engine(ctx)
        card, _, unlocked = engine.review_single(card_id, quality)
        typer.echo(
            f"Next review in {card.interval} day(s) "
            f"(easiness {card.easiness:.2f}, due {card.next_review:%Y-%m-%d %H:%M})"
            if quality >= 3
            else f"Try again soon (due {card.next_review:%Y-%m-%d %H:%M})"
        )
        announce_unlocked(unlocked)


@app.command()
def study(
    ctx: typer.Context,
    tag: Annotated[list[str] | None, typer.Option("--tag", "-t", help="Any of these tags.")] = None,
    difficulty: Annotated[Difficulty | None, typer.Option(help="Difficulty tier.")] = None,
    limit: Annotated[int | None, typer.Option(help="Session size.")] = None,
    shuffle: Annotated[bool, typer.Option("--shuffle", help="Random order.")] = False,
    all_cards: Annotated[
        bool, typer.Option("--all", help="Include cards that are not due yet.")
    ] = False,
):
    """Run a review session. Enter [bold]s[/bold] to skip, [bold]q[/bold] to quit."""
    with handle_errors():
        config = _resolve_with_overrides(ctx)
        custom = bool(tag or difficulty or all_cards)
        filters = parse_filters(
            {
                "tags": tag or [],
                "difficulty": difficulty,
                "due_only": not all_cards,
                "limit": limit if limit is not None else config.session_size,
                "random_order": shuffle,
            }
        )
        engine = open_engine(ctx)
        cards = engine.study_set(filters)
        if not cards:
            typer.secho("No cards to study.", fg="yellow")
            return

        session_type = SessionType.CUSTOM if custom else SessionType.DUE
        engine.start_session(session_type, filters if custom else None)
        typer.echo(f"Starting {session_type.value} session with {len(cards)} card(s)")

        quit_early = False
        for i, card in enumerate(cards, start=1):
            typer.echo(f"\n[{i}/{len(cards)}] {card.front}")
            action = typer.prompt(
                "Enter to reveal, s to skip, q to quit", default="", show_default=False
            )
            action = action.strip().lower()
            if action == "q":
                quit_early = True
                break
            if action == "s":
                engine.skip(card.id)
                continue

            typer.echo(f"Answer: {card.back}")
            quality = _prompt_quality()
            if quality is None:
                quit_early = True
                break
            engine.review(card.id, quality)

        record, unlocked = engine.end_session(quit_early=quit_early)
        typer.echo(
            f"\nStudied {record.cards_studied} card(s): "
            f"{record.correct_answers} correct, {record.incorrect_answers} incorrect"
        )
        typer.echo(f"Streak: {engine.state.learning_streak.current_streak} day(s)")
        announce_unlocked(unlocked)


def _prompt_quality() -> int | None:
    while True:
        raw = typer.prompt("Rate recall 0-5 (q to quit)").strip().lower()
        if raw == "q":
            return None
        if raw.isdigit() and 0 <= int(raw) <= 5:
            return int(raw)
        typer.secho("Please enter a number from 0 to 5.", fg="yellow")


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------


@app.command()
def stats(
    ctx: typer.Context,
    as_json: Annotated[bool, typer.Option("--json", help="Machine-readable output.")] = False,
):
    """Show collection and progress statistics."""
    with handle_errors():
        ext = get_stats_service(_resolve_with_overrides(ctx)).get_extended_stats()
        basic = ext.basic

        if as_json:
            payload = {
                "total": basic.total,
                "due": basic.due,
                "distribution": {
                    "new": basic.new,
                    "learning": basic.learning,
                    "young": basic.young,
                    "mature": basic.mature,
                },
                "totalReviews": basic.total_reviews,
                "averageEasiness": round(basic.average_easiness, 3),
                "currentStreak": basic.current_streak,
                "longestStreak": basic.longest_streak,
                "sessionsCompleted": basic.sessions_completed,
                "tagDistribution": ext.tag_distribution,
                "weeklyProgress": [
                    {
                        "week": w.label,
                        "cardsStudied": w.cards_studied,
                        "accuracy": round(w.accuracy, 1),
                        "sessionCount": w.session_count,
                    }
                    for w in ext.weekly_progress
                ],
            }
            typer.echo(json.dumps(payload, indent=2))
            return

        typer.echo(f"Cards: {basic.total} ({basic.due} due)")
        typer.echo(
            f"  new {basic.new} · learning {basic.learning} · "
            f"young {basic.young} · mature {basic.mature}"
        )
        typer.echo(f"Reviews: {basic.total_reviews}  Avg easiness: {basic.average_easiness:.2f}")
        typer.echo(f"Streak: {basic.current_streak} (longest {basic.longest_streak})")
        typer.echo(
            f"Sessions: {basic.sessions_completed} completed, "
            f"{ext.total_study_minutes:.0f} min total"
        )
        for week in ext.weekly_progress:
            typer.echo(
                f"  {week.label}: {week.cards_studied} cards, "
                f"{week.accuracy:.0f}% accuracy, {week.session_count} session(s)"
            )
        if ext.tag_distribution:
            tags = ", ".join(f"{t} ({n})" for t, n in ext.tag_distribution.items())
            typer.echo(f"Tags: {tags}")


@app.command()
def achievements(ctx: typer.Context):
    """List achievements and progress."""
    with handle_errors():
        engine = open_engine(ctx)
        for a in engine.state.achievements:
            if a.unlocked:
                typer.secho(
                    f"{a.icon} {a.name} - unlocked {a.unlocked_at:%Y-%m-%d}", fg="green"
                )
            else:
                typer.echo(
                    f"  {a.name} - {a.progress.current}/{a.progress.required} "
                    f"{a.progress.description}"
                )


@app.command()
def streak(ctx: typer.Context):
    """Show the learning streak."""
    with handle_errors():
        basic = get_stats_service(_resolve_with_overrides(ctx)).get_basic_stats()
        typer.echo(f"Current streak: {basic.current_streak} day(s)")
        typer.echo(f"Longest streak: {basic.longest_streak} day(s)")
        typer.echo(f"Days studied: {basic.study_days}")


# ---------------------------------------------------------------------------
# Data file maintenance
# ---------------------------------------------------------------------------


@app.command()
def check(ctx: typer.Context):
    """Validate the collection for duplicate ids and out-of-range easiness."""
    with handle_errors():
        config = _resolve_with_overrides(ctx)
        state = get_state_repository(config).load()
        problems = find_integrity_problems(state)
        if not problems:
            typer.secho(f"OK: {len(state.cards)} cards, no problems found.", fg="green")
            return
        for problem in problems:
            typer.secho(f"- {problem}", fg="red")
        raise typer.Exit(1)


@app.command()
def backup(
    ctx: typer.Context,
    destination: Annotated[Path | None, typer.Argument(help="Where to write the copy.")] = None,
):
    """Copy the data file to a timestamped backup."""
    with handle_errors():
        config = _resolve_with_overrides(ctx)
        path = get_state_repository(config).backup(destination)
        typer.echo(f"Backup written to {path}")


@app.command()
def restore(
    ctx: typer.Context,
    source: Annotated[Path, typer.Argument(help="Backup file to restore.")],
    force: Annotated[bool, typer.Option("--force", "-f", help="Skip confirmation.")] = False,
):
    """Replace the data file with a backup (the current file is backed up first)."""
    with handle_errors():
        config = _resolve_with_overrides(ctx)
        if not force and not typer.confirm(f"Replace {config.data_file} with {source}?"):
            raise typer.Abort()
        get_state_repository(config).restore(source)
        typer.secho(f"Restored from {source}", fg="green")


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = _resolve_with_overrides(ctx)
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))


@config_app.command("path")
def config_path():
    """Print where the config file is read from."""
    candidates = default_config_files()
    found = next((f for f in candidates if f.exists()), candidates[0])
    typer.echo(str(found))


def main():
    app()


if __name__ == "__main__":
    main()
