"""Helpers shared by CLI commands."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import typer

from mnemo.application.config import AppConfig, resolve_config
from mnemo.application.engine import StudyEngine
from mnemo.application.factory import get_study_engine
from mnemo.domain.errors import MnemoError
from mnemo.domain.models import Achievement, Card

logger = logging.getLogger(__name__)


def _resolve_with_overrides(ctx: typer.Context | None = None, **overrides: Any) -> AppConfig:
    """Resolve config, layering the global --data-file option and command options."""
    if ctx is not None and ctx.obj:
        if ctx.obj.get("data_file") is not None:
            overrides.setdefault("data_file", ctx.obj["data_file"])
    return resolve_config({k: v for k, v in overrides.items() if v is not None})


def open_engine(ctx: typer.Context, **overrides: Any) -> StudyEngine:
    config = _resolve_with_overrides(ctx, **overrides)
    return get_study_engine(config)


@contextmanager
def handle_errors() -> Iterator[None]:
    """Turn mnemo errors into a red message and exit code 1."""
    try:
        yield
    except MnemoError as e:
        logger.debug("Command failed", exc_info=True)
        typer.secho(f"Error: {e}", fg="red", err=True)
        raise typer.Exit(1) from e


def describe_card(card: Card, verbose: bool = False) -> str:
    tags = f" [{', '.join(card.tags)}]" if card.tags else ""
    line = f"{card.id}  {card.front}{tags}"
    if verbose:
        line += (
            f"\n    back: {card.back}"
            f"\n    easiness={card.easiness:.2f} interval={card.interval}d "
            f"repetitions={card.repetitions} next={card.next_review:%Y-%m-%d %H:%M}"
        )
    return line


def announce_unlocked(achievements: list[Achievement]) -> None:
    for achievement in achievements:
        typer.secho(
            f"{achievement.icon} Achievement unlocked: {achievement.name} "
            f"- {achievement.description}",
            fg="green",
        )
