"""
Input validation for values arriving from the driver (CLI, config, files).

Untyped input is checked with pydantic models and converted into domain
objects. Any rejection surfaces as mnemo's ValidationError so callers only
deal with one error type.
"""

import re
from datetime import datetime
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from mnemo.domain.constants import (
    MAX_BACK_LENGTH,
    MAX_FRONT_LENGTH,
    MAX_ID_LENGTH,
    MAX_TAG_LENGTH,
    MAX_TAGS,
)
from mnemo.domain.errors import ValidationError
from mnemo.domain.models import Difficulty, StudyFilters

CARD_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")


def humanize_validation_error(exc: pydantic.ValidationError) -> str:
    """Collapse pydantic's error list into one readable line."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        msg = err.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)


def normalize_tags(tags: Any) -> list[str]:
    """Trim, lowercase and de-duplicate tags, preserving first-seen order."""
    if tags is None:
        return []
    if isinstance(tags, str) or not isinstance(tags, (list, tuple, set, frozenset)):
        raise ValidationError(f"Tags must be a list of strings, got {type(tags).__name__}")

    seen: list[str] = []
    for tag in tags:
        if not isinstance(tag, str):
            raise ValidationError(f"Tag must be a string, got {tag!r}")
        clean = tag.strip().lower()
        if not clean:
            raise ValidationError("Tag cannot be empty")
        if len(clean) > MAX_TAG_LENGTH:
            raise ValidationError(f"Tag too long (max {MAX_TAG_LENGTH} characters): {clean}")
        if clean not in seen:
            seen.append(clean)

    if len(seen) > MAX_TAGS:
        raise ValidationError(f"Too many tags (max {MAX_TAGS})")
    return seen


def validate_card_id(card_id: Any) -> str:
    if not isinstance(card_id, str) or not card_id:
        raise ValidationError(f"Card id must be a non-empty string, got {card_id!r}")
    if len(card_id) > MAX_ID_LENGTH:
        raise ValidationError(f"Card id too long (max {MAX_ID_LENGTH} characters)")
    if not CARD_ID_PATTERN.match(card_id):
        raise ValidationError(f"Malformed card id: {card_id!r}")
    return card_id


class CardInput(BaseModel):
    """Front/back/tags for a card being created."""

    model_config = ConfigDict(str_strip_whitespace=True)

    front: str = Field(min_length=1, max_length=MAX_FRONT_LENGTH)
    back: str = Field(min_length=1, max_length=MAX_BACK_LENGTH)
    tags: list[str] = Field(default_factory=list)

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, v: Any) -> list[str]:
        try:
            return normalize_tags(v)
        except ValidationError as e:
            raise ValueError(str(e)) from e


def validate_card_input(front: Any, back: Any, tags: Any = None) -> CardInput:
    try:
        return CardInput(front=front, back=back, tags=tags if tags is not None else [])
    except pydantic.ValidationError as e:
        raise ValidationError(humanize_validation_error(e)) from e


class StudyFiltersInput(BaseModel):
    """
    Shape check for filters built from untyped input.

    Accepts both snake_case and the camelCase keys stored in session snapshots.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    query: str | None = None
    tags: list[str] = Field(default_factory=list)
    difficulty: Difficulty | None = None
    due_only: bool = Field(default=False, alias="includeDue")
    limit: int | None = Field(default=None, ge=0)
    random_order: bool = Field(default=False, alias="randomOrder")
    min_easiness: float | None = Field(default=None, alias="minEasiness")
    max_easiness: float | None = Field(default=None, alias="maxEasiness")
    min_interval: int | None = Field(default=None, alias="minInterval")
    max_interval: int | None = Field(default=None, alias="maxInterval")
    created_after: datetime | None = Field(default=None, alias="createdAfter")
    created_before: datetime | None = Field(default=None, alias="createdBefore")

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, v: Any) -> list[str]:
        try:
            return normalize_tags(v)
        except ValidationError as e:
            raise ValueError(str(e)) from e

    def to_filters(self) -> StudyFilters:
        return StudyFilters(
            query=self.query or None,
            tags=tuple(self.tags),
            difficulty=self.difficulty,
            due_only=self.due_only,
            limit=self.limit,
            random_order=self.random_order,
            min_easiness=self.min_easiness,
            max_easiness=self.max_easiness,
            min_interval=self.min_interval,
            max_interval=self.max_interval,
            created_after=self.created_after,
            created_before=self.created_before,
        )


def parse_filters(raw: dict[str, Any] | None) -> StudyFilters:
    """
    Build StudyFilters from a plain mapping.

    Raises:
        ValidationError: Unknown keys, wrong types, unknown difficulty or a
            negative limit.
    """
    if raw is None:
        return StudyFilters()
    if not isinstance(raw, dict):
        raise ValidationError(f"Filters must be a mapping, got {type(raw).__name__}")
    try:
        return StudyFiltersInput.model_validate(raw).to_filters()
    except pydantic.ValidationError as e:
        raise ValidationError(humanize_validation_error(e)) from e
