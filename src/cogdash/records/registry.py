"""Closed registry of tables exposed through the generic record endpoints.

Each permitted table name maps to its ORM model and a static field schema.
Table and field names supplied by callers are only ever used as lookup keys
into this registry; nothing outside it reaches the datastore.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from functools import lru_cache
from typing import Any

from pydantic import TypeAdapter, ValidationError

from cogdash.db.base import Base
from cogdash.db.models import (
    CustomMetric,
    FitnessLog,
    GameSession,
    PerformanceMetrics,
    ProductivityLog,
    Profile,
    ScreentimeLog,
    StudyLog,
    WellbeingLog,
)
from cogdash.domains import DOMAINS
from cogdash.errors import ValidationFailed

_NO_DEFAULT = object()


@lru_cache(maxsize=None)
def _adapter(tp: Any) -> TypeAdapter:  # noqa: ANN401
    return TypeAdapter(tp)


@dataclass(frozen=True)
class FieldSpec:
    """One column as seen by the generic endpoints."""

    name: str
    type: Any
    required: bool = False
    readonly: bool = False
    default: Any = _NO_DEFAULT
    choices: tuple[str, ...] | None = None
    attribute: str | None = None  # ORM attribute when it differs from the column name

    @property
    def attr(self) -> str:
        return self.attribute or self.name

    @property
    def has_default(self) -> bool:
        return self.default is not _NO_DEFAULT

    def coerce(self, value: Any) -> Any:  # noqa: ANN401
        """Validate and convert a caller-supplied value to the column type."""
        try:
            converted = _adapter(self.type).validate_python(value)
        except ValidationError as e:
            raise ValidationFailed(
                f"Invalid value for field {self.name}",
                field=self.name,
                details=[err["msg"] for err in e.errors()],
            ) from e
        if self.choices is not None and converted is not None and converted not in self.choices:
            raise ValidationFailed(
                f"Invalid value for field {self.name}",
                field=self.name,
                allowed=list(self.choices),
            )
        return converted


@dataclass(frozen=True)
class TableSchema:
    """Static schema of one permitted table."""

    name: str
    model: type[Base]
    fields: tuple[FieldSpec, ...]
    owner_field: str = "user_id"
    # Rows can be inserted but never updated or deleted
    append_only: bool = False
    by_name: dict[str, FieldSpec] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "by_name", {spec.name: spec for spec in self.fields})

    @property
    def field_names(self) -> list[str]:
        return [spec.name for spec in self.fields]

    @property
    def required_fields(self) -> list[str]:
        return [spec.name for spec in self.fields if spec.required]

    def has_field(self, name: str) -> bool:
        return name in self.by_name

    def get_field(self, name: str) -> FieldSpec:
        spec = self.by_name.get(name)
        if spec is None:
            raise ValidationFailed(
                "Invalid field name",
                table=self.name,
                allowedFields=self.field_names,
            )
        return spec

    def is_readonly(self, name: str) -> bool:
        return self.get_field(name).readonly

    def to_dict(self, row: Base) -> dict[str, Any]:
        """Serialize an ORM row by the schema's field names."""
        return {spec.name: getattr(row, spec.attr) for spec in self.fields}


def _id() -> FieldSpec:
    return FieldSpec("id", str, readonly=True)


def _user_id() -> FieldSpec:
    return FieldSpec("user_id", str, required=True)


def _created_at() -> FieldSpec:
    return FieldSpec("created_at", datetime, readonly=True)


def _log_date() -> FieldSpec:
    return FieldSpec("date", date, required=True)


def _counter(name: str) -> FieldSpec:
    return FieldSpec(name, int, default=0)


TABLES: dict[str, TableSchema] = {
    schema.name: schema
    for schema in (
        TableSchema(
            "profiles",
            Profile,
            (
                FieldSpec("id", str, required=True, readonly=True),
                FieldSpec("email", str, required=True),
                FieldSpec("full_name", str | None),
                FieldSpec("avatar_url", str | None),
                _created_at(),
                FieldSpec("updated_at", datetime),
            ),
            owner_field="id",
        ),
        TableSchema(
            "game_sessions",
            GameSession,
            (
                _id(),
                _user_id(),
                FieldSpec("game_type", str, required=True, choices=DOMAINS),
                FieldSpec("game_name", str | None),
                FieldSpec("score", int, required=True),
                FieldSpec("accuracy", float | None),
                FieldSpec("reaction_time", float | None),
                FieldSpec("duration", int | None),
                FieldSpec("level", int | None),
                FieldSpec("metadata", dict[str, Any], default={}, attribute="game_metadata"),
                FieldSpec("played_at", datetime, readonly=True),
            ),
            append_only=True,
        ),
        TableSchema(
            "performance_metrics",
            PerformanceMetrics,
            (
                _id(),
                _user_id(),
                FieldSpec("game_type", str, required=True, choices=DOMAINS),
                _counter("total_games"),
                FieldSpec("average_score", float, default=0.0),
                FieldSpec("average_accuracy", float | None),
                FieldSpec("best_score", float, default=0.0),
                _counter("total_playtime"),
                FieldSpec("updated_at", datetime),
            ),
        ),
        TableSchema(
            "productivity_logs",
            ProductivityLog,
            (
                _id(),
                _user_id(),
                _log_date(),
                _counter("tasks_completed"),
                _counter("tasks_total"),
                _counter("focus_time_minutes"),
                _counter("breaks_taken"),
                FieldSpec("productivity_score", float, default=0.0),
                FieldSpec("notes", str | None),
                _created_at(),
            ),
        ),
        TableSchema(
            "fitness_logs",
            FitnessLog,
            (
                _id(),
                _user_id(),
                _log_date(),
                FieldSpec("workout_type", str | None),
                _counter("duration_minutes"),
                _counter("calories_burned"),
                FieldSpec("distance_km", float, default=0.0),
                FieldSpec("heart_rate_avg", int | None),
                FieldSpec("heart_rate_max", int | None),
                FieldSpec("notes", str | None),
                _created_at(),
            ),
        ),
        TableSchema(
            "study_logs",
            StudyLog,
            (
                _id(),
                _user_id(),
                _log_date(),
                FieldSpec("subject", str | None),
                _counter("study_time_minutes"),
                _counter("topics_covered"),
                FieldSpec("comprehension_score", float | None),
                _counter("notes_taken"),
                FieldSpec("quiz_score", float | None),
                FieldSpec("notes", str | None),
                _created_at(),
            ),
        ),
        TableSchema(
            "wellbeing_logs",
            WellbeingLog,
            (
                _id(),
                _user_id(),
                _log_date(),
                FieldSpec("mood_score", int | None),
                FieldSpec("stress_level", int | None),
                FieldSpec("sleep_hours", float | None),
                FieldSpec("energy_level", int | None),
                _counter("meditation_minutes"),
                _counter("journal_entries"),
                FieldSpec("notes", str | None),
                _created_at(),
            ),
        ),
        TableSchema(
            "screentime_logs",
            ScreentimeLog,
            (
                _id(),
                _user_id(),
                _log_date(),
                _counter("total_minutes"),
                _counter("phone_minutes"),
                _counter("computer_minutes"),
                _counter("tablet_minutes"),
                _counter("apps_used"),
                _counter("notifications_count"),
                _counter("breaks_taken"),
                FieldSpec("notes", str | None),
                _created_at(),
            ),
        ),
        TableSchema(
            "custom_metrics",
            CustomMetric,
            (
                _id(),
                _user_id(),
                FieldSpec("metric_name", str, required=True),
                FieldSpec("metric_value", float, required=True),
                FieldSpec("metric_unit", str | None),
                FieldSpec("category", str | None),
                _log_date(),
                FieldSpec("notes", str | None),
                _created_at(),
            ),
        ),
    )
}

# Personal log tables shown on the progress view, newest first by ``date``
LOG_TABLES: tuple[str, ...] = (
    "productivity_logs",
    "fitness_logs",
    "study_logs",
    "wellbeing_logs",
    "screentime_logs",
    "custom_metrics",
)


def get_table(name: str | None) -> TableSchema:
    """Look up a permitted table, rejecting anything outside the registry."""
    schema = TABLES.get(name or "")
    if schema is None:
        raise ValidationFailed("Invalid table name", allowed=sorted(TABLES))
    return schema
