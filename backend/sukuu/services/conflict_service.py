from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable

from sukuu.core.exceptions import InvalidInputError, ScheduleConflictError
from sukuu.services.intervals import (
    BoundaryPolicy,
    Interval,
    IntervalError,
    IntervalUnit,
    build_interval,
    describe,
    overlaps,
)

logger = logging.getLogger(__name__)


class Dimension(str, Enum):
    teacher = "teacher"
    room = "room"
    class_ = "class"
    scale = "scale"
    period = "period"


CONFLICT_MESSAGES: dict[str, str] = {
    Dimension.class_.value: "This class already has an activity scheduled at this time.",
    Dimension.teacher.value: "This teacher is already scheduled at this time.",
    Dimension.room.value: "This room is already booked at this time.",
    Dimension.scale.value: "Percentage range overlaps with an existing entry in this scale.",
    Dimension.period.value: "Time overlaps with an existing period.",
}


@dataclass(frozen=True)
class ExistingInterval:
    """A committed row as handed over by a fetch collaborator.

    ``start``/``end`` are raw stored values (``"HH:MM"`` or a percentage).
    """

    entity_id: str
    start: object
    end: object
    label: str | None = None


@dataclass(frozen=True)
class Conflict:
    dimension: str
    entity_id: str
    interval: Interval
    label: str | None = None

    def as_dict(self) -> dict:
        return {"dimension": self.dimension, "entityId": self.entity_id, "label": self.label}


def scan_conflicts(
    candidate: Interval,
    dimension: str,
    existing: Iterable[ExistingInterval],
    *,
    unit: IntervalUnit,
    policy: BoundaryPolicy,
    exclude_entity_id: str | None = None,
) -> list[Conflict]:
    conflicts: list[Conflict] = []
    for row in existing:
        if exclude_entity_id is not None and row.entity_id == exclude_entity_id:
            continue
        try:
            interval = build_interval(unit, row.start, row.end)
        except IntervalError:
            # Stored data that no longer parses cannot be compared; surface it in logs only.
            logger.warning("Skipping unparsable %s interval on %s: %r-%r", dimension, row.entity_id, row.start, row.end)
            continue
        if overlaps(candidate, interval, policy):
            conflicts.append(Conflict(dimension=dimension, entity_id=row.entity_id, interval=interval, label=row.label))
    return conflicts


class OutcomeStatus(str, Enum):
    CLEAR = "CLEAR"
    CONFLICT = "CONFLICT"
    INVALID = "INVALID"


@dataclass
class ValidationOutcome:
    status: OutcomeStatus
    conflicts: list[Conflict] = field(default_factory=list)
    reason: str | None = None
    field_errors: dict[str, list[str]] = field(default_factory=dict)
    candidate: Interval | None = None

    @property
    def is_clear(self) -> bool:
        return self.status is OutcomeStatus.CLEAR

    @property
    def conflicting_dimensions(self) -> list[str]:
        return list(dict.fromkeys(conflict.dimension for conflict in self.conflicts))

    def as_dict(self) -> dict:
        if self.status is OutcomeStatus.CONFLICT:
            return {"status": self.status.value, "conflicts": [conflict.as_dict() for conflict in self.conflicts]}
        if self.status is OutcomeStatus.INVALID:
            return {"status": self.status.value, "reason": self.reason}
        return {"status": self.status.value}

    def message(self) -> str:
        if self.status is OutcomeStatus.INVALID:
            return self.reason or "Validation failed."
        dimensions = self.conflicting_dimensions
        if len(dimensions) == 1:
            return CONFLICT_MESSAGES.get(dimensions[0], "Conflicts with an existing entry.")
        return "Conflicts with existing entries: " + ", ".join(dimensions) + "."

    def raise_for_status(self) -> None:
        if self.status is OutcomeStatus.INVALID:
            raise InvalidInputError(self.message(), field_errors=self.field_errors)
        if self.status is OutcomeStatus.CONFLICT:
            raise ScheduleConflictError(
                self.message(),
                conflicts=[conflict.as_dict() for conflict in self.conflicts],
                field_errors=self.field_errors,
            )


@dataclass
class ConflictCheckRequest:
    dimension_filters: dict[str, dict]
    start: object
    end: object
    boundary_policy: BoundaryPolicy
    unit: IntervalUnit
    exclude_entity_id: str | None = None
    start_field: str = "start"
    end_field: str = "end"


FetchIntervals = Callable[[str, dict], Iterable[ExistingInterval]]


class ConflictService:
    """Checks one candidate interval against every requested dimension.

    ``fetch(dimension, filters)`` is called once per dimension, in the order
    the filters were given, and must return the committed rows to compare
    against. Nothing is cached between calls.
    """

    def __init__(self, fetch: FetchIntervals):
        self.fetch = fetch

    def build_candidate(self, request: ConflictCheckRequest) -> Interval:
        return build_interval(
            request.unit,
            request.start,
            request.end,
            start_field=request.start_field,
            end_field=request.end_field,
        )

    def validate(self, request: ConflictCheckRequest) -> ValidationOutcome:
        try:
            candidate = self.build_candidate(request)
        except IntervalError as exc:
            return ValidationOutcome(OutcomeStatus.INVALID, reason=exc.message, field_errors=exc.field_errors())

        conflicts: list[Conflict] = []
        for dimension, filters in request.dimension_filters.items():
            existing = self.fetch(dimension, filters)
            conflicts.extend(
                scan_conflicts(
                    candidate,
                    dimension,
                    existing,
                    unit=request.unit,
                    policy=request.boundary_policy,
                    exclude_entity_id=request.exclude_entity_id,
                )
            )

        if not conflicts:
            return ValidationOutcome(OutcomeStatus.CLEAR, candidate=candidate)

        logger.info(
            "Conflict on %s for %s: %s",
            ", ".join(dict.fromkeys(c.dimension for c in conflicts)),
            describe(candidate, request.unit),
            ", ".join(c.entity_id for c in conflicts),
        )
        overlap = ["Range overlap."]
        return ValidationOutcome(
            OutcomeStatus.CONFLICT,
            conflicts=conflicts,
            field_errors={request.start_field: overlap, request.end_field: list(overlap)},
            candidate=candidate,
        )


def timetable_slot_request(
    *,
    school_id: str,
    class_id: str,
    teacher_id: str,
    day_of_week: str,
    start_time: object,
    end_time: object,
    room: str | None = None,
    exclude_slot_id: str | None = None,
    dimensions: Iterable[str] | None = None,
) -> ConflictCheckRequest:
    """Class, teacher and (when given) room are each checked on the same day.

    ``dimensions`` narrows the check, e.g. to just the teacher on an update
    that only swaps the teacher.
    """
    filters: dict[str, dict] = {
        Dimension.class_.value: {"class_id": class_id, "day_of_week": day_of_week},
        Dimension.teacher.value: {"school_id": school_id, "teacher_id": teacher_id, "day_of_week": day_of_week},
    }
    if room:
        filters[Dimension.room.value] = {"school_id": school_id, "room": room, "day_of_week": day_of_week}
    if dimensions is not None:
        wanted = {str(getattr(item, "value", item)) for item in dimensions}
        filters = {key: value for key, value in filters.items() if key in wanted}
    return ConflictCheckRequest(
        dimension_filters=filters,
        start=start_time,
        end=end_time,
        boundary_policy=BoundaryPolicy.EXCLUSIVE_TOUCH,
        unit=IntervalUnit.MINUTES,
        exclude_entity_id=exclude_slot_id,
        start_field="start_time",
        end_field="end_time",
    )


def grade_scale_entry_request(
    *,
    grade_scale_id: str,
    min_percentage: object,
    max_percentage: object,
    exclude_entry_id: str | None = None,
) -> ConflictCheckRequest:
    return ConflictCheckRequest(
        dimension_filters={Dimension.scale.value: {"grade_scale_id": grade_scale_id}},
        start=min_percentage,
        end=max_percentage,
        boundary_policy=BoundaryPolicy.INCLUSIVE_TOUCH,
        unit=IntervalUnit.TENTHS_OF_PERCENT,
        exclude_entity_id=exclude_entry_id,
        start_field="min_percentage",
        end_field="max_percentage",
    )


def school_period_request(
    *,
    school_id: str,
    start_time: object,
    end_time: object,
    exclude_period_id: str | None = None,
) -> ConflictCheckRequest:
    return ConflictCheckRequest(
        dimension_filters={Dimension.period.value: {"school_id": school_id}},
        start=start_time,
        end=end_time,
        boundary_policy=BoundaryPolicy.EXCLUSIVE_TOUCH,
        unit=IntervalUnit.MINUTES,
        exclude_entity_id=exclude_period_id,
        start_field="start_time",
        end_field="end_time",
    )
