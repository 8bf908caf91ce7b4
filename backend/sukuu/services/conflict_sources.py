from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from sukuu.models.grading import GradeScaleEntry
from sukuu.models.subject import Subject
from sukuu.models.timetable import SchoolPeriod, TimetableSlot
from sukuu.services.conflict_service import Dimension, ExistingInterval

_SLOT_FILTER_COLUMNS = {
    "school_id": TimetableSlot.school_id,
    "class_id": TimetableSlot.class_id,
    "teacher_id": TimetableSlot.teacher_id,
    "room": TimetableSlot.room,
    "day_of_week": TimetableSlot.day_of_week,
}


class SqlIntervalSource:
    """Fetch collaborator for ConflictService backed by the request's session.

    Every call queries current committed state; rows are returned in their
    natural display order (slots and periods by start, entries by minimum).
    """

    def __init__(self, db: Session):
        self.db = db

    def __call__(self, dimension: str, filters: dict) -> list[ExistingInterval]:
        if dimension in (Dimension.class_.value, Dimension.teacher.value, Dimension.room.value):
            return self._timetable_slots(filters)
        if dimension == Dimension.scale.value:
            return self._grade_scale_entries(filters)
        if dimension == Dimension.period.value:
            return self._school_periods(filters)
        raise ValueError(f"Unknown conflict dimension: {dimension}")

    def _timetable_slots(self, filters: dict) -> list[ExistingInterval]:
        statement = select(TimetableSlot, Subject.name).join(Subject, Subject.id == TimetableSlot.subject_id)
        for key, value in filters.items():
            statement = statement.where(_SLOT_FILTER_COLUMNS[key] == value)
        statement = statement.order_by(TimetableSlot.start_time, TimetableSlot.id)
        return [
            ExistingInterval(
                entity_id=slot.id,
                start=slot.start_time,
                end=slot.end_time,
                label=f"{subject_name} ({slot.start_time}-{slot.end_time})",
            )
            for slot, subject_name in self.db.execute(statement).all()
        ]

    def _grade_scale_entries(self, filters: dict) -> list[ExistingInterval]:
        statement = (
            select(GradeScaleEntry)
            .where(GradeScaleEntry.grade_scale_id == filters["grade_scale_id"])
            .order_by(GradeScaleEntry.min_percentage, GradeScaleEntry.id)
        )
        return [
            ExistingInterval(entity_id=entry.id, start=entry.min_percentage, end=entry.max_percentage, label=entry.grade_letter)
            for entry in self.db.execute(statement).scalars()
        ]

    def _school_periods(self, filters: dict) -> list[ExistingInterval]:
        statement = (
            select(SchoolPeriod)
            .where(SchoolPeriod.school_id == filters["school_id"])
            .order_by(SchoolPeriod.sort_order, SchoolPeriod.id)
        )
        return [
            ExistingInterval(
                entity_id=period.id,
                start=period.start_time,
                end=period.end_time,
                label=f"{period.name} ({period.start_time}-{period.end_time})",
            )
            for period in self.db.execute(statement).scalars()
        ]
