from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sukuu.api.deps import get_db, get_school_owned, require_school_access
from sukuu.core.exceptions import InvalidInputError
from sukuu.models.grading import GradeScale
from sukuu.models.school import School
from sukuu.models.school_class import SchoolClass
from sukuu.models.timetable import DayOfWeek
from sukuu.schemas.conflict import ConflictCheckOut, ConflictCheckPayload
from sukuu.services.conflict_service import ConflictCheckRequest, ConflictService, Dimension
from sukuu.services.conflict_sources import SqlIntervalSource
from sukuu.services.intervals import IntervalUnit

router = APIRouter()


def _scoped_filters(db: Session, school_id: str, dimension: Dimension, filters: dict[str, str]) -> dict:
    """Pin ``filters`` to the caller's school so a dry run never reads another tenant."""
    if dimension is Dimension.scale:
        get_school_owned(db, GradeScale, filters["grade_scale_id"], school_id, "Grade scale")
        return dict(filters)

    scoped: dict = {"school_id": school_id, **filters}
    if "class_id" in filters:
        get_school_owned(db, SchoolClass, filters["class_id"], school_id, "Class")
    if "day_of_week" in filters:
        try:
            scoped["day_of_week"] = DayOfWeek(filters["day_of_week"].strip().upper())
        except ValueError as exc:
            raise InvalidInputError(
                "Unknown day of week.",
                field_errors={"day_of_week": ["Must be one of " + ", ".join(day.value for day in DayOfWeek) + "."]},
            ) from exc
    return scoped


@router.post("/check", response_model=ConflictCheckOut, response_model_exclude_none=True)
def check_conflicts(
    payload: ConflictCheckPayload,
    school: School = Depends(require_school_access),
    db: Session = Depends(get_db),
) -> dict:
    dimension_filters = {
        dimension.value: _scoped_filters(db, school.id, dimension, filters)
        for dimension, filters in payload.dimension_filters.items()
    }
    unit = IntervalUnit.TENTHS_OF_PERCENT if Dimension.scale in payload.dimension_filters else IntervalUnit.MINUTES
    outcome = ConflictService(SqlIntervalSource(db)).validate(
        ConflictCheckRequest(
            dimension_filters=dimension_filters,
            start=payload.candidate_raw.start,
            end=payload.candidate_raw.end,
            boundary_policy=payload.boundary_policy,
            unit=unit,
            exclude_entity_id=payload.exclude_entity_id,
        )
    )
    return outcome.as_dict()
