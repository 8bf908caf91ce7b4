import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from sukuu.api.deps import commit_or_conflict, get_current_user, get_db, get_school_owned, require_school_access
from sukuu.core.exceptions import ResourceNotFoundError, ScheduleConflictError
from sukuu.models.grading import GradeScale, GradeScaleEntry
from sukuu.models.school import School
from sukuu.models.user import User
from sukuu.schemas.grading import (
    GradeScaleCreate,
    GradeScaleDetailOut,
    GradeScaleEntryCreate,
    GradeScaleEntryOut,
    GradeScaleEntryUpdate,
    GradeScaleOut,
    GradeScaleUpdate,
)
from sukuu.services.audit import log_activity
from sukuu.services.conflict_service import ConflictService, grade_scale_entry_request
from sukuu.services.conflict_sources import SqlIntervalSource
from sukuu.services.intervals import PERCENT_SCALE

router = APIRouter()
logger = logging.getLogger(__name__)

DUPLICATE_SCALE = "A grade scale with this name already exists."
ENTRY_TAKEN = "Another entry in this scale already starts at this percentage."


def _scale_out(scale: GradeScale, entry_count: int) -> GradeScaleOut:
    return GradeScaleOut.model_validate(scale).model_copy(update={"entry_count": entry_count})


def _entry_count(db: Session, scale_id: str) -> int:
    return db.execute(
        select(func.count(GradeScaleEntry.id)).where(GradeScaleEntry.grade_scale_id == scale_id)
    ).scalar_one()


def _check_name(db: Session, school_id: str, name: str, exclude_id: str | None = None) -> None:
    statement = select(GradeScale.id).where(GradeScale.school_id == school_id, func.lower(GradeScale.name) == name.lower())
    if exclude_id is not None:
        statement = statement.where(GradeScale.id != exclude_id)
    if db.execute(statement).first() is not None:
        raise ScheduleConflictError(DUPLICATE_SCALE, field_errors={"name": [DUPLICATE_SCALE]})


def _deactivate_other_scales(db: Session, school_id: str, active_id: str | None = None) -> None:
    """Only one scale per school is active at a time."""
    statement = update(GradeScale).where(GradeScale.school_id == school_id, GradeScale.is_active.is_(True))
    if active_id is not None:
        statement = statement.where(GradeScale.id != active_id)
    db.execute(statement.values(is_active=False))
    logger.info("Grade scale %s is now the active scale for school %s", active_id or "(new)", school_id)


def _get_entry(db: Session, scale: GradeScale, entry_id: str) -> GradeScaleEntry:
    entry = db.get(GradeScaleEntry, entry_id)
    if entry is None or entry.grade_scale_id != scale.id:
        raise ResourceNotFoundError("Grade scale entry", entry_id)
    return entry


@router.get("/scales", response_model=list[GradeScaleOut])
def list_scales(school: School = Depends(require_school_access), db: Session = Depends(get_db)) -> list[GradeScaleOut]:
    counts = (
        select(GradeScaleEntry.grade_scale_id, func.count(GradeScaleEntry.id).label("entry_count"))
        .group_by(GradeScaleEntry.grade_scale_id)
        .subquery()
    )
    rows = db.execute(
        select(GradeScale, func.coalesce(counts.c.entry_count, 0))
        .outerjoin(counts, counts.c.grade_scale_id == GradeScale.id)
        .where(GradeScale.school_id == school.id)
        .order_by(GradeScale.name)
    ).all()
    return [_scale_out(scale, entry_count) for scale, entry_count in rows]


@router.post("/scales", response_model=GradeScaleOut, status_code=status.HTTP_201_CREATED)
def create_scale(
    payload: GradeScaleCreate,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> GradeScaleOut:
    _check_name(db, school.id, payload.name)
    scale = GradeScale(school_id=school.id, **payload.model_dump())
    if scale.is_active:
        _deactivate_other_scales(db, school.id)
    db.add(scale)
    commit_or_conflict(db, DUPLICATE_SCALE)
    db.refresh(scale)
    log_activity(
        db,
        user=current_user,
        action="grade_scale.create",
        school_id=school.id,
        entity_type="grade_scale",
        entity_id=scale.id,
        details={"name": scale.name, "is_active": scale.is_active},
    )
    db.commit()
    return _scale_out(scale, 0)


@router.get("/scales/{scale_id}", response_model=GradeScaleDetailOut)
def get_scale(
    scale_id: str,
    school: School = Depends(require_school_access),
    db: Session = Depends(get_db),
) -> GradeScaleDetailOut:
    scale = get_school_owned(db, GradeScale, scale_id, school.id, "Grade scale")
    entries = list(
        db.execute(
            select(GradeScaleEntry)
            .where(GradeScaleEntry.grade_scale_id == scale_id)
            .order_by(GradeScaleEntry.min_percentage.desc())
        ).scalars()
    )
    return GradeScaleDetailOut.model_validate(scale).model_copy(
        update={
            "entry_count": len(entries),
            "entries": [GradeScaleEntryOut.model_validate(entry) for entry in entries],
        }
    )


@router.put("/scales/{scale_id}", response_model=GradeScaleOut)
def update_scale(
    scale_id: str,
    payload: GradeScaleUpdate,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> GradeScaleOut:
    scale = get_school_owned(db, GradeScale, scale_id, school.id, "Grade scale")
    data = payload.model_dump(exclude_unset=True)
    for required in ("name", "is_active"):
        if data.get(required) is None:
            data.pop(required, None)
    if "name" in data:
        _check_name(db, school.id, data["name"], exclude_id=scale_id)

    for key, value in data.items():
        setattr(scale, key, value)
    if data.get("is_active"):
        _deactivate_other_scales(db, school.id, scale.id)
    if data:
        log_activity(
            db,
            user=current_user,
            action="grade_scale.update",
            school_id=school.id,
            entity_type="grade_scale",
            entity_id=scale_id,
            details={"fields": sorted(data)},
        )
    commit_or_conflict(db, DUPLICATE_SCALE)
    db.refresh(scale)
    return _scale_out(scale, _entry_count(db, scale_id))


@router.delete("/scales/{scale_id}")
def delete_scale(
    scale_id: str,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    scale = get_school_owned(db, GradeScale, scale_id, school.id, "Grade scale")
    log_activity(
        db,
        user=current_user,
        action="grade_scale.delete",
        school_id=school.id,
        entity_type="grade_scale",
        entity_id=scale_id,
        details={"name": scale.name},
    )
    db.delete(scale)
    db.commit()
    return {"success": True}


@router.get("/scales/{scale_id}/entries", response_model=list[GradeScaleEntryOut])
def list_entries(
    scale_id: str,
    school: School = Depends(require_school_access),
    db: Session = Depends(get_db),
) -> list[GradeScaleEntryOut]:
    get_school_owned(db, GradeScale, scale_id, school.id, "Grade scale")
    statement = (
        select(GradeScaleEntry)
        .where(GradeScaleEntry.grade_scale_id == scale_id)
        .order_by(GradeScaleEntry.min_percentage.desc())
    )
    return list(db.execute(statement).scalars())


@router.post("/scales/{scale_id}/entries", response_model=GradeScaleEntryOut, status_code=status.HTTP_201_CREATED)
def create_entry(
    scale_id: str,
    payload: GradeScaleEntryCreate,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> GradeScaleEntryOut:
    scale = get_school_owned(db, GradeScale, scale_id, school.id, "Grade scale")
    outcome = ConflictService(SqlIntervalSource(db)).validate(
        grade_scale_entry_request(
            grade_scale_id=scale.id,
            min_percentage=payload.min_percentage,
            max_percentage=payload.max_percentage,
        )
    )
    outcome.raise_for_status()

    entry = GradeScaleEntry(
        grade_scale_id=scale.id,
        min_percentage=outcome.candidate.start / PERCENT_SCALE,
        max_percentage=outcome.candidate.end / PERCENT_SCALE,
        grade_letter=payload.grade_letter.strip().upper(),
        grade_point=payload.grade_point,
        remark=payload.remark,
    )
    db.add(entry)
    commit_or_conflict(db, ENTRY_TAKEN, field_errors={"min_percentage": [ENTRY_TAKEN]})
    db.refresh(entry)
    log_activity(
        db,
        user=current_user,
        action="grade_scale_entry.create",
        school_id=school.id,
        entity_type="grade_scale_entry",
        entity_id=entry.id,
        details={"grade_letter": entry.grade_letter, "min": entry.min_percentage, "max": entry.max_percentage},
    )
    db.commit()
    return entry


@router.put("/scales/{scale_id}/entries/{entry_id}", response_model=GradeScaleEntryOut)
def update_entry(
    scale_id: str,
    entry_id: str,
    payload: GradeScaleEntryUpdate,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> GradeScaleEntryOut:
    scale = get_school_owned(db, GradeScale, scale_id, school.id, "Grade scale")
    entry = _get_entry(db, scale, entry_id)
    data = payload.model_dump(exclude_unset=True)
    for required in ("min_percentage", "max_percentage", "grade_letter"):
        if data.get(required) is None:
            data.pop(required, None)

    if "min_percentage" in data or "max_percentage" in data:
        outcome = ConflictService(SqlIntervalSource(db)).validate(
            grade_scale_entry_request(
                grade_scale_id=scale.id,
                min_percentage=data.get("min_percentage", entry.min_percentage),
                max_percentage=data.get("max_percentage", entry.max_percentage),
                exclude_entry_id=entry_id,
            )
        )
        outcome.raise_for_status()
        data["min_percentage"] = outcome.candidate.start / PERCENT_SCALE
        data["max_percentage"] = outcome.candidate.end / PERCENT_SCALE
    if "grade_letter" in data:
        data["grade_letter"] = data["grade_letter"].strip().upper()

    for key, value in data.items():
        setattr(entry, key, value)
    if data:
        log_activity(
            db,
            user=current_user,
            action="grade_scale_entry.update",
            school_id=school.id,
            entity_type="grade_scale_entry",
            entity_id=entry_id,
            details={"fields": sorted(data)},
        )
    commit_or_conflict(db, ENTRY_TAKEN, field_errors={"min_percentage": [ENTRY_TAKEN]})
    db.refresh(entry)
    return entry


@router.delete("/scales/{scale_id}/entries/{entry_id}")
def delete_entry(
    scale_id: str,
    entry_id: str,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    scale = get_school_owned(db, GradeScale, scale_id, school.id, "Grade scale")
    entry = _get_entry(db, scale, entry_id)
    log_activity(
        db,
        user=current_user,
        action="grade_scale_entry.delete",
        school_id=school.id,
        entity_type="grade_scale_entry",
        entity_id=entry_id,
        details={"grade_letter": entry.grade_letter},
    )
    db.delete(entry)
    db.commit()
    return {"success": True}
