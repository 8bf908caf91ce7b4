import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from sukuu.api.deps import commit_or_conflict, get_current_user, get_db, get_school_owned, require_school_access
from sukuu.core.exceptions import InvalidInputError
from sukuu.models.school import School
from sukuu.models.school_class import SchoolClass
from sukuu.models.subject import Subject
from sukuu.models.teacher import Teacher
from sukuu.models.timetable import DayOfWeek, TimetableSlot
from sukuu.models.user import User
from sukuu.schemas.timetable import TimetableSlotCreate, TimetableSlotOut, TimetableSlotUpdate
from sukuu.services.audit import log_activity
from sukuu.services.conflict_service import ConflictService, Dimension, timetable_slot_request
from sukuu.services.conflict_sources import SqlIntervalSource

router = APIRouter()
logger = logging.getLogger(__name__)

SLOT_TAKEN = "Another slot already starts at this time for this class, teacher or room."


def _check_references(db: Session, school_id: str, **references: str | None) -> None:
    """Every referenced row must exist and belong to ``school_id``."""
    models = {"class_id": SchoolClass, "subject_id": Subject, "teacher_id": Teacher}
    field_errors: dict[str, list[str]] = {}
    for field, entity_id in references.items():
        if entity_id is None:
            continue
        entity = db.get(models[field], entity_id)
        if entity is None or entity.school_id != school_id:
            field_errors[field] = ["Not found in this school."]
    if field_errors:
        raise InvalidInputError("Invalid class, subject or teacher.", field_errors=field_errors)


@router.get("", response_model=list[TimetableSlotOut])
def list_slots(
    class_id: str | None = Query(default=None),
    day_of_week: DayOfWeek | None = Query(default=None),
    school: School = Depends(require_school_access),
    db: Session = Depends(get_db),
) -> list[TimetableSlotOut]:
    if not class_id:
        raise InvalidInputError("class_id is required.", field_errors={"class_id": ["Required."]})
    get_school_owned(db, SchoolClass, class_id, school.id, "Class")
    statement = select(TimetableSlot).where(TimetableSlot.school_id == school.id, TimetableSlot.class_id == class_id)
    if day_of_week is not None:
        statement = statement.where(TimetableSlot.day_of_week == day_of_week)
    rows = list(db.execute(statement.order_by(TimetableSlot.start_time)).scalars())
    day_order = list(DayOfWeek)
    return sorted(rows, key=lambda slot: (day_order.index(slot.day_of_week), slot.start_time))


@router.post("", response_model=TimetableSlotOut, status_code=status.HTTP_201_CREATED)
def create_slot(
    payload: TimetableSlotCreate,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TimetableSlotOut:
    _check_references(
        db,
        school.id,
        class_id=payload.class_id,
        subject_id=payload.subject_id,
        teacher_id=payload.teacher_id,
    )
    outcome = ConflictService(SqlIntervalSource(db)).validate(
        timetable_slot_request(
            school_id=school.id,
            class_id=payload.class_id,
            teacher_id=payload.teacher_id,
            day_of_week=payload.day_of_week,
            start_time=payload.start_time,
            end_time=payload.end_time,
            room=payload.room,
        )
    )
    outcome.raise_for_status()

    slot = TimetableSlot(school_id=school.id, **payload.model_dump())
    db.add(slot)
    commit_or_conflict(
        db,
        SLOT_TAKEN,
        field_errors={"start_time": ["Slot already taken."], "end_time": ["Slot already taken."]},
    )
    db.refresh(slot)
    log_activity(
        db,
        user=current_user,
        action="timetable_slot.create",
        school_id=school.id,
        entity_type="timetable_slot",
        entity_id=slot.id,
        details={
            "class_id": slot.class_id,
            "day_of_week": slot.day_of_week.value,
            "start_time": slot.start_time,
            "end_time": slot.end_time,
        },
    )
    db.commit()
    logger.info(
        "Slot %s scheduled for class %s on %s %s-%s",
        slot.id,
        slot.class_id,
        slot.day_of_week.value,
        slot.start_time,
        slot.end_time,
    )
    return slot


@router.put("/{slot_id}", response_model=TimetableSlotOut)
def update_slot(
    slot_id: str,
    payload: TimetableSlotUpdate,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TimetableSlotOut:
    slot = get_school_owned(db, TimetableSlot, slot_id, school.id, "Timetable slot")
    data = payload.model_dump(exclude_unset=True)
    for required in ("subject_id", "teacher_id"):
        if data.get(required) is None:
            data.pop(required, None)
    _check_references(db, school.id, subject_id=data.get("subject_id"), teacher_id=data.get("teacher_id"))

    teacher_id = data.get("teacher_id", slot.teacher_id)
    room = data["room"] if "room" in data else slot.room
    changed: list[Dimension] = []
    if teacher_id != slot.teacher_id:
        changed.append(Dimension.teacher)
    if room != slot.room:
        changed.append(Dimension.room)
    if changed:
        # Day and times are immutable, so only the swapped resources need re-checking.
        outcome = ConflictService(SqlIntervalSource(db)).validate(
            timetable_slot_request(
                school_id=school.id,
                class_id=slot.class_id,
                teacher_id=teacher_id,
                day_of_week=slot.day_of_week,
                start_time=slot.start_time,
                end_time=slot.end_time,
                room=room,
                exclude_slot_id=slot_id,
                dimensions=changed,
            )
        )
        outcome.raise_for_status()

    for key, value in data.items():
        setattr(slot, key, value)
    if data:
        log_activity(
            db,
            user=current_user,
            action="timetable_slot.update",
            school_id=school.id,
            entity_type="timetable_slot",
            entity_id=slot_id,
            details={"fields": sorted(data)},
        )
    commit_or_conflict(db, SLOT_TAKEN)
    db.refresh(slot)
    return slot


@router.delete("/{slot_id}")
def delete_slot(
    slot_id: str,
    school: School = Depends(require_school_access),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    slot = get_school_owned(db, TimetableSlot, slot_id, school.id, "Timetable slot")
    log_activity(
        db,
        user=current_user,
        action="timetable_slot.delete",
        school_id=school.id,
        entity_type="timetable_slot",
        entity_id=slot_id,
        details={"class_id": slot.class_id, "day_of_week": slot.day_of_week.value, "start_time": slot.start_time},
    )
    db.delete(slot)
    db.commit()
    return {"success": True}
