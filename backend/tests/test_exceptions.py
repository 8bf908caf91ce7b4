from sukuu.core.exceptions import (
    AppError,
    InvalidInputError,
    PermissionDeniedError,
    ResourceNotFoundError,
    ScheduleConflictError,
    StorageUnavailableError,
)


def test_error_status_codes():
    assert InvalidInputError("bad").status_code == 400
    assert PermissionDeniedError().status_code == 403
    assert ResourceNotFoundError("Class", "c1").status_code == 404
    assert ScheduleConflictError("taken").status_code == 409
    assert StorageUnavailableError().status_code == 503
    assert isinstance(StorageUnavailableError(), AppError)


def test_error_details_only_carry_what_was_given():
    assert InvalidInputError("bad").details == {}
    assert InvalidInputError("bad", field_errors={"start_time": ["x"]}).details == {"fieldErrors": {"start_time": ["x"]}}
    conflict = ScheduleConflictError("taken", conflicts=[{"dimension": "room", "entityId": "s1", "label": None}])
    assert conflict.details == {"conflicts": [{"dimension": "room", "entityId": "s1", "label": None}]}
    assert ResourceNotFoundError("Class", "c1").message == "Class with id c1 not found"
