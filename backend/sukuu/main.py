from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from sukuu.api.routes import (
    assessments,
    assignments,
    attendance,
    auth,
    classes,
    conflicts,
    grading,
    health,
    periods,
    schools,
    slots,
    students,
    subjects,
    teachers,
    users,
)
from sukuu.core.config import get_settings
from sukuu.core.exceptions import AppError, InvalidInputError, StorageUnavailableError
from sukuu.core.logging import setup_logging
from sukuu.core.middleware import RequestLoggingMiddleware, RequestSizeLimitMiddleware, SecurityHeadersMiddleware
from sukuu.db.bootstrap import bootstrap_database

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logging(level=settings.log_level)
    bootstrap_database()
    logger.info("%s started (%s)", settings.project_name, settings.environment)
    yield


async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "details": exc.details},
    )


def _request_field_errors(exc: RequestValidationError) -> dict[str, list[str]]:
    field_errors: dict[str, list[str]] = {}
    for error in exc.errors():
        # Drop the "body"/"query"/"path" prefix; model-level errors have nothing left.
        path = [str(part) for part in error.get("loc", ())[1:]]
        field = ".".join(path) or "non_field_errors"
        message = str(error.get("msg", "Invalid value.")).removeprefix("Value error, ")
        field_errors.setdefault(field, []).append(message)
    return field_errors


async def request_validation_handler(request: Request, exc: RequestValidationError):
    return await app_error_handler(
        request, InvalidInputError("Validation failed.", field_errors=_request_field_errors(exc))
    )


async def storage_error_handler(request: Request, exc: OperationalError):
    logger.exception("Database unavailable while handling %s %s", request.method, request.url.path, exc_info=exc)
    return await app_error_handler(request, StorageUnavailableError())


app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(OperationalError, storage_error_handler)

app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_size_bytes)
app.add_middleware(SecurityHeadersMiddleware, settings=settings)
app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

school_prefix = f"{settings.api_prefix}/schools/{{school_id}}"

app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
app.include_router(auth.router, prefix=f"{settings.api_prefix}/auth", tags=["auth"])
app.include_router(schools.router, prefix=f"{settings.api_prefix}/superadmin", tags=["superadmin"])
app.include_router(users.router, prefix=f"{settings.api_prefix}/users", tags=["users"])
app.include_router(classes.router, prefix=f"{school_prefix}/classes", tags=["classes"])
app.include_router(
    assignments.router, prefix=f"{school_prefix}/classes/{{class_id}}/assignments", tags=["classes"]
)
app.include_router(students.router, prefix=f"{school_prefix}/students", tags=["students"])
app.include_router(subjects.router, prefix=f"{school_prefix}/subjects", tags=["subjects"])
app.include_router(teachers.router, prefix=f"{school_prefix}/teachers", tags=["teachers"])
app.include_router(periods.router, prefix=f"{school_prefix}/timetable/periods", tags=["timetable"])
app.include_router(slots.router, prefix=f"{school_prefix}/timetable/slots", tags=["timetable"])
app.include_router(grading.router, prefix=f"{school_prefix}/grading", tags=["grading"])
app.include_router(assessments.router, prefix=f"{school_prefix}/assessments", tags=["assessments"])
app.include_router(attendance.router, prefix=f"{school_prefix}/attendance", tags=["attendance"])
app.include_router(conflicts.router, prefix=f"{school_prefix}/conflicts", tags=["conflicts"])
