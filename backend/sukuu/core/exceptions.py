class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class InvalidInputError(AppError):
    """Raised when request data is malformed or out of range."""
    def __init__(self, message: str, field_errors: dict[str, list[str]] = None):
        details = {"fieldErrors": field_errors} if field_errors else {}
        super().__init__(message, status_code=400, details=details)

class ScheduleConflictError(AppError):
    """Raised when a write would collide with data that is already committed."""
    def __init__(self, message: str, conflicts: list[dict] = None, field_errors: dict[str, list[str]] = None):
        details: dict = {}
        if conflicts:
            details["conflicts"] = conflicts
        if field_errors:
            details["fieldErrors"] = field_errors
        super().__init__(message, status_code=409, details=details)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)

class PermissionDeniedError(AppError):
    """Raised when the actor may not act on the requested school."""
    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, status_code=403)

class StorageUnavailableError(AppError):
    """Raised when the database cannot be reached. Never retried here."""
    def __init__(self, message: str = "Database temporarily unavailable"):
        super().__init__(message, status_code=503)
