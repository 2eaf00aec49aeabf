"""Typed errors raised by the task lifecycle services."""

from enum import Enum

from pydantic import BaseModel


class ErrorKind(Enum):
    """Broad categories of domain errors."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    STATE_CONFLICT = "state_conflict"


class ErrorCode:
    """Error codes for specific error conditions."""

    # Validation errors
    INVALID_TITLE = "INVALID_TITLE"
    INVALID_DESCRIPTION = "INVALID_DESCRIPTION"
    INVALID_CATEGORY = "INVALID_CATEGORY"
    INVALID_PRIORITY = "INVALID_PRIORITY"
    INVALID_STATUS = "INVALID_STATUS"
    INVALID_LOCATION_TYPE = "INVALID_LOCATION_TYPE"
    INVALID_HOURS = "INVALID_HOURS"
    INVALID_LABOR_COST = "INVALID_LABOR_COST"
    INVALID_PART_NAME = "INVALID_PART_NAME"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    INVALID_UNIT_COST = "INVALID_UNIT_COST"
    INVALID_ROOM_NUMBER = "INVALID_ROOM_NUMBER"
    INVALID_FLOOR = "INVALID_FLOOR"
    INVALID_SUPPLY_NAME = "INVALID_SUPPLY_NAME"
    INVALID_UNIT = "INVALID_UNIT"

    # Not found errors
    TASK_NOT_FOUND = "TASK_NOT_FOUND"
    SUPPLY_NOT_FOUND = "SUPPLY_NOT_FOUND"
    PART_NOT_FOUND = "PART_NOT_FOUND"

    # State conflict errors
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    ALREADY_CANCELLED = "ALREADY_CANCELLED"
    NOT_ASSIGNED = "NOT_ASSIGNED"
    INSUFFICIENT_QUANTITY = "INSUFFICIENT_QUANTITY"
    TASK_FINALIZED = "TASK_FINALIZED"
    TASK_ALREADY_EXISTS = "TASK_ALREADY_EXISTS"

    @staticmethod
    def invalid_id(field: str) -> str:
        """Return the code for a malformed identifier of the given field (e.g. INVALID_ASSIGNEE_ID)."""
        return f"INVALID_{field.upper()}_ID"


class TaskLifecycleError(Exception):
    """Base class for every domain error raised by the lifecycle services."""

    kind: ErrorKind
    status_code: int

    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class ValidationError(TaskLifecycleError):
    """Malformed or missing input. Fixable by the caller."""

    kind = ErrorKind.VALIDATION
    status_code = 400


class NotFoundError(TaskLifecycleError):
    """Referenced entity does not exist."""

    kind = ErrorKind.NOT_FOUND
    status_code = 404


class StateConflictError(TaskLifecycleError):
    """Operation is not legal in the entity's current state."""

    kind = ErrorKind.STATE_CONFLICT
    status_code = 409


class ErrorResponse(BaseModel):
    """Structured error response for the calling application layer."""

    code: str
    message: str
    kind: ErrorKind
    status_code: int


def build_error_response(exception: TaskLifecycleError) -> ErrorResponse:
    """Convert a domain error into a structured response.

    Args:
        exception: The domain error raised by a service operation

    Returns:
        ErrorResponse with the stable code, message, kind and HTTP-style status code
    """
    return ErrorResponse(
        code=exception.code,
        message=exception.message,
        kind=exception.kind,
        status_code=exception.status_code,
    )
