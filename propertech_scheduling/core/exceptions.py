"""
Scheduling Errors
Typed failures raised by the scheduling services and rendered by main.py.
"""
from fastapi import status


class SchedulingError(Exception):
    """Base class for caller-visible scheduling failures."""

    kind = "SchedulingError"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(SchedulingError):
    kind = "NotFound"
    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(SchedulingError):
    kind = "Forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class ConflictError(SchedulingError):
    kind = "Conflict"
    status_code = status.HTTP_409_CONFLICT


class InvalidStateError(SchedulingError):
    kind = "InvalidState"
    status_code = status.HTTP_400_BAD_REQUEST


class ValidationError(SchedulingError):
    kind = "ValidationError"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class InternalError(SchedulingError):
    kind = "InternalError"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str = "Internal server error"):
        super().__init__(detail)
