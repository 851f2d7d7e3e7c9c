class GradebookError(Exception):
    """Base class for errors raised by gradebook operations."""

    status_code = 400


class ValidationError(GradebookError):
    status_code = 400


class PermissionDeniedError(GradebookError):
    status_code = 403


class NotFoundError(GradebookError):
    status_code = 404


class StateError(GradebookError):
    status_code = 409


class ConflictError(StateError):
    """The persisted status changed between read and write."""


class LockedError(GradebookError):
    status_code = 423
