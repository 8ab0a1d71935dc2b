"""Custom exceptions for the MaternaCare application.

Domain errors are raised by the CRUD and service layers; endpoints translate
them into the HTTP exceptions defined further down.
"""

from fastapi import HTTPException, status


# ==================== DOMAIN ERRORS ====================

class RecordNotFoundError(LookupError):
    """A referenced row does not exist."""

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class DuplicateAppointmentError(ValueError):
    """Another appointment already occupies the (patient, clinician, date+time) slot."""

    def __init__(self, message: str = "An appointment already exists for this patient, clinician, date, and time."):
        super().__init__(message)


class VitalsSaveError(RuntimeError):
    """The vitals upsert or the appointment measurement update failed; neither was kept."""


class ExportError(RuntimeError):
    """An export could not be produced."""


class EmptyExportError(ExportError):
    """No appointment matched the export filters."""


class StorageError(RuntimeError):
    """A file could not be written to or read from the upload directory."""


# ==================== HTTP EXCEPTIONS ====================

class NotFoundException(HTTPException):
    """Exception when a requested record does not exist."""

    def __init__(self, detail: str = "Record not found"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
        )


class DuplicateAppointmentException(HTTPException):
    """
    Exception when an appointment slot is already taken.

    Status Code: 409 Conflict

    Response Body:
        {
            "detail": "An appointment already exists for this patient, clinician, date, and time."
        }
    """

    def __init__(self, detail: str = "An appointment already exists for this patient, clinician, date, and time."):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
        )


class InvalidCredentialsException(HTTPException):
    """Exception when the name or password is wrong."""

    def __init__(self, detail: str = "Invalid name or password"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AdminRequiredException(HTTPException):
    """Exception when a non-admin attempts an admin-only action."""

    def __init__(self, detail: str = "Only administrators can perform this action"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
        )


class SaveFailedException(HTTPException):
    """Exception when a write did not go through and was rolled back."""

    def __init__(self, detail: str = "Failed to save records"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
        )


__all__ = [
    "RecordNotFoundError",
    "DuplicateAppointmentError",
    "VitalsSaveError",
    "ExportError",
    "EmptyExportError",
    "StorageError",
    "NotFoundException",
    "DuplicateAppointmentException",
    "InvalidCredentialsException",
    "AdminRequiredException",
    "SaveFailedException",
]
