"""
Domain exceptions for the scheduling and swap workflows

Services raise these; main.py maps them onto the API response envelope
using the status_code each class carries.
"""


class SchedulerError(Exception):
    """Base exception for all scheduling domain errors"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SchedulerError):
    """Raised when required input is missing or malformed"""

    status_code = 400


class NotFoundError(SchedulerError):
    """Raised when a referenced event, volunteer, schedule or swap request is absent"""

    status_code = 404


class ConflictError(SchedulerError):
    """Raised when a business rule is violated (duplicate schedule, same-day clash)"""

    status_code = 400


class InvalidStateError(ConflictError):
    """Raised when a swap request transition is attempted from a non-pending state"""


class StoreError(SchedulerError):
    """Raised when the persistence layer fails; the open transaction is rolled back"""

    status_code = 500


class NotificationError(SchedulerError):
    """Raised when a notification recipient cannot be resolved or the insert fails"""

    status_code = 500
