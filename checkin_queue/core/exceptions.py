"""
Domain errors raised by the queue engine and storage layer.
Each carries the HTTP status it maps to at the API surface.
"""


class QueueError(Exception):
    """Base class for all check-in queue errors"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(QueueError):
    """A required appointment field is missing or blank"""
    status_code = 400


class NotFoundError(QueueError):
    """No appointment with the given id exists for the current day"""
    status_code = 404


class StorageError(QueueError):
    """Reading or writing a day file failed"""
    status_code = 500
