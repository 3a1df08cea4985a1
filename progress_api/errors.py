"""Errors raised by the progress tracker, each carrying its HTTP status."""


class ProgressError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ProgressError):
    status_code = 400


class ForbiddenError(ProgressError):
    status_code = 403


class NotFoundError(ProgressError):
    status_code = 404


class GoneError(ProgressError):
    status_code = 410
