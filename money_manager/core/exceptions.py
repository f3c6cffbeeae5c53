"""
Domain errors raised by services and mapped to HTTP responses in main.py.
"""


class LedgerError(Exception):
    """Base class for errors surfaced to the caller as-is."""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(LedgerError):
    status_code = 404


class ValidationError(LedgerError):
    status_code = 422


class Unauthorized(LedgerError):
    status_code = 401


class Forbidden(LedgerError):
    status_code = 403


class Conflict(LedgerError):
    status_code = 409
