"""
Domain errors raised by the core and translated to HTTP responses in main.py.
"""


class ChopBoxError(Exception):
    status_code = 500

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class InvalidArgument(ChopBoxError):
    status_code = 400


class NotFound(ChopBoxError):
    status_code = 404


class Conflict(ChopBoxError):
    """A unique field (username, email) is already taken."""
    status_code = 409


class ConcurrencyConflict(ChopBoxError):
    """Storage could not apply a conditional write atomically."""
    status_code = 409


class UrlExpansionError(ChopBoxError):
    status_code = 502
