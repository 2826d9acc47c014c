"""
CMAP client error kinds

Every failure surfaced by the client derives from CMAPError so callers can
catch the whole family in one place, or pick out the specific condition.
"""

from typing import Any, Dict, Optional


class CMAPError(Exception):
    """Base exception for CMAP client errors."""

    def __init__(self, message: str, status_code: Optional[int] = None, response_data: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_data = response_data


class MissingCredential(CMAPError):
    """No API key is available at the point of use."""


class MalformedRequest(CMAPError):
    """A request payload could not be encoded."""


class MalformedResponse(CMAPError):
    """A successful response body could not be decoded into a table."""


class TransportError(CMAPError):
    """Connection failure or timeout talking to the CMAP server."""


class ServerError(CMAPError):
    """The server answered with a non-success HTTP status."""

    def __init__(self, status_code: int, message: str, response_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            f"CMAP server returned HTTP {status_code}: {message}",
            status_code=status_code,
            response_data=response_data,
        )
        self.server_message = message


class DataUnavailable(CMAPError):
    """Server-side information required by the operation does not exist."""


class RowLimitExceeded(CMAPError):
    """A full-table download would exceed the client row ceiling."""

    def __init__(self, message: str, rows: int, limit: int):
        super().__init__(message)
        self.rows = rows
        self.limit = limit


class NotFound(CMAPError, LookupError):
    """A lookup matched no records."""


class AmbiguousLookup(CMAPError, LookupError):
    """A lookup that must resolve to one record matched several."""

    def __init__(self, message: str, matches: Any = None):
        super().__init__(message)
        self.matches = matches


class InvalidParameter(CMAPError, ValueError):
    """A caller-supplied argument violates an operation precondition."""
