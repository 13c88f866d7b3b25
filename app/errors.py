"""
Steam Trust Check - Error Taxonomy

Every failure that can reach the caller is a CheckError carrying a kind
from a closed set. Internal components raise; only the HTTP boundary turns
a kind into a status code and a caller-facing message (see describe()).
"""
from enum import Enum
from typing import Optional, Tuple


class ErrorKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    RESOLUTION_FAILED = "resolution_failed"
    RATE_LIMITED = "rate_limited"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    UPSTREAM_UNEXPECTED = "upstream_unexpected"
    CONFIGURATION = "configuration"


# Kinds that make the whole run unreliable. Never absorbed into an "unknown" signal.
FATAL_KINDS = frozenset({ErrorKind.RATE_LIMITED, ErrorKind.UPSTREAM_UNAVAILABLE})


class CheckError(Exception):
    """A classified failure. `upstream_status` is the Steam HTTP status when there was one."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        upstream_status: Optional[int] = None,
        endpoint: Optional[str] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.upstream_status = upstream_status
        self.endpoint = endpoint

    @property
    def is_fatal(self) -> bool:
        return self.kind in FATAL_KINDS

    def __repr__(self) -> str:
        return (
            f"CheckError(kind={self.kind.value!r}, status={self.upstream_status!r}, "
            f"endpoint={self.endpoint!r}, message={self.message!r})"
        )


def classify_status(status: int) -> ErrorKind:
    """Map a non-success upstream HTTP status to an error kind."""
    if status == 429:
        return ErrorKind.RATE_LIMITED
    if status >= 500:
        return ErrorKind.UPSTREAM_UNAVAILABLE
    return ErrorKind.UPSTREAM_UNEXPECTED


# kind -> (HTTP status, fixed caller message or None to pass the error's own text)
_BOUNDARY = {
    ErrorKind.RATE_LIMITED: (
        429,
        "Steam is rate-limiting requests right now. Please retry in about 30-60 seconds.",
    ),
    ErrorKind.UPSTREAM_UNAVAILABLE: (
        503,
        "Steam is temporarily unavailable. Please retry in a minute.",
    ),
    ErrorKind.UPSTREAM_UNEXPECTED: (
        502,
        "Steam returned an unexpected response. Please retry shortly.",
    ),
    ErrorKind.INVALID_INPUT: (400, None),
    ErrorKind.RESOLUTION_FAILED: (400, None),
    ErrorKind.CONFIGURATION: (500, None),
}


def describe(error: CheckError) -> Tuple[int, str]:
    """Caller-facing (status_code, message) for a classified error."""
    status, fixed = _BOUNDARY[error.kind]
    return status, fixed or error.message
