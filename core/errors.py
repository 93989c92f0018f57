# =============================================================================
# core/errors.py  —  Error Kinds & Typed Exceptions
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Defines the closed set of failure kinds the server can report, and one
#   exception class per kind.  Every failure that crosses a module boundary
#   is one of these, so callers can branch on `exc.kind` instead of parsing
#   message strings.
#
# THE FOUR KINDS:
#   - UNKNOWN_OPERATION    → the caller named a tool that isn't registered
#   - UPSTREAM_UNAVAILABLE → a backend call failed (network, timeout, non-2xx,
#                            undecodable body); recovered by the next tier
#   - MALFORMED_ARGUMENT   → a required argument is missing or mis-shaped
#   - NOT_FOUND            → a lookup missed the fixture catalog; recovered
#                            by substituting a default record
# =============================================================================

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Closed enumeration of failure kinds reported in error envelopes."""

    UNKNOWN_OPERATION = "unknown_operation"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    MALFORMED_ARGUMENT = "malformed_argument"
    NOT_FOUND = "not_found"


class BridgeError(Exception):
    """Base class for every failure the server knows how to report."""

    kind: ErrorKind

    def __init__(self, message: str, *, source: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.source = source

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind.value}: {self.message})"


class UnknownOperation(BridgeError):
    kind = ErrorKind.UNKNOWN_OPERATION


class UpstreamUnavailable(BridgeError):
    """A backend tier could not produce data."""

    kind = ErrorKind.UPSTREAM_UNAVAILABLE


class MalformedArgument(BridgeError):
    kind = ErrorKind.MALFORMED_ARGUMENT


class NotFound(BridgeError):
    kind = ErrorKind.NOT_FOUND
