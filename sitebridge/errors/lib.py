"""Error taxonomy for tool calls.

Every failure a handler can report is one of the classes below. Each carries
a human-readable message plus an ``extra`` payload with corrective
information (available alternatives, the recovery call, the failing
expression segment) so the calling agent can fix its next request.
"""

from typing import Any


class BridgeError(Exception):
    """Base class for all tool-call failures.

    Attributes:
        message: Human-readable error description.
        extra: Structured corrective information for the caller.
        warnings: Corrections applied before the failure, reported with it.
    """

    error_type = "BridgeError"

    def __init__(self, message: str, **extra: Any):
        self.message = message
        self.extra: dict[str, Any] = extra
        self.warnings: list[str] = []
        super().__init__(message)

    def to_extra(self) -> dict[str, Any]:
        """Return the envelope ``extra`` payload, tagged with the error type."""
        return {"type": self.error_type, **self.extra}


class ValidationError(BridgeError):
    """Malformed or missing parameters."""

    error_type = "ValidationError"


class NotFoundError(BridgeError):
    """A referenced id does not exist.

    Always carries ``available``: the valid alternatives at that point.
    """

    error_type = "NotFoundError"

    def __init__(self, message: str, available: list[str], **extra: Any):
        super().__init__(message, available=list(available), **extra)
        self.available = list(available)


class NoSelectionError(BridgeError):
    """A prerequisite selection (component, rule, project) is missing.

    ``recovery`` names the exact call to make first.
    """

    error_type = "NoSelectionError"

    def __init__(self, message: str, recovery: str, **extra: Any):
        super().__init__(f"{message} Call {recovery} first.", recovery=recovery, **extra)
        self.recovery = recovery


class SchemaResolutionError(BridgeError):
    """A content expression segment does not exist in the schema."""

    error_type = "SchemaResolutionError"

    def __init__(
        self,
        message: str,
        segment_index: int,
        segment: str,
        resolved_path: str,
        candidates: list[str],
    ):
        super().__init__(
            message,
            segment_index=segment_index,
            segment=segment,
            resolved_path=resolved_path,
            candidates=list(candidates),
        )
        self.segment_index = segment_index
        self.segment = segment
        self.resolved_path = resolved_path
        self.candidates = list(candidates)


class StyleRejectedError(BridgeError):
    """One or more CSS property/value pairs were rejected."""

    error_type = "StyleRejectedError"

    def __init__(self, message: str, valid: dict[str, str], invalid: dict[str, str]):
        super().__init__(message, valid=dict(valid), invalid=dict(invalid))
        self.valid = dict(valid)
        self.invalid = dict(invalid)


class UnsupportedOperationError(BridgeError):
    """The requested capability is not configured on the editor."""

    error_type = "UnsupportedOperationError"

    def __init__(self, message: str, capability: str, **extra: Any):
        super().__init__(message, capability=capability, **extra)
        self.capability = capability


class NotReadyError(BridgeError):
    """The editor (or site API) is unreachable.

    Not a domain error: the collaborator is at fault, not the request.
    """

    error_type = "NotReadyError"

    def to_extra(self) -> dict[str, Any]:
        return {"type": self.error_type, "status": "not_ready", **self.extra}


__all__ = [
    "BridgeError",
    "ValidationError",
    "NotFoundError",
    "NoSelectionError",
    "SchemaResolutionError",
    "StyleRejectedError",
    "UnsupportedOperationError",
    "NotReadyError",
]
