"""
Error types raised by the query and mutation engine.

Lookups that find nothing are not errors: they return None, a False flag or
an unsuccessful DeleteResult so sibling fields of a response stay resolvable.
Only malformed input and stale pagination cursors raise.
"""

from typing import Any, Dict, Optional


class EngineError(Exception):
    """Base exception for all engine errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "ENGINE_ERROR"
        self.details = details or {}


class InvalidCursorError(EngineError):
    """A pagination cursor does not point into the current result set.

    Raised when:
    - The cursor is not valid base64 / UTF-8
    - The decoded id was deleted or filtered out since the cursor was issued
    """

    def __init__(self, cursor: str, reason: str = "cursor does not match any record") -> None:
        super().__init__(
            f"Invalid cursor {cursor!r}: {reason}",
            code="INVALID_CURSOR",
            details={"cursor": cursor},
        )
        self.cursor = cursor


class InvalidInputError(EngineError, ValueError):
    """Input passed type checks but is not acceptable.

    Also a ValueError, so pydantic validators that raise it report a
    regular validation error at the boundary.

    Raised when:
    - A limit, offset or page size is negative
    - A timestamp cannot be parsed
    - A category update would create a cycle
    """

    def __init__(self, message: str, field_name: Optional[str] = None, code: str = "VALIDATION_ERROR") -> None:
        super().__init__(message, code=code, details={"field": field_name})
        self.field_name = field_name


class InvalidReferenceError(InvalidInputError):
    """A write names a related record that does not exist."""

    def __init__(self, kind: str, record_id: Optional[str], field_name: Optional[str] = None) -> None:
        super().__init__(
            f"{kind.capitalize()} {record_id} not found",
            field_name=field_name,
            code="INVALID_REFERENCE",
        )
        self.kind = kind
        self.record_id = record_id
