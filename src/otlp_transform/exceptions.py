"""
Transform errors for otlp_transform.

All errors are local validation failures raised to the immediate caller.
They subclass ValueError so callers that only care about "bad input" can
catch one thing.
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "TransformError",
    "UnsupportedAttributeType",
    "MalformedTimestamp",
    "MalformedId",
]


class TransformError(ValueError):
    """Base class for span-to-OTLP transform failures."""
    pass


class UnsupportedAttributeType(TransformError, TypeError):
    """Raised when an attribute value has no AnyValue representation."""

    def __init__(self, value: Any, key: str | None = None, reason: str | None = None) -> None:
        self.value = value
        self.key = key
        self.reason = reason or f"unsupported attribute type {type(value).__name__}"
        where = f" for key {key!r}" if key is not None else ""
        super().__init__(f"{self.reason}{where}: {value!r}")


class MalformedTimestamp(TransformError):
    """Raised when an HrTime has negative, non-integer or out-of-range components."""

    def __init__(self, time: Any) -> None:
        self.time = time
        super().__init__(
            "timestamp must be (seconds, nanoseconds) of non-negative integers "
            f"with nanoseconds below 1000000000, got {time!r}"
        )


class MalformedId(TransformError):
    """Raised when a trace or span id does not have the required byte width."""

    def __init__(self, value: Any, expected_length: int, kind: str = "id") -> None:
        self.value = value
        self.expected_length = expected_length
        self.kind = kind
        super().__init__(
            f"{kind} must be {expected_length} bytes "
            f"({expected_length * 2} hex characters), got {value!r}"
        )
