"""
otlp_transform.types
~~~~~~~~~~~~~~~~~~~~

Type aliases shared by the models and the encoders.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Union

# =============================================================================
# Type Aliases
# =============================================================================

AttributeValue = Union[
    str, bool, int, float, Sequence["AttributeValue"], Mapping[str, "AttributeValue"]
]
"""Valid types for attribute values (scalars, sequences, string-keyed maps)."""

Attributes = Mapping[str, Any]
"""Attribute mapping as recorded on spans, events, links and resources."""

HrTime = tuple[int, int]
"""Split timestamp: (whole seconds, sub-second nanoseconds)."""

TraceId = Union[bytes, str]
"""16-byte trace id, or its 32-character hex text."""

SpanId = Union[bytes, str]
"""8-byte span id, or its 16-character hex text."""

# =============================================================================
# Exports
# =============================================================================

__all__ = [
    "AttributeValue",
    "Attributes",
    "HrTime",
    "TraceId",
    "SpanId",
]
