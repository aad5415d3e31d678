"""
Read-only span data model consumed by the OTLP encoders.

These types describe a span *after* it has been recorded: the tracer
builds them, the batching processor hands them over, and the encoders in
:mod:`otlp_transform.transform` turn them into wire dictionaries. Nothing
here is mutated during encoding.

Identity:
    - Resource and InstrumentationScope compare and hash by value, so two
      separately constructed resources with the same attributes land in
      the same export group.
    - Attribute freezing is type-aware: ``True`` and ``1`` are different
      attribute values even though Python treats them as equal.

Memory Optimization:
    - Uses __slots__ on every record type (spans are created in bulk)
"""

from __future__ import annotations

import numbers
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from .ids import is_unset_span_id
from .types import Attributes, HrTime, SpanId, TraceId

__all__ = [
    "SpanKind",
    "StatusCode",
    "Status",
    "TimedEvent",
    "Link",
    "Resource",
    "InstrumentationScope",
    "ReadableSpan",
    "freeze_attributes",
]


class SpanKind(IntEnum):
    """OpenTelemetry span kinds (API numbering, INTERNAL first)."""
    INTERNAL = 0
    SERVER = 1
    CLIENT = 2
    PRODUCER = 3
    CONSUMER = 4


class StatusCode(IntEnum):
    """OpenTelemetry status codes."""
    UNSET = 0
    OK = 1
    ERROR = 2


@dataclass(slots=True, frozen=True)
class Status:
    """Span status: a code plus an optional human-readable message."""
    code: StatusCode = StatusCode.UNSET
    message: str | None = None


@dataclass(slots=True)
class TimedEvent:
    """
    An event that occurred during a span's lifetime.

    ``time`` is an HrTime ``(seconds, nanoseconds)`` pair.
    """
    name: str
    time: HrTime
    attributes: Attributes = field(default_factory=dict)
    dropped_attributes_count: int = 0


@dataclass(slots=True)
class Link:
    """
    A link to another span (cross-trace correlation).

    Links are used when spans are causally related but not parent-child.
    """
    trace_id: TraceId
    span_id: SpanId
    attributes: Attributes = field(default_factory=dict)
    trace_state: str | None = None
    dropped_attributes_count: int = 0


def _freeze(value: Any, parents: frozenset[int] = frozenset()) -> Any:
    """Build a hashable, type-tagged, order-normalised form of a value."""
    if isinstance(value, bool):
        return ("bool", value)
    if isinstance(value, str):
        return ("str", value)
    if isinstance(value, numbers.Real):
        # 1 and 1.0 are one value, as on the wire
        return ("num", value)
    is_map = isinstance(value, Mapping)
    is_seq = isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray))
    # Self-referencing containers and anything else that cannot be encoded
    # fall back to reference identity
    if (is_map or is_seq) and id(value) not in parents:
        parents = parents | {id(value)}
        if is_map:
            return ("map", _freeze_items(value, parents))
        return ("seq", tuple(_freeze(v, parents) for v in value))
    return ("object", type(value).__qualname__, id(value))


def freeze_attributes(attributes: Attributes) -> tuple[tuple[str, Any], ...]:
    """
    Canonical hashable key for an attribute mapping.

    Key order does not matter: ``{"a": 1, "b": 2}`` and ``{"b": 2, "a": 1}``
    freeze to the same tuple.
    """
    return _freeze_items(attributes, frozenset())


def _freeze_items(attributes: Attributes, parents: frozenset[int]) -> tuple[tuple[str, Any], ...]:
    return tuple(
        sorted(
            ((key, _freeze(value, parents)) for key, value in attributes.items()),
            key=lambda item: repr(item[0]),
        )
    )


class Resource:
    """
    The entity that produced telemetry, described by attributes only.

    Two resources are equal when their attributes are equal by value;
    ``dropped_attributes_count`` is carried to the wire but is not part of
    the identity.

    !!! example
        ```python
        resource = Resource({"service.name": "checkout", "service.version": "1.4.2"})
        ```
    """

    __slots__ = ('attributes', 'dropped_attributes_count')

    def __init__(
        self,
        attributes: Attributes | None = None,
        dropped_attributes_count: int = 0,
    ) -> None:
        self.attributes: dict[str, Any] = dict(attributes or {})
        self.dropped_attributes_count = dropped_attributes_count

    def __repr__(self) -> str:
        return f"Resource({self.attributes!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Resource):
            return NotImplemented
        return self.identity_key() == other.identity_key()

    def __hash__(self) -> int:
        return hash(self.identity_key())

    def identity_key(self) -> tuple[tuple[str, Any], ...]:
        """Value identity used for grouping."""
        return freeze_attributes(self.attributes)

    @classmethod
    def empty(cls) -> Resource:
        """A resource with no attributes."""
        return cls()

    def merge(self, other: Resource | None) -> Resource:
        """
        Return a new resource combining both attribute sets.

        Attributes of ``other`` win on key collisions.
        """
        if other is None:
            return self
        return Resource(
            {**self.attributes, **other.attributes},
            self.dropped_attributes_count + other.dropped_attributes_count,
        )


@dataclass(slots=True, frozen=True)
class InstrumentationScope:
    """Identity (name, version) of the library that produced a span."""
    name: str
    version: str | None = None


class ReadableSpan:
    """
    A completed span ready for export.

    Attributes:
        trace_id: 16-byte trace id (bytes or 32-char hex text)
        span_id: 8-byte span id (bytes or 16-char hex text)
        parent_span_id: 8-byte parent span id, None (or all zeros) for root spans
        name: Human-readable span name (e.g., "GET /orders")
        kind: SpanKind enum value
        start_time: HrTime start
        end_time: HrTime end
        status: Status record
        attributes: Key-value pairs describing the span
        events: Ordered TimedEvents
        links: Ordered Links
        resource: Owning Resource
        instrumentation_scope: Scope that recorded the span
        trace_state: W3C tracestate header value, if any
        dropped_attributes_count: Attributes discarded before export
        dropped_events_count: Events discarded before export
        dropped_links_count: Links discarded before export
    """

    __slots__ = (
        'trace_id',
        'span_id',
        'parent_span_id',
        'name',
        'kind',
        'start_time',
        'end_time',
        'status',
        'attributes',
        'events',
        'links',
        'resource',
        'instrumentation_scope',
        'trace_state',
        'dropped_attributes_count',
        'dropped_events_count',
        'dropped_links_count',
    )

    def __init__(
        self,
        name: str,
        trace_id: TraceId,
        span_id: SpanId,
        start_time: HrTime,
        end_time: HrTime,
        *,
        parent_span_id: SpanId | None = None,
        kind: SpanKind = SpanKind.INTERNAL,
        status: Status | None = None,
        attributes: Attributes | None = None,
        events: Sequence[TimedEvent] | None = None,
        links: Sequence[Link] | None = None,
        resource: Resource | None = None,
        instrumentation_scope: InstrumentationScope | None = None,
        trace_state: str | None = None,
        dropped_attributes_count: int = 0,
        dropped_events_count: int = 0,
        dropped_links_count: int = 0,
    ) -> None:
        self.trace_id = trace_id
        self.span_id = span_id
        self.parent_span_id = parent_span_id
        self.name = name
        self.kind = kind
        self.start_time = start_time
        self.end_time = end_time
        self.status = status or Status()
        self.attributes: Attributes = attributes if attributes is not None else {}
        self.events: list[TimedEvent] = list(events or ())
        self.links: list[Link] = list(links or ())
        self.resource = resource if resource is not None else Resource.empty()
        self.instrumentation_scope = instrumentation_scope or InstrumentationScope("")
        self.trace_state = trace_state
        self.dropped_attributes_count = dropped_attributes_count
        self.dropped_events_count = dropped_events_count
        self.dropped_links_count = dropped_links_count

    def __repr__(self) -> str:
        span_id = self.span_id.hex() if isinstance(self.span_id, bytes) else self.span_id
        return f"<ReadableSpan {self.name!r} span_id={span_id}>"

    @property
    def is_root(self) -> bool:
        """True if this is a root span (no parent, or the all-zero parent id)."""
        return is_unset_span_id(self.parent_span_id)
