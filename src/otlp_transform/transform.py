"""
Span to OTLP wire-tree conversion.

Every function here is pure: it reads the span model and returns fresh
``dict``/``list`` values shaped like the OTLP/JSON trace export request.
Nothing is serialized to bytes; hand the result to a JSON or protobuf
encoder.

Numeric attributes:
    OTLP has a 64-bit intValue, but the tree is kept compatible with
    consumers that read it into a 32-bit integer field. Whole numbers in
    the signed 32-bit range become ``intValue``; every other number
    (fractions, or integers outside that range) becomes ``doubleValue``.

Error policy:
    ``ErrorPolicy.RAISE`` (default) propagates the first failure.
    ``ErrorPolicy.DROP`` skips the offending attribute, event or link and
    adds it to the enclosing dropped*Count so the loss stays visible.
    Span ids and span timestamps always raise.
"""

from __future__ import annotations

import logging
import numbers
from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import Any

from .config import ErrorPolicy, IdEncoding, resolve_error_policy, resolve_id_encoding
from .exceptions import MalformedId, MalformedTimestamp, TransformError, UnsupportedAttributeType
from .grouping import group_spans_by_resource_and_scope, iter_span_groups
from .ids import encode_span_id, encode_trace_id, is_unset_span_id
from .models import InstrumentationScope, Link, ReadableSpan, Resource, SpanKind, Status, TimedEvent
from .types import Attributes, HrTime
from .wire import (
    INT32_MAX,
    INT32_MIN,
    AnyValue,
    ExportTraceServiceRequest,
    KeyValue,
    ResourceSpans,
    ScopeSpans,
    WireEvent,
    WireLink,
    WireResource,
    WireScope,
    WireSpan,
    WireSpanKind,
    WireStatus,
)

logger = logging.getLogger("otlp_transform.transform")

__all__ = [
    "NANOS_PER_SECOND",
    "to_any_value",
    "to_attributes",
    "hr_time_to_nanos",
    "to_event",
    "to_events",
    "to_status",
    "to_kind",
    "to_link",
    "to_links",
    "to_span",
    "to_resource",
    "to_scope",
    "to_scope_spans",
    "to_export_request",
    "iter_export_requests",
]

NANOS_PER_SECOND = 1_000_000_000

_NOT_A_LIST = (str, bytes, bytearray, memoryview)


# =============================================================================
# ANY VALUE
# =============================================================================

def to_any_value(value: Any) -> AnyValue:
    """
    Convert one attribute value to its tagged OTLP AnyValue.

    Args:
        value: str, bool, number, sequence or string-keyed mapping

    Returns:
        A dict with exactly one of stringValue, boolValue, intValue,
        doubleValue, arrayValue or kvlistValue

    Raises:
        UnsupportedAttributeType: For any other kind of value, for
            non-string mapping keys and for self-referencing containers

    !!! example
        ```python
        to_any_value(["string", True, 1])
        # {"arrayValue": {"values": [{"stringValue": "string"},
        #                            {"boolValue": True},
        #                            {"intValue": 1}]}}
        ```
    """
    return _to_any_value(value, frozenset())


def _to_any_value(value: Any, parents: frozenset[int]) -> AnyValue:
    # bool before numbers: bool is an Integral
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, bool):
        return {"boolValue": value}
    if isinstance(value, numbers.Integral):
        return _integral_value(int(value))
    if isinstance(value, numbers.Real):
        return _real_value(float(value))

    if isinstance(value, Mapping):
        parents = _enter(value, parents)
        values: list[KeyValue] = []
        for key, item in value.items():
            if not isinstance(key, str):
                raise UnsupportedAttributeType(value, reason=f"non-string map key {key!r}")
            values.append({"key": key, "value": _to_any_value(item, parents)})
        return {"kvlistValue": {"values": values}}

    if isinstance(value, Sequence) and not isinstance(value, _NOT_A_LIST):
        parents = _enter(value, parents)
        return {"arrayValue": {"values": [_to_any_value(item, parents) for item in value]}}

    raise UnsupportedAttributeType(value)


def _enter(container: Any, parents: frozenset[int]) -> frozenset[int]:
    if id(container) in parents:
        raise UnsupportedAttributeType(container, reason="self-referencing attribute value")
    return parents | {id(container)}


def _integral_value(value: int) -> AnyValue:
    if INT32_MIN <= value <= INT32_MAX:
        return {"intValue": value}
    try:
        return {"doubleValue": float(value)}
    except OverflowError:
        raise UnsupportedAttributeType(value, reason="integer too large for a double") from None


def _real_value(value: float) -> AnyValue:
    if value.is_integer() and INT32_MIN <= value <= INT32_MAX:
        return {"intValue": int(value)}
    return {"doubleValue": value}


# =============================================================================
# ATTRIBUTES
# =============================================================================

def to_attributes(
    attributes: Attributes,
    error_policy: ErrorPolicy | str | None = None,
) -> list[KeyValue]:
    """
    Convert an attribute mapping to an ordered list of key/value pairs.

    Keys keep the mapping's iteration order. An empty mapping gives an
    empty list. Under the DROP policy unsupported values are skipped; use
    the span/event/resource encoders to get the matching dropped count.
    """
    encoded, _ = _encode_attributes(attributes, resolve_error_policy(error_policy))
    return encoded


def _encode_attributes(attributes: Attributes, policy: ErrorPolicy) -> tuple[list[KeyValue], int]:
    encoded: list[KeyValue] = []
    dropped = 0

    for key, value in attributes.items():
        try:
            if not isinstance(key, str):
                raise UnsupportedAttributeType(key, reason="attribute keys must be strings")
            encoded.append({"key": key, "value": to_any_value(value)})
        except UnsupportedAttributeType as e:
            if policy is ErrorPolicy.RAISE:
                raise UnsupportedAttributeType(value, key=str(key), reason=e.reason) from e
            logger.warning("Dropping attribute %r: %s", key, e.reason)
            dropped += 1

    return encoded, dropped


# =============================================================================
# TIME & EVENTS
# =============================================================================

def hr_time_to_nanos(time: HrTime) -> int:
    """
    Collapse an HrTime ``(seconds, nanoseconds)`` into nanoseconds.

    Python ints are unbounded, so no precision is lost.

    Raises:
        MalformedTimestamp: If either part is negative or not an integer, or
            the nanoseconds reach a whole second
    """
    try:
        seconds, nanos = time
    except (TypeError, ValueError):
        raise MalformedTimestamp(time) from None

    for part in (seconds, nanos):
        if isinstance(part, bool) or not isinstance(part, numbers.Integral) or part < 0:
            raise MalformedTimestamp(time)

    if nanos >= NANOS_PER_SECOND:
        raise MalformedTimestamp(time)

    return int(seconds) * NANOS_PER_SECOND + int(nanos)


def to_event(event: TimedEvent, error_policy: ErrorPolicy | str | None = None) -> WireEvent:
    """Convert one timed event."""
    attributes, dropped = _encode_attributes(event.attributes, resolve_error_policy(error_policy))
    return {
        "timeUnixNano": hr_time_to_nanos(event.time),
        "name": event.name,
        "attributes": attributes,
        "droppedAttributesCount": (event.dropped_attributes_count or 0) + dropped,
    }


def to_events(
    events: Iterable[TimedEvent],
    error_policy: ErrorPolicy | str | None = None,
) -> list[WireEvent]:
    """Convert timed events, keeping their order."""
    encoded, _ = _encode_events(events, resolve_error_policy(error_policy))
    return encoded


def _encode_events(events: Iterable[TimedEvent], policy: ErrorPolicy) -> tuple[list[WireEvent], int]:
    encoded: list[WireEvent] = []
    dropped = 0

    for event in events:
        try:
            encoded.append(to_event(event, policy))
        except TransformError as e:
            if policy is ErrorPolicy.RAISE:
                raise
            logger.warning("Dropping event %r: %s", event.name, e)
            dropped += 1

    return encoded, dropped


# =============================================================================
# STATUS & KIND
# =============================================================================

def to_status(status: Status) -> WireStatus:
    """
    Convert a span status.

    ``message`` is only present when the status carries a non-empty one.
    """
    wire: WireStatus = {"code": int(status.code)}
    if status.message:
        wire["message"] = status.message
    return wire


def to_kind(kind: SpanKind | int) -> int:
    """
    Map an API span kind to the OTLP enum.

    OTLP reserves 0 for "unspecified", so every kind shifts up by one.
    Unknown kinds map to SPAN_KIND_UNSPECIFIED.
    """
    try:
        name = SpanKind(kind).name
    except ValueError:
        logger.debug("Unknown span kind %r, using SPAN_KIND_UNSPECIFIED", kind)
        return int(WireSpanKind.SPAN_KIND_UNSPECIFIED)
    return int(WireSpanKind[f"SPAN_KIND_{name}"])


# =============================================================================
# LINKS
# =============================================================================

def to_link(
    link: Link,
    id_encoding: IdEncoding | str | None = None,
    error_policy: ErrorPolicy | str | None = None,
) -> WireLink:
    """Convert one span link, encoding its ids like the owning span's."""
    encoding = resolve_id_encoding(id_encoding)
    attributes, dropped = _encode_attributes(link.attributes, resolve_error_policy(error_policy))

    wire: WireLink = {
        "traceId": encode_trace_id(link.trace_id, encoding),
        "spanId": encode_span_id(link.span_id, encoding),
        "attributes": attributes,
        "droppedAttributesCount": (link.dropped_attributes_count or 0) + dropped,
    }
    if link.trace_state:
        wire["traceState"] = link.trace_state
    return wire


def to_links(
    links: Iterable[Link],
    id_encoding: IdEncoding | str | None = None,
    error_policy: ErrorPolicy | str | None = None,
) -> list[WireLink]:
    """Convert span links, keeping their order."""
    encoded, _ = _encode_links(
        links, resolve_id_encoding(id_encoding), resolve_error_policy(error_policy)
    )
    return encoded


def _encode_links(
    links: Iterable[Link],
    encoding: IdEncoding,
    policy: ErrorPolicy,
) -> tuple[list[WireLink], int]:
    encoded: list[WireLink] = []
    dropped = 0

    for link in links:
        try:
            encoded.append(to_link(link, encoding, policy))
        except (MalformedId, UnsupportedAttributeType) as e:
            if policy is ErrorPolicy.RAISE:
                raise
            logger.warning("Dropping link to span %r: %s", link.span_id, e)
            dropped += 1

    return encoded, dropped


# =============================================================================
# SPAN
# =============================================================================

def to_span(
    span: ReadableSpan,
    id_encoding: IdEncoding | str | None = None,
    error_policy: ErrorPolicy | str | None = None,
) -> WireSpan:
    """
    Convert a completed span to its OTLP form.

    Args:
        span: The span to convert
        id_encoding: "hex" or "base64"; applied to every id in the span,
            its parent and its links (default: configured encoding)
        error_policy: "raise" or "drop" (default: configured policy)

    Returns:
        The wire span. Root spans have no ``parentSpanId`` key.

    Raises:
        MalformedId: If the span, parent or (under RAISE) a link id has
            the wrong width
        MalformedTimestamp: If start/end or (under RAISE) an event time is
            negative
        UnsupportedAttributeType: Under RAISE, for an unencodable attribute
    """
    encoding = resolve_id_encoding(id_encoding)
    policy = resolve_error_policy(error_policy)

    attributes, dropped_attributes = _encode_attributes(span.attributes, policy)
    events, dropped_events = _encode_events(span.events, policy)
    links, dropped_links = _encode_links(span.links, encoding, policy)

    wire: WireSpan = {
        "traceId": encode_trace_id(span.trace_id, encoding),
        "spanId": encode_span_id(span.span_id, encoding),
        "name": span.name,
        "kind": to_kind(span.kind),
        "startTimeUnixNano": hr_time_to_nanos(span.start_time),
        "endTimeUnixNano": hr_time_to_nanos(span.end_time),
        "attributes": attributes,
        "droppedAttributesCount": span.dropped_attributes_count + dropped_attributes,
        "events": events,
        "droppedEventsCount": span.dropped_events_count + dropped_events,
        "links": links,
        "droppedLinksCount": span.dropped_links_count + dropped_links,
        "status": to_status(span.status),
    }

    # Root spans omit the field rather than sending an all-zero id
    if not is_unset_span_id(span.parent_span_id):
        wire["parentSpanId"] = encode_span_id(span.parent_span_id, encoding)

    if span.trace_state:
        wire["traceState"] = span.trace_state

    return wire


# =============================================================================
# RESOURCE & SCOPE
# =============================================================================

def to_resource(resource: Resource, error_policy: ErrorPolicy | str | None = None) -> WireResource:
    """Convert a resource; resources have no id, only attributes."""
    attributes, dropped = _encode_attributes(resource.attributes, resolve_error_policy(error_policy))
    return {
        "attributes": attributes,
        "droppedAttributesCount": resource.dropped_attributes_count + dropped,
    }


def to_scope(scope: InstrumentationScope) -> WireScope:
    """Convert an instrumentation scope; ``version`` only when set."""
    wire: WireScope = {"name": scope.name}
    if scope.version:
        wire["version"] = scope.version
    return wire


# =============================================================================
# EXPORT REQUEST
# =============================================================================

def to_scope_spans(
    scope: InstrumentationScope,
    spans: Iterable[ReadableSpan],
    id_encoding: IdEncoding | str | None = None,
    error_policy: ErrorPolicy | str | None = None,
) -> ScopeSpans:
    """Convert the spans of one scope into a scopeSpans entry."""
    encoding = resolve_id_encoding(id_encoding)
    policy = resolve_error_policy(error_policy)
    return {
        "scope": to_scope(scope),
        "spans": [to_span(span, encoding, policy) for span in spans],
    }


def to_export_request(
    spans: Iterable[ReadableSpan],
    id_encoding: IdEncoding | str | None = None,
    error_policy: ErrorPolicy | str | None = None,
) -> ExportTraceServiceRequest:
    """
    Build one export request holding every resource/scope group.

    !!! example
        ```python
        request = to_export_request(finished_spans, id_encoding="hex")
        payload = json.dumps(request)
        ```
    """
    encoding = resolve_id_encoding(id_encoding)
    policy = resolve_error_policy(error_policy)
    grouped = group_spans_by_resource_and_scope(spans)

    resource_spans: list[ResourceSpans] = []
    for resource, scopes in grouped.items():
        resource_spans.append({
            "resource": to_resource(resource, policy),
            "scopeSpans": [
                to_scope_spans(scope, scope_spans, encoding, policy)
                for scope, scope_spans in scopes.items()
            ],
        })

    logger.debug(
        "Built export request with %d resource groups (id encoding: %s)",
        len(resource_spans),
        encoding.value,
    )
    return {"resourceSpans": resource_spans}


def iter_export_requests(
    spans: Iterable[ReadableSpan],
    id_encoding: IdEncoding | str | None = None,
    error_policy: ErrorPolicy | str | None = None,
) -> Iterator[ExportTraceServiceRequest]:
    """
    Yield one export request per resource/scope pair, in grouping order.

    Grouping happens up front; each request is encoded lazily.
    """
    encoding = resolve_id_encoding(id_encoding)
    policy = resolve_error_policy(error_policy)

    for group in iter_span_groups(group_spans_by_resource_and_scope(spans)):
        yield {
            "resourceSpans": [{
                "resource": to_resource(group.resource, policy),
                "scopeSpans": [to_scope_spans(group.scope, group.spans, encoding, policy)],
            }],
        }
