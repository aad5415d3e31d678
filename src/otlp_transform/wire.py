"""
otlp_transform.wire
~~~~~~~~~~~~~~~~~~~

Shapes of the OTLP trace export tree produced by the encoders.

The encoders return plain ``dict``/``list`` values so any JSON or protobuf
serializer can consume them directly; these TypedDicts document and type
check the keys. Field names follow the OTLP/JSON mapping (lowerCamelCase).

OTLP structure:
    {
        "resourceSpans": [{
            "resource": {"attributes": [...], "droppedAttributesCount": 0},
            "scopeSpans": [{
                "scope": {"name": "...", "version": "..."},
                "spans": [...]
            }]
        }]
    }
"""

from __future__ import annotations

from enum import IntEnum
from typing import TypedDict, Union

__all__ = [
    "WireSpanKind",
    "ArrayValue",
    "KeyValueList",
    "AnyValue",
    "KeyValue",
    "WireEvent",
    "WireLink",
    "WireStatus",
    "WireSpan",
    "WireResource",
    "WireScope",
    "ScopeSpans",
    "ResourceSpans",
    "ExportTraceServiceRequest",
]

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1


class WireSpanKind(IntEnum):
    """OTLP span kind enum (0 is reserved for "unspecified")."""
    SPAN_KIND_UNSPECIFIED = 0
    SPAN_KIND_INTERNAL = 1
    SPAN_KIND_SERVER = 2
    SPAN_KIND_CLIENT = 3
    SPAN_KIND_PRODUCER = 4
    SPAN_KIND_CONSUMER = 5


class ArrayValue(TypedDict):
    values: list[AnyValue]


class KeyValueList(TypedDict):
    values: list[KeyValue]


class _StringValue(TypedDict):
    stringValue: str


class _BoolValue(TypedDict):
    boolValue: bool


class _IntValue(TypedDict):
    intValue: int


class _DoubleValue(TypedDict):
    doubleValue: float


class _ArrayValue(TypedDict):
    arrayValue: ArrayValue


class _KvlistValue(TypedDict):
    kvlistValue: KeyValueList


# Exactly one key is ever present
AnyValue = Union[_StringValue, _BoolValue, _IntValue, _DoubleValue, _ArrayValue, _KvlistValue]


class KeyValue(TypedDict):
    key: str
    value: AnyValue


class WireEvent(TypedDict):
    timeUnixNano: int
    name: str
    attributes: list[KeyValue]
    droppedAttributesCount: int


class _WireLinkBase(TypedDict):
    traceId: str
    spanId: str
    attributes: list[KeyValue]
    droppedAttributesCount: int


class WireLink(_WireLinkBase, total=False):
    traceState: str


class _WireStatusBase(TypedDict):
    code: int


class WireStatus(_WireStatusBase, total=False):
    message: str


class _WireSpanBase(TypedDict):
    traceId: str
    spanId: str
    name: str
    kind: int
    startTimeUnixNano: int
    endTimeUnixNano: int
    attributes: list[KeyValue]
    droppedAttributesCount: int
    events: list[WireEvent]
    droppedEventsCount: int
    links: list[WireLink]
    droppedLinksCount: int
    status: WireStatus


class WireSpan(_WireSpanBase, total=False):
    parentSpanId: str
    traceState: str


class WireResource(TypedDict):
    attributes: list[KeyValue]
    droppedAttributesCount: int


class _WireScopeBase(TypedDict):
    name: str


class WireScope(_WireScopeBase, total=False):
    version: str


class ScopeSpans(TypedDict):
    scope: WireScope
    spans: list[WireSpan]


class ResourceSpans(TypedDict):
    resource: WireResource
    scopeSpans: list[ScopeSpans]


class ExportTraceServiceRequest(TypedDict):
    resourceSpans: list[ResourceSpans]
