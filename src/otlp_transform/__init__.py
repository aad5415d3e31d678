"""
otlp_transform
~~~~~~~~~~~~~~

Pure conversion of finished spans into OTLP trace export request trees.
"""

from ._compat import JSON_ENCODER
from .config import ErrorPolicy, IdEncoding, TransformConfig, configure, get_config, reset_config
from .exceptions import MalformedId, MalformedTimestamp, TransformError, UnsupportedAttributeType
from .grouping import SpanGroup, group_spans_by_resource_and_scope, iter_span_groups
from .ids import encode_span_id, encode_trace_id
from .models import (
    InstrumentationScope,
    Link,
    ReadableSpan,
    Resource,
    SpanKind,
    Status,
    StatusCode,
    TimedEvent,
)
from .transform import (
    hr_time_to_nanos,
    iter_export_requests,
    to_any_value,
    to_attributes,
    to_event,
    to_events,
    to_export_request,
    to_kind,
    to_link,
    to_links,
    to_resource,
    to_scope,
    to_scope_spans,
    to_span,
    to_status,
)

__version__ = "1.0.0"
__all__ = [
    # Configuration
    "configure", "get_config", "reset_config", "TransformConfig",
    "IdEncoding", "ErrorPolicy",

    # Errors
    "TransformError", "UnsupportedAttributeType", "MalformedTimestamp", "MalformedId",

    # Models
    "ReadableSpan", "SpanKind", "StatusCode", "Status", "TimedEvent", "Link",
    "Resource", "InstrumentationScope",

    # Encoders
    "to_any_value", "to_attributes", "hr_time_to_nanos", "to_event", "to_events",
    "to_status", "to_kind", "to_link", "to_links", "to_span", "to_resource",
    "to_scope", "to_scope_spans", "encode_trace_id", "encode_span_id",

    # Grouping & requests
    "group_spans_by_resource_and_scope", "iter_span_groups", "SpanGroup",
    "to_export_request", "iter_export_requests",

    # Diagnostics
    "JSON_ENCODER",
]
