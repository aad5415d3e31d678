"""
Span dump documents for file-based conversion.

A span batch is a JSON document listing finished spans in the SDK's own
shape (split HrTime timestamps, attribute mappings, hex ids), as written
by a debugging exporter or a test fixture. These models validate such a
document and turn it into :class:`~otlp_transform.models.ReadableSpan`
objects for the encoders.

Example document::

    {
      "spans": [{
        "traceId": "1f1008dc8e270e85c40a0d7c3939b278",
        "spanId": "5e107261f64fa53e",
        "name": "GET /orders",
        "kind": "SERVER",
        "startTime": [1574120165, 429803070],
        "endTime": [1574120165, 438688070],
        "attributes": {"http.method": "GET"},
        "resource": {"attributes": {"service.name": "ui"}},
        "scope": {"name": "http", "version": "1.0.0"}
      }]
    }
"""
from typing import Annotated, Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, Field, NonNegativeInt, field_validator

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

__all__ = [
    "HrTimeDocument",
    "StatusDocument",
    "EventDocument",
    "LinkDocument",
    "ResourceDocument",
    "ScopeDocument",
    "SpanDocument",
    "SpanBatch",
]

HrTimeDocument = Tuple[NonNegativeInt, Annotated[int, Field(ge=0, le=999_999_999)]]


def _enum_by_name(enum_cls, value: Any) -> Any:
    if isinstance(value, str):
        try:
            return enum_cls[value.strip().upper()]
        except KeyError:
            raise ValueError(f"unknown {enum_cls.__name__} {value!r}") from None
    return value


class StatusDocument(BaseModel):
    code: StatusCode = StatusCode.UNSET
    message: Optional[str] = None

    @field_validator("code", mode="before")
    @classmethod
    def _code_by_name(cls, value: Any) -> Any:
        return _enum_by_name(StatusCode, value)

    def to_status(self) -> Status:
        return Status(self.code, self.message)


class EventDocument(BaseModel):
    name: str
    time: HrTimeDocument
    attributes: Dict[str, Any] = Field(default_factory=dict)
    droppedAttributesCount: NonNegativeInt = 0

    def to_event(self) -> TimedEvent:
        return TimedEvent(self.name, self.time, self.attributes, self.droppedAttributesCount)


class LinkDocument(BaseModel):
    traceId: str
    spanId: str
    traceState: Optional[str] = None
    attributes: Dict[str, Any] = Field(default_factory=dict)
    droppedAttributesCount: NonNegativeInt = 0

    def to_link(self) -> Link:
        return Link(
            self.traceId,
            self.spanId,
            self.attributes,
            self.traceState,
            self.droppedAttributesCount,
        )


class ResourceDocument(BaseModel):
    attributes: Dict[str, Any] = Field(default_factory=dict)
    droppedAttributesCount: NonNegativeInt = 0

    def to_resource(self) -> Resource:
        return Resource(self.attributes, self.droppedAttributesCount)


class ScopeDocument(BaseModel):
    name: str = ""
    version: Optional[str] = None

    def to_scope(self) -> InstrumentationScope:
        return InstrumentationScope(self.name, self.version)


class SpanDocument(BaseModel):
    traceId: str
    spanId: str
    parentSpanId: Optional[str] = None
    traceState: Optional[str] = None
    name: str
    kind: SpanKind = SpanKind.INTERNAL
    startTime: HrTimeDocument
    endTime: HrTimeDocument
    status: StatusDocument = Field(default_factory=StatusDocument)
    attributes: Dict[str, Any] = Field(default_factory=dict)
    events: List[EventDocument] = Field(default_factory=list)
    links: List[LinkDocument] = Field(default_factory=list)
    resource: ResourceDocument = Field(default_factory=ResourceDocument)
    scope: ScopeDocument = Field(default_factory=ScopeDocument)
    droppedAttributesCount: NonNegativeInt = 0
    droppedEventsCount: NonNegativeInt = 0
    droppedLinksCount: NonNegativeInt = 0

    @field_validator("kind", mode="before")
    @classmethod
    def _kind_by_name(cls, value: Any) -> Any:
        return _enum_by_name(SpanKind, value)

    def to_readable_span(self, extra_resource: Optional[Resource] = None) -> ReadableSpan:
        resource = self.resource.to_resource()
        if extra_resource is not None:
            resource = resource.merge(extra_resource)

        return ReadableSpan(
            self.name,
            self.traceId,
            self.spanId,
            self.startTime,
            self.endTime,
            parent_span_id=self.parentSpanId,
            kind=self.kind,
            status=self.status.to_status(),
            attributes=self.attributes,
            events=[event.to_event() for event in self.events],
            links=[link.to_link() for link in self.links],
            resource=resource,
            instrumentation_scope=self.scope.to_scope(),
            trace_state=self.traceState,
            dropped_attributes_count=self.droppedAttributesCount,
            dropped_events_count=self.droppedEventsCount,
            dropped_links_count=self.droppedLinksCount,
        )


class SpanBatch(BaseModel):
    spans: List[SpanDocument] = Field(default_factory=list)

    def to_readable_spans(
        self,
        resource_attributes: Optional[Dict[str, Union[str, bool, int, float]]] = None,
    ) -> List[ReadableSpan]:
        """
        Build ReadableSpans, merging ``resource_attributes`` into every
        span's resource (the extra attributes win on collisions).
        """
        extra = Resource(resource_attributes) if resource_attributes else None
        return [span.to_readable_span(extra) for span in self.spans]
