"""
Grouping of spans into export batches.

An OTLP export request nests spans under their resource, then under their
instrumentation scope. This module builds that two-level grouping from a
flat span list without encoding anything.

Ordering:
    - Resources appear in the order each distinct resource is first seen.
    - Within a resource, scopes appear in first-seen order.
    - Within a scope, spans keep their relative input order.

Equality:
    Resources and scopes are matched by value (see ``Resource.__eq__``),
    never by reference. The first-seen instance becomes the dict key.

Complexity:
    One pass over the spans; each lookup hashes the resource's frozen
    attributes, so the cost is linear in the total attribute count.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import NamedTuple

from .models import InstrumentationScope, ReadableSpan, Resource

logger = logging.getLogger("otlp_transform.grouping")

__all__ = [
    "GroupedSpans",
    "SpanGroup",
    "group_spans_by_resource_and_scope",
    "iter_span_groups",
]

GroupedSpans = dict[Resource, dict[InstrumentationScope, list[ReadableSpan]]]


class SpanGroup(NamedTuple):
    """Spans sharing one (resource, scope) pair."""
    resource: Resource
    scope: InstrumentationScope
    spans: list[ReadableSpan]


def group_spans_by_resource_and_scope(spans: Iterable[ReadableSpan]) -> GroupedSpans:
    """
    Partition spans by resource, then by instrumentation scope.

    Args:
        spans: Completed spans in export order

    Returns:
        Ordered mapping ``resource -> scope -> [spans]``

    !!! example
        ```python
        grouped = group_spans_by_resource_and_scope([s1, s2, s3])
        for resource, scopes in grouped.items():
            for scope, scope_spans in scopes.items():
                ...
        ```
    """
    grouped: GroupedSpans = {}
    count = 0

    for span in spans:
        scopes = grouped.get(span.resource)
        if scopes is None:
            scopes = grouped[span.resource] = {}

        scope_spans = scopes.get(span.instrumentation_scope)
        if scope_spans is None:
            scope_spans = scopes[span.instrumentation_scope] = []

        scope_spans.append(span)
        count += 1

    logger.debug(
        "Grouped %d spans into %d resource groups (%d scope groups)",
        count,
        len(grouped),
        sum(len(scopes) for scopes in grouped.values()),
    )
    return grouped


def iter_span_groups(grouped: GroupedSpans) -> Iterator[SpanGroup]:
    """Flatten a grouping into (resource, scope, spans) triples, in order."""
    for resource, scopes in grouped.items():
        for scope, scope_spans in scopes.items():
            yield SpanGroup(resource, scope, scope_spans)
