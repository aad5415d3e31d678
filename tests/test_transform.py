"""
Unit tests for event, status, span, link and resource encoding.
"""

from __future__ import annotations

import unittest

from otlp_transform import (
    ErrorPolicy,
    IdEncoding,
    InstrumentationScope,
    Link,
    MalformedId,
    MalformedTimestamp,
    Resource,
    SpanKind,
    Status,
    StatusCode,
    TimedEvent,
    UnsupportedAttributeType,
    configure,
    hr_time_to_nanos,
    reset_config,
    to_event,
    to_events,
    to_kind,
    to_link,
    to_links,
    to_resource,
    to_scope,
    to_span,
    to_status,
)

from trace_helper import (
    PARENT_ID_B64,
    PARENT_ID_HEX,
    SPAN_ID_HEX,
    TRACE_ID_B64,
    TRACE_ID_HEX,
    expected_span,
    make_span,
)


class TestHrTime(unittest.TestCase):
    """Split timestamps collapse to integer nanoseconds."""

    def test_basic(self) -> None:
        self.assertEqual(hr_time_to_nanos((123, 123)), 123000000123)

    def test_list_form(self) -> None:
        self.assertEqual(hr_time_to_nanos([123, 123]), 123000000123)

    def test_zero(self) -> None:
        self.assertEqual(hr_time_to_nanos((0, 0)), 0)

    def test_no_precision_loss(self) -> None:
        """Values past 2**53 stay exact."""
        self.assertEqual(hr_time_to_nanos((1574120165, 429803070)), 1574120165429803070)

    def test_negative_seconds(self) -> None:
        with self.assertRaises(MalformedTimestamp):
            hr_time_to_nanos((-1, 0))

    def test_negative_nanos(self) -> None:
        with self.assertRaises(MalformedTimestamp):
            hr_time_to_nanos((1, -5))

    def test_non_integer_component(self) -> None:
        with self.assertRaises(MalformedTimestamp):
            hr_time_to_nanos((1.5, 0))

    def test_largest_nanos(self) -> None:
        self.assertEqual(hr_time_to_nanos((1, 999_999_999)), 1_999_999_999)

    def test_nanos_of_a_whole_second(self) -> None:
        with self.assertRaises(MalformedTimestamp):
            hr_time_to_nanos((1, 1_000_000_000))
        with self.assertRaises(MalformedTimestamp):
            hr_time_to_nanos((1, 2_000_000_000))

    def test_wrong_shape(self) -> None:
        with self.assertRaises(MalformedTimestamp):
            hr_time_to_nanos((1, 2, 3))
        with self.assertRaises(MalformedTimestamp):
            hr_time_to_nanos(None)


class TestEvents(unittest.TestCase):
    """Timed events encode with nanosecond timestamps."""

    def test_events(self) -> None:
        events = [
            TimedEvent("foo", (123, 123), {"a": "b"}),
            TimedEvent("foo2", (321, 321), {"c": "d"}),
        ]
        self.assertEqual(
            to_events(events),
            [
                {
                    "timeUnixNano": 123000000123,
                    "name": "foo",
                    "attributes": [{"key": "a", "value": {"stringValue": "b"}}],
                    "droppedAttributesCount": 0,
                },
                {
                    "timeUnixNano": 321000000321,
                    "name": "foo2",
                    "attributes": [{"key": "c", "value": {"stringValue": "d"}}],
                    "droppedAttributesCount": 0,
                },
            ],
        )

    def test_dropped_count_is_carried(self) -> None:
        event = TimedEvent("foo", (1, 0), dropped_attributes_count=3)
        self.assertEqual(to_event(event)["droppedAttributesCount"], 3)

    def test_empty_list(self) -> None:
        self.assertEqual(to_events([]), [])

    def test_malformed_time_raises(self) -> None:
        with self.assertRaises(MalformedTimestamp):
            to_events([TimedEvent("bad", (-1, 0))])

    def test_drop_policy_counts_attributes(self) -> None:
        event = TimedEvent("foo", (1, 0), {"ok": 1, "bad": None}, dropped_attributes_count=1)
        with self.assertLogs("otlp_transform.transform", level="WARNING"):
            wire = to_event(event, ErrorPolicy.DROP)
        self.assertEqual(wire["attributes"], [{"key": "ok", "value": {"intValue": 1}}])
        self.assertEqual(wire["droppedAttributesCount"], 2)

    def test_drop_policy_skips_malformed_event(self) -> None:
        events = [TimedEvent("bad", (-1, 0)), TimedEvent("good", (2, 0))]
        with self.assertLogs("otlp_transform.transform", level="WARNING"):
            wire = to_events(events, ErrorPolicy.DROP)
        self.assertEqual([e["name"] for e in wire], ["good"])


class TestStatus(unittest.TestCase):
    """Status message appears only when set."""

    def test_message_kept(self) -> None:
        result = to_status(Status(StatusCode.OK, "message"))
        self.assertEqual(result["message"], "message")

    def test_message_omitted(self) -> None:
        self.assertEqual(to_status(Status(StatusCode.ERROR)), {"code": 2})

    def test_empty_message_omitted(self) -> None:
        self.assertNotIn("message", to_status(Status(StatusCode.ERROR, "")))

    def test_codes(self) -> None:
        self.assertEqual(to_status(Status(StatusCode.UNSET))["code"], 0)
        self.assertEqual(to_status(Status(StatusCode.OK))["code"], 1)
        self.assertEqual(to_status(Status(StatusCode.ERROR))["code"], 2)


class TestKind(unittest.TestCase):
    """API kinds shift up by one on the wire."""

    def test_kinds(self) -> None:
        self.assertEqual(to_kind(SpanKind.INTERNAL), 1)
        self.assertEqual(to_kind(SpanKind.SERVER), 2)
        self.assertEqual(to_kind(SpanKind.CLIENT), 3)
        self.assertEqual(to_kind(SpanKind.PRODUCER), 4)
        self.assertEqual(to_kind(SpanKind.CONSUMER), 5)

    def test_unknown_kind(self) -> None:
        self.assertEqual(to_kind(42), 0)


class TestLinks(unittest.TestCase):
    """Links share the span's id encoding."""

    def test_hex_link(self) -> None:
        link = Link(TRACE_ID_HEX, PARENT_ID_HEX, {"component": "document-load"})
        self.assertEqual(
            to_link(link, IdEncoding.HEX),
            {
                "traceId": TRACE_ID_HEX,
                "spanId": PARENT_ID_HEX,
                "attributes": [{"key": "component", "value": {"stringValue": "document-load"}}],
                "droppedAttributesCount": 0,
            },
        )

    def test_base64_link_with_trace_state(self) -> None:
        link = Link(TRACE_ID_HEX, PARENT_ID_HEX, trace_state="vendor=value")
        wire = to_link(link, "base64")
        self.assertEqual(wire["traceId"], TRACE_ID_B64)
        self.assertEqual(wire["spanId"], PARENT_ID_B64)
        self.assertEqual(wire["traceState"], "vendor=value")

    def test_malformed_link_raises(self) -> None:
        with self.assertRaises(MalformedId):
            to_links([Link("abc", PARENT_ID_HEX)], "hex")

    def test_drop_policy_skips_malformed_link(self) -> None:
        links = [Link("abc", PARENT_ID_HEX), Link(TRACE_ID_HEX, PARENT_ID_HEX)]
        with self.assertLogs("otlp_transform.transform", level="WARNING"):
            wire = to_links(links, "hex", "drop")
        self.assertEqual(len(wire), 1)
        self.assertEqual(wire[0]["traceId"], TRACE_ID_HEX)


class TestSpan(unittest.TestCase):
    """Whole-span conversion."""

    def setUp(self) -> None:
        reset_config()

    def tearDown(self) -> None:
        reset_config()

    def test_span_using_hex(self) -> None:
        self.assertEqual(to_span(make_span(), IdEncoding.HEX), expected_span(use_hex=True))

    def test_span_using_base64(self) -> None:
        self.assertEqual(to_span(make_span(), IdEncoding.BASE64), expected_span(use_hex=False))

    def test_bytes_and_hex_ids_agree(self) -> None:
        from_bytes = make_span(
            trace_id=bytes.fromhex(TRACE_ID_HEX),
            span_id=bytes.fromhex(SPAN_ID_HEX),
            parent_span_id=bytes.fromhex(PARENT_ID_HEX),
        )
        self.assertEqual(to_span(from_bytes, "base64"), to_span(make_span(), "base64"))

    def test_uppercase_hex_is_normalised(self) -> None:
        span = make_span(trace_id=TRACE_ID_HEX.upper())
        self.assertEqual(to_span(span, "hex")["traceId"], TRACE_ID_HEX)

    def test_default_encoding_is_hex(self) -> None:
        self.assertEqual(to_span(make_span())["traceId"], TRACE_ID_HEX)

    def test_configured_default_encoding(self) -> None:
        configure(id_encoding="base64")
        self.assertEqual(to_span(make_span())["traceId"], TRACE_ID_B64)

    def test_explicit_encoding_beats_configuration(self) -> None:
        configure(id_encoding="base64")
        self.assertEqual(to_span(make_span(), "hex")["traceId"], TRACE_ID_HEX)

    def test_unknown_encoding(self) -> None:
        with self.assertRaises(ValueError):
            to_span(make_span(), "base32")

    def test_root_span_omits_parent(self) -> None:
        span = make_span(parent_span_id=None)
        self.assertTrue(span.is_root)
        self.assertNotIn("parentSpanId", to_span(span, "hex"))
        self.assertNotIn("parentSpanId", to_span(span, "base64"))

    def test_all_zero_parent_is_root(self) -> None:
        for parent in ("0" * 16, bytes(8)):
            with self.subTest(parent=parent):
                span = make_span(parent_span_id=parent)
                self.assertTrue(span.is_root)
                self.assertNotIn("parentSpanId", to_span(span, "hex"))
                self.assertNotIn("parentSpanId", to_span(span, "base64"))

    def test_zero_and_missing_parent_encode_alike(self) -> None:
        self.assertEqual(
            to_span(make_span(parent_span_id="0" * 16)),
            to_span(make_span(parent_span_id=None)),
        )

    def test_trace_state(self) -> None:
        span = make_span(trace_state="congo=t61rcWkgMzE")
        self.assertEqual(to_span(span)["traceState"], "congo=t61rcWkgMzE")
        self.assertNotIn("traceState", to_span(make_span()))

    def test_status_message(self) -> None:
        span = make_span(status=Status(StatusCode.ERROR, "boom"))
        self.assertEqual(to_span(span)["status"], {"code": 2, "message": "boom"})

    def test_kind(self) -> None:
        self.assertEqual(to_span(make_span(kind=SpanKind.CLIENT))["kind"], 3)

    def test_dropped_counts_are_carried(self) -> None:
        span = make_span(
            dropped_attributes_count=1,
            dropped_events_count=2,
            dropped_links_count=3,
        )
        wire = to_span(span)
        self.assertEqual(wire["droppedAttributesCount"], 1)
        self.assertEqual(wire["droppedEventsCount"], 2)
        self.assertEqual(wire["droppedLinksCount"], 3)

    def test_deterministic(self) -> None:
        span = make_span()
        self.assertEqual(to_span(span, "base64"), to_span(span, "base64"))
        self.assertEqual(list(to_span(span)), list(to_span(span)))

    def test_short_trace_id(self) -> None:
        with self.assertRaises(MalformedId) as ctx:
            to_span(make_span(trace_id=b"\x01" * 8))
        self.assertEqual(ctx.exception.expected_length, 16)

    def test_long_span_id(self) -> None:
        with self.assertRaises(MalformedId) as ctx:
            to_span(make_span(span_id=SPAN_ID_HEX + "00"))
        self.assertEqual(ctx.exception.expected_length, 8)

    def test_invalid_hex(self) -> None:
        with self.assertRaises(MalformedId):
            to_span(make_span(span_id="zzzzzzzzzzzzzzzz"))

    def test_malformed_parent_id(self) -> None:
        with self.assertRaises(MalformedId):
            to_span(make_span(parent_span_id="1234"))

    def test_malformed_start_time(self) -> None:
        with self.assertRaises(MalformedTimestamp):
            to_span(make_span(start_time=(-1, 0)))

    def test_malformed_start_time_raises_under_drop(self) -> None:
        with self.assertRaises(MalformedTimestamp):
            to_span(make_span(start_time=(-1, 0)), error_policy="drop")

    def test_unsupported_attribute_raises(self) -> None:
        span = make_span(attributes={"component": "document-load", "bad": object()})
        with self.assertRaises(UnsupportedAttributeType) as ctx:
            to_span(span)
        self.assertEqual(ctx.exception.key, "bad")

    def test_drop_policy_counts_everything(self) -> None:
        span = make_span(
            attributes={"component": "document-load", "bad": None},
            events=[TimedEvent("bad", (-1, 0)), TimedEvent("good", (1, 0))],
            links=[Link("00", PARENT_ID_HEX), Link(TRACE_ID_HEX, PARENT_ID_HEX)],
            dropped_attributes_count=1,
        )
        with self.assertLogs("otlp_transform.transform", level="WARNING") as logs:
            wire = to_span(span, "hex", ErrorPolicy.DROP)

        self.assertEqual(len(logs.records), 3)
        self.assertEqual(
            wire["attributes"],
            [{"key": "component", "value": {"stringValue": "document-load"}}],
        )
        self.assertEqual(wire["droppedAttributesCount"], 2)
        self.assertEqual([e["name"] for e in wire["events"]], ["good"])
        self.assertEqual(wire["droppedEventsCount"], 1)
        self.assertEqual(len(wire["links"]), 1)
        self.assertEqual(wire["droppedLinksCount"], 1)

    def test_configured_drop_policy(self) -> None:
        configure(error_policy="drop")
        span = make_span(attributes={"bad": None})
        with self.assertLogs("otlp_transform.transform", level="WARNING"):
            wire = to_span(span)
        self.assertEqual(wire["attributes"], [])
        self.assertEqual(wire["droppedAttributesCount"], 1)


class TestResource(unittest.TestCase):
    """Resources encode as attributes plus a dropped count."""

    def test_resource(self) -> None:
        resource = Resource({"service": "ui", "version": 1.0, "success": True})
        self.assertEqual(
            to_resource(resource),
            {
                "attributes": [
                    {"key": "service", "value": {"stringValue": "ui"}},
                    {"key": "version", "value": {"intValue": 1}},
                    {"key": "success", "value": {"boolValue": True}},
                ],
                "droppedAttributesCount": 0,
            },
        )

    def test_empty_resource(self) -> None:
        self.assertEqual(to_resource(Resource()), {"attributes": [], "droppedAttributesCount": 0})

    def test_dropped_count_is_carried(self) -> None:
        resource = Resource({"service": "ui"}, dropped_attributes_count=4)
        self.assertEqual(to_resource(resource)["droppedAttributesCount"], 4)

    def test_drop_policy(self) -> None:
        resource = Resource({"service": "ui", "pid": None})
        with self.assertLogs("otlp_transform.transform", level="WARNING"):
            wire = to_resource(resource, "drop")
        self.assertEqual(wire["droppedAttributesCount"], 1)
        self.assertEqual(len(wire["attributes"]), 1)


class TestScope(unittest.TestCase):
    """Scopes carry a name and, when set, a version."""

    def test_with_version(self) -> None:
        self.assertEqual(
            to_scope(InstrumentationScope("default", "0.0.1")),
            {"name": "default", "version": "0.0.1"},
        )

    def test_without_version(self) -> None:
        self.assertEqual(to_scope(InstrumentationScope("default")), {"name": "default"})


if __name__ == "__main__":
    unittest.main()
