"""
Trace and span id encoding.

Ids are fixed-width binary values: 16 bytes for a trace id, 8 bytes for a
span id. Callers may hold them as raw bytes or as hex text (the form used
in W3C traceparent headers); both normalise to bytes before the wire
encoding is applied.

Wire encodings:
    hex:    lowercase hexadecimal (32 / 16 characters)
    base64: standard base64 of the raw bytes (24 / 12 characters)
"""

from __future__ import annotations

import base64
import binascii

from .config import IdEncoding, resolve_id_encoding
from .exceptions import MalformedId
from .types import SpanId, TraceId

__all__ = [
    "TRACE_ID_LENGTH",
    "SPAN_ID_LENGTH",
    "id_to_bytes",
    "encode_id",
    "encode_trace_id",
    "encode_span_id",
    "is_unset_span_id",
]

TRACE_ID_LENGTH = 16
SPAN_ID_LENGTH = 8
ZERO_SPAN_ID = bytes(SPAN_ID_LENGTH)


def id_to_bytes(value: bytes | str, length: int, kind: str = "id") -> bytes:
    """
    Normalise an id to raw bytes of exactly ``length`` bytes.

    Raises:
        MalformedId: If the value has the wrong width or is not valid hex
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        raw = bytes(value)
    elif isinstance(value, str):
        if len(value) != length * 2:
            raise MalformedId(value, length, kind)
        try:
            raw = bytes.fromhex(value)
        except ValueError:
            raise MalformedId(value, length, kind) from None
    else:
        raise MalformedId(value, length, kind)

    if len(raw) != length:
        raise MalformedId(value, length, kind)
    return raw


def encode_id(
    value: bytes | str,
    length: int,
    id_encoding: IdEncoding | str | None = None,
    kind: str = "id",
) -> str:
    """Encode an id of ``length`` bytes with the selected wire encoding."""
    raw = id_to_bytes(value, length, kind)
    if resolve_id_encoding(id_encoding) is IdEncoding.HEX:
        return binascii.hexlify(raw).decode("ascii")
    return base64.b64encode(raw).decode("ascii")


def encode_trace_id(value: TraceId, id_encoding: IdEncoding | str | None = None) -> str:
    """Encode a 16-byte trace id."""
    return encode_id(value, TRACE_ID_LENGTH, id_encoding, kind="trace id")


def encode_span_id(value: SpanId, id_encoding: IdEncoding | str | None = None) -> str:
    """Encode an 8-byte span id."""
    return encode_id(value, SPAN_ID_LENGTH, id_encoding, kind="span id")


def is_unset_span_id(value: SpanId | None) -> bool:
    """
    True when a span id means "no span": missing, empty or all zeros.

    Malformed ids are not unset; encoding them raises MalformedId.
    """
    if not value:
        return True
    try:
        return id_to_bytes(value, SPAN_ID_LENGTH, "span id") == ZERO_SPAN_ID
    except MalformedId:
        return False
