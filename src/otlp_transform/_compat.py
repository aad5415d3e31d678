"""
Compatibility layer for optional dependencies.

This module provides graceful fallbacks when optional dependencies are
missing. Modules that render JSON should import from here rather than
importing orjson directly.
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "json_dumps",
    "json_dumps_bytes",
    "json_loads",
    "JSON_ENCODER",
]

# =============================================================================
# JSON Serialization
# =============================================================================

try:
    import orjson

    def json_dumps(obj: Any, indent: bool = False) -> str:
        """Serialize to JSON string (fast path with orjson)."""
        return json_dumps_bytes(obj, indent).decode('utf-8')

    def json_dumps_bytes(obj: Any, indent: bool = False) -> bytes:
        """Serialize to JSON bytes (fast path with orjson)."""
        option = orjson.OPT_INDENT_2 if indent else 0
        return orjson.dumps(obj, option=option)

    def json_loads(data: str | bytes) -> Any:
        """Deserialize from JSON (fast path with orjson)."""
        return orjson.loads(data)

    JSON_ENCODER = "orjson"

except ImportError:
    import json

    def json_dumps(obj: Any, indent: bool = False) -> str:
        """Serialize to JSON string (stdlib fallback)."""
        if indent:
            return json.dumps(obj, indent=2)
        return json.dumps(obj, separators=(',', ':'))

    def json_dumps_bytes(obj: Any, indent: bool = False) -> bytes:
        """Serialize to JSON bytes (stdlib fallback)."""
        return json_dumps(obj, indent).encode('utf-8')

    def json_loads(data: str | bytes) -> Any:
        """Deserialize from JSON (stdlib fallback)."""
        return json.loads(data)

    JSON_ENCODER = "json"
