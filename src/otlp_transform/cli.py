"""
otlp_transform.cli
~~~~~~~~~~~~~~~~~~

Command-line interface for converting span dumps to OTLP export requests.

Examples:
    !!! example "Basic usage"
        ```bash
        otlp-transform spans.json
        ```

    !!! example "Base64 ids, one request per resource/scope pair"
        ```bash
        otlp-transform --id-encoding base64 --per-scope spans.json
        ```

    !!! example "Read from stdin, drop unsupported attributes"
        ```bash
        cat spans.json | otlp-transform --error-policy drop -
        ```

Execution Flow:
    1. Parse CLI arguments.
    2. Configure otlp_transform (id encoding, error policy).
    3. Load and validate the span batch document.
    4. Group and encode the spans.
    5. Write the export request(s) as JSON to stdout.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, TextIO

from pydantic import ValidationError

from ._compat import json_dumps, json_loads
from .config import ErrorPolicy, IdEncoding, configure
from .exceptions import TransformError
from .schema import SpanBatch
from .transform import iter_export_requests, to_export_request

__all__ = [
    "main",
    "setup_logging",
    "parse_args",
    "parse_resource_attributes",
    "convert",
]

logger = logging.getLogger("otlp_transform")


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for otlp_transform."""
    level = logging.DEBUG if verbose else logging.WARNING

    pkg_logger = logging.getLogger("otlp_transform")
    pkg_logger.setLevel(level)
    pkg_logger.propagate = False

    # Repeated calls only adjust the level of the existing handler
    if not pkg_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        formatter = logging.Formatter(
            '[otlp-transform] %(levelname)s %(name)s: %(message)s'
        )
        handler.setFormatter(formatter)
        pkg_logger.addHandler(handler)

    for handler in pkg_logger.handlers:
        handler.setLevel(level)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog='otlp-transform',
        description='Convert a span dump into OTLP trace export request JSON',
        epilog='''
Examples:
    otlp-transform spans.json
    otlp-transform --id-encoding base64 --per-scope spans.json
    otlp-transform --resource-attr deployment.environment=staging spans.json
        ''',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        '--id-encoding',
        choices=[e.value for e in IdEncoding],
        default=None,
        help='Trace/span id encoding (default: $OTLP_TRANSFORM_ID_ENCODING or hex)',
    )
    parser.add_argument(
        '--error-policy',
        choices=[e.value for e in ErrorPolicy],
        default=None,
        help='Raise on unencodable attributes, or drop and count them '
             '(default: $OTLP_TRANSFORM_ERROR_POLICY or raise)',
    )
    parser.add_argument(
        '--per-scope',
        action='store_true',
        help='Emit one request per resource/scope pair (JSON lines)',
    )
    parser.add_argument(
        '--resource-attr',
        action='append',
        default=[],
        metavar='KEY=VALUE',
        help='Extra resource attribute merged into every span (repeatable)',
    )
    parser.add_argument(
        '--indent',
        action='store_true',
        help='Pretty-print the output (ignored with --per-scope)',
    )

    # Logging
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose logging',
    )
    parser.add_argument(
        '-q', '--quiet',
        action='store_true',
        help='Disable otlp-transform logging',
    )

    parser.add_argument(
        'input',
        help="Path to the span batch JSON file, or '-' for stdin",
    )

    return parser.parse_args(argv)


def parse_resource_attributes(pairs: list[str]) -> dict[str, str]:
    """
    Parse ``KEY=VALUE`` pairs.

    Raises:
        ValueError: If a pair has no '=' or an empty key
    """
    attributes: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"resource attribute must be KEY=VALUE, got {pair!r}")
        attributes[key.strip()] = value.strip()
    return attributes


def convert(
    document: Any,
    *,
    id_encoding: str | None = None,
    error_policy: str | None = None,
    per_scope: bool = False,
    resource_attributes: dict[str, str] | None = None,
) -> list[dict[str, Any]]:
    """
    Convert a parsed span batch document into export requests.

    Returns:
        A single-element list, or one request per resource/scope pair
        when ``per_scope`` is set

    Raises:
        pydantic.ValidationError: If the document does not match SpanBatch
        TransformError: If a span cannot be encoded
    """
    batch = SpanBatch.model_validate(document)
    spans = batch.to_readable_spans(resource_attributes)
    logger.info("Loaded %d spans", len(spans))

    if per_scope:
        return list(iter_export_requests(spans, id_encoding, error_policy))
    return [to_export_request(spans, id_encoding, error_policy)]


def _read_input(path: str, stdin: TextIO) -> str:
    if path == '-':
        return stdin.read()
    with open(path, encoding='utf-8') as f:
        return f.read()


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the otlp-transform CLI.

    Returns:
        Process exit status (0 on success, 1 on invalid input)
    """
    args = parse_args(argv)

    try:
        config = configure(id_encoding=args.id_encoding, error_policy=args.error_policy)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    # After configure(), which sets the package logger level
    if not args.quiet:
        setup_logging(verbose=args.verbose)
    logger.debug("otlp-transform configured: %s", config.to_dict())

    try:
        resource_attributes = parse_resource_attributes(args.resource_attr)
        document = json_loads(_read_input(args.input, sys.stdin))
        requests = convert(
            document,
            per_scope=args.per_scope,
            resource_attributes=resource_attributes,
        )
    except OSError as e:
        logger.error(f"Cannot read {args.input}: {e}")
        return 1
    except ValidationError as e:
        logger.error(f"Invalid span batch: {e}")
        return 1
    except (TransformError, ValueError) as e:
        logger.error(f"Conversion failed: {e}")
        return 1

    if args.per_scope:
        for request in requests:
            sys.stdout.write(json_dumps(request) + "\n")
    else:
        sys.stdout.write(json_dumps(requests[0], indent=args.indent) + "\n")
    return 0


if __name__ == '__main__':
    sys.exit(main())
