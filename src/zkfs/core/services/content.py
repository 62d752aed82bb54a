from __future__ import annotations

"""
Content Resolver.

Decides which bytes a ``write`` or ``create`` sends: the literal command
line argument when given, otherwise whatever is piped on standard input.
Size is checked locally so an oversized payload never reaches the service.
"""

import logging
from typing import BinaryIO, Optional

from zkfs.domain.constants import DEFAULT_MAX_PAYLOAD_BYTES
from zkfs.domain.errors import PayloadTooLarge

logger = logging.getLogger(__name__)


def resolve_payload(
        literal: Optional[str],
        stream: Optional[BinaryIO],
        max_bytes: int = DEFAULT_MAX_PAYLOAD_BYTES,
) -> Optional[bytes]:
    """
    Resolve the payload of a mutating command.

    The literal argument wins over piped input; the two are never merged.
    Standard input is only read when it is not an interactive terminal.

    Args:
        literal: Content given on the command line, if any.
        stream: Binary standard input, if available.
        max_bytes: Largest accepted payload.

    Returns:
        Optional[bytes]: The payload, or None when no content was supplied.

    Raises:
        PayloadTooLarge: If the payload exceeds max_bytes.
    """
    if literal is not None:
        data = literal.encode("utf-8")
        _check_size(len(data), max_bytes, "argument")
        return data

    if stream is None or is_interactive(stream):
        return None

    # One byte past the limit is enough to know it was exceeded
    data = stream.read(max_bytes + 1)
    _check_size(len(data), max_bytes, "standard input")
    logger.debug(f"Read {len(data)} bytes from standard input")
    return data


def is_interactive(stream: BinaryIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def _check_size(size: int, max_bytes: int, source: str) -> None:
    if size > max_bytes:
        raise PayloadTooLarge(f"payload from {source} exceeds the {max_bytes} byte limit")
