from __future__ import annotations

"""
Namespace Path Model.

Canonical, immutable representation of ZooKeeper node paths. All functions
in this module are pure: they never touch the network and only ever raise
InvalidPath.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from zkfs.domain.errors import InvalidPath

logger = logging.getLogger(__name__)

SEPARATOR = "/"

# Segments the service refuses regardless of position
_RESERVED_SEGMENTS = frozenset({".", ".."})

# -----------------------------------------------------------------------------
# DATA MODEL
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class NodePath:
    """
    Absolute path inside the coordination namespace.

    Attributes:
        segments: Ordered, non-empty segment names below the root.
    """
    segments: Tuple[str, ...] = ()

    def __str__(self) -> str:
        return SEPARATOR + SEPARATOR.join(self.segments)

    @property
    def name(self) -> str:
        """Last segment, or the separator for the root."""
        return self.segments[-1] if self.segments else SEPARATOR

    @property
    def depth(self) -> int:
        return len(self.segments)

    @property
    def is_root(self) -> bool:
        return not self.segments

    def is_ancestor_of(self, other: NodePath) -> bool:
        n = len(self.segments)
        return n < len(other.segments) and other.segments[:n] == self.segments


ROOT = NodePath()

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def normalize(raw: str) -> NodePath:
    """
    Parse a raw absolute path into a NodePath.

    Repeated separators and a trailing separator collapse away, so
    normalizing the string form of a NodePath yields the same NodePath.

    Args:
        raw: Path as typed by the user, e.g. ``/config//app/``.

    Returns:
        NodePath: The canonical path.

    Raises:
        InvalidPath: If the input is empty, relative, or has a forbidden segment.
    """
    if not raw:
        raise InvalidPath("path is empty", raw)
    if not raw.startswith(SEPARATOR):
        raise InvalidPath("path must start with '/'", raw)

    segments = tuple(s for s in raw.split(SEPARATOR) if s)
    for segment in segments:
        _check_segment(segment, raw)
    return NodePath(segments)


def join(parent_path: NodePath, segment: str) -> NodePath:
    """Append a single child segment to a path."""
    if not segment:
        raise InvalidPath("segment is empty", parent_path)
    if SEPARATOR in segment:
        raise InvalidPath(f"segment '{segment}' contains '/'", parent_path)
    _check_segment(segment, f"{parent_path}/{segment}")
    return NodePath(parent_path.segments + (segment,))


def parent(path: NodePath) -> Optional[NodePath]:
    """Return the parent path, or None for the root."""
    if path.is_root:
        return None
    return NodePath(path.segments[:-1])


def sanitize(raw: str) -> str:
    """
    Repair a user-typed path before normalization.

    A relative path gets a leading separator, with a warning. Empty input
    is left alone so that normalize() rejects it.
    """
    if raw and not raw.startswith(SEPARATOR):
        logger.warning(f"Invalid path, adding a '/' to the beginning of your path: '{raw}' => '/{raw}'")
        return SEPARATOR + raw
    return raw

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _check_segment(segment: str, context: object) -> None:
    if segment in _RESERVED_SEGMENTS:
        raise InvalidPath(f"segment '{segment}' is not allowed", context)
    if "\x00" in segment:
        raise InvalidPath("segment contains a NUL character", context)
