from __future__ import annotations

"""
Tree Renderer.

Converts a stream of TreeEntry objects into box-drawing text lines. Lines
are produced as entries arrive, so output starts before the walk is over.
"""

from typing import Callable, Iterable, Iterator

from zkfs.domain.node_models import TreeEntry

# -----------------------------------------------------------------------------
# CONNECTORS
# -----------------------------------------------------------------------------

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE = "│   "
SPACE = "    "

LabelFunc = Callable[[TreeEntry], str]

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def render_tree_lines(entries: Iterable[TreeEntry], label: LabelFunc) -> Iterator[str]:
    """
    Lazily transform traversal entries into printable lines.

    The root entry (depth 0) is printed bare; every other entry gets the
    continuation prefix of its ancestors followed by its own connector.

    Args:
        entries: Pre-order traversal output.
        label: Formats the visible name of a single entry.

    Yields:
        str: One rendered line per entry.
    """
    for entry in entries:
        if entry.depth == 0:
            yield label(entry)
            continue
        yield f"{entry_prefix(entry)}{label(entry)}"


def entry_prefix(entry: TreeEntry) -> str:
    """Build the indentation and connector glyphs for a non-root entry."""
    ancestors = "".join(SPACE if last else PIPE for last in entry.last_flags[:-1])
    connector = LAST_BRANCH if entry.is_last else BRANCH
    return ancestors + connector
