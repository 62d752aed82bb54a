from __future__ import annotations

"""
Node Label Formatting.

Names of nodes with children get a trailing '/'. With colour enabled, names
are bold blue, green when the node carries data, italic when ephemeral.
"""

from typing import Callable, Optional, TextIO

from zkfs.domain.node_models import NodeStat, TreeEntry

_RESET = "\033[0m"
_BOLD = "1"
_ITALIC = "3"
_GREEN = "32"
_BLUE = "34"


def format_node_label(name: str, stat: Optional[NodeStat], color: bool = False) -> str:
    """
    Render the visible name of a node.

    Args:
        name: Segment name, or full path for a traversal root.
        stat: Node metadata; None renders the bare name.
        color: Emit ANSI styling.
    """
    if stat is None:
        return name

    text = name
    if stat.num_children > 0 and not name.endswith("/"):
        text = f"{name}/"

    if not color:
        return text

    codes = [_BOLD, _GREEN if stat.data_length > 0 else _BLUE]
    if stat.is_ephemeral:
        codes.append(_ITALIC)
    return f"\033[{';'.join(codes)}m{text}{_RESET}"


def entry_labeler(color: bool) -> Callable[[TreeEntry], str]:
    """Label function for tree rendering: full path at the root, name below."""
    def _label(entry: TreeEntry) -> str:
        name = str(entry.path) if entry.depth == 0 else entry.path.name
        return format_node_label(name, entry.stat, color)
    return _label


def use_color(stream: TextIO, enabled: bool) -> bool:
    """Colour only when enabled and writing to a terminal."""
    isatty = getattr(stream, "isatty", None)
    return enabled and bool(isatty and isatty())
