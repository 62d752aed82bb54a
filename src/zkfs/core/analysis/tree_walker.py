from __future__ import annotations

"""
Namespace Tree Walker.

Lazily walks the subtree below a root path in depth-first pre-order, with
children sorted by name so output is reproducible regardless of the order
the service returns them in. The namespace is mutable and the walk is not
transactional: nodes that disappear while the walk is in progress are
skipped, and any other failure aborts the walk with TraversalFailed.

The service guarantees the namespace is acyclic, so no cycle detection is
performed.
"""

import logging
from typing import Iterable, Iterator, List, Optional, Tuple, TypeVar

from zkfs.domain.errors import Interrupted, NodeNotFound, TraversalFailed, UsageError, ZkfsError
from zkfs.domain.node_models import NodeStat, TreeEntry
from zkfs.domain.paths import NodePath, join
from zkfs.infra.zookeeper import NodeClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def walk_tree(
        client: NodeClient,
        root: NodePath,
        max_depth: Optional[int] = None,
) -> Iterator[TreeEntry]:
    """
    Yield the root and its descendants up to ``max_depth`` levels below it.

    The generator is single-pass; start a new walk for a fresh view.

    Args:
        client: Node client adapter bound to an open session.
        root: Path where the walk starts (depth 0).
        max_depth: Deepest level to visit, None for unbounded.

    Yields:
        TreeEntry: Visited nodes in lexicographic pre-order.

    Raises:
        UsageError: If max_depth is negative.
        NodeNotFound: If the root does not exist.
        TraversalFailed: On any other adapter failure during the walk.
        Interrupted: If a termination signal arrives mid-walk; never wrapped.
    """
    if max_depth is not None and max_depth < 0:
        raise UsageError(f"depth must be >= 0, got {max_depth}")

    root_stat = _fetch_stat(client, root)
    if root_stat is None:
        raise NodeNotFound("no such node", root)

    yield TreeEntry(depth=0, path=root, stat=root_stat)

    if not _may_descend(0, max_depth, root_stat):
        return

    try:
        names = client.list_children(root)
    except NodeNotFound:
        raise
    except Interrupted:
        raise
    except ZkfsError as e:
        raise TraversalFailed(root, e) from e

    yield from _walk_children(client, root, names, 1, (), max_depth)


def walk_children(client: NodeClient, path: NodePath) -> Iterator[TreeEntry]:
    """Yield the direct children of a node, as listed by ``ls``."""
    for entry in walk_tree(client, path, max_depth=1):
        if entry.depth > 0:
            yield entry

# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _walk_children(
        client: NodeClient,
        parent: NodePath,
        names: Iterable[str],
        depth: int,
        flags: Tuple[bool, ...],
        max_depth: Optional[int],
) -> Iterator[TreeEntry]:
    survivors = _surviving_children(client, parent, names)

    for (path, stat), is_last in _mark_last(survivors):
        entry_flags = flags + (is_last,)
        yield TreeEntry(depth=depth, path=path, last_flags=entry_flags, stat=stat)

        if not _may_descend(depth, max_depth, stat):
            continue

        children = _list_children(client, path)
        if children is None:
            continue
        yield from _walk_children(client, path, children, depth + 1, entry_flags, max_depth)


def _surviving_children(
        client: NodeClient,
        parent: NodePath,
        names: Iterable[str],
) -> Iterator[Tuple[NodePath, NodeStat]]:
    """Stat children in name order, dropping those deleted since listing."""
    for name in sorted(names):
        path = join(parent, name)
        stat = _fetch_stat(client, path)
        if stat is None:
            logger.debug(f"{path} disappeared during traversal, skipping")
            continue
        yield path, stat


def _mark_last(items: Iterable[T]) -> Iterator[Tuple[T, bool]]:
    """Pair each item with a flag telling whether it is the final one."""
    it = iter(items)
    try:
        current = next(it)
    except StopIteration:
        return
    for following in it:
        yield current, False
        current = following
    yield current, True


def _may_descend(depth: int, max_depth: Optional[int], stat: NodeStat) -> bool:
    if max_depth is not None and depth >= max_depth:
        return False
    return stat.num_children > 0


def _fetch_stat(client: NodeClient, path: NodePath) -> Optional[NodeStat]:
    try:
        return client.stat(path)
    except NodeNotFound:
        return None
    except Interrupted:
        raise
    except ZkfsError as e:
        raise TraversalFailed(path, e) from e


def _list_children(client: NodeClient, path: NodePath) -> Optional[List[str]]:
    try:
        return client.list_children(path)
    except NodeNotFound:
        logger.debug(f"{path} disappeared before its children were listed, skipping")
        return None
    except Interrupted:
        raise
    except ZkfsError as e:
        raise TraversalFailed(path, e) from e
