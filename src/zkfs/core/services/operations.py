from __future__ import annotations

"""
Node Operations.

The mutating and reading operations behind ``cat``, ``write``, ``create``
and ``rm``. Each function takes the session-bound client explicitly and
lets adapter errors propagate unchanged.
"""

import logging
import time
from typing import Any, List, Optional

from zkfs.core.analysis.tree_walker import walk_tree
from zkfs.core.services.ephemeral import EphemeralManager
from zkfs.domain.constants import ANY_VERSION
from zkfs.domain.errors import Interrupted, NodeNotFound, UsageError
from zkfs.domain.node_models import CreateMode, Persistence
from zkfs.domain.paths import NodePath
from zkfs.infra.zookeeper import NodeClient

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# READ
# -----------------------------------------------------------------------------

def read_node(client: NodeClient, path: NodePath) -> bytes:
    data, _ = client.get_data(path)
    return data

# -----------------------------------------------------------------------------
# WRITE
# -----------------------------------------------------------------------------

def write_node(
        client: NodeClient,
        path: NodePath,
        payload: Optional[bytes],
        expected_version: int = ANY_VERSION,
        force: bool = False,
        acl: Optional[List[Any]] = None,
) -> int:
    """
    Replace the payload of an existing node.

    Args:
        client: Node client adapter.
        path: Target node.
        payload: New content; None means nothing was supplied.
        expected_version: Version the node must have, -1 for any.
        force: Allow an empty payload and create the node (persistent)
               when it does not exist.
        acl: ACL used when force creates the node.

    Returns:
        int: The data version after the write (0 for a newly created node).

    Raises:
        UsageError: If no payload was supplied and force is off.
        VersionConflict: If expected_version is stale.
        NodeNotFound: If the node is missing and force is off.
    """
    if payload is None:
        if not force:
            raise UsageError(
                "no content given. Did you forget to pipe something into the command? "
                "To reset the content of the node use --force.",
                path,
            )
        payload = b""

    try:
        return client.set_data(path, payload, expected_version)
    except NodeNotFound:
        if not force:
            raise
        logger.info(f"{path} does not exist, creating it as persistent")
        client.create(path, payload, CreateMode(Persistence.PERSISTENT), acl)
        return 0

# -----------------------------------------------------------------------------
# CREATE
# -----------------------------------------------------------------------------

def create_node(
        client: NodeClient,
        path: NodePath,
        payload: Optional[bytes],
        mode: CreateMode,
        manager: EphemeralManager,
        acl: Optional[List[Any]] = None,
        make_parents: bool = False,
) -> NodePath:
    """
    Create a node and register it for cleanup when it is ephemeral.

    Returns:
        NodePath: Actual path of the new node (sequential nodes get a suffix).
    """
    created = client.create(path, payload or b"", mode, acl, make_parents=make_parents)
    if mode.ephemeral:
        manager.register(created)
    return created


def hold_until_interrupted(poll_interval: float = 0.5) -> None:
    """
    Block until a termination signal arrives.

    Used by ``create --hold`` to keep the session, and with it any ephemeral
    node, alive. The interrupt is the expected way out, so it is swallowed.
    """
    logger.warning("Holding the session open. Press Ctrl-C to release.")
    try:
        while True:
            time.sleep(poll_interval)
    except (Interrupted, KeyboardInterrupt) as e:
        logger.info(f"Hold released: {e}")

# -----------------------------------------------------------------------------
# REMOVE
# -----------------------------------------------------------------------------

def remove_node(
        client: NodeClient,
        path: NodePath,
        manager: EphemeralManager,
        recursive: bool = False,
        expected_version: int = ANY_VERSION,
) -> int:
    """
    Delete a node, or a whole subtree when recursive.

    A recursive delete walks the subtree first and then deletes in reverse
    pre-order, which always removes children before their parent. The
    expected version only applies to the top node.

    Returns:
        int: Number of nodes deleted.

    Raises:
        UsageError: On an attempt to delete the root recursively.
        NodeNotEmpty: If the node has children and recursive is off.
    """
    if not recursive:
        client.delete(path, expected_version)
        manager.deregister(path)
        return 1

    if path.is_root:
        raise UsageError("refusing to delete the root recursively", path)

    doomed = [entry.path for entry in walk_tree(client, path)]
    for node in reversed(doomed):
        client.delete(node, expected_version if node == path else ANY_VERSION)
        manager.deregister(node)
    logger.info(f"Deleted {len(doomed)} node(s) under {path}")
    return len(doomed)
