from __future__ import annotations

"""
Command Request Model.

A fully validated, network-free description of a single invocation. It is
built before any connection is opened, so malformed paths and oversized
payloads are rejected without touching the service.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from zkfs.domain.constants import ANY_VERSION
from zkfs.domain.node_models import CreateMode
from zkfs.domain.paths import NodePath


@dataclass(frozen=True)
class CommandRequest:
    """
    Attributes:
        command: Canonical subcommand name (ls, tree, cat, rm, write, create).
        paths: Normalized target paths; a single one except for rm.
        payload: Resolved content for write/create, None when not supplied.
        max_depth: Depth bound for tree, None for unbounded.
        binary: cat writes raw bytes instead of decoded text.
        recursive: rm deletes whole subtrees.
        force: write accepts empty content and creates missing nodes.
        expected_version: Optimistic-concurrency check for write/rm.
        create_mode: Persistence and sequencing for create.
        make_parents: create also creates missing ancestors.
        hold: create keeps the session open until interrupted.
    """
    command: str
    paths: Tuple[NodePath, ...]
    payload: Optional[bytes] = None
    max_depth: Optional[int] = None
    binary: bool = False
    recursive: bool = False
    force: bool = False
    expected_version: int = ANY_VERSION
    create_mode: Optional[CreateMode] = None
    make_parents: bool = False
    hold: bool = False

    @property
    def path(self) -> NodePath:
        return self.paths[0]
