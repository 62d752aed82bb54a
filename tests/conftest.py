from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. An in-memory stand-in for the node client adapter, with hooks to inject
   failures and concurrent mutations at precise points of an operation.
"""

import os
import sys
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from zkfs.domain.errors import (  # noqa: E402
    NodeExists,
    NodeNotEmpty,
    NodeNotFound,
    VersionConflict,
)
from zkfs.domain.node_models import CreateMode, NodeStat  # noqa: E402
from zkfs.domain.paths import NodePath, normalize, parent  # noqa: E402


# -----------------------------------------------------------------------------
# In-memory Node Client
# -----------------------------------------------------------------------------
@dataclass
class FakeNode:
    data: bytes = b""
    version: int = 0
    ephemeral_owner: int = 0


class FakeNodeClient:
    """
    Dict-backed implementation of the NodeClient interface.

    Attributes:
        nodes: Live nodes keyed by path.
        calls: Every operation performed, as (operation, path string).
        hooks: Callbacks run right before an operation on a path.
        failures: Exceptions raised instead of performing an operation.
    """

    SESSION_ID = 0x5EED

    def __init__(self, hosts: str = "fake:2181", timeout: float = 1.0) -> None:
        self.hosts = hosts
        self.timeout = timeout
        self.nodes: Dict[NodePath, FakeNode] = {NodePath(): FakeNode()}
        self.calls: List[Tuple[str, str]] = []
        self.hooks: Dict[Tuple[str, str], Callable[[], None]] = {}
        self.failures: Dict[Tuple[str, str], Exception] = {}
        self.connected = False
        self.closed = False
        self._sequence = 0

    # --- Test helpers ---

    def add(self, raw: str, data: bytes = b"", ephemeral: bool = False) -> NodePath:
        path = normalize(raw)
        for depth in range(1, path.depth):
            self.nodes.setdefault(NodePath(path.segments[:depth]), FakeNode())
        self.nodes[path] = FakeNode(data=data, ephemeral_owner=self.SESSION_ID if ephemeral else 0)
        return path

    def remove(self, raw: str) -> None:
        path = normalize(raw)
        for p in [p for p in self.nodes if p == path or path.is_ancestor_of(p)]:
            del self.nodes[p]

    def has(self, raw: str) -> bool:
        return normalize(raw) in self.nodes

    def ops(self, operation: str) -> List[str]:
        return [p for op, p in self.calls if op == operation]

    # --- Session ---

    def __enter__(self) -> FakeNodeClient:
        return self.connect()

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def connect(self) -> FakeNodeClient:
        self.connected = True
        return self

    def close(self) -> None:
        self.connected = False
        self.closed = True

    # --- NodeClient interface ---

    def list_children(self, path: NodePath) -> List[str]:
        self._enter("list_children", path)
        self._require(path)
        names = [p.name for p in self.nodes if parent(p) == path]
        return list(reversed(sorted(names)))

    def get_data(self, path: NodePath) -> Tuple[bytes, NodeStat]:
        self._enter("get_data", path)
        node = self._require(path)
        return node.data, self._stat(path, node)

    def stat(self, path: NodePath) -> Optional[NodeStat]:
        self._enter("stat", path)
        node = self.nodes.get(path)
        return self._stat(path, node) if node is not None else None

    def exists(self, path: NodePath) -> bool:
        return self.stat(path) is not None

    def set_data(self, path: NodePath, data: bytes, expected_version: int = -1) -> int:
        self._enter("set_data", path)
        node = self._require(path)
        self._check_version(path, node, expected_version)
        node.data = data
        node.version += 1
        return node.version

    def create(
            self,
            path: NodePath,
            data: bytes,
            mode: CreateMode,
            acl: Optional[List[Any]] = None,
            make_parents: bool = False,
    ) -> NodePath:
        self._enter("create", path)
        if mode.sequential:
            self._sequence += 1
            path = NodePath(path.segments[:-1] + (f"{path.name}{self._sequence:010d}",))
        if path in self.nodes:
            raise NodeExists("node already exists", path)
        up = parent(path)
        if up is not None and up not in self.nodes:
            if not make_parents:
                raise NodeNotFound("no such node", path)
            self.add(str(up))
        owner = self.SESSION_ID if mode.ephemeral else 0
        self.nodes[path] = FakeNode(data=data, ephemeral_owner=owner)
        return path

    def delete(self, path: NodePath, expected_version: int = -1) -> None:
        self._enter("delete", path)
        node = self._require(path)
        self._check_version(path, node, expected_version)
        if any(parent(p) == path for p in self.nodes):
            raise NodeNotEmpty("node has children (use --recursive)", path)
        del self.nodes[path]

    # --- Internal ---

    def _enter(self, operation: str, path: NodePath) -> None:
        key = (operation, str(path))
        self.calls.append(key)
        hook = self.hooks.pop(key, None)
        if hook is not None:
            hook()
        if key in self.failures:
            raise self.failures[key]

    def _require(self, path: NodePath) -> FakeNode:
        node = self.nodes.get(path)
        if node is None:
            raise NodeNotFound("no such node", path)
        return node

    def _check_version(self, path: NodePath, node: FakeNode, expected: int) -> None:
        if expected != -1 and expected != node.version:
            raise VersionConflict("version does not match", path)

    def _stat(self, path: NodePath, node: FakeNode) -> NodeStat:
        return NodeStat(
            version=node.version,
            data_length=len(node.data),
            num_children=sum(1 for p in self.nodes if parent(p) == path),
            ephemeral_owner=node.ephemeral_owner,
        )


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def fake_client() -> FakeNodeClient:
    """Empty namespace holding only the root."""
    return FakeNodeClient().connect()


@pytest.fixture
def sample_namespace(fake_client: FakeNodeClient) -> FakeNodeClient:
    """
    Namespace used across traversal tests.

    Structure:
    /
      /app
        /config   (data)
        /locks
          /lock-1 (ephemeral)
      /zookeeper
        /quota
    """
    fake_client.add("/app/config", b"key=value")
    fake_client.add("/app/locks/lock-1", ephemeral=True)
    fake_client.add("/zookeeper/quota")
    return fake_client
