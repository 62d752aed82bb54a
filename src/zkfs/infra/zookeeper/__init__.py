from __future__ import annotations

from .client import NodeClient, resolve_acl, to_node_stat

__all__ = [
    "NodeClient",
    "resolve_acl",
    "to_node_stat",
]
