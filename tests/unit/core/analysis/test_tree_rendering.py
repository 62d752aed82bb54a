from __future__ import annotations

"""
Unit tests for the Tree Renderer.
"""

from zkfs.core.analysis.tree_renderer import render_tree_lines
from zkfs.core.analysis.tree_walker import walk_tree
from zkfs.domain.paths import normalize


def _plain_label(entry):
    return str(entry.path) if entry.depth == 0 else entry.path.name


def test_render_box_drawing_connectors(sample_namespace):
    lines = list(render_tree_lines(walk_tree(sample_namespace, normalize("/")), _plain_label))

    assert lines == [
        "/",
        "├── app",
        "│   ├── config",
        "│   └── locks",
        "│       └── lock-1",
        "└── zookeeper",
        "    └── quota",
    ]


def test_render_single_root(fake_client):
    fake_client.add("/solo")
    lines = list(render_tree_lines(walk_tree(fake_client, normalize("/solo")), _plain_label))
    assert lines == ["/solo"]
