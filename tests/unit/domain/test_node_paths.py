from __future__ import annotations

"""
Unit tests for the Path Model.

Verifies:
1. Normalization of separators and idempotency.
2. Rejection of empty, relative and reserved inputs.
3. join() and parent() behaviour at the root and below.
"""

import pytest

from zkfs.domain.errors import InvalidPath
from zkfs.domain.paths import ROOT, NodePath, join, normalize, parent, sanitize


@pytest.mark.parametrize("raw, expected", [
    ("/", "/"),
    ("/a", "/a"),
    ("/a/b/", "/a/b"),
    ("//a///b", "/a/b"),
    ("/app/config-0001", "/app/config-0001"),
])
def test_normalize_collapses_separators(raw, expected):
    assert str(normalize(raw)) == expected


@pytest.mark.parametrize("raw", ["/", "/a", "//a//b/", "/x/y/z///", "/with space/ü"])
def test_normalize_is_idempotent(raw):
    once = normalize(raw)
    assert normalize(str(once)) == once


@pytest.mark.parametrize("raw", ["", "a/b", "relative"])
def test_normalize_rejects_empty_and_relative(raw):
    with pytest.raises(InvalidPath):
        normalize(raw)


@pytest.mark.parametrize("raw", ["/a/./b", "/..", "/a/b\x00c"])
def test_normalize_rejects_reserved_segments(raw):
    with pytest.raises(InvalidPath):
        normalize(raw)


def test_equality_is_segment_equality():
    assert normalize("/a/b") == NodePath(("a", "b"))
    assert normalize("/a/b") != normalize("/a/b/c")
    assert normalize("/") == ROOT


def test_join_appends_segment():
    assert join(normalize("/a"), "b") == normalize("/a/b")
    assert join(ROOT, "a") == normalize("/a")


@pytest.mark.parametrize("segment", ["", "b/c", "/"])
def test_join_rejects_bad_segments(segment):
    with pytest.raises(InvalidPath):
        join(normalize("/a"), segment)


def test_parent_of_root_is_none():
    assert parent(ROOT) is None
    assert parent(normalize("/a")) == ROOT
    assert parent(normalize("/a/b/c")) == normalize("/a/b")


def test_path_properties():
    p = normalize("/a/b")
    assert p.name == "b"
    assert p.depth == 2
    assert not p.is_root
    assert ROOT.name == "/"
    assert ROOT.is_ancestor_of(p)
    assert not p.is_ancestor_of(p)


def test_sanitize_prefixes_relative_paths(caplog):
    with caplog.at_level("WARNING"):
        assert sanitize("app/config") == "/app/config"
    assert "adding a '/'" in caplog.text
    assert sanitize("/ok") == "/ok"
    assert sanitize("") == ""
