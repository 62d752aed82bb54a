from __future__ import annotations

"""
Integration tests for the CLI Application Controller.

Runs main() end to end against the in-memory node client and checks exit
codes, output streams, and that ephemeral cleanup has run on every exit
path before main() returns.
"""

import io
import signal
import sys
from types import SimpleNamespace

import pytest

from zkfs.core.services import operations
from zkfs.domain import errors
from zkfs.interface.cli import app, dispatcher

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals required")


@pytest.fixture
def run(sample_namespace, tmp_path):
    """Invoke main() with captured streams; returns (exit_code, stdout, stderr)."""
    factory_calls = []

    def factory(**kwargs):
        factory_calls.append(kwargs)
        return sample_namespace

    def _run(argv, stdin=b""):
        out, err = io.StringIO(), io.StringIO()
        full_argv = ["--config", str(tmp_path / "none.json")] + argv
        code = app.main(full_argv, stdin=io.BytesIO(stdin), stdout=out, stderr=err, client_factory=factory)
        return code, out.getvalue(), err.getvalue()

    _run.factory_calls = factory_calls
    _run.client = sample_namespace
    return _run


def test_ls_success(run):
    code, out, err = run(["ls", "/app"])

    assert code == 0
    assert out == "config locks/\n"
    assert run.client.closed
    assert run.factory_calls == [{"hosts": "localhost:2181/", "timeout": 10.0}]


def test_tree_success(run):
    code, out, _ = run(["tree", "/zookeeper"])
    assert code == 0
    assert out.splitlines() == ["/zookeeper/", "└── quota"]


def test_address_option_reaches_factory(run):
    run(["-a", "zk9:2181/chroot", "--timeout", "1.5", "ls"])
    assert run.factory_calls[-1] == {"hosts": "zk9:2181/chroot", "timeout": 1.5}


def test_invalid_path_never_connects(run):
    code, _, err = run(["cat", ""])

    assert code == errors.InvalidPath.exit_code
    assert err.startswith("zkfs: invalid-path")
    assert run.factory_calls == []


def test_payload_too_large_never_writes(run, tmp_path):
    cfg = tmp_path / "small.json"
    cfg.write_text('{"max_payload_bytes": 4}', encoding="utf-8")
    out, err = io.StringIO(), io.StringIO()

    code = app.main(
        ["--config", str(cfg), "create", "/big"],
        stdin=io.BytesIO(b"12345"), stdout=out, stderr=err,
        client_factory=lambda **kw: run.client,
    )

    assert code == errors.PayloadTooLarge.exit_code
    assert run.client.ops("create") == []
    assert run.client.ops("set_data") == []


def test_missing_node_exit_code(run):
    code, _, err = run(["cat", "/nope"])
    assert code == errors.NodeNotFound.exit_code
    assert err.strip() == "zkfs: node-not-found: /nope: no such node"


def test_version_conflict_exit_code(run):
    run(["write", "/app/config", "v1"])
    code, _, err = run(["write", "/app/config", "v2", "--expected-version", "0"])

    assert code == errors.VersionConflict.exit_code
    assert "version-conflict" in err


def test_create_exists_exit_code(run):
    code, _, _ = run(["create", "/app", "x"])
    assert code == errors.NodeExists.exit_code


def test_connect_error_exit_code(tmp_path):
    def refuse(**kwargs):
        raise errors.ConnectError("could not connect within 1s", kwargs["hosts"])

    err = io.StringIO()
    code = app.main(["--config", str(tmp_path / "x.json"), "ls"], stdout=io.StringIO(), stderr=err,
                    client_factory=refuse)

    assert code == errors.ConnectError.exit_code
    assert "connect-error" in err.getvalue()


def test_ephemeral_deleted_on_success(run):
    code, out, _ = run(["create", "/app/eph", "data", "--mode", "ephemeral"])

    assert code == 0
    assert out.strip() == "/app/eph"
    assert run.client.ops("delete") == ["/app/eph"]
    assert not run.client.has("/app/eph")


def test_ephemeral_deleted_on_error(run, monkeypatch):
    def failing_hold():
        raise errors.NodeIOError("session expired", "/app/eph")

    monkeypatch.setattr(dispatcher, "hold_until_interrupted", failing_hold)

    code, _, err = run(["create", "/app/eph", "--mode", "ephemeral", "--hold"])

    assert code == errors.NodeIOError.exit_code
    assert not run.client.has("/app/eph")
    assert "io-error" in err


@posix_only
def test_ephemeral_deleted_on_signal(run, monkeypatch):
    monkeypatch.setattr(dispatcher, "hold_until_interrupted", lambda: signal.raise_signal(signal.SIGTERM))

    code, _, err = run(["create", "/app/eph", "--mode", "ephemeral", "--hold"])

    assert code == errors.Interrupted.exit_code
    assert not run.client.has("/app/eph")
    assert "interrupted" in err


@posix_only
def test_hold_released_by_signal_exits_cleanly(run, monkeypatch):
    def sleep(_):
        assert run.client.has("/app/held")
        signal.raise_signal(signal.SIGINT)

    monkeypatch.setattr(operations, "time", SimpleNamespace(sleep=sleep))

    code, out, _ = run(["create", "/app/held", "--mode", "ephemeral", "--hold"])

    assert code == 0
    assert out.strip() == "/app/held"
    assert not run.client.has("/app/held")


def test_rm_recursive(run):
    code, _, _ = run(["rm", "-r", "/app"])
    assert code == 0
    assert not run.client.has("/app")


@posix_only
def test_signal_during_rm_stops_remaining_paths(run):
    run.client.hooks[("delete", "/app/config")] = lambda: signal.raise_signal(signal.SIGINT)

    code, _, err = run(["rm", "/app/config", "/zookeeper/quota"])

    assert code == errors.Interrupted.exit_code
    assert run.client.has("/zookeeper/quota")
    assert run.client.ops("delete") == ["/app/config"]
    assert err.count("zkfs:") == 1


@posix_only
def test_signal_during_recursive_rm_walk_stops_remaining_paths(run):
    run.client.hooks[("stat", "/app/locks")] = lambda: signal.raise_signal(signal.SIGTERM)

    code, _, err = run(["rm", "-r", "/app", "/zookeeper"])

    assert code == errors.Interrupted.exit_code
    assert "traversal-failed" not in err
    assert run.client.has("/app/config")
    assert run.client.has("/zookeeper/quota")


@posix_only
def test_signal_during_tree_exits_interrupted(run):
    run.client.hooks[("stat", "/app/locks")] = lambda: signal.raise_signal(signal.SIGINT)

    code, _, err = run(["tree", "/"])

    assert code == errors.Interrupted.exit_code
    assert "zkfs: interrupted" in err
    assert "traversal-failed" not in err
