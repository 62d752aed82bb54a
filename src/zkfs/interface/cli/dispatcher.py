from __future__ import annotations

"""
Command Dispatcher.

Maps a validated CommandRequest onto the core operations and renders their
results. Runs inside an open session and an ephemeral lifecycle scope.
"""

import logging
from dataclasses import dataclass
from typing import Any, BinaryIO, Callable, Dict, List, Optional, TextIO

from zkfs.core.analysis.tree_renderer import render_tree_lines
from zkfs.core.analysis.tree_walker import walk_children, walk_tree
from zkfs.core.services.ephemeral import EphemeralManager
from zkfs.core.services.operations import (
    create_node,
    hold_until_interrupted,
    read_node,
    remove_node,
    write_node,
)
from zkfs.domain.command_models import CommandRequest
from zkfs.domain.errors import Interrupted, UsageError, ZkfsError
from zkfs.infra.zookeeper import NodeClient
from zkfs.interface.cli.formatting import entry_labeler, format_node_label

logger = logging.getLogger(__name__)


@dataclass
class DispatchContext:
    """
    Everything a command handler needs besides its request.

    Attributes:
        client: Session-bound node client.
        manager: Ephemeral lifecycle manager of this invocation.
        out: Text stream for command output.
        err: Text stream for per-item diagnostics.
        binary_out: Byte stream used by ``cat --binary``.
        color: Emit ANSI-styled node names.
        acl: ACL applied to created nodes.
    """
    client: NodeClient
    manager: EphemeralManager
    out: TextIO
    err: TextIO
    binary_out: Optional[BinaryIO] = None
    color: bool = False
    acl: Optional[List[Any]] = None


def format_diagnostic(error: ZkfsError) -> str:
    """Single-line diagnostic naming the error kind and failing path."""
    if error.path:
        return f"zkfs: {error.kind}: {error.path}: {error.message}"
    return f"zkfs: {error.kind}: {error.message}"

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def dispatch(request: CommandRequest, ctx: DispatchContext) -> int:
    """
    Execute a request and return the process exit code.

    Raises:
        ZkfsError: Any failure of a single-target command.
    """
    handler = _HANDLERS.get(request.command)
    if handler is None:
        raise UsageError(f"unknown command '{request.command}'")
    logger.debug(f"Dispatching {request.command} {', '.join(str(p) for p in request.paths)}")
    return handler(request, ctx)

# -----------------------------------------------------------------------------
# HANDLERS
# -----------------------------------------------------------------------------

def _ls(request: CommandRequest, ctx: DispatchContext) -> int:
    labels = [
        format_node_label(entry.path.name, entry.stat, ctx.color)
        for entry in walk_children(ctx.client, request.path)
    ]
    print(" ".join(labels), file=ctx.out)
    return 0


def _tree(request: CommandRequest, ctx: DispatchContext) -> int:
    entries = walk_tree(ctx.client, request.path, request.max_depth)
    for line in render_tree_lines(entries, entry_labeler(ctx.color)):
        print(line, file=ctx.out)
    return 0


def _cat(request: CommandRequest, ctx: DispatchContext) -> int:
    data = read_node(ctx.client, request.path)

    if request.binary:
        if ctx.binary_out is None:
            raise UsageError("binary output is not available on this stream", request.path)
        ctx.binary_out.write(data)
        ctx.binary_out.flush()
        return 0

    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise UsageError(
            f"content is not valid UTF-8 ({e.reason}). To output the binary data use -b or --binary.",
            request.path,
        ) from e
    print(text, file=ctx.out)
    return 0


def _rm(request: CommandRequest, ctx: DispatchContext) -> int:
    exit_code = 0
    for path in request.paths:
        try:
            remove_node(
                ctx.client,
                path,
                ctx.manager,
                recursive=request.recursive,
                expected_version=request.expected_version,
            )
        except Interrupted:
            raise
        except ZkfsError as e:
            logger.debug(f"rm {path} failed", exc_info=True)
            print(format_diagnostic(e), file=ctx.err)
            if exit_code == 0:
                exit_code = e.exit_code
    return exit_code


def _write(request: CommandRequest, ctx: DispatchContext) -> int:
    version = write_node(
        ctx.client,
        request.path,
        request.payload,
        expected_version=request.expected_version,
        force=request.force,
        acl=ctx.acl,
    )
    logger.info(f"{request.path} is now at version {version}")
    return 0


def _create(request: CommandRequest, ctx: DispatchContext) -> int:
    if request.create_mode is None:
        raise UsageError("missing create mode", request.path)

    created = create_node(
        ctx.client,
        request.path,
        request.payload,
        request.create_mode,
        ctx.manager,
        acl=ctx.acl,
        make_parents=request.make_parents,
    )
    print(created, file=ctx.out)

    if request.hold:
        ctx.out.flush()
        hold_until_interrupted()
    return 0


_HANDLERS: Dict[str, Callable[[CommandRequest, DispatchContext], int]] = {
    "ls": _ls,
    "tree": _tree,
    "cat": _cat,
    "rm": _rm,
    "write": _write,
    "create": _create,
}
