from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command line schema and translates the parsed argparse
namespace into configuration overrides and a validated CommandRequest.
"""

import argparse
from typing import Any, BinaryIO, Dict, List, Optional

from zkfs.core.services.content import resolve_payload
from zkfs.domain.command_models import CommandRequest
from zkfs.domain.constants import ANY_VERSION, DEFAULT_ADDRESS, DEFAULT_MAX_PAYLOAD_BYTES
from zkfs.domain.errors import UsageError
from zkfs.domain.node_models import MODE_CHOICES, resolve_create_mode
from zkfs.domain.paths import NodePath, normalize, sanitize

# Subcommand aliases resolve to these canonical names
_ALIASES: Dict[str, str] = {
    "list": "ls", "l": "ls", "ll": "ls",
    "t": "tree",
    "bat": "cat",
    "rmdir": "rm",
    "set": "write",
}

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the zkfs CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="zkfs",
        description="Filesystem-like command line client for ZooKeeper.",
    )

    # --- Session ---
    p.add_argument(
        "-a", "--addr",
        dest="address",
        default=None,
        help=f"Server address, host:port[/chroot] (default: {DEFAULT_ADDRESS}).",
    )
    p.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Connection timeout in seconds.",
    )

    # --- Configuration and Diagnostics ---
    p.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="JSON configuration file (default: ~/.zkfs/config.json).",
    )
    p.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (-v info, -vv debug).",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Also write diagnostics to this file.",
    )
    p.add_argument(
        "--no-color",
        dest="no_color",
        action="store_true",
        help="Disable coloured node names.",
    )

    sub = p.add_subparsers(dest="command", metavar="<command>")
    sub.required = True

    ls = sub.add_parser("ls", aliases=["list", "l", "ll"], help="List directory contents.")
    ls.add_argument("path", nargs="?", default="/", help="Node to list (default: /).")

    tree = sub.add_parser("tree", aliases=["t"], help="List contents of nodes in a tree-like format.")
    tree.add_argument("path", nargs="?", default="/", help="Root of the tree (default: /).")
    tree.add_argument(
        "-L", "--level",
        dest="max_depth",
        type=int,
        default=None,
        help="Descend at most this many levels below the root.",
    )

    cat = sub.add_parser("cat", aliases=["bat"], help="Print the content of a node.")
    cat.add_argument("file", help="Node to print.")
    cat.add_argument(
        "-b", "--binary",
        action="store_true",
        help="Write raw bytes to stdout instead of decoding UTF-8.",
    )

    rm = sub.add_parser("rm", aliases=["rmdir"], help="Remove nodes.")
    rm.add_argument("paths", nargs="+", help="Nodes to remove.")
    rm.add_argument(
        "-r", "--recursive",
        action="store_true",
        help="Remove every descendant first.",
    )
    _add_expected_version(rm)

    write = sub.add_parser(
        "write",
        aliases=["set"],
        help="Write stdin or the given content to an existing node.",
        description="Write the content of stdin or argv to the specified path. "
                    "The node must already exist; see create for new nodes.",
    )
    write.add_argument("path", help="Node to write.")
    write.add_argument("content", nargs="?", default=None, help="Content to write.")
    write.add_argument(
        "-f", "--force",
        action="store_true",
        help="Create the node (persistent) if missing and allow empty content.",
    )
    _add_expected_version(write)

    create = sub.add_parser(
        "create",
        help="Create a new node.",
        description="Create a node holding the content of stdin or argv. Persistent by "
                    "default; ephemeral nodes are deleted before the command exits.",
    )
    create.add_argument("path", help="Node to create.")
    create.add_argument("content", nargs="?", default=None, help="Content of the node.")
    create.add_argument(
        "--mode",
        action="append",
        choices=MODE_CHOICES,
        default=None,
        help="Creation mode, repeatable (e.g. --mode ephemeral --mode sequential).",
    )
    create.add_argument(
        "-p", "--parents",
        dest="make_parents",
        action="store_true",
        help="Create missing parent nodes as persistent.",
    )
    create.add_argument(
        "--hold",
        action="store_true",
        help="Keep the session open until interrupted.",
    )

    return p


def _add_expected_version(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--expected-version",
        dest="expected_version",
        type=int,
        default=ANY_VERSION,
        help="Fail unless the node currently has this version.",
    )

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate global options into configuration overrides.

    Unset options map to None and are ignored by merge_config().
    """
    overrides: Dict[str, Any] = {
        "address": args.address,
        "timeout": args.timeout,
        "log_file": args.log_file,
    }
    if args.no_color:
        overrides["color"] = False
    return overrides


def args_to_request(
        args: argparse.Namespace,
        stdin: Optional[BinaryIO] = None,
        max_payload_bytes: int = DEFAULT_MAX_PAYLOAD_BYTES,
) -> CommandRequest:
    """
    Validate subcommand arguments into a CommandRequest.

    Args:
        args: Parsed command line.
        stdin: Binary standard input, read for write/create without content.
        max_payload_bytes: Node size limit enforced on payloads.

    Raises:
        InvalidPath: On a malformed path.
        PayloadTooLarge: On an oversized payload.
        UsageError: On conflicting options.
    """
    command = canonical_command(args.command)

    if command in ("ls", "tree"):
        max_depth = getattr(args, "max_depth", None) if command == "tree" else 1
        if max_depth is not None and max_depth < 0:
            raise UsageError(f"--level must be >= 0, got {max_depth}")
        return CommandRequest(command=command, paths=(_path(args.path),), max_depth=max_depth)

    if command == "cat":
        return CommandRequest(command=command, paths=(_path(args.file),), binary=args.binary)

    if command == "rm":
        return CommandRequest(
            command=command,
            paths=tuple(_paths(args.paths)),
            recursive=args.recursive,
            expected_version=args.expected_version,
        )

    if command == "write":
        path = _path(args.path)
        return CommandRequest(
            command=command,
            paths=(path,),
            payload=resolve_payload(args.content, stdin, max_payload_bytes),
            force=args.force,
            expected_version=args.expected_version,
        )

    if command == "create":
        path = _path(args.path)
        mode = resolve_create_mode(args.mode)
        return CommandRequest(
            command=command,
            paths=(path,),
            payload=resolve_payload(args.content, stdin, max_payload_bytes),
            create_mode=mode,
            make_parents=args.make_parents,
            hold=args.hold,
        )

    raise UsageError(f"unknown command '{args.command}'")


def canonical_command(name: str) -> str:
    return _ALIASES.get(name, name)

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _path(raw: str) -> NodePath:
    return normalize(sanitize(raw))


def _paths(raws: List[str]) -> List[NodePath]:
    return [_path(r) for r in raws]
