from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates one invocation: logging bootstrap, configuration merge, local
validation of the request, session setup, dispatch inside the ephemeral
lifecycle scope, and translation of errors into exit codes. Ephemeral
cleanup has always run by the time an exit code is returned.
"""

import sys
from typing import BinaryIO, Callable, List, Optional, TextIO

from zkfs.core.services.ephemeral import EphemeralManager, lifecycle_scope
from zkfs.domain.command_models import CommandRequest
from zkfs.domain.config import load_config, merge_config
from zkfs.domain.errors import Interrupted, ZkfsError
from zkfs.infra.logging import (
    LoggingConfig,
    configure_logging,
    get_logger,
    level_from_verbosity,
    shutdown_logging,
)
from zkfs.infra.zookeeper import NodeClient, resolve_acl
from zkfs.interface.cli import args as cli_args
from zkfs.interface.cli.dispatcher import DispatchContext, dispatch, format_diagnostic
from zkfs.interface.cli.formatting import use_color

logger = get_logger(__name__)

ClientFactory = Callable[..., NodeClient]

# Commands that consume standard input
_PAYLOAD_COMMANDS = ("write", "create")

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(
        argv: Optional[List[str]] = None,
        *,
        stdin: Optional[BinaryIO] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
        client_factory: ClientFactory = NodeClient,
) -> int:
    """
    Execute the CLI workflow.

    Args:
        argv: Command line arguments. Defaults to sys.argv.
        stdin: Binary input stream. Defaults to sys.stdin.buffer.
        stdout: Output stream. Defaults to sys.stdout.
        stderr: Diagnostic stream. Defaults to sys.stderr.
        client_factory: Builds the node client from ``hosts`` and ``timeout``.

    Returns:
        int: Process exit code (0 for success, error-specific otherwise).
    """
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    if sys.platform == "win32" and hasattr(stdout, "reconfigure"):
        stdout.reconfigure(encoding="utf-8")

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap (console only until the config is known)
    log_level = level_from_verbosity(args.verbose)
    configure_logging(LoggingConfig(level=log_level), force=True)

    try:
        # 3. Configuration hierarchy: defaults < file < command line
        conf = merge_config(load_config(args.config_path), cli_args.args_to_overrides(args))
        if conf["log_file"]:
            configure_logging(LoggingConfig(level=log_level, log_file=conf["log_file"]), force=True)

        # 4. Local validation, before any network I/O
        if stdin is None and cli_args.canonical_command(args.command) in _PAYLOAD_COMMANDS:
            stdin = getattr(sys.stdin, "buffer", None)
        request = cli_args.args_to_request(args, stdin, conf["max_payload_bytes"])
        acl = resolve_acl(conf["acl"])

        # 5. Session and dispatch
        return _execute(request, conf["address"], conf["timeout"], acl, conf["color"],
                        stdout, stderr, client_factory)

    except Interrupted as e:
        logger.info(f"Interrupted by signal {e.signum}")
        print(format_diagnostic(e), file=stderr)
        return e.exit_code
    except ZkfsError as e:
        logger.debug("Command failed", exc_info=True)
        print(format_diagnostic(e), file=stderr)
        return e.exit_code
    except KeyboardInterrupt:
        print("zkfs: interrupted", file=stderr)
        return Interrupted.exit_code
    finally:
        shutdown_logging()

# -----------------------------------------------------------------------------
# SESSION EXECUTION
# -----------------------------------------------------------------------------

def _execute(
        request: CommandRequest,
        address: str,
        timeout: float,
        acl: list,
        color: bool,
        stdout: TextIO,
        stderr: TextIO,
        client_factory: ClientFactory,
) -> int:
    """
    Open the session, run the command inside the lifecycle scope, close.

    The scope is nested inside the session so that ephemeral nodes are
    deleted while the session that owns them is still open.
    """
    with client_factory(hosts=address, timeout=timeout) as client:
        manager = EphemeralManager(client)
        with lifecycle_scope(manager):
            ctx = DispatchContext(
                client=client,
                manager=manager,
                out=stdout,
                err=stderr,
                binary_out=getattr(stdout, "buffer", None),
                color=use_color(stdout, color),
                acl=acl,
            )
            return dispatch(request, ctx)

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
