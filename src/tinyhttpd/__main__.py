"""
=============================================================================
TINYHTTPD CLI ENTRY POINT
=============================================================================

=============================================================================
USAGE
=============================================================================

    # Serve the current directory on 0.0.0.0:42069
    python -m tinyhttpd

    # Serve /tmp/files
    python -m tinyhttpd /tmp/files
    python -m tinyhttpd --directory /tmp/files

    # Custom bind address
    python -m tinyhttpd --host 127.0.0.1 --port 4221

    # Reject header lines without a colon
    python -m tinyhttpd --strict-headers

    # Drop clients that stall for more than 30 seconds
    python -m tinyhttpd --timeout 30

Settings not given on the command line come from TINYHTTPD_* environment
variables (see ServerConfig.from_env), then from the defaults.

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import ServerConfig
from .server import HTTPServer


def build_parser() -> argparse.ArgumentParser:
    """Command-line parser. Every option defaults to None = "not given"."""
    parser = argparse.ArgumentParser(
        prog="tinyhttpd",
        description="Small HTTP/1.1 server: echo, user-agent and file upload/download",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m tinyhttpd                          # Serve ./ on 0.0.0.0:42069
  python -m tinyhttpd /tmp/files               # Serve /tmp/files
  python -m tinyhttpd --port 4221              # Custom port
  python -m tinyhttpd --strict-headers         # 400 on header lines without ':'
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "directory",
        nargs="?",
        default=None,
        help="Directory served under /files/ (default: current directory)"
    )

    parser.add_argument(
        "--directory", "-d",
        dest="directory_option",
        default=None,
        metavar="DIR",
        help="Same as the positional DIRECTORY"
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 0.0.0.0)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 42069)"
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=None,
        help="Per-connection socket timeout in seconds (default: none)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # PARSING / LOGGING
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--strict-headers",
        action="store_true",
        help="Answer 400 to header lines without a colon instead of skipping them"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"tinyhttpd {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Environment-derived config with explicit CLI flags layered on top."""
    config = ServerConfig.from_env()

    directory = args.directory_option or args.directory
    if directory is not None:
        config.directory = directory
    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.timeout is not None:
        config.timeout = args.timeout
    if args.strict_headers:
        config.header_policy = "strict"
    if args.log_level is not None:
        config.log_level = args.log_level

    return config


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
        server = HTTPServer(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    try:
        server.run()
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
