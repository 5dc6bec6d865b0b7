"""Tether CLI — tether serve.

Entry point for the ``tether`` command-line interface.
"""

from __future__ import annotations

import argparse
import sys


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the tether CLI."""
    parser = argparse.ArgumentParser(
        prog="tether",
        description="Reactive server-to-browser state sync.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # tether serve
    serve_parser = subparsers.add_parser(
        "serve",
        help="Serve a model factory over a sync channel",
    )
    serve_parser.add_argument("target", help="Model factory as module:attr")
    serve_parser.add_argument("--root", default=".", help="Directory holding tether.yaml")
    serve_parser.add_argument("--channel", default=None, help="Channel name")
    serve_parser.add_argument("--host", default=None, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port")
    serve_parser.add_argument(
        "--debounce", type=int, default=None, help="Client edit debounce in ms",
    )
    serve_parser.add_argument(
        "--prod", action="store_true", default=None, help="Production mode",
    )

    return parser


def _get_version() -> str:
    """Get the package version."""
    from tether import __version__

    return __version__


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    from tether._errors import TetherError
    from tether.app import serve

    if args.command == "serve":
        try:
            serve(
                args.target,
                root=args.root,
                channel=args.channel,
                host=args.host,
                port=args.port,
                debounce_ms=args.debounce,
                prod=args.prod,
            )
        except TetherError as exc:
            print(f"  Error: {exc}", file=sys.stderr)
            sys.exit(1)


if __name__ == "__main__":
    main()
