"""Switchyard CLI — serve a mux and list its routes.

Entry point registered as ``switchyard`` in ``pyproject.toml``::

    [project.scripts]
    switchyard = "switchyard.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``switchyard`` command."""
    parser = argparse.ArgumentParser(
        prog="switchyard",
        description="Switchyard — a pattern-based HTTP request router.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- switchyard run ---------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Serve a mux")
    run_parser.add_argument("mux", help="Import string (e.g. myapp:mux)")
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument("--certfile", default=None, help="TLS certificate file")
    run_parser.add_argument("--keyfile", default=None, help="TLS private key file")

    # -- switchyard routes ------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List registered routes")
    routes_parser.add_argument("mux", help="Import string (e.g. myapp:mux)")

    args = parser.parse_args(argv)

    if args.command == "run":
        from switchyard.cli._run import run_server

        run_server(args)
    elif args.command == "routes":
        from switchyard.cli._routes import run_routes

        run_routes(args)
    else:
        parser.print_help()
        sys.exit(1)
