"""``switchyard run`` — serve a mux with pounce."""

import argparse
import sys

from switchyard.cli._resolve import resolve_mux


def run_server(args: argparse.Namespace) -> None:
    """Resolve ``args.mux`` and serve it; CLI flags override its config."""
    try:
        mux = resolve_mux(args.mux)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    mux.run(args.host, args.port, certfile=args.certfile, keyfile=args.keyfile)
