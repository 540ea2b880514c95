"""``switchyard routes`` — list registered routes.

Prints every route in match order with its methods, pattern, handlers
and filter count, followed by the prefix filters.
"""

import argparse
import sys

from switchyard.cli._resolve import resolve_mux


def _name(fn: object) -> str:
    return getattr(fn, "__name__", type(fn).__name__)


def run_routes(args: argparse.Namespace) -> None:
    """List registered routes for a switchyard mux."""
    try:
        mux = resolve_mux(args.mux)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    routes = mux.routes
    if not routes and not mux.table.prefix_filters:
        print("No routes registered.")
        return

    # Build rows: (methods, pattern, handlers, filters)
    rows: list[tuple[str, str, str, str]] = []
    for route in routes:
        methods = ", ".join(sorted(route.methods)) or "-"
        handlers = ", ".join(sorted({_name(h) for h in route.handlers.values()})) or "-"
        rows.append((methods, route.pattern, handlers, str(len(route.filters))))

    max_methods = max([len(r[0]) for r in rows] + [6])  # "METHOD" header
    max_pattern = max([len(r[1]) for r in rows] + [7])  # "PATTERN" header
    max_handler = max([len(r[2]) for r in rows] + [7])  # "HANDLER" header

    fmt = f"{{:<{max_methods}}}  {{:<{max_pattern}}}  {{:<{max_handler}}}  {{}}"
    print(fmt.format("METHOD", "PATTERN", "HANDLER", "FILTERS"))
    print("-" * min(max_methods + max_pattern + max_handler + 13, 80))
    for row in rows:
        print(fmt.format(*row))

    for prefix, filters in mux.table.prefix_filters.items():
        print(f"prefix {prefix!r}: {', '.join(_name(f) for f in filters)}")
