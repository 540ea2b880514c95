"""Route table and prefix filter sets.

Routes are kept in registration order, which is also their match
priority. Matching is a linear scan; at this scale no index is needed.
"""

import logging
from collections.abc import Iterator

from switchyard._internal.types import ANY_METHOD, Handler
from switchyard.routing.pattern import DEFAULT_CAPTURE, compile_pattern
from switchyard.routing.route import Route

logger = logging.getLogger("switchyard.routing")


class RouteTable:
    """Insertion-ordered compiled routes plus prefix-keyed filters.

    Usage::

        table = RouteTable()
        table.register("GET", "/user/:id([0-9]+)", show_user)
        table.register(None, "/user/:id", load_user, is_filter=True)
        table.add_prefix_filter("/admin", require_admin)
        table.freeze()
    """

    __slots__ = (
        "_by_pattern",
        "_default_capture",
        "_frozen",
        "_match_filters",
        "_prefix_filters",
        "_routes",
    )

    def __init__(self, default_capture: str = DEFAULT_CAPTURE) -> None:
        self._default_capture = default_capture
        self._routes: list[Route] = []
        self._by_pattern: dict[str, Route] = {}
        self._prefix_filters: dict[str, list[Handler]] = {}
        # run right before the handling route's handler, after its params are bound
        self._match_filters: list[Handler] = []
        self._frozen = False

    def __len__(self) -> int:
        return len(self._routes)

    def __iter__(self) -> Iterator[Route]:
        return iter(self._routes)

    @property
    def routes(self) -> tuple[Route, ...]:
        return tuple(self._routes)

    @property
    def prefix_filters(self) -> dict[str, list[Handler]]:
        return self._prefix_filters

    @property
    def match_filters(self) -> tuple[Handler, ...]:
        return tuple(self._match_filters)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Stop accepting registrations. Dispatch reads the table lock-free."""
        self._frozen = True

    def _check_open(self) -> None:
        if self._frozen:
            msg = "Cannot register routes or filters after the mux has started serving."
            raise RuntimeError(msg)

    def register(
        self,
        method: str | None,
        pattern: str,
        handler: Handler,
        is_filter: bool = False,
    ) -> Route:
        """Attach *handler* to the route for *pattern*, compiling it if new.

        A filter is appended to the route's filter chain. A handler
        replaces any handler already registered for the same method.
        """
        self._check_open()
        key = (method or ANY_METHOD).upper()

        route = self._by_pattern.get(pattern)
        if route is None:
            route = Route(matcher=compile_pattern(pattern, self._default_capture))
            self._by_pattern[pattern] = route
            self._routes.append(route)
            logger.debug("compiled %r -> %s", pattern, route.matcher.regex.pattern)

        if is_filter:
            route.filters.append(handler)
        else:
            if key in route.handlers:
                logger.debug("replacing %s handler for %r", key, pattern)
            route.handlers[key] = handler
        return route

    def add_prefix_filter(self, prefix: str, handler: Handler) -> None:
        """Run *handler* for every request whose path starts with *prefix*."""
        self._check_open()
        self._prefix_filters.setdefault(prefix, []).append(handler)
        logger.debug("prefix filter on %r", prefix)

    def add_match_filter(self, handler: Handler) -> None:
        """Run *handler* once a route has matched and bound its parameters."""
        self._check_open()
        self._match_filters.append(handler)

    def filters_for(self, path: str) -> Iterator[Handler]:
        """Prefix filters that apply to *path*, in registration order."""
        for prefix, filters in self._prefix_filters.items():
            if path.startswith(prefix):
                yield from filters
