"""Compiled route — one per distinct literal pattern."""

from dataclasses import dataclass, field

from switchyard._internal.types import ANY_METHOD, Handler
from switchyard.routing.pattern import CompiledPattern


@dataclass(slots=True)
class Route:
    """A pattern with its handlers and pattern-scoped filters.

    Mutable while the Mux is being configured: re-registering the same
    pattern replaces a handler or appends a filter on this object rather
    than adding a second route.
    """

    matcher: CompiledPattern
    handlers: dict[str, Handler] = field(default_factory=dict)
    filters: list[Handler] = field(default_factory=list)

    @property
    def pattern(self) -> str:
        return self.matcher.pattern

    @property
    def param_names(self) -> tuple[str, ...]:
        return self.matcher.param_names

    @property
    def methods(self) -> frozenset[str]:
        return frozenset(self.handlers)

    def handler_for(self, method: str) -> Handler | None:
        """Handler for *method*, falling back to one registered for any method."""
        handler = self.handlers.get(method)
        if handler is None:
            handler = self.handlers.get(ANY_METHOD)
        return handler
