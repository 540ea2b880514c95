"""Mux — the router object applications construct and own.

Registration happens during setup; the route table freezes on the first
request (or at ASGI lifespan startup) and is read lock-free afterwards.
"""

import logging
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from switchyard._internal.asgi import Receive, Scope, Send
from switchyard._internal.invoke import invoke
from switchyard._internal.types import Handler
from switchyard.config import MuxConfig
from switchyard.http.request import Request
from switchyard.http.writer import ResponseWriter
from switchyard.routing.pattern import has_params
from switchyard.routing.route import Route
from switchyard.routing.table import RouteTable
from switchyard.server.handler import handle_request
from switchyard.server.static import StaticFiles

logger = logging.getLogger("switchyard.routing")


def _require_handler(handler: Handler | None) -> Handler:
    if handler is None:
        msg = "switchyard: nil handler"
        raise TypeError(msg)
    return handler


class Mux:
    """Pattern-based request router and ASGI application.

    Usage::

        mux = Mux()

        async def show_user(w, r):
            await w.write(f"user {r.query['id']}")

        mux.get("/user/:id([0-9]+)", show_user)
        mux.use(require_login)
        mux.static("/assets", "./public")
        mux.run()

    Every route whose pattern matches the whole path is visited in
    registration order. Filters run before handlers; the first filter
    or handler that writes to the response ends the request.
    """

    __slots__ = ("_freeze_lock", "_table", "config")

    def __init__(self, config: MuxConfig | None = None) -> None:
        self.config = config or MuxConfig()
        if self.config.debug:
            logging.getLogger("switchyard").setLevel(logging.DEBUG)
        self._table = RouteTable(default_capture=self.config.default_capture)
        self._freeze_lock = threading.Lock()

    @property
    def table(self) -> RouteTable:
        return self._table

    @property
    def routes(self) -> tuple[Route, ...]:
        return self._table.routes

    # -- Handlers --

    def handle(self, pattern: str, handler: Handler, method: str | None = None) -> "Mux":
        """Register *handler* for *pattern*, for one method or for any.

        Registering the same pattern and method again replaces the
        earlier handler.
        """
        self._table.register(method, pattern, _require_handler(handler))
        return self

    def get(self, pattern: str, handler: Handler) -> "Mux":
        """Register a handler for GET requests."""
        return self.handle(pattern, handler, "GET")

    def post(self, pattern: str, handler: Handler) -> "Mux":
        """Register a handler for POST requests."""
        return self.handle(pattern, handler, "POST")

    def put(self, pattern: str, handler: Handler) -> "Mux":
        """Register a handler for PUT requests."""
        return self.handle(pattern, handler, "PUT")

    def patch(self, pattern: str, handler: Handler) -> "Mux":
        """Register a handler for PATCH requests."""
        return self.handle(pattern, handler, "PATCH")

    def delete(self, pattern: str, handler: Handler) -> "Mux":
        """Register a handler for DELETE requests."""
        return self.handle(pattern, handler, "DELETE")

    def head(self, pattern: str, handler: Handler) -> "Mux":
        """Register a handler for HEAD requests."""
        return self.handle(pattern, handler, "HEAD")

    def options(self, pattern: str, handler: Handler) -> "Mux":
        """Register a handler for OPTIONS requests."""
        return self.handle(pattern, handler, "OPTIONS")

    def route(
        self,
        pattern: str,
        *,
        methods: list[str] | None = None,
    ) -> Callable[[Handler], Handler]:
        """Decorator form of ``handle``.

        Without *methods* the handler answers any method::

            @mux.route("/person/:last/:first", methods=["GET"])
            async def person(w, r): ...
        """

        def decorator(func: Handler) -> Handler:
            for method in methods or [None]:
                self.handle(pattern, func, method)
            return func

        return decorator

    # -- Filters --

    def filter(self, pattern: str, fn: Handler) -> "Mux":
        """Register a filter.

        Parameterized patterns (``/user/:id``) attach the filter to that
        route; anything else is a path prefix matched with ``startswith``.
        """
        fn = _require_handler(fn)
        if has_params(pattern):
            self._table.register(None, pattern, fn, is_filter=True)
        else:
            self._table.add_prefix_filter(pattern, fn)
        return self

    def use(self, fn: Handler) -> "Mux":
        """Register a filter that runs for every request."""
        return self.filter("/", fn)

    def use_param(self, name: str, fn: Handler) -> "Mux":
        """Register a filter that runs when parameter *name* is present.

        Runs right before the handler of the route that answers the
        request, after that route has bound its path parameters, so both
        path and query-string values count::

            mux.get("/:id", show)
            mux.use_param("id", forbid_admin)
        """
        fn = _require_handler(fn)
        name = name.removeprefix(":")

        async def param_filter(w: ResponseWriter, r: Request) -> None:
            if r.query.get(name):
                await invoke(fn, w, r)

        param_filter.__name__ = f"use_param({name})"
        self._table.add_match_filter(param_filter)
        return self

    # -- Static files --

    def static(self, prefix: str, directory: str | Path) -> "Mux":
        """Serve files under *directory* for paths below *prefix*.

        Paths are cleaned before touching the filesystem, so ``..``
        segments cannot escape *directory*.
        """
        handler = StaticFiles(directory, prefix, index=self.config.static_index)
        pattern = prefix.rstrip("/") + "/:filepath(.*)"
        self.get(pattern, handler)
        self.head(pattern, handler)
        return self

    # -- Serving --

    def _ensure_frozen(self) -> None:
        """Freeze the route table exactly once, even under threaded workers."""
        if self._table.frozen:
            return
        with self._freeze_lock:
            if self._table.frozen:
                return
            self._table.freeze()
            logger.debug(
                "route table frozen: %d routes, %d prefix filters",
                len(self._table),
                len(self._table.prefix_filters),
            )

    def run(
        self,
        host: str | None = None,
        port: int | None = None,
        *,
        certfile: str | None = None,
        keyfile: str | None = None,
    ) -> None:
        """Serve the Mux, over TLS when a certificate and key are given."""
        from switchyard.server.serve import run_server

        self._ensure_frozen()
        run_server(
            self,
            host or self.config.host,
            port if port is not None else self.config.port,
            workers=self.config.workers,
            log_level=self.config.log_level,
            ssl_certfile=certfile or self.config.ssl_certfile,
            ssl_keyfile=keyfile or self.config.ssl_keyfile,
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return
        if scope["type"] != "http":
            return

        self._ensure_frozen()
        await handle_request(scope, receive, send, table=self._table)

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message: dict[str, Any] = dict(await receive())
            if message["type"] == "lifespan.startup":
                self._ensure_frozen()
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return
