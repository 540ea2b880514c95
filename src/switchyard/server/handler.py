"""ASGI handler — runs one request through filters and routes.

The only component that turns ASGI scope/messages into switchyard
types on the request path. Control flow between filters is carried by
``ResponseWriter.started`` alone: after every filter or handler the
dispatcher checks it and stops once the response has begun.
"""

import logging
from collections.abc import Iterable

from switchyard._internal.asgi import Receive, Scope, Send
from switchyard._internal.invoke import invoke
from switchyard._internal.types import Handler
from switchyard.http.request import Request
from switchyard.http.writer import ResponseWriter, not_found
from switchyard.routing.table import RouteTable

logger = logging.getLogger("switchyard.server")


async def _run_chain(filters: Iterable[Handler], w: ResponseWriter, r: Request) -> bool:
    """Run *filters* in order. Returns True once one of them has responded."""
    for fn in filters:
        await invoke(fn, w, r)
        if w.started:
            return True
    return False


async def dispatch(table: RouteTable, w: ResponseWriter, request: Request) -> bool:
    """Dispatch *request* against *table*.

    Prefix filters run first. Then every route whose pattern matches the
    full path is visited in registration order: its parameters are
    added to ``request.query`` and its filters run. The first route with
    a handler for the request method ends the scan; the match filters
    run right before that handler, once its parameters are bound.
    Returns False when no handler ran and nothing was written (the
    not-found case).
    """
    path = request.path

    if await _run_chain(table.filters_for(path), w, request):
        return True

    for route in table:
        params = route.matcher.match(path)
        if params is None:
            continue
        request.query.extend(params)

        if await _run_chain(route.filters, w, request):
            return True

        handler = route.handler_for(request.method)
        if handler is not None:
            if await _run_chain(table.match_filters, w, request):
                return True
            await invoke(handler, w, request)
            return True

    return w.started


async def handle_request(scope: Scope, receive: Receive, send: Send, *, table: RouteTable) -> None:
    """Process a single HTTP request through the full pipeline.

    Exceptions raised by filters or handlers propagate to the ASGI
    server; nothing here retries or cleans up a partial response.
    """
    request = Request.from_asgi(scope, receive)
    w = ResponseWriter(send)

    if not await dispatch(table, w, request):
        logger.debug("404 %s %s", request.method, request.path)
        await not_found(w)

    await w.finish()
