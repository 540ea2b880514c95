"""Response writer — the response state tracker.

Wraps the ASGI ``send`` callable and records whether the response has
begun. The dispatcher polls ``started`` after every filter and handler;
a filter short-circuits the chain simply by writing something.
"""

import logging

from switchyard._internal.asgi import Send
from switchyard.http.headers import MutableHeaders

logger = logging.getLogger("switchyard.server")


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


class ResponseWriter:
    """Outbound response for a single request.

    Headers stay editable until the first ``write_header`` or ``write``;
    that first call flips ``started`` before anything reaches the
    transport.

    Usage::

        async def hello(w: ResponseWriter, r: Request) -> None:
            w.headers["content-type"] = "text/plain; charset=utf-8"
            await w.write("hello world")
    """

    __slots__ = ("_finished", "_send", "headers", "started", "status")

    def __init__(self, send: Send) -> None:
        self._send = send
        self._finished = False
        self.headers = MutableHeaders()
        self.started = False
        self.status = 0

    async def write_header(self, status: int) -> None:
        """Send the status line and headers. Only the first call counts."""
        if self.started:
            logger.debug("superfluous write_header(%d), already sent %d", status, self.status)
            return
        self.started = True
        self.status = status
        await self._send(
            {
                "type": "http.response.start",
                "status": status,
                "headers": self.headers.raw,
            }
        )

    async def write(self, data: str | bytes) -> None:
        """Write a body chunk, sending a 200 status line first if needed."""
        if not self.started:
            await self.write_header(200)
        if isinstance(data, str):
            data = data.encode("utf-8")
        if not data or not _body_allowed(self.status):
            return
        await self._send({"type": "http.response.body", "body": data, "more_body": True})

    async def finish(self) -> None:
        """Close the response. Idempotent; implies 200 if nothing was written."""
        if self._finished:
            return
        if not self.started:
            await self.write_header(200)
        self._finished = True
        await self._send({"type": "http.response.body", "body": b"", "more_body": False})


async def http_error(w: ResponseWriter, message: str, status: int) -> None:
    """Reply with a plain-text error message and status code.

    Callers should not write anything else to *w* afterwards.
    """
    w.headers.set("content-type", "text/plain; charset=utf-8")
    w.headers.set("x-content-type-options", "nosniff")
    await w.write_header(status)
    await w.write(message + "\n")


async def not_found(w: ResponseWriter) -> None:
    """Reply with a 404 not found error."""
    await http_error(w, "404 page not found", 404)
