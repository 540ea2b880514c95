"""Switchyard — a pattern-based HTTP request router for ASGI.

Express-style patterns, path parameters merged into the query
parameters, and filters that short-circuit by responding.

Basic usage::

    from switchyard import Mux

    mux = Mux()

    async def person(w, r):
        await w.write(f"{r.query['first']} {r.query['last']}")

    mux.get("/person/:last/:first", person)
    mux.get("/user/:id([0-9]+)", show_user)
    mux.use(require_login)

    mux.run()
"""

__version__ = "0.1.0"
__all__ = [
    "ConfigurationError",
    "Mux",
    "MuxConfig",
    "PatternError",
    "Request",
    "ResponseWriter",
    "SwitchyardError",
    "http_error",
    "not_found",
    "read_json",
    "read_xml",
    "send",
    "send_json",
    "send_xml",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import switchyard`` fast while providing a clean top-level API.
    """
    if name == "Mux":
        from switchyard.mux import Mux

        return Mux

    if name == "MuxConfig":
        from switchyard.config import MuxConfig

        return MuxConfig

    if name == "Request":
        from switchyard.http.request import Request

        return Request

    if name in ("ResponseWriter", "http_error", "not_found"):
        from switchyard.http import writer as _writer

        return getattr(_writer, name)

    if name in ("send", "send_json", "send_xml", "read_json", "read_xml"):
        from switchyard.server import negotiation as _negotiation

        return getattr(_negotiation, name)

    if name in ("SwitchyardError", "ConfigurationError", "PatternError"):
        from switchyard import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
