"""Server startup — hands the Mux to a pounce ASGI server.

The Mux never binds sockets itself; this is the "start serving
connections on this interface" boundary.
"""

import logging

logger = logging.getLogger("switchyard.server")


def run_server(
    app: object,
    host: str,
    port: int,
    *,
    workers: int = 1,
    log_level: str = "info",
    ssl_certfile: str | None = None,
    ssl_keyfile: str | None = None,
) -> None:
    """Start a pounce server with the given ASGI app.

    Pounce's ``run()`` takes an import string, but here we hold a live
    Mux object, so ``pounce.Server`` is used directly.

    Args:
        app: ASGI callable (a switchyard Mux).
        host: Bind host address.
        port: Bind port number.
        workers: Worker count.
        log_level: Server log level.
        ssl_certfile: Certificate file; serves HTTPS together with *ssl_keyfile*.
        ssl_keyfile: Private key file for *ssl_certfile*.
    """
    if (ssl_certfile is None) != (ssl_keyfile is None):
        msg = "TLS needs both a certificate file and a key file."
        raise ValueError(msg)

    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=host,
        port=port,
        workers=workers,
        log_level=log_level,
        ssl_certfile=ssl_certfile,
        ssl_keyfile=ssl_keyfile,
    )
    scheme = "https" if ssl_certfile else "http"
    logger.info("serving on %s://%s:%d", scheme, host, port)
    Server(config, app).run()
