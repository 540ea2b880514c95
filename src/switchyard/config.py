"""Mux configuration.

MuxConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class MuxConfig:
    """Mux configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = MuxConfig(port=3000, default_capture=r"[^/]+")
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    workers: int = 1
    log_level: str = "info"

    # Routing
    default_capture: str = r"[^/]+"

    # Static files
    static_index: str = "index.html"

    # TLS (optional)
    ssl_certfile: str | None = None
    ssl_keyfile: str | None = None
