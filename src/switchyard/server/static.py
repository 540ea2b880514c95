"""Static file serving.

A handler that serves files from a directory for paths under a URL
prefix. Registered by ``Mux.static()`` as a catch-all route.

Security: the relative path is cleaned before it touches the
filesystem, then symlinks are resolved and the final path must still
be inside the configured directory.
"""

import mimetypes
import posixpath
from pathlib import Path

import anyio

from switchyard.http.request import Request
from switchyard.http.writer import ResponseWriter, not_found


def clean_path(path: str) -> str:
    """Lexically clean *path* as an absolute URL path.

    ``..`` elements cannot climb above the root: ``/../etc/passwd``
    cleans to ``/etc/passwd``.
    """
    cleaned = posixpath.normpath("/" + path)
    # normpath keeps a leading "//" (POSIX allows it to be special)
    return "/" + cleaned.lstrip("/")


class StaticFiles:
    """Handler that serves files from *directory* under *prefix*.

    Usage::

        mux.static("/assets", "./public")

        # or by hand
        mux.get("/assets/:filepath(.*)", StaticFiles("./public", "/assets"))
    """

    __slots__ = ("_directory", "_index", "_prefix")

    def __init__(self, directory: str | Path, prefix: str = "/", *, index: str = "index.html") -> None:
        self._directory = Path(directory).resolve()
        self._index = index
        self._prefix = "/" + prefix.strip("/") if prefix.strip("/") else ""

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def prefix(self) -> str:
        return self._prefix or "/"

    def resolve(self, request_path: str) -> Path | None:
        """Map a request path to a file inside the directory, or None.

        Touches the filesystem; call it from a worker thread when
        serving.
        """
        relative = request_path
        if request_path.startswith(self._prefix):
            relative = request_path[len(self._prefix) :]
        relative = clean_path(relative).lstrip("/")

        file_path = (self._directory / relative).resolve() if relative else self._directory
        if not file_path.is_relative_to(self._directory):
            return None
        if file_path.is_dir():
            file_path = file_path / self._index
        if not file_path.is_file():
            return None
        return file_path

    def _load(self, request_path: str) -> tuple[Path, bytes] | None:
        file_path = self.resolve(request_path)
        if file_path is None:
            return None
        return file_path, file_path.read_bytes()

    async def __call__(self, w: ResponseWriter, r: Request) -> None:
        loaded = await anyio.to_thread.run_sync(self._load, r.path)
        if loaded is None:
            await not_found(w)
            return

        file_path, body = loaded

        content_type, _ = mimetypes.guess_type(str(file_path))
        w.headers.set("content-type", content_type or "application/octet-stream")
        w.headers.set("content-length", str(len(body)))
        await w.write_header(200)
        if r.method != "HEAD":
            await w.write(body)
