"""Hello World — the simplest switchyard app.

Demonstrates path parameters, a regex-constrained parameter, a prefix
filter that short-circuits, content negotiation, and static files.

Run:
    python app.py
"""

from pathlib import Path

from switchyard import Mux, Request, ResponseWriter, http_error, send

mux = Mux()


async def index(w: ResponseWriter, r: Request) -> None:
    await w.write("Hello, World!")


async def greet(w: ResponseWriter, r: Request) -> None:
    await w.write(f"Hello, {r.query['name']}!")


async def person(w: ResponseWriter, r: Request) -> None:
    await send(w, r, {"last": r.query["last"], "first": r.query["first"]})


async def require_admin(w: ResponseWriter, r: Request) -> None:
    if r.user != "admin":
        await http_error(w, "", 401)


async def dashboard(w: ResponseWriter, r: Request) -> None:
    await w.write("admin only")


mux.get("/", index)
mux.get("/greet/:name", greet)
mux.get("/person/:last([a-z]+)/:first([a-z]+)", person)
mux.filter("/admin", require_admin)
mux.get("/admin/dashboard", dashboard)
mux.static("/assets", Path(__file__).parent / "public")


if __name__ == "__main__":
    mux.run()
