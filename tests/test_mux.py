"""Tests for switchyard.mux — registration and dispatch."""

from typing import Any

import pytest

from switchyard.errors import PatternError
from switchyard.http.request import Request
from switchyard.http.writer import ResponseWriter, http_error
from switchyard.mux import Mux
from switchyard.testing import TestClient


async def hello(w: ResponseWriter, r: Request) -> None:
    await w.write("hello world")


def require_admin(w: ResponseWriter, r: Request):
    if r.user != "admin":
        return http_error(w, "", 401)
    return None


class TestParameters:
    async def test_person_scenario(self) -> None:
        mux = Mux()
        seen: dict[str, Any] = {}

        async def person(w: ResponseWriter, r: Request) -> None:
            seen.update(last=r.query.get("last"), first=r.query.get("first"), learn=r.query.get("learn"))
            await w.write("ok")

        mux.get("/person/:last/:first", person)

        async with TestClient(mux) as client:
            response = await client.get("/person/lastname/firstname?learn=golang")

        assert response.status == 200
        assert seen == {"last": "lastname", "first": "firstname", "learn": "golang"}

    async def test_n_params_populated_without_disturbing_query(self) -> None:
        mux = Mux()
        captured: dict[str, list[str]] = {}

        async def handler(w: ResponseWriter, r: Request) -> None:
            captured.update({k: r.query.get_list(k) for k in r.query})

        mux.handle("/a/:one/b/:two/:three", handler)

        async with TestClient(mux) as client:
            await client.get("/a/x/b/y/z?page=2&sort=asc")

        assert captured == {
            "page": ["2"],
            "sort": ["asc"],
            "one": ["x"],
            "two": ["y"],
            "three": ["z"],
        }

    async def test_path_param_added_next_to_query_value(self) -> None:
        mux = Mux()
        values: list[str] = []

        async def handler(w: ResponseWriter, r: Request) -> None:
            values.extend(r.query.get_list("id"))

        mux.get("/user/:id", handler)

        async with TestClient(mux) as client:
            await client.get("/user/42?id=7")

        assert values == ["7", "42"]

    async def test_regex_param(self) -> None:
        mux = Mux()

        async def user(w: ResponseWriter, r: Request) -> None:
            await w.write(f"user {r.query['id']}")

        mux.get("/user/:id([0-9]+)", user)

        async with TestClient(mux) as client:
            ok = await client.get("/user/42")
            missing = await client.get("/user/abc")

        assert ok.status == 200
        assert ok.text == "user 42"
        assert missing.status == 404

    async def test_regex_rejection_falls_through_to_next_route(self) -> None:
        mux = Mux()

        async def numeric(w: ResponseWriter, r: Request) -> None:
            await w.write("numeric")

        async def named(w: ResponseWriter, r: Request) -> None:
            await w.write(f"named {r.query['name']}")

        mux.get("/user/:id([0-9]+)", numeric)
        mux.get("/user/:name", named)

        async with TestClient(mux) as client:
            assert (await client.get("/user/42")).text == "numeric"
            assert (await client.get("/user/abc")).text == "named abc"


class TestNotFound:
    async def test_empty_mux(self) -> None:
        async with TestClient(Mux()) as client:
            response = await client.get("/")
        assert response.status == 404
        assert response.text == "404 page not found\n"

    async def test_no_side_effects(self) -> None:
        mux = Mux()
        calls: list[str] = []

        def record(w: ResponseWriter, r: Request) -> None:
            calls.append(r.path)

        mux.get("/user/:id", record)
        mux.filter("/user/:id", record)
        mux.filter("/admin", record)

        async with TestClient(mux) as client:
            response = await client.get("/nothing/here")

        assert response.status == 404
        assert calls == []

    async def test_partial_match_is_not_a_match(self) -> None:
        mux = Mux()
        mux.get("/:id", hello)

        async with TestClient(mux) as client:
            assert (await client.get("/admin")).status == 200
            assert (await client.get("/admin/profile")).status == 404

    async def test_method_mismatch(self) -> None:
        mux = Mux()
        mux.post("/items", hello)

        async with TestClient(mux) as client:
            assert (await client.get("/items")).status == 404
            assert (await client.post("/items")).status == 200


class TestShortCircuit:
    async def test_writing_filter_stops_chain(self) -> None:
        mux = Mux()
        calls: list[str] = []

        async def first(w: ResponseWriter, r: Request) -> None:
            calls.append("first")
            await w.write("first marker")

        def second(w: ResponseWriter, r: Request) -> None:
            calls.append("second")

        async def handler(w: ResponseWriter, r: Request) -> None:
            calls.append("handler")
            await w.write("handler marker")

        mux.filter("/item/:id", first)
        mux.filter("/item/:id", second)
        mux.get("/item/:id", handler)

        async with TestClient(mux) as client:
            response = await client.get("/item/1")

        assert calls == ["first"]
        assert response.text == "first marker"

    async def test_status_only_counts_as_started(self) -> None:
        mux = Mux()
        calls: list[str] = []

        async def deny(w: ResponseWriter, r: Request) -> None:
            await w.write_header(403)

        def handler(w: ResponseWriter, r: Request) -> None:
            calls.append("handler")

        mux.use(deny)
        mux.get("/ok", handler)

        async with TestClient(mux) as client:
            response = await client.get("/ok")

        assert response.status == 403
        assert calls == []

    async def test_silent_filters_continue(self) -> None:
        mux = Mux()
        calls: list[str] = []

        def a(w: ResponseWriter, r: Request) -> None:
            calls.append("a")

        async def b(w: ResponseWriter, r: Request) -> None:
            calls.append("b")

        mux.use(a)
        mux.filter("/item/:id", b)
        mux.get("/item/:id", hello)

        async with TestClient(mux) as client:
            response = await client.get("/item/9")

        assert calls == ["a", "b"]
        assert response.text == "hello world"

    async def test_prefix_filter_runs_before_routes(self) -> None:
        mux = Mux()
        order: list[str] = []

        def prefix(w: ResponseWriter, r: Request) -> None:
            order.append("prefix")

        def route_filter(w: ResponseWriter, r: Request) -> None:
            order.append("route")

        mux.filter("/api/:id", route_filter)
        mux.filter("/api", prefix)
        mux.get("/api/:id", hello)

        async with TestClient(mux) as client:
            await client.get("/api/1")

        assert order == ["prefix", "route"]


class TestAuthScenario:
    async def test_rejected_without_credentials(self) -> None:
        mux = Mux()
        calls: list[str] = []

        async def ok(w: ResponseWriter, r: Request) -> None:
            calls.append("ok")
            await w.write("hello world")

        mux.filter("/", require_admin)
        mux.handle("/ok", ok)

        async with TestClient(mux) as client:
            denied = await client.get("/ok")
            assert denied.status == 401
            assert calls == []

            allowed = await client.get("/ok", auth=("admin", "secret"))
            assert allowed.status == 200
            assert allowed.text == "hello world"
            assert calls == ["ok"]


class TestRegistration:
    async def test_second_handler_replaces_first(self) -> None:
        mux = Mux()

        async def old(w: ResponseWriter, r: Request) -> None:
            await w.write("old")

        async def new(w: ResponseWriter, r: Request) -> None:
            await w.write("new")

        mux.handle("/v/:n", old)
        size = len(mux.routes)
        mux.handle("/v/:n", new)

        assert len(mux.routes) == size == 1
        async with TestClient(mux) as client:
            assert (await client.get("/v/1")).text == "new"

    def test_shortcuts_chain(self) -> None:
        mux = Mux()
        result = mux.get("/a", hello).post("/a", hello).put("/a", hello).patch("/a", hello)
        result.delete("/a", hello).head("/a", hello).options("/a", hello)

        assert result is mux
        assert len(mux.routes) == 1
        assert mux.routes[0].methods == frozenset(
            {"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"}
        )

    async def test_route_decorator(self) -> None:
        mux = Mux()

        @mux.route("/greet/:name", methods=["GET", "POST"])
        async def greet(w: ResponseWriter, r: Request) -> None:
            await w.write(f"hi {r.query['name']}")

        assert greet.__name__ == "greet"
        async with TestClient(mux) as client:
            assert (await client.get("/greet/ada")).text == "hi ada"
            assert (await client.post("/greet/ada")).text == "hi ada"
            assert (await client.delete("/greet/ada")).status == 404

    def test_malformed_pattern_fails_at_registration(self) -> None:
        mux = Mux()
        with pytest.raises(PatternError):
            mux.get("/user/:id([0-9]+", hello)

    def test_nil_handler(self) -> None:
        mux = Mux()
        with pytest.raises(TypeError, match="nil handler"):
            mux.handle("/", None)  # type: ignore[arg-type]
        with pytest.raises(TypeError):
            mux.filter("/", None)  # type: ignore[arg-type]

    async def test_registration_closed_after_serving(self) -> None:
        mux = Mux()
        mux.get("/", hello)
        async with TestClient(mux) as client:
            await client.get("/")
        with pytest.raises(RuntimeError):
            mux.get("/late", hello)


class TestMatchAllInOrder:
    async def test_filter_only_route_then_handler_route(self) -> None:
        mux = Mux()
        seen: list[str] = []

        def catch_all(w: ResponseWriter, r: Request) -> None:
            seen.append(f"catch-all {r.query.get('anything')}")

        async def specific(w: ResponseWriter, r: Request) -> None:
            await w.write("specific")

        mux.filter("/:anything", catch_all)
        mux.get("/home", specific)

        async with TestClient(mux) as client:
            response = await client.get("/home")

        assert seen == ["catch-all home"]
        assert response.text == "specific"

    async def test_first_handler_ends_scan(self) -> None:
        mux = Mux()
        calls: list[str] = []

        def first(w: ResponseWriter, r: Request) -> None:
            calls.append("first")

        def second(w: ResponseWriter, r: Request) -> None:
            calls.append("second")

        mux.get("/:a", first)
        mux.get("/:b", second)

        async with TestClient(mux) as client:
            response = await client.get("/x")

        assert calls == ["first"]
        assert response.status == 200

    async def test_sync_handler_without_write_is_200(self) -> None:
        mux = Mux()
        mux.get("/quiet", lambda w, r: None)

        async with TestClient(mux) as client:
            response = await client.get("/quiet")

        assert response.status == 200
        assert response.body == b""


class TestUseParam:
    async def test_param_filter(self) -> None:
        mux = Mux()

        async def forbid_admin(w: ResponseWriter, r: Request) -> None:
            if r.query.get("id") == "admin":
                await http_error(w, "", 401)

        mux.get("/", hello)
        mux.get("/:id", hello)
        mux.use_param("id", forbid_admin)

        async with TestClient(mux) as client:
            assert (await client.get("/")).status == 200
            assert (await client.get("/guest")).status == 200
            assert (await client.get("/admin")).status == 401

    async def test_skipped_without_param(self) -> None:
        mux = Mux()
        calls: list[str] = []

        def record(w: ResponseWriter, r: Request) -> None:
            calls.append(r.path)

        mux.get("/plain", hello)
        mux.use_param(":id", record)

        async with TestClient(mux) as client:
            await client.get("/plain")
            await client.get("/plain?id=3")

        assert calls == ["/plain"]

    async def test_guards_route_after_method_mismatch(self) -> None:
        mux = Mux()
        updated: list[str] = []

        async def forbid_admin(w: ResponseWriter, r: Request) -> None:
            if r.query.get("id") == "admin":
                await http_error(w, "", 401)

        async def update(w: ResponseWriter, r: Request) -> None:
            updated.extend(r.query.get_list("id"))
            await w.write("updated")

        mux.get("/:slug", lambda w, r: None)
        mux.post("/:id", update)
        mux.use_param("id", forbid_admin)

        async with TestClient(mux) as client:
            denied = await client.post("/admin")
            allowed = await client.post("/guest")

        assert denied.status == 401
        assert allowed.text == "updated"
        assert updated == ["guest"]

    async def test_guards_route_after_filter_only_route(self) -> None:
        mux = Mux()

        async def forbid_admin(w: ResponseWriter, r: Request) -> None:
            if r.query.get("id") == "admin":
                await http_error(w, "", 401)

        mux.filter("/:anything", lambda w, r: None)
        mux.get("/:id", lambda w, r: None)
        mux.use_param("id", forbid_admin)

        async with TestClient(mux) as client:
            assert (await client.get("/admin")).status == 401
            assert (await client.get("/guest")).status == 200

    async def test_not_run_when_no_handler_answers(self) -> None:
        mux = Mux()
        calls: list[str] = []

        def record(w: ResponseWriter, r: Request) -> None:
            calls.append(r.path)

        mux.post("/:id", hello)
        mux.use_param("id", record)

        async with TestClient(mux) as client:
            response = await client.get("/admin")

        assert response.status == 404
        assert calls == []


class TestFailures:
    async def test_handler_exception_propagates(self) -> None:
        mux = Mux()

        def boom(w: ResponseWriter, r: Request) -> None:
            raise ValueError("boom")

        mux.get("/boom", boom)

        async with TestClient(mux) as client:
            with pytest.raises(ValueError, match="boom"):
                await client.get("/boom")


class TestLifespan:
    async def test_startup_freezes(self) -> None:
        mux = Mux()
        mux.get("/", hello)
        messages = iter([{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}])
        sent: list[dict[str, Any]] = []

        async def receive() -> dict[str, Any]:
            return next(messages)

        async def send(message: dict[str, Any]) -> None:
            sent.append(message)

        await mux({"type": "lifespan"}, receive, send)

        assert [m["type"] for m in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]
        assert mux.table.frozen is True
