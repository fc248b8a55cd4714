"""Tests for the HTTP transport.

Uses ``httpx.ASGITransport`` to test the Starlette app in-process
without starting a real server.
"""

import json

import httpx
import pytest
from jayrpc.config import ServerOptions
from jayrpc.errors import Unauthorized
from jayrpc.middleware import Middleware
from jayrpc.server import JsonRpcServer


# ── Unary / batch ────────────────────────────────────────────────────


@pytest.mark.anyio
async def test_ping(client):
    resp = await client.post("/", json={"jsonrpc": "2.0", "method": "ping", "id": "1"})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/json")
    assert resp.json() == {"id": "1", "jsonrpc": "2.0", "result": "pong"}


@pytest.mark.anyio
async def test_add(client):
    resp = await client.post(
        "/", json={"id": "x", "jsonrpc": "2.0", "method": "add", "params": {"a": 1, "b": 2}}
    )
    assert resp.json() == {"id": "x", "jsonrpc": "2.0", "result": 3}


@pytest.mark.anyio
async def test_echo(client):
    resp = await client.post(
        "/", json={"jsonrpc": "2.0", "method": "echo", "params": {"msg": "hi"}, "id": 2}
    )
    assert resp.json()["result"] == {"msg": "hi"}


@pytest.mark.anyio
async def test_batch(client):
    resp = await client.post(
        "/",
        json=[
            {"jsonrpc": "2.0", "method": "ping"},
            {"jsonrpc": "2.0", "method": "unknown"},
            {"jsonrpc": "2.0", "method": "add", "params": {"a": 1}},
        ],
    )
    assert resp.json() == [
        {"id": 0, "jsonrpc": "2.0", "result": "pong"},
        {"id": 1, "error": {"code": -32601, "message": "Method not found"}},
        {"error": {"code": -32602, "message": "'b' is a required property"}},
    ]


@pytest.mark.anyio
async def test_library_error_code(client):
    resp = await client.post(
        "/", json={"jsonrpc": "2.0", "method": "users.get", "params": {"id": 99}, "id": 4}
    )
    assert resp.json() == {"id": 4, "error": {"code": -32002, "message": "User 99 not found"}}


# ── Transport-level rejections ───────────────────────────────────────


@pytest.mark.anyio
async def test_get_rejected(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert resp.json() == {
        "error": {"code": -32600, "message": "Request method can be POST only"}
    }


@pytest.mark.anyio
async def test_wrong_content_type(client):
    resp = await client.post(
        "/", content=b'{"jsonrpc": "2.0", "method": "ping"}', headers={"content-type": "text/plain"}
    )
    assert resp.json() == {"error": {"code": -32600, "message": "Invalid content type"}}


@pytest.mark.anyio
async def test_content_type_with_charset(client):
    resp = await client.post(
        "/",
        content=b'{"jsonrpc": "2.0", "method": "ping", "id": 1}',
        headers={"content-type": "application/json; charset=utf-8"},
    )
    assert resp.json()["result"] == "pong"


@pytest.mark.anyio
@pytest.mark.parametrize("body", [b"not json", b'{"jsonrpc": "2.0", "method": "\xff\xfe"}'])
async def test_parse_error(client, body):
    resp = await client.post(
        "/", content=body, headers={"content-type": "application/json"}
    )
    assert resp.json() == {
        "error": {"code": -32700, "message": "JSON from request can not be parsed"}
    }


@pytest.mark.anyio
@pytest.mark.parametrize("body", [b"[]", b"null"])
async def test_empty_batch(client, body):
    resp = await client.post("/", content=body, headers={"content-type": "application/json"})
    assert resp.json() == {"error": {"code": -32600, "message": "No one request found"}}


@pytest.mark.anyio
async def test_invalid_version(client):
    resp = await client.post("/", json={"jsonrpc": "1.0", "method": "ping", "id": "v"})
    assert resp.json()["error"]["code"] == -32600


# ── Middleware at the transaction boundary ───────────────────────────


@pytest.mark.anyio
async def test_bearer_auth_populates_state(client):
    payload = {"jsonrpc": "2.0", "method": "whoami", "id": 1}
    resp = await client.post("/", json=payload, headers={"authorization": "Bearer secret-token"})
    assert resp.json()["result"] == {"id": 1, "name": "admin"}

    resp = await client.post("/", json=payload)
    assert resp.json()["error"] == {"code": 1, "message": "Authentication required"}


def _app_with(*middlewares, procedures=(), options=None):
    server = JsonRpcServer(options=options)
    server.register_procedure(list(procedures))
    server.register_middleware(list(middlewares))
    return server


async def _post(server, payload, **kwargs):
    transport = httpx.ASGITransport(app=server.app)  # type: ignore[arg-type]
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        return await c.post("/", json=payload, **kwargs)


@pytest.mark.anyio
async def test_on_request_failure_aborts_transaction():
    calls = []

    class Reject(Middleware):
        async def on_request(self, request, state):
            raise Unauthorized("go away")

        async def before_call(self, procedure, request):
            calls.append("before_call")

    server = _app_with(Reject())

    @server.registry.procedure("track")
    def track(params, state):
        calls.append("track")

    resp = await _post(server, [{"jsonrpc": "2.0", "method": "track"}] * 2)
    assert resp.json() == {"error": {"code": 1, "message": "go away"}}
    assert calls == []


@pytest.mark.anyio
async def test_state_is_fresh_per_transaction():
    states = []

    class Capture(Middleware):
        async def on_request(self, request, state):
            assert state == {}
            state["n"] = len(states)
            states.append(state)

    server = _app_with(Capture())

    @server.registry.procedure("n")
    def n(params, state):
        return state["n"]

    r1 = await _post(server, {"jsonrpc": "2.0", "method": "n", "id": "a"})
    r2 = await _post(server, {"jsonrpc": "2.0", "method": "n", "id": "b"})
    assert r1.json()["result"] == 0
    assert r2.json()["result"] == 1
    assert states[0] is not states[1]


@pytest.mark.anyio
async def test_on_response_can_set_headers():
    class Header(Middleware):
        async def on_response(self, response, state):
            response.headers["x-request-count"] = str(state.get("count", 0))

    class Count(Middleware):
        async def on_request(self, request, state):
            state["count"] = 7

    server = _app_with(Header(), Count())

    @server.registry.procedure("ping")
    def ping(params, state):
        return "pong"

    resp = await _post(server, {"jsonrpc": "2.0", "method": "ping", "id": 1})
    assert resp.headers["x-request-count"] == "7"
    assert resp.json()["result"] == "pong"


@pytest.mark.anyio
async def test_on_response_failure_returns_error():
    class Lookup(Exception):
        pass

    class Explode(Middleware):
        async def on_response(self, response, state):
            raise Lookup("response hook failed")

    server = _app_with(Explode(), options=ServerOptions(error_class_to_code=[(Lookup, -32002)]))

    @server.registry.procedure("ping")
    def ping(params, state):
        return "pong"

    resp = await _post(server, [{"jsonrpc": "2.0", "method": "ping"}] * 2)
    assert resp.json() == {"error": {"code": -32002, "message": "response hook failed"}}


@pytest.mark.anyio
async def test_preserialized_reply_passes_through():
    server = _app_with()

    async def process(requests, state):
        return '{"raw": true}'

    server.processor.process = process
    resp = await _post(server, {"jsonrpc": "2.0", "method": "anything"})
    assert resp.content == b'{"raw": true}'
    assert json.loads(resp.content) == {"raw": True}


@pytest.mark.anyio
async def test_custom_path():
    server = JsonRpcServer(path="/rpc")

    @server.registry.procedure("ping")
    def ping(params, state):
        return "pong"

    transport = httpx.ASGITransport(app=server.app)  # type: ignore[arg-type]
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        resp = await c.post("/rpc", json={"jsonrpc": "2.0", "method": "ping", "id": 1})
    assert resp.json()["result"] == "pong"
