"""Example procedures and middleware.

``build_server()`` returns a ``JsonRpcServer`` with everything below
registered; the tests run against it in-process.

Run directly::

    python -m jayrpc.demo --port 8100
"""

from __future__ import annotations

import argparse
import logging
import os
from typing import Any

from jayrpc.config import DEFAULT_HOST, DEFAULT_PORT, ServerOptions
from jayrpc.errors import ObjectNotFound, Unauthorized
from jayrpc.middleware import Middleware
from jayrpc.procedure import Procedure
from jayrpc.server import JsonRpcServer
from jayrpc.utils import get_bearer_token

log = logging.getLogger(__name__)

USERS = {
    "secret-token": {"id": 1, "name": "admin"},
}


# ── Class-based procedures ───────────────────────────────────────────


class Ping(Procedure):
    name = "ping"

    async def call(self) -> str:
        return "pong"


class Add(Procedure):
    """Add two numbers."""

    name = "add"
    params_schema = {
        "type": "object",
        "properties": {
            "a": {"type": "number"},
            "b": {"type": "number"},
        },
        "required": ["a", "b"],
    }

    async def call(self) -> float:
        return self.params["a"] + self.params["b"]


class WhoAmI(Procedure):
    """Return the user attached to the request state by ``BearerAuth``."""

    name = "whoami"

    async def call(self) -> dict:
        user = self.state.get("user")
        if user is None:
            raise Unauthorized("Authentication required")
        return user


class GetUser(Procedure):
    name = "users.get"
    params_schema = {
        "type": "object",
        "properties": {"id": {"type": "integer"}},
        "required": ["id"],
    }

    def call(self) -> dict:
        for user in USERS.values():
            if user["id"] == self.params["id"]:
                return user
        raise ObjectNotFound(f"User {self.params['id']} not found")


# ── Middleware ───────────────────────────────────────────────────────


class BearerAuth(Middleware):
    """Attach the user matching the bearer token to the request state."""

    async def on_request(self, request: Any, state: dict[str, Any]) -> None:
        token = get_bearer_token(request)
        if token is not None:
            state["user"] = USERS.get(token)


class AccessLog(Middleware):
    async def after_call(self, definition: Any, response: Any) -> None:
        log.info(
            "rpc %s(id=%s) %s",
            definition.name,
            response.id,
            "ok" if response.ok else f"error {response.error.code}",
        )


# ── Server factory ───────────────────────────────────────────────────


def build_server(
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    options: ServerOptions | None = None,
) -> JsonRpcServer:
    server = JsonRpcServer(host, port, options or ServerOptions.from_env())
    server.register_procedure([Ping, Add, WhoAmI, GetUser])

    @server.registry.procedure("echo")
    async def echo(params: Any, state: dict[str, Any]) -> Any:
        """Return params unchanged."""
        return params

    server.register_middleware([BearerAuth(), AccessLog()])
    return server


# ── Runnable entrypoint ──────────────────────────────────────────────


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="JayRPC demo server")
    parser.add_argument(
        "--host", type=str, default=os.getenv("JAYRPC_HOST", DEFAULT_HOST)
    )
    parser.add_argument(
        "--port", type=int, default=int(os.getenv("JAYRPC_PORT", DEFAULT_PORT))
    )
    parser.add_argument("--log-level", type=str, default="info")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    build_server(args.host, args.port).listen(log_level=args.log_level)


if __name__ == "__main__":
    main()
