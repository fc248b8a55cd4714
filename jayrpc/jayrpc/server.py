"""Transport — Starlette ASGI app around the batch processor.

A single endpoint handles every HTTP method so that wrong methods and
content types are answered with a JSON-RPC error body instead of a
bare HTTP error.  Every RPC-level outcome is sent with status 200.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route

from jayrpc.config import DEFAULT_HOST, DEFAULT_PORT, ServerOptions
from jayrpc.errors import (
    INVALID_REQUEST,
    PARSE_ERROR,
    build_error_envelope,
    resolve_error_info,
)
from jayrpc.middleware import MiddlewareChain
from jayrpc.processor import BatchProcessor
from jayrpc.procedure import ProcedureDefinition
from jayrpc.registry import Registry

log = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json"
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


# ── Helpers ──────────────────────────────────────────────────────────


def _json_response(payload: Any) -> Response:
    return Response(json.dumps(payload), media_type=JSON_MEDIA_TYPE)


def _error_response(message: str, code: int) -> Response:
    """Build a top-level JSON-RPC error response (no id)."""
    return _json_response(build_error_envelope(message, code))


def _media_type(request: Request) -> str:
    content_type = request.headers.get("content-type", "")
    return content_type.split(";", 1)[0].strip().lower()


def _serialize(reply: Any) -> bytes:
    if isinstance(reply, str):
        return reply.encode("utf-8")
    return json.dumps(reply).encode("utf-8")


# ── RPC endpoint ─────────────────────────────────────────────────────


class RpcEndpoint:
    """ASGI endpoint bridging HTTP transactions to the batch processor."""

    def __init__(self, processor: BatchProcessor) -> None:
        self.processor = processor

    @property
    def middleware(self) -> MiddlewareChain:
        return self.processor.middleware

    def write_error(self, exc: Exception) -> Response:
        """Log *exc* and turn it into a top-level error response."""
        log.exception("rpc transaction failed")
        code, message = resolve_error_info(exc, self.processor.options.error_class_to_code)
        return _error_response(message, code)

    async def handle(self, request: Request) -> Response:
        if request.method != "POST":
            return _error_response("Request method can be POST only", INVALID_REQUEST)

        if _media_type(request) != JSON_MEDIA_TYPE:
            return _error_response("Invalid content type", INVALID_REQUEST)

        state: dict[str, Any] = {}

        try:
            await self.middleware.on_request(request, state)
        except Exception as exc:
            return self.write_error(exc)

        try:
            body = await request.body()
            requests = json.loads(body)
        except ValueError:
            return _error_response("JSON from request can not be parsed", PARSE_ERROR)
        except Exception as exc:
            return self.write_error(exc)

        if requests is None or requests == []:
            return _error_response("No one request found", INVALID_REQUEST)

        log.debug(
            "rpc ← batch of %d",
            len(requests) if isinstance(requests, list) else 1,
        )

        try:
            reply = await self.processor.process(requests, state)

            response = Response(media_type=JSON_MEDIA_TYPE)
            await self.middleware.on_response(response, state)

            response.body = _serialize(reply)
            response.headers["content-length"] = str(len(response.body))
            return response
        except Exception as exc:
            return self.write_error(exc)


# ── Server ───────────────────────────────────────────────────────────


class JsonRpcServer:
    """Procedures + middleware + options, served over HTTP.

    Parameters
    ----------
    host, port :
        Where ``listen()`` binds.
    options : ServerOptions
        Protocol version and error-class table.
    path : str
        URL path of the RPC endpoint.
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        options: ServerOptions | None = None,
        path: str = "/",
    ) -> None:
        self.host = host
        self.port = int(port)
        self.options = options or ServerOptions()
        self.path = path

        self.registry = Registry()
        self.middleware = MiddlewareChain()
        self.processor = BatchProcessor(self.registry, self.middleware, self.options)
        self._app: Starlette | None = None

    # -- Registration --------------------------------------------------
    def register_procedure(
        self, procedure: ProcedureDefinition | Iterable[ProcedureDefinition]
    ) -> None:
        self.registry.register(procedure)

    def register_middleware(self, middleware: Any | Iterable[Any]) -> None:
        self.middleware.register(middleware)

    # -- App factory ---------------------------------------------------
    def create_app(self) -> Starlette:
        return Starlette(
            debug=False,
            routes=[Route(self.path, RpcEndpoint(self.processor).handle, methods=ALL_METHODS)],
        )

    @property
    def app(self) -> Starlette:
        if self._app is None:
            self._app = self.create_app()
        return self._app

    # -- Serve ---------------------------------------------------------
    def listen(self, log_level: str = "info") -> None:
        """Start listening and serve forever."""
        import uvicorn

        log.info('Server start listening on "%s:%s" ...', self.host, self.port)
        uvicorn.run(self.app, host=self.host, port=self.port, log_level=log_level)
