"""Batch processor: turns a list of raw JSON-RPC envelopes into replies.

Elements are handled one after another, in order.  Every element gets
exactly one reply and a failure in one element never stops the rest of
the batch.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from jayrpc.config import ServerOptions
from jayrpc.errors import (
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    build_error_envelope,
    resolve_error_info,
)
from jayrpc.jsonrpc import JsonRpcRequest, JsonRpcResponse
from jayrpc.middleware import MiddlewareChain
from jayrpc.registry import Registry
from jayrpc.utils import maybe_await
from jayrpc.validation import validate_params

log = logging.getLogger(__name__)

Reply = dict[str, Any] | list[dict[str, Any]]


class BatchProcessor:
    def __init__(
        self,
        registry: Registry,
        middleware: MiddlewareChain,
        options: ServerOptions | None = None,
    ) -> None:
        self.registry = registry
        self.middleware = middleware
        self.options = options or ServerOptions()

    # -- Public API ----------------------------------------------------
    async def process(self, requests: Any, state: dict[str, Any]) -> Reply:
        """Process a batch and return one reply object, or a list of them.

        A batch with a single element collapses to a bare object.
        """
        if not isinstance(requests, list):
            requests = [requests]

        replies = []
        for index, raw in enumerate(requests):
            replies.append(await self._process_one(index, raw, state))

        if len(replies) == 1:
            return replies[0]
        return replies

    # -- Internals -----------------------------------------------------
    def _error(self, exc: Exception, req_id: Any) -> JsonRpcResponse:
        code, message = resolve_error_info(exc, self.options.error_class_to_code)
        return JsonRpcResponse.fail(req_id, code, message)

    async def _process_one(
        self, index: int, raw: Any, state: dict[str, Any]
    ) -> dict[str, Any]:
        request = JsonRpcRequest.from_raw(raw)
        # Requests without an id are answered with their batch position.
        req_id = request.id if request.id is not None else index
        version = self.options.protocol_version

        if not request.is_object or request.jsonrpc != version:
            return build_error_envelope("Unknown jsonrpc version", INVALID_REQUEST, req_id)

        if not isinstance(request.method, str):
            return build_error_envelope("Invalid method", INVALID_REQUEST, req_id)

        definition = self.registry.lookup(request.method)
        if definition is None:
            return build_error_envelope("Method not found", METHOD_NOT_FOUND, req_id)

        schema = getattr(definition, "params_schema", None)
        if schema:
            try:
                messages = validate_params(schema, request.params)
            except Exception as exc:
                log.exception("validation of %r failed (id=%s)", request.method, req_id)
                return self._error(exc, req_id).to_dict()
            if messages:
                # Parameter errors are sent without an id.
                return build_error_envelope(messages, INVALID_PARAMS)

        response = JsonRpcResponse(id=req_id, jsonrpc=version)

        try:
            procedure = definition(request.params, state)
            await self.middleware.before_call(procedure, raw)
            response.result = await maybe_await(procedure.call())
        except Exception as exc:
            log.exception("procedure %r failed (id=%s)", request.method, req_id)
            response = self._error(exc, req_id)

        try:
            await self.middleware.after_call(definition, response)
        except Exception as exc:
            log.exception("after_call failed for %r (id=%s)", request.method, req_id)
            response = self._error(exc, req_id)

        reply = response.to_dict()
        try:
            json.dumps(reply)
        except (TypeError, ValueError) as exc:
            log.exception("reply of %r is not JSON serializable (id=%s)", request.method, req_id)
            reply = self._error(exc, req_id).to_dict()
        return reply
