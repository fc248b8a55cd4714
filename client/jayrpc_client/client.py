"""Thin async JSON-RPC 2.0 client.

* ``call(method, params)`` → unary result
* ``batch(calls)``         → one ``BatchResult`` per call, in call order

Uses ``httpx.AsyncClient`` with connection pooling and retries
connection-level failures with ``tenacity``.  **Never** imports the
server side beyond the wire models.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Iterable

import httpx
from jayrpc.jsonrpc import DEFAULT_PROTOCOL_VERSION, JsonRpcError, JsonRpcRequest, JsonRpcResponse
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

log = logging.getLogger(__name__)


class RpcCallError(Exception):
    """Raised when the server returns a JSON-RPC error."""

    def __init__(self, error: JsonRpcError) -> None:
        self.error = error
        super().__init__(f"[{error.code}] {error.message}")


@dataclass(slots=True)
class BatchResult:
    """Outcome of one call of a batch."""

    method: str
    result: Any = None
    error: JsonRpcError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        if self.error is not None:
            raise RpcCallError(self.error)
        return self.result


class RpcClient:
    """Async client that talks JSON-RPC 2.0 over HTTP.

    Parameters
    ----------
    base_url : str
        Server origin, e.g. ``http://127.0.0.1:8100``.
    path : str
        URL path of the RPC endpoint.
    timeout : float
        Default request timeout in seconds.
    max_retries : int
        Max connection-level retries.
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8100",
        path: str = "/",
        timeout: float = 30.0,
        max_retries: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.path = path
        self.max_retries = max_retries
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    # -- Lifecycle -----------------------------------------------------

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "RpcClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    # -- Internal helpers ----------------------------------------------

    def _get_retrier(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=0.5, max=10),
            retry=retry_if_exception_type((httpx.NetworkError, httpx.TimeoutException)),
            reraise=True,
        )

    async def _post(self, payload: Any) -> Any:
        async for attempt in self._get_retrier():
            with attempt:
                resp = await self._client.post(self.path, json=payload)
                resp.raise_for_status()
        return resp.json()

    @staticmethod
    def _new_request(method: str, params: dict[str, Any] | None) -> JsonRpcRequest:
        return JsonRpcRequest(
            method=method,
            params=params,
            id=uuid.uuid4().hex,
            jsonrpc=DEFAULT_PROTOCOL_VERSION,
        )

    # -- Unary RPC -----------------------------------------------------

    async def call(self, method: str, params: dict[str, Any] | None = None) -> Any:
        """Send one request and return its result.

        Raises ``RpcCallError`` if the server returns a JSON-RPC error.
        """
        req = self._new_request(method, params)
        log.debug("rpc → %s(id=%s)", method, req.id)

        data = await self._post(req.to_dict())
        if isinstance(data, list):
            data = data[0]

        resp = JsonRpcResponse.from_dict(data)
        if resp.error is not None:
            raise RpcCallError(resp.error)
        return resp.result

    # -- Batch RPC -----------------------------------------------------

    async def batch(
        self, calls: Iterable[tuple[str, dict[str, Any] | None]]
    ) -> list[BatchResult]:
        """Send several ``(method, params)`` calls in one HTTP request.

        Replies are matched to calls by id.  A reply that carries no id
        (the server omits it for parameter errors) is matched by position.
        """
        requests = [self._new_request(method, params) for method, params in calls]
        if not requests:
            return []

        log.debug("rpc batch → %d call(s)", len(requests))
        data = await self._post([req.to_dict() for req in requests])
        if not isinstance(data, list):
            data = [data]

        replies = [JsonRpcResponse.from_dict(item) for item in data]
        by_id = {reply.id: reply for reply in replies if reply.id is not None}

        results = []
        for index, req in enumerate(requests):
            reply = by_id.get(req.id)
            if reply is None and index < len(replies):
                reply = replies[index]
            if reply is None:
                err = JsonRpcError(code=0, message="No response received")
                results.append(BatchResult(method=req.method, error=err))
            elif reply.error is not None:
                results.append(BatchResult(method=req.method, error=reply.error))
            else:
                results.append(BatchResult(method=req.method, result=reply.result))
        return results
