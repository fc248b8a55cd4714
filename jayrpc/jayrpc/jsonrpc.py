"""JSON-RPC 2.0 wire-format models.

Pure data — no I/O, no business logic.  The batch processor, the
transport and the client import these for (de)serialisation only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from jayrpc.errors import build_error_envelope

DEFAULT_PROTOCOL_VERSION = "2.0"

_MISSING: Any = object()


# ── Models ───────────────────────────────────────────────────────────
@dataclass(slots=True)
class JsonRpcError:
    """JSON-RPC 2.0 error object."""

    code: int
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


@dataclass(frozen=True, slots=True)
class JsonRpcRequest:
    """One parsed element of a batch.

    Parsing never fails: malformed elements keep whatever could be
    read and are rejected later by the batch processor, so that each
    element gets its own error response.
    """

    method: Any = None
    params: Any = None
    id: Any = None
    jsonrpc: Any = None
    is_object: bool = True

    # -- Convenience ---------------------------------------------------
    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"jsonrpc": self.jsonrpc, "method": self.method}
        if self.params is not None:
            d["params"] = self.params
        if self.id is not None:
            d["id"] = self.id
        return d

    @classmethod
    def from_raw(cls, raw: Any) -> "JsonRpcRequest":
        """Wrap a raw JSON value taken from a request body."""
        if not isinstance(raw, dict):
            return cls(is_object=False)
        return cls(
            method=raw.get("method"),
            params=raw.get("params"),
            id=raw.get("id"),
            jsonrpc=raw.get("jsonrpc"),
        )


@dataclass(slots=True)
class JsonRpcResponse:
    """Outbound response for one call.

    Mutable on purpose: ``after_call`` hooks receive it and may edit
    ``result`` or ``error`` in place.
    """

    id: Any = None
    result: Any = _MISSING
    error: JsonRpcError | None = None
    jsonrpc: str = DEFAULT_PROTOCOL_VERSION

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        if self.error is not None:
            d = build_error_envelope(self.error.message, self.error.code, self.id)
        else:
            d = {
                "id": self.id,
                "jsonrpc": self.jsonrpc,
                "result": None if self.result is _MISSING else self.result,
            }
        return d

    # -- Factories -----------------------------------------------------
    @classmethod
    def success(
        cls, req_id: Any, result: Any, jsonrpc: str = DEFAULT_PROTOCOL_VERSION
    ) -> "JsonRpcResponse":
        return cls(id=req_id, result=result, jsonrpc=jsonrpc)

    @classmethod
    def fail(cls, req_id: Any, code: int, message: str) -> "JsonRpcResponse":
        return cls(id=req_id, error=JsonRpcError(code=code, message=message))

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "JsonRpcResponse":
        """Parse one response object received from a server."""
        error = raw.get("error")
        if error is not None:
            return cls(
                id=raw.get("id"),
                error=JsonRpcError(
                    code=error.get("code", 0), message=error.get("message", "")
                ),
            )
        return cls(
            id=raw.get("id"),
            result=raw.get("result"),
            jsonrpc=raw.get("jsonrpc", DEFAULT_PROTOCOL_VERSION),
        )
