"""JSON-RPC error codes, error envelopes and exception → code resolution."""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Any, Callable, Iterable, Sequence, Union

log = logging.getLogger(__name__)


# ── Error codes ──────────────────────────────────────────────────────
class ErrorCode(IntEnum):
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    UNAUTHORIZED = 1
    ACTION_NOT_ALLOWED = 2
    # -32000 .. -32099 are reserved for implementation-defined server errors
    VALIDATION_ERROR = -32001
    OBJECT_NOT_FOUND = -32002
    NOTHING_TO_DELETE = -32003


PARSE_ERROR = ErrorCode.PARSE_ERROR.value
INVALID_REQUEST = ErrorCode.INVALID_REQUEST.value
METHOD_NOT_FOUND = ErrorCode.METHOD_NOT_FOUND.value
INVALID_PARAMS = ErrorCode.INVALID_PARAMS.value
INTERNAL_ERROR = ErrorCode.INTERNAL_ERROR.value
UNAUTHORIZED = ErrorCode.UNAUTHORIZED.value
ACTION_NOT_ALLOWED = ErrorCode.ACTION_NOT_ALLOWED.value
VALIDATION_ERROR = ErrorCode.VALIDATION_ERROR.value
OBJECT_NOT_FOUND = ErrorCode.OBJECT_NOT_FOUND.value
NOTHING_TO_DELETE = ErrorCode.NOTHING_TO_DELETE.value

# A predicate is either an exception class or ``fn(exc) -> bool``.
ErrorPredicate = Union[type, Callable[[BaseException], bool]]
ErrorCodeTable = Sequence[tuple[ErrorPredicate, int]]


# ── Exceptions ───────────────────────────────────────────────────────
class RpcError(Exception):
    """Exception with an explicit JSON-RPC error code.

    Raise it from a procedure or a middleware hook to control the code
    sent back to the caller::

        raise RpcError("Token expired", UNAUTHORIZED)
    """

    default_code = INTERNAL_ERROR

    def __init__(self, message: str = "", code: int | None = None) -> None:
        self.message = message
        self.code = self.default_code if code is None else code
        super().__init__(message)


class Unauthorized(RpcError):
    default_code = UNAUTHORIZED


class ActionNotAllowed(RpcError):
    default_code = ACTION_NOT_ALLOWED


class ValidationFailed(RpcError):
    default_code = VALIDATION_ERROR


class ObjectNotFound(RpcError):
    default_code = OBJECT_NOT_FOUND


class NothingToDelete(RpcError):
    default_code = NOTHING_TO_DELETE


# ── Envelopes ────────────────────────────────────────────────────────
def build_error_envelope(
    message: str | Iterable[str],
    code: int,
    request_id: Any = None,
) -> dict[str, Any]:
    """Return ``{"error": {"code", "message"}}`` with an optional ``id``.

    Several messages are joined with ``"| "``.  The id is only attached
    when it is truthy.
    """
    if not isinstance(message, str):
        message = "| ".join(str(m) for m in message)

    envelope: dict[str, Any] = {"error": {"code": code, "message": message}}
    if request_id:
        envelope["id"] = request_id
    return envelope


def _matches(predicate: ErrorPredicate, exc: BaseException) -> bool:
    if isinstance(predicate, type):
        return isinstance(exc, predicate)
    try:
        return bool(predicate(exc))
    except Exception:
        log.exception("error predicate %r failed", predicate)
        return False


def resolve_error_info(
    exc: BaseException,
    error_class_to_code: ErrorCodeTable | None = None,
) -> tuple[int, str]:
    """Map *exc* to a ``(code, message)`` pair.

    An integer ``code`` attribute on the exception wins.  Otherwise the
    first matching ``(predicate, code)`` entry of *error_class_to_code*
    is used, falling back to ``INTERNAL_ERROR``.
    """
    code = getattr(exc, "code", None)
    if not isinstance(code, int) or isinstance(code, bool):
        code = INTERNAL_ERROR
        for predicate, mapped in error_class_to_code or ():
            if _matches(predicate, exc):
                code = mapped
                break

    message = str(exc) or type(exc).__name__
    return int(code), message
