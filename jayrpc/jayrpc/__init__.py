"""jayrpc — JSON-RPC 2.0 server with procedures and middleware hooks."""

from jayrpc.config import ServerOptions
from jayrpc.errors import (
    ACTION_NOT_ALLOWED,
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    NOTHING_TO_DELETE,
    OBJECT_NOT_FOUND,
    PARSE_ERROR,
    UNAUTHORIZED,
    VALIDATION_ERROR,
    ActionNotAllowed,
    ErrorCode,
    NothingToDelete,
    ObjectNotFound,
    RpcError,
    Unauthorized,
    ValidationFailed,
    build_error_envelope,
    resolve_error_info,
)
from jayrpc.jsonrpc import JsonRpcError, JsonRpcRequest, JsonRpcResponse
from jayrpc.middleware import Middleware, MiddlewareChain
from jayrpc.procedure import FunctionProcedure, Procedure, ProcedureDefinition
from jayrpc.processor import BatchProcessor
from jayrpc.registry import Registry
from jayrpc.server import JsonRpcServer
from jayrpc.utils import get_bearer_token

__all__ = [
    "JsonRpcServer",
    "ServerOptions",
    "BatchProcessor",
    "Registry",
    "Procedure",
    "ProcedureDefinition",
    "FunctionProcedure",
    "Middleware",
    "MiddlewareChain",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "JsonRpcError",
    "RpcError",
    "Unauthorized",
    "ActionNotAllowed",
    "ValidationFailed",
    "ObjectNotFound",
    "NothingToDelete",
    "ErrorCode",
    "build_error_envelope",
    "resolve_error_info",
    "get_bearer_token",
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "UNAUTHORIZED",
    "ACTION_NOT_ALLOWED",
    "VALIDATION_ERROR",
    "OBJECT_NOT_FOUND",
    "NOTHING_TO_DELETE",
]
