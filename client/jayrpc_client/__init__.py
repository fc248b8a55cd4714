"""jayrpc_client — async JSON-RPC 2.0 client over HTTP."""

from jayrpc_client.client import BatchResult, RpcCallError, RpcClient

__all__ = [
    "RpcClient",
    "RpcCallError",
    "BatchResult",
]
