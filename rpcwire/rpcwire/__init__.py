"""rpcwire — JSON-RPC 2.0 wire-format models."""

from rpcwire.jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    OMITTED,
    PARSE_ERROR,
    SERVER_ERROR,
    VERSION,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    RpcError,
)

__all__ = [
    "JsonRpcRequest",
    "JsonRpcResponse",
    "JsonRpcError",
    "RpcError",
    "OMITTED",
    "VERSION",
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "SERVER_ERROR",
]
