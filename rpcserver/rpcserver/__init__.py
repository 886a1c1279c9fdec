"""rpcserver — JSON-RPC 2.0 batch server over HTTP."""

from rpcserver.codec import BatchItem, CodecTable, EncodeError, JsonCodec
from rpcserver.config import Settings
from rpcserver.dispatcher import Dispatcher, RequestContext
from rpcserver.registry import MethodNotFoundError, MethodSpec, Registry, rpc_method

__all__ = [
    "BatchItem",
    "CodecTable",
    "Dispatcher",
    "EncodeError",
    "JsonCodec",
    "MethodNotFoundError",
    "MethodSpec",
    "Registry",
    "RequestContext",
    "Settings",
    "rpc_method",
]
