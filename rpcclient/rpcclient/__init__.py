"""rpcclient — JSON-RPC 2.0 batch client over HTTP."""

from rpcclient.client import BatchCall, BatchClient

__all__ = ["BatchCall", "BatchClient"]
