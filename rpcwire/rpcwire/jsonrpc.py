"""JSON-RPC 2.0 wire-format models.

Pure data — no I/O, no dispatch.  The server and the client both import
these for (de)serialisation only.

JSON-RPC distinguishes an *omitted* member from a member set to ``null``
(``"result": null`` is a valid success, a request without ``id`` is a
notification).  ``OMITTED`` marks the former.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

VERSION = "2.0"

# ── Standard error codes (JSON-RPC 2.0 §5.1) ────────────────────────
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
SERVER_ERROR = -32000


class _Omitted:
    """Sentinel type for a member that is absent from the wire object."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "OMITTED"

    def __bool__(self) -> bool:
        return False


OMITTED: Any = _Omitted()


# ── Models ───────────────────────────────────────────────────────────
@dataclass(slots=True)
class JsonRpcError:
    """JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            d["data"] = self.data
        return d

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "JsonRpcError":
        return cls(
            code=int(raw.get("code", INTERNAL_ERROR)),
            message=str(raw.get("message", "")),
            data=raw.get("data"),
        )


class RpcError(Exception):
    """A failure that carries its own JSON-RPC error code.

    Raised by handlers to pick the code sent back to the caller, by the
    codec for protocol violations, and by the client when the server
    answers with an error object.
    """

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        self.code = code
        self.message = message
        self.data = data
        super().__init__(f"[{code}] {message}")

    @property
    def error(self) -> JsonRpcError:
        return JsonRpcError(code=self.code, message=self.message, data=self.data)

    @classmethod
    def from_error(cls, error: JsonRpcError) -> "RpcError":
        return cls(error.code, error.message, error.data)


@dataclass(slots=True)
class JsonRpcRequest:
    """JSON-RPC 2.0 request.

    ``params`` and ``id`` may be ``OMITTED``.  An omitted or ``None`` id
    makes the request a notification; any other id is echoed verbatim.
    """

    method: str
    params: Any = OMITTED
    id: Any = OMITTED
    jsonrpc: str = VERSION

    @property
    def is_notification(self) -> bool:
        return self.id is OMITTED or self.id is None

    # -- Convenience ---------------------------------------------------
    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"jsonrpc": self.jsonrpc, "method": self.method}
        if self.params is not OMITTED:
            d["params"] = self.params
        if self.id is not OMITTED:
            d["id"] = self.id
        return d

    @classmethod
    def from_dict(cls, raw: Any) -> "JsonRpcRequest":
        """Parse a decoded JSON value into a request — raises ``ValueError`` on bad input."""
        if not isinstance(raw, dict):
            raise ValueError("request must be a JSON object")
        if raw.get("jsonrpc") != VERSION:
            raise ValueError(f"jsonrpc must be {VERSION}")
        method = raw.get("method")
        if not isinstance(method, str) or not method:
            raise ValueError("missing or invalid 'method' field")
        return cls(
            method=method,
            params=raw.get("params", OMITTED),
            id=raw.get("id", OMITTED),
            jsonrpc=raw["jsonrpc"],
        )


@dataclass(slots=True)
class JsonRpcResponse:
    """JSON-RPC 2.0 response.

    Exactly one of ``result`` / ``error`` is written out.  ``notification``
    never reaches the wire: it tells the codec to drop this reply.
    """

    id: Any = None
    result: Any = None
    error: JsonRpcError | None = None
    jsonrpc: str = VERSION
    notification: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"jsonrpc": self.jsonrpc}
        if self.error is not None:
            d["error"] = self.error.to_dict()
        else:
            d["result"] = self.result
        d["id"] = None if self.id is OMITTED else self.id
        return d

    @classmethod
    def from_dict(cls, raw: Any) -> "JsonRpcResponse":
        """Parse a decoded response object — raises ``ValueError`` on bad input."""
        if not isinstance(raw, dict):
            raise ValueError("response must be a JSON object")
        if raw.get("jsonrpc") != VERSION:
            raise ValueError(f"jsonrpc must be {VERSION}")
        has_error = raw.get("error") is not None
        if has_error == ("result" in raw):
            raise ValueError("response must carry exactly one of 'result' or 'error'")
        error = JsonRpcError.from_dict(raw["error"]) if has_error else None
        return cls(id=raw.get("id"), result=raw.get("result"), error=error)

    # -- Factories -----------------------------------------------------
    @classmethod
    def success(cls, req_id: Any, result: Any, notification: bool = False) -> "JsonRpcResponse":
        return cls(id=req_id, result=result, notification=notification)

    @classmethod
    def fail(
        cls,
        req_id: Any,
        code: int,
        message: str,
        data: Any = None,
        notification: bool = False,
    ) -> "JsonRpcResponse":
        return cls(
            id=req_id,
            error=JsonRpcError(code=code, message=message, data=data),
            notification=notification,
        )
