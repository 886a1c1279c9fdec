"""JSON-RPC 2.0 batch codec.

* ``JsonCodec.decode`` turns one HTTP body into an ordered list of
  ``BatchItem`` objects — one per request, single or batched.
* ``JsonCodec.encode`` turns the ordered replies back into one body,
  choosing bare-object or array framing.
* ``CodecTable`` maps request Content-Types to codecs.  It is built once
  when the app starts and is read-only afterwards.

Only a syntactically broken body fails the whole exchange.  Anything
wrong with an individual request is recorded on its ``BatchItem`` and
turns into an error reply for that request alone.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import typing
from types import MappingProxyType
from typing import Any, Mapping, Sequence

from rpcwire.jsonrpc import (
    INVALID_PARAMS,
    INVALID_REQUEST,
    OMITTED,
    PARSE_ERROR,
    SERVER_ERROR,
    JsonRpcRequest,
    JsonRpcResponse,
    RpcError,
)

log = logging.getLogger(__name__)

_WHITESPACE = b" \t\r\n"
# Shortest bodies that can hold a request: "{}" and "[]"
_MIN_BODY = 2

# Field types checked while decoding params into a dataclass
_CHECKED_TYPES = (str, int, float, bool, list, dict)


class EncodeError(Exception):
    """Raised when the replies cannot be serialised."""


class BatchItem:
    """One request out of a decoded body.

    Holds the decoded element itself (never a copy of the body), the
    whole raw body for anyone who needs to re-read it, the codec of this
    exchange, and the request's error.  The error is set at most once and
    never cleared; once set, every later step answers with it.
    """

    __slots__ = ("raw", "request", "raw_body", "codec", "_error", "_args")

    def __init__(
        self,
        raw: Any,
        raw_body: bytes,
        codec: "JsonCodec",
        request: JsonRpcRequest | None = None,
        error: RpcError | None = None,
    ) -> None:
        self.raw = raw
        self.request = request
        self.raw_body = raw_body
        self.codec = codec
        self._error = error
        self._args: tuple[Any, Any] | None = None

    # -- Accessors -----------------------------------------------------
    @property
    def error(self) -> RpcError | None:
        return self._error

    @property
    def id(self) -> Any:
        if self.request is not None:
            return self.request.id
        if isinstance(self.raw, dict):
            return self.raw.get("id", OMITTED)
        return None

    @property
    def is_notification(self) -> bool:
        # Elements that are not objects have no id to omit, they always get a reply
        if self.request is None and not isinstance(self.raw, dict):
            return False
        return self.id is OMITTED or self.id is None

    def _fail(self, error: RpcError) -> RpcError:
        if self._error is None:
            self._error = error
        return self._error

    # -- Request side --------------------------------------------------
    def method(self) -> str:
        """Return the method name, or raise the request's stored error."""
        if self._error is not None:
            raise self._error
        return self.request.method

    def read_args(self, args_type: Any = None) -> Any:
        """Decode ``params`` into *args_type*.

        Missing params is an invalid request; params that do not fit the
        shape are invalid params.  The outcome is memoized.
        """
        if self._error is not None:
            raise self._error
        if self._args is not None and self._args[0] is args_type:
            return self._args[1]
        params = self.request.params
        if params is OMITTED:
            raise self._fail(
                RpcError(INVALID_REQUEST, "rpc: method request ill-formed: missing params field")
            )
        try:
            args = self.codec.coerce(params, args_type)
        except Exception as exc:
            # Custom shapes may raise anything on params they cannot take
            raise self._fail(RpcError(INVALID_PARAMS, str(exc), data=params)) from exc
        self._args = (args_type, args)
        return args

    # -- Reply side ----------------------------------------------------
    def success_reply(self, result: Any) -> JsonRpcResponse:
        """Build the success reply.

        Raises ``EncodeError`` if *result* cannot be written as JSON.
        """
        return JsonRpcResponse.success(
            self.id, self.codec.to_wire(result), notification=self.is_notification
        )

    def error_reply(self, exc: BaseException) -> JsonRpcResponse:
        """Build the error reply; errors without their own code become server errors."""
        if isinstance(exc, RpcError):
            code, message, data = exc.code, exc.message, exc.data
        else:
            code, message, data = SERVER_ERROR, str(exc) or type(exc).__name__, None
        return JsonRpcResponse.fail(
            self.id, code, message, data, notification=self.is_notification
        )

    def __repr__(self) -> str:
        return f"BatchItem(id={self.id!r}, error={self._error!r})"


class JsonCodec:
    """Codec for ``application/json`` bodies."""

    response_content_type = "application/json; charset=utf-8"

    # -- Decode --------------------------------------------------------
    def decode(self, body: bytes) -> list[BatchItem]:
        """Split *body* into batch items.

        Raises ``RpcError(PARSE_ERROR)`` if the body is not valid JSON.
        """
        stripped = body.strip(_WHITESPACE)
        if len(stripped) < _MIN_BODY:
            return []

        try:
            decoded = json.loads(stripped, parse_constant=_reject_constant)
        except RecursionError as exc:
            raise RpcError(PARSE_ERROR, "Parse error: body nested too deeply") from exc
        except ValueError as exc:
            # JSONDecodeError and UnicodeDecodeError are both ValueErrors
            raise RpcError(PARSE_ERROR, f"Parse error: {exc}") from exc

        # Framing follows the decoded top-level value, so a BOM or a UTF-16
        # body cannot hide the opening bracket
        batch = isinstance(decoded, list)
        elements = decoded if batch else [decoded]
        items = [self._item(element, body) for element in elements]
        log.debug("decoded %d item(s), batch=%s", len(items), batch)
        return items

    def _item(self, element: Any, body: bytes) -> BatchItem:
        try:
            request = JsonRpcRequest.from_dict(element)
        except ValueError as exc:
            error = RpcError(INVALID_REQUEST, str(exc), data=element)
            return BatchItem(element, body, self, error=error)
        return BatchItem(element, body, self, request=request)

    # -- Encode --------------------------------------------------------
    def encode(self, replies: Sequence[JsonRpcResponse]) -> bytes:
        """Serialise *replies*, dropping notifications.

        A single remaining reply is written bare; zero or several are
        written as an array in the given order.
        """
        kept = [reply.to_dict() for reply in replies if not reply.notification]
        payload: Any = kept[0] if len(kept) == 1 else kept
        return self._dumps(payload).encode("utf-8")

    def _dumps(self, value: Any) -> str:
        try:
            return json.dumps(
                value,
                ensure_ascii=False,
                allow_nan=False,
                separators=(",", ":"),
            )
        except (TypeError, ValueError, RecursionError) as exc:
            raise EncodeError(f"rpc: cannot encode reply: {exc}") from exc

    # -- Marshaling ----------------------------------------------------
    def coerce(self, params: Any, shape: Any) -> Any:
        """Build a value of *shape* from decoded *params*.

        Dataclasses take an object by keyword or an array positionally;
        unknown keys are ignored.  ``dict``/``list`` only check the type.
        ``None`` or ``Any`` pass params through.
        """
        if shape is None or shape is Any:
            return params
        if isinstance(shape, type) and dataclasses.is_dataclass(shape):
            return self._build_dataclass(params, shape)
        if shape in (dict, list):
            if not isinstance(params, shape):
                raise TypeError(f"params must be a JSON {_json_kind(shape)}")
            return params
        return shape(params)

    def _build_dataclass(self, params: Any, shape: type) -> Any:
        names = [f.name for f in dataclasses.fields(shape) if f.init]
        if isinstance(params, list):
            if len(params) > len(names):
                raise TypeError(
                    f"{shape.__name__} takes {len(names)} params, got {len(params)}"
                )
            params = dict(zip(names, params))
        elif not isinstance(params, dict):
            raise TypeError("params must be a JSON object or array")

        kwargs = {name: params[name] for name in names if name in params}
        try:
            hints = typing.get_type_hints(shape)
        except NameError:
            # Unresolvable forward references: leave the field types unchecked
            hints = {}
        for name, value in kwargs.items():
            _check_field(name, value, hints.get(name))
        return shape(**kwargs)

    def to_wire(self, result: Any) -> Any:
        """Convert a handler result into JSON-ready data.

        Raises ``EncodeError`` if the result has no JSON form.
        """
        if dataclasses.is_dataclass(result) and not isinstance(result, type):
            result = dataclasses.asdict(result)
        self._dumps(result)
        return result


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a valid JSON value")


def _json_kind(tp: type) -> str:
    return {
        str: "string",
        int: "integer",
        float: "number",
        bool: "boolean",
        list: "array",
        dict: "object",
    }[tp]


def _check_field(name: str, value: Any, hint: Any) -> None:
    if hint not in _CHECKED_TYPES:
        return
    if hint is float:
        ok = isinstance(value, (int, float)) and not isinstance(value, bool)
    elif hint is int:
        ok = isinstance(value, int) and not isinstance(value, bool)
    else:
        ok = isinstance(value, hint)
    if not ok:
        raise TypeError(f"field {name!r} must be a JSON {_json_kind(hint)}")


class CodecTable:
    """Content-Type → codec lookup.

    Keys are compared case-insensitively with any ``;charset=...``
    suffix removed.
    """

    def __init__(self, codecs: Mapping[str, JsonCodec]) -> None:
        self._codecs = MappingProxyType(
            {_media_type(content_type): codec for content_type, codec in codecs.items()}
        )

    def select(self, content_type: str | None) -> JsonCodec | None:
        return self._codecs.get(_media_type(content_type or ""))

    @property
    def content_types(self) -> list[str]:
        return list(self._codecs.keys())


def _media_type(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()
