"""Batch dispatcher.

Drives one HTTP exchange: decode the body into items, resolve and invoke
each item in order, then encode the ordered replies.  Items are handled
one after another so the reply order is the request order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Sequence

from rpcwire.jsonrpc import INTERNAL_ERROR, JsonRpcResponse, RpcError

from rpcserver.codec import BatchItem, EncodeError, JsonCodec
from rpcserver.registry import MethodSpec, Registry

log = logging.getLogger(__name__)


@dataclass(slots=True)
class RequestContext:
    """What a handler gets besides its args.

    ``body`` is the full, unmodified request body.  ``request`` is the
    Starlette request (``None`` outside HTTP); its ``body()`` can be
    awaited again.
    """

    request: Any
    body: bytes
    index: int
    method: str


class Dispatcher:
    """Resolves and invokes decoded batch items against a ``Registry``.

    With ``stop_on_error`` set, the first item that fails to resolve
    (bad method, unknown method, unreadable params) ends the batch: its
    error reply is kept and the items after it get no reply at all.
    Otherwise every item is handled on its own.
    """

    def __init__(self, registry: Registry, stop_on_error: bool = False) -> None:
        self._registry = registry
        self.stop_on_error = stop_on_error

    async def handle(self, codec: JsonCodec, body: bytes, request: Any = None) -> bytes:
        """Run the whole pipeline for one body and return the response body."""
        try:
            items = codec.decode(body)
        except RpcError as exc:
            log.info("rpc ← unparseable body (%d bytes): %s", len(body), exc.message)
            return codec.encode([JsonRpcResponse.fail(None, exc.code, exc.message, exc.data)])

        log.info("rpc ← batch of %d", len(items))
        replies = await self.dispatch(items, request)
        return codec.encode(replies)

    async def dispatch(
        self, items: Sequence[BatchItem], request: Any = None
    ) -> list[JsonRpcResponse]:
        """Return one reply per handled item, in item order."""
        replies: list[JsonRpcResponse] = []

        for index, item in enumerate(items):
            if item.error is not None:
                log.debug("item %d rejected: %s", index, item.error)
                replies.append(item.error_reply(item.error))
                continue

            try:
                name = item.method()
                spec = self._registry.get(name)
                args = item.read_args(spec.args_type)
            except RpcError as exc:
                log.debug("item %d failed to resolve: %s", index, exc)
                replies.append(item.error_reply(exc))
                if self.stop_on_error:
                    log.info("stopping batch at item %d of %d", index, len(items))
                    break
                continue

            ctx = RequestContext(request=request, body=item.raw_body, index=index, method=name)
            replies.append(await self._invoke(item, spec, ctx, args))

        return replies

    async def _invoke(
        self, item: BatchItem, spec: MethodSpec, ctx: RequestContext, args: Any
    ) -> JsonRpcResponse:
        log.debug("rpc ← %s(id=%s)", spec.name, item.id)
        try:
            reply = await spec.invoke(ctx, args)
        except RpcError as exc:
            log.info("%s returned error %d: %s", spec.name, exc.code, exc.message)
            return item.error_reply(exc)
        except Exception as exc:
            log.exception("handler error for %s", spec.name)
            return item.error_reply(exc)

        expected = spec.reply_type
        if isinstance(expected, type) and not isinstance(reply, expected):
            log.error(
                "%s returned %s, expected %s",
                spec.name,
                type(reply).__name__,
                expected.__name__,
            )
            return item.error_reply(
                RpcError(INTERNAL_ERROR, f"Internal error: {spec.name} returned an invalid reply")
            )
        try:
            return item.success_reply(reply)
        except EncodeError as exc:
            log.error("%s returned a reply with no JSON form: %s", spec.name, exc)
            return item.error_reply(
                RpcError(INTERNAL_ERROR, f"Internal error: {spec.name} returned an unencodable reply")
            )
