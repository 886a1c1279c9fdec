"""Batch client — thin JSON-RPC 2.0 consumer.

* ``call(method, params)``   → unary result
* ``notify(method, params)`` → fire-and-forget, no reply expected
* ``batch(calls)``           → one POST, one result (or ``RpcError``) per call

Uses ``httpx.AsyncClient`` with connection pooling.
**Never** imports from ``rpcserver``.

Run directly for a quick demo::

    python -m rpcclient.client
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Sequence

import httpx
from rpcwire.jsonrpc import (
    INTERNAL_ERROR,
    OMITTED,
    JsonRpcRequest,
    JsonRpcResponse,
    RpcError,
)
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

log = logging.getLogger(__name__)


@dataclass(slots=True)
class BatchCall:
    """One entry of a batch.  ``notify`` calls are sent without an id."""

    method: str
    params: Any = OMITTED
    notify: bool = False


class BatchClient:
    """Async client that talks JSON-RPC 2.0 over HTTP.

    Parameters
    ----------
    base_url : str
        Server origin, e.g. ``http://127.0.0.1:8100``.
    timeout : float
        Default request timeout in seconds.
    max_retries : int
        Max connection-level attempts.  RPC errors are never retried.
    path : str
        Endpoint path.
    transport : httpx.AsyncBaseTransport, optional
        Custom transport, e.g. ``httpx.ASGITransport`` for in-process use.
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8100",
        timeout: float = 30.0,
        max_retries: int = 3,
        path: str = "/rpc",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.path = path
        self.max_retries = max_retries
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    # -- Lifecycle -----------------------------------------------------

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "BatchClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    # -- Internal helpers ----------------------------------------------

    def _get_retrier(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=0.5, max=10),
            retry=retry_if_exception_type((httpx.NetworkError, httpx.TimeoutException)),
            reraise=True,
        )

    async def _post(self, payload: Any) -> Any:
        async for attempt in self._get_retrier():
            with attempt:
                resp = await self._client.post(self.path, json=payload)
                resp.raise_for_status()
        return resp.json()

    # -- Unary RPC -----------------------------------------------------

    async def call(self, method: str, params: Any = None) -> Any:
        """Send a unary JSON-RPC request and return the result.

        Raises ``RpcError`` if the server returns a JSON-RPC error.
        """
        req = JsonRpcRequest(
            method=method,
            params={} if params is None else params,
            id=uuid.uuid4().hex,
        )
        log.debug("rpc → %s(id=%s)", method, req.id)

        resp = JsonRpcResponse.from_dict(await self._post(req.to_dict()))
        if resp.error is not None:
            raise RpcError.from_error(resp.error)
        return resp.result

    async def notify(self, method: str, params: Any = None) -> None:
        """Send a notification; the server sends no reply for it."""
        req = JsonRpcRequest(method=method, params={} if params is None else params)
        log.debug("rpc → %s(notification)", method)
        await self._post(req.to_dict())

    # -- Batch RPC -----------------------------------------------------

    async def batch(self, calls: Sequence[BatchCall | tuple[str, Any]]) -> list[Any]:
        """Send *calls* in one POST.

        Returns, in call order, the result or ``RpcError`` of every
        non-notification call.  A call the server did not answer gets an
        ``RpcError`` with ``INTERNAL_ERROR``.
        """
        requests: list[JsonRpcRequest] = []
        for call in calls:
            if not isinstance(call, BatchCall):
                call = BatchCall(*call)
            requests.append(
                JsonRpcRequest(
                    method=call.method,
                    params={} if call.params is OMITTED else call.params,
                    id=OMITTED if call.notify else uuid.uuid4().hex,
                )
            )
        log.debug("rpc → batch of %d", len(requests))

        data = await self._post([req.to_dict() for req in requests])
        # A single reply comes back bare
        raw_replies = data if isinstance(data, list) else [data]
        by_id = {}
        for raw in raw_replies:
            reply = JsonRpcResponse.from_dict(raw)
            by_id[reply.id] = reply

        results: list[Any] = []
        for req in requests:
            if req.is_notification:
                continue
            reply = by_id.get(req.id)
            if reply is None:
                results.append(RpcError(INTERNAL_ERROR, f"no reply for {req.method} (id={req.id})"))
            elif reply.error is not None:
                results.append(RpcError.from_error(reply.error))
            else:
                results.append(reply.result)
        return results


# ── Demo entrypoint ──────────────────────────────────────────────────


async def _demo() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    async with BatchClient() as client:
        print("── Echo.Say ──")
        result = await client.call("Echo.Say", {"msg": "hello"})
        print(f"  result: {result}")

        print("── batch ──")
        results = await client.batch(
            [
                ("Arith.Add", {"a": 17, "b": 25}),
                ("Arith.Divide", {"a": 1, "b": 0}),
                BatchCall("Echo.Say", {"msg": "ignored"}, notify=True),
                ("Nope.Missing", {}),
            ]
        )
        for r in results:
            print(f"  {r!r}")

        print("── done ──")


if __name__ == "__main__":
    import anyio

    anyio.run(_demo)
