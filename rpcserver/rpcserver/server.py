"""Starlette ASGI server.

Single JSON-RPC 2.0 endpoint (``/rpc`` by default) that accepts a single
request or a batch in one POST body.

Run directly::

    python -m rpcserver
"""

from __future__ import annotations

import logging

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.gzip import GZipMiddleware
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.routing import Route

from rpcserver.codec import CodecTable, EncodeError, JsonCodec
from rpcserver.config import Settings
from rpcserver.dispatcher import Dispatcher
from rpcserver.handlers import registry as default_registry
from rpcserver.registry import Registry

log = logging.getLogger(__name__)

_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


# ── Helpers ──────────────────────────────────────────────────────────


def _plain_error(status: int, msg: str) -> PlainTextResponse:
    """Transport-level failure: plain text, no JSON-RPC envelope."""
    return PlainTextResponse(msg, status_code=status)


# ── RPC endpoint ─────────────────────────────────────────────────────


async def rpc_endpoint(request: Request) -> Response:
    """Handle a JSON-RPC 2.0 POST (single request or batch)."""
    if request.method != "POST":
        return _plain_error(405, f"rpc: POST method required, received {request.method}")

    content_type = request.headers.get("content-type", "")
    codec = request.app.state.codecs.select(content_type)
    if codec is None:
        media = content_type.split(";", 1)[0].strip()
        return _plain_error(415, f"rpc: unrecognized Content-Type: {media}")

    # Starlette caches the body, so handlers can read it again
    body = await request.body()
    dispatcher: Dispatcher = request.app.state.dispatcher
    try:
        payload = await dispatcher.handle(codec, body, request)
    except EncodeError as exc:
        log.error("%s", exc)
        return _plain_error(500, str(exc))

    return Response(
        payload,
        media_type=codec.response_content_type,
        # Prevents browsers from MIME-sniffing the response away from the declared type
        headers={"X-Content-Type-Options": "nosniff"},
    )


# ── App factory ──────────────────────────────────────────────────────


def create_app(settings: Settings | None = None, registry: Registry | None = None) -> Starlette:
    settings = settings or Settings.from_env()
    registry = registry or default_registry

    middleware = []
    if settings.gzip_min_size > 0:
        middleware.append(Middleware(GZipMiddleware, minimum_size=settings.gzip_min_size))

    # Every method is routed here so the endpoint can answer 405 itself
    app = Starlette(
        debug=False,
        routes=[Route(settings.path, rpc_endpoint, methods=_ALL_METHODS)],
        middleware=middleware,
    )
    app.state.settings = settings
    app.state.codecs = CodecTable({ct: JsonCodec() for ct in settings.content_types})
    app.state.dispatcher = Dispatcher(registry, stop_on_error=settings.stop_on_error)
    log.debug(
        "rpc app on %s: %d method(s), content types %s",
        settings.path,
        len(registry.methods),
        app.state.codecs.content_types,
    )
    return app


app = create_app()
