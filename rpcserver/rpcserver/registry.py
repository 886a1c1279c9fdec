"""Method capability table.

Every callable method is registered explicitly, together with the shape
its params are decoded into and the shape of its reply.  Lookup is an
exact match on the dotted ``"Service.Method"`` name — nothing is
discovered at call time.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable

import anyio

from rpcwire.jsonrpc import METHOD_NOT_FOUND, RpcError

log = logging.getLogger(__name__)

# Type alias for an RPC handler: (ctx, args) -> reply, sync or async
HandlerFn = Callable[..., Any]

_MARKER = "__rpc_method__"


class MethodNotFoundError(RpcError):
    """Raised when no handler is registered for the requested method."""

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(METHOD_NOT_FOUND, f"Method not found: {method}")


@dataclass(slots=True, frozen=True)
class MethodSpec:
    """One registry entry: name, shapes and the callable behind them."""

    name: str
    fn: HandlerFn
    args_type: Any = None
    reply_type: Any = None
    receiver: Any = None

    async def invoke(self, ctx: Any, args: Any) -> Any:
        """Call the handler; sync handlers run on a worker thread."""
        fn = self.fn if self.receiver is None else partial(self.fn, self.receiver)
        if inspect.iscoroutinefunction(self.fn):
            return await fn(ctx, args)
        return await anyio.to_thread.run_sync(fn, ctx, args)


@dataclass(slots=True, frozen=True)
class _Marker:
    name: str
    args_type: Any
    reply_type: Any


def rpc_method(args: Any = None, reply: Any = None, name: str | None = None):
    """Mark a method of a service class for ``Registry.register_service``."""

    def decorator(fn: HandlerFn) -> HandlerFn:
        setattr(fn, _MARKER, _Marker(name or fn.__name__, args, reply))
        return fn

    return decorator


class Registry:
    """A ``"Service.Method"`` → ``MethodSpec`` mapping.

    Usage::

        registry = Registry()

        @registry.method("Echo.Say", args=SayArgs, reply=SayReply)
        async def say(ctx, args):
            return SayReply(msg=args.msg)

        spec = registry.get("Echo.Say")
    """

    def __init__(self) -> None:
        self._methods: dict[str, MethodSpec] = {}

    # -- Registration --------------------------------------------------
    def register(
        self,
        name: str,
        fn: HandlerFn,
        args: Any = None,
        reply: Any = None,
        receiver: Any = None,
    ) -> MethodSpec:
        if not name:
            raise ValueError("method name must not be empty")
        if name in self._methods:
            log.warning("overwriting handler for %r", name)
        spec = MethodSpec(name=name, fn=fn, args_type=args, reply_type=reply, receiver=receiver)
        self._methods[name] = spec
        log.debug("registered handler %r → %s", name, fn.__qualname__)
        return spec

    def method(
        self, name: str, args: Any = None, reply: Any = None
    ) -> Callable[[HandlerFn], HandlerFn]:
        """Decorator that registers *fn* under *name*."""

        def decorator(fn: HandlerFn) -> HandlerFn:
            self.register(name, fn, args=args, reply=reply)
            return fn

        return decorator

    def register_service(self, receiver: Any, name: str | None = None) -> list[str]:
        """Register every ``@rpc_method`` of *receiver* as ``"<name>.<Method>"``.

        *name* defaults to the receiver's class name.  Returns the
        registered method names; raises ``ValueError`` if there are none.
        """
        cls = type(receiver)
        service = name or cls.__name__
        registered = []
        for attr in dir(cls):
            fn = getattr(cls, attr, None)
            marker = getattr(fn, _MARKER, None)
            if not isinstance(marker, _Marker):
                continue
            full = f"{service}.{marker.name}"
            self.register(
                full, fn, args=marker.args_type, reply=marker.reply_type, receiver=receiver
            )
            registered.append(full)
        if not registered:
            raise ValueError(f"{service!r} has no rpc methods")
        return registered

    # -- Lookup --------------------------------------------------------
    def get(self, name: str) -> MethodSpec:
        """Return the entry for *name*.

        Raises ``MethodNotFoundError`` if the method is not registered.
        """
        spec = self._methods.get(name)
        if spec is None:
            raise MethodNotFoundError(name)
        return spec

    # -- Introspection -------------------------------------------------
    @property
    def methods(self) -> list[str]:
        return list(self._methods.keys())

    def has_method(self, name: str) -> bool:
        return name in self._methods
