"""Example RPC services.

All services are registered on the module-level ``registry`` which the
server uses unless it is given another one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from rpcwire.jsonrpc import SERVER_ERROR, RpcError

from rpcserver.registry import Registry, rpc_method

log = logging.getLogger(__name__)

registry = Registry()

# Application error codes live in the server-error range
DIVISION_BY_ZERO = SERVER_ERROR - 1


# ── Echo ─────────────────────────────────────────────────────────────


@dataclass(slots=True)
class SayArgs:
    msg: str = ""


@dataclass(slots=True)
class SayReply:
    msg: str


@dataclass(slots=True)
class BodyReply:
    size: int
    replayed: bool


class Echo:
    @rpc_method(args=SayArgs, reply=SayReply, name="Say")
    async def say(self, ctx, args: SayArgs) -> SayReply:
        """Return the message unchanged."""
        return SayReply(msg=args.msg)

    @rpc_method(args=dict, reply=BodyReply, name="Body")
    async def body(self, ctx, args: dict) -> BodyReply:
        """Report the raw request body size and whether it can be read again."""
        replayed = ctx.request is not None and await ctx.request.body() == ctx.body
        return BodyReply(size=len(ctx.body), replayed=replayed)


# ── Arith ────────────────────────────────────────────────────────────


@dataclass(slots=True)
class PairArgs:
    a: float
    b: float


@dataclass(slots=True)
class NumberReply:
    result: float


class Arith:
    @rpc_method(args=PairArgs, reply=NumberReply, name="Add")
    async def add(self, ctx, args: PairArgs) -> NumberReply:
        return NumberReply(result=args.a + args.b)

    @rpc_method(args=PairArgs, reply=NumberReply, name="Multiply")
    def multiply(self, ctx, args: PairArgs) -> NumberReply:
        # sync on purpose: runs on a worker thread
        return NumberReply(result=args.a * args.b)

    @rpc_method(args=PairArgs, reply=NumberReply, name="Divide")
    async def divide(self, ctx, args: PairArgs) -> NumberReply:
        if args.b == 0:
            raise RpcError(DIVISION_BY_ZERO, "division by zero", data={"a": args.a})
        return NumberReply(result=args.a / args.b)


registry.register_service(Echo())
registry.register_service(Arith())
