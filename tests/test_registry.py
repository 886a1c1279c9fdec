"""Tests for the method capability table."""

import logging
from dataclasses import dataclass

import pytest
from rpcserver.registry import MethodNotFoundError, Registry, rpc_method
from rpcwire.jsonrpc import METHOD_NOT_FOUND


@dataclass
class NameArgs:
    name: str


class Greeter:
    def __init__(self, greeting: str) -> None:
        self.greeting = greeting

    @rpc_method(args=NameArgs, reply=str)
    async def Hello(self, ctx, args):
        return f"{self.greeting}, {args.name}"

    @rpc_method(args=NameArgs, reply=str, name="Bye")
    def goodbye(self, ctx, args):
        return f"bye, {args.name}"

    def not_exposed(self, ctx, args):
        return "hidden"


class Empty:
    def nothing(self):
        pass


def test_method_decorator():
    registry = Registry()

    @registry.method("Echo.Say", args=dict, reply=dict)
    async def say(ctx, args):
        return args

    spec = registry.get("Echo.Say")
    assert spec.fn is say
    assert spec.args_type is dict
    assert spec.reply_type is dict
    assert spec.receiver is None
    assert registry.has_method("Echo.Say")
    assert registry.methods == ["Echo.Say"]


def test_get_unknown_method():
    registry = Registry()
    with pytest.raises(MethodNotFoundError) as exc_info:
        registry.get("Nope.Missing")
    assert exc_info.value.code == METHOD_NOT_FOUND
    assert exc_info.value.method == "Nope.Missing"


def test_lookup_is_exact():
    registry = Registry()
    registry.register("Echo.Say", lambda ctx, args: args)
    assert not registry.has_method("echo.say")
    assert not registry.has_method("Echo")


def test_register_service_uses_class_name():
    registry = Registry()
    names = registry.register_service(Greeter("hi"))
    assert sorted(names) == ["Greeter.Bye", "Greeter.Hello"]
    assert not registry.has_method("Greeter.not_exposed")
    assert registry.get("Greeter.Hello").args_type is NameArgs


def test_register_service_with_name():
    registry = Registry()
    registry.register_service(Greeter("hi"), name="Greet")
    assert registry.has_method("Greet.Hello")


def test_register_service_without_methods():
    with pytest.raises(ValueError, match="no rpc methods"):
        Registry().register_service(Empty())


def test_register_empty_name():
    with pytest.raises(ValueError):
        Registry().register("", lambda ctx, args: None)


def test_overwrite_warns(caplog):
    registry = Registry()
    registry.register("A.B", lambda ctx, args: 1)
    with caplog.at_level(logging.WARNING, logger="rpcserver.registry"):
        registry.register("A.B", lambda ctx, args: 2)
    assert "overwriting" in caplog.text


@pytest.mark.anyio
async def test_invoke_bound_async_method():
    registry = Registry()
    registry.register_service(Greeter("hello"))
    result = await registry.get("Greeter.Hello").invoke(None, NameArgs(name="ann"))
    assert result == "hello, ann"


@pytest.mark.anyio
async def test_invoke_sync_method_in_thread():
    registry = Registry()
    registry.register_service(Greeter("hello"))
    result = await registry.get("Greeter.Bye").invoke(None, NameArgs(name="bo"))
    assert result == "bye, bo"
