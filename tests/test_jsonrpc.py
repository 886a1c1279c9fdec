"""Tests for rpcwire JSON-RPC 2.0 models."""

import json

import pytest
from rpcwire.jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    OMITTED,
    PARSE_ERROR,
    SERVER_ERROR,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    RpcError,
)


class TestJsonRpcRequest:
    def test_to_dict(self):
        req = JsonRpcRequest(method="Echo.Say", params={"a": 1}, id="abc")
        d = req.to_dict()
        assert d == {"jsonrpc": "2.0", "method": "Echo.Say", "params": {"a": 1}, "id": "abc"}

    def test_to_dict_omits_absent_members(self):
        d = JsonRpcRequest(method="Echo.Say").to_dict()
        assert "params" not in d
        assert "id" not in d

    def test_to_dict_keeps_null_id(self):
        d = JsonRpcRequest(method="Echo.Say", id=None).to_dict()
        assert d["id"] is None

    def test_from_dict_valid(self):
        raw = {"jsonrpc": "2.0", "method": "test", "params": [1, 2], "id": 7}
        req = JsonRpcRequest.from_dict(raw)
        assert req.method == "test"
        assert req.params == [1, 2]
        assert req.id == 7
        assert not req.is_notification

    def test_from_dict_id_is_not_interpreted(self):
        raw = {"jsonrpc": "2.0", "method": "test", "id": {"weird": ["id"]}}
        assert JsonRpcRequest.from_dict(raw).id == {"weird": ["id"]}

    def test_from_dict_notification(self):
        req = JsonRpcRequest.from_dict({"jsonrpc": "2.0", "method": "test"})
        assert req.id is OMITTED
        assert req.params is OMITTED
        assert req.is_notification

    def test_from_dict_null_id_is_notification(self):
        req = JsonRpcRequest.from_dict({"jsonrpc": "2.0", "method": "test", "id": None})
        assert req.is_notification

    def test_from_dict_missing_jsonrpc(self):
        with pytest.raises(ValueError, match="jsonrpc"):
            JsonRpcRequest.from_dict({"method": "test"})

    def test_from_dict_wrong_version(self):
        with pytest.raises(ValueError, match="2.0"):
            JsonRpcRequest.from_dict({"jsonrpc": "1.0", "method": "test"})

    def test_from_dict_missing_method(self):
        with pytest.raises(ValueError, match="method"):
            JsonRpcRequest.from_dict({"jsonrpc": "2.0"})

    def test_from_dict_not_dict(self):
        with pytest.raises(ValueError, match="JSON object"):
            JsonRpcRequest.from_dict("hello")


class TestJsonRpcResponse:
    def test_success(self):
        d = JsonRpcResponse.success(1, {"value": 42}).to_dict()
        assert d == {"jsonrpc": "2.0", "result": {"value": 42}, "id": 1}
        assert "error" not in d

    def test_success_null_result_is_kept(self):
        d = JsonRpcResponse.success(1, None).to_dict()
        assert "result" in d
        assert d["result"] is None

    def test_fail(self):
        d = JsonRpcResponse.fail("2", METHOD_NOT_FOUND, "Method not found").to_dict()
        assert d["id"] == "2"
        assert d["error"] == {"code": METHOD_NOT_FOUND, "message": "Method not found"}
        assert "result" not in d

    def test_fail_no_id(self):
        d = JsonRpcResponse.fail(None, PARSE_ERROR, "bad").to_dict()
        assert d["id"] is None

    def test_omitted_id_is_written_as_null(self):
        d = JsonRpcResponse.fail(OMITTED, INVALID_REQUEST, "bad").to_dict()
        assert d["id"] is None

    def test_notification_flag_not_serialised(self):
        d = JsonRpcResponse.success(None, 1, notification=True).to_dict()
        assert "notification" not in d

    def test_round_trip(self):
        original = JsonRpcResponse.fail(
            "x-1", INVALID_PARAMS, "bad params", data={"field": ["a", 1.5, None]}
        )
        parsed = JsonRpcResponse.from_dict(json.loads(json.dumps(original.to_dict())))
        assert parsed.id == original.id
        assert parsed.error == original.error
        assert parsed.result is None

        ok = JsonRpcResponse.success(3, {"nested": {"list": [1, 2, 3]}, "flag": False})
        parsed = JsonRpcResponse.from_dict(json.loads(json.dumps(ok.to_dict())))
        assert parsed.id == 3
        assert parsed.result == ok.result
        assert parsed.error is None

    def test_from_dict_needs_exactly_one_of_result_or_error(self):
        with pytest.raises(ValueError, match="exactly one"):
            JsonRpcResponse.from_dict({"jsonrpc": "2.0", "id": 1})
        with pytest.raises(ValueError, match="exactly one"):
            JsonRpcResponse.from_dict(
                {"jsonrpc": "2.0", "id": 1, "result": 1, "error": {"code": 1, "message": "x"}}
            )


class TestJsonRpcError:
    def test_to_dict_without_data(self):
        err = JsonRpcError(code=INTERNAL_ERROR, message="oops")
        d = err.to_dict()
        assert d == {"code": INTERNAL_ERROR, "message": "oops"}
        assert "data" not in d

    def test_to_dict_with_data(self):
        err = JsonRpcError(code=INTERNAL_ERROR, message="oops", data={"trace": "..."})
        d = err.to_dict()
        assert d["data"] == {"trace": "..."}


class TestRpcError:
    def test_carries_error_object(self):
        exc = RpcError(SERVER_ERROR - 5, "custom", data=[1])
        assert exc.error == JsonRpcError(code=SERVER_ERROR - 5, message="custom", data=[1])
        assert str(exc) == "[-32005] custom"

    def test_from_error(self):
        exc = RpcError.from_error(JsonRpcError(code=INVALID_REQUEST, message="no"))
        assert exc.code == INVALID_REQUEST
        assert exc.message == "no"


class TestErrorCodes:
    def test_standard_codes(self):
        assert PARSE_ERROR == -32700
        assert INVALID_REQUEST == -32600
        assert METHOD_NOT_FOUND == -32601
        assert INVALID_PARAMS == -32602
        assert INTERNAL_ERROR == -32603
        assert SERVER_ERROR == -32000
