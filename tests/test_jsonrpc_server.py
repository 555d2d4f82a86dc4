"""
Tests for JSON-RPC Server

Tests the JSON-RPC wrapper around ValidationService API.
"""
import io
import json

import pytest
from record_validator.jsonrpc_server import ValidationJsonRpcServer


@pytest.fixture
def server(config_path):
    """Create a ValidationJsonRpcServer instance for testing."""
    return ValidationJsonRpcServer(debug=False, config_path=config_path)


def call(server, method, params=None, request_id=1):
    """Send one request through handle_request()."""
    request = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        request["params"] = params
    return server.handle_request(json.dumps(request))


class TestRequestParsing:
    """Test JSON-RPC request parsing."""

    def test_valid_request(self, server):
        """Test parsing valid JSON-RPC request."""
        response = call(server, "discover_checks", {})

        assert response["jsonrpc"] == "2.0"
        assert response["id"] == 1
        assert "result" in response

    def test_params_default_to_empty(self, server):
        """Test that params may be omitted."""
        assert "result" in call(server, "discover_rulesets")

    def test_invalid_json(self, server):
        """Test handling invalid JSON."""
        response = server.handle_request("not valid json {")

        assert "error" in response
        assert response["error"]["code"] == server.ERROR_PARSE

    def test_not_an_object(self, server):
        """Test handling a JSON array request."""
        response = server.handle_request("[1, 2]")
        assert response["error"]["code"] == server.ERROR_INVALID_REQUEST

    def test_missing_jsonrpc_version(self, server):
        """Test handling missing jsonrpc version."""
        response = server.handle_request(json.dumps({"id": 1, "method": "discover_checks"}))

        assert response["error"]["code"] == server.ERROR_INVALID_REQUEST

    def test_wrong_jsonrpc_version(self, server):
        """Test handling wrong JSON-RPC version."""
        response = server.handle_request(
            json.dumps({"jsonrpc": "1.0", "id": 1, "method": "discover_checks"})
        )

        assert response["error"]["code"] == server.ERROR_INVALID_REQUEST

    def test_missing_method(self, server):
        """Test handling missing method field."""
        response = server.handle_request(json.dumps({"jsonrpc": "2.0", "id": 1, "params": {}}))

        assert response["error"]["code"] == server.ERROR_INVALID_REQUEST

    def test_params_not_dict(self, server):
        """Test handling params that are not a dict."""
        response = call(server, "discover_checks", [1, 2, 3])

        assert response["error"]["code"] == server.ERROR_INVALID_PARAMS


class TestMethodDispatch:
    """Test method dispatch."""

    def test_unknown_method(self, server):
        """Test calling unknown method."""
        response = call(server, "unknown_method", {})

        assert response["error"]["code"] == server.ERROR_METHOD_NOT_FOUND
        assert "not found" in response["error"]["message"].lower()

    def test_discover_checks_method(self, server):
        """Test discover_checks method."""
        result = call(server, "discover_checks", {})["result"]
        assert "isEmail" in result["value"]
        assert "isMimeType" in result["file"]

    def test_discover_rulesets_method(self, server):
        """Test discover_rulesets method."""
        result = call(server, "discover_rulesets", {})["result"]
        assert set(result) == {"signup", "event"}

    def test_get_config_age_method(self, server):
        """Test get_config_age method."""
        result = call(server, "get_config_age", {})["result"]
        assert "config_age" in result

    def test_reload_config_method(self, server):
        """Test reload_config method."""
        result = call(server, "reload_config", {})["result"]
        assert result["status"] == "ok"


class TestValidateMethod:
    """Test validate method via JSON-RPC."""

    def test_validate_named_ruleset(self, server):
        """Test validation against a configured rule set."""
        response = call(server, "validate", {
            "record": {"name": "Izi", "password": "12345678", "confirm": "1234567"},
            "ruleset": "signup",
        })

        assert response["result"]["valid"] is False
        assert response["result"]["errors"] == ["Confirmation must match Password"]

    def test_validate_inline_ruleset_in_spanish(self, server):
        """Test validation against an inline rule set with a language."""
        response = call(server, "validate", {
            "record": {"age": "x"},
            "ruleset": {"age": {"label": {"es": "Edad"}, "isInt": True}},
            "language": "es",
        })

        assert response["result"]["errors"] == ["Edad debe ser un número entero"]

    def test_validate_missing_record(self, server):
        """Test validate with missing record."""
        response = call(server, "validate", {"ruleset": "signup"})

        assert response["error"]["code"] == server.ERROR_INVALID_PARAMS
        assert "record" in response["error"]["message"]

    def test_validate_missing_ruleset(self, server):
        """Test validate with missing ruleset."""
        response = call(server, "validate", {"record": {}})

        assert "ruleset" in response["error"]["message"]

    def test_validate_unknown_ruleset(self, server):
        """Test validate with a rule set name that is not configured."""
        response = call(server, "validate", {"record": {}, "ruleset": "checkout"})

        assert response["error"]["code"] == server.ERROR_INVALID_PARAMS
        assert "checkout" in response["error"]["message"]

    def test_validate_dangling_reference(self, server):
        """Test that rule set errors have their own error code."""
        response = call(server, "validate", {
            "record": {"confirm": "x"},
            "ruleset": {"confirm": {"equal": "@password"}},
        })

        assert response["error"]["code"] == server.ERROR_RULESET


class TestValidateValueMethod:
    """Test validate_value method via JSON-RPC."""

    def test_validate_value(self, server):
        """Test single value validation."""
        response = call(server, "validate_value", {
            "value": 30,
            "checks": {"isInt": True, "max": 25},
            "label": "Age",
        })

        assert response["result"] == {"valid": False, "errors": ["Age must not be greater than 25"]}

    def test_missing_value(self, server):
        """Test validate_value without value."""
        response = call(server, "validate_value", {"checks": {"isInt": True}})
        assert "value" in response["error"]["message"]

    def test_missing_checks(self, server):
        """Test validate_value without checks."""
        response = call(server, "validate_value", {"value": 1})
        assert "checks" in response["error"]["message"]


class TestResponseFormat:
    """Test JSON-RPC response formatting."""

    def test_success_response_structure(self, server):
        """Test structure of successful response."""
        response = server._success_response(1, {"key": "value"})

        assert response["jsonrpc"] == "2.0"
        assert response["id"] == 1
        assert response["result"] == {"key": "value"}

    def test_error_response_structure(self, server):
        """Test structure of error response."""
        response = server._error_response(1, -32000, "Test error")

        assert response["jsonrpc"] == "2.0"
        assert response["id"] == 1
        assert response["error"]["code"] == -32000
        assert response["error"]["message"] == "Test error"

    def test_error_response_with_data(self, server):
        """Test error response with additional data."""
        response = server._error_response(1, -32000, "Test error",
                                          data={"detail": "Extra info"})

        assert response["error"]["data"]["detail"] == "Extra info"


class TestServerLifecycle:
    """Test server start/stop."""

    def test_server_initialization(self, config_path):
        """Test server can be initialized."""
        server = ValidationJsonRpcServer(debug=True, config_path=config_path)
        assert server.debug is True
        assert server.running is False

    def test_server_has_methods(self, server):
        """Test server has all expected methods."""
        expected_methods = [
            'validate',
            'validate_value',
            'discover_checks',
            'discover_rulesets',
            'reload_config',
            'get_config_age',
        ]

        for method in expected_methods:
            assert method in server.methods

    def test_stop_server(self, server):
        """Test stop_server sets running flag."""
        server.running = True
        server.stop_server()
        assert server.running is False

    def test_serves_until_eof(self, server, monkeypatch):
        """Test the stdin/stdout loop answers each line and stops at EOF."""
        lines = "\n".join([
            json.dumps({"jsonrpc": "2.0", "id": 1, "method": "validate_value",
                        "params": {"value": "", "checks": {"isRequired": True}}}),
            "",
            json.dumps({"jsonrpc": "2.0", "id": 2, "method": "nope"}),
        ]) + "\n"
        stdout = io.StringIO()
        monkeypatch.setattr("sys.stdin", io.StringIO(lines))
        monkeypatch.setattr("sys.stdout", stdout)

        server.start_server()

        responses = [json.loads(line) for line in stdout.getvalue().splitlines()]
        assert [r["id"] for r in responses] == [1, 2]
        assert responses[0]["result"]["errors"] == ["value is required"]
        assert "error" in responses[1]
