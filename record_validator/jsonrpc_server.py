#!/usr/bin/env python3
"""
JSON-RPC 2.0 Server for ValidationService

Lets any program that can spawn a process validate records through
record-validator, exchanging newline-delimited JSON on stdin/stdout.

Usage:
    python -m record_validator.jsonrpc_server [--debug] [--config PATH]

Example request (stdin):
    {"jsonrpc":"2.0","id":1,"method":"validate","params":{"record":{"age":"x"},"ruleset":{"age":{"isInt":true}}}}

Example response (stdout):
    {"jsonrpc":"2.0","id":1,"result":{"valid":false,"errors":["age must be an integer"],"errors_by_field":{...}}}
"""

import argparse
import json
import logging
import signal
import sys
from typing import Any, Dict, Optional

from record_validator import ValidationService
from record_validator.rule_schema import RuleSetError

logger = logging.getLogger(__name__)


class ValidationJsonRpcServer:
    """JSON-RPC 2.0 server wrapping ValidationService API."""

    # JSON-RPC error codes
    ERROR_PARSE = -32700        # Invalid JSON
    ERROR_INVALID_REQUEST = -32600  # Invalid JSON-RPC structure
    ERROR_METHOD_NOT_FOUND = -32601  # Unknown method
    ERROR_INVALID_PARAMS = -32602   # Invalid parameters
    ERROR_INTERNAL = -32000      # Application error (catch-all)
    ERROR_RULESET = -32001       # Malformed rule set or catalog

    def __init__(self, debug: bool = False, config_path: Optional[str] = None):
        """
        Initialize JSON-RPC server.

        Args:
            debug: Enable debug logging to stderr
            config_path: Local config YAML passed to ValidationService
        """
        self.service = ValidationService(config_path)
        self.running = False
        self.debug = debug

        # Method dispatch table
        self.methods = {
            'validate': self._handle_validate,
            'validate_value': self._handle_validate_value,
            'discover_checks': self._handle_discover_checks,
            'discover_rulesets': self._handle_discover_rulesets,
            'reload_config': self._handle_reload_config,
            'get_config_age': self._handle_get_config_age,
        }

    def _log(self, message: str):
        """Log debug message (stderr handler is installed by main() with --debug)."""
        if self.debug:
            logger.debug(message)

    def start_server(self):
        """
        Start the JSON-RPC server loop.

        Reads requests from stdin, processes them, writes responses to stdout.
        Runs until EOF or stop signal received.
        """
        self.running = True
        self._log("ValidationService JSON-RPC server started")

        while self.running:
            try:
                line = sys.stdin.readline()

                if not line:
                    # EOF - clean shutdown
                    self._log("EOF received, shutting down")
                    break

                if not line.strip():
                    continue

                self._log(f"Received: {line.strip()}")
                response = self.handle_request(line)
                self._send_response(response)

            except KeyboardInterrupt:
                self._log("KeyboardInterrupt received, shutting down")
                break

        self._log("Server stopped")

    def stop_server(self):
        """
        Stop the server gracefully.

        Sets running flag to False, causing the main loop to exit.
        """
        self.running = False
        self._log("Stop signal received")

    def handle_request(self, request_json: str) -> Dict[str, Any]:
        """
        Parse and process a JSON-RPC request.

        Args:
            request_json: JSON-RPC request string

        Returns:
            JSON-RPC response dict (success or error)
        """
        try:
            request = json.loads(request_json)
        except json.JSONDecodeError as e:
            return self._error_response(None, self.ERROR_PARSE,
                                        f"Parse error: {e}")

        if not isinstance(request, dict):
            return self._error_response(None, self.ERROR_INVALID_REQUEST,
                                        "Request must be a JSON object")

        if request.get("jsonrpc") != "2.0":
            return self._error_response(None, self.ERROR_INVALID_REQUEST,
                                        f"Invalid JSON-RPC version: {request.get('jsonrpc')}")

        request_id = request.get("id")
        method = request.get("method")
        params = request.get("params", {})

        if not method:
            return self._error_response(request_id, self.ERROR_INVALID_REQUEST,
                                        "Missing 'method' field")

        if method not in self.methods:
            return self._error_response(request_id, self.ERROR_METHOD_NOT_FOUND,
                                        f"Method not found: {method}")

        if not isinstance(params, dict):
            return self._error_response(request_id, self.ERROR_INVALID_PARAMS,
                                        f"Params must be an object, got {type(params).__name__}")

        self._log(f"Dispatching method: {method}")
        try:
            result = self.methods[method](params)
        except RuleSetError as e:
            return self._error_response(request_id, self.ERROR_RULESET, str(e))
        except (KeyError, ValueError) as e:
            return self._error_response(request_id, self.ERROR_INVALID_PARAMS,
                                        f"Invalid params: {e}")
        except Exception as e:
            # Any other failure is reported to the caller, the loop keeps serving
            logger.exception("Error processing request")
            return self._error_response(request_id, self.ERROR_INTERNAL,
                                        f"Internal error: {e}")

        return self._success_response(request_id, result)

    # Method handlers - wrap ValidationService API

    def _handle_validate(self, params: Dict[str, Any]) -> Any:
        """Handle 'validate' method."""
        record = params.get('record')
        ruleset = params.get('ruleset')

        if record is None:
            raise ValueError("Missing required parameter: record")
        if not ruleset:
            raise ValueError("Missing required parameter: ruleset")

        return self.service.validate(record, ruleset, params.get('language'))

    def _handle_validate_value(self, params: Dict[str, Any]) -> Any:
        """Handle 'validate_value' method."""
        if 'value' not in params:
            raise ValueError("Missing required parameter: value")
        checks = params.get('checks')
        if not isinstance(checks, dict):
            raise ValueError("Missing required parameter: checks")

        return self.service.validate_value(
            params['value'],
            checks,
            params.get('label', 'value'),
            params.get('language'),
        )

    def _handle_discover_checks(self, params: Dict[str, Any]) -> Any:
        """Handle 'discover_checks' method."""
        return self.service.discover_checks()

    def _handle_discover_rulesets(self, params: Dict[str, Any]) -> Any:
        """Handle 'discover_rulesets' method."""
        return self.service.discover_rulesets()

    def _handle_reload_config(self, params: Dict[str, Any]) -> Any:
        """Handle 'reload_config' method."""
        self.service.reload_config()
        return {"status": "ok", "message": "Configuration reloaded successfully"}

    def _handle_get_config_age(self, params: Dict[str, Any]) -> Any:
        """Handle 'get_config_age' method."""
        return {"config_age": self.service.get_config_age()}

    # Response formatting

    def _success_response(self, request_id: Any, result: Any) -> Dict[str, Any]:
        """Format successful JSON-RPC response."""
        return {
            "jsonrpc": "2.0",
            "id": request_id,
            "result": result
        }

    def _error_response(self, request_id: Any, code: int, message: str,
                        data: Optional[Any] = None) -> Dict[str, Any]:
        """Format JSON-RPC error response."""
        error = {
            "code": code,
            "message": message
        }
        if data is not None:
            error["data"] = data

        return {
            "jsonrpc": "2.0",
            "id": request_id,
            "error": error
        }

    def _send_response(self, response: Dict[str, Any]):
        """Send JSON-RPC response to stdout."""
        response_json = json.dumps(response, ensure_ascii=False)
        self._log(f"Sending: {response_json}")
        sys.stdout.write(response_json + "\n")
        sys.stdout.flush()


def main():
    """Main entry point for JSON-RPC server."""
    parser = argparse.ArgumentParser(
        description="record-validator JSON-RPC 2.0 Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example usage:
  python -m record_validator.jsonrpc_server
  python -m record_validator.jsonrpc_server --config validation.yaml --debug

Supported methods:
  - validate
  - validate_value
  - discover_checks
  - discover_rulesets
  - reload_config
  - get_config_age

Protocol: JSON-RPC 2.0 over stdin/stdout
See: https://www.jsonrpc.org/specification
        """
    )
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging to stderr')
    parser.add_argument('--config', default=None,
                        help='Path to local config YAML (default: bundled config)')

    args = parser.parse_args()

    # stdout carries responses only; logs go to stderr
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    server = ValidationJsonRpcServer(debug=args.debug, config_path=args.config)

    # Handle signals for graceful shutdown
    def signal_handler(sig, frame):
        server.stop_server()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    # Start server (blocks until stopped)
    server.start_server()


if __name__ == "__main__":
    main()
