#!/usr/bin/env python
"""
Smoke test for the X gateway MCP server.

Starts the server over stdio and checks initialization, tools/list and the
protocol-level fault for a malformed tools/call. No post is created.

Usage:
    python scripts/test_mcp_server.py
"""

import json
import subprocess
import sys
import time
from pathlib import Path


def send_jsonrpc_request(process: subprocess.Popen, request: dict) -> dict:
    """Send a JSON-RPC request to the MCP server and return its response."""
    process.stdin.write((json.dumps(request) + "\n").encode())
    process.stdin.flush()

    response_line = process.stdout.readline()
    if not response_line:
        raise RuntimeError("No response from server")
    return json.loads(response_line)


def test_mcp_server() -> None:
    print("=" * 80)
    print("X Gateway MCP Server Smoke Test")
    print("=" * 80)

    print("\n[1/4] Starting MCP server...")
    process = subprocess.Popen(
        [sys.executable, "-m", "x_gateway.integrations.mcp_server"],
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        cwd=Path(__file__).parent.parent,
    )

    try:
        time.sleep(1)

        print("\n[2/4] Testing initialization...")
        init_response = send_jsonrpc_request(
            process,
            {
                "jsonrpc": "2.0",
                "id": 1,
                "method": "initialize",
                "params": {
                    "protocolVersion": "2024-11-05",
                    "capabilities": {},
                    "clientInfo": {"name": "smoke-test", "version": "0.1.0"},
                },
            },
        )
        print(f"✓ Server initialized: {init_response.get('result', {}).get('serverInfo', {}).get('name')}")
        process.stdin.write((json.dumps({"jsonrpc": "2.0", "method": "notifications/initialized"}) + "\n").encode())
        process.stdin.flush()

        print("\n[3/4] Testing tools/list...")
        tools_response = send_jsonrpc_request(process, {"jsonrpc": "2.0", "id": 2, "method": "tools/list"})
        tools = tools_response.get("result", {}).get("tools", [])
        print(f"✓ Found {len(tools)} tools:")
        for tool in tools:
            print(f"  - {tool['name']}: {tool['description']}")

        print("\n[4/4] Testing tools/call with invalid arguments...")
        call_response = send_jsonrpc_request(
            process,
            {
                "jsonrpc": "2.0",
                "id": 3,
                "method": "tools/call",
                "params": {"name": "get_user", "arguments": {}},
            },
        )
        error = call_response.get("error")
        if not error:
            raise RuntimeError(f"Expected a protocol error, got: {call_response}")
        print(f"✓ Rejected with code {error['code']}: {error['message']}")

        print("\n" + "=" * 80)
        print("All checks passed! ✓")
        print("=" * 80)

    except Exception as e:
        print(f"\n✗ Test failed: {e}")
        stderr = process.stderr.read().decode()
        if stderr:
            print(f"\nServer stderr:\n{stderr}")
        sys.exit(1)

    finally:
        process.terminate()
        try:
            process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            process.kill()


if __name__ == "__main__":
    test_mcp_server()
