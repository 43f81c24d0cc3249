"""
Integrations exposing the gateway to calling agents over MCP.
"""

__all__ = [
    "schema",
    "mcp_adapter",
    "mcp_server",
]
