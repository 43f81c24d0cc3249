"""
x_gateway: an MCP command gateway for the X (Twitter) API.
"""

__version__ = "0.1.0"
