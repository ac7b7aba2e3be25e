"""Projects MCP - GitHub Projects v2 resolution and coordination."""

__version__ = "0.1.0"
