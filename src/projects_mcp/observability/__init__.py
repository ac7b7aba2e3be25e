"""Logging for Projects MCP."""
