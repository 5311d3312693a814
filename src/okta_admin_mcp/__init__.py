"""Okta administration tools exposed over MCP."""

__version__ = "0.2.0"
