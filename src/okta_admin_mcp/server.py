"""Entrypoint for the Okta admin MCP server."""

from __future__ import annotations

import logging
import sys
import threading
from pathlib import Path

if __package__ in (None, ""):
    sys.path.insert(0, str(Path(__file__).resolve().parents[1]))  # pragma: no cover

from okta_admin_mcp import __version__
from okta_admin_mcp.app import get_app_context
from okta_admin_mcp.config import load_settings, require_okta_settings
from okta_admin_mcp.errors import ConfigurationError
from okta_admin_mcp.logging_utils import configure_logging, get_logger
from okta_admin_mcp.mcp_runtime import MCPServer
from okta_admin_mcp.tools import register_tools


def build_server() -> MCPServer:
    """Create and configure the MCP server instance.

    Raises ``ConfigurationError`` when required Okta settings are missing
    or the role policy names tools that do not exist.
    """
    settings = load_settings()
    configure_logging()
    require_okta_settings(settings)

    logger = get_logger(__name__)
    logger.info("Initializing Okta admin MCP server v%s", __version__)

    context = get_app_context()
    server = MCPServer(
        name=settings.server.name,
        version=__version__,
        instructions=settings.server.instructions,
        default_caller=settings.invocation.default_caller,
        default_role=settings.invocation.default_role,
    )
    register_tools(server, context.catalog)
    return server


_server: MCPServer | None = None
_server_lock = threading.Lock()


def get_server() -> MCPServer:
    """Lazily initialise and return the module-level server instance."""
    global _server
    if _server is not None:
        return _server
    with _server_lock:
        if _server is None:
            _server = build_server()
        return _server


def run_entrypoint() -> None:
    """Run the server based on transport settings."""
    try:
        settings = load_settings()
        server = get_server()
    except ConfigurationError as exc:
        # configure_logging() needs valid settings.
        logging.getLogger(__name__).error("Startup failed: %s", exc)
        sys.exit(1)
    server.run(
        transport=settings.server.transport_mode,
        host=settings.server.host,
        port=settings.server.port,
    )


if __name__ == "__main__":  # pragma: no cover
    run_entrypoint()
