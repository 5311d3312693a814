"""Okta Management API access."""

from okta_admin_mcp.okta.client import OktaClient, OktaResponse
from okta_admin_mcp.okta.headers import check_rate_limit, next_cursor_from_link, parse_link_header
from okta_admin_mcp.okta.oauth import CachedToken, ClientCredentialsTokenProvider, TokenCache

__all__ = [
    "CachedToken",
    "ClientCredentialsTokenProvider",
    "OktaClient",
    "OktaResponse",
    "TokenCache",
    "check_rate_limit",
    "next_cursor_from_link",
    "parse_link_header",
]
