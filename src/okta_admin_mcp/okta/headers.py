"""Helpers for Okta response headers."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from urllib.parse import parse_qs, urlparse

logger = logging.getLogger(__name__)

_LINK_RE = re.compile(r'<([^>]+)>;\s*rel="([^"]+)"')

RATE_LIMIT_WARNING_THRESHOLD = 10


def parse_link_header(link: str | None) -> dict[str, str]:
    """Map each ``rel`` in a Link header to its URL."""
    if not link:
        return {}
    return {rel: url for url, rel in _LINK_RE.findall(link)}


def next_cursor_from_link(link: str | None) -> str | None:
    """Extract the ``after`` cursor from the ``rel="next"`` link, if any."""
    url = parse_link_header(link).get("next")
    if not url:
        return None
    try:
        query = urlparse(url).query
    except ValueError:
        return None
    values = parse_qs(query).get("after")
    return values[0] if values else None


def check_rate_limit(headers: Mapping[str, str]) -> int | None:
    """Log a warning when Okta reports few remaining requests.

    Returns the remaining count when the header is present and numeric.
    """
    remaining_raw = headers.get("x-rate-limit-remaining")
    if remaining_raw is None:
        return None
    try:
        remaining = int(remaining_raw)
    except (TypeError, ValueError):
        return None
    if remaining < RATE_LIMIT_WARNING_THRESHOLD:
        logger.warning(
            "Approaching Okta rate limit: remaining=%d reset=%s",
            remaining,
            headers.get("x-rate-limit-reset"),
        )
    return remaining
