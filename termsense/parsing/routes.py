from __future__ import annotations

import re

MAX_ROUTES = 10

# Path tokens are restricted to ASCII word chars, slash, dash and colon
_ROUTE_PATTERNS = (
    re.compile(r"(?:GET|POST|PUT|DELETE|PATCH)\s+([/\w\-:]+)", re.IGNORECASE | re.ASCII),
    re.compile(r"Route:\s*([/\w\-:]+)", re.IGNORECASE | re.ASCII),
    re.compile(r"→\s*(/[/\w\-:]+)", re.IGNORECASE | re.ASCII),
)


def extract_routes(text: str, limit: int = MAX_ROUTES) -> list[str]:
    """Collect HTTP-route-like tokens printed by a dev server.

    Scans for ``GET /users``, ``Route: /health`` and ``→ /api`` styles.
    Patterns are applied in that order and each one left to right, so the
    result keeps first-seen order under that scan. Duplicates are dropped.

    Args:
        text: Clean (ANSI-free) output to scan.
        limit: Maximum number of routes to return.

    Returns:
        Up to ``limit`` distinct route strings.
    """
    seen: dict[str, None] = {}
    for pattern in _ROUTE_PATTERNS:
        for match in pattern.finditer(text):
            route = match.group(1)
            if route:
                seen.setdefault(route, None)
    return list(seen)[:limit]
