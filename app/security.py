"""
In-memory rate limiting and response security headers.
"""
from __future__ import annotations

import time
from typing import Dict, List, Tuple

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Content-Security-Policy": (
        "default-src 'self'; img-src 'self' data:; style-src 'self' 'unsafe-inline'; "
        "script-src 'self' 'unsafe-inline'; font-src 'self' data:; connect-src 'self';"
    ),
}

_rate_state: Dict[str, List[float]] = {}


def client_key(request, scope: str) -> str:
    host = request.client.host if request.client else "unknown"
    return f"{scope}:{host}"


def allow_request(key: str, limit: int = 5, window_seconds: int = 60) -> bool:
    """
    Sliding-window rate limit stored in memory.
    Returns True if under limit, False otherwise.
    """
    allowed, _ = allow_request_with_remaining(key, limit=limit, window_seconds=window_seconds)
    return allowed


def allow_request_with_remaining(key: str, limit: int = 5, window_seconds: int = 60) -> Tuple[bool, int]:
    """Returns (allowed, remaining_after)."""
    now = time.time()
    history = [t for t in _rate_state.get(key, []) if t > now - window_seconds]
    if len(history) >= limit:
        _rate_state[key] = history
        return False, 0
    history.append(now)
    _rate_state[key] = history
    return True, max(0, limit - len(history))


def reset_rate_limits() -> None:
    _rate_state.clear()


__all__ = [
    "SECURITY_HEADERS",
    "client_key",
    "allow_request",
    "allow_request_with_remaining",
    "reset_rate_limits",
]
