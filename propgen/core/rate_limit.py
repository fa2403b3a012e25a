from __future__ import annotations

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from propgen.core.config import settings
from propgen.proposals.normalizer import short_hash


def session_or_address(request: Request) -> str:
    """Signed-in callers share one bucket per session; anonymous ones are keyed by address."""
    scheme, _, token = request.headers.get("authorization", "").partition(" ")
    token = token.strip()
    if scheme.lower() == "bearer" and token:
        return f"session:{short_hash(token)}"
    return get_remote_address(request)


limiter = Limiter(key_func=session_or_address, enabled=settings.rate_limit_enabled)


def rate_limit(limit: str | None = None):
    if not settings.rate_limit_enabled:
        return lambda func: func
    return limiter.limit(limit or settings.rate_limit)
