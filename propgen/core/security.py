from __future__ import annotations

from fastapi import Depends, Header, HTTPException, status

from propgen.store.db import Store, get_store
from propgen.store.identity import get_session
from propgen.store.models import Session


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def require_session(
    authorization: str | None = Header(default=None),
    store: Store = Depends(get_store),
) -> Session:
    token = _bearer_token(authorization)
    session = get_session(store, token) if token else None
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Please sign in to continue.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session


def override_credential(
    x_gemini_api_key: str | None = Header(default=None, alias="X-Gemini-Api-Key"),
) -> str | None:
    value = (x_gemini_api_key or "").strip()
    return value or None
