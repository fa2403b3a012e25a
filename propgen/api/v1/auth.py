from fastapi import APIRouter, Depends, HTTPException, status

from propgen.core.config import settings
from propgen.core.security import require_session
from propgen.proposals.state import StateRegistry, get_state_registry
from propgen.schemas.auth import SessionResponse, SignInRequest
from propgen.store.db import Store, get_store
from propgen.store.identity import authenticate, create_session, delete_session, get_user
from propgen.store.models import Session

router = APIRouter()


@router.post("/auth/sign-in", response_model=SessionResponse)
def sign_in(payload: SignInRequest, store: Store = Depends(get_store)):
    user = authenticate(store, email=payload.email, password=payload.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
        )
    session = create_session(store, user.id, ttl_hours=settings.session_ttl_hours)
    return SessionResponse(
        access_token=session.token,
        user_id=user.id,
        email=user.email,
        expires_at=session.expires_at,
    )


@router.get("/auth/session", response_model=SessionResponse)
def current_session(
    session: Session = Depends(require_session),
    store: Store = Depends(get_store),
):
    user = get_user(store, session.user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Please sign in to continue.")
    return SessionResponse(
        access_token=session.token,
        user_id=user.id,
        email=user.email,
        expires_at=session.expires_at,
    )


@router.post("/auth/sign-out", status_code=status.HTTP_204_NO_CONTENT)
def sign_out(
    session: Session = Depends(require_session),
    store: Store = Depends(get_store),
    registry: StateRegistry = Depends(get_state_registry),
):
    delete_session(store, session.token)
    registry.reset(session.user_id)
