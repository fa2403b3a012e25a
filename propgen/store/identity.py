from __future__ import annotations

import hashlib
import hmac
import secrets
from datetime import datetime, timedelta

from propgen.store.db import Store, new_id
from propgen.store.models import Session, User

_PBKDF2_ITERATIONS = 240_000


def hash_password(password: str, *, salt: bytes | None = None) -> str:
    salt = salt or secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _PBKDF2_ITERATIONS)
    return f"pbkdf2_sha256${_PBKDF2_ITERATIONS}${salt.hex()}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        algorithm, iterations, salt_hex, digest_hex = encoded.split("$")
    except ValueError:
        return False
    if algorithm != "pbkdf2_sha256":
        return False
    digest = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        bytes.fromhex(salt_hex),
        int(iterations),
    )
    return hmac.compare_digest(digest.hex(), digest_hex)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def create_user(store: Store, *, email: str, password: str) -> User:
    user = User(
        id=new_id(),
        email=_normalize_email(email),
        password_hash=hash_password(password),
        created_at=store.now(),
    )
    store.execute(
        "INSERT INTO users (id, email, password_hash, created_at) VALUES (?, ?, ?, ?)",
        (user.id, user.email, user.password_hash, user.created_at.isoformat()),
    )
    return user


def get_user_by_email(store: Store, email: str) -> User | None:
    rows = store.fetchall(
        "SELECT id, email, password_hash, created_at FROM users WHERE email = ?",
        (_normalize_email(email),),
    )
    if not rows:
        return None
    row = rows[0]
    return User(id=row[0], email=row[1], password_hash=row[2], created_at=datetime.fromisoformat(row[3]))


def get_user(store: Store, user_id: str) -> User | None:
    rows = store.fetchall(
        "SELECT id, email, password_hash, created_at FROM users WHERE id = ?",
        (user_id,),
    )
    if not rows:
        return None
    row = rows[0]
    return User(id=row[0], email=row[1], password_hash=row[2], created_at=datetime.fromisoformat(row[3]))


def authenticate(store: Store, *, email: str, password: str) -> User | None:
    user = get_user_by_email(store, email)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user


def create_session(store: Store, user_id: str, *, ttl_hours: int) -> Session:
    created_at = store.now()
    session = Session(
        token=secrets.token_urlsafe(32),
        user_id=user_id,
        created_at=created_at,
        expires_at=created_at + timedelta(hours=max(1, ttl_hours)),
    )
    store.execute(
        "INSERT INTO sessions (token, user_id, created_at, expires_at) VALUES (?, ?, ?, ?)",
        (session.token, session.user_id, session.created_at.isoformat(), session.expires_at.isoformat()),
    )
    return session


def get_session(store: Store, token: str) -> Session | None:
    rows = store.fetchall(
        """
        SELECT token, user_id, created_at, expires_at
        FROM sessions
        WHERE token = ? AND expires_at > ?
        """,
        (token, store.now().isoformat()),
    )
    if not rows:
        return None
    row = rows[0]
    return Session(
        token=row[0],
        user_id=row[1],
        created_at=datetime.fromisoformat(row[2]),
        expires_at=datetime.fromisoformat(row[3]),
    )


def delete_session(store: Store, token: str) -> bool:
    cur = store.execute("DELETE FROM sessions WHERE token = ?", (token,))
    return bool(cur.rowcount)


def purge_expired_sessions(store: Store) -> int:
    cur = store.execute("DELETE FROM sessions WHERE expires_at <= ?", (store.now().isoformat(),))
    return int(cur.rowcount or 0)
