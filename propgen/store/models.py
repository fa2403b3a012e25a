from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class JobRecord:
    id: str
    user_id: str
    created_at: datetime
    job_description: str
    proposal_text: str
    match_score: str | None = None


@dataclass(frozen=True)
class KnowledgeItem:
    id: str
    user_id: str
    name: str
    content: str
    type: str = "text/plain"
    created_at: datetime | None = None


@dataclass(frozen=True)
class User:
    id: str
    email: str
    password_hash: str
    created_at: datetime


@dataclass(frozen=True)
class Session:
    token: str
    user_id: str
    created_at: datetime
    expires_at: datetime
