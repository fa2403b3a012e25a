from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Literal

from propgen.store.models import JobRecord

Role = Literal["user", "model"]

WELCOME_TEXT = (
    "Paste an Upwork job description below, and I'll tell you if it's a fit "
    "and draft a proposal based on your knowledge base."
)


class OrchestratorStatus(str, Enum):
    IDLE = "idle"
    CHECKING = "checking"
    DUPLICATE_FOUND = "duplicate_found"
    GENERATING = "generating"
    PARSING = "parsing"
    PERSISTING = "persisting"
    FAILED = "failed"


@dataclass(frozen=True)
class Message:
    id: str
    role: Role
    text: str
    timestamp: datetime


@dataclass(frozen=True)
class AppState:
    status: OrchestratorStatus = OrchestratorStatus.IDLE
    is_generating: bool = False
    duplicate_pending: bool = False
    error: str | None = None
    messages: tuple[Message, ...] = field(default_factory=tuple)

    def with_message(self, message: Message) -> "AppState":
        return replace(self, messages=self.messages + (message,))


def new_message(role: Role, text: str, timestamp: datetime | None = None) -> Message:
    return Message(
        id=uuid.uuid4().hex,
        role=role,
        text=text,
        timestamp=timestamp or datetime.now(timezone.utc),
    )


def initial_state(now: datetime | None = None) -> AppState:
    welcome = Message(
        id="welcome",
        role="model",
        text=WELCOME_TEXT,
        timestamp=now or datetime.now(timezone.utc),
    )
    return AppState(messages=(welcome,))


def open_record(state: AppState, record: JobRecord) -> AppState:
    """Show a saved proposal as the current conversation."""
    return replace(
        state,
        duplicate_pending=False,
        error=None,
        messages=(
            Message(
                id=f"hist-user-{record.id}",
                role="user",
                text=record.job_description,
                timestamp=record.created_at,
            ),
            Message(
                id=f"hist-model-{record.id}",
                role="model",
                text=record.proposal_text,
                timestamp=record.created_at,
            ),
        ),
    )


class StateRegistry:
    """Latest AppState per signed-in user, kept in process memory."""

    def __init__(self) -> None:
        self._states: dict[str, AppState] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> AppState:
        with self._lock:
            state = self._states.get(user_id)
            if state is None:
                state = initial_state()
                self._states[user_id] = state
            return state

    def set(self, user_id: str, state: AppState) -> None:
        with self._lock:
            self._states[user_id] = state

    def apply(self, user_id: str, state: AppState, added: tuple[Message, ...]) -> AppState:
        """Take flags from ``state`` and append ``added`` to the conversation held now."""
        with self._lock:
            current = self._states.get(user_id) or initial_state()
            merged = replace(state, messages=current.messages + added)
            self._states[user_id] = merged
            return merged

    def reset(self, user_id: str) -> AppState:
        current = self.get(user_id)
        # An in-flight request keeps its flag; only the conversation is cleared.
        state = replace(initial_state(), is_generating=current.is_generating, status=current.status)
        self.set(user_id, state)
        return state

    def clear(self) -> None:
        with self._lock:
            self._states.clear()


class ConversationPublisher:
    """Publishes one submission's states into the registry.

    Only messages added since the previous publish are appended, so a reset or
    an opened record that lands mid-generation is kept.
    """

    def __init__(self, registry: StateRegistry, user_id: str, base: AppState):
        self._registry = registry
        self._user_id = user_id
        self._seen = len(base.messages)

    def __call__(self, state: AppState) -> None:
        added = state.messages[self._seen :]
        self._seen = len(state.messages)
        self._registry.apply(self._user_id, state, added)


state_registry = StateRegistry()


def get_state_registry() -> StateRegistry:
    return state_registry
